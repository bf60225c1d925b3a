"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING, Optional

import boto3
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: Optional["S3Client"] = None) -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: Optional S3 client to use. If not provided, a new client will be created.

    :return: True if the object exists, False otherwise.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in NOT_FOUND_ERROR_CODES:
            return False
        raise


def generate_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Generate a presigned URL that lets the bearer GET one object.

    The object is not looked up; a dangling key only fails when the URL is fetched.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param expires_in: Number of seconds the URL stays valid.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :return: The presigned GET URL.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
        HttpMethod="GET",
    )
