"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD.

Uploads never pass through the API: the client PUTs the bytes straight to a
presigned URL minted here.
"""

from typing import TYPE_CHECKING, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def generate_upload_url(
    bucket_name: str,
    object_key: str,
    expires_in: int,
    content_type: Optional[str] = None,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Generate a presigned URL that lets the bearer PUT one object.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param expires_in: Number of seconds the URL stays valid.
    :param content_type: The MIME type the client must send with the upload.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :return: The presigned PUT URL.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.generate_presigned_url(
        ClientMethod="put_object",
        Params={
            "Bucket": bucket_name,
            "Key": object_key,
            "ContentType": content_type or DEFAULT_CONTENT_TYPE,
        },
        ExpiresIn=expires_in,
        HttpMethod="PUT",
    )
