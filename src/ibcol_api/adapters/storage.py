"""
Storage backend boundary for the file reference service.

The service only needs three primitives from an object store: mint a
write-signed URL, mint a read-signed URL, and delete an object. Anything
offering those can stand in for S3 by satisfying ``StorageBackend``.
"""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from ibcol_api.config.settings import Settings
from ibcol_api.exceptions import NotFound, StorageError, StorageUnavailable
from ibcol_api.s3.delete_objects import delete_s3_object
from ibcol_api.s3.read_objects import generate_download_url, object_exists_in_s3
from ibcol_api.s3.write_objects import generate_upload_url
from ibcol_api.utils.decorators import retry

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

TRANSIENT_ERROR_CODES = {
    "InternalError",
    "RequestTimeout",
    "ServiceUnavailable",
    "SlowDown",
    "Throttling",
    "ThrottlingException",
}
TRANSIENT_NETWORK_ERRORS = (
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
RETRY_DELAY_SECONDS = 0.2


class StorageBackend(Protocol):
    """Object storage primitives consumed by ``FileReferenceService``."""

    def presign_upload(self, key: str, content_type: str, expires_in: int) -> str:
        """Return a URL allowing one PUT of ``key`` for ``expires_in`` seconds."""
        ...

    def presign_download(self, key: str, expires_in: int) -> str:
        """Return a URL allowing GET of ``key`` for ``expires_in`` seconds."""
        ...

    def exists(self, key: str) -> bool:
        ...

    def delete(self, key: str) -> None:
        """Delete ``key``. Raises ``NotFound`` if it is already gone."""
        ...


def create_s3_client(settings: Settings) -> "S3Client":
    """Create an S3 client with bounded timeouts and SigV4 presigning.

    botocore's own retries are switched off; transient failures are retried
    by ``S3StorageBackend`` so that auth and validation errors are not.
    """
    client_kwargs = {
        "region_name": settings.aws_region,
        "config": Config(
            signature_version="s3v4",
            connect_timeout=settings.storage_timeout_seconds,
            read_timeout=settings.storage_timeout_seconds,
            retries={"max_attempts": 1, "mode": "standard"},
        ),
    }

    if settings.aws_access_key_id:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    # Endpoint override only applies to local/mock modes
    if settings.aws_endpoint_url and settings.deployment_mode in ["local-dev", "aws-mock"]:
        client_kwargs["endpoint_url"] = settings.aws_endpoint_url

    logger.debug(f"Creating S3 client for mode {settings.deployment_mode} in {settings.aws_region}")
    return boto3.client("s3", **client_kwargs)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate botocore failures into the portal's storage error taxonomy."""
    try:
        yield
    except TRANSIENT_NETWORK_ERRORS as err:
        raise StorageUnavailable(f"Storage backend unreachable during {action}: {err}") from err
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code", "")
        http_status = err.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
        if error_code in TRANSIENT_ERROR_CODES or http_status >= 500:
            raise StorageUnavailable(f"Storage backend failed during {action}: {error_code}") from err
        raise StorageError(f"Storage backend rejected {action}: {error_code or http_status}") from err
    except BotoCoreError as err:
        raise StorageError(f"Storage backend error during {action}: {err}") from err


class S3StorageBackend:
    """``StorageBackend`` over a single S3 bucket."""

    def __init__(self, bucket_name: str, s3_client: "S3Client", max_attempts: int = 3):
        self.bucket_name = bucket_name
        self.s3_client = s3_client
        self.max_attempts = max_attempts

    @classmethod
    def from_settings(cls, settings: Settings, s3_client: Optional["S3Client"] = None) -> "S3StorageBackend":
        return cls(
            bucket_name=settings.s3_bucket_name,
            s3_client=s3_client or create_s3_client(settings),
            max_attempts=settings.storage_max_attempts,
        )

    @retry(max_attempts=None, delay=RETRY_DELAY_SECONDS, exceptions=(StorageUnavailable,))
    def presign_upload(self, key: str, content_type: str, expires_in: int) -> str:
        with storage_errors("upload signing"):
            return generate_upload_url(
                bucket_name=self.bucket_name,
                object_key=key,
                expires_in=expires_in,
                content_type=content_type,
                s3_client=self.s3_client,
            )

    @retry(max_attempts=None, delay=RETRY_DELAY_SECONDS, exceptions=(StorageUnavailable,))
    def presign_download(self, key: str, expires_in: int) -> str:
        with storage_errors("download signing"):
            return generate_download_url(
                bucket_name=self.bucket_name,
                object_key=key,
                expires_in=expires_in,
                s3_client=self.s3_client,
            )

    @retry(max_attempts=None, delay=RETRY_DELAY_SECONDS, exceptions=(StorageUnavailable,))
    def exists(self, key: str) -> bool:
        with storage_errors("existence check"):
            return object_exists_in_s3(self.bucket_name, key, s3_client=self.s3_client)

    def delete(self, key: str) -> None:
        # S3 deletes are idempotent, so absence has to be detected up front
        if not self.exists(key):
            raise NotFound(key)
        self._delete_object(key)
        logger.debug(f"Deleted {key} from bucket {self.bucket_name}")

    @retry(max_attempts=None, delay=RETRY_DELAY_SECONDS, exceptions=(StorageUnavailable,))
    def _delete_object(self, key: str) -> None:
        with storage_errors("delete"):
            delete_s3_object(self.bucket_name, key, s3_client=self.s3_client)
