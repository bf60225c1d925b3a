"""File reference service: the three-step upload relay.

1. The client asks for an upload target and gets a write-signed URL plus a
   ``file_ref`` for a freshly allocated key.
2. The client PUTs the bytes directly to storage. File bytes never pass
   through this service.
3. The client stores ``file_ref`` as a plain form field. Downloads resolve
   it back into a read-signed URL.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import List, Optional

from ibcol_api.adapters.storage import S3StorageBackend, StorageBackend
from ibcol_api.config.settings import Settings
from ibcol_api.exceptions import UploadRejected
from ibcol_api.file_refs.codec import FileReferenceCodec
from ibcol_api.file_refs.keys import generate_storage_key, is_valid_storage_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadTarget:
    upload_url: str
    file_ref: str
    storage_key: str
    expires_in: int


class FileReferenceService:
    """Mediates between clients and object storage without exposing storage keys."""

    def __init__(
        self,
        storage: StorageBackend,
        codec: FileReferenceCodec,
        upload_prefix: str = "uploads",
        expires_in: int = 900,
        max_upload_size_bytes: int = 500 * 1024 * 1024,
        allowed_content_types: Optional[List[str]] = None,
    ):
        self.storage = storage
        self.codec = codec
        self.upload_prefix = upload_prefix
        self.expires_in = expires_in
        self.max_upload_size_bytes = max_upload_size_bytes
        self.allowed_content_types = [t.lower() for t in allowed_content_types or []]

    @classmethod
    def from_settings(cls, settings: Settings, storage: Optional[StorageBackend] = None) -> "FileReferenceService":
        codec = FileReferenceCodec(
            settings.file_reference_secrets,
            key_validator=partial(is_valid_storage_key, prefix=settings.upload_prefix),
        )
        return cls(
            storage=storage or S3StorageBackend.from_settings(settings),
            codec=codec,
            upload_prefix=settings.upload_prefix,
            expires_in=settings.signed_url_expiry_seconds,
            max_upload_size_bytes=settings.max_upload_size_bytes,
            allowed_content_types=settings.allowed_content_types,
        )

    def _check_upload(self, content_type: str, size_bytes: int) -> None:
        if size_bytes <= 0:
            raise UploadRejected("File is empty", status_code=422)
        if size_bytes > self.max_upload_size_bytes:
            raise UploadRejected(
                f"File exceeds the {self.max_upload_size_bytes} byte upload limit",
                status_code=413,
            )
        if self.allowed_content_types and content_type.lower() not in self.allowed_content_types:
            raise UploadRejected(f"Content type {content_type!r} is not accepted", status_code=415)

    def issue_upload_target(self, original_name: str, content_type: str, size_bytes: int) -> UploadTarget:
        """Reserve a new storage key and mint a write-signed URL for it.

        No object is created; the client uploads directly against the URL.
        """
        self._check_upload(content_type, size_bytes)

        storage_key = generate_storage_key(original_name, content_type, self.upload_prefix)
        upload_url = self.storage.presign_upload(storage_key, content_type, self.expires_in)
        logger.info(f"Issued upload target ({content_type}, {size_bytes} bytes)")
        logger.debug(f"Allocated storage key {storage_key}")

        return UploadTarget(
            upload_url=upload_url,
            file_ref=self.codec.encode(storage_key),
            storage_key=storage_key,
            expires_in=self.expires_in,
        )

    def resolve_download_target(self, file_ref: str) -> str:
        """Return a fresh read-signed URL for the file behind ``file_ref``.

        Existence is not checked; a dangling reference 404s at fetch time.
        """
        storage_key = self.codec.decode(file_ref)
        return self.storage.presign_download(storage_key, self.expires_in)

    def delete_reference(self, file_ref: str) -> None:
        """Delete the object behind ``file_ref``. Raises ``NotFound`` if already gone."""
        storage_key = self.codec.decode(file_ref)
        self.storage.delete(storage_key)
        logger.info("Deleted referenced file")
