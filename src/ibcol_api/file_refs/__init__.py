"""Signed-URL upload relay and encrypted file reference tokens."""

from ibcol_api.file_refs.codec import FileReferenceCodec
from ibcol_api.file_refs.service import FileReferenceService, UploadTarget

__all__ = ["FileReferenceCodec", "FileReferenceService", "UploadTarget"]
