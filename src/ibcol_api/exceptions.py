"""Exception taxonomy shared by the file reference and translation components."""


class PortalError(Exception):
    """Base class for all errors raised by the portal backend."""


class ConfigurationError(PortalError):
    """Raised at startup when required configuration or default-locale data is missing."""


class InvalidReference(PortalError):
    """A file reference token failed to decrypt or decoded to a malformed storage key."""

    def __init__(self, message: str = "Invalid file reference"):
        super().__init__(message)


class NotFound(PortalError):
    """The object behind a storage key does not exist."""

    def __init__(self, storage_key: str):
        self.storage_key = storage_key
        super().__init__("Referenced file not found")


class UploadRejected(PortalError):
    """An upload request was refused before a signed URL was minted."""

    def __init__(self, message: str, status_code: int = 422):
        self.status_code = status_code
        super().__init__(message)


class StorageError(PortalError):
    """The storage backend refused a request. Not retried."""


class StorageUnavailable(StorageError):
    """Transient storage backend failure. Safe to retry with backoff."""

    def __init__(self, message: str, retry_after: int = 5):
        self.retry_after = retry_after
        super().__init__(message)
