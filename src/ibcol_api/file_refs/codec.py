"""Encrypted file reference tokens.

A token is a Fernet token whose plaintext is a storage key. Fernet gives
authenticated encryption with a random IV, so tokens are URL-safe, reveal
nothing about the key, differ on every call, and fail loudly when tampered
with. Tokens are decoded without a TTL: they are permanent references.
"""

import base64
import hashlib
import logging
from typing import Callable, Optional, Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

from ibcol_api.exceptions import ConfigurationError, InvalidReference

logger = logging.getLogger(__name__)

MAX_TOKEN_LENGTH = 1024


def derive_fernet_key(secret: str) -> bytes:
    """Stretch an arbitrary secret string into a Fernet key."""
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class FileReferenceCodec:
    """Encode storage keys into opaque tokens and back.

    Args:
        secrets: Current secret first, followed by retired secrets that are
            still accepted when decoding.
        key_validator: Optional predicate a decoded key must satisfy.
    """

    def __init__(self, secrets: Sequence[str], key_validator: Optional[Callable[[str], bool]] = None):
        if not secrets or any(not secret for secret in secrets):
            raise ConfigurationError("A non-empty file reference secret is required")
        self._fernet = MultiFernet([Fernet(derive_fernet_key(secret)) for secret in secrets])
        self._key_validator = key_validator

    def encode(self, storage_key: str) -> str:
        if not storage_key:
            raise ValueError("storage_key must not be empty")
        return self._fernet.encrypt(storage_key.encode("utf-8")).decode("ascii")

    def decode(self, file_ref: str) -> str:
        """Recover the storage key behind ``file_ref``.

        Raises:
            InvalidReference: the token is malformed, was tampered with, was
                issued under an unknown secret, or holds a malformed key.
        """
        if not file_ref or len(file_ref) > MAX_TOKEN_LENGTH:
            raise InvalidReference()
        try:
            plaintext = self._fernet.decrypt(file_ref.encode("ascii"))
            storage_key = plaintext.decode("utf-8")
        except (InvalidToken, UnicodeError, ValueError, TypeError) as err:
            logger.info("Rejected file reference that failed to decrypt")
            raise InvalidReference() from err

        if self._key_validator is not None and not self._key_validator(storage_key):
            logger.warning("Rejected file reference holding a malformed storage key")
            raise InvalidReference()
        return storage_key

