"""Storage key allocation.

Keys look like ``<prefix>/<32 hex chars><.ext>``. The client-supplied name
only ever contributes its extension, and only when the extension is short
and alphanumeric.
"""

import mimetypes
import re
import uuid
from pathlib import PurePosixPath
from typing import Optional

_EXTENSION_PATTERN = re.compile(r"^\.[a-z0-9]{1,10}$")


def _extension_for(original_name: str, content_type: Optional[str]) -> str:
    # Browsers on Windows send backslash paths
    basename = PurePosixPath(original_name.replace("\\", "/")).name
    extension = PurePosixPath(basename).suffix.lower()
    if _EXTENSION_PATTERN.match(extension):
        return extension

    guessed = mimetypes.guess_extension(content_type or "") or ""
    return guessed if _EXTENSION_PATTERN.match(guessed) else ""


def generate_storage_key(original_name: str, content_type: Optional[str], prefix: str) -> str:
    """Allocate a fresh, unique storage key for an upload."""
    return f"{prefix}/{uuid.uuid4().hex}{_extension_for(original_name, content_type)}"


def is_valid_storage_key(key: str, prefix: str) -> bool:
    """True if ``key`` has the exact shape produced by ``generate_storage_key``."""
    pattern = rf"{re.escape(prefix)}/[0-9a-f]{{32}}(\.[a-z0-9]{{1,10}})?"
    return re.fullmatch(pattern, key) is not None
