"""Locale resolution.

An explicit locale in the request path always wins when it is supported.
``Accept-Language`` is only consulted when the path carries no locale.
"""

import math
from typing import List, Optional, Sequence, Tuple


def normalise_locale(value: Optional[str]) -> str:
    """``"zh_HK"`` -> ``"zh-hk"``."""
    return (value or "").strip().lower().replace("_", "-")


def resolve_locale(requested: Optional[str], supported: Sequence[str], default: str) -> str:
    """Return ``requested`` if it is supported, otherwise ``default``."""
    locale = normalise_locale(requested)
    return locale if locale in supported else default


def parse_accept_language(header: Optional[str]) -> List[Tuple[str, float]]:
    """Parse an Accept-Language header into ``(locale, quality)`` pairs, best first.

    Qualities are clamped to ``[0, 1]``. Entries with a malformed or
    non-finite quality are ranked as ``q=0`` and dropped.
    """
    entries = []
    for position, part in enumerate((header or "").split(",")):
        tag, _, params = part.strip().partition(";")
        tag = normalise_locale(tag)
        if not tag:
            continue

        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
            if not math.isfinite(quality):
                quality = 0.0
            quality = min(quality, 1.0)
        if quality <= 0:
            continue
        entries.append((position, tag, quality))

    # stable on header order for equal quality
    entries.sort(key=lambda entry: (-entry[2], entry[0]))
    return [(tag, quality) for _, tag, quality in entries]


def negotiate_locale(accept_language: Optional[str], supported: Sequence[str], default: str) -> str:
    """Pick the best supported locale for an Accept-Language header.

    Exact tags match first; otherwise a bare or regional language tag
    (``zh``, ``zh-tw``) matches the first supported locale sharing its
    primary subtag.
    """
    for tag, _ in parse_accept_language(accept_language):
        if tag == "*":
            return default
        if tag in supported:
            return tag

        language = tag.split("-", 1)[0]
        for locale in supported:
            if locale.split("-", 1)[0] == language:
                return locale
    return default
