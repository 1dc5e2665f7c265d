from __future__ import annotations

import secrets
from pathlib import PurePosixPath

__all__ = [
    "FALLBACK_NAME",
    "new_identifier",
    "sanitize_name",
    "strip_ext",
]

FALLBACK_NAME = "file"

_SEPARATORS = ("\\", "/")
_RESERVED = (".", "..")


def new_identifier(length_bytes: int = 8) -> str:
    """Return a lowercase hex identifier drawn from ``length_bytes`` random bytes.

    Args:
        length_bytes: Number of random bytes; the result is twice as many characters.

    Returns:
        The hexadecimal identifier.
    """
    return secrets.token_hex(length_bytes)


def sanitize_name(name: str | None) -> str:
    """Make a client supplied filename safe to use as a single path component.

    Path separators become underscores, surrounding whitespace is trimmed and an
    empty result, or one of the directory names ``.`` and ``..``, falls
    back to ``"file"``. Applying it twice changes nothing.

    Args:
        name: The raw filename, possibly ``None``.

    Returns:
        The sanitised display name.
    """
    cleaned = name or ""
    for separator in _SEPARATORS:
        cleaned = cleaned.replace(separator, "_")
    cleaned = cleaned.strip()
    if not cleaned or cleaned in _RESERVED:
        return FALLBACK_NAME
    return cleaned


def strip_ext(name: str) -> str:
    """Return ``name`` without its final extension."""
    suffix = PurePosixPath(name).suffix
    if not suffix:
        return name
    return name[: -len(suffix)]
