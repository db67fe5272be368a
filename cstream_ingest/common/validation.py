"""Validation helpers shared across packages."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_RECORD_ID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_WHITESPACE_RE = re.compile(r"\s")


def require_positive(value: int, *, name: str) -> int:
    """Return *value* if it is a positive integer, otherwise raise an error."""

    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def is_valid_url(value: object) -> bool:
    """Return ``True`` when *value* is an absolute URL with a scheme and host."""

    if not isinstance(value, str) or not value:
        return False
    if _WHITESPACE_RE.search(value):
        return False
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
        # Accessing the port validates it; out-of-range ports raise here.
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme) and bool(hostname)


def is_valid_record_id(value: object) -> bool:
    """Return ``True`` when *value* matches the store's UUID identifier format."""

    return isinstance(value, str) and bool(_RECORD_ID_RE.fullmatch(value))


__all__ = ["require_positive", "is_valid_url", "is_valid_record_id"]
