"""Shared utilities for the parsing, batch and console packages."""

from __future__ import annotations

from .types import EpisodeRecord, MediaKind, ParsedArray, StoredRecord
from .validation import is_valid_record_id, is_valid_url, require_positive

__all__ = [
    "EpisodeRecord",
    "MediaKind",
    "ParsedArray",
    "StoredRecord",
    "is_valid_record_id",
    "is_valid_url",
    "require_positive",
]
