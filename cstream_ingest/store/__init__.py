"""Record store contract and implementations."""

from __future__ import annotations

from .base import RecordStore
from .memory import MemoryRecordStore
from .rest import DEFAULT_TABLE, RestRecordStore

__all__ = ["RecordStore", "MemoryRecordStore", "RestRecordStore", "DEFAULT_TABLE"]
