"""Contract shared by record store implementations."""

from __future__ import annotations

from typing import Protocol, Sequence

from ..common.types import EpisodeRecord, StoredRecord


class RecordStore(Protocol):
    """Minimal batch insert/delete surface used by the executor.

    Batch calls are all-or-nothing.  Failures raise
    :class:`~cstream_ingest.errors.RecordStoreError` subclasses.
    """

    async def insert_many(self, records: Sequence[EpisodeRecord]) -> list[StoredRecord]:
        ...

    async def insert_one(self, record: EpisodeRecord) -> StoredRecord:
        ...

    async def delete_many_by_ids(self, ids: Sequence[str]) -> None:
        ...

    async def delete_one_by_id(self, record_id: str) -> None:
        ...


__all__ = ["RecordStore"]
