"""In-process record store used for dry runs and tests."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Sequence

from ..common.types import EpisodeRecord, StoredRecord
from ..errors import UNIQUE_VIOLATION, ConflictError


class MemoryRecordStore:
    """Dictionary-backed store enforcing one URL per catalog entry."""

    _logger = logging.getLogger("cstream_ingest.store.memory")

    def __init__(self, records: Sequence[StoredRecord] | None = None) -> None:
        self._records: OrderedDict[str, StoredRecord] = OrderedDict()
        for record in records or ():
            self._records[record.id] = record

    @property
    def records(self) -> list[StoredRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def _conflicts(self, records: Sequence[EpisodeRecord]) -> str | None:
        taken = {(r.url, r.linked_catalog_id) for r in self._records.values()}
        for record in records:
            key = (record.url, record.linked_catalog_id)
            if key in taken:
                return record.url
            taken.add(key)
        return None

    def _store(self, record: EpisodeRecord) -> StoredRecord:
        stored = StoredRecord(
            **record.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
        )
        self._records[stored.id] = stored
        return stored

    async def insert_many(self, records: Sequence[EpisodeRecord]) -> list[StoredRecord]:
        await asyncio.sleep(0)
        conflict = self._conflicts(records)
        if conflict is not None:
            raise ConflictError(
                f"duplicate key value violates unique constraint for {conflict}",
                code=UNIQUE_VIOLATION,
            )
        return [self._store(record) for record in records]

    async def insert_one(self, record: EpisodeRecord) -> StoredRecord:
        (stored,) = await self.insert_many([record])
        return stored

    async def delete_many_by_ids(self, ids: Sequence[str]) -> None:
        await asyncio.sleep(0)
        removed = 0
        for record_id in ids:
            if self._records.pop(record_id, None) is not None:
                removed += 1
        self._logger.debug("Deleted %d of %d requested record(s).", removed, len(ids))

    async def delete_one_by_id(self, record_id: str) -> None:
        await self.delete_many_by_ids([record_id])


__all__ = ["MemoryRecordStore"]
