"""Record store backed by a PostgREST endpoint (``/rest/v1/<table>``)."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from ..common.types import EpisodeRecord, StoredRecord
from ..errors import RecordStoreError, store_error_from_payload

DEFAULT_TABLE = "readers"
DEFAULT_TIMEOUT = 30.0


class RestRecordStore:
    """Insert and delete episode records through PostgREST."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        table: str = DEFAULT_TABLE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._table = table
        self._logger = logger or logging.getLogger("cstream_ingest.store.rest")

    @classmethod
    def create_client(
        cls,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> httpx.AsyncClient:
        """Build an ``httpx.AsyncClient`` carrying the store's auth headers."""

        return httpx.AsyncClient(
            base_url=str(base_url).rstrip("/"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def table(self) -> str:
        return self._table

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.table}"

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if not response.is_error:
            return
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text or response.reason_phrase}
        if not isinstance(payload, dict):
            payload = {"message": str(payload)}
        raise store_error_from_payload(payload, status_code=response.status_code)

    def _parse_rows(self, response: httpx.Response) -> list[StoredRecord]:
        try:
            rows = response.json()
        except ValueError as exc:
            raise RecordStoreError(
                "Store returned a non-JSON insert response",
                status_code=response.status_code,
            ) from exc
        if isinstance(rows, dict):
            rows = [rows]
        try:
            return [StoredRecord.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise RecordStoreError(
                f"Store returned malformed rows: {exc.error_count()} validation error(s)",
                status_code=response.status_code,
            ) from exc

    async def insert_many(self, records: Sequence[EpisodeRecord]) -> list[StoredRecord]:
        if not records:
            return []
        response = await self._client.post(
            self.path,
            json=[record.to_row() for record in records],
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_error(response)
        stored = self._parse_rows(response)
        self._logger.debug("Inserted %d row(s) into %s.", len(stored), self._table)
        return stored

    async def insert_one(self, record: EpisodeRecord) -> StoredRecord:
        stored = await self.insert_many([record])
        if not stored:
            raise RecordStoreError("Store returned no row for the inserted record")
        return stored[0]

    async def _delete(self, params: dict[str, Any]) -> None:
        response = await self._client.delete(self.path, params=params)
        self._raise_for_error(response)

    async def delete_many_by_ids(self, ids: Sequence[str]) -> None:
        if not ids:
            return
        await self._delete({"id": f"in.({','.join(ids)})"})
        self._logger.debug("Deleted %d row(s) from %s.", len(ids), self._table)

    async def delete_one_by_id(self, record_id: str) -> None:
        await self._delete({"id": f"eq.{record_id}"})


__all__ = ["RestRecordStore", "DEFAULT_TABLE"]
