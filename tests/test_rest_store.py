import asyncio
import json

import httpx
import pytest

from cstream_ingest.common.types import EpisodeRecord
from cstream_ingest.errors import (
    AuthorizationError,
    ConflictError,
    RecordStoreError,
    store_error_from_payload,
)
from cstream_ingest.store import RestRecordStore

BASE_URL = "https://project.example.co"


def _record(number: int) -> EpisodeRecord:
    return EpisodeRecord(
        label=f"Show - Sibnet S01E{number:02d}",
        url=f"https://sibnet.ru/{number}",
        media_kind="tv",
        language="VOSTFR",
        linked_catalog_id=1399,
        season_number=1,
        episode_number=number,
    )


def _row(payload: dict, number: int) -> dict:
    return {
        **payload,
        "id": f"00000000-0000-4000-8000-00000000000{number}",
        "created_at": "2024-05-01T10:00:00+00:00",
    }


def _run(handler, action):
    async def main():
        client = RestRecordStore.create_client(
            BASE_URL, "secret", transport=httpx.MockTransport(handler)
        )
        async with client:
            return await action(RestRecordStore(client))

    return asyncio.run(main())


def test_insert_many_posts_rows_and_parses_representation():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["prefer"] = request.headers.get("Prefer")
        seen["auth"] = request.headers.get("Authorization")
        seen["apikey"] = request.headers.get("apikey")
        rows = json.loads(request.content)
        seen["rows"] = rows
        return httpx.Response(201, json=[_row(row, i) for i, row in enumerate(rows, 1)])

    stored = _run(handler, lambda store: store.insert_many([_record(1), _record(2)]))

    assert seen["method"] == "POST"
    assert seen["path"] == "/rest/v1/readers"
    assert seen["prefer"] == "return=representation"
    assert seen["auth"] == "Bearer secret"
    assert seen["apikey"] == "secret"
    assert seen["rows"][0]["tmdb_id"] == 1399
    assert seen["rows"][0]["media_type"] == "tv"
    assert [record.episode_number for record in stored] == [1, 2]
    assert stored[0].id.endswith("1")
    assert stored[0].created_at is not None


def test_insert_one_returns_single_record():
    def handler(request: httpx.Request) -> httpx.Response:
        (row,) = json.loads(request.content)
        return httpx.Response(201, json=[_row(row, 7)])

    stored = _run(handler, lambda store: store.insert_one(_record(3)))

    assert stored.episode_number == 3
    assert stored.id.endswith("7")


def test_delete_many_uses_in_filter():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["id"] = request.url.params["id"]
        return httpx.Response(204)

    _run(handler, lambda store: store.delete_many_by_ids(["a", "b"]))

    assert seen == {"method": "DELETE", "id": "in.(a,b)"}


def test_delete_one_uses_eq_filter():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["id"] = request.url.params["id"]
        return httpx.Response(204)

    _run(handler, lambda store: store.delete_one_by_id("abc"))

    assert seen["id"] == "eq.abc"


@pytest.mark.parametrize(
    "status,body,expected",
    [
        (409, {"code": "23505", "message": "duplicate key value"}, ConflictError),
        (403, {"code": "42501", "message": "permission denied for table readers"}, AuthorizationError),
        (401, {"code": "PGRST301", "message": "JWT expired"}, AuthorizationError),
        (500, {"message": "statement timeout"}, RecordStoreError),
    ],
)
def test_error_responses_are_translated(status, body, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body)

    with pytest.raises(expected) as excinfo:
        _run(handler, lambda store: store.insert_many([_record(1)]))

    assert type(excinfo.value) is expected
    assert excinfo.value.status_code == status
    assert excinfo.value.message == body["message"]


def test_non_json_error_uses_body_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    with pytest.raises(RecordStoreError, match="Bad gateway"):
        _run(handler, lambda store: store.delete_many_by_ids(["a"]))


def test_malformed_rows_are_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json=[{"label": "missing fields"}])

    with pytest.raises(RecordStoreError, match="malformed rows"):
        _run(handler, lambda store: store.insert_many([_record(1)]))


def test_store_error_from_payload_detects_row_level_security():
    error = store_error_from_payload(
        {"code": "XX000", "message": "new row violates row-level security policy"},
        status_code=400,
    )

    assert isinstance(error, AuthorizationError)
    assert error.code == "XX000"


def test_store_error_from_empty_payload():
    error = store_error_from_payload(None, status_code=500)

    assert type(error) is RecordStoreError
    assert str(error) == "HTTP 500"


def test_custom_table_changes_request_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(204)

    async def main():
        client = RestRecordStore.create_client(
            BASE_URL, "secret", transport=httpx.MockTransport(handler)
        )
        async with client:
            store = RestRecordStore(client, table="sources")
            await store.delete_one_by_id("abc")
            return store

    store = asyncio.run(main())

    assert store.table == "sources"
    assert store.path == "/rest/v1/sources"
    assert seen["path"] == "/rest/v1/sources"
