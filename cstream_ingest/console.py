"""Admin console operations built on the parser, builder and executor.

Every operation validates operator input first and raises
:class:`~cstream_ingest.errors.ImportValidationError` before any store call
is made.  Once validation passes a single :class:`BatchJob` is created, run to
a terminal status and handed to ``on_complete`` (typically
:meth:`RecordCollection.apply`).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence, TypeVar

from .batch import (
    BatchJob,
    BatchMutationExecutor,
    BatchSummary,
    delete_operation,
    insert_operation,
    summarize_job,
)
from .batch.executor import BatchOperation, ProgressCallback
from .common.text import base_source_name, format_episode_range
from .common.types import (
    EpisodeRecord,
    MediaKind,
    ParsedArray,
    RecordDraft,
    SkippedUrl,
    StoredRecord,
)
from .common.validation import is_valid_record_id, is_valid_url
from .config import Settings
from .errors import BatchAbortedError, ImportValidationError, InvalidRecordIdError
from .parsing import parse_source_text
from .payloads import build_episode_payloads, build_final_url, strip_episode_segments
from .store.base import RecordStore

LOGGER = logging.getLogger("cstream_ingest.console")

T = TypeVar("T")

CompletionCallback = Callable[[BatchJob[Any]], None]


@dataclass(slots=True)
class BulkImportRequest:
    """Operator input of the bulk import dialog."""

    text: str
    title: str
    linked_catalog_id: int | None
    language: str = "VOSTFR"
    season_number: int | None = 1
    media_kind: MediaKind | str = MediaKind.TV_SERIES


@dataclass(slots=True)
class LanguageInput:
    language: str
    text: str


@dataclass(slots=True)
class MultiLanguageImportRequest:
    """Several pastes, one per language, imported for the same season."""

    inputs: list[LanguageInput]
    title: str
    linked_catalog_id: int | None
    season_number: int | None = 1
    media_kind: MediaKind | str = MediaKind.TV_SERIES


@dataclass(slots=True)
class ImportResult:
    job: BatchJob[EpisodeRecord]
    arrays: list[ParsedArray] = field(default_factory=list)
    skipped: list[SkippedUrl] = field(default_factory=list)

    @property
    def summary(self) -> BatchSummary:
        return summarize_job(self.job)

    @property
    def inserted(self) -> list[StoredRecord]:
        return [record for record in self.job.committed if isinstance(record, StoredRecord)]


def _require_catalog_id(value: int | None) -> int:
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ImportValidationError("A linked catalog id is required")
    return value


def _require_title(value: str | None) -> str:
    title = (value or "").strip()
    if not title:
        raise ImportValidationError("A title is required")
    return title


def _require_season(value: int | None) -> int | None:
    if value is not None and (not isinstance(value, int) or value < 0):
        raise ImportValidationError(f"Invalid season number: {value!r}")
    return value


def _require_language(value: str, settings: Settings) -> str:
    language = (value or "").strip()
    if not language:
        raise ImportValidationError("A language is required")
    if not settings.accepts_language(language):
        raise ImportValidationError(f"Unsupported language: {language}")
    return language


async def _execute(
    operation: BatchOperation[T],
    items: Sequence[T],
    *,
    chunk_size: int,
    max_concurrent_chunks: int,
    settings: Settings,
    on_progress: ProgressCallback | None,
    on_complete: CompletionCallback | None,
) -> BatchJob[T]:
    executor = BatchMutationExecutor(
        operation,
        chunk_size=chunk_size,
        max_concurrent_chunks=max_concurrent_chunks,
        failure_sample_limit=settings.failure_sample_limit,
        on_progress=on_progress,
    )
    try:
        job = await executor.run(items)
    except BatchAbortedError as exc:
        # Work committed before the abort stays in the store; mirror it.
        if on_complete is not None:
            on_complete(exc.job)
        raise
    if on_complete is not None:
        on_complete(job)
    return job


async def _insert(
    store: RecordStore,
    records: Sequence[EpisodeRecord],
    *,
    settings: Settings,
    on_progress: ProgressCallback | None,
    on_complete: CompletionCallback | None,
) -> BatchJob[EpisodeRecord]:
    return await _execute(
        insert_operation(store),
        records,
        chunk_size=settings.insert_chunk_size,
        max_concurrent_chunks=settings.insert_max_concurrent_chunks,
        settings=settings,
        on_progress=on_progress,
        on_complete=on_complete,
    )


async def bulk_import(
    store: RecordStore,
    request: BulkImportRequest,
    *,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
    on_complete: CompletionCallback | None = None,
) -> ImportResult:
    """Parse pasted episode arrays and insert one record per URL."""

    settings = settings or Settings()
    catalog_id = _require_catalog_id(request.linked_catalog_id)
    title = _require_title(request.title)
    season = _require_season(request.season_number)
    language = _require_language(request.language, settings)

    outcome = parse_source_text(request.text)
    if not outcome.arrays:
        raise ImportValidationError("No valid URL found in the pasted text")

    batch = build_episode_payloads(
        outcome.arrays,
        title=title,
        language=language,
        season_number=season,
        media_kind=request.media_kind,
        linked_catalog_id=catalog_id,
    )
    if not batch.records:
        raise ImportValidationError("No valid URL found in the pasted text")

    LOGGER.info(
        "Importing %d record(s) from %d array(s) for catalog id %d.",
        len(batch.records),
        len(outcome.arrays),
        catalog_id,
    )
    job = await _insert(
        store,
        batch.records,
        settings=settings,
        on_progress=on_progress,
        on_complete=on_complete,
    )
    return ImportResult(
        job=job,
        arrays=outcome.arrays,
        skipped=[*outcome.skipped, *batch.skipped],
    )


async def import_languages(
    store: RecordStore,
    request: MultiLanguageImportRequest,
    *,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
    on_complete: CompletionCallback | None = None,
) -> ImportResult:
    """Import one paste per language for the same title and season.

    Inputs without any URL are ignored; records keep input order and each
    array is still numbered from episode 1.
    """

    settings = settings or Settings()
    catalog_id = _require_catalog_id(request.linked_catalog_id)
    title = _require_title(request.title)
    season = _require_season(request.season_number)

    arrays: list[ParsedArray] = []
    skipped: list[SkippedUrl] = []
    records: list[EpisodeRecord] = []
    for entry in request.inputs:
        outcome = parse_source_text(entry.text)
        if not outcome.arrays:
            continue
        language = _require_language(entry.language, settings)
        batch = build_episode_payloads(
            outcome.arrays,
            title=title,
            language=language,
            season_number=season,
            media_kind=request.media_kind,
            linked_catalog_id=catalog_id,
        )
        arrays.extend(outcome.arrays)
        skipped.extend(outcome.skipped)
        skipped.extend(batch.skipped)
        records.extend(batch.records)

    if not records:
        raise ImportValidationError("Provide at least one list of URLs")

    LOGGER.info(
        "Importing %d record(s) in %d language(s) for catalog id %d.",
        len(records),
        len({record.language for record in records}),
        catalog_id,
    )
    job = await _insert(
        store,
        records,
        settings=settings,
        on_progress=on_progress,
        on_complete=on_complete,
    )
    return ImportResult(job=job, arrays=arrays, skipped=skipped)


def record_from_draft(draft: RecordDraft, settings: Settings) -> EpisodeRecord:
    """Validate a single-source form and build its record."""

    label = (draft.label or "").strip()
    if not label:
        raise ImportValidationError("A label is required")
    base_url = (draft.base_url or "").strip()
    if not is_valid_url(base_url):
        raise ImportValidationError(f"Invalid base URL: {draft.base_url!r}")
    catalog_id = _require_catalog_id(draft.linked_catalog_id)
    season = _require_season(draft.season_number)
    if draft.episode_number is not None and (
        not isinstance(draft.episode_number, int) or draft.episode_number < 0
    ):
        raise ImportValidationError(f"Invalid episode number: {draft.episode_number!r}")
    language = _require_language(draft.language, settings)
    kind = MediaKind.normalize(draft.media_kind)
    return EpisodeRecord(
        label=label,
        url=build_final_url(base_url, kind, season, draft.episode_number),
        media_kind=kind,
        language=language,
        enabled=True,
        linked_catalog_id=catalog_id,
        season_number=season,
        episode_number=draft.episode_number,
    )


async def create_record(
    store: RecordStore,
    draft: RecordDraft,
    *,
    settings: Settings | None = None,
    on_complete: CompletionCallback | None = None,
) -> BatchJob[EpisodeRecord]:
    """Create one ad-hoc source as a batch of size one."""

    settings = settings or Settings()
    record = record_from_draft(draft, settings)
    return await _execute(
        insert_operation(store),
        [record],
        chunk_size=1,
        max_concurrent_chunks=1,
        settings=settings,
        on_progress=None,
        on_complete=on_complete,
    )


def duplicate_draft(record: StoredRecord) -> RecordDraft:
    """Prefill a form from *record* so it can be re-linked to another entry."""

    return RecordDraft(
        label=f"{record.label} (copy)",
        base_url=strip_episode_segments(record.url),
        linked_catalog_id=None,
        media_kind=record.media_kind,
        language=record.language,
        season_number=record.season_number,
        episode_number=record.episode_number,
        enabled=record.enabled,
    )


async def bulk_delete(
    store: RecordStore,
    ids: Iterable[str],
    *,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
    on_complete: CompletionCallback | None = None,
) -> BatchJob[str]:
    """Delete the selected records; malformed ids abort before any call."""

    settings = settings or Settings()
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        raise ImportValidationError("No record selected")
    invalid = [record_id for record_id in unique_ids if not is_valid_record_id(record_id)]
    if invalid:
        raise InvalidRecordIdError(invalid)

    LOGGER.info("Deleting %d record(s).", len(unique_ids))
    return await _execute(
        delete_operation(store),
        unique_ids,
        chunk_size=settings.delete_chunk_size,
        max_concurrent_chunks=settings.delete_max_concurrent_chunks,
        settings=settings,
        on_progress=on_progress,
        on_complete=on_complete,
    )


def summarize_sources(records: Iterable[StoredRecord]) -> dict[str, str]:
    """Group records by source label and render their episode coverage."""

    groups: dict[str, list[tuple[int | None, int | None]]] = defaultdict(list)
    for record in records:
        groups[base_source_name(record.label)].append(
            (record.season_number, record.episode_number)
        )
    return {name: format_episode_range(numbers) for name, numbers in groups.items()}


class RecordCollection:
    """The console's in-memory list of records and the operator's selection.

    Only :meth:`apply` changes the list after a batch run, and only with the
    items the run committed.
    """

    def __init__(self, records: Iterable[StoredRecord] = ()) -> None:
        self._records: list[StoredRecord] = list(records)
        self._selected: dict[str, None] = {}

    @property
    def records(self) -> list[StoredRecord]:
        return list(self._records)

    @property
    def ids(self) -> list[str]:
        return [record.id for record in self._records]

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    def __len__(self) -> int:
        return len(self._records)

    def select(self, *ids: str) -> None:
        known = set(self.ids)
        for record_id in ids:
            if record_id in known:
                self._selected[record_id] = None

    def toggle(self, record_id: str) -> None:
        if record_id in self._selected:
            del self._selected[record_id]
        else:
            self.select(record_id)

    def select_all(self) -> None:
        """Select every record, or clear the selection when all are selected."""

        if len(self._selected) == len(self._records):
            self._selected.clear()
        else:
            self._selected = dict.fromkeys(self.ids)

    def clear_selection(self) -> None:
        self._selected.clear()

    def apply(self, job: BatchJob[Any]) -> None:
        """Mirror the committed outcome of *job* into the collection."""

        if job.operation == "insert":
            inserted = [item for item in job.committed if isinstance(item, StoredRecord)]
            self._records = [*inserted, *self._records]
        elif job.operation == "delete":
            removed = {str(item) for item in job.committed}
            self._records = [r for r in self._records if r.id not in removed]
            for record_id in removed:
                self._selected.pop(record_id, None)
        else:
            raise ValueError(f"Unsupported batch operation: {job.operation}")

    def summarize_sources(self) -> dict[str, str]:
        return summarize_sources(self._records)


__all__ = [
    "BulkImportRequest",
    "LanguageInput",
    "MultiLanguageImportRequest",
    "ImportResult",
    "RecordCollection",
    "bulk_import",
    "import_languages",
    "create_record",
    "record_from_draft",
    "duplicate_draft",
    "bulk_delete",
    "summarize_sources",
]
