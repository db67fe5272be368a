"""Chunked, concurrency-bounded batch mutations with per-item fallback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from ..common.types import EpisodeRecord
from ..common.validation import require_positive
from ..errors import BatchAbortedError, classify_failure, failure_reason
from ..store.base import RecordStore
from .channels import plan_waves
from .job import (
    DEFAULT_FAILURE_SAMPLE_LIMIT,
    BatchJob,
    BatchProgress,
    BatchStatus,
    FailureSample,
)

T = TypeVar("T")

LOGGER = logging.getLogger("cstream_ingest.batch")

ProgressCallback = Callable[[BatchProgress], None]


@dataclass(frozen=True, slots=True)
class BatchOperation(Generic[T]):
    """The two store calls a batch run alternates between.

    ``apply_chunk`` mutates a whole chunk at once and ``apply_item`` a single
    item.  Both return the committed results, or ``None`` when the items
    themselves are the committed value (deletes).
    """

    name: str
    apply_chunk: Callable[[list[T]], Awaitable[Sequence[Any] | None]]
    apply_item: Callable[[T], Awaitable[Any]]
    describe: Callable[[T], str]


def insert_operation(store: RecordStore) -> BatchOperation[EpisodeRecord]:
    return BatchOperation(
        name="insert",
        apply_chunk=store.insert_many,
        apply_item=store.insert_one,
        describe=lambda record: record.label,
    )


def delete_operation(store: RecordStore) -> BatchOperation[str]:
    return BatchOperation(
        name="delete",
        apply_chunk=store.delete_many_by_ids,
        apply_item=store.delete_one_by_id,
        describe=str,
    )


def _raise_first_error(results: Sequence[object]) -> None:
    """Re-raise the first chunk error of a settled wave, cancellations last."""

    errors = [result for result in results if isinstance(result, BaseException)]
    if not errors:
        return
    raise next(
        (error for error in errors if not isinstance(error, asyncio.CancelledError)),
        errors[0],
    )


class BatchMutationExecutor(Generic[T]):
    """Run one :class:`BatchOperation` over a list of items.

    Items are split into chunks of ``chunk_size``; up to
    ``max_concurrent_chunks`` chunks run together as a wave and every wave
    settles before the next one starts.  A chunk that fails as a whole is
    retried exactly once per item.  Mutation errors never stop the run; any
    other exception marks the job ``done_failed`` once its wave has settled
    and raises :class:`~cstream_ingest.errors.BatchAbortedError`.
    """

    def __init__(
        self,
        operation: BatchOperation[T],
        *,
        chunk_size: int,
        max_concurrent_chunks: int,
        failure_sample_limit: int = DEFAULT_FAILURE_SAMPLE_LIMIT,
        on_progress: ProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._operation = operation
        self._chunk_size = require_positive(chunk_size, name="chunk_size")
        self._max_concurrent_chunks = require_positive(
            max_concurrent_chunks, name="max_concurrent_chunks"
        )
        self._failure_sample_limit = require_positive(
            failure_sample_limit, name="failure_sample_limit"
        )
        self._on_progress = on_progress
        self._logger = logger or LOGGER

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def max_concurrent_chunks(self) -> int:
        return self._max_concurrent_chunks

    async def run(self, items: Sequence[T]) -> BatchJob[T]:
        """Mutate *items* and return the finished job."""

        job: BatchJob[T] = BatchJob(
            items=list(items),
            chunk_size=self._chunk_size,
            max_concurrent_chunks=self._max_concurrent_chunks,
            failure_sample_limit=self._failure_sample_limit,
            operation=self._operation.name,
        )
        waves = plan_waves(
            job.items,
            chunk_size=self._chunk_size,
            max_concurrent_chunks=self._max_concurrent_chunks,
        )
        self._logger.info(
            "Starting %s of %d item(s) in %d wave(s) (chunk size=%d, concurrency=%d).",
            job.operation,
            job.total,
            len(waves),
            self._chunk_size,
            self._max_concurrent_chunks,
        )
        job.status = BatchStatus.RUNNING
        try:
            for wave in waves:
                results = await asyncio.gather(
                    *(self._run_chunk(job, chunk) for chunk in wave),
                    return_exceptions=True,
                )
                _raise_first_error(results)
                progress = job.progress
                self._logger.info("Processed %d/%d items", progress.current, progress.total)
                if self._on_progress is not None:
                    self._on_progress(progress)
        except Exception as exc:
            job.status = BatchStatus.DONE_FAILED
            job.error = exc
            self._logger.error(
                "%s run aborted after %d/%d items: %s",
                job.operation.capitalize(),
                job.progress.current,
                job.total,
                exc,
                exc_info=exc,
            )
            raise BatchAbortedError(job, exc) from exc

        job.status = job.terminal_status()
        self._logger.info(
            "%s finished with status %s: %d succeeded, %d failed.",
            job.operation.capitalize(),
            job.status.value,
            job.success_count,
            job.failed_count,
        )
        return job

    async def _run_chunk(self, job: BatchJob[T], chunk: list[T]) -> None:
        try:
            result = await self._operation.apply_chunk(chunk)
        except Exception as exc:
            self._logger.warning(
                "%s of a %d item chunk failed (%s); retrying each item once.",
                job.operation.capitalize(),
                len(chunk),
                failure_reason(exc),
            )
            await self._run_items(job, chunk)
            return
        job.record_success(chunk, list(result) if result is not None else chunk)

    async def _run_items(self, job: BatchJob[T], chunk: list[T]) -> None:
        for item in chunk:
            try:
                result = await self._operation.apply_item(item)
            except Exception as exc:
                sample = FailureSample(
                    item=self._operation.describe(item),
                    reason=failure_reason(exc),
                    kind=classify_failure(exc),
                )
                self._logger.debug("%s failed for %s: %s", job.operation, sample.item, exc)
                job.record_failure(item, sample)
                continue
            job.record_success([item], [result] if result is not None else [item])


__all__ = [
    "BatchOperation",
    "BatchMutationExecutor",
    "ProgressCallback",
    "insert_operation",
    "delete_operation",
]
