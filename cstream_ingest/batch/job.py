"""Transient state and progress reporting for one batch run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Sequence, TypeVar

from ..errors import FailureKind

T = TypeVar("T")

DEFAULT_FAILURE_SAMPLE_LIMIT = 5


class BatchStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE_SUCCESS = "done_success"
    DONE_PARTIAL = "done_partial"
    DONE_FAILED = "done_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            BatchStatus.DONE_SUCCESS,
            BatchStatus.DONE_PARTIAL,
            BatchStatus.DONE_FAILED,
        )


@dataclass(frozen=True, slots=True)
class BatchProgress:
    """Snapshot emitted after every wave."""

    current: int
    total: int
    failed: int

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.current / self.total


@dataclass(frozen=True, slots=True)
class FailureSample:
    item: str
    reason: str
    kind: FailureKind = FailureKind.TRANSIENT

    def render(self) -> str:
        return f"{self.item}: {self.reason}"


@dataclass(slots=True)
class BatchJob(Generic[T]):
    """Execution state owned by a single executor run."""

    items: list[T]
    chunk_size: int
    max_concurrent_chunks: int
    failure_sample_limit: int = DEFAULT_FAILURE_SAMPLE_LIMIT
    operation: str = "mutation"
    success_count: int = 0
    failed_count: int = 0
    failure_samples: list[FailureSample] = field(default_factory=list)
    failed_items: list[T] = field(default_factory=list)
    committed: list[Any] = field(default_factory=list)
    status: BatchStatus = BatchStatus.IDLE
    error: BaseException | None = None

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def progress(self) -> BatchProgress:
        return BatchProgress(
            current=self.success_count + self.failed_count,
            total=self.total,
            failed=self.failed_count,
        )

    def record_success(self, items: Sequence[T], committed: Sequence[Any]) -> None:
        self.success_count += len(items)
        self.committed.extend(committed)

    def record_failure(self, item: T, sample: FailureSample) -> None:
        """Count *item* as failed; keep *sample* while under the display limit."""

        self.failed_count += 1
        self.failed_items.append(item)
        if (
            len(self.failure_samples) < self.failure_sample_limit
            and sample not in self.failure_samples
        ):
            self.failure_samples.append(sample)

    def terminal_status(self) -> BatchStatus:
        if self.failed_count == 0:
            return BatchStatus.DONE_SUCCESS
        if self.success_count > 0:
            return BatchStatus.DONE_PARTIAL
        return BatchStatus.DONE_FAILED


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """What the operator sees when a run finishes."""

    operation: str
    status: BatchStatus
    success_count: int
    failed_count: int
    total: int
    failure_preview: str

    def render(self) -> str:
        line = (
            f"{self.operation}: {self.status.value} "
            f"({self.success_count} succeeded, {self.failed_count} failed of {self.total})"
        )
        if self.failure_preview:
            line = f"{line}\nErrors: {self.failure_preview}"
        return line


def format_failure_samples(samples: Sequence[FailureSample], failed_count: int) -> str:
    """Render samples as ``"E3: duplicate, E5: boom +2 more"``."""

    if not samples:
        return ""
    text = ", ".join(sample.render() for sample in samples)
    remaining = failed_count - len(samples)
    if remaining > 0:
        text = f"{text} +{remaining} more"
    return text


def summarize_job(job: BatchJob[Any]) -> BatchSummary:
    return BatchSummary(
        operation=job.operation,
        status=job.status,
        success_count=job.success_count,
        failed_count=job.failed_count,
        total=job.total,
        failure_preview=format_failure_samples(job.failure_samples, job.failed_count),
    )


__all__ = [
    "BatchStatus",
    "BatchProgress",
    "FailureSample",
    "BatchJob",
    "BatchSummary",
    "DEFAULT_FAILURE_SAMPLE_LIMIT",
    "format_failure_samples",
    "summarize_job",
]
