"""Expose the batch executor, job state and chunking helpers."""

from __future__ import annotations

from .channels import chunk_sequence, plan_waves
from .executor import (
    BatchMutationExecutor,
    BatchOperation,
    delete_operation,
    insert_operation,
)
from .job import (
    BatchJob,
    BatchProgress,
    BatchStatus,
    BatchSummary,
    FailureSample,
    format_failure_samples,
    summarize_job,
)

__all__ = [
    "BatchMutationExecutor",
    "BatchOperation",
    "BatchJob",
    "BatchProgress",
    "BatchStatus",
    "BatchSummary",
    "FailureSample",
    "chunk_sequence",
    "delete_operation",
    "format_failure_samples",
    "insert_operation",
    "plan_waves",
    "summarize_job",
]
