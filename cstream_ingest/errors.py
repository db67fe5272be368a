"""Exception hierarchy and failure classification for ingestion runs."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Sequence

if TYPE_CHECKING:
    from .batch.job import BatchJob

UNIQUE_VIOLATION = "23505"
INSUFFICIENT_PRIVILEGE = "42501"
JWT_EXPIRED = "PGRST301"


class IngestError(Exception):
    """Base class for errors raised by the ingestion engine."""


class ImportValidationError(IngestError, ValueError):
    """Operator input rejected before any batch job is created."""


class InvalidRecordIdError(ImportValidationError):
    """One or more identifiers do not match the store's identifier format."""

    def __init__(self, ids: Sequence[str]) -> None:
        self.ids = list(ids)
        preview = ", ".join(self.ids[:5])
        more = f" +{len(self.ids) - 5} more" if len(self.ids) > 5 else ""
        super().__init__(f"Invalid record id format: {preview}{more}")


class RecordStoreError(IngestError):
    """A mutation rejected by the record store."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ConflictError(RecordStoreError):
    """The store reported a uniqueness violation."""


class AuthorizationError(RecordStoreError):
    """The store denied the mutation (permissions, policies, expired session)."""


class BatchAbortedError(IngestError):
    """A batch run halted on an unexpected error outside the per-item boundary."""

    def __init__(self, job: "BatchJob", error: BaseException) -> None:
        super().__init__(f"Batch run aborted: {error}")
        self.job = job
        self.error = error


class FailureKind(str, Enum):
    """How a per-item mutation failure is presented to the operator."""

    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    TRANSIENT = "transient"


def _is_authorization_failure(
    code: str | None, message: str, status_code: int | None
) -> bool:
    if code in (INSUFFICIENT_PRIVILEGE, JWT_EXPIRED):
        return True
    if status_code in (401, 403):
        return True
    lowered = message.lower()
    return "row-level security" in lowered or "jwt" in lowered


def store_error_from_payload(
    payload: Mapping[str, Any] | None, *, status_code: int | None = None
) -> RecordStoreError:
    """Translate an error body returned by the store into the taxonomy."""

    payload = payload or {}
    code = payload.get("code")
    code = str(code) if code is not None else None
    message = str(
        payload.get("message")
        or payload.get("error")
        or (f"HTTP {status_code}" if status_code is not None else "unknown error")
    )
    if code == UNIQUE_VIOLATION or status_code == 409:
        return ConflictError(message, code=code, status_code=status_code)
    if _is_authorization_failure(code, message, status_code):
        return AuthorizationError(message, code=code, status_code=status_code)
    return RecordStoreError(message, code=code, status_code=status_code)


def classify_failure(error: BaseException) -> FailureKind:
    """Return the :class:`FailureKind` for a mutation exception."""

    if isinstance(error, ConflictError):
        return FailureKind.CONFLICT
    if isinstance(error, AuthorizationError):
        return FailureKind.AUTHORIZATION
    return FailureKind.TRANSIENT


def failure_reason(error: BaseException) -> str:
    """Short operator-facing reason for a failed mutation."""

    kind = classify_failure(error)
    if kind is FailureKind.CONFLICT:
        return "duplicate"
    if kind is FailureKind.AUTHORIZATION:
        return "permission denied"
    return str(error) or error.__class__.__name__


__all__ = [
    "IngestError",
    "ImportValidationError",
    "InvalidRecordIdError",
    "RecordStoreError",
    "ConflictError",
    "AuthorizationError",
    "BatchAbortedError",
    "FailureKind",
    "store_error_from_payload",
    "classify_failure",
    "failure_reason",
]
