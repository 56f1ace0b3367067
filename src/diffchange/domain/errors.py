"""Error taxonomy shared by the domain and its boundary adapters."""

from __future__ import annotations


class DiffChangeError(RuntimeError):
    """Base class for reconciliation errors."""


class MalformedPayloadError(DiffChangeError, ValueError):
    """Raised when an ingestion payload is not a recognizable container."""


class StaleReferenceError(DiffChangeError, IndexError):
    """Raised when a record/field position no longer exists.

    The reconciliation engine swallows it: a stale position left over from a
    previous render is a no-op, never a user-visible failure.
    """

    def __init__(self, record_index: int, field_index: int | None = None) -> None:
        self.record_index = record_index
        self.field_index = field_index
        target = f"record={record_index}"
        if field_index is not None:
            target += f", field={field_index}"
        super().__init__(f"Stale reference: {target}")


class TransportFailure(DiffChangeError):
    """Raised when the diff server cannot be reached or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseFailure(DiffChangeError):
    """Raised when the transport succeeded but the body is not the expected shape."""
