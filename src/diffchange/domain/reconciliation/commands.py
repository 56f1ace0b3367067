"""Closed set of reconciliation commands.

Every user action on the record collection is one of these variants. The
engine consumes them with an exhaustive ``match``; adding a variant without a
matching case is a type error.
"""

from __future__ import annotations

from dataclasses import dataclass

from diffchange.domain.model import Source


@dataclass(slots=True, frozen=True, kw_only=True)
class AcceptRecord:
    """Take every field of a record from one side."""

    record: int
    source: Source


@dataclass(slots=True, frozen=True, kw_only=True)
class ResetRecord:
    """Restore every field of a record to its default merged value."""

    record: int


@dataclass(slots=True, frozen=True, kw_only=True)
class ToggleRecordDeleted:
    record: int


@dataclass(slots=True, frozen=True, kw_only=True)
class AcceptField:
    record: int
    field: int
    source: Source


@dataclass(slots=True, frozen=True, kw_only=True)
class ResetField:
    record: int
    field: int


@dataclass(slots=True, frozen=True, kw_only=True)
class ToggleFieldDeleted:
    record: int
    field: int


@dataclass(slots=True, frozen=True, kw_only=True)
class SetMergedValue:
    """Free-text edit of a merged value."""

    record: int
    field: int
    text: str


type RecordCommand = AcceptRecord | ResetRecord | ToggleRecordDeleted
type FieldCommand = AcceptField | ResetField | ToggleFieldDeleted | SetMergedValue
type ReconciliationCommand = RecordCommand | FieldCommand
