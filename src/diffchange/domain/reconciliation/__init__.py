"""Reconciliation state machine over the record collection."""

from __future__ import annotations

from .commands import (
    AcceptField,
    AcceptRecord,
    FieldCommand,
    ReconciliationCommand,
    RecordCommand,
    ResetField,
    ResetRecord,
    SetMergedValue,
    ToggleFieldDeleted,
    ToggleRecordDeleted,
)
from .engine import ReconciliationEngine

__all__ = [
    "AcceptField",
    "AcceptRecord",
    "FieldCommand",
    "ReconciliationCommand",
    "ReconciliationEngine",
    "RecordCommand",
    "ResetField",
    "ResetRecord",
    "SetMergedValue",
    "ToggleFieldDeleted",
    "ToggleRecordDeleted",
]
