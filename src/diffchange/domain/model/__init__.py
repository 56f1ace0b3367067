"""Domain model for record reconciliation."""

from __future__ import annotations

from .enums import FieldStatus, FileTag, PayloadFormat, Source
from .record import Field, Record, default_merged_value

__all__ = [
    "Field",
    "FieldStatus",
    "FileTag",
    "PayloadFormat",
    "Record",
    "Source",
    "default_merged_value",
]
