"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class FieldStatus(StrEnum):
    SAME = "same"
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"

    @property
    def is_change(self) -> bool:
        return self is not FieldStatus.SAME


class Source(StrEnum):
    """Which side of the comparison a reconciliation choice takes its value from."""

    OLD = "old"
    NEW = "new"


class PayloadFormat(StrEnum):
    LINE = "line"
    BLOCK = "block"

    @property
    def export_filename(self) -> str:
        return "merged_item_name.txt" if self is PayloadFormat.BLOCK else "merged.txt"


class FileTag(StrEnum):
    """Role of a cached input file."""

    OLD = "old"
    NEW = "new"
