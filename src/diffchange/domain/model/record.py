"""Record and field entities reconciled by the engine.

Both classes are plain mutable dataclasses. ``Field.status`` and
``Record.has_changes`` are derived values: only ``diffchange.domain.status``
writes them, every other module reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import FieldStatus, Source


def default_merged_value(old_value: str | None, new_value: str | None) -> str:
    """Return ``new ?? old ?? ""``; only ``None`` counts as absent here."""

    if new_value is not None:
        return new_value
    if old_value is not None:
        return old_value
    return ""


@dataclass(slots=True, eq=False)
class Field:
    key: str
    old_value: str | None
    new_value: str | None
    merged_value: str = ""
    deleted: bool = False
    status: FieldStatus = FieldStatus.SAME

    def value_for(self, source: Source) -> str:
        value = self.old_value if source is Source.OLD else self.new_value
        return value or ""

    @property
    def default_merged(self) -> str:
        return default_merged_value(self.old_value, self.new_value)


@dataclass(slots=True, eq=False)
class Record:
    id: str
    fields: list[Field] = field(default_factory=list["Field"])
    deleted: bool = False
    has_changes: bool = False

    @property
    def has_old_side(self) -> bool:
        return any(item.old_value is not None for item in self.fields)

    @property
    def has_new_side(self) -> bool:
        return any(item.new_value is not None for item in self.fields)
