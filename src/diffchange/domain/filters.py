"""Change filters applied before search and windowing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .model import FieldStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .model import Field, Record


@dataclass(slots=True, frozen=True)
class ChangeFilters:
    only_changes: bool = False
    only_changed_fields: bool = False

    def keeps_record(self, record: Record) -> bool:
        if self.only_changes and not record.has_changes:
            return False
        if self.only_changed_fields:
            return any(item.status.is_change for item in record.fields)
        return True

    def hides_field(self, item: Field) -> bool:
        return self.only_changed_fields and item.status is FieldStatus.SAME


def filter_positions(records: Sequence[Record], filters: ChangeFilters) -> list[int]:
    """Return store positions of the records that pass ``filters``, in order."""

    return [position for position, record in enumerate(records) if filters.keeps_record(record)]
