"""Summary counts over the unfiltered record collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .model import FieldStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import Record


@dataclass(slots=True, frozen=True)
class RecordStatistics:
    total: int = 0
    added: int = 0
    removed: int = 0
    common: int = 0
    with_changes: int = 0
    without_changes: int = 0
    changed_fields: int = 0
    added_fields: int = 0
    removed_fields: int = 0


@dataclass(slots=True)
class StatisticsAccumulator:
    """Fold records one at a time; ``result`` snapshots the counts so far.

    A record is "added" when no field carries an old value (absent from OLD)
    and "removed" when no field carries a new value (absent from NEW).
    """

    total: int = 0
    added: int = 0
    removed: int = 0
    common: int = 0
    with_changes: int = 0
    without_changes: int = 0
    changed_fields: int = 0
    added_fields: int = 0
    removed_fields: int = 0

    def add(self, record: Record) -> None:
        self.total += 1
        has_old = record.has_old_side
        has_new = record.has_new_side
        if has_new and not has_old:
            self.added += 1
        elif has_old and not has_new:
            self.removed += 1
        elif has_old and has_new:
            self.common += 1
            if record.has_changes:
                self.with_changes += 1
            else:
                self.without_changes += 1

        for item in record.fields:
            if item.status is FieldStatus.CHANGED:
                self.changed_fields += 1
            elif item.status is FieldStatus.ADDED:
                self.added_fields += 1
            elif item.status is FieldStatus.REMOVED:
                self.removed_fields += 1

    def result(self) -> RecordStatistics:
        return RecordStatistics(
            total=self.total,
            added=self.added,
            removed=self.removed,
            common=self.common,
            with_changes=self.with_changes,
            without_changes=self.without_changes,
            changed_fields=self.changed_fields,
            added_fields=self.added_fields,
            removed_fields=self.removed_fields,
        )


def compute_statistics(records: Iterable[Record]) -> RecordStatistics:
    accumulator = StatisticsAccumulator()
    for record in records:
        accumulator.add(record)
    return accumulator.result()
