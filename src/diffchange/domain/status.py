"""Status derivation for fields and records.

``derive_status`` is the single source of truth for ``Field.status``. It depends
only on the field's old/new/merged values, its own ``deleted`` flag and the
owning record's ``deleted`` flag. ``None`` and ``""`` are indistinguishable here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .model import FieldStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .model import Field, Record


def derive_status(
    *,
    old_value: str | None,
    new_value: str | None,
    merged_value: str | None,
    field_deleted: bool,
    record_deleted: bool,
) -> FieldStatus:
    if field_deleted or record_deleted:
        return FieldStatus.REMOVED

    old = old_value or ""
    new = new_value or ""
    if not new and old:
        return FieldStatus.REMOVED
    if new and not old:
        return FieldStatus.ADDED
    if old != new:
        return FieldStatus.CHANGED
    if (merged_value or "") != new:
        return FieldStatus.CHANGED
    return FieldStatus.SAME


def field_status(item: Field, *, record_deleted: bool) -> FieldStatus:
    return derive_status(
        old_value=item.old_value,
        new_value=item.new_value,
        merged_value=item.merged_value,
        field_deleted=item.deleted,
        record_deleted=record_deleted,
    )


def refresh_record(record: Record) -> Record:
    """Recompute every field status and the record's ``has_changes`` flag."""

    has_changes = False
    for item in record.fields:
        item.status = field_status(item, record_deleted=record.deleted)
        has_changes = has_changes or item.status.is_change
    record.has_changes = has_changes
    return record


def refresh_records(records: Iterable[Record], *, chunk_size: int) -> Iterator[int]:
    """Refresh ``records`` in chunks, yielding the running count after each chunk.

    Callers drive the iterator and may hand control back to their scheduler
    between steps; each record is fully refreshed before the next step starts.
    """

    done = 0
    for record in records:
        refresh_record(record)
        done += 1
        if done % chunk_size == 0:
            yield done
    if done % chunk_size:
        yield done
