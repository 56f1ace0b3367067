"""Reconciliation engine: the only writer of the record collection."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from diffchange.domain.errors import StaleReferenceError
from diffchange.domain.model import Source
from diffchange.domain.status import refresh_record

from .commands import (
    AcceptField,
    AcceptRecord,
    ResetField,
    ResetRecord,
    SetMergedValue,
    ToggleFieldDeleted,
    ToggleRecordDeleted,
)

if TYPE_CHECKING:
    from diffchange.domain.model import Field, Record
    from diffchange.domain.store import RecordStore

    from .commands import FieldCommand, ReconciliationCommand, RecordCommand

log = getLogger(__name__)


class ReconciliationEngine:
    """Apply reconciliation commands to the records held by ``store``.

    ``apply`` is total: it returns ``False`` for positions that no longer exist
    and for field edits on a record that is marked deleted (restore the record
    first). Affected statuses are re-derived after every applied command.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def apply(self, command: ReconciliationCommand) -> bool:
        try:
            match command:
                case AcceptRecord() | ResetRecord() | ToggleRecordDeleted():
                    record = self.store.record_at(command.record)
                    self._apply_record_command(record, command)
                case AcceptField() | ResetField() | ToggleFieldDeleted() | SetMergedValue():
                    record, item = self.store.field_at(command.record, command.field)
                    if record.deleted:
                        log.debug("Ignoring %s on deleted record %s", command, record.id)
                        return False
                    self._apply_field_command(item, command)
                case _:
                    assert_never(command)
        except StaleReferenceError as exc:
            log.debug("Ignoring %s: %s", command, exc)
            return False

        refresh_record(record)
        return True

    def _apply_record_command(self, record: Record, command: RecordCommand) -> None:
        match command:
            case AcceptRecord(source=source):
                for item in record.fields:
                    item.merged_value = item.value_for(source)
                    item.deleted = False
                record.deleted = False
            case ResetRecord():
                for item in record.fields:
                    item.merged_value = item.default_merged
                    item.deleted = False
                record.deleted = False
            case ToggleRecordDeleted():
                record.deleted = not record.deleted
                for item in record.fields:
                    item.deleted = record.deleted
            case _:
                assert_never(command)

    def _apply_field_command(self, item: Field, command: FieldCommand) -> None:
        match command:
            case AcceptField(source=source):
                item.merged_value = item.value_for(source)
                item.deleted = False
            case ResetField():
                item.merged_value = item.default_merged
                item.deleted = False
            case ToggleFieldDeleted():
                item.deleted = not item.deleted
                if not item.deleted:
                    item.merged_value = item.default_merged
            case SetMergedValue(text=text):
                item.merged_value = text
                item.deleted = False
            case _:
                assert_never(command)

    def accept_record(self, record: int, source: Source | str) -> bool:
        return self.apply(AcceptRecord(record=record, source=Source(source)))

    def reset_record(self, record: int) -> bool:
        return self.apply(ResetRecord(record=record))

    def toggle_record_deleted(self, record: int) -> bool:
        return self.apply(ToggleRecordDeleted(record=record))

    def accept_field(self, record: int, field: int, source: Source | str) -> bool:
        return self.apply(AcceptField(record=record, field=field, source=Source(source)))

    def reset_field(self, record: int, field: int) -> bool:
        return self.apply(ResetField(record=record, field=field))

    def toggle_field_deleted(self, record: int, field: int) -> bool:
        return self.apply(ToggleFieldDeleted(record=record, field=field))

    def set_merged_value(self, record: int, field: int, text: str) -> bool:
        return self.apply(SetMergedValue(record=record, field=field, text=text))
