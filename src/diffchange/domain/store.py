"""Single owned handle on the record collection."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import StaleReferenceError
from .model import PayloadFormat

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .model import Field, Record

log = getLogger(__name__)


class RecordStore:
    """Holds the current collection and its format.

    The collection is only ever replaced wholesale by ``replace``; records and
    fields are mutated in place exclusively by the reconciliation engine.
    ``generation`` increments on every replacement so that observers can tell
    collections apart.
    """

    def __init__(self) -> None:
        self._format = PayloadFormat.LINE
        self._records: tuple[Record, ...] = ()
        self._generation = 0

    @property
    def format(self) -> PayloadFormat:
        return self._format

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._records)

    def replace(self, payload_format: PayloadFormat, records: Sequence[Record]) -> None:
        self._format = payload_format
        self._records = tuple(records)
        self._generation += 1
        log.debug(
            "Replaced record collection: generation=%s, records=%s",
            self._generation,
            len(self._records),
        )

    def record_at(self, record_index: int) -> Record:
        if not 0 <= record_index < len(self._records):
            raise StaleReferenceError(record_index)
        return self._records[record_index]

    def field_at(self, record_index: int, field_index: int) -> tuple[Record, Field]:
        record = self.record_at(record_index)
        if not 0 <= field_index < len(record.fields):
            raise StaleReferenceError(record_index, field_index)
        return record, record.fields[field_index]
