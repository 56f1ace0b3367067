"""Turning a normalized diff into a collection ready to be published.

Adapters translate external payloads into an ``IngestedDiff`` whose values are
normalized but whose statuses are not derived yet. Preparation derives every
status and folds the statistics in chunks; the prepared records stay private
until the session swaps them into the store in one step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .model import PayloadFormat
from .statistics import RecordStatistics, StatisticsAccumulator
from .status import refresh_records

if TYPE_CHECKING:
    from collections.abc import Generator

    from .model import Record


@dataclass(slots=True)
class IngestedDiff:
    format: PayloadFormat = PayloadFormat.LINE
    records: list[Record] = field(default_factory=list["Record"])


@dataclass(slots=True, frozen=True)
class PreparedDiff:
    format: PayloadFormat
    records: tuple[Record, ...]
    statistics: RecordStatistics


class PayloadParser(Protocol):
    """Translate a raw payload (mapping, JSON text or file object) into a diff."""

    def __call__(self, raw: object) -> IngestedDiff: ...


def prepare_steps(diff: IngestedDiff, *, chunk_size: int) -> Generator[int, None, PreparedDiff]:
    """Derive statuses, then statistics, yielding the processed count between chunks."""

    yield from refresh_records(diff.records, chunk_size=chunk_size)

    accumulator = StatisticsAccumulator()
    for done, record in enumerate(diff.records, start=1):
        accumulator.add(record)
        if done % chunk_size == 0:
            yield done

    return PreparedDiff(
        format=diff.format,
        records=tuple(diff.records),
        statistics=accumulator.result(),
    )


def prepare_diff(diff: IngestedDiff, *, chunk_size: int = 500) -> PreparedDiff:
    steps = prepare_steps(diff, chunk_size=chunk_size)
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
