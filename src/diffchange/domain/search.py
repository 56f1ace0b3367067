"""Substring search over record identifiers and field values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .model import Record


@dataclass(slots=True, frozen=True)
class SearchQuery:
    """A query normalized once at capture time (trimmed, lower-cased)."""

    text: str = ""

    @classmethod
    def capture(cls, raw: str | None) -> SearchQuery:
        return cls((raw or "").strip().lower())

    def __bool__(self) -> bool:
        return bool(self.text)


def matches(record: Record, query: SearchQuery | str) -> bool:
    """Return whether ``record`` contains ``query`` anywhere, case-insensitively."""

    needle = query.text if isinstance(query, SearchQuery) else SearchQuery.capture(query).text
    if not needle:
        return True
    if needle in record.id.lower():
        return True
    for item in record.fields:
        if (
            needle in (item.old_value or "").lower()
            or needle in (item.new_value or "").lower()
            or needle in item.merged_value.lower()
            or needle in item.key.lower()
        ):
            return True
    return False


@dataclass(slots=True)
class SearchPass:
    """One evaluation of a query over a candidate list.

    A pass can be advanced in steps; its result is only accepted by ``commit``
    while no newer pass has been started on the same filter.
    """

    query: SearchQuery
    generation: int
    owner: SearchFilter = field(repr=False)
    candidates: Sequence[int] = ()
    _cursor: int = 0
    _hits: list[int] = field(default_factory=list[int])

    @property
    def done(self) -> bool:
        return self._cursor >= len(self.candidates)

    @property
    def is_current(self) -> bool:
        return self.owner.generation == self.generation

    def step(self, records: Sequence[Record], *, batch: int | None = None) -> bool:
        """Evaluate up to ``batch`` more candidates; return whether stepping is over.

        A superseded pass stops without reading ``records``: its candidate
        positions may refer to a collection that has since been replaced.
        """

        if not self.is_current:
            return True
        stop = len(self.candidates) if batch is None else min(
            len(self.candidates), self._cursor + batch
        )
        while self._cursor < stop:
            position = self.candidates[self._cursor]
            if matches(records[position], self.query):
                self._hits.append(position)
            self._cursor += 1
        return self.done

    def run(self, records: Sequence[Record]) -> SearchPass:
        self.step(records)
        return self

    def commit(self) -> tuple[int, ...] | None:
        """Return matching positions, or ``None`` if the pass was superseded."""

        if not self.done or not self.is_current:
            return None
        self.owner.applied = self.query
        return tuple(self._hits)


@dataclass(slots=True)
class SearchFilter:
    """Tracks the last captured query so that stale passes are discarded."""

    generation: int = 0
    applied: SearchQuery = field(default_factory=SearchQuery)

    def invalidate(self) -> None:
        """Supersede every pass started so far; the applied query is kept."""

        self.generation += 1

    def start(self, raw: str | None, candidates: Sequence[int]) -> SearchPass:
        self.generation += 1
        return SearchPass(
            query=SearchQuery.capture(raw),
            generation=self.generation,
            owner=self,
            candidates=candidates,
        )
