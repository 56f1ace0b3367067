"""Reconciliation session: the single owner of the record collection.

The session wires the store, the engine, the change filters, search, the
visibility window and statistics together. It is meant to be driven from one
logical thread; the only asynchronous boundary is ingestion, which is guarded
by tickets so that only the most recently started ingestion can publish.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from diffchange.config.view import ViewConfig

from .filters import ChangeFilters, filter_positions
from .ingest import prepare_steps
from .mass_actions import apply_mass_change, group_similar_changes
from .reconciliation import ReconciliationEngine
from .scheduling import TaskScheduler
from .search import SearchFilter, SearchQuery, matches
from .statistics import RecordStatistics, compute_statistics
from .store import RecordStore
from .view_models import build_render_plan
from .window import WindowManager

if TYPE_CHECKING:
    from collections.abc import Generator

    from .ingest import IngestedDiff, PreparedDiff
    from .mass_actions import ChangeGroup, MassChangeResult
    from .model import PayloadFormat, Record, Source
    from .reconciliation import ReconciliationCommand
    from .scheduling import ScheduledTask
    from .search import SearchPass
    from .view_models import RenderPlan, RenderSink

log = getLogger(__name__)

SEARCH_TASK = "search"
SCROLL_TASK = "scroll"


@dataclass(slots=True, frozen=True)
class StatusMessage:
    text: str = ""
    is_error: bool = False


@dataclass(slots=True, frozen=True)
class IngestionTicket:
    number: int


class ReconciliationSession:
    def __init__(
        self,
        *,
        config: ViewConfig | None = None,
        scheduler: TaskScheduler | None = None,
        sink: RenderSink | None = None,
    ) -> None:
        self.config = config or ViewConfig()
        self.scheduler = scheduler or TaskScheduler()
        self.sink = sink
        self.store = RecordStore()
        self.engine = ReconciliationEngine(self.store)
        self.window = WindowManager(self.config)
        self.search = SearchFilter()
        self.filters = ChangeFilters()
        self.statistics = RecordStatistics()
        self.status = StatusMessage()
        self._tickets_issued = 0
        self._active_ticket: IngestionTicket | None = None

    # -- ingestion -------------------------------------------------------------

    @property
    def ingestion_in_flight(self) -> bool:
        return self._active_ticket is not None

    def begin_ingestion(self) -> IngestionTicket:
        """Start an ingestion; any ingestion still in flight is superseded."""

        if self._active_ticket is not None:
            log.info("Ingestion %s superseded", self._active_ticket.number)
        self._tickets_issued += 1
        self._active_ticket = IngestionTicket(self._tickets_issued)
        return self._active_ticket

    def is_current(self, ticket: IngestionTicket) -> bool:
        return self._active_ticket == ticket

    def complete_ingestion(self, ticket: IngestionTicket, diff: IngestedDiff) -> bool:
        """Publish ``diff`` if ``ticket`` is still current; return whether it was."""

        if not self.is_current(ticket):
            log.info("Discarding result of superseded ingestion %s", ticket.number)
            return False
        steps = self._prepare(diff)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return self._publish(ticket, stop.value)

    async def complete_ingestion_async(self, ticket: IngestionTicket, diff: IngestedDiff) -> bool:
        """Like ``complete_ingestion`` but yields to the event loop between chunks."""

        if not self.is_current(ticket):
            log.info("Discarding result of superseded ingestion %s", ticket.number)
            return False
        steps = self._prepare(diff)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return self._publish(ticket, stop.value)
            await asyncio.sleep(0)

    def fail_ingestion(self, ticket: IngestionTicket, error: Exception) -> None:
        """Record a failed ingestion; the current collection is left untouched."""

        if not self.is_current(ticket):
            return
        self._active_ticket = None
        self._set_status(str(error), is_error=True)

    def ingest(self, diff: IngestedDiff) -> bool:
        return self.complete_ingestion(self.begin_ingestion(), diff)

    def _prepare(self, diff: IngestedDiff) -> Generator[int, None, PreparedDiff]:
        return prepare_steps(diff, chunk_size=self.config.ingest_chunk_size)

    def _publish(self, ticket: IngestionTicket, prepared: PreparedDiff) -> bool:
        if not self.is_current(ticket):
            log.info("Discarding result of superseded ingestion %s", ticket.number)
            return False
        self._active_ticket = None
        self.store.replace(prepared.format, prepared.records)
        self.search.invalidate()
        self.statistics = prepared.statistics
        log.info(
            "Ingested %s records (format=%s, with_changes=%s)",
            len(prepared.records),
            prepared.format,
            prepared.statistics.with_changes,
        )
        self._set_status(f"Loaded {len(prepared.records)} records (format: {prepared.format})")
        self._reset_window()
        return True

    # -- reconciliation --------------------------------------------------------

    def apply(self, command: ReconciliationCommand) -> bool:
        applied = self.engine.apply(command)
        if applied:
            self._notify()
        return applied

    def group_similar_changes(self) -> list[ChangeGroup]:
        groups = group_similar_changes(self.store.records)
        if not groups and len(self.store):
            self._set_status("No repeated changes to group", is_error=True)
        return groups

    def apply_mass_change(self, group: ChangeGroup, source: Source | str) -> MassChangeResult:
        result = apply_mass_change(self.engine, group, source)
        text = f"Applied to {result.applied} of {result.total} records"
        if result.on_deleted_records:
            text += f" ({result.on_deleted_records} on deleted records skipped)"
        self._set_status(text)
        self._notify()
        return result

    def refresh_statistics(self) -> RecordStatistics:
        self.statistics = compute_statistics(self.store.records)
        return self.statistics

    def export_snapshot(self) -> tuple[PayloadFormat, tuple[Record, ...]]:
        return self.store.format, self.store.records

    # -- filtering -------------------------------------------------------------

    def set_change_filters(
        self,
        *,
        only_changes: bool | None = None,
        only_changed_fields: bool | None = None,
    ) -> ChangeFilters:
        updated = replace(
            self.filters,
            only_changes=self.filters.only_changes if only_changes is None else only_changes,
            only_changed_fields=(
                self.filters.only_changed_fields
                if only_changed_fields is None
                else only_changed_fields
            ),
        )
        if updated != self.filters:
            self.filters = updated
            self._reset_window()
        return self.filters

    @property
    def query(self) -> SearchQuery:
        return self.search.applied

    def request_search(self, text: str) -> ScheduledTask:
        """Debounced search: only the last request inside the debounce window runs."""

        return self.scheduler.schedule(
            SEARCH_TASK, self.config.search_debounce, lambda: self.submit_search(text)
        )

    def submit_search(self, text: str) -> tuple[int, ...] | None:
        """Run a search pass right away; returns matching positions or ``None``."""

        self.scheduler.cancel(SEARCH_TASK)
        return self.finish_search(self.begin_search(text).run(self.store.records))

    def begin_search(self, text: str) -> SearchPass:
        """Start a pass the caller may advance in steps; supersedes earlier passes."""

        return self.search.start(text, filter_positions(self.store.records, self.filters))

    def finish_search(self, search_pass: SearchPass) -> tuple[int, ...] | None:
        """Apply a finished pass unless a newer one was started meanwhile."""

        hits = search_pass.commit()
        if hits is None:
            log.debug("Discarding stale search pass for %r", search_pass.query.text)
            return None

        if search_pass.query:
            total = len(search_pass.candidates)
            if hits:
                self._set_status(f"Found {len(hits)} of {total} records")
            else:
                self._set_status(f'No records match "{search_pass.query.text}"', is_error=True)
        else:
            self._set_status("Search cleared")
        self._reset_window()
        return hits

    def clear_search(self) -> None:
        self.submit_search("")

    # -- windowing -------------------------------------------------------------

    def visible_positions(self) -> list[int]:
        """Store positions after change filter, changed-fields filter and search."""

        candidates = filter_positions(self.store.records, self.filters)
        query = self.search.applied
        if not query:
            return candidates
        return [position for position in candidates if matches(self.store.records[position], query)]

    def on_scroll(self, scroll_offset: float, viewport_height: float) -> ScheduledTask:
        """Sample the scroll position once it has settled for ``scroll_interval``."""

        return self.scheduler.schedule(
            SCROLL_TASK,
            self.config.scroll_interval,
            lambda: self.sample_scroll(scroll_offset, viewport_height),
        )

    def sample_scroll(self, scroll_offset: float, viewport_height: float) -> bool:
        moved = self.window.recompute(
            scroll_offset=scroll_offset,
            viewport_height=viewport_height,
            total=len(self.visible_positions()),
        )
        if moved:
            self._notify()
        return moved

    def render_plan(self) -> RenderPlan:
        records = self.store.records
        candidates = filter_positions(records, self.filters)
        query = self.search.applied
        positions = (
            [position for position in candidates if matches(records[position], query)]
            if query
            else candidates
        )
        return build_render_plan(
            records,
            visible_positions=positions,
            unsearched_count=len(candidates),
            render_slice=self.window.render_slice(len(positions)),
            filters=self.filters,
            query=query,
        )

    def _reset_window(self) -> None:
        self.window.reset(len(self.visible_positions()))
        self._notify()

    def _notify(self) -> None:
        if self.sink is not None:
            self.sink.render(self.render_plan())

    def _set_status(self, text: str, *, is_error: bool = False) -> None:
        self.status = StatusMessage(text=text, is_error=is_error)
        if is_error:
            log.warning(text)
        else:
            log.info(text)
