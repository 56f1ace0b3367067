"""Immutable view data handed to a render sink."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .filters import ChangeFilters
    from .model import FieldStatus, Record
    from .search import SearchQuery
    from .window import RenderSlice


@dataclass(slots=True, frozen=True)
class FieldView:
    position: int
    key: str
    old_value: str | None
    new_value: str | None
    merged_value: str
    status: FieldStatus
    deleted: bool
    editable: bool
    hidden: bool


@dataclass(slots=True, frozen=True)
class RecordView:
    position: int
    record_id: str
    deleted: bool
    has_changes: bool
    fields: tuple[FieldView, ...]


@dataclass(slots=True, frozen=True)
class ProgressSummary:
    shown: int
    total: int
    total_records: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.shown / self.total * 100)


@dataclass(slots=True, frozen=True)
class RenderPlan:
    records: tuple[RecordView, ...]
    spacer_before: int
    spacer_after: int
    filtered_count: int
    unsearched_count: int
    progress: ProgressSummary
    search_text: str = ""

    @property
    def empty(self) -> bool:
        return self.filtered_count == 0


class RenderSink(Protocol):
    """Consumes render plans; owns no reconciliation logic."""

    def render(self, plan: RenderPlan) -> None: ...


def record_view(position: int, record: Record, filters: ChangeFilters) -> RecordView:
    fields = tuple(
        FieldView(
            position=index,
            key=item.key,
            old_value=item.old_value,
            new_value=item.new_value,
            merged_value=item.merged_value,
            status=item.status,
            deleted=item.deleted,
            editable=not (item.deleted or record.deleted),
            hidden=filters.hides_field(item),
        )
        for index, item in enumerate(record.fields)
    )
    return RecordView(
        position=position,
        record_id=record.id,
        deleted=record.deleted,
        has_changes=record.has_changes,
        fields=fields,
    )


def build_render_plan(
    records: Sequence[Record],
    *,
    visible_positions: Sequence[int],
    unsearched_count: int,
    render_slice: RenderSlice,
    filters: ChangeFilters,
    query: SearchQuery,
) -> RenderPlan:
    """Materialize the records of ``render_slice`` out of ``visible_positions``."""

    views = tuple(
        record_view(position, records[position], filters)
        for position in visible_positions[render_slice.start : render_slice.end]
    )
    return RenderPlan(
        records=views,
        spacer_before=render_slice.spacer_before,
        spacer_after=render_slice.spacer_after,
        filtered_count=len(visible_positions),
        unsearched_count=unsearched_count,
        progress=ProgressSummary(
            shown=len(views),
            total=len(visible_positions),
            total_records=len(records),
        ),
        search_text=query.text,
    )
