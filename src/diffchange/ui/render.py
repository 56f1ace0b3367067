"""Plain-text rendering of session state for the terminal."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from diffchange.domain.model import FieldStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from diffchange.domain.mass_actions import ChangeGroup
    from diffchange.domain.ports.file_cache import CachedFile
    from diffchange.domain.statistics import RecordStatistics
    from diffchange.domain.view_models import FieldView, RecordView, RenderPlan

STATUS_MARKERS = {
    FieldStatus.SAME: " ",
    FieldStatus.CHANGED: "~",
    FieldStatus.ADDED: "+",
    FieldStatus.REMOVED: "-",
}


def _show(value: str | None) -> str:
    return "<none>" if value is None else repr(value)


def format_field(view: FieldView) -> str:
    marker = "x" if view.deleted else STATUS_MARKERS[view.status]
    line = f"  {marker} {view.key}: {_show(view.merged_value)}"
    if view.status is not FieldStatus.SAME:
        line += f"  (old {_show(view.old_value)}, new {_show(view.new_value)})"
    return line


def format_record(view: RecordView) -> list[str]:
    flags = []
    if view.deleted:
        flags.append("deleted")
    if view.has_changes:
        flags.append("changed")
    header = f"[{view.position}] {view.record_id or '<no id>'}"
    if flags:
        header += f" ({', '.join(flags)})"
    return [header, *(format_field(item) for item in view.fields if not item.hidden)]


def format_statistics(statistics: RecordStatistics) -> str:
    return (
        f"{statistics.total} records: {statistics.added} added, {statistics.removed} removed, "
        f"{statistics.common} common; {statistics.with_changes} with changes, "
        f"{statistics.without_changes} unchanged; fields: {statistics.changed_fields} changed, "
        f"{statistics.added_fields} added, {statistics.removed_fields} removed"
    )


def format_change_groups(groups: Sequence[ChangeGroup]) -> list[str]:
    return [
        f"{group.count}x {group.signature.key}: "
        f"{group.signature.old_value!r} -> {group.signature.new_value!r}"
        for group in groups
    ]


def format_cached_files(files: Sequence[CachedFile]) -> list[str]:
    if not files:
        return ["No cached files"]
    return [
        f"#{item.id} [{item.tag}] {item.name} ({item.size} bytes, "
        f"saved {item.saved_at:%Y-%m-%d %H:%M})"
        for item in files
    ]


class TextRenderSink:
    """Writes each render plan to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self.renders = 0

    def render(self, plan: RenderPlan) -> None:
        self.renders += 1
        if plan.empty:
            if plan.search_text:
                self._write(f'No records match "{plan.search_text}"')
            else:
                self._write("No records to show")
            return
        for view in plan.records:
            for line in format_record(view):
                self._write(line)
        progress = plan.progress
        self._write(
            f"Showing {progress.shown} of {progress.total} "
            f"({progress.percent}%, {progress.total_records} records loaded)"
        )

    def write_lines(self, lines: Sequence[str]) -> None:
        for line in lines:
            self._write(line)

    def _write(self, line: str) -> None:
        print(line, file=self.stream)


if TYPE_CHECKING:
    from diffchange.domain.view_models import RenderSink

    _sink_check: RenderSink = TextRenderSink()
