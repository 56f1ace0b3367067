"""Windowed visibility over the filtered record list.

Only a slice around the viewport is materialized. The window moves in rows of a
fixed approximate height and is only updated when it drifts by more than the
hysteresis threshold, so small scroll deltas never trigger a re-render.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from logging import getLogger

from diffchange.config.view import ViewConfig

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class VisibilityWindow:
    start: int = 0
    end: int = 0


@dataclass(slots=True, frozen=True)
class RenderSlice:
    """Indices to materialize plus the spacer sizes standing in for the rest."""

    start: int
    end: int
    skipped_before: int
    skipped_after: int
    item_height: int

    @property
    def spacer_before(self) -> int:
        return self.skipped_before * self.item_height

    @property
    def spacer_after(self) -> int:
        return self.skipped_after * self.item_height

    def __len__(self) -> int:
        return self.end - self.start


class WindowManager:
    def __init__(self, config: ViewConfig | None = None) -> None:
        self.config = config or ViewConfig()
        self.window = VisibilityWindow(0, self.config.initial_window)

    def reset(self, filtered_count: int) -> VisibilityWindow:
        self.window = VisibilityWindow(0, min(self.config.initial_window, filtered_count))
        return self.window

    def compute(
        self, *, scroll_offset: float, viewport_height: float, total: int
    ) -> VisibilityWindow:
        """Return the window for the given scroll geometry without storing it."""

        height = self.config.item_height
        start = max(0, math.floor(max(scroll_offset, 0) / height))
        visible_count = math.ceil(max(viewport_height, 0) / height)
        end = min(total, start + visible_count + self.config.lookahead)
        return VisibilityWindow(start=min(start, end), end=end)

    def recompute(self, *, scroll_offset: float, viewport_height: float, total: int) -> bool:
        """Move the window if it drifted past the hysteresis threshold.

        Returns ``True`` when the window changed and the view must re-render.
        """

        if total <= 0:
            return False
        candidate = self.compute(
            scroll_offset=scroll_offset, viewport_height=viewport_height, total=total
        )
        threshold = self.config.hysteresis
        if (
            abs(candidate.start - self.window.start) <= threshold
            and abs(candidate.end - self.window.end) <= threshold
        ):
            return False
        log.debug("Window moved: %s -> %s", self.window, candidate)
        self.window = candidate
        return True

    def render_slice(self, total: int) -> RenderSlice:
        buffer = self.config.render_buffer
        end = min(total, self.window.end + buffer)
        start = min(max(0, self.window.start - buffer), end)
        return RenderSlice(
            start=start,
            end=end,
            skipped_before=start,
            skipped_after=total - end,
            item_height=self.config.item_height,
        )
