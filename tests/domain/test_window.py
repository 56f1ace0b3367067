from __future__ import annotations

import pytest

from diffchange.config import ViewConfig
from diffchange.domain.window import VisibilityWindow, WindowManager


@pytest.fixture
def manager() -> WindowManager:
    return WindowManager(ViewConfig())


def test_initial_window_covers_first_twenty_rows(manager: WindowManager) -> None:
    assert manager.window == VisibilityWindow(0, 20)
    assert manager.reset(7) == VisibilityWindow(0, 7)
    assert manager.reset(500) == VisibilityWindow(0, 20)


def test_compute_uses_row_height_and_lookahead(manager: WindowManager) -> None:
    window = manager.compute(scroll_offset=1500, viewport_height=600, total=1000)

    assert window == VisibilityWindow(10, 10 + 4 + 10)


@pytest.mark.parametrize("offset", [0, 1, 149, 150, 10_000, 1_000_000])
def test_window_start_never_exceeds_end(manager: WindowManager, offset: int) -> None:
    window = manager.compute(scroll_offset=offset, viewport_height=800, total=40)

    assert 0 <= window.start <= window.end <= 40


def test_small_scroll_delta_does_not_move_window(manager: WindowManager) -> None:
    manager.reset(1000)
    assert manager.recompute(scroll_offset=0, viewport_height=1500, total=1000) is False

    assert manager.recompute(scroll_offset=3 * 150, viewport_height=1500, total=1000) is False
    assert manager.window == VisibilityWindow(0, 20)


def test_large_scroll_delta_moves_window(manager: WindowManager) -> None:
    manager.reset(1000)

    assert manager.recompute(scroll_offset=30 * 150, viewport_height=1500, total=1000) is True
    assert manager.window == VisibilityWindow(30, 50)


def test_recompute_with_empty_list_is_a_no_op(manager: WindowManager) -> None:
    assert manager.recompute(scroll_offset=9000, viewport_height=600, total=0) is False
    assert manager.window == VisibilityWindow(0, 20)


def test_render_slice_adds_buffer_and_spacers(manager: WindowManager) -> None:
    manager.reset(100)
    manager.recompute(scroll_offset=40 * 150, viewport_height=600, total=100)

    rendered = manager.render_slice(100)

    assert (rendered.start, rendered.end) == (35, 59)
    assert len(rendered) == 24
    assert rendered.spacer_before == 35 * 150
    assert rendered.spacer_after == 41 * 150


def test_render_slice_clamps_to_short_lists(manager: WindowManager) -> None:
    rendered = manager.render_slice(3)

    assert (rendered.start, rendered.end) == (0, 3)
    assert rendered.spacer_before == rendered.spacer_after == 0
