from __future__ import annotations

from diffchange.domain.scheduling import TaskScheduler
from tests.helpers.records import FakeClock


def test_task_runs_once_due() -> None:
    clock = FakeClock()
    scheduler = TaskScheduler(clock)
    calls: list[str] = []

    task = scheduler.schedule("search", 0.3, lambda: calls.append("ran"))

    assert scheduler.run_due() == 0
    clock.advance(0.3)
    assert scheduler.run_due() == 1
    assert calls == ["ran"]
    assert task.completed
    assert not task.pending
    assert scheduler.pending("search") is None


def test_rescheduling_same_name_supersedes_pending_task() -> None:
    clock = FakeClock()
    scheduler = TaskScheduler(clock)
    calls: list[str] = []

    first = scheduler.schedule("search", 0.3, lambda: calls.append("first"))
    clock.advance(0.2)
    second = scheduler.schedule("search", 0.3, lambda: calls.append("second"))
    clock.advance(0.2)

    assert scheduler.run_due() == 0
    assert first.cancelled
    clock.advance(0.1)
    assert scheduler.run_due() == 1
    assert calls == ["second"]
    assert second.completed


def test_different_names_do_not_interfere() -> None:
    clock = FakeClock()
    scheduler = TaskScheduler(clock)
    calls: list[str] = []

    scheduler.schedule("scroll", 0.05, lambda: calls.append("scroll"))
    scheduler.schedule("search", 0.3, lambda: calls.append("search"))

    assert scheduler.run_due(now=1.0) == 2
    assert calls == ["scroll", "search"]


def test_cancel_and_flush() -> None:
    scheduler = TaskScheduler(FakeClock())
    calls: list[str] = []
    scheduler.schedule("a", 10, lambda: calls.append("a"))
    scheduler.schedule("b", 20, lambda: calls.append("b"))

    assert scheduler.cancel("a")
    assert not scheduler.cancel("missing")
    assert scheduler.flush() == 1
    assert calls == ["b"]


def test_callback_rescheduling_itself_is_not_run_twice() -> None:
    clock = FakeClock()
    scheduler = TaskScheduler(clock)
    calls: list[int] = []

    def callback() -> None:
        calls.append(len(calls))
        scheduler.schedule("tick", 1.0, callback)

    scheduler.schedule("tick", 0.0, callback)

    assert scheduler.run_due() == 1
    assert calls == [0]
    assert scheduler.pending("tick") is not None
