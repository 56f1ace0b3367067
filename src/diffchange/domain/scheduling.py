"""Cancellable scheduled tasks with supersede semantics.

The host loop owns time: it calls ``TaskScheduler.run_due`` whenever it gets
control back (a UI idle tick, a test step). Scheduling a task under a name that
already has a pending task cancels the pending one, which is how debouncing is
expressed without ad hoc timers.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

type Clock = Callable[[], float]

log = getLogger(__name__)


@dataclass(slots=True, eq=False)
class ScheduledTask:
    name: str
    due_at: float
    callback: Callable[[], object] = field(repr=False)
    cancelled: bool = False
    completed: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.completed)

    def cancel(self) -> None:
        self.cancelled = True


class TaskScheduler:
    def __init__(self, clock: Clock = time.monotonic) -> None:
        self.clock = clock
        self._pending: dict[str, ScheduledTask] = {}

    def schedule(self, name: str, delay: float, callback: Callable[[], object]) -> ScheduledTask:
        """Schedule ``callback`` after ``delay`` seconds, superseding ``name``."""

        self.cancel(name)
        task = ScheduledTask(name=name, due_at=self.clock() + max(delay, 0.0), callback=callback)
        self._pending[name] = task
        return task

    def cancel(self, name: str) -> bool:
        task = self._pending.pop(name, None)
        if task is None:
            return False
        task.cancel()
        log.debug("Cancelled scheduled task %s", name)
        return True

    def pending(self, name: str) -> ScheduledTask | None:
        return self._pending.get(name)

    def run_due(self, now: float | None = None) -> int:
        """Run every task due at ``now`` in due order; return how many ran."""

        current = self.clock() if now is None else now
        due = sorted(
            (task for task in self._pending.values() if task.due_at <= current),
            key=lambda task: task.due_at,
        )
        for task in due:
            self._run(task)
        return len(due)

    def flush(self) -> int:
        """Run every pending task immediately."""

        tasks = sorted(self._pending.values(), key=lambda task: task.due_at)
        for task in tasks:
            self._run(task)
        return len(tasks)

    def _run(self, task: ScheduledTask) -> None:
        # A callback may have cancelled or replaced this task already.
        if self._pending.get(task.name) is not task:
            return
        del self._pending[task.name]
        task.completed = True
        task.callback()
