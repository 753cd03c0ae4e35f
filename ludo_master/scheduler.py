"""
Cancellable deferred callbacks for AI turns and no-move pauses.

`AsyncioScheduler` is used by the server's event loop. `ManualScheduler`
runs on a virtual clock, which keeps local simulations and tests fast and
deterministic.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> ScheduledTask: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)


@dataclass(order=True)
class ManualTask:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler; nothing runs until the clock is advanced."""

    def __init__(self):
        self.now = 0.0
        self._queue: List[ManualTask] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(due=self.now + max(0.0, delay), seq=next(self._seq), callback=callback)
        heapq.heappush(self._queue, task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)

    def next_delay(self) -> Optional[float]:
        """Seconds until the next live task, or None when idle."""
        live = [t for t in self._queue if not t.cancelled]
        if not live:
            return None
        return min(t.due for t in live) - self.now

    def _run_next(self, deadline: Optional[float]) -> bool:
        while self._queue:
            task = self._queue[0]
            if deadline is not None and task.due > deadline:
                return False
            heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = max(self.now, task.due)
            task.callback()
            return True
        return False

    def advance(self, seconds: float) -> int:
        """Run every task due within `seconds`; returns how many ran."""
        deadline = self.now + seconds
        ran = 0
        while self._run_next(deadline):
            ran += 1
        self.now = deadline
        return ran

    def run_next(self) -> bool:
        """Run the next live task regardless of its due time."""
        return self._run_next(None)

    def run_until_idle(self, max_tasks: int = 100_000) -> int:
        ran = 0
        while ran < max_tasks and self._run_next(None):
            ran += 1
        return ran
