from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledTask:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    interval: float | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)
    done: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)


class Scheduler:
    """Virtual clock for deferred callbacks.

    The host loop drives it with `advance(dt)`; callbacks run on the caller's
    thread in due order, so game state is only ever mutated from one place.
    Tests advance it by hand to simulate real time.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ScheduledTask] = []
        self._seq = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        return self._push(self.now + max(0.0, delay), callback, None)

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return self._push(self.now + interval, callback, interval)

    def _push(self, due: float, callback: Callable[[], None], interval: float | None) -> ScheduledTask:
        self._seq += 1
        task = ScheduledTask(due=due, seq=self._seq, callback=callback, interval=interval)
        heapq.heappush(self._queue, task)
        return task

    def pending(self) -> int:
        return sum(1 for t in self._queue if t.active)

    def advance(self, dt: float) -> int:
        """Move the clock forward by `dt` seconds, running every task that falls due.

        Returns the number of callbacks run.
        """
        target = self.now + max(0.0, dt)
        ran = 0
        while self._queue and self._queue[0].due <= target:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = task.due
            if task.interval is None:
                task.done = True
            task.callback()
            ran += 1
            # A repeating task may cancel itself from inside its own callback.
            if task.interval is not None and not task.cancelled:
                task.due += task.interval
                self._seq += 1
                task.seq = self._seq
                heapq.heappush(self._queue, task)
        self.now = target
        return ran
