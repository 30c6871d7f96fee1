from __future__ import annotations

from typing import Callable

from .scheduler import ScheduledTask, Scheduler

TICK_SECONDS = 1.0


class RoundTimer:
    """Whole-second round clock running on a Scheduler."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._task: ScheduledTask | None = None
        self.elapsed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and self._task.active

    def start(self, on_tick: Callable[[int], None] | None = None) -> None:
        self.stop()
        self.elapsed = 0

        def tick() -> None:
            self.elapsed += 1
            if on_tick is not None:
                on_tick(self.elapsed)

        self._task = self._scheduler.call_every(TICK_SECONDS, tick)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
