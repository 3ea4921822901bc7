"""Tick sequences that drive phase timing."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator

from focus_timer.models.cycle import TickEvent


class ProgressReporter:
    """Produces one ``TickEvent`` per elapsed second of a phase.

    Each element is preceded by a one-interval suspension, so consuming the
    sequence is what advances time. Stopping iteration early (``break`` or
    ``close()``) aborts without sleeping through the remaining elements.
    """

    def __init__(self, interval: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.interval = interval
        self._sleep = sleep

    def tick(self, duration: int) -> Iterator[TickEvent]:
        """Lazy sequence of exactly ``duration`` tick events."""
        if duration < 0:
            raise ValueError("duration must be >= 0")
        return self._ticks(duration)

    def _ticks(self, duration: int) -> Iterator[TickEvent]:
        for elapsed in range(1, duration + 1):
            self._sleep(self.interval)
            yield TickEvent(elapsed=elapsed, remaining=duration - elapsed, total=duration)
