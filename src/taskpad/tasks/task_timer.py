# src/taskpad/tasks/task_timer.py

from __future__ import annotations

import math
import time
from collections.abc import Callable


class TaskTimer:
    """Start/stop stopwatch for one task's time-tracking session."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at: float | None = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    def stop(self) -> int:
        """Stop and return whole minutes elapsed (nearest minute); 0 if not running."""
        # Half-minutes round up.
        minutes = math.floor(self.elapsed_seconds() / 60 + 0.5)
        self._started_at = None
        return int(minutes)
