"""Live send counters shared by every sender task."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class StatsSnapshot:
    total: int
    success: int
    failed: int
    total_latency_ms: float
    elapsed_seconds: float

    @property
    def avg_latency_ms(self) -> float:
        if self.total == 0:
            return 0.0
        return self.total_latency_ms / self.total

    @property
    def rps(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.total / self.elapsed_seconds

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.success / self.total * 100.0


class Stats:
    """
    Counters for the lifetime of the process: only ever incremented.

    All sender tasks share one event loop, and `record` updates every counter
    without yielding to it, so each send is applied as a single step: no update
    is lost and any snapshot satisfies total == success + failed. `snapshot`
    is a plain read and never makes a sender wait.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at = clock()
        self._total = 0
        self._success = 0
        self._failed = 0
        self._total_latency_ms = 0.0

    def restart_clock(self) -> None:
        self._started_at = self._clock()

    def record(self, *, success: bool, latency_ms: float) -> None:
        self._total_latency_ms += max(0.0, float(latency_ms))
        if success:
            self._success += 1
        else:
            self._failed += 1
        self._total += 1

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            total=self._total,
            success=self._success,
            failed=self._failed,
            total_latency_ms=self._total_latency_ms,
            elapsed_seconds=self._clock() - self._started_at,
        )
