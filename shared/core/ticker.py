"""Fixed-interval ticker on the event loop clock."""
from __future__ import annotations

import asyncio


class Ticker:
    """Fires every `interval` seconds, starting one interval after the first wait.

    A consumer that falls behind gets one immediate tick and then rejoins the
    original schedule; missed ticks are dropped rather than replayed in a burst.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("ticker interval must be > 0")
        self._interval = float(interval)
        self._deadline: float | None = None

    @property
    def interval(self) -> float:
        return self._interval

    async def tick(self, stop: asyncio.Event | None = None) -> bool:
        """Wait for the next tick. Returns False if `stop` is (or becomes) set first."""
        if stop is not None and stop.is_set():
            return False

        now = asyncio.get_running_loop().time()
        if self._deadline is None:
            self._deadline = now + self._interval

        delay = self._deadline - now
        if delay <= 0:
            skipped = int(-delay // self._interval) + 1
            self._deadline += skipped * self._interval
            return True

        if stop is None:
            await asyncio.sleep(delay)
        else:
            try:
                await asyncio.wait_for(stop.wait(), timeout=delay)
                return False
            except asyncio.TimeoutError:
                pass
        self._deadline += self._interval
        return True
