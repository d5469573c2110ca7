"""Periodic pulse consumed one tick at a time."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional


class Ticker:
    """
    Fixed-interval pulse anchored at ``start()``.

    Pulses fall on ``anchor + k * interval``. At most one pulse is held for
    a consumer that falls behind; the rest are dropped, so ``wait()`` never
    returns several times in a row for ticks that were missed.
    """

    def __init__(
        self,
        interval_sec: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError(f"interval must be positive, got {interval_sec}")
        self.interval_sec = float(interval_sec)
        self._clock = clock
        self._sleep = sleep
        self._next: Optional[float] = None

    def start(self) -> None:
        self._next = self._clock() + self.interval_sec

    async def wait(self) -> float:
        """Block until the next pulse; returns the pulse time that was consumed."""
        if self._next is None:
            self.start()

        now = self._clock()
        if now < self._next:
            await self._sleep(self._next - now)
            now = self._clock()

        fired = self._next
        # skip every boundary already behind us
        missed = max(1, int((now - fired) // self.interval_sec) + 1)
        self._next = fired + missed * self.interval_sec
        return fired
