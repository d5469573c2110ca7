"""Drives non-overlapping rounds on a fixed interval."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from core import RoundResult
from .ticker import Ticker


logger = logging.getLogger(__name__)


class RoundRunner(Protocol):
    async def run_round(self, round_index: int = 1) -> RoundResult: ...


class Scheduler:
    """
    Runs a round immediately, then one round per interval pulse.

    The pulse is consumed only after the previous round has fully
    completed, so rounds never overlap; a round longer than the interval
    is followed by the next one right away rather than by a burst.
    """

    def __init__(
        self,
        orchestrator: RoundRunner,
        interval_sec: float,
        *,
        ticker: Optional[Ticker] = None,
        on_round_complete: Optional[Callable[[RoundResult], None]] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._ticker = ticker or Ticker(interval_sec)
        self._on_round_complete = on_round_complete
        self.rounds_completed = 0

    async def run(self, max_rounds: Optional[int] = None) -> None:
        """Run rounds until ``max_rounds`` is reached, or forever when None."""
        self._ticker.start()
        logger.info(f"Scheduler started: one round every {self._ticker.interval_sec:g}s")

        round_index = 0
        while True:
            round_index += 1
            result = await self._orchestrator.run_round(round_index)
            self.rounds_completed += 1

            if self._on_round_complete is not None:
                try:
                    self._on_round_complete(result)
                except Exception as exc:
                    logger.warning(f"Round observer failed: {exc}")

            if max_rounds is not None and self.rounds_completed >= max_rounds:
                return
            await self._ticker.wait()
