# src/prioritizze/tasks/task_scheduler.py

"""
Recurring reset scheduler.

A small polling loop that:
- runs one reset sweep immediately on start,
- spawns another sweep every interval_seconds (default: one hour),
- never waits for a sweep to finish before scheduling the next tick.

Sweeps are fire-and-forget asyncio tasks. Stopping the scheduler cancels
future ticks only; sweeps already running are left to finish.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .reset_sweep import RecurringTaskResetter, SweepReport

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60 * 60


@dataclass(slots=True, frozen=True, eq=False)
class StopHandle:
    """
    Callable returned by start().

    It stops only the loop it was issued for: once the scheduler has been
    restarted, an old handle no longer touches the new loop.
    """

    scheduler: RecurringTaskScheduler
    ticker: asyncio.Task[None]

    def __call__(self) -> None:
        self.scheduler._stop_ticker(self.ticker)


class RecurringTaskScheduler:
    def __init__(
        self,
        resetter: RecurringTaskResetter,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds!r}")

        self._resetter = resetter
        self._interval = float(interval_seconds)
        self._ticker: asyncio.Task[None] | None = None
        # Strong refs: the event loop only keeps weak references to tasks.
        self._inflight: set[asyncio.Task[SweepReport | None]] = set()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def inflight_sweeps(self) -> int:
        return len(self._inflight)

    def start(self) -> StopHandle:
        """
        Start polling. Must be called from inside a running event loop.

        If a loop is already active it is stopped first (replace, not stack).
        """
        loop = asyncio.get_running_loop()

        if self.is_running:
            logger.info("Recurring reset scheduler already running; restarting")
        self.stop()

        self.trigger()

        ticker = loop.create_task(self._tick_forever(), name="recurring-reset-ticker")
        self._ticker = ticker
        logger.info("Recurring reset scheduler started (interval=%.0fs)", self._interval)
        return StopHandle(self, ticker)

    def stop(self) -> None:
        ticker = self._ticker
        self._ticker = None
        if ticker is not None and not ticker.done():
            ticker.cancel()
            logger.info("Recurring reset scheduler stopped")

    def trigger(self) -> asyncio.Task[SweepReport | None]:
        """Spawn one sweep now, outside the regular cadence."""
        task = asyncio.get_running_loop().create_task(self._sweep_once(), name="recurring-reset-sweep")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until no sweep is running (ticks may still spawn new ones later)."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _stop_ticker(self, ticker: asyncio.Task[None]) -> None:
        if ticker is self._ticker:
            self.stop()
        elif not ticker.done():
            ticker.cancel()

    async def _tick_forever(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self._interval

        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += self._interval
            self.trigger()

    async def _sweep_once(self) -> SweepReport | None:
        try:
            return await self._resetter.run_sweep()
        except Exception:
            logger.exception("Recurring reset sweep crashed")
            return None
