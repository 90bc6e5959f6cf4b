# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from prioritizze.tasks.reset_sweep import RecurringTaskResetter, SweepReport
from prioritizze.tasks.task_scheduler import RecurringTaskScheduler

from .fakes import FakeTaskBackend, make_task


class CountingResetter:
    """
    Resetter stand-in used for scheduler unit tests.

    This avoids the backend entirely and makes tests purely about scheduling:
    immediate first run, cadence, restart and stop semantics.
    """

    def __init__(self, *, gate: asyncio.Event | None = None, fail: bool = False) -> None:
        self.started = 0
        self.finished = 0
        self.gate = gate
        self.fail = fail

    async def run_sweep(self) -> SweepReport:
        self.started += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("sweep exploded")
        self.finished += 1
        return SweepReport()


@pytest.mark.asyncio
async def test_start_runs_one_sweep_immediately() -> None:
    resetter = CountingResetter()
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=3600)

    stop = scheduler.start()
    await scheduler.wait_idle()

    assert resetter.finished == 1
    assert scheduler.is_running
    stop()
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_sweeps_repeat_on_interval() -> None:
    resetter = CountingResetter()
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=0.02)

    scheduler.start()
    await asyncio.sleep(0.11)
    scheduler.stop()
    await scheduler.wait_idle()

    assert resetter.finished >= 3


@pytest.mark.asyncio
async def test_no_sweeps_after_stop() -> None:
    resetter = CountingResetter()
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=0.01)

    scheduler.start()
    await asyncio.sleep(0.03)
    scheduler.stop()
    await scheduler.wait_idle()
    count = resetter.started

    await asyncio.sleep(0.05)

    assert resetter.started == count


@pytest.mark.asyncio
async def test_restart_replaces_the_running_loop() -> None:
    resetter = CountingResetter()
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=3600)

    old_stop = scheduler.start()
    new_stop = scheduler.start()
    await asyncio.sleep(0)

    assert old_stop.ticker.cancelled() or old_stop.ticker.cancelling()
    assert scheduler.is_running

    # A stale handle must not stop the replacement loop.
    old_stop()
    assert scheduler.is_running

    new_stop()
    assert not scheduler.is_running
    await scheduler.wait_idle()
    assert resetter.finished == 2


@pytest.mark.asyncio
async def test_stop_leaves_inflight_sweep_running() -> None:
    gate = asyncio.Event()
    resetter = CountingResetter(gate=gate)
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=3600)

    stop = scheduler.start()
    await asyncio.sleep(0)
    assert resetter.started == 1

    stop()
    assert scheduler.inflight_sweeps == 1

    gate.set()
    await scheduler.wait_idle()
    assert resetter.finished == 1


@pytest.mark.asyncio
async def test_crashing_sweep_does_not_kill_the_loop() -> None:
    resetter = CountingResetter(fail=True)
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=0.01)

    scheduler.start()
    await asyncio.sleep(0.05)

    assert scheduler.is_running
    assert resetter.started >= 2
    scheduler.stop()
    await scheduler.wait_idle()


@pytest.mark.asyncio
async def test_scheduler_drives_real_resetter() -> None:
    now = datetime(2024, 1, 2, 0, 0, 1, tzinfo=timezone.utc)
    backend = FakeTaskBackend(
        [make_task("A", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))],
        clock=lambda: now,
    )
    resetter = RecurringTaskResetter(backend, now=lambda: now, tz=timezone.utc)
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=3600)

    stop = scheduler.start()
    await scheduler.wait_idle()
    stop()

    assert backend.update_calls == [("A", {"status": "todo"})]


def test_start_requires_running_loop() -> None:
    scheduler = RecurringTaskScheduler(CountingResetter())
    with pytest.raises(RuntimeError):
        scheduler.start()


@pytest.mark.parametrize("interval", [0, -5])
def test_interval_must_be_positive(interval: float) -> None:
    with pytest.raises(ValueError):
        RecurringTaskScheduler(CountingResetter(), interval_seconds=interval)
