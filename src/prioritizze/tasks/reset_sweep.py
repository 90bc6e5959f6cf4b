# src/prioritizze/tasks/reset_sweep.py

"""
Recurring task reset sweep.

One sweep:
- fetches the recurring tasks from the backend,
- computes each task's reset window from its last update,
- sets elapsed, not-yet-reset tasks back to "todo".

A failed fetch aborts the sweep. A failed update only affects that task.
Nothing is raised to the caller: the scheduler fires sweeps and forgets them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo

from ..core.ports import TaskBackend
from .recurrence import compute_next_reset, is_reset_due
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class SweepReport:
    fetch_failed: bool = False
    checked: int = 0
    skipped: int = 0
    failed: int = 0
    reset_ids: list[str] = field(default_factory=list)

    @property
    def reset(self) -> int:
        return len(self.reset_ids)


class RecurringTaskResetter:
    def __init__(
        self,
        backend: TaskBackend,
        *,
        now: Callable[[], datetime] = _utc_now,
        tz: tzinfo | None = None,
    ) -> None:
        self._backend = backend
        self._now = now
        self._tz = tz

    def is_due(self, task: Task, now: datetime) -> bool:
        """Eligible recurring task whose window has elapsed and is not already todo."""
        if not task.is_recurring or task.recurring_type is None:
            return False
        if task.status == TaskStatus.TODO:
            return False
        next_reset = compute_next_reset(task.updated_at, task.recurring_type, self._tz)
        return is_reset_due(now, next_reset)

    async def run_sweep(self) -> SweepReport:
        report = SweepReport()

        try:
            tasks = await self._backend.list_recurring_tasks()
        except Exception as e:
            logger.error("Recurring sweep skipped: fetching recurring tasks failed: %s", e)
            logger.debug("list_recurring_tasks failure", exc_info=True)
            report.fetch_failed = True
            return report

        now = self._now()

        for task in tasks:
            report.checked += 1

            if not task.is_recurring or task.recurring_type is None:
                logger.debug("Task %s: not eligible for recurring reset", task.id)
                report.skipped += 1
                continue

            if not self.is_due(task, now):
                continue

            try:
                await self._backend.update_task(task.id, {"status": TaskStatus.TODO.value})
            except Exception as e:
                logger.error(
                    "Recurring reset failed task_id=%s type=%s: %s",
                    task.id,
                    task.recurring_type.value,
                    e,
                )
                report.failed += 1
                continue

            report.reset_ids.append(task.id)
            logger.info(
                "Task %s (%s) reset to todo, last update %s",
                task.id,
                task.recurring_type.value,
                task.updated_at.isoformat(),
            )

        logger.info(
            "Recurring sweep done: checked=%d reset=%d failed=%d skipped=%d",
            report.checked,
            report.reset,
            report.failed,
            report.skipped,
        )
        return report
