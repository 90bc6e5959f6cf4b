# src/prioritizze/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from ..api.client import PrioritizzeApiClient
from ..config import Settings
from ..tasks.reset_sweep import RecurringTaskResetter
from ..tasks.task_scheduler import RecurringTaskScheduler


@dataclass
class ServiceState:
    # Store Settings on the state for easy access in other modules later.
    settings: Settings

    api: PrioritizzeApiClient
    resetter: RecurringTaskResetter
    scheduler: RecurringTaskScheduler
    tz: tzinfo | None = None
