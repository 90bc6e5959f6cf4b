# src/prioritizze/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the recurring reset core.

The core depends on Protocols instead of the concrete HTTP client.
This keeps the backend swappable and makes testing easier.
"""

from typing import Any, Mapping, Protocol

from ..tasks.task_models import Task


class TaskBackend(Protocol):
    """The two backend operations the reset sweep needs."""

    async def list_recurring_tasks(self) -> list[Task]: ...

    async def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Any: ...
