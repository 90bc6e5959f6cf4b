# src/prioritizze/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the API client, resetter and scheduler into ServiceState,
- logs in when only credentials (no token) are configured.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from ..api.client import PrioritizzeApiClient
from ..api.errors import ApiError
from ..config import Settings, get_settings
from ..core.state import ServiceState
from ..tasks.reset_sweep import RecurringTaskResetter
from ..tasks.task_scheduler import RecurringTaskScheduler

logger = logging.getLogger(__name__)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """IANA zone name -> tzinfo. None (or an unknown name) means host local time."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to host local time", name)
        return None


def create_service_state(
    *,
    settings: Settings | None = None,
    interval_seconds: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceState:
    """
    Create ServiceState from the provided settings.

    Keeping settings injectable makes the service easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    interval = settings.reset_interval_seconds if interval_seconds is None else interval_seconds
    # Validated before the HTTP client exists so a bad value leaks nothing.
    if interval <= 0:
        raise ValueError(f"interval_seconds must be positive, got {interval!r}")

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    tz = resolve_timezone(settings.timezone)
    api = PrioritizzeApiClient.from_settings(settings, transport=transport)
    resetter = RecurringTaskResetter(api.tasks, tz=tz)
    scheduler = RecurringTaskScheduler(resetter, interval_seconds=interval)

    return ServiceState(settings=settings, api=api, resetter=resetter, scheduler=scheduler, tz=tz)


async def ensure_authenticated(state: ServiceState) -> bool:
    """
    Log in with configured credentials if no token is set.

    Returns False when the backend rejected the login; the caller decides whether to go on.
    """
    if state.api.token:
        return True

    email = state.settings.api_email
    password = state.settings.api_password
    if not email or not password:
        logger.warning("No API token or credentials configured; calling the backend anonymously")
        return True

    try:
        await state.api.auth.login(email, password)
    except ApiError as e:
        logger.error("Login failed for %s: %s", email, e)
        return False
    return True
