# src/prioritizze/tasks/recurrence.py

"""
Reset window arithmetic for recurring tasks.

The next reset is one period after the last update, truncated to the start of
that day in local time. Arithmetic happens on calendar dates, so DST shifts in
the zone do not move the result off midnight.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from .task_models import RecurringType


def compute_next_reset(
    last_update: datetime,
    recurring_type: RecurringType | str | None,
    tz: tzinfo | None = None,
) -> datetime:
    """
    Instant at which a task last updated at `last_update` becomes due for reset.

    tz=None means the host's local zone. An unrecognized recurring_type returns
    last_update unchanged; callers are expected to filter those out first.
    """
    rtype = RecurringType.parse(recurring_type)
    if rtype is None:
        return last_update

    if last_update.tzinfo is None:
        last_update = last_update.replace(tzinfo=timezone.utc)

    local_day = last_update.astimezone(tz).date()

    if rtype == RecurringType.DAILY:
        next_day = local_day + timedelta(days=1)
    elif rtype == RecurringType.WEEKLY:
        next_day = local_day + timedelta(days=7)
    else:
        next_day = _add_months(local_day, 1)

    if tz is None:
        # Naive midnight -> host local time.
        return datetime.combine(next_day, time.min).astimezone()
    return datetime.combine(next_day, time.min, tzinfo=tz)


def is_reset_due(now: datetime, next_reset: datetime) -> bool:
    # Exactly-at-boundary counts as due.
    return now >= next_reset


def _add_months(base: date, months: int) -> date:
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, _days_in_month(year, month))
    return date(year, month, day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day
