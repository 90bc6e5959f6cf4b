# src/prioritizze/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_api(cls, raw: Any) -> TaskStatus | str:
        """
        Known status -> member. Anything else is kept as the raw string ("" when
        missing), so it never compares equal to TODO.
        """
        if raw is None:
            return ""
        try:
            return cls(raw)
        except ValueError:
            return str(raw)


class RecurringType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, raw: Any) -> RecurringType | None:
        """Known tag -> member; missing or unknown tag -> None."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a backend timestamp into an aware datetime.

    Accepts ISO-8601 strings (with "Z" or an offset), epoch seconds, or datetimes.
    Naive values are taken as UTC.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, (int, float)):
        dt = datetime.fromtimestamp(float(raw), tz=timezone.utc)
    elif isinstance(raw, str) and raw.strip():
        s = raw.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"Invalid timestamp: {raw!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True, frozen=True)
class Task:
    """
    Snapshot of a backend task.

    Only id, is_recurring, recurring_type, status and updated_at drive the
    recurring reset; the rest is carried so the API client stays useful.
    """

    id: str
    title: str
    status: TaskStatus | str
    is_recurring: bool
    recurring_type: RecurringType | None
    created_at: datetime
    updated_at: datetime

    description: str | None = None
    priority: Priority | None = None
    category_id: str | None = None
    due_date: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        if not isinstance(data, dict):
            raise ValueError(f"Task payload must be an object, got {type(data).__name__}")

        raw_id = data.get("id", data.get("_id"))
        if raw_id is None or str(raw_id).strip() == "":
            raise ValueError("Task payload has no id")

        updated_raw = data.get("updatedAt")
        created_raw = data.get("createdAt", updated_raw)
        updated_at = parse_timestamp(updated_raw)
        created_at = parse_timestamp(created_raw) if created_raw is not None else updated_at

        priority_raw = data.get("priority")
        try:
            priority = Priority(priority_raw) if priority_raw else None
        except ValueError:
            priority = None

        due_raw = data.get("dueDate")

        return cls(
            id=str(raw_id),
            title=str(data.get("title") or ""),
            status=TaskStatus.from_api(data.get("status")),
            is_recurring=bool(data.get("isRecurring", False)),
            recurring_type=RecurringType.parse(data.get("recurringType")),
            created_at=created_at,
            updated_at=updated_at,
            description=data.get("description"),
            priority=priority,
            category_id=data.get("categoryId"),
            due_date=parse_timestamp(due_raw) if due_raw else None,
        )

    def to_api(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "isRecurring": self.is_recurring,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.status:
            out["status"] = str(self.status)
        if self.recurring_type is not None:
            out["recurringType"] = self.recurring_type.value
        if self.description is not None:
            out["description"] = self.description
        if self.priority is not None:
            out["priority"] = self.priority.value
        if self.category_id is not None:
            out["categoryId"] = self.category_id
        if self.due_date is not None:
            out["dueDate"] = format_timestamp(self.due_date)
        return out


@dataclass(slots=True, frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=str(data.get("role") or "user"),
        )


@dataclass(slots=True, frozen=True)
class AuthSession:
    token: str
    user: User
