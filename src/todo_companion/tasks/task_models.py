# src/todo_companion/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

ZERO_ELAPSED = "00:00:00"


class TaskStatus(StrEnum):
    """
    Derived task status.

    Never stored: computed from the task fields and the current instant.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    STARRED = "starred"
    NOT_STARTED = "not-started"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        key = raw.strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            return cls.ALL


class ReminderKind(StrEnum):
    REMINDER = "reminder"
    DEADLINE = "deadline"


def _dt_to_str(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _str_to_dt(raw: Any) -> datetime | None:
    if not raw or not isinstance(raw, str):
        return None
    try:
        # Browser-era payloads end with "Z".
        value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


@dataclass(slots=True)
class Task:
    id: int
    text: str
    created_at: datetime

    completed: bool = False
    starred: bool = False

    start_time: datetime | None = None
    started_at: datetime | None = None
    deadline: datetime | None = None
    reminder: datetime | None = None
    location: str | None = None

    completed_at: datetime | None = None
    time_used: str = ZERO_ELAPSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "starred": self.starred,
            "createdAt": _dt_to_str(self.created_at),
            "startTime": _dt_to_str(self.start_time),
            "startedAt": _dt_to_str(self.started_at),
            "deadline": _dt_to_str(self.deadline),
            "reminder": _dt_to_str(self.reminder),
            "location": self.location,
            "completedAt": _dt_to_str(self.completed_at),
            "timeUsed": self.time_used,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        created_at = _str_to_dt(data.get("createdAt")) or datetime.fromtimestamp(0, UTC)
        location = data.get("location")
        return cls(
            id=int(data["id"]),
            text=str(data.get("text") or ""),
            created_at=created_at,
            completed=bool(data.get("completed", False)),
            starred=bool(data.get("starred", False)),
            start_time=_str_to_dt(data.get("startTime")),
            started_at=_str_to_dt(data.get("startedAt")),
            deadline=_str_to_dt(data.get("deadline")),
            reminder=_str_to_dt(data.get("reminder")),
            location=str(location) if location else None,
            completed_at=_str_to_dt(data.get("completedAt")),
            time_used=str(data.get("timeUsed") or ZERO_ELAPSED),
        )


@dataclass(slots=True, frozen=True)
class TaskEdit:
    """
    Replacement values for the editable fields of a task.

    Edits replace every field at once, like the edit form does:
    a None time field clears it.
    """

    text: str
    start_time: datetime | None = None
    deadline: datetime | None = None
    reminder: datetime | None = None
    location: str | None = None
    starred: bool = False

    @classmethod
    def from_task(cls, task: Task) -> TaskEdit:
        return cls(
            text=task.text,
            start_time=task.start_time,
            deadline=task.deadline,
            reminder=task.reminder,
            location=task.location,
            starred=task.starred,
        )


@dataclass(slots=True, frozen=True)
class Notification:
    task_id: int
    text: str
    target_at: datetime
    kind: ReminderKind


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    active: int
    completed: int
    starred: int
    not_started: int
