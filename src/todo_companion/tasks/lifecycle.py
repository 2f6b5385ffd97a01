# src/todo_companion/tasks/lifecycle.py

from __future__ import annotations

"""
Task lifecycle engine.

Pure state transitions over a single Task:

    not started --start--> in progress --complete--> completed
                                 ^                       |
                                 +------reactivate-------+

Every function takes the current instant explicitly; nothing here reads the clock.
Reactivation discards the previous elapsed time (timeUsed is not cumulative).
"""

from datetime import datetime, timedelta

from .errors import InvalidTransitionError, ValidationError
from .task_models import ZERO_ELAPSED, Task, TaskEdit, TaskStatus

DEFAULT_MAX_TEXT_LENGTH = 100


def validate_text(text: str | None, max_length: int = DEFAULT_MAX_TEXT_LENGTH) -> str:
    """Return the trimmed text or raise ValidationError."""
    clean = (text or "").strip()
    if not clean:
        raise ValidationError("task text must not be empty")
    if len(clean) > max_length:
        raise ValidationError(f"task text must not exceed {max_length} characters")
    return clean


def _clean_location(location: str | None) -> str | None:
    return (location or "").strip() or None


def format_elapsed(delta: timedelta) -> str:
    """Format a duration as zero-padded HH:MM:SS (hours are not capped at 24)."""
    total = max(0, int(delta.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def is_not_started(task: Task, now: datetime) -> bool:
    return (
        not task.completed
        and task.started_at is None
        and task.start_time is not None
        and task.start_time > now
    )


def status_of(task: Task, now: datetime) -> TaskStatus:
    if task.completed:
        return TaskStatus.COMPLETED
    if is_not_started(task, now):
        return TaskStatus.NOT_STARTED
    return TaskStatus.IN_PROGRESS


def _start_is_due(task: Task, now: datetime) -> bool:
    return (
        not task.completed
        and task.started_at is None
        and task.start_time is not None
        and task.start_time <= now
    )


def new_task(
    task_id: int,
    text: str,
    now: datetime,
    *,
    start_time: datetime | None = None,
    deadline: datetime | None = None,
    reminder: datetime | None = None,
    location: str | None = None,
    starred: bool = False,
    max_length: int = DEFAULT_MAX_TEXT_LENGTH,
) -> Task:
    """
    Build a freshly added task.

    A task with a future start time begins "not started" (no started_at);
    any other task starts running immediately.
    """
    clean = validate_text(text, max_length)
    deferred = start_time is not None and start_time > now
    return Task(
        id=task_id,
        text=clean,
        created_at=now,
        starred=bool(starred),
        start_time=start_time,
        started_at=None if deferred else now,
        deadline=deadline,
        reminder=reminder,
        location=_clean_location(location),
    )


def start(task: Task, now: datetime) -> None:
    if task.completed:
        raise InvalidTransitionError(f"task {task.id} is completed")
    if task.started_at is not None:
        raise InvalidTransitionError(f"task {task.id} is already started")
    task.started_at = now


def complete(task: Task, now: datetime) -> None:
    task.completed = True
    task.completed_at = now
    began = task.started_at or task.created_at
    task.time_used = format_elapsed(now - began)


def reactivate(task: Task, now: datetime) -> None:
    task.completed = False
    task.completed_at = None
    task.started_at = now
    task.time_used = ZERO_ELAPSED


def toggle(task: Task, now: datetime) -> TaskStatus:
    """
    Checkbox semantics.

    The first toggle of a task whose start time has arrived starts it instead of
    completing it. Otherwise completion is flipped.
    """
    if _start_is_due(task, now):
        start(task, now)
    elif task.completed:
        reactivate(task, now)
    else:
        complete(task, now)
    return status_of(task, now)


def apply_edit(
    task: Task,
    edit: TaskEdit,
    now: datetime,
    max_length: int = DEFAULT_MAX_TEXT_LENGTH,
) -> None:
    """Replace the editable fields; id and created_at are never touched."""
    text = validate_text(edit.text, max_length)

    task.text = text
    task.start_time = edit.start_time
    task.deadline = edit.deadline
    task.reminder = edit.reminder
    task.location = _clean_location(edit.location)
    task.starred = bool(edit.starred)

    # Start time moved into the past: the task is running now.
    if task.started_at is None and task.start_time is not None and task.start_time <= now:
        task.started_at = now
