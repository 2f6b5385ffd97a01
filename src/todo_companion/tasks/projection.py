# src/todo_companion/tasks/projection.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .lifecycle import is_not_started
from .task_models import Task, TaskFilter, TaskStats


def filter_tasks(tasks: Iterable[Task], task_filter: TaskFilter, now: datetime) -> list[Task]:
    """
    Project the store onto one filter.

    Store order is kept (newest first); nothing is re-sorted.
    """
    if task_filter == TaskFilter.ACTIVE:
        return [t for t in tasks if not t.completed]
    if task_filter == TaskFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if task_filter == TaskFilter.STARRED:
        return [t for t in tasks if t.starred]
    if task_filter == TaskFilter.NOT_STARTED:
        return [t for t in tasks if is_not_started(t, now)]
    return list(tasks)


def task_stats(tasks: Iterable[Task], now: datetime) -> TaskStats:
    items = list(tasks)
    completed = sum(1 for t in items if t.completed)
    return TaskStats(
        total=len(items),
        active=len(items) - completed,
        completed=completed,
        starred=sum(1 for t in items if t.starred),
        not_started=sum(1 for t in items if is_not_started(t, now)),
    )
