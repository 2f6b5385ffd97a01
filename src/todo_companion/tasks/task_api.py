# src/todo_companion/tasks/task_api.py

from __future__ import annotations

import logging

from ..core.state import AppState
from .projection import filter_tasks, task_stats
from .task_models import Task, TaskFilter

logger = logging.getLogger(__name__)


def set_filter(state: AppState, raw: str | None) -> TaskFilter:
    """Switch the active filter; unknown names fall back to "all"."""
    state.current_filter = TaskFilter.parse(raw)
    logger.debug("Filter -> %s", state.current_filter.value)
    return state.current_filter


def visible_tasks(state: AppState) -> list[Task]:
    """The projection shown to the user for the current filter."""
    return filter_tasks(state.store.tasks, state.current_filter, state.clock())


def stats_line(state: AppState) -> str:
    stats = task_stats(state.store.tasks, state.clock())
    text = f"{stats.total} task(s)"
    if stats.total > 0:
        text += f" ({stats.active} active, {stats.completed} completed)"
    return text
