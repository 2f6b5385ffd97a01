# src/todo_companion/tasks/errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for task subsystem errors."""


class ValidationError(TaskError, ValueError):
    """Rejected user input (empty text, text too long). The store is left unchanged."""


class NotFoundError(TaskError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class InvalidTransitionError(TaskError):
    pass
