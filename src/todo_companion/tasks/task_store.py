# src/todo_companion/tasks/task_store.py

from __future__ import annotations

import json
import logging
from datetime import datetime

from ..core.ports import Clock, KeyValueStore, utc_now
from . import lifecycle
from .errors import InvalidTransitionError, NotFoundError
from .task_models import Task, TaskEdit

logger = logging.getLogger(__name__)

TODOS_KEY = "todos"
DEMO_FLAG_KEY = "hasSeenDemo"

DEMO_TEXTS: tuple[tuple[str, bool], ...] = (
    ("Welcome to your to-do list!", False),
    ("Toggle a task to mark it completed", False),
    ("Use filters to see tasks by status", True),
)


class TodoStore:
    """
    In-memory ordered task list, the only mutable task state.

    - newest task first (additions prepend)
    - the whole list is written back to the key-value store after every mutation
    - an unknown task id makes a mutation a silent no-op (returns None/False)
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        clock: Clock = utc_now,
        max_text_length: int = lifecycle.DEFAULT_MAX_TEXT_LENGTH,
    ) -> None:
        self._kv = kv
        self._clock = clock
        self._max_text_length = int(max_text_length)
        self._tasks: list[Task] = self._load()
        logger.info("TodoStore ready total=%s", len(self._tasks))

    # ---- persistence ----

    def _load(self) -> list[Task]:
        raw = self._kv.get(TODOS_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.exception("Stored task list is not valid JSON; starting empty.")
            return []
        if not isinstance(data, list):
            return []

        out: list[Task] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                out.append(Task.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed stored task: %r", item)
        return out

    def _save(self) -> None:
        payload = json.dumps([t.to_dict() for t in self._tasks], ensure_ascii=False)
        self._kv.set(TODOS_KEY, payload)

    def _now(self) -> datetime:
        return self._clock()

    def _next_id(self, now: datetime) -> int:
        task_id = int(now.timestamp() * 1000)
        if self._tasks:
            # Two adds in the same millisecond must not share an id.
            task_id = max(task_id, max(t.id for t in self._tasks) + 1)
        return task_id

    # ---- queries ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def count(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def require(self, task_id: int) -> Task:
        task = self.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    # ---- mutations ----

    def add(
        self,
        text: str,
        *,
        start_time: datetime | None = None,
        deadline: datetime | None = None,
        reminder: datetime | None = None,
        location: str | None = None,
        starred: bool = False,
    ) -> Task:
        now = self._now()
        task = lifecycle.new_task(
            self._next_id(now),
            text,
            now,
            start_time=start_time,
            deadline=deadline,
            reminder=reminder,
            location=location,
            starred=starred,
            max_length=self._max_text_length,
        )
        self._tasks.insert(0, task)
        self._save()
        logger.debug("Task added id=%s start_time=%s deadline=%s", task.id, start_time, deadline)
        return task

    def edit(self, task_id: int, edit: TaskEdit) -> Task | None:
        task = self.get(task_id)
        if task is None:
            logger.debug("edit: task %s not found", task_id)
            return None
        lifecycle.apply_edit(task, edit, self._now(), self._max_text_length)
        self._save()
        return task

    def toggle(self, task_id: int) -> Task | None:
        task = self.get(task_id)
        if task is None:
            logger.debug("toggle: task %s not found", task_id)
            return None
        status = lifecycle.toggle(task, self._now())
        self._save()
        logger.debug("Task %s -> %s", task_id, status.value)
        return task

    def start(self, task_id: int) -> Task | None:
        task = self.get(task_id)
        if task is None:
            logger.debug("start: task %s not found", task_id)
            return None
        try:
            lifecycle.start(task, self._now())
        except InvalidTransitionError as e:
            logger.debug("start ignored: %s", e)
            return None
        self._save()
        return task

    def toggle_star(self, task_id: int) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        task.starred = not task.starred
        self._save()
        return task

    def delete(self, task_id: int) -> bool:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        if len(self._tasks) == before:
            return False
        self._save()
        logger.debug("Task deleted id=%s", task_id)
        return True

    def clear_completed(self) -> int:
        remaining = [t for t in self._tasks if not t.completed]
        removed = len(self._tasks) - len(remaining)
        if removed == 0:
            return 0
        self._tasks = remaining
        self._save()
        logger.info("Cleared %d completed task(s)", removed)
        return removed

    def seed_demo_once(self) -> bool:
        """
        Seed sample tasks on first run.

        The flag is set even when the store already holds tasks, so deleting the
        samples later never brings them back.
        """
        if self._kv.get(DEMO_FLAG_KEY):
            return False

        seeded = False
        if not self._tasks:
            now = self._now()
            for i, (text, done) in enumerate(DEMO_TEXTS, start=1):
                task = lifecycle.new_task(i, text, now, max_length=self._max_text_length)
                if done:
                    lifecycle.complete(task, now)
                self._tasks.append(task)
            self._save()
            seeded = True
            logger.info("Seeded %d demo task(s)", len(DEMO_TEXTS))

        self._kv.set(DEMO_FLAG_KEY, "true")
        return seeded
