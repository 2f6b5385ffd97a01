# src/todo_companion/tasks/reminder_scanner.py

from __future__ import annotations

"""
Reminder scanner.

A small polling loop that:
- reads the task list (never mutates it),
- fires a reminder once when a task's reminder is at most 5 minutes away,
- fires a deadline warning once when a task's deadline is at most 60 minutes away,
- records every fired alert in a persisted set so it is never shown twice.

An instant that passes while nothing is polling is never alerted.
How an alert looks belongs to the notifier, not the scanner.
"""

import asyncio
import contextlib
import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..core.ports import Clock, KeyValueStore, Notifier, utc_now
from .task_models import Notification, ReminderKind, Task
from .task_store import TodoStore

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

FIRED_KEY = "remindedTasks"

DEFAULT_REMINDER_LEAD = timedelta(minutes=5)
DEFAULT_DEADLINE_LEAD = timedelta(minutes=60)


def reminder_key(task_id: int) -> str:
    return str(task_id)


def deadline_key(task_id: int) -> str:
    return f"deadline-{task_id}"


class FiredNotificationLog:
    """
    Persisted set of alert keys that already fired.

    Entries are never removed, not even when the task is deleted.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._keys: set[str] = set()
        self._order: list[str] = []
        for key in self._load():
            if key not in self._keys:
                self._keys.add(key)
                self._order.append(key)

    def _load(self) -> list[str]:
        raw = self._kv.get(FIRED_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.exception("Stored fired-notification set is not valid JSON; starting empty.")
            return []
        if not isinstance(data, list):
            return []
        # Older payloads stored plain reminder ids as numbers.
        return [str(item) for item in data if isinstance(item, (str, int))]

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def keys(self) -> list[str]:
        return list(self._order)

    def add(self, key: str) -> None:
        if key in self._keys:
            return
        self._keys.add(key)
        self._order.append(key)
        self._kv.set(FIRED_KEY, json.dumps(self._order, ensure_ascii=False))


def _in_window(target: datetime | None, now: datetime, lead: timedelta) -> bool:
    if target is None:
        return False
    remaining = target - now
    return timedelta(0) < remaining <= lead


class ReminderScanner:
    def __init__(
        self,
        store: TodoStore,
        fired: FiredNotificationLog,
        notifier: Notifier,
        *,
        reminder_lead: timedelta = DEFAULT_REMINDER_LEAD,
        deadline_lead: timedelta = DEFAULT_DEADLINE_LEAD,
    ) -> None:
        self._store = store
        self._fired = fired
        self._notifier = notifier
        self._reminder_lead = reminder_lead
        self._deadline_lead = deadline_lead

    def _fire(self, key: str, notification: Notification) -> bool:
        try:
            self._notifier.notify(notification)
        except Exception:
            # Not recorded: the next tick retries while still inside the window.
            logger.exception(
                "notify failed task_id=%s kind=%s", notification.task_id, notification.kind.value
            )
            return False
        self._fired.add(key)
        logger.info("Fired %s for task %s", notification.kind.value, notification.task_id)
        return True

    def _check_task(self, task: Task, now: datetime) -> list[Notification]:
        if task.completed:
            return []

        checks = (
            (reminder_key(task.id), task.reminder, self._reminder_lead, ReminderKind.REMINDER),
            (deadline_key(task.id), task.deadline, self._deadline_lead, ReminderKind.DEADLINE),
        )

        out: list[Notification] = []
        for key, target, lead, kind in checks:
            if target is None or key in self._fired or not _in_window(target, now, lead):
                continue
            n = Notification(task_id=task.id, text=task.text, target_at=target, kind=kind)
            if self._fire(key, n):
                out.append(n)
        return out

    def scan(self, now: datetime) -> list[Notification]:
        """Run one pass over the store; return the alerts fired by this pass."""
        fired: list[Notification] = []
        for task in self._store.tasks:
            fired.extend(self._check_task(task, now))
        return fired


async def run_reminder_scanner(
        scanner: ReminderScanner,
        *,
        interval_seconds: float = 60.0,
        clock: Clock = utc_now,
        lock: threading.RLock | None = None,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling loop.

    Scans once immediately, then every interval_seconds.
    A failed pass is logged and the loop keeps going.

    To stop the loop, cancel the coroutine/task or set stop_event.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        now = clock()
        try:
            if lock is not None:
                with lock:
                    scanner.scan(now)
            else:
                scanner.scan(now)
        except Exception:
            logger.exception("reminder scan failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal reminder loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def build_scanner(state: AppState) -> ReminderScanner:
    settings = state.settings
    return ReminderScanner(
        state.store,
        state.fired_log,
        state.notifier,
        reminder_lead=timedelta(minutes=int(getattr(settings, "reminder_lead_minutes", 5))),
        deadline_lead=timedelta(minutes=int(getattr(settings, "deadline_lead_minutes", 60))),
    )


def start_reminders_in_background(state: AppState) -> ReminderBackgroundRunner | None:
    """
    Start the reminder loop in a background thread.

    The console REPL blocks the main thread on input(); scans and user commands
    are serialized through state.lock so each sees a coherent task list.
    """
    scanner = build_scanner(state)
    interval = float(getattr(state.settings, "reminder_interval_seconds", 60.0))

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_reminder_scanner(
                    scanner,
                    interval_seconds=interval,
                    clock=state.clock,
                    lock=state.lock,
                    stop_event=stop_event,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="reminder-scanner", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started (interval=%ss).", interval)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
