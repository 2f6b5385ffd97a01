# src/todo_companion/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.reminder_scanner import FiredNotificationLog
from ..tasks.task_models import TaskFilter
from ..tasks.task_store import TodoStore
from .ports import Clock, KeyValueStore, Notifier, utc_now


@dataclass
class AppState:
    # Settings (or a compatible SimpleNamespace in tests).
    settings: Any

    kv: KeyValueStore
    store: TodoStore
    fired_log: FiredNotificationLog
    notifier: Notifier

    clock: Clock = utc_now
    current_filter: TaskFilter = TaskFilter.ALL

    # Serializes user commands and reminder scans.
    lock: threading.RLock = field(default_factory=threading.RLock)
