# src/todo_companion/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/store/notifier),
- seeds the demo tasks on first run.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier
from ..core.ports import KeyValueStore, Notifier, utc_now
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.reminder_scanner import FiredNotificationLog
from ..tasks.task_store import TodoStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    kv: KeyValueStore | None = None,
    notifier: Notifier | None = None,
    clock=utc_now,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/storage/notifier injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.store_db_path)

    store = TodoStore(kv, clock=clock, max_text_length=settings.max_text_length)

    state = AppState(
        settings=settings,
        kv=kv,
        store=store,
        fired_log=FiredNotificationLog(kv),
        notifier=notifier if notifier is not None else ConsoleNotifier(clock),
        clock=clock,
    )

    if getattr(settings, "seed_demo", False):
        try:
            store.seed_demo_once()
        except Exception:
            logger.exception("Demo seeding failed.")

    return state
