# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_companion.cli.bootstrap import create_initial_state
from todo_companion.core.state import AppState
from todo_companion.tasks.task_store import TodoStore

from .fakes import T0, ManualClock, MemoryKeyValueStore, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        max_text_length=100,
        seed_demo=False,
        reminder_interval_seconds=0.01,
        reminder_lead_minutes=5,
        deadline_lead_minutes=60,
    )


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def store(kv: MemoryKeyValueStore, clock: ManualClock) -> TodoStore:
    return TodoStore(kv, clock=clock)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    kv: MemoryKeyValueStore,
    notifier: RecordingNotifier,
    clock: ManualClock,
) -> AppState:
    """
    AppState wired with deterministic fakes (in-memory storage, manual clock).
    """
    return create_initial_state(settings=settings, kv=kv, notifier=notifier, clock=clock)
