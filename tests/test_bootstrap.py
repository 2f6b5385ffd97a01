# tests/test_bootstrap.py

from __future__ import annotations

import time
from datetime import timedelta
from types import SimpleNamespace

from todo_companion.cli.bootstrap import create_initial_state
from todo_companion.storage.kv_store import SqliteKeyValueStore
from todo_companion.tasks.reminder_scanner import start_reminders_in_background
from todo_companion.tasks.task_api import set_filter, stats_line, visible_tasks
from todo_companion.tasks.task_models import TaskFilter

from .fakes import ManualClock, MemoryKeyValueStore, RecordingNotifier


def test_bootstrap_uses_sqlite_and_seeds_demo(settings: SimpleNamespace, clock: ManualClock) -> None:
    settings.seed_demo = True
    state = create_initial_state(settings=settings, notifier=RecordingNotifier(), clock=clock)

    assert isinstance(state.kv, SqliteKeyValueStore)
    assert settings.store_db_path.exists()
    assert stats_line(state) == "3 task(s) (2 active, 1 completed)"

    # Second start on the same data: no reseed even after deleting everything.
    for t in state.store.tasks:
        state.store.delete(t.id)
    again = create_initial_state(settings=settings, notifier=RecordingNotifier(), clock=clock)
    assert again.store.count() == 0


def test_task_api_filter_projection(state) -> None:
    state.store.add("plain")
    starred = state.store.add("important", starred=True)

    assert set_filter(state, "starred") == TaskFilter.STARRED
    assert visible_tasks(state) == [starred]
    assert set_filter(state, "unknown") == TaskFilter.ALL
    assert len(visible_tasks(state)) == 2


def test_background_runner_fires_and_stops(settings: SimpleNamespace, clock: ManualClock) -> None:
    notifier = RecordingNotifier()
    state = create_initial_state(settings=settings, kv=MemoryKeyValueStore(), notifier=notifier, clock=clock)
    state.store.add("Soon", reminder=clock.now + timedelta(minutes=3))

    runner = start_reminders_in_background(state)
    assert runner is not None
    try:
        deadline = time.monotonic() + 2.0
        while not notifier.sent and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        runner.stop()
        runner.join(timeout=2.0)

    assert len(notifier.sent) == 1
    assert not runner.thread.is_alive()
