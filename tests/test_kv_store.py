# tests/test_kv_store.py

from __future__ import annotations

from pathlib import Path

from todo_companion.storage.kv_store import SqliteKeyValueStore
from todo_companion.tasks.task_store import TodoStore

from .fakes import ManualClock


def test_get_set_overwrite(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "store.sqlite3")

    assert kv.get("todos") is None
    kv.set("todos", "[]")
    kv.set("todos", '[{"id": 1}]')
    kv.set("hasSeenDemo", "true")

    assert kv.get("todos") == '[{"id": 1}]'
    assert kv.count_keys() == 2


def test_store_survives_restart(tmp_path: Path, clock: ManualClock) -> None:
    db = tmp_path / "nested" / "store.sqlite3"
    store = TodoStore(SqliteKeyValueStore(db), clock=clock)
    task = store.add("Persist me", location="Desk")
    store.toggle_star(task.id)

    again = TodoStore(SqliteKeyValueStore(db), clock=clock)
    assert [t.to_dict() for t in again.tasks] == [task.to_dict()]
