# tests/test_reminder_scanner.py

from __future__ import annotations

import asyncio
import json
from datetime import timedelta

import pytest

from todo_companion.tasks.reminder_scanner import (
    FIRED_KEY,
    FiredNotificationLog,
    ReminderScanner,
    run_reminder_scanner,
)
from todo_companion.tasks.task_models import ReminderKind
from todo_companion.tasks.task_store import TodoStore

from .fakes import FlakyNotifier, ManualClock, MemoryKeyValueStore, RecordingNotifier


def _scanner(store: TodoStore, kv: MemoryKeyValueStore, notifier) -> ReminderScanner:
    return ReminderScanner(store, FiredNotificationLog(kv), notifier)


def test_reminder_fires_once_inside_window(
    store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock, notifier: RecordingNotifier
) -> None:
    task = store.add("Stand-up", reminder=clock.now + timedelta(minutes=10))
    scanner = _scanner(store, kv, notifier)

    assert scanner.scan(clock.now) == []  # 10 minutes away: too early

    clock.advance(minutes=6)
    fired = scanner.scan(clock.now)
    assert [n.kind for n in fired] == [ReminderKind.REMINDER]
    assert fired[0].task_id == task.id
    assert fired[0].target_at == task.reminder

    clock.advance(minutes=1)
    assert scanner.scan(clock.now) == []
    clock.advance(minutes=1)
    assert scanner.scan(clock.now) == []

    assert len(notifier.sent) == 1
    assert json.loads(kv.data[FIRED_KEY]) == [str(task.id)]


def test_window_bounds(store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock) -> None:
    exactly_five = store.add("edge", reminder=clock.now + timedelta(minutes=5))
    right_now = store.add("now", reminder=clock.now)
    notifier = RecordingNotifier()

    _scanner(store, kv, notifier).scan(clock.now)

    assert [n.task_id for n in notifier.sent] == [exactly_five.id]
    assert str(right_now.id) not in FiredNotificationLog(kv)


def test_missed_reminder_never_fires(store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock) -> None:
    store.add("missed", reminder=clock.now + timedelta(minutes=3))
    notifier = RecordingNotifier()
    scanner = _scanner(store, kv, notifier)

    clock.advance(minutes=4)
    scanner.scan(clock.now)

    assert notifier.sent == []


def test_completed_tasks_are_skipped(
    store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock, notifier: RecordingNotifier
) -> None:
    task = store.add(
        "done already",
        reminder=clock.now + timedelta(minutes=2),
        deadline=clock.now + timedelta(minutes=30),
    )
    store.toggle(task.id)

    assert _scanner(store, kv, notifier).scan(clock.now) == []


def test_deadline_warning_uses_its_own_key(
    store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock, notifier: RecordingNotifier
) -> None:
    task = store.add(
        "Report",
        reminder=clock.now + timedelta(minutes=4),
        deadline=clock.now + timedelta(minutes=90),
    )
    scanner = _scanner(store, kv, notifier)

    assert [n.kind for n in scanner.scan(clock.now)] == [ReminderKind.REMINDER]

    clock.advance(minutes=31)
    assert [n.kind for n in scanner.scan(clock.now)] == [ReminderKind.DEADLINE]
    assert scanner.scan(clock.now) == []

    assert json.loads(kv.data[FIRED_KEY]) == [str(task.id), f"deadline-{task.id}"]


def test_failed_notification_is_retried(store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock) -> None:
    store.add("Retry", reminder=clock.now + timedelta(minutes=5))
    notifier = FlakyNotifier(failures=1)
    scanner = _scanner(store, kv, notifier)

    assert scanner.scan(clock.now) == []
    assert FIRED_KEY not in kv.data

    clock.advance(minutes=1)
    assert len(scanner.scan(clock.now)) == 1
    assert len(notifier.sent) == 1


def test_fired_set_survives_restart_and_deletion(
    store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock
) -> None:
    task = store.add("Once", reminder=clock.now + timedelta(minutes=1))
    _scanner(store, kv, RecordingNotifier()).scan(clock.now)

    again = RecordingNotifier()
    _scanner(store, kv, again).scan(clock.now)
    assert again.sent == []

    store.delete(task.id)
    assert str(task.id) in FiredNotificationLog(kv)


def test_fired_log_reads_numeric_legacy_entries() -> None:
    kv = MemoryKeyValueStore({FIRED_KEY: json.dumps([1700000000000, "deadline-1700000000000"])})
    log = FiredNotificationLog(kv)

    assert "1700000000000" in log
    assert "deadline-1700000000000" in log
    assert len(log) == 2


@pytest.mark.asyncio
async def test_loop_scans_immediately_and_stops_on_event(
    store: TodoStore, kv: MemoryKeyValueStore, clock: ManualClock, notifier: RecordingNotifier
) -> None:
    store.add("Now-ish", reminder=clock.now + timedelta(minutes=2))
    scanner = _scanner(store, kv, notifier)
    stop = asyncio.Event()

    runner = asyncio.create_task(
        run_reminder_scanner(scanner, interval_seconds=0.01, clock=clock, stop_event=stop)
    )
    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_loop_survives_failing_scan_and_cancels(clock: ManualClock) -> None:
    calls: list[object] = []

    class BrokenScanner:
        def scan(self, now):
            calls.append(now)
            raise RuntimeError("boom")

    runner = asyncio.create_task(
        run_reminder_scanner(BrokenScanner(), interval_seconds=0.01, clock=clock)  # type: ignore[arg-type]
    )
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(calls) >= 2
