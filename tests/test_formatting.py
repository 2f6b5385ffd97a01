# tests/test_formatting.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from todo_companion.connectors.console_connector import format_notification
from todo_companion.tasks.formatting import format_relative, parse_when
from todo_companion.tasks.task_models import Notification, ReminderKind

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("when", "expected"),
    [
        (NOW.replace(hour=18, minute=5), "Today 18:05"),
        (NOW + timedelta(days=1), "Tomorrow 12:00"),
        (NOW - timedelta(days=1), "Yesterday 12:00"),
        (NOW + timedelta(days=3), "in 3 days 12:00"),
        (NOW + timedelta(days=7), "in 7 days 12:00"),
        (NOW + timedelta(days=8), "2025-03-18 12:00"),
        (NOW - timedelta(days=5), "2025-03-05 12:00"),
    ],
)
def test_format_relative(when: datetime, expected: str) -> None:
    assert format_relative(when, NOW) == expected


def test_parse_when_forms() -> None:
    assert parse_when("+30m", NOW) == NOW + timedelta(minutes=30)
    assert parse_when("+2h", NOW) == NOW + timedelta(hours=2)
    assert parse_when("+1d", NOW) == NOW + timedelta(days=1)
    assert parse_when("18:30", NOW) == NOW.replace(hour=18, minute=30)
    assert parse_when("2025-04-01 09:15", NOW) == datetime(2025, 4, 1, 9, 15, tzinfo=UTC)
    with pytest.raises(ValueError):
        parse_when("soon", NOW)


def test_format_notification_kinds() -> None:
    reminder = Notification(
        task_id=1, text="Call mom", target_at=NOW + timedelta(minutes=4), kind=ReminderKind.REMINDER
    )
    deadline = Notification(
        task_id=1, text="Report", target_at=NOW + timedelta(minutes=40), kind=ReminderKind.DEADLINE
    )

    assert format_notification(reminder, NOW) == "[REMINDER] Call mom (at Today 12:04)"
    assert format_notification(deadline, NOW).startswith("[DEADLINE] Report (due Today 12:40")
