# src/todo_companion/tasks/formatting.py

from __future__ import annotations

import re
from datetime import datetime, timedelta

_RELATIVE_RE = re.compile(r"^\+(\d+)\s*([mhd])$", re.IGNORECASE)
_OFFSETS = {"m": "minutes", "h": "hours", "d": "days"}


def format_relative(when: datetime, now: datetime) -> str:
    """
    Human-readable instant relative to now, in now's timezone.

    Today/Tomorrow/Yesterday with the time, "in N days" up to a week ahead,
    otherwise an absolute date.
    """
    if now.tzinfo is not None:
        when = when.astimezone(now.tzinfo)
    hhmm = when.strftime("%H:%M")

    days = (when.date() - now.date()).days
    if days == 0:
        return f"Today {hhmm}"
    if days == 1:
        return f"Tomorrow {hhmm}"
    if days == -1:
        return f"Yesterday {hhmm}"
    if 1 < days <= 7:
        return f"in {days} days {hhmm}"
    return when.strftime("%Y-%m-%d %H:%M")


def parse_when(raw: str, now: datetime) -> datetime:
    """
    Parse a console time value.

    Accepted: "YYYY-MM-DD HH:MM", "YYYY-MM-DDTHH:MM", "HH:MM" (today),
    "+30m" / "+2h" / "+1d". Naive values take now's timezone.
    Raises ValueError for anything else.
    """
    text = (raw or "").strip()
    if not text:
        raise ValueError("empty time value")

    m = _RELATIVE_RE.match(text)
    if m:
        amount, unit = int(m.group(1)), m.group(2).lower()
        return now + timedelta(**{_OFFSETS[unit]: amount})

    local_now = now.astimezone() if now.tzinfo is None else now
    if re.fullmatch(r"\d{1,2}:\d{2}", text):
        hour, minute = (int(p) for p in text.split(":"))
        return local_now.replace(hour=hour, minute=minute, second=0, microsecond=0)

    value = datetime.fromisoformat(text.replace(" ", "T", 1))
    if value.tzinfo is None:
        value = value.replace(tzinfo=local_now.tzinfo)
    return value
