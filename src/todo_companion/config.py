# src/todo_companion/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path

    # ---- Task rules ----
    max_text_length: int
    seed_demo: bool

    # ---- Reminder scanner ----
    reminder_interval_seconds: float
    reminder_lead_minutes: int
    deadline_lead_minutes: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo") or "todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")

        max_text_length = max(1, _env_int(_k("MAX_TEXT_LENGTH"), 100))
        seed_demo = _env_bool(_k("SEED_DEMO"), True)

        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)
        reminder_lead_minutes = _env_int(_k("REMINDER_LEAD_MINUTES"), 5)
        deadline_lead_minutes = _env_int(_k("DEADLINE_LEAD_MINUTES"), 60)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_db_path=store_db_path,
            max_text_length=max_text_length,
            seed_demo=seed_demo,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_lead_minutes=reminder_lead_minutes,
            deadline_lead_minutes=deadline_lead_minutes,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
