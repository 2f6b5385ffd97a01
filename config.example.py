# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TODO_CONSOLE_ENABLED": "Run the console REPL (true/false). When false only reminders run.",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory, also holds todo.log (default: .local/todo).",
    "TODO_STORE_DB_PATH": "Key-value SQLite path (default: <data_dir>/store.sqlite3).",
    # Task rules
    "TODO_MAX_TEXT_LENGTH": "Maximum task text length after trimming (default: 100).",
    "TODO_SEED_DEMO": "Seed sample tasks on the very first run (default: true).",
    # Reminder scanner
    "TODO_REMINDER_INTERVAL_SECONDS": "Polling interval of the reminder scanner (default: 60).",
    "TODO_REMINDER_LEAD_MINUTES": "Reminder alert window before the reminder time (default: 5).",
    "TODO_DEADLINE_LEAD_MINUTES": "Deadline warning window before the deadline (default: 60).",
}
