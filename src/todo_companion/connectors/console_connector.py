# src/todo_companion/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.ports import Clock, utc_now
from ..core.state import AppState
from ..tasks.formatting import format_relative
from ..tasks.task_models import Notification, ReminderKind

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def format_notification(notification: Notification, now: datetime) -> str:
    when = format_relative(notification.target_at, now)
    if notification.kind == ReminderKind.DEADLINE:
        return f"[DEADLINE] {notification.text} (due {when}, less than 1 hour left!)"
    return f"[REMINDER] {notification.text} (at {when})"


class ConsoleNotifier:
    """
    Prints reminder/deadline alerts to the terminal.

    Alerts arrive from the reminder thread while input() is waiting,
    so each one is written as its own line and flushed.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def notify(self, notification: Notification) -> None:
        line = format_notification(notification, self._clock())
        sys.stdout.write(f"\n[{_ts_local()}] {line}\n")
        sys.stdout.flush()


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands, /list to see tasks, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Plain text is a shortcut for /add.
        line = user_input if user_input.startswith("/") else f"/add {user_input}"

        try:
            with state.lock:
                response = command_registry.handle(state, line, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
