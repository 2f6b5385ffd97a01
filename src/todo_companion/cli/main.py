# src/todo_companion/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder scanner in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.reminder_scanner import start_reminders_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        kv = getattr(state, "kv", None)
        if kv is not None and hasattr(kv, "close"):
            kv.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/todo")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "todo"))

    state = create_initial_state(settings=settings)

    reminders = start_reminders_in_background(state)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        # The console loop handles Ctrl+C itself (KeyboardInterrupt out of input()).
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if reminders is not None:
            reminders.stop()
            reminders.join(timeout=5.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
