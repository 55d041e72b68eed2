# src/taskplanner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppContext, then starts:
- the background loop (Pomodoro ticker + reminder poller) in a thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..config import get_settings
from ..connectors.console_connector import ConsoleNotificationSender, run_console_loop
from ..logging_setup import setup_logging
from .background import start_background
from .bootstrap import create_app_context

logger = logging.getLogger(__name__)


def _shutdown(ctx) -> None:
    """Final write of the planner state (store writes through, this is a last flush)."""
    with ctx.lock:
        ctx.store.persist()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskplanner"))

    # IMPORTANT: reuse same settings object
    ctx = create_app_context(settings=settings, sender=ConsoleNotificationSender())

    runner = start_background(ctx)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if settings.console_enabled:
            run_console_loop(ctx)
            stop_main.set()
        else:
            try:
                signal.signal(signal.SIGINT, _handle_signal)
                signal.signal(signal.SIGTERM, _handle_signal)
            except (ValueError, OSError):
                # Not in the main thread, or the platform lacks SIGTERM.
                logger.debug("Signal handlers not installed.", exc_info=True)
            logger.info("Console disabled. Running timer and reminders only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=5.0)

        _shutdown(ctx)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
