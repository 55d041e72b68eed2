# src/taskplanner/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.events import NullListener
from ..core.state import AppContext
from ..tasks.task_api import quick_add
from .console_render import short_id

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotificationSender:
    """
    NotificationSender for a terminal session.

    There is no OS permission prompt here: permission is granted unless the
    session was started with notifications blocked.
    """

    def __init__(self, *, allowed: bool = True) -> None:
        self._allowed = allowed

    def request_permission(self) -> bool:
        return self._allowed

    def permission_granted(self) -> bool:
        return self._allowed

    def send(self, title: str, body: str) -> None:
        _print_ts(f"[{title}] {body}")


class ConsoleListener(NullListener):
    """Prints warnings and beeps; the REPL redraws on demand, not on every change."""

    def on_audible_alert(self) -> None:
        try:
            sys.stdout.write("\a")
            sys.stdout.flush()
        except OSError:
            logger.debug("Beep failed.", exc_info=True)

    def on_warning(self, message: str) -> None:
        _print_ts(f"[WARN] {message}")


def handle_line(ctx: AppContext, line: str, emit=None) -> str | None:
    """
    One REPL line: a /command, or quick-add text.

    Returns the reply to print (None for blank input).
    """
    line = line.strip()
    if not line:
        return None

    with ctx.lock:
        reply = command_registry.handle(ctx, line, emit=emit)
        if reply is not None:
            return reply

        task = quick_add(ctx, line)
    if task is None:
        return "Task title is empty; nothing added."
    return f"Added {short_id(task.id)}: {task.title}"


def run_console_loop(ctx: AppContext) -> None:
    logger.info("Console connector started (tasks=%d).", len(ctx.store.tasks))
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    listener = ConsoleListener()
    ctx.hub.subscribe(listener)

    def emit(text: str) -> None:
        _print_ts(text)

    try:
        with ctx.lock:
            print(command_registry.handle(ctx, "/show"))

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

            try:
                reply = handle_line(ctx, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is not None:
                print(reply, flush=True)
    finally:
        ctx.hub.unsubscribe(listener)

    logger.info("Console connector finished.")
