# src/taskplanner/cli/background.py

"""
Background event loop for the time-driven parts of the planner.

Why a thread:
- console REPL is blocking (input()).
- the Pomodoro ticker and the reminder poller are async loops and want their own event loop.

Both loops take AppContext.lock for every iteration, so they never interleave
with a console command.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppContext
from ..notifications.reminder_scheduler import run_reminder_scheduler
from ..pomodoro.timer import run_pomodoro_ticker

logger = logging.getLogger(__name__)


@dataclass
class BackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal background stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


async def _run_background(ctx: AppContext, stop_event: asyncio.Event) -> None:
    settings = ctx.settings
    tasks = [
        asyncio.create_task(
            run_pomodoro_ticker(
                ctx.timer,
                lock=ctx.lock,
                interval_seconds=getattr(settings, "tick_interval_seconds", 1.0),
            ),
            name="pomodoro-ticker",
        ),
        asyncio.create_task(
            run_reminder_scheduler(
                ctx.reminders,
                lock=ctx.lock,
                interval_seconds=getattr(settings, "reminder_interval_seconds", 60.0),
            ),
            name="reminder-scheduler",
        ),
    ]
    try:
        await stop_event.wait()
    finally:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Background loops stopped.")


def start_background(ctx: AppContext) -> BackgroundRunner | None:
    """Start the ticker + reminder poller in a daemon thread."""
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_background(ctx, stop_event))
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="planner-background", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Background thread did not initialize properly.")
        return None

    logger.info("Background thread started.")
    return BackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
