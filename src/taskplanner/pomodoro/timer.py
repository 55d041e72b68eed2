# src/taskplanner/pomodoro/timer.py

"""
Pomodoro timer.

A plain state machine driven by tick() calls, plus one recurring asyncio
driver (run_pomodoro_ticker) that calls tick() once per second.

    idle --start--> running(work) --pause--> paused(work) --start--> running(work)
    any  --stop---> idle

While running, reaching zero chains straight into the next mode:

    work      -> break, or longBreak every N-th completed work session
    break     -> work
    longBreak -> work

The driver is started once and never re-created; when the timer is idle or
paused, tick() is a no-op, which is how stop() halts the countdown at once.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import StrEnum

from ..core.events import EventHub
from ..tasks.task_store import PlannerStore
from .settings import PomodoroSettings

logger = logging.getLogger(__name__)


class TimerMode(StrEnum):
    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "longBreak"


class TimerPhase(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


TRANSITION_MESSAGES = {
    TimerMode.BREAK: "Time for a short break!",
    TimerMode.LONG_BREAK: "Time for a long break!",
    TimerMode.WORK: "Break is over, back to work!",
}


@dataclass(slots=True, frozen=True)
class TimerSnapshot:
    phase: TimerPhase
    mode: TimerMode
    time_left: int
    completed_pomodoros: int
    current_task_id: str | None
    current_task_title: str | None


class PomodoroTimer:
    def __init__(self, store: PlannerStore, hub: EventHub) -> None:
        self._store = store
        self._hub = hub

        self.is_running = False
        self.is_paused = False
        self.current_task_id: str | None = None
        self.mode = TimerMode.WORK
        self.completed_pomodoros = 0
        self.time_left = self._duration_seconds(TimerMode.WORK)

        store.add_task_deleted_hook(self._on_task_deleted)

    # ---- helpers ----

    @property
    def settings(self) -> PomodoroSettings:
        return self._store.pomodoro_settings

    def _duration_seconds(self, mode: TimerMode) -> int:
        s = self.settings
        if mode == TimerMode.BREAK:
            return s.break_duration * 60
        if mode == TimerMode.LONG_BREAK:
            return s.long_break_duration * 60
        return s.work_duration * 60

    @property
    def phase(self) -> TimerPhase:
        if not self.is_running:
            return TimerPhase.IDLE
        return TimerPhase.PAUSED if self.is_paused else TimerPhase.RUNNING

    def snapshot(self) -> TimerSnapshot:
        task = self._store.get_task(self.current_task_id)
        return TimerSnapshot(
            phase=self.phase,
            mode=self.mode,
            time_left=self.time_left,
            completed_pomodoros=self.completed_pomodoros,
            current_task_id=self.current_task_id if task else None,
            current_task_title=task.title if task else None,
        )

    def _on_task_deleted(self, task_id: str) -> None:
        if self.current_task_id == task_id:
            logger.info("Bound task %s deleted; stopping timer.", task_id)
            self.stop()

    # ---- transitions ----

    def start(self, task_id: str | None = None) -> None:
        if task_id:
            if self._store.get_task(task_id) is None:
                logger.warning("start: unknown task id=%s; not binding.", task_id)
            else:
                self.current_task_id = task_id

        if not self.is_running:
            self.is_running = True
            self.is_paused = False
            logger.info("Timer started mode=%s time_left=%s task=%s", self.mode.value, self.time_left, self.current_task_id)
        elif self.is_paused:
            self.is_paused = False
            logger.info("Timer resumed mode=%s time_left=%s", self.mode.value, self.time_left)
        self._hub.state_changed()

    def pause(self) -> bool:
        if not self.is_running or self.is_paused:
            return False
        self.is_paused = True
        logger.info("Timer paused time_left=%s", self.time_left)
        self._hub.state_changed()
        return True

    def stop(self) -> None:
        self.is_running = False
        self.is_paused = False
        self.current_task_id = None
        self.mode = TimerMode.WORK
        self.time_left = self._duration_seconds(TimerMode.WORK)
        logger.info("Timer stopped.")
        self._hub.state_changed()

    def tick(self) -> None:
        """One elapsed second. No-op unless running."""
        if self.phase != TimerPhase.RUNNING:
            return
        self.time_left = max(0, self.time_left - 1)
        if self.time_left == 0:
            self._advance()
        self._hub.state_changed()

    def _advance(self) -> None:
        if self.settings.sound_enabled:
            self._hub.audible_alert()

        if self.mode == TimerMode.WORK:
            self.completed_pomodoros += 1
            if self.current_task_id and not self._store.increment_pomodoro(self.current_task_id):
                # Weak reference: the task is gone.
                self.current_task_id = None
            if self.completed_pomodoros % self.settings.pomodoros_until_long_break == 0:
                next_mode = TimerMode.LONG_BREAK
            else:
                next_mode = TimerMode.BREAK
        else:
            next_mode = TimerMode.WORK

        logger.info(
            "Timer %s -> %s (completed=%d)", self.mode.value, next_mode.value, self.completed_pomodoros
        )
        self.mode = next_mode
        self.time_left = self._duration_seconds(next_mode)
        self._hub.notify("Pomodoro", TRANSITION_MESSAGES[next_mode])

    def update_settings(self, settings: PomodoroSettings) -> None:
        """Persist new settings; an idle timer picks up the new work duration."""
        self._store.set_pomodoro_settings(settings)
        if not self.is_running:
            self.time_left = self._duration_seconds(TimerMode.WORK)
            self._hub.state_changed()


async def run_pomodoro_ticker(
    timer: PomodoroTimer,
    *,
    lock: threading.RLock | None = None,
    interval_seconds: float = 1.0,
) -> None:
    """
    Fixed-period tick driver.

    Each tick runs to completion (under `lock` when given) before the next
    sleep starts, so ticks never overlap. Cancel the coroutine to stop it.
    """
    sleep_s = max(0.01, float(interval_seconds))
    while True:
        await asyncio.sleep(sleep_s)
        try:
            if lock is not None:
                with lock:
                    timer.tick()
            else:
                timer.tick()
        except Exception:
            logger.exception("Pomodoro tick failed")
