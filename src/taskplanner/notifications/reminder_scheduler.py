# src/taskplanner/notifications/reminder_scheduler.py

"""
Deadline reminder scheduler.

A small polling loop that, while notifications are enabled:
- looks at every incomplete task with a deadline and a reminder lead time,
- treats the deadline as <deadline date> at a fixed hour (09:00 local by default),
- emits one notification when now is in [deadline - lead time, deadline).

Each task is reminded at most once per process lifetime. The set of reminded
tasks is not persisted, so a restart can remind again.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from ..core.events import EventHub
from ..core.ports import Clock
from ..tasks.task_models import Task
from ..tasks.task_store import PlannerStore

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_HOUR = 9


def reminder_message(minutes: int) -> str:
    if minutes == 0:
        return "Due now!"
    if minutes < 60:
        return f"Due in {minutes} minutes"
    if minutes < 1440:
        hours = int(minutes / 60 + 0.5)
        return f"Due in {hours} hour(s)"
    return "Due tomorrow"


def _is_local_offset(now: datetime) -> bool:
    return now.replace(tzinfo=None).astimezone().utcoffset() == now.utcoffset()


def parse_lead_minutes(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        minutes = int(str(raw).strip())
    except ValueError:
        return None
    return minutes if minutes >= 0 else None


@dataclass(slots=True, frozen=True)
class DueReminder:
    task: Task
    minutes: int
    deadline_at: datetime


class ReminderScheduler:
    def __init__(
        self,
        store: PlannerStore,
        hub: EventHub,
        clock: Clock,
        *,
        deadline_hour: int = DEFAULT_DEADLINE_HOUR,
    ) -> None:
        self._store = store
        self._hub = hub
        self._clock = clock
        self._deadline_hour = min(23, max(0, int(deadline_hour)))
        self.notified: set[str] = set()

    def deadline_instant(self, deadline: str, now: datetime) -> datetime | None:
        """
        The deadline day at the reminder hour, in the same zone as `now`.

        The UTC offset is the one in force on the deadline day, so a daylight
        saving change between now and then does not shift the instant.
        """
        try:
            day = date.fromisoformat(deadline)
        except ValueError:
            return None
        wall = datetime.combine(day, time(self._deadline_hour))
        tz = now.tzinfo
        if tz is None:
            return wall
        if isinstance(tz, timezone) and now.tzname() != "UTC" and _is_local_offset(now):
            # Fixed offset from astimezone(): let the local zone pick the offset for that day.
            return wall.astimezone()
        return wall.replace(tzinfo=tz)

    def due_reminders(self, now: datetime) -> list[DueReminder]:
        """Tasks whose reminder window contains `now` and that were not reminded yet."""
        out: list[DueReminder] = []
        for task in self._store.tasks:
            if task.completed or not task.deadline or not task.reminder:
                continue
            if task.id in self.notified:
                continue
            minutes = parse_lead_minutes(task.reminder)
            if minutes is None:
                logger.debug("Skipping task %s: bad reminder %r", task.id, task.reminder)
                continue
            deadline_at = self.deadline_instant(task.deadline, now)
            if deadline_at is None:
                logger.debug("Skipping task %s: bad deadline %r", task.id, task.deadline)
                continue
            remind_at = deadline_at - timedelta(minutes=minutes)
            if remind_at <= now < deadline_at:
                out.append(DueReminder(task=task, minutes=minutes, deadline_at=deadline_at))
        return out

    def check(self, now: datetime | None = None) -> list[str]:
        """
        One poll. Returns the ids of tasks reminded by this call.

        Does nothing while notifications are disabled.
        """
        if not self._store.notifications_enabled:
            return []
        now = now or self._clock.now()
        sent: list[str] = []
        for due in self.due_reminders(now):
            self._hub.notify(f"Reminder: {due.task.title}", reminder_message(due.minutes))
            self.notified.add(due.task.id)
            sent.append(due.task.id)
        if sent:
            logger.info("Sent %d reminder(s): %s", len(sent), ", ".join(sent))
        return sent


async def run_reminder_scheduler(
        scheduler: ReminderScheduler,
        *,
        lock: threading.RLock | None = None,
        interval_seconds: float = 60.0,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds run scheduler.check() (under `lock` when given).
    The first poll happens immediately. To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            if lock is not None:
                with lock:
                    scheduler.check()
            else:
                scheduler.check()
        except Exception:
            logger.exception("Reminder check failed")

        await asyncio.sleep(sleep_s)
