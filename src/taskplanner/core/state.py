# src/taskplanner/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.reminder_scheduler import ReminderScheduler
from ..pomodoro.timer import PomodoroTimer
from ..tasks.task_store import PlannerStore
from ..views.calendar_grid import MonthCursor
from .events import EventHub
from .ports import Clock


@dataclass
class AppContext:
    """
    Everything one running planner owns.

    Built once by the composition root (cli/bootstrap.py) and passed to every
    caller; there is no module-level planner state.

    `lock` serializes the console thread and the background loop (timer ticks,
    reminder polls) so each mutation runs to completion before the next.
    """

    # Settings object (config.Settings or a test double).
    settings: Any

    clock: Clock
    hub: EventHub
    store: PlannerStore
    timer: PomodoroTimer
    reminders: ReminderScheduler
    notifications: NotificationDispatcher

    # Month shown by the calendar view; None means "current month".
    calendar_month: MonthCursor | None = None

    lock: threading.RLock = field(default_factory=threading.RLock)
