# src/taskplanner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppContext (storage/clock/ids/notifications),
- loads the stored planner state.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.events import EventHub
from ..core.ids import TimeRandomIdGenerator
from ..core.ports import Clock, IdGenerator, KeyValueStore, NotificationSender
from ..core.state import AppContext
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.reminder_scheduler import DEFAULT_DEADLINE_HOUR, ReminderScheduler
from ..pomodoro.settings import PomodoroSettings
from ..pomodoro.timer import PomodoroTimer
from ..storage.gateway import PersistenceGateway
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_store import PlannerStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)


def default_pomodoro_settings(settings) -> PomodoroSettings:
    return PomodoroSettings(
        work_duration=getattr(settings, "pomodoro_work_minutes", 25),
        break_duration=getattr(settings, "pomodoro_break_minutes", 5),
        long_break_duration=getattr(settings, "pomodoro_long_break_minutes", 15),
        pomodoros_until_long_break=getattr(settings, "pomodoros_until_long_break", 4),
        sound_enabled=getattr(settings, "pomodoro_sound_enabled", True),
    ).normalized()


def create_app_context(
    *,
    settings=None,
    kv: KeyValueStore | None = None,
    sender: NotificationSender,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> AppContext:
    """
    Create AppContext from the provided settings and collaborators.

    Keeping collaborators injectable makes the app easier to test and avoids hidden global state.
    If settings is None, falls back to get_settings(); if kv is None, opens the SQLite store.
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.store_db_path)

    clock = clock or SystemClock()
    hub = EventHub()
    defaults = default_pomodoro_settings(settings)

    gateway = PersistenceGateway(
        kv,
        namespace=getattr(settings, "storage_namespace", "taskplanner"),
        default_settings=defaults,
    )
    store = PlannerStore(
        gateway,
        hub=hub,
        clock=clock,
        ids=ids or TimeRandomIdGenerator(),
        default_settings=defaults,
    )
    store.load()

    timer = PomodoroTimer(store, hub)
    reminders = ReminderScheduler(
        store,
        hub,
        clock,
        deadline_hour=getattr(settings, "reminder_deadline_hour", DEFAULT_DEADLINE_HOUR),
    )
    dispatcher = NotificationDispatcher(store, sender)
    hub.subscribe(dispatcher)

    if store.notifications_enabled and not dispatcher.permission_granted:
        # Stored flag from an earlier session, but the sender cannot deliver now.
        logger.warning("Notifications were enabled but permission is missing; disabling.")
        store.set_notifications_enabled(False)

    return AppContext(
        settings=settings,
        clock=clock,
        hub=hub,
        store=store,
        timer=timer,
        reminders=reminders,
        notifications=dispatcher,
    )
