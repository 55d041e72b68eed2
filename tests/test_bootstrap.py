# tests/test_bootstrap.py

from __future__ import annotations

import time

from taskplanner.cli.background import start_background
from taskplanner.cli.bootstrap import create_app_context
from taskplanner.pomodoro.timer import TimerPhase
from taskplanner.tasks.task_models import TaskDraft

from .fakes import FakeClock, FakeNotificationSender


def test_sqlite_backed_context_survives_restart(settings) -> None:
    first = create_app_context(settings=settings, sender=FakeNotificationSender())
    first.store.create_task(TaskDraft(title="persisted"))
    first.store.toggle_theme()

    assert settings.store_db_path.exists()
    assert settings.export_dir.is_dir()

    second = create_app_context(settings=settings, sender=FakeNotificationSender())
    assert [t.title for t in second.store.tasks] == ["persisted"]
    assert second.store.theme.value == "dark"


def test_settings_seed_pomodoro_defaults(settings, kv) -> None:
    settings.pomodoro_work_minutes = 45
    settings.pomodoros_until_long_break = 0
    ctx = create_app_context(settings=settings, kv=kv, sender=FakeNotificationSender(), clock=FakeClock())
    assert ctx.store.pomodoro_settings.work_duration == 45
    assert ctx.store.pomodoro_settings.pomodoros_until_long_break == 4
    assert ctx.timer.time_left == 45 * 60


def test_stored_notification_flag_dropped_without_permission(settings, kv) -> None:
    kv.set("taskplanner_notificationsEnabled", "true")
    ctx = create_app_context(settings=settings, kv=kv, sender=FakeNotificationSender(allowed=False))
    assert ctx.store.notifications_enabled is False
    assert kv.get("taskplanner_notificationsEnabled") == "false"


def test_background_runner_ticks_and_stops(ctx) -> None:
    with ctx.lock:
        ctx.timer.start()

    runner = start_background(ctx)
    assert runner is not None
    try:
        deadline = time.monotonic() + 5.0
        while time.monotonic() < deadline:
            with ctx.lock:
                if ctx.timer.time_left < 25 * 60:
                    break
            time.sleep(0.01)
    finally:
        runner.stop()
        runner.join(timeout=5.0)

    assert not runner.thread.is_alive()
    assert ctx.timer.time_left < 25 * 60
    assert ctx.timer.phase == TimerPhase.RUNNING
