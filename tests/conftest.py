# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskplanner.cli.bootstrap import create_app_context
from taskplanner.core.state import AppContext
from taskplanner.storage.kv_store import InMemoryKeyValueStore

from .fakes import FakeClock, FakeNotificationSender, RecordingListener, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="taskplanner-test",
        data_dir=tmp_path,
        store_db_path=tmp_path / "planner.sqlite3",
        export_dir=tmp_path / "exports",
        storage_namespace="taskplanner",
        tick_interval_seconds=0.01,
        reminder_interval_seconds=0.01,
        reminder_deadline_hour=9,
        pomodoro_work_minutes=25,
        pomodoro_break_minutes=5,
        pomodoro_long_break_minutes=15,
        pomodoros_until_long_break=4,
        pomodoro_sound_enabled=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def sender() -> FakeNotificationSender:
    return FakeNotificationSender()


@pytest.fixture()
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture()
def ctx(
    settings: SimpleNamespace,
    kv: InMemoryKeyValueStore,
    sender: FakeNotificationSender,
    clock: FakeClock,
    listener: RecordingListener,
) -> AppContext:
    """
    AppContext wired with deterministic fakes.

    NOTE: the store, timer and reminder scheduler are the real ones; only the
    edges (storage backend, clock, ids, notification sender) are faked.
    """
    app = create_app_context(settings=settings, kv=kv, sender=sender, clock=clock, ids=SequentialIds("t"))
    app.hub.subscribe(listener)
    return app


@pytest.fixture()
def store(ctx: AppContext):
    return ctx.store
