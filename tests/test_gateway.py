# tests/test_gateway.py

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from taskplanner.core.errors import ImportValidationError
from taskplanner.pomodoro.settings import PomodoroSettings
from taskplanner.storage.gateway import (
    PersistedState,
    PersistenceGateway,
    build_export,
    default_export_filename,
    parse_import,
)
from taskplanner.storage.kv_store import InMemoryKeyValueStore, SqliteKeyValueStore
from taskplanner.tasks.task_api import export_data, import_data
from taskplanner.tasks.task_models import Priority, Project, Task, TaskDraft, TaskStatus, Theme, ViewMode

from .fakes import DEFAULT_NOW


def test_sqlite_kv_roundtrip_and_upsert(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "kv.sqlite3")
    assert kv.get("missing") is None

    kv.set("a", "1")
    kv.set("a", "2")
    kv.set("b", "x")
    assert kv.get("a") == "2"
    assert kv.count_keys() == 2

    kv.delete("a")
    assert kv.get("a") is None

    # A second handle on the same file sees the data.
    assert SqliteKeyValueStore(tmp_path / "kv.sqlite3").get("b") == "x"


def test_save_writes_namespaced_keys() -> None:
    kv = InMemoryKeyValueStore()
    gw = PersistenceGateway(kv, namespace="demo")
    gw.save(PersistedState(theme=Theme.DARK, current_project=None, notifications_enabled=True))

    assert kv.get("demo_theme") == "dark"
    assert kv.get("demo_view") == "kanban"
    assert kv.get("demo_currentProject") == ""
    assert kv.get("demo_notificationsEnabled") == "true"
    assert json.loads(kv.get("demo_tasks")) == []
    assert json.loads(kv.get("demo_pomodoroSettings"))["workDuration"] == 25


def test_load_missing_keys_gives_defaults() -> None:
    defaults = PomodoroSettings(work_duration=40)
    state = PersistenceGateway(InMemoryKeyValueStore(), default_settings=defaults).load()
    assert state.tasks == [] and state.projects == []
    assert state.theme == Theme.LIGHT and state.view == ViewMode.KANBAN
    assert state.current_project is None
    assert state.pomodoro_settings.work_duration == 40
    assert state.notifications_enabled is False


def test_load_tolerates_garbage() -> None:
    kv = InMemoryKeyValueStore(
        {
            "taskplanner_tasks": "{not json",
            "taskplanner_projects": json.dumps({"not": "a list"}),
            "taskplanner_theme": "purple",
            "taskplanner_view": "grid",
            "taskplanner_pomodoroSettings": json.dumps({"workDuration": 0, "breakDuration": 10}),
        }
    )
    state = PersistenceGateway(kv).load()
    assert state.tasks == [] and state.projects == []
    assert state.theme == Theme.LIGHT and state.view == ViewMode.KANBAN
    assert state.pomodoro_settings.work_duration == 25
    assert state.pomodoro_settings.break_duration == 10


def test_task_json_uses_camel_case_and_reads_back() -> None:
    t = Task(
        id="x",
        title="T",
        created_at="2024-05-15T12:00:00.000+00:00",
        project_id="p",
        priority=Priority.HIGH,
        status=TaskStatus.IN_PROGRESS,
        pomodoro_count=3,
    )
    raw = t.to_dict()
    assert raw["projectId"] == "p"
    assert raw["createdAt"].startswith("2024-05-15")
    assert raw["pomodoroCount"] == 3
    assert raw["completedAt"] is None

    back = Task.from_dict(raw)
    assert back == t


def test_task_from_dict_fills_defaults() -> None:
    t = Task.from_dict({"id": "x", "title": "T", "status": "weird", "priority": None, "tags": "nope"})
    assert t.status == TaskStatus.TODO
    assert t.priority == Priority.MEDIUM
    assert t.tags == []
    assert t.subtasks == []


def test_export_format() -> None:
    tasks = [Task(id="x", title="T", created_at="")]
    projects = [Project(id="p", name="P", created_at="")]
    payload = build_export(tasks, projects, now=DEFAULT_NOW)
    assert set(payload) == {"tasks", "projects", "exportDate", "version"}
    assert payload["version"] == "2.0"
    assert payload["exportDate"] == DEFAULT_NOW.isoformat()
    assert default_export_filename(date(2024, 5, 15)) == "taskplanner_backup_2024-05-15.json"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        json.dumps({"tasks": "nope"}),
        json.dumps({"tasks": [1]}),
        json.dumps({"projects": [{"id": "p"}, "x"]}),
    ],
)
def test_parse_import_rejects_bad_files(text: str) -> None:
    with pytest.raises(ImportValidationError):
        parse_import(text)


def test_parse_import_absent_keys_are_none() -> None:
    payload = parse_import(json.dumps({"projects": [{"id": "p", "name": "P"}]}))
    assert payload.tasks is None
    assert [p.name for p in payload.projects] == ["P"]


def test_export_then_import_restores(ctx, tmp_path: Path) -> None:
    p = ctx.store.create_project("Home")
    ctx.store.create_task(TaskDraft(title="one", project_id=p.id, tags=["x"]))

    path = export_data(ctx)
    assert path == tmp_path / "exports" / "taskplanner_backup_2024-05-15.json"

    ctx.store.clear_all()
    import_data(ctx, path)

    assert [t.title for t in ctx.store.tasks] == ["one"]
    assert ctx.store.tasks[0].project_id == p.id
    assert [x.name for x in ctx.store.projects] == ["Home"]


def test_failed_import_leaves_state_untouched(ctx, tmp_path: Path) -> None:
    ctx.store.create_task(TaskDraft(title="keep"))
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"tasks": [{"id": "a"}, 5]}), "utf-8")

    with pytest.raises(ImportValidationError):
        import_data(ctx, bad)
    assert [t.title for t in ctx.store.tasks] == ["keep"]


def test_import_missing_file(ctx, tmp_path: Path) -> None:
    with pytest.raises(ImportValidationError):
        import_data(ctx, tmp_path / "nope.json")
