# tests/test_commands.py

from __future__ import annotations

import json
from pathlib import Path

from taskplanner.cli.commands import CommandRegistry, registry
from taskplanner.connectors.console_connector import handle_line
from taskplanner.tasks.task_models import Priority, TaskStatus, ViewMode
from taskplanner.views.calendar_grid import MonthCursor

from .fakes import FakeNotificationSender


def test_command_registry_routes_2_and_3_params(ctx) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(ctx, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(ctx, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(ctx, "/a x y") == "h2:x,y"
    assert reg.handle(ctx, "/BEE", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(ctx) -> None:
    reg = CommandRegistry()
    assert reg.handle(ctx, "hello") is None
    assert "Unknown command" in (reg.handle(ctx, "/nope") or "")
    assert "Empty command" in (reg.handle(ctx, "/") or "")


def test_value_errors_become_replies(ctx) -> None:
    reg = CommandRegistry()

    def bad(ctx, args):
        raise ValueError("nope")

    reg.register("bad", bad, "bad")
    assert reg.handle(ctx, "/bad") == "Invalid input: nope"


def test_help_lists_commands(ctx) -> None:
    text = registry.handle(ctx, "/help") or ""
    for name in ("/add", "/move", "/timer", "/notify", "/export", "/import", "/cal"):
        assert name in text
    assert ">tomorrow" in text
    assert "due:" not in text


def test_bare_text_is_quick_add(ctx) -> None:
    ctx.store.create_project("Home")
    reply = handle_line(ctx, "Buy milk !h @home #errand >tomorrow")

    assert reply.startswith("Added")
    task = ctx.store.tasks[-1]
    assert task.title == "Buy milk"
    assert task.priority == Priority.HIGH
    assert task.project_id == ctx.store.projects[0].id
    assert task.deadline == "2024-05-16"


def test_tokens_only_adds_nothing(ctx) -> None:
    assert "empty" in handle_line(ctx, "!h #x")
    assert ctx.store.tasks == []


def test_blank_line_is_ignored(ctx) -> None:
    assert handle_line(ctx, "   ") is None


def test_add_into_other_column(ctx) -> None:
    registry.handle(ctx, "/add -s done Old thing")
    task = ctx.store.tasks[0]
    assert task.status == TaskStatus.DONE and task.completed is True


def test_done_move_and_rm(ctx) -> None:
    registry.handle(ctx, "/add first")
    registry.handle(ctx, "/add second")
    first, second = ctx.store.tasks

    assert "Completed" in registry.handle(ctx, f"/done {first.id}")
    assert first.status == TaskStatus.DONE

    registry.handle(ctx, f"/move {second.id} progress")
    assert second.status == TaskStatus.IN_PROGRESS

    assert "unknown status" in registry.handle(ctx, f"/move {second.id} sideways")

    assert "Deleted" in registry.handle(ctx, f"/rm {second.id}")
    assert ctx.store.get_task(second.id) is None


def test_edit_fields(ctx) -> None:
    registry.handle(ctx, "/add thing")
    t = ctx.store.tasks[0]

    registry.handle(ctx, f"/edit {t.id} title New name")
    registry.handle(ctx, f"/edit {t.id} priority low")
    registry.handle(ctx, f"/edit {t.id} due today")
    registry.handle(ctx, f"/edit {t.id} remind 30")
    registry.handle(ctx, f"/edit {t.id} tags a, #b")

    assert t.title == "New name"
    assert t.priority == Priority.LOW
    assert t.deadline == "2024-05-15"
    assert t.reminder == "30"
    assert t.tags == ["a", "b"]

    registry.handle(ctx, f"/edit {t.id} due -")
    assert t.deadline is None
    assert "Invalid input" in registry.handle(ctx, f"/edit {t.id} priority urgent")
    assert "Invalid input" in registry.handle(ctx, f"/edit {t.id} remind -3")
    assert "no such date" in registry.handle(ctx, f"/edit {t.id} due 2024-02-30")
    assert t.deadline is None


def test_project_commands(ctx) -> None:
    registry.handle(ctx, "/project add Side project #00ff00")
    p = ctx.store.projects[0]
    assert (p.name, p.color) == ("Side project", "#00ff00")

    registry.handle(ctx, "/project select side")
    assert ctx.store.current_project == p.id

    registry.handle(ctx, f"/project rename {p.id} Main")
    assert p.name == "Main"

    assert "Main" in registry.handle(ctx, "/project")

    registry.handle(ctx, "/project rm main")
    assert ctx.store.projects == []
    assert ctx.store.current_project is None


def test_view_filter_sort_theme(ctx) -> None:
    registry.handle(ctx, "/view")
    assert ctx.store.view == ViewMode.LIST
    registry.handle(ctx, "/view calendar")
    assert ctx.store.view == ViewMode.CALENDAR

    registry.handle(ctx, "/filter high")
    assert ctx.store.priority_filter.value == "high"
    assert "Invalid input" in registry.handle(ctx, "/filter urgent")

    registry.handle(ctx, "/sort deadline")
    assert ctx.store.sort_by.value == "deadline"

    assert "dark" in registry.handle(ctx, "/theme")

    registry.handle(ctx, "/search milk")
    assert ctx.store.search == "milk"
    assert "cleared" in registry.handle(ctx, "/search")


def test_board_and_list_render_tasks(ctx) -> None:
    registry.handle(ctx, "/add Visible task #tag")
    board = registry.handle(ctx, "/board")
    assert "To Do (1)" in board and "Visible task" in board and "#tag" in board
    assert "Visible task" in registry.handle(ctx, "/list")


def test_calendar_navigation(ctx) -> None:
    registry.handle(ctx, "/add Meeting >2024-05-20")
    text = registry.handle(ctx, "/cal")
    assert "May 2024" in text and "Meeting" in text

    assert "June 2024" in registry.handle(ctx, "/cal next")
    assert ctx.calendar_month == MonthCursor(2024, 6)
    registry.handle(ctx, "/cal today")
    assert ctx.calendar_month is None


def test_timer_commands(ctx) -> None:
    registry.handle(ctx, "/add Focus")
    t = ctx.store.tasks[0]

    text = registry.handle(ctx, f"/timer start {t.id}")
    assert "running" in text and "Focus" in text
    assert "paused" in registry.handle(ctx, "/timer pause")
    assert "idle" in registry.handle(ctx, "/timer stop")

    registry.handle(ctx, "/timer set work 50")
    assert ctx.store.pomodoro_settings.work_duration == 50
    assert "50:00" in registry.handle(ctx, "/timer")
    assert "Invalid input" in registry.handle(ctx, "/timer set work 0")


def test_notify_on_off(ctx, sender: FakeNotificationSender) -> None:
    assert registry.handle(ctx, "/notify on") == "Notifications enabled."
    assert ctx.store.notifications_enabled is True
    registry.handle(ctx, "/notify off")
    assert ctx.store.notifications_enabled is False

    sender.allowed = False
    assert "denied" in registry.handle(ctx, "/notify on")


def test_export_import_commands(ctx, tmp_path: Path) -> None:
    registry.handle(ctx, "/add Saved")
    target = tmp_path / "backup.json"
    assert str(target) in registry.handle(ctx, f"/export {target}")
    assert json.loads(target.read_text("utf-8"))["version"] == "2.0"

    bad = tmp_path / "bad.json"
    bad.write_text("[]", "utf-8")
    assert "Invalid file" in registry.handle(ctx, f"/import {bad}")
    assert len(ctx.store.tasks) == 1

    registry.handle(ctx, "/clear yes")
    assert ctx.store.tasks == []
    assert "Imported tasks=1" in registry.handle(ctx, f"/import {target}")


def test_clear_requires_confirmation(ctx) -> None:
    registry.handle(ctx, "/add Keep")
    assert "confirm" in registry.handle(ctx, "/clear")
    assert len(ctx.store.tasks) == 1


def test_stats_and_subtasks(ctx) -> None:
    registry.handle(ctx, "/add Parent")
    t = ctx.store.tasks[0]
    registry.handle(ctx, f"/sub add {t.id} step one")
    sub = t.subtasks[0]

    detail = registry.handle(ctx, f"/sub toggle {t.id} {sub.id}")
    assert "[x]" in detail and "1/1 (100%)" in detail

    assert "Total: 1" in registry.handle(ctx, "/stats")
    assert registry.handle(ctx, f"/sub rm {t.id} {sub.id}") == "Subtask removed."
