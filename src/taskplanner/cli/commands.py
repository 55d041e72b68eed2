# src/taskplanner/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..connectors.console_render import (
    render_calendar,
    render_current_view,
    render_kanban,
    render_list,
    render_projects,
    render_stats,
    render_task_detail,
    render_timer,
    short_id,
)
from ..core.errors import ImportValidationError, PlannerError
from ..core.state import AppContext
from ..notifications.reminder_scheduler import parse_lead_minutes
from ..tasks.quick_add import resolve_deadline
from ..tasks.task_api import (
    disable_notifications,
    enable_notifications,
    export_data,
    import_data,
    quick_add,
    resolve_project,
    resolve_task_id,
    update_pomodoro_settings,
)
from ..tasks.task_models import Priority, PriorityFilter, SortKey, TaskStatus, ViewMode
from ..views.calendar_grid import MonthCursor

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppContext, list[str]], str]
CommandHandler3 = Callable[[AppContext, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

STATUS_ALIASES = {
    "todo": TaskStatus.TODO,
    "t": TaskStatus.TODO,
    "inprogress": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "doing": TaskStatus.IN_PROGRESS,
    "p": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.DONE,
    "d": TaskStatus.DONE,
}

TIMER_SETTING_FIELDS = {
    "work": "work_duration",
    "break": "break_duration",
    "long": "long_break_duration",
    "cycle": "pomodoros_until_long_break",
}


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, ctx: AppContext, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Invalid input (ValueError) and planner errors are turned into a reply;
        anything else propagates to the connector.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                return cast(CommandHandler3, handler)(ctx, args, emit)
            return cast(CommandHandler2, handler)(ctx, args)
        except ImportValidationError as e:
            logger.info("Import rejected: %s", e)
            return f"Invalid file: {e}"
        except PlannerError as e:
            logger.warning("/%s failed: %s", name, e)
            return f"Error: {e}"
        except ValueError as e:
            logger.debug("/%s invalid input: %s", name, e)
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  Any other text is added as a task (!high @project #tag >tomorrow).")
        return "\n".join(lines)


registry = CommandRegistry()


def _task_ref(ctx: AppContext, args: list[str]) -> str | None:
    return resolve_task_id(ctx, args[0]) if args else None


def _status(raw: str) -> TaskStatus:
    status = STATUS_ALIASES.get(raw.lower())
    if status is None:
        raise ValueError(f"unknown status {raw!r} (todo | inprogress | done)")
    return status


def cmd_help(ctx: AppContext, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(ctx: AppContext, args: list[str]) -> str:
    """
    /add <text>                 -> quick-add into "todo"
    /add -s <status> <text>     -> quick-add into another column
    """
    status = TaskStatus.TODO
    if len(args) >= 2 and args[0] == "-s":
        status = _status(args[1])
        args = args[2:]
    text = " ".join(args)
    task = quick_add(ctx, text, default_status=status)
    if task is None:
        return "Task title is empty; nothing added."
    return f"Added {short_id(task.id)}: {task.title}"


def cmd_show(ctx: AppContext, args: list[str]) -> str:
    if not args:
        return render_current_view(ctx)
    task_id = _task_ref(ctx, args)
    task = ctx.store.get_task(task_id)
    if task is None:
        return f"No task matches {args[0]!r}."
    return render_task_detail(ctx, task)


def cmd_list(ctx: AppContext, args: list[str]) -> str:
    return render_list(ctx)


def cmd_board(ctx: AppContext, args: list[str]) -> str:
    return render_kanban(ctx)


def cmd_cal(ctx: AppContext, args: list[str]) -> str:
    """
    /cal            -> show month
    /cal prev|next  -> move one month
    /cal today      -> back to the current month
    """
    cursor = ctx.calendar_month or MonthCursor.today(ctx.clock)
    sub = args[0].lower() if args else ""
    if sub == "prev":
        ctx.calendar_month = cursor.shifted(-1)
    elif sub == "next":
        ctx.calendar_month = cursor.shifted(1)
    elif sub == "today":
        ctx.calendar_month = None
    elif sub:
        return "Usage: /cal [prev | next | today]"
    return render_calendar(ctx)


def cmd_done(ctx: AppContext, args: list[str]) -> str:
    task_id = _task_ref(ctx, args)
    task = ctx.store.toggle_complete(task_id) if task_id else None
    if task is None:
        return "Usage: /done <task id>"
    return f"{'Completed' if task.completed else 'Reopened'}: {task.title}"


def cmd_move(ctx: AppContext, args: list[str]) -> str:
    """/move <task id> <status> [position]"""
    if len(args) < 2:
        return "Usage: /move <task id> <todo|inprogress|done> [position]"
    task_id = _task_ref(ctx, args)
    if task_id is None:
        return f"No task matches {args[0]!r}."
    status = _status(args[1])
    index = int(args[2]) if len(args) > 2 else None
    task = ctx.store.move_task(task_id, status, index)
    if task is None:
        return f"No task matches {args[0]!r}."
    return f"Moved {task.title} to {status.value} (position {task.order})."


def cmd_rm(ctx: AppContext, args: list[str]) -> str:
    task_id = _task_ref(ctx, args)
    task = ctx.store.get_task(task_id)
    if task is None or not ctx.store.delete_task(task.id):
        return "Usage: /rm <task id>"
    return f"Deleted: {task.title}"


def cmd_edit(ctx: AppContext, args: list[str]) -> str:
    """
    /edit <id> title <text>
    /edit <id> desc <text>
    /edit <id> priority <low|medium|high>
    /edit <id> due <YYYY-MM-DD|today|tomorrow|->
    /edit <id> remind <minutes|->
    /edit <id> status <todo|inprogress|done>
    /edit <id> project <name|->
    /edit <id> tags <a,b,c|->
    """
    if len(args) < 2:
        return "Usage: /edit <task id> <title|desc|priority|due|remind|status|project|tags> <value>"
    task_id = _task_ref(ctx, args)
    if task_id is None:
        return f"No task matches {args[0]!r}."

    field_name = args[1].lower()
    raw = " ".join(args[2:]).strip()
    unset = raw in ("", "-")

    if field_name == "title":
        patch = {"title": raw}
    elif field_name in ("desc", "description"):
        patch = {"description": "" if unset else raw}
    elif field_name == "priority":
        patch = {"priority": Priority(raw.lower())}
    elif field_name in ("due", "deadline"):
        if unset:
            patch = {"deadline": None}
        else:
            deadline = resolve_deadline(raw, ctx.clock.now().date())
            if deadline is None:
                raise ValueError(f"not a date: {raw!r}")
            try:
                date.fromisoformat(deadline)
            except ValueError:
                raise ValueError(f"no such date: {raw!r}") from None
            patch = {"deadline": deadline}
    elif field_name in ("remind", "reminder"):
        minutes = None if unset else parse_lead_minutes(raw)
        if not unset and minutes is None:
            raise ValueError(f"reminder must be minutes >= 0, got {raw!r}")
        patch = {"reminder": None if minutes is None else str(minutes)}
    elif field_name == "status":
        patch = {"status": _status(raw)}
    elif field_name == "project":
        if unset:
            patch = {"project_id": None}
        else:
            project = resolve_project(ctx, raw)
            if project is None:
                return f"No project matches {raw!r}."
            patch = {"project_id": project.id}
    elif field_name == "tags":
        patch = {"tags": [] if unset else [t.strip().lstrip("#") for t in raw.split(",") if t.strip()]}
    else:
        return f"Unknown field {field_name!r}."

    task = ctx.store.update_task(task_id, patch)
    return f"Updated: {task.title}" if task else f"No task matches {args[0]!r}."


def cmd_sub(ctx: AppContext, args: list[str]) -> str:
    """
    /sub add <task id> <title>
    /sub toggle <task id> <subtask id>
    /sub rm <task id> <subtask id>
    """
    usage = "Usage: /sub add <task> <title> | /sub toggle <task> <subtask> | /sub rm <task> <subtask>"
    if len(args) < 3:
        return usage
    sub = args[0].lower()
    task_id = resolve_task_id(ctx, args[1])
    task = ctx.store.get_task(task_id)
    if task is None:
        return f"No task matches {args[1]!r}."

    if sub == "add":
        subtask = ctx.store.add_subtask(task.id, " ".join(args[2:]))
        return f"Subtask {short_id(subtask.id)} added." if subtask else usage

    matches = [s.id for s in task.subtasks if s.id.startswith(args[2])]
    if len(matches) != 1:
        return f"No subtask matches {args[2]!r}."

    if sub == "toggle":
        ctx.store.toggle_subtask(task.id, matches[0])
        return render_task_detail(ctx, task)
    if sub in ("rm", "remove"):
        ctx.store.remove_subtask(task.id, matches[0])
        return "Subtask removed."
    return usage


def cmd_project(ctx: AppContext, args: list[str]) -> str:
    """
    /project                      -> list projects
    /project add <name> [#color]
    /project rename <ref> <name>
    /project color <ref> <#color>
    /project rm <ref>
    /project select <ref|all>
    """
    if not args or args[0].lower() in ("list", "ls"):
        return render_projects(ctx)

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        color = None
        if rest and rest[-1].startswith("#"):
            color = rest[-1]
            rest = rest[:-1]
        project = ctx.store.create_project(" ".join(rest), color)
        return f"Project {short_id(project.id)} created: {project.name}"

    if sub == "select":
        if not rest or rest[0].lower() == "all":
            ctx.store.select_project(None)
            return "Showing all projects."
        project = resolve_project(ctx, " ".join(rest))
        if project is None:
            return f"No project matches {' '.join(rest)!r}."
        ctx.store.select_project(project.id)
        return f"Showing project: {project.name}"

    if not rest:
        return "Usage: /project add|rename|color|rm|select ..."

    project = resolve_project(ctx, rest[0])
    if project is None:
        return f"No project matches {rest[0]!r}."

    if sub == "rename":
        ctx.store.update_project(project.id, {"name": " ".join(rest[1:])})
        return f"Project renamed: {project.name}"
    if sub == "color":
        if len(rest) < 2:
            return "Usage: /project color <project> <#color>"
        ctx.store.update_project(project.id, {"color": rest[1]})
        return f"Project color: {project.color}"
    if sub in ("rm", "delete"):
        ctx.store.delete_project(project.id)
        return f"Project deleted: {project.name} (its tasks were kept)."
    return "Usage: /project add|rename|color|rm|select ..."


def cmd_filter(ctx: AppContext, args: list[str]) -> str:
    value = args[0].lower() if args else PriorityFilter.ALL.value
    ctx.store.set_priority_filter(PriorityFilter(value))
    return f"Priority filter: {ctx.store.priority_filter.value}"


def cmd_search(ctx: AppContext, args: list[str]) -> str:
    ctx.store.set_search(" ".join(args))
    return f"Search: {ctx.store.search!r}" if ctx.store.search else "Search cleared."


def cmd_sort(ctx: AppContext, args: list[str]) -> str:
    if not args:
        return f"Sort: {ctx.store.sort_by.value}. Use /sort created|deadline|priority."
    ctx.store.set_sort_by(SortKey(args[0].lower()))
    return f"Sort: {ctx.store.sort_by.value}"


def cmd_view(ctx: AppContext, args: list[str]) -> str:
    """/view cycles kanban -> list -> calendar; /view <name> picks one."""
    if args:
        ctx.store.set_view(ViewMode(args[0].lower()))
    else:
        ctx.store.cycle_view()
    return render_current_view(ctx)


def cmd_theme(ctx: AppContext, args: list[str]) -> str:
    return f"Theme: {ctx.store.toggle_theme().value}"


def cmd_timer(ctx: AppContext, args: list[str]) -> str:
    """
    /timer                          -> status
    /timer start [task id]
    /timer pause
    /timer stop
    /timer set work|break|long|cycle <n>
    /timer sound on|off
    """
    sub = args[0].lower() if args else "status"

    if sub == "start":
        task_id = None
        if len(args) > 1:
            task_id = resolve_task_id(ctx, args[1])
            if task_id is None:
                return f"No task matches {args[1]!r}."
        ctx.timer.start(task_id)
    elif sub == "pause":
        if not ctx.timer.pause():
            return "Timer is not running."
    elif sub == "stop":
        ctx.timer.stop()
    elif sub == "set":
        if len(args) < 3 or args[1].lower() not in TIMER_SETTING_FIELDS:
            return "Usage: /timer set work|break|long|cycle <n>"
        value = int(args[2])
        if value < 1:
            raise ValueError("value must be at least 1")
        update_pomodoro_settings(ctx, **{TIMER_SETTING_FIELDS[args[1].lower()]: value})
    elif sub == "sound":
        if len(args) < 2 or args[1].lower() not in ("on", "off"):
            return "Usage: /timer sound on|off"
        update_pomodoro_settings(ctx, sound_enabled=args[1].lower() == "on")
    elif sub != "status":
        return "Usage: /timer [start [task] | pause | stop | set <field> <n> | sound on|off]"

    s = ctx.store.pomodoro_settings
    return (
        f"{render_timer(ctx)}\n"
        f"  work={s.work_duration}m break={s.break_duration}m long={s.long_break_duration}m "
        f"cycle={s.pomodoros_until_long_break} sound={'on' if s.sound_enabled else 'off'}"
    )


def cmd_notify(ctx: AppContext, args: list[str]) -> str:
    if not args:
        state = "ON" if ctx.store.notifications_enabled else "OFF"
        return f"Notifications are {state}. Use /notify on or /notify off."
    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        if enable_notifications(ctx):
            return "Notifications enabled."
        return "Notification permission denied."
    if arg in ("off", "0", "false", "no"):
        disable_notifications(ctx)
        return "Notifications disabled."
    return "Usage: /notify on or /notify off."


def cmd_export(ctx: AppContext, args: list[str]) -> str:
    path = export_data(ctx, " ".join(args) if args else None)
    return f"Exported to {path}"


def cmd_import(ctx: AppContext, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /import <file.json>"
    if emit:
        with contextlib.suppress(Exception):
            emit("[IMPORT] Existing tasks and projects will be replaced.")
    import_data(ctx, " ".join(args))
    return f"Imported tasks={len(ctx.store.tasks)} projects={len(ctx.store.projects)}."


def cmd_stats(ctx: AppContext, args: list[str]) -> str:
    return render_stats(ctx)


def cmd_clear(ctx: AppContext, args: list[str]) -> str:
    """Destructive; requires /clear yes."""
    if not args or args[0].lower() != "yes":
        return "This deletes ALL tasks and projects. Type /clear yes to confirm."
    ctx.timer.stop()
    ctx.store.clear_all()
    return "All data deleted."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Quick-add a task: /add [-s status] <text>.", aliases=["a"])
registry.register("show", cmd_show, help_text="Show the current view, or one task: /show [task].")
registry.register("list", cmd_list, help_text="Show the list view.", aliases=["ls"])
registry.register("board", cmd_board, help_text="Show the kanban board.", aliases=["kanban"])
registry.register("cal", cmd_cal, help_text="Calendar: /cal [prev | next | today].", aliases=["calendar"])
registry.register("done", cmd_done, help_text="Toggle completion: /done <task>.")
registry.register("move", cmd_move, help_text="Move: /move <task> <status> [position].", aliases=["mv"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <task>.")
registry.register("edit", cmd_edit, help_text="Edit a field: /edit <task> <field> <value>.")
registry.register("sub", cmd_sub, help_text="Subtasks: /sub add|toggle|rm <task> ...")
registry.register("project", cmd_project, help_text="Projects: /project [add|rename|color|rm|select] ...", aliases=["p"])
registry.register("filter", cmd_filter, help_text="Priority filter: /filter all|low|medium|high.")
registry.register("search", cmd_search, help_text="Search title/description/tags: /search [text].")
registry.register("sort", cmd_sort, help_text="Sort: /sort created|deadline|priority.")
registry.register("view", cmd_view, help_text="Cycle views or pick one: /view [kanban|list|calendar].")
registry.register("theme", cmd_theme, help_text="Toggle light/dark theme.")
registry.register("timer", cmd_timer, help_text="Pomodoro: /timer [start|pause|stop|set|sound] ...", aliases=["t"])
registry.register("notify", cmd_notify, help_text="Deadline reminders: /notify on | /notify off.")
registry.register("export", cmd_export, help_text="Export JSON backup: /export [path].")
registry.register("import", cmd_import, help_text="Import JSON backup (replaces data): /import <path>.")
registry.register("stats", cmd_stats, help_text="Show statistics.")
registry.register("clear", cmd_clear, help_text="Delete everything: /clear yes.")
