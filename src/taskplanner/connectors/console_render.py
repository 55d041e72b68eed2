# src/taskplanner/connectors/console_render.py

"""
Plain-text rendering of planner views for the console.

Pure functions of AppContext state: they read, never mutate.
"""

from __future__ import annotations

from ..core.state import AppContext
from ..pomodoro.timer import TimerMode, TimerPhase
from ..tasks.task_models import Priority, Task, TaskStatus
from ..tasks.task_store import subtask_progress
from ..views.calendar_grid import MonthCursor, build_month_grid
from ..views.formatting import format_due, format_time, is_overdue, is_soon
from ..views.stats import compute_stats

ID_WIDTH = 8

STATUS_TITLES = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Done",
}

PRIORITY_MARKS = {Priority.HIGH: "!!!", Priority.MEDIUM: "!! ", Priority.LOW: "!  "}

MODE_LABELS = {
    TimerMode.WORK: "Work",
    TimerMode.BREAK: "Short break",
    TimerMode.LONG_BREAK: "Long break",
}


def short_id(task_id: str) -> str:
    return task_id[:ID_WIDTH]


def task_line(ctx: AppContext, task: Task) -> str:
    now = ctx.clock.now()
    parts = [
        f"[{'x' if task.completed else ' '}]",
        short_id(task.id),
        PRIORITY_MARKS[task.priority],
        task.title,
    ]

    project = ctx.store.get_project(task.project_id)
    if project is not None:
        parts.append(f"@{project.name}")
    parts.extend(f"#{tag}" for tag in task.tags)

    if task.deadline:
        due = format_due(task.deadline, now.date())
        if not task.completed and is_overdue(task.deadline, now):
            due += " (overdue)"
        elif not task.completed and is_soon(task.deadline, now):
            due += " (soon)"
        parts.append(f"due {due}")

    progress = subtask_progress(task)
    if progress is not None:
        parts.append(f"{progress.completed}/{progress.total} ({progress.percent}%)")
    if task.pomodoro_count:
        parts.append(f"pomodoros={task.pomodoro_count}")
    return " ".join(parts)


def render_filters(ctx: AppContext) -> str:
    store = ctx.store
    project = store.get_project(store.current_project)
    return (
        f"project={project.name if project else 'all'} "
        f"priority={store.priority_filter.value} "
        f"sort={store.sort_by.value} "
        f"search={store.search!r}"
    )


def render_kanban(ctx: AppContext) -> str:
    lines = [f"Board ({render_filters(ctx)})"]
    for status in TaskStatus:
        tasks = ctx.store.tasks_in_status(status)
        lines.append("")
        lines.append(f"== {STATUS_TITLES[status]} ({len(tasks)}) ==")
        if not tasks:
            lines.append("  (empty)")
        for task in tasks:
            lines.append(f"  {task_line(ctx, task)}")
    return "\n".join(lines)


def render_list(ctx: AppContext) -> str:
    tasks = ctx.store.get_filtered_sorted_tasks()
    lines = [f"Tasks ({render_filters(ctx)}): {len(tasks)}"]
    if not tasks:
        lines.append("  No tasks.")
    for task in tasks:
        lines.append(f"  {task_line(ctx, task)} [{STATUS_TITLES[task.status]}]")
    return "\n".join(lines)


def render_calendar(ctx: AppContext) -> str:
    cursor = ctx.calendar_month or MonthCursor.today(ctx.clock)
    today = ctx.clock.now().date()
    cells = build_month_grid(cursor.year, cursor.month, ctx.store.tasks, today=today)

    lines = [cursor.title, " ".join(f"{d:>6}" for d in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"))]
    for row in range(0, len(cells), 7):
        week = cells[row : row + 7]
        row_cells = []
        for cell in week:
            label = f"{cell.day.day:>2}" if cell.in_month else "  "
            mark = "*" if cell.is_today else " "
            count = f"({len(cell.tasks)})" if cell.tasks else ""
            row_cells.append(f"{mark}{label}{count:<3}")
        lines.append(" ".join(row_cells))

    agenda = [c for c in cells if c.in_month and c.tasks]
    if agenda:
        lines.append("")
    for cell in agenda:
        titles = ", ".join(t.title for t in cell.preview)
        more = f" +{cell.overflow} more" if cell.overflow else ""
        lines.append(f"  {cell.iso}: {titles}{more}")
    return "\n".join(lines)


def render_current_view(ctx: AppContext) -> str:
    view = ctx.store.view.value
    if view == "list":
        return render_list(ctx)
    if view == "calendar":
        return render_calendar(ctx)
    return render_kanban(ctx)


def render_timer(ctx: AppContext) -> str:
    snap = ctx.timer.snapshot()
    state = {TimerPhase.IDLE: "idle", TimerPhase.RUNNING: "running", TimerPhase.PAUSED: "paused"}[snap.phase]
    task = f" task={snap.current_task_title!r}" if snap.current_task_title else ""
    return (
        f"Timer: {MODE_LABELS[snap.mode]} {format_time(snap.time_left)} ({state}) "
        f"completed={snap.completed_pomodoros}{task}"
    )


def render_stats(ctx: AppContext) -> str:
    s = compute_stats(ctx.store.tasks, ctx.clock.now().date())
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  To do: {s.todo}\n"
        f"  In progress: {s.in_progress}\n"
        f"  Done: {s.done}\n"
        f"  Completed today: {s.completed_today}\n"
        f"  Pomodoros: {s.total_pomodoros}"
    )


def render_projects(ctx: AppContext) -> str:
    store = ctx.store
    lines = [f"Projects (all tasks: {store.task_count_by_project(None)}):"]
    if not store.projects:
        lines.append("  No projects.")
    for project in store.projects:
        mark = "*" if project.id == store.current_project else " "
        lines.append(
            f" {mark}{short_id(project.id)} {project.name} {project.color} "
            f"({store.task_count_by_project(project.id)})"
        )
    return "\n".join(lines)


def render_task_detail(ctx: AppContext, task: Task) -> str:
    lines = [task_line(ctx, task), f"  id: {task.id}", f"  status: {STATUS_TITLES[task.status]}"]
    if task.description:
        lines.append(f"  {task.description}")
    if task.reminder is not None:
        lines.append(f"  reminder: {task.reminder} min before")
    for sub in task.subtasks:
        lines.append(f"  - [{'x' if sub.completed else ' '}] {short_id(sub.id)} {sub.title}")
    return "\n".join(lines)
