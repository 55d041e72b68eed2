# src/taskplanner/tasks/task_api.py

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

from ..core.errors import PermissionDenied
from ..core.state import AppContext
from ..pomodoro.settings import PomodoroSettings
from ..storage.gateway import build_export, default_export_filename, read_import, write_export
from .quick_add import find_project, parse_quick_add
from .task_models import Project, Task, TaskStatus

logger = logging.getLogger(__name__)


def quick_add(ctx: AppContext, text: str, *, default_status: TaskStatus = TaskStatus.TODO) -> Task | None:
    """
    Create a task from a quick-add line.

    Returns None (and creates nothing) when only tokens were given.
    """
    draft = parse_quick_add(
        text,
        projects=ctx.store.projects,
        today=ctx.clock.now().date(),
        default_status=default_status,
    )
    if not draft.title:
        logger.debug("Quick-add produced an empty title: %r", text)
        return None
    return ctx.store.create_task(draft)


def resolve_task_id(ctx: AppContext, ref: str) -> str | None:
    """Exact id, or a unique id prefix."""
    ref = (ref or "").strip()
    if not ref:
        return None
    if ctx.store.get_task(ref) is not None:
        return ref
    matches = [t.id for t in ctx.store.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def resolve_project(ctx: AppContext, ref: str) -> Project | None:
    """Exact id, unique id prefix, or first name containing `ref`."""
    ref = (ref or "").strip()
    if not ref:
        return None
    project = ctx.store.get_project(ref)
    if project is not None:
        return project
    by_prefix = [p for p in ctx.store.projects if p.id.startswith(ref)]
    if len(by_prefix) == 1:
        return by_prefix[0]
    return find_project(ctx.store.projects, ref)


def enable_notifications(ctx: AppContext) -> bool:
    """
    Ask for permission and switch reminders on.

    On refusal the feature is switched off and a warning is emitted; nothing is raised.
    """
    try:
        ctx.notifications.require_permission()
    except PermissionDenied:
        logger.warning("Notification permission denied.")
        ctx.store.set_notifications_enabled(False)
        ctx.hub.warning("Notifications were denied.")
        return False

    ctx.store.set_notifications_enabled(True)
    logger.info("Notifications enabled.")
    # First poll right away instead of waiting for the next interval.
    ctx.reminders.check()
    return True


def disable_notifications(ctx: AppContext) -> None:
    ctx.store.set_notifications_enabled(False)
    logger.info("Notifications disabled.")


def update_pomodoro_settings(ctx: AppContext, **changes: Any) -> PomodoroSettings:
    """Change selected timer settings (snake_case field names)."""
    current = ctx.store.pomodoro_settings
    settings = dataclasses.replace(current, **changes).normalized()
    ctx.timer.update_settings(settings)
    return settings


def export_data(ctx: AppContext, path: str | Path | None = None) -> Path:
    now = ctx.clock.now()
    if path is None:
        export_dir = Path(getattr(ctx.settings, "export_dir", "."))
        path = export_dir / default_export_filename(now.date())
    payload = build_export(ctx.store.tasks, ctx.store.projects, now=now)
    return write_export(path, payload)


def import_data(ctx: AppContext, path: str | Path) -> None:
    """Raises ImportValidationError before touching state if the file is bad."""
    payload = read_import(path)
    ctx.store.apply_import(payload)
