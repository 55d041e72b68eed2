# src/taskplanner/storage/gateway.py

"""
Persistence gateway.

Maps the whole planner state onto a handful of fixed keys in a KeyValueStore:

    <ns>_tasks                 JSON array of tasks
    <ns>_projects              JSON array of projects
    <ns>_theme                 "light" | "dark"
    <ns>_view                  "kanban" | "list" | "calendar"
    <ns>_currentProject        project id or ""
    <ns>_pomodoroSettings      JSON object
    <ns>_notificationsEnabled  "true" | "false"

Also owns the export/import file format. No business logic lives here.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..core.errors import ImportValidationError, StorageError
from ..core.ports import KeyValueStore
from ..pomodoro.settings import PomodoroSettings
from ..tasks.task_models import Project, Task, Theme, ViewMode

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"

KEY_TASKS = "tasks"
KEY_PROJECTS = "projects"
KEY_THEME = "theme"
KEY_VIEW = "view"
KEY_CURRENT_PROJECT = "currentProject"
KEY_POMODORO_SETTINGS = "pomodoroSettings"
KEY_NOTIFICATIONS_ENABLED = "notificationsEnabled"

ALL_KEYS = (
    KEY_TASKS,
    KEY_PROJECTS,
    KEY_THEME,
    KEY_VIEW,
    KEY_CURRENT_PROJECT,
    KEY_POMODORO_SETTINGS,
    KEY_NOTIFICATIONS_ENABLED,
)


@dataclass(slots=True)
class PersistedState:
    tasks: list[Task] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    theme: Theme = Theme.LIGHT
    view: ViewMode = ViewMode.KANBAN
    current_project: str | None = None
    pomodoro_settings: PomodoroSettings = field(default_factory=PomodoroSettings)
    notifications_enabled: bool = False


@dataclass(slots=True, frozen=True)
class ImportPayload:
    """Parsed import file. None means "key absent, keep what we have"."""

    tasks: list[Task] | None
    projects: list[Project] | None


class PersistenceGateway:
    def __init__(
        self,
        kv: KeyValueStore,
        *,
        namespace: str = "taskplanner",
        default_settings: PomodoroSettings | None = None,
    ) -> None:
        self._kv = kv
        self._namespace = namespace
        self._default_settings = default_settings or PomodoroSettings()

    def key(self, name: str) -> str:
        return f"{self._namespace}_{name}"

    # ---- save ----

    def save(self, state: PersistedState) -> None:
        """Write every key. Raises StorageError on the first failing write."""
        values = {
            KEY_TASKS: json.dumps([t.to_dict() for t in state.tasks], ensure_ascii=False),
            KEY_PROJECTS: json.dumps([p.to_dict() for p in state.projects], ensure_ascii=False),
            KEY_THEME: state.theme.value,
            KEY_VIEW: state.view.value,
            KEY_CURRENT_PROJECT: state.current_project or "",
            KEY_POMODORO_SETTINGS: json.dumps(state.pomodoro_settings.to_dict()),
            KEY_NOTIFICATIONS_ENABLED: "true" if state.notifications_enabled else "false",
        }
        for name, value in values.items():
            self._kv.set(self.key(name), value)

    # ---- load ----

    def _read_json(self, name: str) -> Any:
        raw = self._kv.get(self.key(name))
        if raw is None or raw == "":
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored value for %s is not valid JSON; using default.", self.key(name))
            return None

    def load(self) -> PersistedState:
        """
        Read every key. Missing or unparsable values fall back to defaults.

        Raises StorageError only when the store itself cannot be read.
        """
        state = PersistedState(pomodoro_settings=self._default_settings)

        tasks_raw = self._read_json(KEY_TASKS)
        if isinstance(tasks_raw, list):
            state.tasks = [Task.from_dict(t) for t in tasks_raw if isinstance(t, dict)]

        projects_raw = self._read_json(KEY_PROJECTS)
        if isinstance(projects_raw, list):
            state.projects = [Project.from_dict(p) for p in projects_raw if isinstance(p, dict)]

        theme = self._kv.get(self.key(KEY_THEME))
        if theme:
            try:
                state.theme = Theme(theme)
            except ValueError:
                logger.warning("Unknown stored theme %r; using default.", theme)

        view = self._kv.get(self.key(KEY_VIEW))
        if view:
            try:
                state.view = ViewMode(view)
            except ValueError:
                logger.warning("Unknown stored view %r; using default.", view)

        state.current_project = self._kv.get(self.key(KEY_CURRENT_PROJECT)) or None

        settings_raw = self._read_json(KEY_POMODORO_SETTINGS)
        if isinstance(settings_raw, dict):
            state.pomodoro_settings = PomodoroSettings.from_dict(settings_raw, base=self._default_settings)

        state.notifications_enabled = self._kv.get(self.key(KEY_NOTIFICATIONS_ENABLED)) == "true"

        logger.debug(
            "Loaded state tasks=%d projects=%d view=%s",
            len(state.tasks),
            len(state.projects),
            state.view.value,
        )
        return state

    def clear(self) -> None:
        for name in ALL_KEYS:
            self._kv.delete(self.key(name))


# --------------------------------------------------------------------------------------
# Export / import
# --------------------------------------------------------------------------------------


def build_export(tasks: Iterable[Task], projects: Iterable[Project], *, now: datetime) -> dict[str, Any]:
    return {
        "tasks": [t.to_dict() for t in tasks],
        "projects": [p.to_dict() for p in projects],
        "exportDate": now.isoformat(),
        "version": EXPORT_VERSION,
    }


def default_export_filename(today: date) -> str:
    return f"taskplanner_backup_{today.isoformat()}.json"


def write_export(path: str | Path, payload: dict[str, Any]) -> Path:
    """Write an export atomically (tmp file + replace)."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise StorageError(f"cannot write export to {path}: {e}") from e
    logger.info("Exported %d tasks to %s", len(payload.get("tasks", [])), path)
    return path


def _entries(data: dict[str, Any], name: str) -> list[dict[str, Any]] | None:
    if name not in data or data[name] is None:
        return None
    raw = data[name]
    if not isinstance(raw, list):
        raise ImportValidationError(f"'{name}' must be an array")
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ImportValidationError(f"'{name}[{i}]' must be an object")
    return raw


def parse_import(text: str) -> ImportPayload:
    """
    Parse an export file.

    Everything is validated before anything is returned, so a failing import
    never leaves the planner half-overwritten.
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ImportValidationError(f"not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ImportValidationError("top-level value must be an object")

    tasks_raw = _entries(data, KEY_TASKS)
    projects_raw = _entries(data, KEY_PROJECTS)

    return ImportPayload(
        tasks=None if tasks_raw is None else [Task.from_dict(t) for t in tasks_raw],
        projects=None if projects_raw is None else [Project.from_dict(p) for p in projects_raw],
    )


def read_import(path: str | Path) -> ImportPayload:
    path = Path(path)
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        raise ImportValidationError(f"cannot read {path}: {e}") from e
    return parse_import(text)
