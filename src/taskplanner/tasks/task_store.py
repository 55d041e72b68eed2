# src/taskplanner/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..core.errors import StorageError
from ..core.events import EventHub
from ..core.ports import Clock, IdGenerator
from ..pomodoro.settings import PomodoroSettings
from ..storage.gateway import ImportPayload, PersistedState, PersistenceGateway
from .ordering import next_order, reflow_bucket
from .task_models import (
    DEFAULT_PROJECT_COLOR,
    Priority,
    PriorityFilter,
    Project,
    SortKey,
    Subtask,
    SubtaskProgress,
    Task,
    TaskDraft,
    TaskStatus,
    Theme,
    ViewMode,
)

logger = logging.getLogger(__name__)

TaskDeletedHook = Callable[[str], None]

# Fields update_task() accepts. id/created_at/completed_at are managed here.
TASK_PATCH_FIELDS = frozenset(
    {
        "title",
        "description",
        "project_id",
        "priority",
        "deadline",
        "reminder",
        "status",
        "tags",
        "subtasks",
        "completed",
        "pomodoro_count",
        "order",
    }
)
PROJECT_PATCH_FIELDS = frozenset({"name", "color"})

VIEW_CYCLE = (ViewMode.KANBAN, ViewMode.LIST, ViewMode.CALENDAR)


def _clean_title(raw: Any, what: str = "title") -> str:
    title = str(raw or "").strip()
    if not title:
        raise ValueError(f"{what} is required")
    return title


def _coerce_subtasks(raw: Iterable[Any]) -> list[Subtask]:
    out: list[Subtask] = []
    for s in raw:
        if isinstance(s, Subtask):
            out.append(s)
        elif isinstance(s, Mapping):
            out.append(Subtask.from_dict(dict(s)))
        else:
            raise ValueError(f"invalid subtask: {s!r}")
    return out


def subtask_progress(task: Task) -> SubtaskProgress | None:
    """Completed/total subtasks with a half-up rounded percentage; None without subtasks."""
    total = len(task.subtasks)
    if total == 0:
        return None
    done = sum(1 for s in task.subtasks if s.completed)
    return SubtaskProgress(completed=done, total=total, percent=(done * 200 + total) // (2 * total))


class PlannerStore:
    """
    In-memory owner of tasks, projects and the filter/sort/view selection.

    Every successful mutation:
    - writes the full state through the persistence gateway (write-through),
    - emits exactly one state-changed event.

    A failing write is logged and reported as a warning; the in-memory state
    keeps working. Mutations that reference an unknown id are silent no-ops.

    Not thread-safe on its own: callers serialize through AppContext.lock.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        hub: EventHub,
        clock: Clock,
        ids: IdGenerator,
        default_settings: PomodoroSettings | None = None,
    ) -> None:
        self._gateway = gateway
        self._hub = hub
        self._clock = clock
        self._ids = ids

        self.tasks: list[Task] = []
        self.projects: list[Project] = []

        self.current_project: str | None = None
        self.priority_filter: PriorityFilter = PriorityFilter.ALL
        self.search: str = ""
        self.sort_by: SortKey = SortKey.CREATED
        self.view: ViewMode = ViewMode.KANBAN
        self.theme: Theme = Theme.LIGHT

        self.pomodoro_settings: PomodoroSettings = default_settings or PomodoroSettings()
        self.notifications_enabled: bool = False

        self._task_deleted_hooks: list[TaskDeletedHook] = []

    # ---- persistence ----

    def load(self) -> None:
        """Replace in-memory state with what the gateway has (defaults on failure)."""
        try:
            state = self._gateway.load()
        except StorageError:
            logger.exception("Failed to load stored state; starting empty.")
            self._hub.warning("Stored data could not be read; starting with an empty planner.")
            state = PersistedState(pomodoro_settings=self.pomodoro_settings)

        self.tasks = state.tasks
        self.projects = state.projects
        self.theme = state.theme
        self.view = state.view
        self.current_project = state.current_project
        self.pomodoro_settings = state.pomodoro_settings
        self.notifications_enabled = state.notifications_enabled
        logger.info("PlannerStore loaded tasks=%d projects=%d", len(self.tasks), len(self.projects))

    def snapshot(self) -> PersistedState:
        return PersistedState(
            tasks=self.tasks,
            projects=self.projects,
            theme=self.theme,
            view=self.view,
            current_project=self.current_project,
            pomodoro_settings=self.pomodoro_settings,
            notifications_enabled=self.notifications_enabled,
        )

    def persist(self) -> bool:
        try:
            self._gateway.save(self.snapshot())
            return True
        except StorageError:
            logger.exception("Failed to persist planner state.")
            self._hub.warning("Saving failed! Changes are kept in memory only.")
            return False

    def _commit(self) -> None:
        self.persist()
        self._hub.state_changed()

    def _now_iso(self) -> str:
        return self._clock.now().isoformat(timespec="milliseconds")

    # ---- hooks ----

    def add_task_deleted_hook(self, hook: TaskDeletedHook) -> None:
        self._task_deleted_hooks.append(hook)

    # ---- lookups ----

    def get_task(self, task_id: str | None) -> Task | None:
        if not task_id:
            return None
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_project(self, project_id: str | None) -> Project | None:
        if not project_id:
            return None
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    # ---- tasks ----

    def create_task(self, draft: TaskDraft) -> Task:
        title = _clean_title(draft.title)
        status = TaskStatus(draft.status)
        now = self._now_iso()
        done = status == TaskStatus.DONE

        task = Task(
            id=self._ids.new_id(),
            title=title,
            created_at=now,
            description=(draft.description or "").strip(),
            project_id=draft.project_id or None,
            priority=Priority(draft.priority),
            deadline=draft.deadline or None,
            reminder=draft.reminder or None,
            status=status,
            tags=list(draft.tags),
            subtasks=_coerce_subtasks(draft.subtasks),
            completed=done,
            completed_at=now if done else None,
            pomodoro_count=0,
            order=next_order(self.tasks, status),
        )
        self.tasks.append(task)
        logger.debug("Task created id=%s status=%s order=%s", task.id, task.status.value, task.order)
        self._commit()
        return task

    def _set_completion(self, task: Task, completed: bool, status: TaskStatus) -> None:
        """
        Single place where status and completion change together.

        Keeps completed == (status == done) and stamps/clears completed_at.
        """
        if completed and not task.completed:
            task.completed_at = self._now_iso()
        elif not completed:
            task.completed_at = None
        task.completed = completed
        task.status = status

    def _apply_patch(self, task: Task, patch: Mapping[str, Any]) -> None:
        unknown = set(patch) - TASK_PATCH_FIELDS
        if unknown:
            raise ValueError(f"unknown task fields: {', '.join(sorted(unknown))}")

        # Validate everything before touching the task.
        values: dict[str, Any] = {}
        for name, value in patch.items():
            if name == "title":
                values[name] = _clean_title(value)
            elif name == "priority":
                values[name] = Priority(value)
            elif name == "status":
                values[name] = TaskStatus(value)
            elif name == "tags":
                values[name] = [str(t) for t in value]
            elif name == "subtasks":
                values[name] = _coerce_subtasks(value)
            elif name in ("pomodoro_count", "order"):
                values[name] = max(0, int(value))
            elif name == "completed":
                values[name] = bool(value)
            elif name == "description":
                values[name] = str(value or "").strip()
            else:
                # project_id / deadline / reminder: "" means unset
                values[name] = str(value) if value not in (None, "") else None

        old_status = task.status
        for name, value in values.items():
            if name not in ("status", "completed"):
                setattr(task, name, value)

        if "completed" in values:
            completed = values["completed"]
            if completed:
                status = TaskStatus.DONE
            else:
                requested = values.get("status")
                if requested is not None and requested != TaskStatus.DONE:
                    status = requested
                elif task.status == TaskStatus.DONE:
                    status = TaskStatus.TODO
                else:
                    status = task.status
            self._set_completion(task, completed, status)
        elif "status" in values:
            status = values["status"]
            self._set_completion(task, status == TaskStatus.DONE, status)

        if task.status != old_status and "order" not in values:
            others = (t for t in self.tasks if t.id != task.id)
            task.order = next_order(others, task.status)

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            logger.debug("update_task: unknown id=%s", task_id)
            return None
        self._apply_patch(task, patch)
        self._commit()
        return task

    def toggle_complete(self, task_id: str) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        return self.update_task(task_id, {"completed": not task.completed})

    def delete_task(self, task_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            logger.debug("delete_task: unknown id=%s", task_id)
            return False
        self.tasks.remove(task)
        for hook in list(self._task_deleted_hooks):
            try:
                hook(task_id)
            except Exception:
                logger.exception("task-deleted hook failed id=%s", task_id)
        logger.debug("Task deleted id=%s", task_id)
        self._commit()
        return True

    def move_task(self, task_id: str, new_status: TaskStatus | str, new_index: int | None = None) -> Task | None:
        """
        Drop a task into a column at a position (see ordering.reflow_bucket).

        Status and completion are synchronized exactly like update_task.
        """
        task = self.get_task(task_id)
        if task is None:
            logger.debug("move_task: unknown id=%s", task_id)
            return None
        status = TaskStatus(new_status)
        self._set_completion(task, status == TaskStatus.DONE, status)
        reflow_bucket(self.get_filtered_sorted_tasks(), task, status, new_index)
        self._commit()
        return task

    def increment_pomodoro(self, task_id: str | None) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        task.pomodoro_count += 1
        self._commit()
        return True

    # ---- subtasks ----

    def add_subtask(self, task_id: str, title: str) -> Subtask | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        subtask = Subtask(id=self._ids.new_id(), title=_clean_title(title, "subtask title"))
        task.subtasks.append(subtask)
        self._commit()
        return subtask

    def toggle_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        for subtask in task.subtasks:
            if subtask.id == subtask_id:
                subtask.completed = not subtask.completed
                self._commit()
                return True
        return False

    def remove_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        before = len(task.subtasks)
        task.subtasks = [s for s in task.subtasks if s.id != subtask_id]
        if len(task.subtasks) == before:
            return False
        self._commit()
        return True

    # ---- projects ----

    def create_project(self, name: str, color: str | None = None) -> Project:
        project = Project(
            id=self._ids.new_id(),
            name=_clean_title(name, "project name"),
            created_at=self._now_iso(),
            color=color or DEFAULT_PROJECT_COLOR,
        )
        self.projects.append(project)
        logger.debug("Project created id=%s name=%s", project.id, project.name)
        self._commit()
        return project

    def update_project(self, project_id: str, patch: Mapping[str, Any]) -> Project | None:
        project = self.get_project(project_id)
        if project is None:
            return None
        unknown = set(patch) - PROJECT_PATCH_FIELDS
        if unknown:
            raise ValueError(f"unknown project fields: {', '.join(sorted(unknown))}")
        name = _clean_title(patch["name"], "project name") if "name" in patch else project.name
        color = str(patch.get("color") or project.color)
        project.name = name
        project.color = color
        self._commit()
        return project

    def delete_project(self, project_id: str) -> bool:
        """Remove a project; its tasks stay and lose the reference."""
        project = self.get_project(project_id)
        if project is None:
            return False
        self.projects.remove(project)
        for task in self.tasks:
            if task.project_id == project_id:
                task.project_id = None
        if self.current_project == project_id:
            self.current_project = None
        self._commit()
        return True

    def select_project(self, project_id: str | None) -> None:
        if project_id and self.get_project(project_id) is None:
            logger.debug("select_project: unknown id=%s", project_id)
            return
        self.current_project = project_id or None
        self._commit()

    # ---- filters / view ----

    def set_priority_filter(self, value: PriorityFilter | str) -> None:
        self.priority_filter = PriorityFilter(value)
        self._commit()

    def set_search(self, text: str) -> None:
        self.search = text or ""
        self._commit()

    def set_sort_by(self, value: SortKey | str) -> None:
        self.sort_by = SortKey(value)
        self._commit()

    def set_view(self, value: ViewMode | str) -> None:
        self.view = ViewMode(value)
        self._commit()

    def cycle_view(self) -> ViewMode:
        idx = VIEW_CYCLE.index(self.view)
        self.view = VIEW_CYCLE[(idx + 1) % len(VIEW_CYCLE)]
        self._commit()
        return self.view

    def toggle_theme(self) -> Theme:
        self.theme = Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT
        self._commit()
        return self.theme

    def set_pomodoro_settings(self, settings: PomodoroSettings) -> None:
        self.pomodoro_settings = settings.normalized()
        self._commit()

    def set_notifications_enabled(self, enabled: bool) -> None:
        self.notifications_enabled = bool(enabled)
        self._commit()

    # ---- bulk ----

    def apply_import(self, payload: ImportPayload) -> None:
        """Replace tasks and/or projects wholesale (absent parts are kept)."""
        if payload.tasks is not None:
            self.tasks = list(payload.tasks)
        if payload.projects is not None:
            self.projects = list(payload.projects)
        logger.info("Imported tasks=%d projects=%d", len(self.tasks), len(self.projects))
        self._commit()

    def clear_all(self) -> None:
        try:
            self._gateway.clear()
        except StorageError:
            logger.exception("Failed to clear stored state.")
            self._hub.warning("Stored data could not be deleted.")
        self.tasks = []
        self.projects = []
        self.current_project = None
        self._hub.state_changed()

    # ---- derived queries ----

    def get_filtered_sorted_tasks(self) -> list[Task]:
        tasks = list(self.tasks)

        if self.current_project:
            tasks = [t for t in tasks if t.project_id == self.current_project]

        if self.priority_filter != PriorityFilter.ALL:
            tasks = [t for t in tasks if t.priority.value == self.priority_filter.value]

        if self.search:
            needle = self.search.lower()
            tasks = [
                t
                for t in tasks
                if needle in t.title.lower()
                or needle in (t.description or "").lower()
                or any(needle in tag.lower() for tag in t.tags)
            ]

        # sorted() is stable: equal keys keep their relative order.
        if self.sort_by == SortKey.DEADLINE:
            return sorted(tasks, key=lambda t: (t.deadline is None, t.deadline or ""))
        if self.sort_by == SortKey.PRIORITY:
            return sorted(tasks, key=lambda t: t.priority.rank)
        return sorted(tasks, key=lambda t: t.order)

    def tasks_in_status(self, status: TaskStatus | str) -> list[Task]:
        """Visible column content (filtered + sorted)."""
        s = TaskStatus(status)
        return [t for t in self.get_filtered_sorted_tasks() if t.status == s]

    def task_count_by_project(self, project_id: str | None) -> int:
        if project_id is None:
            return len(self.tasks)
        return sum(1 for t in self.tasks if t.project_id == project_id)

    def tasks_for_date(self, iso_date: str) -> list[Task]:
        return [t for t in self.tasks if t.deadline == iso_date and not t.completed]

    @staticmethod
    def subtask_progress(task: Task) -> SubtaskProgress | None:
        return subtask_progress(task)
