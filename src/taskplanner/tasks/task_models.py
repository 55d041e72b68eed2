# src/taskplanner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_PROJECT_COLOR = "#6366f1"


class TaskStatus(StrEnum):
    """
    Kanban column of a task.

    The stored values have no separator ("inprogress") so they double as
    stable JSON values and column keys.
    """

    TODO = "todo"
    IN_PROGRESS = "inprogress"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.TODO


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM

    @property
    def rank(self) -> int:
        """Sort rank: high first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class PriorityFilter(StrEnum):
    ALL = "all"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SortKey(StrEnum):
    CREATED = "created"
    DEADLINE = "deadline"
    PRIORITY = "priority"


class ViewMode(StrEnum):
    KANBAN = "kanban"
    LIST = "list"
    CALENDAR = "calendar"


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


def _str_list(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(x) for x in raw if x is not None]


def _opt_str(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


@dataclass(slots=True)
class Subtask:
    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Subtask:
        return cls(
            id=str(raw.get("id") or ""),
            title=str(raw.get("title") or ""),
            completed=bool(raw.get("completed", False)),
        )


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: str

    description: str = ""
    project_id: str | None = None
    priority: Priority = Priority.MEDIUM
    deadline: str | None = None  # ISO date (YYYY-MM-DD)
    reminder: str | None = None  # lead time in minutes, kept as string
    status: TaskStatus = TaskStatus.TODO

    tags: list[str] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)

    completed: bool = False
    completed_at: str | None = None
    pomodoro_count: int = 0
    order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "projectId": self.project_id,
            "priority": self.priority.value,
            "deadline": self.deadline,
            "reminder": self.reminder,
            "status": self.status.value,
            "tags": list(self.tags),
            "subtasks": [s.to_dict() for s in self.subtasks],
            "completed": self.completed,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
            "pomodoroCount": self.pomodoro_count,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        subtasks_raw = raw.get("subtasks")
        subtasks = (
            [Subtask.from_dict(s) for s in subtasks_raw if isinstance(s, dict)]
            if isinstance(subtasks_raw, list)
            else []
        )
        try:
            pomodoros = max(0, int(raw.get("pomodoroCount") or 0))
        except (TypeError, ValueError):
            pomodoros = 0
        try:
            order = max(0, int(raw.get("order") or 0))
        except (TypeError, ValueError):
            order = 0

        return cls(
            id=str(raw.get("id") or ""),
            title=str(raw.get("title") or ""),
            created_at=str(raw.get("createdAt") or ""),
            description=str(raw.get("description") or ""),
            project_id=_opt_str(raw.get("projectId")),
            priority=Priority.from_raw(raw.get("priority")),
            deadline=_opt_str(raw.get("deadline")),
            reminder=_opt_str(raw.get("reminder")),
            status=TaskStatus.from_raw(raw.get("status")),
            tags=_str_list(raw.get("tags")),
            subtasks=subtasks,
            completed=bool(raw.get("completed", False)),
            completed_at=_opt_str(raw.get("completedAt")),
            pomodoro_count=pomodoros,
            order=order,
        )


@dataclass(slots=True)
class Project:
    id: str
    name: str
    created_at: str
    color: str = DEFAULT_PROJECT_COLOR

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Project:
        return cls(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            created_at=str(raw.get("createdAt") or ""),
            color=str(raw.get("color") or DEFAULT_PROJECT_COLOR),
        )


@dataclass(slots=True)
class TaskDraft:
    """
    Input for PlannerStore.create_task.

    Produced by the quick-add parser or by a task form. Only the title is required.
    """

    title: str
    description: str = ""
    project_id: str | None = None
    priority: Priority = Priority.MEDIUM
    deadline: str | None = None
    reminder: str | None = None
    status: TaskStatus = TaskStatus.TODO
    tags: list[str] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class SubtaskProgress:
    completed: int
    total: int
    percent: int
