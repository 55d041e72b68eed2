# src/taskplanner/views/stats.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from ..tasks.task_models import Task, TaskStatus


@dataclass(slots=True, frozen=True)
class PlannerStats:
    total: int
    todo: int
    in_progress: int
    done: int
    completed_today: int
    total_pomodoros: int


def _completed_on(task: Task, today: date) -> bool:
    if not task.completed_at:
        return False
    try:
        completed = datetime.fromisoformat(task.completed_at)
    except ValueError:
        return False
    if completed.tzinfo is not None:
        completed = completed.astimezone()
    return completed.date() == today


def compute_stats(tasks: Iterable[Task], today: date) -> PlannerStats:
    items = list(tasks)
    return PlannerStats(
        total=len(items),
        todo=sum(1 for t in items if t.status == TaskStatus.TODO),
        in_progress=sum(1 for t in items if t.status == TaskStatus.IN_PROGRESS),
        done=sum(1 for t in items if t.status == TaskStatus.DONE),
        completed_today=sum(1 for t in items if _completed_on(t, today)),
        total_pomodoros=sum(t.pomodoro_count for t in items),
    )
