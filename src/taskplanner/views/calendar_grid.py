# src/taskplanner/views/calendar_grid.py

"""
Month grid for the calendar view.

Always 6 rows x 7 columns, Monday first. Days before the 1st are filled from
the previous month, days after the last from the next month. Each cell holds
the incomplete tasks whose deadline is that day.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from ..core.ports import Clock
from ..tasks.task_models import Task

GRID_CELLS = 42
PREVIEW_TASKS = 2


@dataclass(slots=True, frozen=True)
class MonthCursor:
    year: int
    month: int  # 1..12

    def shifted(self, direction: int) -> MonthCursor:
        index = self.year * 12 + (self.month - 1) + direction
        return MonthCursor(year=index // 12, month=index % 12 + 1)

    @classmethod
    def today(cls, clock: Clock) -> MonthCursor:
        d = clock.now().date()
        return cls(year=d.year, month=d.month)

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"


@dataclass(slots=True)
class CalendarCell:
    day: date
    in_month: bool
    is_today: bool
    tasks: list[Task]

    @property
    def iso(self) -> str:
        return self.day.isoformat()

    @property
    def preview(self) -> list[Task]:
        return self.tasks[:PREVIEW_TASKS]

    @property
    def overflow(self) -> int:
        return max(0, len(self.tasks) - PREVIEW_TASKS)


def bucket_by_deadline(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    buckets: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.deadline and not task.completed:
            buckets[task.deadline].append(task)
    return buckets


def build_month_grid(year: int, month: int, tasks: Iterable[Task], *, today: date | None = None) -> list[CalendarCell]:
    first = date(year, month, 1)
    offset = first.weekday()  # Monday == 0
    start = first - timedelta(days=offset)
    buckets = bucket_by_deadline(tasks)

    cells: list[CalendarCell] = []
    for i in range(GRID_CELLS):
        day = start + timedelta(days=i)
        cells.append(
            CalendarCell(
                day=day,
                in_month=(day.year == year and day.month == month),
                is_today=(today is not None and day == today),
                tasks=list(buckets.get(day.isoformat(), [])),
            )
        )
    return cells
