# src/taskplanner/tasks/ordering.py

"""
Kanban ordering engine.

`order` is a per-status sequence number: it positions a task inside its
column and means nothing across columns.

Reordering is always computed from the list the user currently sees (after
project/priority/search filters and the active sort). Tasks hidden by a
filter keep their old order values; a drag only reflows what is visible.
"""

from __future__ import annotations

from collections.abc import Iterable

from .task_models import Task, TaskStatus


def next_order(tasks: Iterable[Task], status: TaskStatus) -> int:
    """Order value for a task appended to `status`."""
    return sum(1 for t in tasks if t.status == status)


def reflow_bucket(
    visible: Iterable[Task],
    moved: Task,
    status: TaskStatus,
    new_index: int | None = None,
) -> list[Task]:
    """
    Insert `moved` into the visible `status` column and renumber it.

    The column is `visible` restricted to `status` without `moved`; `moved`
    goes to `new_index` (appended when the index is None, negative or past
    the end). Every task of the resulting sequence gets order = position.
    Returns the sequence.
    """
    column = [t for t in visible if t.status == status and t.id != moved.id]
    if new_index is None or new_index < 0 or new_index > len(column):
        column.append(moved)
    else:
        column.insert(new_index, moved)

    for position, task in enumerate(column):
        task.order = position
    return column
