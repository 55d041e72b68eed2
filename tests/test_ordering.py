# tests/test_ordering.py

from __future__ import annotations

from taskplanner.tasks.ordering import next_order, reflow_bucket
from taskplanner.tasks.task_models import Task, TaskStatus


def _task(tid: str, status: TaskStatus = TaskStatus.TODO, order: int = 0) -> Task:
    return Task(id=tid, title=tid, created_at="", status=status, order=order)


def test_next_order_counts_status_only() -> None:
    tasks = [_task("a"), _task("b"), _task("c", TaskStatus.DONE)]
    assert next_order(tasks, TaskStatus.TODO) == 2
    assert next_order(tasks, TaskStatus.DONE) == 1
    assert next_order(tasks, TaskStatus.IN_PROGRESS) == 0


def test_reflow_inserts_at_index_and_renumbers() -> None:
    a, b, c = _task("a", order=0), _task("b", order=1), _task("c", order=2)
    moved = _task("m", TaskStatus.DONE, order=7)
    moved.status = TaskStatus.TODO

    column = reflow_bucket([a, b, c, moved], moved, TaskStatus.TODO, 1)

    assert [t.id for t in column] == ["a", "m", "b", "c"]
    assert [t.order for t in column] == [0, 1, 2, 3]


def test_reflow_appends_when_index_out_of_range() -> None:
    a, b = _task("a"), _task("b", order=1)
    for index in (None, -1, 99):
        moved = _task("m")
        column = reflow_bucket([a, b], moved, TaskStatus.TODO, index)
        assert column[-1] is moved
        assert moved.order == 2


def test_reflow_within_same_column() -> None:
    a, b, c = _task("a", order=0), _task("b", order=1), _task("c", order=2)
    column = reflow_bucket([a, b, c], c, TaskStatus.TODO, 0)
    assert [t.id for t in column] == ["c", "a", "b"]
    assert (c.order, a.order, b.order) == (0, 1, 2)


def test_hidden_tasks_keep_their_order() -> None:
    visible = [_task("a", order=0), _task("b", order=3)]
    hidden = _task("h", order=1)
    moved = _task("m", order=5)

    reflow_bucket(visible + [moved], moved, TaskStatus.TODO, 0)

    assert hidden.order == 1
    assert moved.order == 0
    assert [t.order for t in visible] == [1, 2]


def test_other_columns_are_untouched() -> None:
    done = _task("d", TaskStatus.DONE, order=4)
    moved = _task("m")
    reflow_bucket([done, moved], moved, TaskStatus.TODO, 0)
    assert done.order == 4
