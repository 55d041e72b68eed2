# tests/test_quick_add.py

from __future__ import annotations

from datetime import date

import pytest

from taskplanner.tasks.quick_add import parse_quick_add, resolve_deadline
from taskplanner.tasks.task_models import Priority, Project, TaskStatus

TODAY = date(2024, 5, 15)

PROJECTS = [
    Project(id="p-home", name="Home", created_at=""),
    Project(id="p-work", name="Work stuff", created_at=""),
]


def test_full_line_is_parsed_and_tokens_removed() -> None:
    d = parse_quick_add("Buy milk !h @home #errand >morgen", projects=PROJECTS, today=TODAY)

    assert d.title == "Buy milk"
    assert d.priority == Priority.HIGH
    assert d.project_id == "p-home"
    assert d.tags == ["errand"]
    assert d.deadline == "2024-05-16"
    assert d.status == TaskStatus.TODO


def test_defaults_without_tokens() -> None:
    d = parse_quick_add("  plain   task  ", today=TODAY)
    assert d.title == "plain task"
    assert d.priority == Priority.MEDIUM
    assert d.project_id is None
    assert d.tags == []
    assert d.deadline is None


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("!h", Priority.HIGH),
        ("!HIGH", Priority.HIGH),
        ("!m", Priority.MEDIUM),
        ("!low", Priority.LOW),
        ("!L", Priority.LOW),
    ],
)
def test_priority_tokens(token: str, expected: Priority) -> None:
    d = parse_quick_add(f"Task {token}", today=TODAY)
    assert d.priority == expected
    assert d.title == "Task"


def test_only_first_priority_is_used() -> None:
    d = parse_quick_add("Task !low !high", today=TODAY)
    assert d.priority == Priority.LOW
    assert d.title == "Task !high"


def test_exclamation_inside_word_is_not_a_token() -> None:
    d = parse_quick_add("Wow!h nice", today=TODAY)
    assert d.priority == Priority.MEDIUM
    assert d.title == "Wow!h nice"


def test_project_matches_by_case_insensitive_substring() -> None:
    d = parse_quick_add("Report @WORK", projects=PROJECTS, today=TODAY)
    assert d.project_id == "p-work"
    assert d.title == "Report"


def test_unknown_project_is_stripped_without_assignment() -> None:
    d = parse_quick_add("Report @nowhere", projects=PROJECTS, today=TODAY)
    assert d.project_id is None
    assert d.title == "Report"


def test_tags_keep_order_and_are_all_removed() -> None:
    d = parse_quick_add("#a Write #b docs #c", today=TODAY)
    assert d.tags == ["a", "b", "c"]
    assert d.title == "Write docs"


@pytest.mark.parametrize(
    ("word", "expected"),
    [
        ("today", "2024-05-15"),
        ("heute", "2024-05-15"),
        ("Tomorrow", "2024-05-16"),
        ("morgen", "2024-05-16"),
        ("2024-12-24", "2024-12-24"),
    ],
)
def test_deadline_words(word: str, expected: str) -> None:
    d = parse_quick_add(f"Task >{word}", today=TODAY)
    assert d.deadline == expected
    assert d.title == "Task"


def test_unknown_deadline_is_stripped_and_ignored() -> None:
    d = parse_quick_add("Task >someday", today=TODAY)
    assert d.deadline is None
    assert d.title == "Task"


def test_literal_date_is_kept_verbatim() -> None:
    assert resolve_deadline("2024-02-30", TODAY) == "2024-02-30"
    d = parse_quick_add("x >2024-02-30", today=date(2024, 1, 1))
    assert d.title == "x"
    assert d.deadline == "2024-02-30"


def test_tomorrow_rolls_over_month_end() -> None:
    assert resolve_deadline("tomorrow", date(2024, 5, 31)) == "2024-06-01"


def test_only_tokens_yields_empty_title() -> None:
    d = parse_quick_add("!h #x >today", today=TODAY)
    assert d.title == ""


def test_default_status_is_carried() -> None:
    d = parse_quick_add("Doing it", today=TODAY, default_status=TaskStatus.IN_PROGRESS)
    assert d.status == TaskStatus.IN_PROGRESS
