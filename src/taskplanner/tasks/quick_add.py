# src/taskplanner/tasks/quick_add.py

"""
Quick-add parser.

Turns one line such as

    Buy milk !h @home #errand >morgen

into a TaskDraft. Recognized tokens (case-insensitive, any order, each removed
from the title):

    !h !high !m !medium !l !low   priority (default: medium)
    @name                         first project whose name contains "name"
    #tag                          tags, in order of appearance
    >today >heute                 deadline today
    >tomorrow >morgen             deadline tomorrow
    >YYYY-MM-DD                   literal deadline

Only the first priority, project and deadline token is used. Unknown deadline
values and unmatched project names are still stripped.

The parser never rejects input. An empty title in the result means there was
nothing but tokens; callers must not create a task from it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, timedelta

from .task_models import Priority, Project, TaskDraft, TaskStatus

PRIORITY_RE = re.compile(r"(?<!\S)!(high|h|medium|m|low|l)(?!\S)", re.IGNORECASE)
PROJECT_RE = re.compile(r"(?<!\S)@(\S+)")
TAG_RE = re.compile(r"(?<!\S)#(\S+)")
DEADLINE_RE = re.compile(r"(?<!\S)>(\S+)")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WS_RE = re.compile(r"\s+")

_PRIORITY_ALIASES = {
    "h": Priority.HIGH,
    "high": Priority.HIGH,
    "m": Priority.MEDIUM,
    "medium": Priority.MEDIUM,
    "l": Priority.LOW,
    "low": Priority.LOW,
}

TODAY_WORDS = frozenset({"today", "heute"})
TOMORROW_WORDS = frozenset({"tomorrow", "morgen"})


def _strip_first(pattern: re.Pattern[str], text: str) -> tuple[re.Match[str] | None, str]:
    m = pattern.search(text)
    if not m:
        return None, text
    return m, text[: m.start()] + text[m.end() :]


def resolve_deadline(value: str, today: date) -> str | None:
    """
    Map a quick-add deadline word to an ISO date (or None if not understood).

    A YYYY-MM-DD literal is returned as written, without calendar checks.
    """
    v = value.strip().lower()
    if v in TODAY_WORDS:
        return today.isoformat()
    if v in TOMORROW_WORDS:
        return (today + timedelta(days=1)).isoformat()
    if ISO_DATE_RE.match(v):
        return v
    return None


def find_project(projects: Iterable[Project], name: str) -> Project | None:
    needle = name.lower()
    for project in projects:
        if needle in project.name.lower():
            return project
    return None


def parse_quick_add(
    text: str,
    *,
    projects: Iterable[Project] = (),
    today: date,
    default_status: TaskStatus = TaskStatus.TODO,
) -> TaskDraft:
    title = text or ""
    draft = TaskDraft(title="", status=default_status)

    m, title = _strip_first(PRIORITY_RE, title)
    if m:
        draft.priority = _PRIORITY_ALIASES[m.group(1).lower()]

    m, title = _strip_first(PROJECT_RE, title)
    if m:
        project = find_project(projects, m.group(1))
        if project is not None:
            draft.project_id = project.id

    draft.tags = TAG_RE.findall(title)
    title = TAG_RE.sub("", title)

    m, title = _strip_first(DEADLINE_RE, title)
    if m:
        draft.deadline = resolve_deadline(m.group(1), today)

    draft.title = WS_RE.sub(" ", title).strip()
    return draft
