# src/taskplanner/views/formatting.py

from __future__ import annotations

from datetime import date, datetime, timedelta

SOON_DAYS = 3


def format_time(seconds: int) -> str:
    """Countdown as MM:SS."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


def _parse_day(deadline: str | None) -> date | None:
    if not deadline:
        return None
    try:
        return date.fromisoformat(deadline)
    except ValueError:
        return None


def is_overdue(deadline: str | None, now: datetime) -> bool:
    """True once the whole deadline day has passed."""
    day = _parse_day(deadline)
    return day is not None and day < now.date()


def is_soon(deadline: str | None, now: datetime) -> bool:
    """Due within the next three days (today included) and not overdue."""
    day = _parse_day(deadline)
    if day is None or is_overdue(deadline, now):
        return False
    return day <= now.date() + timedelta(days=SOON_DAYS)


def format_due(deadline: str | None, today: date) -> str:
    day = _parse_day(deadline)
    if day is None:
        return ""
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return day.strftime("%d.%m")
