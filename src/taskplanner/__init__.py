"""Offline personal task planner: kanban/list/calendar views, Pomodoro timer, deadline reminders."""

__version__ = "2.0.0"
