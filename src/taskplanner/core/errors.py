# src/taskplanner/core/errors.py

"""
Error taxonomy for the planner core.

Nothing here is fatal: callers catch these, log them and degrade to
"feature unavailable" plus a user-visible message.

Missing ids are not errors at all. Mutations referencing an unknown task or
project silently no-op (stale UI references are the only way to get one).
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for planner errors."""


class StorageError(PlannerError):
    """Reading from or writing to the key-value store failed."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ImportValidationError(PlannerError):
    """An imported payload is malformed; nothing was changed."""


class PermissionDenied(PlannerError):
    """The notification sender refused permission."""
