# src/taskplanner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage, clocks and notification delivery swappable and makes testing easier.
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of "now". Must return a timezone-aware local datetime."""

    def now(self) -> datetime: ...


class KeyValueStore(Protocol):
    """
    Persistent string key -> string value store.

    Implementations raise StorageError when the backend fails.
    get() returns None for a missing key.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class IdGenerator(Protocol):
    def new_id(self) -> str: ...


class NotificationSender(Protocol):
    """
    Delivery side of notifications (desktop popup, console line, ...).

    Permission is asked once via request_permission(); send() is only called
    by the dispatcher after permission_granted() returned True.
    """

    def request_permission(self) -> bool: ...
    def permission_granted(self) -> bool: ...
    def send(self, title: str, body: str) -> None: ...


class PlannerListener(Protocol):
    """
    Observer of the core (rendering, notification delivery, sound).

    on_state_changed() fires once per completed mutation; there are no
    fine-grained change events, subscribers redraw what they show.
    """

    def on_state_changed(self) -> None: ...
    def on_notify(self, title: str, body: str) -> None: ...
    def on_audible_alert(self) -> None: ...
    def on_warning(self, message: str) -> None: ...
