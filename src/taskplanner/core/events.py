# src/taskplanner/core/events.py

from __future__ import annotations

import logging

from .ports import PlannerListener

logger = logging.getLogger(__name__)


class NullListener:
    """No-op PlannerListener; subclass and override only what you need."""

    def on_state_changed(self) -> None:
        return

    def on_notify(self, title: str, body: str) -> None:
        return

    def on_audible_alert(self) -> None:
        return

    def on_warning(self, message: str) -> None:
        return


class EventHub:
    """
    Fan-out channel from the core to its subscribers.

    A failing subscriber is logged and skipped; it never aborts the mutation
    that triggered the event.
    """

    def __init__(self) -> None:
        self._listeners: list[PlannerListener] = []

    def subscribe(self, listener: PlannerListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: PlannerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def state_changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener.on_state_changed()
            except Exception:
                logger.exception("on_state_changed failed listener=%r", listener)

    def notify(self, title: str, body: str) -> None:
        logger.debug("notify title=%r body=%r", title, body)
        for listener in list(self._listeners):
            try:
                listener.on_notify(title, body)
            except Exception:
                logger.exception("on_notify failed listener=%r", listener)

    def audible_alert(self) -> None:
        for listener in list(self._listeners):
            try:
                listener.on_audible_alert()
            except Exception:
                logger.exception("on_audible_alert failed listener=%r", listener)

    def warning(self, message: str) -> None:
        for listener in list(self._listeners):
            try:
                listener.on_warning(message)
            except Exception:
                logger.exception("on_warning failed listener=%r", listener)
