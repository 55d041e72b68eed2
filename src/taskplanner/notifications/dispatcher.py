# src/taskplanner/notifications/dispatcher.py

from __future__ import annotations

import logging

from ..core.errors import PermissionDenied
from ..core.events import NullListener
from ..core.ports import NotificationSender
from ..tasks.task_store import PlannerStore

logger = logging.getLogger(__name__)


class NotificationDispatcher(NullListener):
    """
    Delivers core notifications through a NotificationSender.

    Subscribed to the EventHub. A notification is delivered only while the
    planner-wide flag is on and the sender still reports permission; otherwise
    it is dropped (logged at DEBUG).
    """

    def __init__(self, store: PlannerStore, sender: NotificationSender) -> None:
        self._store = store
        self._sender = sender

    def on_notify(self, title: str, body: str) -> None:
        if not self._store.notifications_enabled:
            logger.debug("Notification dropped (disabled): %s", title)
            return
        if not self._sender.permission_granted():
            logger.debug("Notification dropped (no permission): %s", title)
            return
        self._sender.send(title, body)

    def require_permission(self) -> None:
        """Ask the sender for permission; raise PermissionDenied if refused."""
        if not self._sender.request_permission():
            raise PermissionDenied("notification permission was refused")

    @property
    def permission_granted(self) -> bool:
        return self._sender.permission_granted()
