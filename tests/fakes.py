# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from taskplanner.core.errors import StorageError
from taskplanner.core.events import NullListener
from taskplanner.storage.kv_store import InMemoryKeyValueStore

# Wednesday noon: the local date is the same in (almost) every timezone.
DEFAULT_NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)

    def set(self, now: datetime) -> None:
        self.current = now


class SequentialIds:
    """Readable, predictable ids: t1, t2, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self.n = 0

    def new_id(self) -> str:
        self.n += 1
        return f"{self.prefix}{self.n}"


@dataclass(slots=True)
class SentNotification:
    title: str
    body: str


@dataclass(slots=True)
class FakeNotificationSender:
    """
    Fake NotificationSender.

    - `allowed` is what the user answers to the permission request
    - delivered notifications are captured for assertions
    """

    allowed: bool = True
    sent: list[SentNotification] = field(default_factory=list)
    requests: int = 0

    def request_permission(self) -> bool:
        self.requests += 1
        return self.allowed

    def permission_granted(self) -> bool:
        return self.allowed

    def send(self, title: str, body: str) -> None:
        self.sent.append(SentNotification(title=title, body=body))


class RecordingListener(NullListener):
    def __init__(self) -> None:
        self.changes = 0
        self.notifications: list[tuple[str, str]] = []
        self.alerts = 0
        self.warnings: list[str] = []

    def on_state_changed(self) -> None:
        self.changes += 1

    def on_notify(self, title: str, body: str) -> None:
        self.notifications.append((title, body))

    def on_audible_alert(self) -> None:
        self.alerts += 1

    def on_warning(self, message: str) -> None:
        self.warnings.append(message)


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Accepts reads; every write fails once `fail_writes` is set."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("quota exceeded", key=key)
        super().set(key, value)
