# src/taskplanner/pomodoro/settings.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_POMODOROS_UNTIL_LONG_BREAK = 4


def _positive_int(raw: Any, default: int) -> int:
    # 0, negatives and garbage all mean "use the default".
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


@dataclass(slots=True, frozen=True)
class PomodoroSettings:
    """Durations are whole minutes."""

    work_duration: int = DEFAULT_WORK_MINUTES
    break_duration: int = DEFAULT_BREAK_MINUTES
    long_break_duration: int = DEFAULT_LONG_BREAK_MINUTES
    pomodoros_until_long_break: int = DEFAULT_POMODOROS_UNTIL_LONG_BREAK
    sound_enabled: bool = True

    def normalized(self) -> PomodoroSettings:
        return PomodoroSettings(
            work_duration=_positive_int(self.work_duration, DEFAULT_WORK_MINUTES),
            break_duration=_positive_int(self.break_duration, DEFAULT_BREAK_MINUTES),
            long_break_duration=_positive_int(self.long_break_duration, DEFAULT_LONG_BREAK_MINUTES),
            pomodoros_until_long_break=_positive_int(
                self.pomodoros_until_long_break, DEFAULT_POMODOROS_UNTIL_LONG_BREAK
            ),
            sound_enabled=bool(self.sound_enabled),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "workDuration": self.work_duration,
            "breakDuration": self.break_duration,
            "longBreakDuration": self.long_break_duration,
            "pomodorosUntilLongBreak": self.pomodoros_until_long_break,
            "soundEnabled": self.sound_enabled,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, base: PomodoroSettings | None = None) -> PomodoroSettings:
        b = base or cls()
        return cls(
            work_duration=_positive_int(raw.get("workDuration"), b.work_duration),
            break_duration=_positive_int(raw.get("breakDuration"), b.break_duration),
            long_break_duration=_positive_int(raw.get("longBreakDuration"), b.long_break_duration),
            pomodoros_until_long_break=_positive_int(
                raw.get("pomodorosUntilLongBreak"), b.pomodoros_until_long_break
            ),
            sound_enabled=bool(raw.get("soundEnabled", b.sound_enabled)),
        )
