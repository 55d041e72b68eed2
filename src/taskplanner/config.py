# src/taskplanner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
- Pomodoro defaults here only seed a fresh planner; stored settings win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "PLANNER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env (if present) fills in variables not already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    export_dir: Path
    storage_namespace: str

    # ---- Background loops ----
    tick_interval_seconds: float
    reminder_interval_seconds: float
    reminder_deadline_hour: int

    # ---- Pomodoro defaults (first run only) ----
    pomodoro_work_minutes: int
    pomodoro_break_minutes: int
    pomodoro_long_break_minutes: int
    pomodoros_until_long_break: int
    pomodoro_sound_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskplanner") or "taskplanner"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskplanner"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "planner.sqlite3")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")
        storage_namespace = _env(_k("STORAGE_NAMESPACE"), "taskplanner") or "taskplanner"

        tick_interval_seconds = _env_float(_k("TICK_INTERVAL_SECONDS"), 1.0)
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)
        reminder_deadline_hour = _env_int(_k("REMINDER_DEADLINE_HOUR"), 9)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_db_path=store_db_path,
            export_dir=export_dir,
            storage_namespace=storage_namespace,
            tick_interval_seconds=tick_interval_seconds,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_deadline_hour=reminder_deadline_hour,
            pomodoro_work_minutes=_env_int(_k("POMODORO_WORK_MINUTES"), 25),
            pomodoro_break_minutes=_env_int(_k("POMODORO_BREAK_MINUTES"), 5),
            pomodoro_long_break_minutes=_env_int(_k("POMODORO_LONG_BREAK_MINUTES"), 15),
            pomodoros_until_long_break=_env_int(_k("POMODOROS_UNTIL_LONG_BREAK"), 4),
            pomodoro_sound_enabled=_env_bool(_k("POMODORO_SOUND"), True),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
