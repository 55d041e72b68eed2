# src/taskplanner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskplanner.log"

# Loggers that fire on every timer tick or reminder poll.
_BACKGROUND_PREFIXES = ("taskplanner.pomodoro.", "taskplanner.notifications.")


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable: background loops and other libraries only show problems."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_BACKGROUND_PREFIXES):
            return record.levelno >= logging.WARNING
        if record.name.startswith("taskplanner."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskplanner",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Filtered stderr output for the console plus a full log file in `log_dir`.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_handler = logging.FileHandler(log_file, encoding="utf-8")
    log_handler.setLevel(file_level)
    log_handler.setFormatter(fmt)
    root.addHandler(log_handler)

    return log_file
