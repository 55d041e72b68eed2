# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Every variable is optional; unset or empty values fall back to the defaults below.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "PLANNER_APP_NAME": "App display name (default: taskplanner).",
    "PLANNER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "PLANNER_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true). "
    "When false only the timer and reminder loops run until Ctrl+C.",
    # Paths (gitignored)
    "PLANNER_DATA_DIR": "Local data directory, also holds taskplanner.log (default: .local/taskplanner).",
    "PLANNER_STORE_DB_PATH": "SQLite key-value store path (default: <data_dir>/planner.sqlite3).",
    "PLANNER_EXPORT_DIR": "Directory for /export without a path (default: <data_dir>/exports).",
    "PLANNER_STORAGE_NAMESPACE": "Prefix of every stored key (default: taskplanner).",
    # Background loops
    "PLANNER_TICK_INTERVAL_SECONDS": "Pomodoro tick period (default: 1.0).",
    "PLANNER_REMINDER_INTERVAL_SECONDS": "Deadline reminder poll period (default: 60.0).",
    "PLANNER_REMINDER_DEADLINE_HOUR": "Local hour a deadline day is due at (default: 9).",
    # Pomodoro defaults (seed a fresh planner; stored settings win afterwards)
    "PLANNER_POMODORO_WORK_MINUTES": "Work session length (default: 25).",
    "PLANNER_POMODORO_BREAK_MINUTES": "Short break length (default: 5).",
    "PLANNER_POMODORO_LONG_BREAK_MINUTES": "Long break length (default: 15).",
    "PLANNER_POMODOROS_UNTIL_LONG_BREAK": "Work sessions per long break (default: 4).",
    "PLANNER_POMODORO_SOUND": "Beep on every timer transition (true/false, default: true).",
}
