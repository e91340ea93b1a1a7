# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use a local, gitignored .env for overrides.

This file exists to make the repo self-documenting without reading config.py.
"""

ENV_VARS = {
    # App / logging
    "TASKDASH_APP_NAME": "App display name (default: Task Dashboard).",
    "TASKDASH_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKDASH_DATA_DIR": "Local data directory (default: .local/task_dashboard).",
    "TASKDASH_STORAGE_PATH": "SQLite key-value file (default: <data_dir>/storage.sqlite3).",
    # Storage
    "TASKDASH_STORAGE_BACKEND": "sqlite (durable, default) or memory (session only).",
    "TASKDASH_STORAGE_QUOTA_BYTES": "Max bytes per stored value, 0 = unlimited (default: 0).",
    "TASKDASH_TASKS_KEY": "Storage key for the task list (default: taskDashboardTasks).",
    "TASKDASH_THEME_KEY": "Storage key for the theme preference (default: taskDashboardTheme).",
    "TASKDASH_LARGE_DATA_WARNING_BYTES": "Warn when the saved task list exceeds this size (default: 1 MiB).",
    "TASKDASH_QUOTA_FALLBACK_INCOMPLETE_ONLY": (
        "When storage is full, save only incomplete tasks (true/false, default: false)."
    ),
    # Presentation
    "TASKDASH_COLOR": "auto, always or never (default: auto). NO_COLOR and FORCE_COLOR win.",
    "TASKDASH_TRUECOLOR": "24-bit colors (default: detected from COLORTERM).",
}
