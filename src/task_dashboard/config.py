# src/task_dashboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Read-only: stores and the theme manager are built from it once, in bootstrap.
- Nothing is required; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDASH"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


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


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    return v if v in choices else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _color_mode_from_env() -> str:
    # NO_COLOR / FORCE_COLOR are cross-tool conventions; they beat our own switch.
    if os.getenv("NO_COLOR") is not None:
        return "never"
    if _env_bool("FORCE_COLOR", False):
        return "always"
    return _env_choice(_k("COLOR"), "auto", {"auto", "always", "never"})


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_path: Path

    # ---- Storage ----
    storage_backend: str  # "sqlite" | "memory"
    storage_quota_bytes: int  # 0 = unlimited
    tasks_key: str
    theme_key: str
    large_data_warning_bytes: int
    quota_fallback_incomplete_only: bool

    # ---- Presentation ----
    color_mode: str  # "auto" | "always" | "never"
    truecolor: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Task Dashboard")
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_dashboard"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.sqlite3")

        storage_backend = _env_choice(_k("STORAGE_BACKEND"), "sqlite", {"sqlite", "memory"})
        storage_quota_bytes = max(0, _env_int(_k("STORAGE_QUOTA_BYTES"), 0))
        tasks_key = _env(_k("TASKS_KEY"), "taskDashboardTasks")
        theme_key = _env(_k("THEME_KEY"), "taskDashboardTheme")
        large_data_warning_bytes = _env_int(_k("LARGE_DATA_WARNING_BYTES"), 1024 * 1024)
        quota_fallback_incomplete_only = _env_bool(_k("QUOTA_FALLBACK_INCOMPLETE_ONLY"), False)

        color_mode = _color_mode_from_env()
        colorterm = os.getenv("COLORTERM", "").lower()
        truecolor = _env_bool(_k("TRUECOLOR"), "truecolor" in colorterm or "24bit" in colorterm)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            storage_backend=storage_backend,
            storage_quota_bytes=storage_quota_bytes,
            tasks_key=tasks_key,
            theme_key=theme_key,
            large_data_warning_bytes=large_data_warning_bytes,
            quota_fallback_incomplete_only=quota_fallback_incomplete_only,
            color_mode=color_mode,
            truecolor=truecolor,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
