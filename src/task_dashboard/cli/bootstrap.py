# src/task_dashboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the storage adapter, task store, theme manager and presenter exactly
  once and wires them into AppState.

Nothing downstream reaches for module-level instances; everything is passed in.
"""

from __future__ import annotations

import logging
from typing import TextIO

from ..config import get_settings
from ..core.dashboard import Dashboard
from ..core.ports import StorageBackend
from ..core.signals import SignalBus
from ..core.state import AppState
from ..storage.backends import MemoryBackend, SqliteBackend
from ..storage.kv_store import KeyValueStore
from ..tasks.task_store import TaskStore
from ..themes.theme_manager import ThemeManager
from ..ui.console_presenter import ConsolePresenter

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Storage will report itself unavailable; the session runs in memory.
        logger.warning("Could not create data directories under %s", settings.data_dir, exc_info=True)


def build_backend(settings) -> StorageBackend:
    quota = int(getattr(settings, "storage_quota_bytes", 0) or 0)
    if getattr(settings, "storage_backend", "sqlite") == "memory":
        logger.info("Using session-only memory storage")
        return MemoryBackend(quota_bytes=quota)
    return SqliteBackend(settings.storage_path, quota_bytes=quota)


def create_initial_state(*, settings=None, stream: TextIO | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    signals = SignalBus()
    kv = KeyValueStore(build_backend(settings))
    presenter = ConsolePresenter(
        color_mode=getattr(settings, "color_mode", "auto"),
        truecolor=bool(getattr(settings, "truecolor", False)),
        stream=stream,
    )

    task_store = TaskStore(
        kv,
        signals,
        key=settings.tasks_key,
        large_data_warning_bytes=settings.large_data_warning_bytes,
        quota_fallback_incomplete_only=settings.quota_fallback_incomplete_only,
    )
    theme_manager = ThemeManager(kv, presenter, signals, key=settings.theme_key)
    signals.subscribe(presenter.pin)

    return AppState(
        settings=settings,
        dashboard=Dashboard(task_store, theme_manager, signals),
        presenter=presenter,
    )
