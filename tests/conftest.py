# tests/conftest.py

from __future__ import annotations

import io
from pathlib import Path
from types import SimpleNamespace

import pytest

from task_dashboard.core.dashboard import Dashboard
from task_dashboard.core.signals import SignalBus
from task_dashboard.core.state import AppState
from task_dashboard.storage.kv_store import KeyValueStore
from task_dashboard.tasks.task_store import TaskStore
from task_dashboard.themes.theme_manager import ThemeManager
from task_dashboard.ui.console_presenter import ConsolePresenter

from .fakes import FakePresenter, FlakyBackend, SignalRecorder


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment and .env.
    """
    return SimpleNamespace(
        app_name="Task Dashboard",
        log_level="WARNING",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.sqlite3",
        storage_backend="sqlite",
        storage_quota_bytes=0,
        tasks_key="taskDashboardTasks",
        theme_key="taskDashboardTheme",
        large_data_warning_bytes=1024 * 1024,
        quota_fallback_incomplete_only=False,
        color_mode="never",
        truecolor=False,
    )


@pytest.fixture()
def backend() -> FlakyBackend:
    return FlakyBackend()


@pytest.fixture()
def kv(backend: FlakyBackend) -> KeyValueStore:
    return KeyValueStore(backend)


@pytest.fixture()
def recorder() -> SignalRecorder:
    return SignalRecorder()


@pytest.fixture()
def bus(recorder: SignalRecorder) -> SignalBus:
    b = SignalBus()
    b.subscribe(recorder)
    return b


@pytest.fixture()
def ids():
    """Deterministic id factory: t1, t2, ..."""
    counter = iter(range(1, 10_000))
    return lambda: f"t{next(counter)}"


@pytest.fixture()
def task_store(kv: KeyValueStore, bus: SignalBus, ids) -> TaskStore:
    return TaskStore(kv, bus, id_factory=ids)


@pytest.fixture()
def presenter() -> FakePresenter:
    return FakePresenter()


@pytest.fixture()
def theme_manager(kv: KeyValueStore, presenter: FakePresenter, bus: SignalBus) -> ThemeManager:
    return ThemeManager(kv, presenter, bus)


@pytest.fixture()
def dashboard(task_store: TaskStore, theme_manager: ThemeManager, bus: SignalBus) -> Dashboard:
    return Dashboard(task_store, theme_manager, bus)


@pytest.fixture()
def state(settings: SimpleNamespace, dashboard: Dashboard) -> AppState:
    """
    AppState wired for command tests: real stores over FlakyBackend, and a
    console presenter writing plain text into a buffer.
    """
    console = ConsolePresenter(color_mode="never", stream=io.StringIO())
    return AppState(settings=settings, dashboard=dashboard, presenter=console)
