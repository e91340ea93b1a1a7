# src/task_dashboard/core/dashboard.py

from __future__ import annotations

"""
Application context: the one place the presentation layer talks to.

Each intent runs synchronously, collects the signals raised while it ran and
returns them with a fresh snapshot, so the caller can re-render and show
notices without reaching into the stores.
"""

import logging
from dataclasses import dataclass

from ..tasks.task_models import Category, Task, TaskValidationError
from ..tasks.task_store import TaskStore
from ..themes.theme_manager import InitResult, ThemeManager
from ..themes.theme_models import ThemeDefinition, ThemeName
from .signals import Signal, SignalBus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskResult:
    ok: bool
    tasks: tuple[Task, ...]
    progress: int
    signals: tuple[Signal, ...] = ()
    task: Task | None = None


@dataclass(frozen=True, slots=True)
class ThemeResult:
    ok: bool
    previous: ThemeName
    current: ThemeName
    definition: ThemeDefinition
    signals: tuple[Signal, ...] = ()


@dataclass(frozen=True, slots=True)
class StartupResult:
    theme: InitResult
    tasks: tuple[Task, ...]
    progress: int
    signals: tuple[Signal, ...] = ()


class Dashboard:
    def __init__(self, task_store: TaskStore, theme_manager: ThemeManager, signals: SignalBus) -> None:
        self.task_store = task_store
        self.theme_manager = theme_manager
        self.signals = signals

    def _task_result(self, ok: bool, raised: list[Signal], task: Task | None = None) -> TaskResult:
        return TaskResult(
            ok=ok,
            tasks=self.task_store.tasks,
            progress=self.task_store.progress(),
            signals=tuple(raised),
            task=task,
        )

    def _theme_result(self, ok: bool, previous: ThemeName, raised: list[Signal]) -> ThemeResult:
        return ThemeResult(
            ok=ok,
            previous=previous,
            current=self.theme_manager.get_current_theme(),
            definition=self.theme_manager.get_current_theme_config(),
            signals=tuple(raised),
        )

    # ---- intents ----

    def request_initialize(self) -> StartupResult:
        with self.signals.collect() as raised:
            theme = self.theme_manager.initialize()
            self.task_store.load()
        # Both stores share the key-value store and report the same outage.
        signals = tuple(dict.fromkeys(raised))
        logger.info(
            "Dashboard initialized theme=%s tasks=%d signals=%d",
            theme.theme,
            len(self.task_store),
            len(signals),
        )
        return StartupResult(
            theme=theme,
            tasks=self.task_store.tasks,
            progress=self.task_store.progress(),
            signals=signals,
        )

    def load_tasks(self) -> TaskResult:
        with self.signals.collect() as raised:
            self.task_store.load()
        return self._task_result(True, raised)

    def submit_task(
        self,
        name: str | None,
        category: Category | str | None,
        scheduled_time: str | None = None,
    ) -> TaskResult:
        with self.signals.collect() as raised:
            try:
                task = self.task_store.add(name, category, scheduled_time)
            except TaskValidationError as e:
                self.signals.emit(Signal.validation(e.reason, str(e)))
                return self._task_result(False, raised)
        return self._task_result(True, raised, task)

    def toggle_task(self, task_id: str) -> TaskResult:
        with self.signals.collect() as raised:
            ok = self.task_store.toggle_completion(task_id)
        return self._task_result(ok, raised, self.task_store.get(task_id))

    def request_delete_task(self, task_id: str, *, confirmed: bool) -> TaskResult:
        removed = self.task_store.get(task_id)
        with self.signals.collect() as raised:
            ok = self.task_store.delete(task_id, confirmed=confirmed)
        return self._task_result(ok, raised, removed)

    def select_theme(self, name: str) -> ThemeResult:
        previous = self.theme_manager.get_current_theme()
        with self.signals.collect() as raised:
            ok = self.theme_manager.set_theme(name)
        return self._theme_result(ok, previous, raised)

    def reset_theme(self) -> ThemeResult:
        previous = self.theme_manager.get_current_theme()
        with self.signals.collect() as raised:
            ok = self.theme_manager.reset()
        return self._theme_result(ok, previous, raised)
