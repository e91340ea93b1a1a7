# src/task_dashboard/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..ui.console_presenter import ConsolePresenter
from .dashboard import Dashboard

Confirm = Callable[[str], bool]


def _never_confirm(prompt: str) -> bool:
    return False


@dataclass
class AppState:
    # Store Settings on the state for easy access in commands.
    settings: object

    dashboard: Dashboard
    presenter: ConsolePresenter

    # How destructive commands ask the user. The console swaps in a real prompt;
    # anything non-interactive keeps the default and must pass an explicit -y.
    confirm: Confirm = _never_confirm
