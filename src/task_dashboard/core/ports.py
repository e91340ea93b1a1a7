# src/task_dashboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage medium and the presentation layer swappable and makes
the task store and theme manager testable without a terminal or a disk.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from ..themes.theme_models import ThemeDefinition, ThemeName


class StorageBackend(Protocol):
    """
    Raw durable medium.

    Implementations raise StorageError subclasses (see storage/backends.py);
    KeyValueStore turns them into StorageStatus values.
    """

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


@dataclass(frozen=True, slots=True)
class InputState:
    """
    In-progress form input captured around a theme change.

    fields maps a field id to its value (text) or checked flag (toggles).
    """

    fields: Mapping[str, str | bool] = field(default_factory=dict)
    focused: str | None = None
    selection: tuple[int, int] | None = None

    @property
    def empty(self) -> bool:
        return not self.fields and self.focused is None


class ThemePresenter(Protocol):
    """
    Presentation-side port: how the theme manager makes a theme visible.

    Every method may raise; the theme manager treats any exception as a failed
    step of the degradation ladder and never lets it escape.
    """

    def supports_style_variables(self) -> bool: ...

    def apply_theme(self, theme: ThemeDefinition, *, animate: bool) -> None: ...

    def apply_fallback_styling(self) -> None: ...

    def clear_fallback_styling(self) -> None: ...

    def applied_theme(self) -> ThemeName | None: ...

    def capture_input_state(self) -> InputState: ...

    def restore_input_state(self, state: InputState) -> None: ...
