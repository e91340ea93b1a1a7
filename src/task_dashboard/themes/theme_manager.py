# src/task_dashboard/themes/theme_manager.py

from __future__ import annotations

"""
Theme manager.

Owns the active theme name and walks the degradation ladder when the
environment cannot show it:

1. theme with transition (set_theme)
2. theme without transition (startup, recovery)
3. hardcoded fallback styling (style variables unsupported, or nothing applies)
4. logical state stays White even if (3) fails

The decision part (plan_theme_change) is pure; the presenter does the drawing.
"""

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..core.ports import InputState, ThemePresenter
from ..core.signals import (
    STORAGE_UNAVAILABLE_MESSAGE,
    Capability,
    Signal,
    SignalBus,
    SignalKind,
    ValidationReason,
)
from ..storage.kv_store import KeyValueStore
from .theme_models import DEFAULT_THEME, THEMES, ThemeDefinition, ThemeName, parse_theme_name

logger = logging.getLogger(__name__)

DEFAULT_THEME_KEY = "taskDashboardTheme"


@dataclass(frozen=True, slots=True)
class ThemeChange:
    previous: ThemeName
    target: ThemeName
    invalid: bool = False

    @property
    def noop(self) -> bool:
        return self.previous is self.target

    @property
    def persist(self) -> bool:
        return not self.noop


def plan_theme_change(current: ThemeName, requested: object) -> ThemeChange:
    """Validate a requested name; invalid input is replaced by the default theme."""
    target = parse_theme_name(requested)
    if target is None:
        return ThemeChange(previous=current, target=DEFAULT_THEME, invalid=True)
    return ThemeChange(previous=current, target=target)


@dataclass(frozen=True, slots=True)
class ThemeChanged:
    previous: ThemeName
    current: ThemeName
    definition: ThemeDefinition


@dataclass(frozen=True, slots=True)
class InitResult:
    theme: ThemeName
    style_variables_supported: bool
    storage_available: bool
    had_stored_preference: bool
    fallback_mode: bool

    @property
    def ok(self) -> bool:
        return not self.fallback_mode


@dataclass(frozen=True, slots=True)
class ThemeStatus:
    initialized: bool
    current_theme: ThemeName
    storage_available: bool
    style_variables_supported: bool
    has_stored_preference: bool
    stored_theme: ThemeName | None
    fallback_mode: bool
    fallback_styling: bool
    applied_theme: ThemeName | None


@dataclass(slots=True)
class IntegrityReport:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


ThemeObserver = Callable[[ThemeChanged], None]


class ThemeManager:
    def __init__(
        self,
        kv: KeyValueStore,
        presenter: ThemePresenter,
        signals: SignalBus,
        *,
        key: str = DEFAULT_THEME_KEY,
    ) -> None:
        self._kv = kv
        self._presenter = presenter
        self._signals = signals
        self._key = key

        self._current: ThemeName = DEFAULT_THEME
        self._initialized = False
        self._fallback_mode = False
        # No theme is applied; hardcoded styling (or nothing) is on screen.
        self._fallback_styling = False
        self._observers: list[ThemeObserver] = []

    # ---- read accessors ----

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def fallback_mode(self) -> bool:
        return self._fallback_mode

    @property
    def fallback_styling(self) -> bool:
        return self._fallback_styling

    def get_current_theme(self) -> ThemeName:
        return self._current

    def get_current_theme_config(self) -> ThemeDefinition:
        return THEMES[self._current]

    def get_available_themes(self) -> list[ThemeDefinition]:
        return list(THEMES.values())

    def get_theme_config(self, name: object) -> ThemeDefinition | None:
        theme = parse_theme_name(name)
        return THEMES[theme] if theme is not None else None

    def on_change(self, observer: ThemeObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(observer)

        return _remove

    # ---- presenter steps (never raise) ----

    def _style_variables_supported(self) -> bool:
        try:
            return bool(self._presenter.supports_style_variables())
        except Exception:
            logger.warning("Style variable support detection failed", exc_info=True)
            return False

    def _apply(self, name: ThemeName, *, animate: bool) -> bool:
        try:
            self._presenter.apply_theme(THEMES[name], animate=animate)
            return True
        except Exception:
            logger.exception("Error applying theme %s (animate=%s)", name, animate)
            return False

    def _apply_fallback_styling(self) -> None:
        """Ladder steps 3-4: hardcoded styling, logical state White either way."""
        self._current = DEFAULT_THEME
        self._fallback_styling = True
        try:
            self._presenter.apply_fallback_styling()
            logger.info("Applied fallback styling")
        except Exception:
            logger.exception("Fallback styling failed; keeping logical theme=%s", self._current)

    def _clear_fallback_styling(self) -> None:
        try:
            self._presenter.clear_fallback_styling()
        except Exception:
            logger.warning("Could not clear fallback styling", exc_info=True)
        self._fallback_styling = False

    def _enter_fallback_mode(self) -> None:
        """No style variables at all: theme switching stays off until reset()."""
        self._fallback_mode = True
        self._apply_fallback_styling()

    def _capture_input(self) -> InputState | None:
        try:
            return self._presenter.capture_input_state()
        except Exception:
            logger.warning("Could not capture input state", exc_info=True)
            return None

    def _restore_input(self, state: InputState | None) -> None:
        if state is None or state.empty:
            return
        try:
            self._presenter.restore_input_state(state)
        except Exception:
            logger.warning("Could not restore input state", exc_info=True)

    def _notify(self, event: ThemeChanged) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Theme observer failed")

    def _recover(self) -> None:
        """Ladder steps 2-4 after a failed application."""
        logger.info("Attempting theme recovery (current=%s)", self._current)
        if self._apply(self._current, animate=False):
            return
        if self._current is not DEFAULT_THEME and self._apply(DEFAULT_THEME, animate=False):
            self._current = DEFAULT_THEME
            return
        logger.error("All theme recovery attempts failed, applying fallback styling")
        self._apply_fallback_styling()

    # ---- persistence ----

    def _load_preference(self) -> ThemeName | None:
        raw = self._kv.get(self._key)
        if not raw:
            return None
        name = parse_theme_name(raw)
        if name is None:
            logger.warning("Invalid saved theme %r, clearing preference", raw)
            self._kv.remove(self._key)
            self._signals.emit(Signal.validation(ValidationReason.INVALID_STORED_THEME))
            return None
        return name

    def _save_preference(self, name: ThemeName) -> bool:
        status = self._kv.put(self._key, name.value)
        if not status.ok:
            self._signals.emit(
                Signal.persistence(
                    SignalKind.PERSISTENCE_WARNING,
                    "Theme changed but preference could not be saved. "
                    "You may need to reselect your theme after restarting.",
                    status,
                )
            )
            return False
        return True

    # ---- state transitions ----

    def initialize(self) -> InitResult:
        logger.info("Starting theme system initialization")

        if not self._style_variables_supported():
            self._signals.emit(
                Signal.capability_error(
                    Capability.STYLE_VARIABLES,
                    "Your terminal does not support theme colors. Using default theme.",
                )
            )
            self._enter_fallback_mode()
            self._initialized = True
            return InitResult(
                theme=self._current,
                style_variables_supported=False,
                storage_available=self._kv.is_available(),
                had_stored_preference=False,
                fallback_mode=True,
            )

        storage_available = self._kv.is_available()
        if not storage_available:
            self._signals.emit(
                Signal.capability_error(Capability.STORAGE, STORAGE_UNAVAILABLE_MESSAGE)
            )

        stored = self._load_preference() if storage_available else None
        target = stored or DEFAULT_THEME

        if self._apply(target, animate=False):
            self._current = target
        else:
            self._signals.emit(
                Signal(SignalKind.APPLICATION_ERROR, f"Failed to apply theme {target.value}.")
            )
            self._current = DEFAULT_THEME
            if target is DEFAULT_THEME or not self._apply(DEFAULT_THEME, animate=False):
                self._apply_fallback_styling()

        self._initialized = True
        result = InitResult(
            theme=self._current,
            style_variables_supported=True,
            storage_available=storage_available,
            had_stored_preference=stored is not None,
            fallback_mode=self._fallback_mode or self._fallback_styling,
        )
        logger.info(
            "Theme system initialized theme=%s storage=%s stored=%s fallback=%s",
            result.theme,
            result.storage_available,
            result.had_stored_preference,
            result.fallback_mode,
        )
        return result

    def set_theme(self, name: object) -> bool:
        change = plan_theme_change(self._current, name)
        if change.invalid:
            logger.warning("Invalid theme name %r, using %s", name, change.target)
            self._signals.emit(Signal.validation(ValidationReason.INVALID_THEME))

        if self._fallback_mode:
            self._signals.emit(
                Signal.capability_error(
                    Capability.STYLE_VARIABLES,
                    "Theme switching is disabled: theme colors are not supported here.",
                )
            )
            return False

        if change.noop and not self._fallback_styling:
            logger.debug("Theme %s already active", change.target)
            return True

        recovering = self._fallback_styling
        captured = self._capture_input()

        if not self._apply(change.target, animate=True):
            self._signals.emit(
                Signal(
                    SignalKind.APPLICATION_ERROR,
                    "Failed to apply theme. Restart the app if colors look broken.",
                )
            )
            self._recover()
            return False

        if recovering:
            self._clear_fallback_styling()
        self._current = change.target
        if change.persist or recovering:
            self._save_preference(change.target)
        self._restore_input(captured)
        self._notify(
            ThemeChanged(
                previous=change.previous,
                current=change.target,
                definition=THEMES[change.target],
            )
        )
        logger.info("Theme changed to: %s", change.target)
        return True

    def reset(self) -> bool:
        logger.info("Resetting theme system to defaults")
        self._kv.remove(self._key)
        self._clear_fallback_styling()
        self._fallback_mode = False
        self._current = DEFAULT_THEME
        self._initialized = False
        return self.initialize().ok

    # ---- diagnostics ----

    def status(self) -> ThemeStatus:
        raw = self._kv.get(self._key)
        stored = parse_theme_name(raw) if raw else None
        try:
            applied = self._presenter.applied_theme()
        except Exception:
            logger.debug("Presenter could not report applied theme", exc_info=True)
            applied = None
        return ThemeStatus(
            initialized=self._initialized,
            current_theme=self._current,
            storage_available=self._kv.is_available(),
            style_variables_supported=self._style_variables_supported(),
            has_stored_preference=stored is not None,
            stored_theme=stored,
            fallback_mode=self._fallback_mode,
            fallback_styling=self._fallback_styling,
            applied_theme=applied,
        )

    def validate_integrity(self) -> IntegrityReport:
        report = IntegrityReport()
        status = self.status()

        if not status.initialized:
            report.errors.append("Theme system not initialized")
        if status.current_theme not in THEMES:
            report.errors.append(f"Current theme {status.current_theme!r} is invalid")

        if not status.style_variables_supported:
            report.warnings.append("Theme colors not supported - using fallback styling")
            report.recommendations.append("Use a color-capable terminal or set FORCE_COLOR=1")
        if not status.storage_available:
            report.warnings.append("Storage not available - theme preference will not persist")
            report.recommendations.append("Check that the data directory is writable")

        if not status.fallback_styling and status.applied_theme is not status.current_theme:
            applied = status.applied_theme.value if status.applied_theme else None
            report.warnings.append(
                f"Theme application mismatch: expected {status.current_theme.value!r}, "
                f"got {applied!r}"
            )
            report.recommendations.append("Reselect your theme or run /theme reset")

        if self._signals.listener_count == 0:
            report.warnings.append("No signal listeners registered - errors may go unnoticed")

        report.valid = not report.errors
        return report
