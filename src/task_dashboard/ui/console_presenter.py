# src/task_dashboard/ui/console_presenter.py

"""Terminal implementation of the ThemePresenter port.

Decisions:
- A theme's color roles become ANSI foreground codes (terminals do not give us
  a reliable way to repaint the background).
- Truecolor when the terminal advertises it; otherwise the 256-color cube.
- "Style variables" == the terminal accepts color escapes at all. Without them
  the fallback is plain monochrome text.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from ..core.ports import InputState
from ..core.signals import Signal
from ..themes.theme_models import ThemeDefinition, ThemeName

logger = logging.getLogger(__name__)

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"

FORM_FIELDS = ("name", "category", "time")


def _hex_to_rgb(hex_code: str) -> tuple[int, int, int]:
    h = hex_code.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"not a #rrggbb color: {hex_code!r}")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"


def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to the xterm 256-color cube."""

    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))

    idx = 16 + 36 * to_6(r) + 6 * to_6(g) + to_6(b)
    return f"\033[38;5;{idx}m"


def _fg(hex_code: str, *, truecolor: bool) -> str:
    r, g, b = _hex_to_rgb(hex_code)
    return _fg_truecolor(r, g, b) if truecolor else _fg_256(r, g, b)


def build_palette(theme: ThemeDefinition, *, truecolor: bool) -> dict[str, str]:
    c = theme.colors
    palette = {
        "text": _fg(c.text_primary, truecolor=truecolor),
        "muted": DIM + _fg(c.text_secondary, truecolor=truecolor),
        "accent": BOLD + _fg(c.accent, truecolor=truecolor),
        "success": _fg(c.success, truecolor=truecolor),
        "error": BOLD + _fg(c.error, truecolor=truecolor),
        "border": _fg(c.border, truecolor=truecolor),
    }
    for role, value in (
        ("category_work", c.category_work),
        ("category_study", c.category_study),
        ("category_personal", c.category_personal),
    ):
        palette[role] = _fg(value or c.accent, truecolor=truecolor)
    return palette


class ConsolePresenter:
    def __init__(
        self,
        *,
        color_mode: str = "auto",
        truecolor: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self._color_mode = color_mode
        self._truecolor = truecolor
        self._stream = stream if stream is not None else sys.stdout

        self._palette: dict[str, str] = {}
        self._theme: ThemeName | None = None
        self._fallback = False

        # Sticky add-task form: survives failed submissions and theme changes.
        self.form: dict[str, str] = {}
        self.focused_field: str | None = None

        # Notices that stay until /dismiss (storage full, no colors, ...).
        self.pinned: list[Signal] = []

    @property
    def fallback(self) -> bool:
        return self._fallback

    def pin(self, signal: Signal) -> None:
        """SignalBus listener: keep persistent notices, once per message."""
        if signal.persistent and all(p.message != signal.message for p in self.pinned):
            self.pinned.append(signal)

    def dismiss(self) -> int:
        n = len(self.pinned)
        self.pinned.clear()
        return n

    # ---- ThemePresenter ----

    def supports_style_variables(self) -> bool:
        if self._color_mode == "never":
            return False
        if self._color_mode == "always":
            return True
        isatty = getattr(self._stream, "isatty", None)
        return bool(isatty and isatty())

    def apply_theme(self, theme: ThemeDefinition, *, animate: bool) -> None:
        self._palette = build_palette(theme, truecolor=self._truecolor)
        self._theme = theme.name
        logger.debug("Console palette set theme=%s animate=%s", theme.name, animate)

    def apply_fallback_styling(self) -> None:
        self._palette = {}
        self._theme = None
        self._fallback = True

    def clear_fallback_styling(self) -> None:
        self._fallback = False

    def applied_theme(self) -> ThemeName | None:
        return self._theme

    def capture_input_state(self) -> InputState:
        return InputState(fields=dict(self.form), focused=self.focused_field)

    def restore_input_state(self, state: InputState) -> None:
        self.form = {k: str(v) for k, v in state.fields.items() if k in FORM_FIELDS}
        self.focused_field = state.focused

    # ---- drawing ----

    def paint(self, text: str, role: str) -> str:
        code = self._palette.get(role)
        if not code:
            return text
        return f"{code}{text}{RESET}"

    def write(self, text: str) -> None:
        self._stream.write(text + "\n")
        self._stream.flush()
