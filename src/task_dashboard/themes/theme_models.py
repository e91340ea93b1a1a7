# src/task_dashboard/themes/theme_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class ThemeName(StrEnum):
    WHITE = "white"
    DARK = "dark"
    STUDENT = "student"
    DEVELOPER = "developer"
    PROFESSIONAL = "professional"


DEFAULT_THEME = ThemeName.WHITE


@dataclass(frozen=True, slots=True)
class ColorRoles:
    bg_primary: str
    bg_secondary: str
    text_primary: str
    text_secondary: str
    accent: str
    success: str
    error: str
    border: str
    # Per-category accents (optional; renderers fall back to `accent`).
    category_work: str | None = None
    category_study: str | None = None
    category_personal: str | None = None


@dataclass(frozen=True, slots=True)
class ThemePreview:
    """Swatch triple shown next to a theme in selection lists."""

    primary: str
    secondary: str
    text: str


@dataclass(frozen=True, slots=True)
class ThemeDefinition:
    name: ThemeName
    display_name: str
    description: str
    colors: ColorRoles
    preview: ThemePreview

    @property
    def is_dark(self) -> bool:
        return self.name in (ThemeName.DARK, ThemeName.DEVELOPER)


def parse_theme_name(raw: Any) -> ThemeName | None:
    """Exact match against the five theme keys; anything else is invalid."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return ThemeName(raw)
    except ValueError:
        return None


_THEMES: dict[ThemeName, ThemeDefinition] = {
    ThemeName.WHITE: ThemeDefinition(
        name=ThemeName.WHITE,
        display_name="Light Theme",
        description="Clean, bright interface perfect for well-lit environments",
        colors=ColorRoles(
            bg_primary="#ffffff",
            bg_secondary="#f7fafc",
            text_primary="#1a202c",
            text_secondary="#4a5568",
            accent="#667eea",
            success="#38a169",
            error="#e53e3e",
            border="#e2e8f0",
            category_work="#3182ce",
            category_study="#805ad5",
            category_personal="#dd6b20",
        ),
        preview=ThemePreview(primary="#ffffff", secondary="#f7fafc", text="#1a202c"),
    ),
    ThemeName.DARK: ThemeDefinition(
        name=ThemeName.DARK,
        display_name="Dark Theme",
        description="Modern dark interface reducing eye strain in low-light conditions",
        colors=ColorRoles(
            bg_primary="#1a202c",
            bg_secondary="#2d3748",
            text_primary="#f7fafc",
            text_secondary="#a0aec0",
            accent="#7f9cf5",
            success="#68d391",
            error="#fc8181",
            border="#4a5568",
            category_work="#63b3ed",
            category_study="#b794f4",
            category_personal="#f6ad55",
        ),
        preview=ThemePreview(primary="#1a202c", secondary="#2d3748", text="#f7fafc"),
    ),
    ThemeName.STUDENT: ThemeDefinition(
        name=ThemeName.STUDENT,
        display_name="Student Theme",
        description="Vibrant, energetic colors designed to motivate learning",
        colors=ColorRoles(
            bg_primary="#f0fff4",
            bg_secondary="#e6fffa",
            text_primary="#1a365d",
            text_secondary="#2c5282",
            accent="#ed8936",
            success="#38a169",
            error="#c53030",
            border="#b2f5ea",
            category_work="#2b6cb0",
            category_study="#d53f8c",
            category_personal="#2f855a",
        ),
        preview=ThemePreview(primary="#f0fff4", secondary="#e6fffa", text="#1a365d"),
    ),
    ThemeName.DEVELOPER: ThemeDefinition(
        name=ThemeName.DEVELOPER,
        display_name="Developer Theme",
        description="Code-inspired dark theme with syntax highlighting colors",
        colors=ColorRoles(
            bg_primary="#0d1117",
            bg_secondary="#161b22",
            text_primary="#f0f6fc",
            text_secondary="#8b949e",
            accent="#58a6ff",
            success="#3fb950",
            error="#f85149",
            border="#30363d",
            category_work="#79c0ff",
            category_study="#d2a8ff",
            category_personal="#ffa657",
        ),
        preview=ThemePreview(primary="#0d1117", secondary="#161b22", text="#f0f6fc"),
    ),
    ThemeName.PROFESSIONAL: ThemeDefinition(
        name=ThemeName.PROFESSIONAL,
        display_name="Professional Theme",
        description="Sophisticated, business-appropriate interface for corporate environments",
        colors=ColorRoles(
            bg_primary="#fafafa",
            bg_secondary="#f5f5f5",
            text_primary="#212121",
            text_secondary="#616161",
            accent="#1976d2",
            success="#388e3c",
            error="#d32f2f",
            border="#e0e0e0",
        ),
        preview=ThemePreview(primary="#fafafa", secondary="#f5f5f5", text="#212121"),
    ),
}

THEMES = MappingProxyType(_THEMES)
