# src/task_dashboard/ui/render.py

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..core.signals import Severity, Signal
from ..tasks.task_models import Category, Task
from ..themes.theme_models import ThemeDefinition, ThemeName
from .console_presenter import ConsolePresenter

PROGRESS_WIDTH = 20


def format_task_time(value: str | None) -> str:
    """'18:30' -> '6:30 PM'. Unparseable input is returned unchanged."""
    if not value:
        return ""
    try:
        hours_s, minutes_s = value.split(":")
        hour, minute = int(hours_s), int(minutes_s)
    except ValueError:
        return value
    period = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{display_hour}:{minute:02d} {period}"


def _category_role(category: Category) -> str:
    match category:
        case Category.WORK:
            return "category_work"
        case Category.STUDY:
            return "category_study"
        case Category.PERSONAL:
            return "category_personal"


def render_task_list(tasks: Sequence[Task], presenter: ConsolePresenter) -> str:
    if not tasks:
        return presenter.paint("No tasks yet. Add your first task with /add.", "muted")

    lines = []
    for i, task in enumerate(tasks, start=1):
        box = presenter.paint("[x]", "success") if task.completed else "[ ]"
        name = presenter.paint(task.name, "muted" if task.completed else "text")
        tag = presenter.paint(f"({task.category.value})", _category_role(task.category))
        line = f"{i:>3}. {box} {name} {tag}"
        if task.scheduled_time:
            line += " " + presenter.paint(format_task_time(task.scheduled_time), "muted")
        lines.append(line)
    return "\n".join(lines)


def render_progress(progress: int, presenter: ConsolePresenter, width: int = PROGRESS_WIDTH) -> str:
    progress = max(0, min(100, int(progress)))
    filled = progress * width // 100
    bar = presenter.paint("#" * filled, "success" if progress == 100 else "accent")
    bar += presenter.paint("-" * (width - filled), "border")
    return f"Progress [{bar}] {progress}%"


def render_theme_list(
    themes: Iterable[ThemeDefinition], current: ThemeName, presenter: ConsolePresenter
) -> str:
    lines = []
    for theme in themes:
        marker = "*" if theme.name is current else " "
        title = presenter.paint(f"{theme.name.value:<13}", "accent" if marker == "*" else "text")
        lines.append(f" {marker} {title} {theme.display_name} - {theme.description}")
    return "\n".join(lines)


def render_notice(signal: Signal, presenter: ConsolePresenter) -> str:
    match signal.severity:
        case Severity.INFO:
            prefix = presenter.paint("[i]", "accent")
        case Severity.WARNING:
            prefix = presenter.paint("[!]", "error")
        case Severity.ERROR:
            prefix = presenter.paint("[x]", "error")
    return f"{prefix} {signal.message}"
