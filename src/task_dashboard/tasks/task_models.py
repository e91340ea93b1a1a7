# src/task_dashboard/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.signals import ValidationReason, validation_message

NAME_MAX_LENGTH = 100

# 24-hour clock; a single-digit hour is accepted ("9:05").
TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


class Category(StrEnum):
    WORK = "Work"
    STUDY = "Study"
    PERSONAL = "Personal"

    @classmethod
    def parse(cls, raw: Any) -> Category | None:
        """Lenient lookup for user input ("work", " Study ")."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return None
        wanted = raw.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class TaskValidationError(ValueError):
    """Rejected task input. Raised before any state is touched."""

    def __init__(self, reason: ValidationReason, message: str | None = None) -> None:
        super().__init__(message or validation_message(reason))
        self.reason = reason


@dataclass(slots=True)
class Task:
    id: str
    name: str
    category: Category
    scheduled_time: str | None = None
    completed: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "time": self.scheduled_time or "",
            "completed": self.completed,
        }


def normalize_time(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    if not TIME_RE.match(value):
        raise TaskValidationError(ValidationReason.INVALID_TIME)
    return value


def validate_task_input(
    name: str | None, category: Category | str | None, scheduled_time: str | None = None
) -> tuple[str, Category, str | None]:
    """Return (trimmed name, category, time) or raise TaskValidationError."""
    clean_name = (name or "").strip()
    if not clean_name:
        raise TaskValidationError(ValidationReason.MISSING_NAME)
    if len(clean_name) > NAME_MAX_LENGTH:
        raise TaskValidationError(ValidationReason.NAME_TOO_LONG)

    cat = Category.parse(category)
    if cat is None:
        raise TaskValidationError(ValidationReason.MISSING_CATEGORY)

    return clean_name, cat, normalize_time(scheduled_time)


def task_from_record(raw: Any) -> Task | None:
    """
    Strictly validate one stored record.

    Returns None for anything that does not satisfy the Task invariants; stored
    data is dropped, never repaired.
    """
    if not isinstance(raw, dict):
        return None

    task_id = raw.get("id")
    if not isinstance(task_id, str) or not task_id.strip():
        return None

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip() or len(name.strip()) > NAME_MAX_LENGTH:
        return None

    category_raw = raw.get("category")
    if not isinstance(category_raw, str):
        return None
    try:
        category = Category(category_raw)
    except ValueError:
        return None

    completed = raw.get("completed")
    if not isinstance(completed, bool):
        return None

    time_raw = raw.get("time")
    if not isinstance(time_raw, str):
        return None
    if time_raw and not TIME_RE.match(time_raw):
        return None

    return Task(
        id=task_id,
        name=name,
        category=category,
        scheduled_time=time_raw or None,
        completed=completed,
    )
