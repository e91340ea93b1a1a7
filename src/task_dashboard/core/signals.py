# src/task_dashboard/core/signals.py

from __future__ import annotations

"""
Non-fatal, caller-observable conditions.

A Signal is raised alongside an otherwise-completed operation (a task that was
added but not saved, a theme that was applied but not persisted, ...). The set
of kinds is closed; everything that handles signals matches on it exhaustively.
"""

import contextlib
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum

from ..storage.kv_store import StorageStatus

logger = logging.getLogger(__name__)


class SignalKind(StrEnum):
    VALIDATION_ERROR = "validation_error"
    CAPABILITY_ERROR = "capability_error"
    PERSISTENCE_DEGRADED = "persistence_degraded"
    PERSISTENCE_FAILED = "persistence_failed"
    PERSISTENCE_WARNING = "persistence_warning"
    DATA_CORRUPTION = "data_corruption"
    PARTIAL_DATA_LOSS = "partial_data_loss"
    APPLICATION_ERROR = "application_error"


class ValidationReason(StrEnum):
    MISSING_NAME = "missing_name"
    NAME_TOO_LONG = "name_too_long"
    MISSING_CATEGORY = "missing_category"
    INVALID_TIME = "invalid_time"
    INVALID_THEME = "invalid_theme"
    INVALID_STORED_THEME = "invalid_stored_theme"


class Capability(StrEnum):
    STYLE_VARIABLES = "style_variables"
    STORAGE = "storage"


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def validation_message(reason: ValidationReason) -> str:
    match reason:
        case ValidationReason.MISSING_NAME:
            return "Task name is required"
        case ValidationReason.NAME_TOO_LONG:
            return "Task name must be 100 characters or less"
        case ValidationReason.MISSING_CATEGORY:
            return "Please select a category (Work, Study or Personal)"
        case ValidationReason.INVALID_TIME:
            return "Time must be in 24-hour HH:MM format"
        case ValidationReason.INVALID_THEME:
            return "Invalid theme selected. Using default theme."
        case ValidationReason.INVALID_STORED_THEME:
            return "Saved theme preference was invalid and has been cleared. Using default theme."


@dataclass(frozen=True, slots=True)
class Signal:
    kind: SignalKind
    message: str
    reason: ValidationReason | None = None
    capability: Capability | None = None
    count: int | None = None
    storage_status: StorageStatus | None = None

    @classmethod
    def validation(cls, reason: ValidationReason, message: str | None = None) -> Signal:
        return cls(SignalKind.VALIDATION_ERROR, message or validation_message(reason), reason=reason)

    @classmethod
    def capability_error(cls, capability: Capability, message: str) -> Signal:
        return cls(SignalKind.CAPABILITY_ERROR, message, capability=capability)

    @classmethod
    def persistence(
        cls, kind: SignalKind, message: str, status: StorageStatus | None = None
    ) -> Signal:
        return cls(kind, message, storage_status=status)

    @property
    def severity(self) -> Severity:
        return severity_of(self.kind)

    @property
    def persistent(self) -> bool:
        """Whether a notice for this signal should stay on screen until dismissed."""
        match self.kind:
            case SignalKind.CAPABILITY_ERROR:
                return True
            case SignalKind.PERSISTENCE_FAILED | SignalKind.PERSISTENCE_DEGRADED:
                return self.storage_status in (StorageStatus.QUOTA_EXCEEDED, StorageStatus.DENIED)
            case (
                SignalKind.VALIDATION_ERROR
                | SignalKind.PERSISTENCE_WARNING
                | SignalKind.DATA_CORRUPTION
                | SignalKind.PARTIAL_DATA_LOSS
                | SignalKind.APPLICATION_ERROR
            ):
                return False


def severity_of(kind: SignalKind) -> Severity:
    match kind:
        case SignalKind.VALIDATION_ERROR | SignalKind.PERSISTENCE_WARNING:
            return Severity.INFO
        case (
            SignalKind.CAPABILITY_ERROR
            | SignalKind.PERSISTENCE_DEGRADED
            | SignalKind.PARTIAL_DATA_LOSS
        ):
            return Severity.WARNING
        case (
            SignalKind.PERSISTENCE_FAILED
            | SignalKind.DATA_CORRUPTION
            | SignalKind.APPLICATION_ERROR
        ):
            return Severity.ERROR


STORAGE_UNAVAILABLE_MESSAGE = (
    "Storage is not available. Tasks and theme preference will not be saved between sessions."
)

SignalListener = Callable[[Signal], None]

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class SignalBus:
    """
    Fan-out of signals to listeners.

    Listener failures are logged and never reach the operation that raised the
    signal.
    """

    def __init__(self) -> None:
        self._listeners: list[SignalListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: SignalListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, signal: Signal) -> None:
        logger.log(
            _LOG_LEVELS[signal.severity],
            "Signal [%s] %s%s",
            signal.kind,
            signal.message,
            f" (reason={signal.reason})" if signal.reason else "",
        )
        for listener in list(self._listeners):
            try:
                listener(signal)
            except Exception:
                logger.exception("Signal listener failed for kind=%s", signal.kind)

    @contextlib.contextmanager
    def collect(self) -> Iterator[list[Signal]]:
        """Collect every signal emitted inside the block (in order)."""
        raised: list[Signal] = []
        unsubscribe = self.subscribe(raised.append)
        try:
            yield raised
        finally:
            unsubscribe()
