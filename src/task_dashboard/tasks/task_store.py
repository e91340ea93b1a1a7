# src/task_dashboard/tasks/task_store.py

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..core.signals import (
    STORAGE_UNAVAILABLE_MESSAGE,
    Capability,
    Signal,
    SignalBus,
    SignalKind,
)
from ..storage.kv_store import KeyValueStore, StorageStatus
from .task_models import Category, Task, task_from_record, validate_task_input

logger = logging.getLogger(__name__)

DEFAULT_TASKS_KEY = "taskDashboardTasks"
LARGE_DATA_WARNING_BYTES = 1024 * 1024
MAX_ID_ATTEMPTS = 100


def _default_id() -> str:
    return uuid.uuid4().hex


def percent(completed: int, total: int) -> int:
    """round(100 * completed / total) with halves rounded up, 0 for an empty list."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


@dataclass(frozen=True, slots=True)
class StorageInfo:
    available: bool
    data_size: int
    task_count: int
    reason: str | None = None

    @property
    def data_size_formatted(self) -> str:
        return f"{self.data_size / 1024:.2f} KB"


class TaskStore:
    """
    In-memory task collection mirrored to a key-value record.

    Write policy is intentionally asymmetric:
    - add: optimistic. The task stays in memory even if the write fails
      (PERSISTENCE_DEGRADED).
    - toggle_completion / delete: pessimistic. A failed write rolls the change
      back (PERSISTENCE_FAILED).

    Validation errors raise TaskValidationError and never mutate state.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        signals: SignalBus,
        *,
        key: str = DEFAULT_TASKS_KEY,
        id_factory: Callable[[], str] | None = None,
        large_data_warning_bytes: int = LARGE_DATA_WARNING_BYTES,
        quota_fallback_incomplete_only: bool = False,
    ) -> None:
        self._kv = kv
        self._signals = signals
        self._key = key
        self._id_factory = id_factory or _default_id
        self._large_data_warning_bytes = int(large_data_warning_bytes)
        self._quota_fallback = bool(quota_fallback_incomplete_only)

        self._tasks: list[Task] = []
        self._issued_ids: set[str] = set()

    # ---- read side ----

    @property
    def key(self) -> str:
        return self._key

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the collection (copies, in insertion order)."""
        return tuple(replace(t) for t in self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return replace(self._tasks[idx]) if idx is not None else None

    def completed_count(self) -> int:
        return sum(1 for t in self._tasks if t.completed)

    def progress(self) -> int:
        return percent(self.completed_count(), len(self._tasks))

    # ---- persistence helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _new_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = str(self._id_factory())
            if candidate and candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
            logger.debug("Id factory produced a used id %r; retrying", candidate)
        raise RuntimeError(f"Id factory produced no unused id after {MAX_ID_ATTEMPTS} attempts")

    @staticmethod
    def _serialize(tasks: list[Task]) -> str:
        return json.dumps([t.to_record() for t in tasks], ensure_ascii=False)

    def _persist(self) -> StorageStatus:
        payload = self._serialize(self._tasks)

        size = len(payload.encode("utf-8"))
        if size > self._large_data_warning_bytes:
            self._signals.emit(
                Signal.persistence(
                    SignalKind.PERSISTENCE_WARNING,
                    "Task data is getting large. Consider removing completed tasks.",
                )
            )

        status = self._kv.put(self._key, payload)
        if status is StorageStatus.QUOTA_EXCEEDED and self._quota_fallback:
            return self._persist_incomplete_only(status)
        return status

    def _persist_incomplete_only(self, original: StorageStatus) -> StorageStatus:
        incomplete = [t for t in self._tasks if not t.completed]
        if len(incomplete) == len(self._tasks):
            return original

        status = self._kv.put(self._key, self._serialize(incomplete))
        if not status.ok:
            logger.error("Fallback save of incomplete tasks also failed status=%s", status)
            return original

        self._signals.emit(
            Signal.persistence(
                SignalKind.PERSISTENCE_DEGRADED,
                "Storage full. Only incomplete tasks were saved.",
                StorageStatus.QUOTA_EXCEEDED,
            )
        )
        return StorageStatus.OK

    def _corrupted(self, message: str) -> list[Task]:
        self._kv.remove(self._key)
        self._signals.emit(Signal(SignalKind.DATA_CORRUPTION, message))
        self._tasks = []
        return []

    # ---- public API ----

    def load(self) -> list[Task]:
        """
        Rehydrate the collection from storage, replacing what is in memory.

        - missing record -> empty
        - unparseable or non-list record -> removed, DATA_CORRUPTION, empty
        - invalid elements -> dropped, PARTIAL_DATA_LOSS(count), cleaned record re-saved
        """
        if not self._kv.is_available():
            self._signals.emit(
                Signal.capability_error(Capability.STORAGE, STORAGE_UNAVAILABLE_MESSAGE)
            )
            self._tasks = []
            return []

        raw = self._kv.get(self._key)
        if raw is None:
            self._tasks = []
            return []

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.error("Failed to parse stored task data: %s", e)
            return self._corrupted("Stored task data is corrupted. Starting with empty task list.")

        if not isinstance(parsed, list):
            logger.warning("Invalid task data format (%s), resetting", type(parsed).__name__)
            return self._corrupted("Task data format is invalid. Starting with empty task list.")

        valid: list[Task] = []
        seen: set[str] = set()
        for item in parsed:
            task = task_from_record(item)
            if task is None or task.id in seen:
                continue
            seen.add(task.id)
            valid.append(task)

        dropped = len(parsed) - len(valid)
        if dropped:
            logger.warning("Filtered out %d invalid tasks", dropped)
            self._signals.emit(
                Signal(
                    SignalKind.PARTIAL_DATA_LOSS,
                    f"{dropped} invalid tasks were removed from your list.",
                    count=dropped,
                )
            )
            if valid:
                status = self._kv.put(self._key, self._serialize(valid))
                if not status.ok:
                    logger.error("Failed to save cleaned task data status=%s", status)
            else:
                self._kv.remove(self._key)

        self._tasks = valid
        self._issued_ids.update(t.id for t in valid)
        logger.info("Loaded %d tasks from key=%s", len(valid), self._key)
        return [replace(t) for t in valid]

    def add(
        self,
        name: str | None,
        category: Category | str | None,
        scheduled_time: str | None = None,
    ) -> Task:
        clean_name, cat, time_value = validate_task_input(name, category, scheduled_time)

        task = Task(
            id=self._new_id(),
            name=clean_name,
            category=cat,
            scheduled_time=time_value,
            completed=False,
        )
        self._tasks.append(task)

        status = self._persist()
        if not status.ok:
            self._signals.emit(
                Signal.persistence(
                    SignalKind.PERSISTENCE_DEGRADED,
                    "Task added but could not be saved. It will be lost when you restart.",
                    status,
                )
            )

        logger.debug("Task added id=%s category=%s time=%s", task.id, cat, time_value)
        return replace(task)

    def toggle_completion(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.warning("Task not found for toggle: %s", task_id)
            return False

        task = self._tasks[idx]
        original = task.completed
        task.completed = not original

        status = self._persist()
        if not status.ok:
            task.completed = original
            self._signals.emit(
                Signal.persistence(
                    SignalKind.PERSISTENCE_FAILED,
                    "Could not save task status change. Please try again.",
                    status,
                )
            )
            return False

        logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
        return True

    def delete(self, task_id: str, *, confirmed: bool) -> bool:
        """
        Remove a task. `confirmed` is the user's answer obtained upstream; the
        store never prompts.
        """
        if not confirmed:
            logger.debug("Delete of %s not confirmed; ignoring", task_id)
            return False

        idx = self._index_of(task_id)
        if idx is None:
            logger.warning("Task not found for deletion: %s", task_id)
            return False

        removed = self._tasks.pop(idx)

        status = self._persist()
        if not status.ok:
            self._tasks.insert(idx, removed)
            self._signals.emit(
                Signal.persistence(
                    SignalKind.PERSISTENCE_FAILED,
                    "Could not save task deletion. The task has been restored.",
                    status,
                )
            )
            return False

        logger.debug("Task deleted id=%s", task_id)
        return True

    # ---- diagnostics / maintenance ----

    def storage_info(self) -> StorageInfo:
        status = self._kv.check()
        if not status.ok:
            return StorageInfo(
                available=False,
                data_size=0,
                task_count=len(self._tasks),
                reason=f"storage {status.value}",
            )
        size = len(self._serialize(self._tasks).encode("utf-8"))
        return StorageInfo(available=True, data_size=size, task_count=len(self._tasks))

    def recover(self) -> bool:
        """
        Probe storage and clear a stored record that no longer parses.

        Returns False only when storage is unavailable.
        """
        status = self._kv.check()
        if not status.ok:
            logger.info("Storage not available (%s), cannot recover", status)
            return False

        raw = self._kv.get(self._key)
        if raw is None:
            return True
        try:
            json.loads(raw)
        except ValueError:
            logger.info("Found corrupted task data, clearing key=%s", self._key)
            self._kv.remove(self._key)
            self._signals.emit(
                Signal(SignalKind.DATA_CORRUPTION, "Corrupted task data was cleared. Starting fresh.")
            )
        return True

    def clear(self) -> None:
        """Drop the stored record; the in-memory collection is untouched."""
        self._kv.remove(self._key)
        logger.info("Task storage cleared key=%s", self._key)
