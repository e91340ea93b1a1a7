# src/task_dashboard/storage/kv_store.py

from __future__ import annotations

import logging
from enum import StrEnum

from ..core.ports import StorageBackend
from .backends import (
    QuotaExceededError,
    StorageDeniedError,
    StorageError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

SENTINEL_KEY = "__storage_test__"


class StorageStatus(StrEnum):
    """Outcome of a storage call. Backend exceptions never travel past KeyValueStore."""

    OK = "ok"
    UNAVAILABLE = "unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    DENIED = "denied"
    ERROR = "error"

    @property
    def ok(self) -> bool:
        return self is StorageStatus.OK


def classify_error(exc: BaseException) -> StorageStatus:
    match exc:
        case QuotaExceededError():
            return StorageStatus.QUOTA_EXCEEDED
        case StorageDeniedError() | PermissionError():
            return StorageStatus.DENIED
        case StorageUnavailableError():
            return StorageStatus.UNAVAILABLE
        case StorageError():
            return StorageStatus.ERROR
        case _:
            return StorageStatus.ERROR


class KeyValueStore:
    """
    Availability-checked access to a durable key-value medium.

    Every get/put re-probes the medium with a sentinel round-trip, because the
    medium can change availability between calls (quota shrink, file made
    read-only, disk removed). No caching layer.

    backend=None models a platform without durable storage at all.
    """

    def __init__(self, backend: StorageBackend | None) -> None:
        self._backend = backend

    @property
    def backend(self) -> StorageBackend | None:
        return self._backend

    def check(self) -> StorageStatus:
        backend = self._backend
        if backend is None:
            logger.debug("Storage probe: no backend configured")
            return StorageStatus.UNAVAILABLE

        try:
            backend.set_item(SENTINEL_KEY, SENTINEL_KEY)
            retrieved = backend.get_item(SENTINEL_KEY)
            backend.remove_item(SENTINEL_KEY)
        except Exception as e:
            status = classify_error(e)
            logger.debug("Storage probe failed status=%s: %s", status, e)
            return status

        if retrieved != SENTINEL_KEY:
            logger.warning("Storage probe read back %r, data integrity issue", retrieved)
            return StorageStatus.ERROR
        return StorageStatus.OK

    def is_available(self) -> bool:
        return self.check().ok

    def get(self, key: str) -> str | None:
        """Raw stored value, or None when missing or storage is unavailable."""
        if self._backend is None or not self.is_available():
            return None
        try:
            return self._backend.get_item(key)
        except Exception as e:
            logger.warning("Storage read failed key=%s status=%s: %s", key, classify_error(e), e)
            return None

    def put(self, key: str, value: str) -> StorageStatus:
        status = self.check()
        if not status.ok or self._backend is None:
            logger.warning("Storage not writable key=%s status=%s", key, status)
            return status
        try:
            self._backend.set_item(key, value)
        except Exception as e:
            status = classify_error(e)
            logger.warning("Storage write failed key=%s status=%s: %s", key, status, e)
            return status
        return StorageStatus.OK

    def set(self, key: str, value: str) -> bool:
        return self.put(key, value).ok

    def remove(self, key: str) -> None:
        """Best-effort delete; a no-op when storage is unavailable."""
        if self._backend is None:
            return
        try:
            self._backend.remove_item(key)
        except Exception as e:
            logger.warning("Storage remove failed key=%s status=%s: %s", key, classify_error(e), e)
