# tests/test_kv_store.py

from __future__ import annotations

from task_dashboard.storage.backends import (
    MemoryBackend,
    QuotaExceededError,
    StorageDeniedError,
)
from task_dashboard.storage.kv_store import SENTINEL_KEY, KeyValueStore, StorageStatus


def test_check_round_trips_sentinel_and_leaves_nothing_behind() -> None:
    backend = MemoryBackend()
    kv = KeyValueStore(backend)

    assert kv.check() is StorageStatus.OK
    assert kv.is_available()
    assert SENTINEL_KEY not in backend.keys()


def test_no_backend_is_unavailable_and_never_raises() -> None:
    kv = KeyValueStore(None)

    assert kv.check() is StorageStatus.UNAVAILABLE
    assert kv.get("k") is None
    assert kv.put("k", "v") is StorageStatus.UNAVAILABLE
    assert kv.set("k", "v") is False
    kv.remove("k")


def test_put_get_remove(kv: KeyValueStore) -> None:
    assert kv.get("missing") is None
    assert kv.put("k", "v") is StorageStatus.OK
    assert kv.get("k") == "v"
    kv.remove("k")
    assert kv.get("k") is None


def test_write_errors_become_statuses(kv: KeyValueStore, backend) -> None:
    backend.fail_writes["q"] = QuotaExceededError("full")
    backend.fail_writes["d"] = StorageDeniedError("read-only")

    assert kv.put("q", "x") is StorageStatus.QUOTA_EXCEEDED
    assert kv.put("d", "x") is StorageStatus.DENIED
    assert kv.set("q", "x") is False


def test_unavailable_medium_is_rechecked_on_every_call(kv: KeyValueStore, backend) -> None:
    assert kv.put("k", "v") is StorageStatus.OK

    backend.unavailable = True
    assert kv.get("k") is None
    assert kv.put("k", "w") is StorageStatus.UNAVAILABLE

    backend.unavailable = False
    assert kv.get("k") == "v"


def test_quota_too_small_for_sentinel_reports_quota() -> None:
    kv = KeyValueStore(MemoryBackend(quota_bytes=8))

    assert kv.check() is StorageStatus.QUOTA_EXCEEDED
    assert not kv.is_available()
