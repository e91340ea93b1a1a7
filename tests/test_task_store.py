# tests/test_task_store.py

from __future__ import annotations

import json

import pytest

from task_dashboard.core.signals import Capability, SignalKind
from task_dashboard.storage.backends import MemoryBackend, QuotaExceededError, StorageDeniedError
from task_dashboard.storage.kv_store import KeyValueStore, StorageStatus
from task_dashboard.tasks.task_models import Category, TaskValidationError
from task_dashboard.tasks.task_store import DEFAULT_TASKS_KEY, MAX_ID_ATTEMPTS, TaskStore, percent

KEY = DEFAULT_TASKS_KEY


def _stored(backend) -> list[dict]:
    return json.loads(backend.raw(KEY))


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [(0, 0, 0), (0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 2, 50), (3, 3, 100)],
)
def test_percent_rounds_half_up(completed: int, total: int, expected: int) -> None:
    assert percent(completed, total) == expected


def test_add_persists_and_returns_copy(task_store: TaskStore, backend, recorder) -> None:
    task = task_store.add("  Write report ", "work", "09:30")

    assert task.id == "t1"
    assert task.name == "Write report"
    assert task.category is Category.WORK
    assert _stored(backend) == [
        {"id": "t1", "name": "Write report", "category": "Work", "time": "09:30", "completed": False}
    ]
    assert recorder.signals == []

    task.name = "mutated"
    assert task_store.get("t1").name == "Write report"


def test_add_invalid_raises_and_touches_nothing(task_store: TaskStore, backend) -> None:
    with pytest.raises(TaskValidationError):
        task_store.add("", "Work")

    assert len(task_store) == 0
    assert backend.writes == []


def test_ids_stay_unique_when_factory_repeats(kv, bus) -> None:
    seq = iter(["same", "same", "same", "other"])
    store = TaskStore(kv, bus, id_factory=lambda: next(seq))

    a = store.add("a", "Work")
    b = store.add("b", "Work")
    assert (a.id, b.id) == ("same", "other")


def test_exhausted_id_factory_raises_without_adding(kv, bus, backend) -> None:
    store = TaskStore(kv, bus, id_factory=lambda: "same")
    store.add("a", "Work")
    writes = list(backend.writes)

    with pytest.raises(RuntimeError, match=str(MAX_ID_ATTEMPTS)):
        store.add("b", "Work")

    assert [t.name for t in store.tasks] == ["a"]
    assert backend.writes == writes


def test_add_failed_write_keeps_task_in_memory(task_store: TaskStore, backend, recorder) -> None:
    backend.fail_writes[KEY] = QuotaExceededError("full")

    task = task_store.add("Keep me", "Personal")

    assert task_store.get(task.id) is not None
    [sig] = recorder.of(SignalKind.PERSISTENCE_DEGRADED)
    assert sig.storage_status is StorageStatus.QUOTA_EXCEEDED
    assert sig.persistent


def test_toggle_flips_and_persists(task_store: TaskStore, backend) -> None:
    t = task_store.add("a", "Work")

    assert task_store.toggle_completion(t.id) is True
    assert _stored(backend)[0]["completed"] is True
    assert task_store.progress() == 100

    assert task_store.toggle_completion(t.id) is True
    assert task_store.progress() == 0


def test_toggle_failed_write_rolls_back(task_store: TaskStore, backend, recorder) -> None:
    t = task_store.add("a", "Work")
    backend.fail_writes[KEY] = StorageDeniedError("read-only")

    assert task_store.toggle_completion(t.id) is False

    assert task_store.get(t.id).completed is False
    [sig] = recorder.of(SignalKind.PERSISTENCE_FAILED)
    assert sig.storage_status is StorageStatus.DENIED


def test_toggle_unknown_id_is_noop(task_store: TaskStore, recorder) -> None:
    assert task_store.toggle_completion("nope") is False
    assert recorder.signals == []


def test_delete_requires_confirmation(task_store: TaskStore) -> None:
    t = task_store.add("a", "Work")

    assert task_store.delete(t.id, confirmed=False) is False
    assert len(task_store) == 1

    assert task_store.delete(t.id, confirmed=True) is True
    assert len(task_store) == 0


def test_delete_failed_write_restores_at_original_position(
    task_store: TaskStore, backend, recorder
) -> None:
    for name in ("a", "b", "c"):
        task_store.add(name, "Study")
    backend.fail_writes[KEY] = QuotaExceededError("full")

    assert task_store.delete("t2", confirmed=True) is False

    assert [t.id for t in task_store.tasks] == ["t1", "t2", "t3"]
    assert recorder.kinds() == [SignalKind.PERSISTENCE_FAILED]


def test_load_missing_record_is_empty(task_store: TaskStore, recorder) -> None:
    assert task_store.load() == []
    assert recorder.signals == []


def test_load_round_trip(kv, bus, backend) -> None:
    first = TaskStore(kv, bus)
    a = first.add("a", "Work", "8:00")
    first.add("b", "Personal")
    first.toggle_completion(a.id)

    second = TaskStore(kv, bus)
    loaded = second.load()

    assert [t.name for t in loaded] == ["a", "b"]
    assert loaded[0].completed is True
    assert loaded[0].scheduled_time == "8:00"
    assert second.progress() == 50


def test_load_unparseable_clears_record(task_store: TaskStore, backend, recorder) -> None:
    backend.set_item(KEY, "{not json")

    assert task_store.load() == []

    assert backend.raw(KEY) is None
    assert recorder.kinds() == [SignalKind.DATA_CORRUPTION]


def test_load_non_list_clears_record(task_store: TaskStore, backend, recorder) -> None:
    backend.set_item(KEY, json.dumps({"tasks": []}))

    assert task_store.load() == []
    assert backend.raw(KEY) is None
    assert recorder.kinds() == [SignalKind.DATA_CORRUPTION]


def test_load_drops_invalid_records_and_resaves(task_store: TaskStore, backend, recorder) -> None:
    good = {"id": "g1", "name": "ok", "category": "Work", "time": "", "completed": False}
    backend.set_item(
        KEY,
        json.dumps(
            [
                good,
                {"id": "b1", "name": "", "category": "Work", "time": "", "completed": False},
                {"id": "b2", "name": "x", "category": "Hobby", "time": "", "completed": False},
                dict(good),  # duplicate id
            ]
        ),
    )

    loaded = task_store.load()

    assert [t.id for t in loaded] == ["g1"]
    [sig] = recorder.of(SignalKind.PARTIAL_DATA_LOSS)
    assert sig.count == 3
    assert _stored(backend) == [good]


def test_load_all_invalid_removes_record(task_store: TaskStore, backend, recorder) -> None:
    backend.set_item(KEY, json.dumps([1, "two", None]))

    assert task_store.load() == []
    assert backend.raw(KEY) is None
    assert recorder.of(SignalKind.PARTIAL_DATA_LOSS)[0].count == 3


def test_load_with_storage_unavailable(task_store: TaskStore, backend, recorder) -> None:
    backend.unavailable = True

    assert task_store.load() == []

    [sig] = recorder.signals
    assert sig.kind is SignalKind.CAPABILITY_ERROR
    assert sig.capability is Capability.STORAGE


def test_new_ids_never_collide_with_loaded_ones(kv, bus) -> None:
    TaskStore(kv, bus, id_factory=lambda: "t1").add("a", "Work")

    seq = iter(["t1", "t2"])
    store = TaskStore(kv, bus, id_factory=lambda: next(seq))
    store.load()

    assert store.add("b", "Work").id == "t2"


def test_large_data_warning(kv, bus, recorder) -> None:
    store = TaskStore(kv, bus, large_data_warning_bytes=10)

    store.add("a bit more than ten bytes", "Work")

    assert SignalKind.PERSISTENCE_WARNING in recorder.kinds()


def test_quota_fallback_saves_incomplete_tasks_only(bus, recorder) -> None:
    # Room for about one task record.
    backend = MemoryBackend(quota_bytes=300)
    kv = KeyValueStore(backend)
    store = TaskStore(kv, bus, quota_fallback_incomplete_only=True)

    done = store.add("done " * 10, "Work")
    store.toggle_completion(done.id)
    recorder.clear()

    store.add("open " * 10, "Study")

    saved = json.loads(backend.get_item(KEY))
    assert [r["completed"] for r in saved] == [False]
    assert len(store) == 2
    [sig] = recorder.of(SignalKind.PERSISTENCE_DEGRADED)
    assert sig.storage_status is StorageStatus.QUOTA_EXCEEDED


def test_storage_info(task_store: TaskStore, backend) -> None:
    task_store.add("a", "Work")
    info = task_store.storage_info()

    assert info.available
    assert info.task_count == 1
    assert info.data_size == len(backend.raw(KEY).encode("utf-8"))
    assert info.data_size_formatted.endswith(" KB")

    backend.unavailable = True
    info = task_store.storage_info()
    assert not info.available
    assert info.reason == "storage unavailable"


def test_recover_clears_corrupted_record(task_store: TaskStore, backend, recorder) -> None:
    backend.set_item(KEY, "[broken")

    assert task_store.recover() is True

    assert backend.raw(KEY) is None
    assert recorder.kinds() == [SignalKind.DATA_CORRUPTION]


def test_recover_leaves_valid_data_alone(task_store: TaskStore, backend, recorder) -> None:
    task_store.add("a", "Work")
    before = backend.raw(KEY)

    assert task_store.recover() is True
    assert backend.raw(KEY) == before
    assert recorder.signals == []


def test_recover_without_storage(task_store: TaskStore, backend) -> None:
    backend.unavailable = True
    assert task_store.recover() is False
