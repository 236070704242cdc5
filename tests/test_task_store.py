# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import UTC, date, datetime

import pytest

from taskboard.tasks.task_errors import (
    CorruptStateError,
    NotFoundError,
    PersistenceError,
    StoreNotLoadedError,
    ValidationError,
)
from taskboard.tasks.task_models import TaskPriority, TaskStatus
from taskboard.tasks.task_store import TaskStore


def _new(title: str = "Write report", **extra) -> dict:
    data = {
        "title": title,
        "description": "quarterly numbers",
        "priority": "high",
        "dueDate": "2024-03-01",
    }
    data.update(extra)
    return data


def test_first_load_seeds_and_persists(storage) -> None:
    store = TaskStore(storage)
    tasks = store.load()

    assert [t.id for t in tasks] == ["1", "2", "3"]
    assert [t.status for t in tasks] == [
        TaskStatus.IN_PROGRESS,
        TaskStatus.PENDING,
        TaskStatus.COMPLETED,
    ]
    assert [t.due_date for t in tasks] == [date(2024, 1, 20), date(2024, 1, 18), date(2024, 1, 15)]
    assert tasks[0].created_at == datetime(2024, 1, 10, 10, 0, tzinfo=UTC)
    assert tasks[0].tags == ("work", "urgent")

    assert storage.writes == 1
    records = json.loads(storage.payload)
    assert records[1] == {
        "id": "2",
        "title": "Review team feedback",
        "description": "Go through the feedback from the last sprint",
        "status": "pending",
        "priority": "medium",
        "dueDate": "2024-01-18",
        "createdAt": "2024-01-11T14:30:00Z",
        "tags": ["team", "review"],
    }


def test_existing_snapshot_is_loaded_not_reseeded(store, storage) -> None:
    store.create(_new())
    writes = storage.writes

    reloaded = TaskStore(storage)
    tasks = reloaded.load()

    assert len(tasks) == 4
    assert storage.writes == writes


def test_empty_array_is_a_valid_snapshot(storage) -> None:
    storage.payload = "[]"
    store = TaskStore(storage)
    assert store.load() == ()
    assert storage.writes == 0


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        '{"id": "1"}',
        '[{"id": "1", "title": "x"}]',
        '[{"id": "1", "title": "x", "description": "", "status": "done", "priority": "low",'
        ' "dueDate": "2024-01-01", "createdAt": "2024-01-01T00:00:00Z", "tags": []}]',
        '[{"id": "1", "title": "x", "description": "", "status": "pending", "priority": "low",'
        ' "dueDate": "2024-01-01", "createdAt": "2024-01-01T00:00:00", "tags": []}]',
        '[{"id": "1", "title": "x", "description": "", "status": "pending", "priority": "low",'
        ' "dueDate": 0, "createdAt": 1700000000, "tags": []}]',
        b'[{"title": "\xff\xfe"}]',
        "[" * 100_000 + "]" * 100_000,
    ],
    ids=[
        "bad-json",
        "not-array",
        "missing-fields",
        "bad-status",
        "naive-created-at",
        "numeric-dates",
        "invalid-utf8",
        "deep-nesting",
    ],
)
def test_corrupt_snapshot_raises_and_leaves_store_unloaded(storage, payload) -> None:
    storage.payload = payload
    store = TaskStore(storage)

    with pytest.raises(CorruptStateError):
        store.load()

    with pytest.raises(StoreNotLoadedError):
        store.snapshot()
    assert storage.payload == payload


def test_duplicate_ids_in_snapshot_are_corrupt(store, storage) -> None:
    records = json.loads(storage.payload)
    records.append(dict(records[0]))
    storage.payload = json.dumps(records)

    with pytest.raises(CorruptStateError, match="duplicate id"):
        TaskStore(storage).load()


def test_reset_to_seed_recovers_after_corruption(storage) -> None:
    storage.payload = "garbage"
    store = TaskStore(storage)
    with pytest.raises(CorruptStateError):
        store.load()

    tasks = store.reset_to_seed()
    assert len(tasks) == 3
    assert json.loads(storage.payload)[0]["id"] == "1"


def test_create_assigns_id_timestamp_and_pending(store, clock) -> None:
    expected_created = clock.current
    task = store.create(_new(tags=["finance"]))

    assert task.id not in {"1", "2", "3"}
    assert task.created_at == expected_created
    assert task.status is TaskStatus.PENDING
    assert task.priority is TaskPriority.HIGH
    assert task.due_date == date(2024, 3, 1)
    assert task.tags == ("finance",)
    assert store.snapshot()[-1] == task


def test_create_defaults_tags_to_empty(store) -> None:
    assert store.create(_new()).tags == ()


def test_create_ignores_status_override(store) -> None:
    task = store.create(_new(status="completed"))
    assert task.status is TaskStatus.PENDING


def test_create_ignores_caller_id_and_created_at(store, clock) -> None:
    expected_created = clock.current
    task = store.create(_new(id="1", createdAt="1999-01-01T00:00:00Z"))
    assert task.id != "1"
    assert task.created_at == expected_created


def test_created_ids_are_unique(store) -> None:
    ids = [store.create(_new(f"task {i}")).id for i in range(50)]
    ids += [t.id for t in store.snapshot()[:3]]
    assert len(set(ids)) == len(ids)


def test_id_factory_collision_is_retried(storage, clock) -> None:
    candidates = iter(["1", "2", "fresh"])
    store = TaskStore(storage, clock=clock, id_factory=lambda: next(candidates))
    store.load()

    assert store.create(_new()).id == "fresh"


@pytest.mark.parametrize(
    "bad",
    [
        {"title": "", "description": "", "priority": "low", "dueDate": "2024-01-01"},
        {"title": "   ", "description": "", "priority": "low", "dueDate": "2024-01-01"},
        {"description": "", "priority": "low", "dueDate": "2024-01-01"},
        {"title": "x", "description": "", "priority": "urgent", "dueDate": "2024-01-01"},
        {"title": "x", "description": "", "priority": "low", "dueDate": "soon"},
        {"title": "x", "priority": "low", "dueDate": "2024-01-01"},
    ],
    ids=["empty-title", "blank-title", "no-title", "bad-priority", "bad-date", "no-description"],
)
def test_create_rejects_invalid_input_without_writing(store, storage, bad) -> None:
    before = store.snapshot()
    writes = storage.writes

    with pytest.raises(ValidationError):
        store.create(bad)

    assert store.snapshot() == before
    assert storage.writes == writes


def test_update_merges_only_supplied_fields(store) -> None:
    original = store.get("2")
    updated = store.update("2", {"status": "in-progress", "tags": ["team"]})

    assert updated.status is TaskStatus.IN_PROGRESS
    assert updated.tags == ("team",)
    assert updated.title == original.title
    assert updated.description == original.description
    assert updated.priority == original.priority
    assert updated.due_date == original.due_date
    assert store.get("2") == updated


def test_update_accepts_python_field_names(store) -> None:
    updated = store.update("1", {"due_date": date(2024, 2, 2), "priority": TaskPriority.LOW})
    assert updated.due_date == date(2024, 2, 2)
    assert updated.priority is TaskPriority.LOW


def test_update_never_changes_identity_fields(store) -> None:
    original = store.get("1")
    updated = store.update(
        "1",
        {"id": "999", "createdAt": "2030-01-01T00:00:00Z", "created_at": "2030-01-01T00:00:00Z"},
    )
    assert updated.id == "1"
    assert updated.created_at == original.created_at
    assert store.get("999") is None


def test_update_missing_id_raises_not_found(store, storage) -> None:
    writes = storage.writes
    with pytest.raises(NotFoundError) as exc_info:
        store.update("nope", {"title": "x"})
    assert exc_info.value.task_id == "nope"
    assert storage.writes == writes


@pytest.mark.parametrize(
    "changes",
    [{"status": "done"}, {"priority": "critical"}, {"title": ""}, {"title": None}, {"dueDate": "tomorrow"}],
)
def test_update_rejects_invalid_values(store, storage, changes) -> None:
    before = store.get("2")
    writes = storage.writes

    with pytest.raises(ValidationError):
        store.update("2", changes)

    assert store.get("2") == before
    assert storage.writes == writes


def test_update_persists_whole_snapshot(store, storage) -> None:
    store.update("3", {"title": "Update docs"})
    records = json.loads(storage.payload)
    assert [r["id"] for r in records] == ["1", "2", "3"]
    assert records[2]["title"] == "Update docs"


def test_delete_is_idempotent(store, storage) -> None:
    assert store.delete("2") is True
    after_first = store.snapshot()
    writes = storage.writes

    assert store.delete("2") is False
    assert store.snapshot() == after_first
    assert storage.writes == writes
    assert [r["id"] for r in json.loads(storage.payload)] == ["1", "3"]


def test_failed_write_keeps_previous_state(store, storage) -> None:
    before = store.snapshot()
    persisted = storage.payload
    storage.fail_writes = True

    with pytest.raises(PersistenceError):
        store.create(_new())
    with pytest.raises(PersistenceError):
        store.update("1", {"title": "changed"})
    with pytest.raises(PersistenceError):
        store.delete("1")

    assert store.snapshot() == before
    assert storage.payload == persisted


def test_snapshot_is_immutable_and_ordered(store) -> None:
    created = store.create(_new())
    snap = store.snapshot()

    assert isinstance(snap, tuple)
    assert [t.id for t in snap] == ["1", "2", "3", created.id]
    with pytest.raises(Exception):
        snap[0].title = "mutated"  # type: ignore[misc]

    store.delete("1")
    assert len(snap) == 4


def test_round_trip_through_storage(store, storage) -> None:
    store.create(_new(tags=["a", "b", "a"]))
    in_memory = store.snapshot()

    reloaded = TaskStore(storage)
    assert reloaded.load() == in_memory


def test_operations_require_load(storage) -> None:
    store = TaskStore(storage)
    with pytest.raises(StoreNotLoadedError):
        store.create(_new())
    with pytest.raises(StoreNotLoadedError):
        store.delete("1")


def test_close_ends_lifecycle(store) -> None:
    store.close()
    with pytest.raises(StoreNotLoadedError):
        store.snapshot()
    with pytest.raises(StoreNotLoadedError):
        store.load()
