# src/taskboard/tasks/task_store.py

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.ports import SnapshotStorage
from .task_errors import (
    CorruptStateError,
    NotFoundError,
    PersistenceError,
    StoreNotLoadedError,
    ValidationError,
)
from .task_models import Task, TaskCreate, TaskStatus, TaskUpdate
from .task_seed import seed_tasks

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(list[Task])

# Bound on id_factory retries; a uuid4 collision is practically impossible,
# a bad injected factory is not.
_MAX_ID_ATTEMPTS = 16


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    Owner of the task collection and the only write path to durable storage.

    Lifecycle: construct -> load() -> create/update/delete* -> close().

    Persistence:
    - every mutation serialises the whole collection and overwrites the durable key
    - the in-memory list is swapped only after the write succeeded, so a failed write
      leaves the store exactly as it was
    - last writer wins across processes; there is no versioning
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[Task] | None = None
        self._closed = False

    # ---- lifecycle ----

    def load(self) -> tuple[Task, ...]:
        """
        Read the persisted snapshot, seeding it on first run.

        Raises CorruptStateError when the snapshot exists but is unusable; the store
        stays unloaded so the caller can decide (usually reset_to_seed()).
        """
        self._require_open()
        raw = self._storage.read()
        if raw is None:
            logger.info("No persisted tasks found; writing seed data.")
            return self.reset_to_seed()

        tasks = self._decode(raw)
        self._tasks = tasks
        logger.info("TaskStore ready total=%d", len(tasks))
        return self.snapshot()

    def reset_to_seed(self) -> tuple[Task, ...]:
        self._require_open()
        tasks = seed_tasks()
        self._persist(tasks)
        self._tasks = tasks
        logger.info("TaskStore reset to seed data total=%d", len(tasks))
        return self.snapshot()

    def close(self) -> None:
        """Teardown hook. Every mutation is already on disk, so there is nothing to flush."""
        self._closed = True
        self._tasks = None

    # ---- read side ----

    def snapshot(self) -> tuple[Task, ...]:
        return tuple(self._loaded())

    def count(self) -> int:
        return len(self._loaded())

    def get(self, task_id: str) -> Task | None:
        for task in self._loaded():
            if task.id == task_id:
                return task
        return None

    # ---- write side ----

    def create(self, data: Mapping[str, Any]) -> Task:
        """
        Validate caller fields, assign id/createdAt, force status=pending, persist.

        Any status/id/createdAt present in `data` is ignored.
        """
        current = self._loaded()
        try:
            fields = TaskCreate.model_validate(dict(data))
        except PydanticValidationError as e:
            raise _validation_error("Invalid task", e) from e

        task = Task(
            id=self._fresh_id(current),
            title=fields.title,
            description=fields.description,
            status=TaskStatus.PENDING,
            priority=fields.priority,
            due_date=fields.due_date,
            created_at=self._clock(),
            tags=fields.tags,
        )
        self._commit([*current, task])
        logger.debug("Task created id=%s priority=%s due=%s", task.id, task.priority, task.due_date)
        return task

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        """
        Merge the supplied fields into an existing task.

        id and createdAt are immutable; if present in `changes` they are dropped.
        """
        current = self._loaded()
        index = self._index_of(current, task_id)
        if index is None:
            raise NotFoundError(task_id)

        try:
            patch = TaskUpdate.model_validate(dict(changes)).changes()
        except PydanticValidationError as e:
            raise _validation_error(f"Invalid update for task {task_id}", e) from e

        old = current[index]
        merged = Task.model_validate({**old.model_dump(), **patch})

        tasks = list(current)
        tasks[index] = merged
        self._commit(tasks)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(patch))
        return merged

    def delete(self, task_id: str) -> bool:
        """Remove a task. Deleting an unknown id is a no-op and returns False."""
        current = self._loaded()
        tasks = [t for t in current if t.id != task_id]
        if len(tasks) == len(current):
            logger.debug("Delete ignored; no task id=%s", task_id)
            return False
        self._commit(tasks)
        logger.debug("Task deleted id=%s", task_id)
        return True

    # ---- low-level helpers ----

    def _require_open(self) -> None:
        if self._closed:
            raise StoreNotLoadedError("TaskStore is closed")

    def _loaded(self) -> list[Task]:
        self._require_open()
        if self._tasks is None:
            raise StoreNotLoadedError("TaskStore.load() has not completed")
        return self._tasks

    def _commit(self, tasks: list[Task]) -> None:
        self._persist(tasks)
        self._tasks = tasks

    def _persist(self, tasks: Iterable[Task]) -> None:
        payload = json.dumps([t.to_record() for t in tasks], ensure_ascii=False, indent=2)
        try:
            self._storage.write(payload)
        except OSError as e:
            logger.error("Failed to persist task snapshot: %s", e)
            raise PersistenceError(f"Failed to persist tasks: {e}") from e

    def _fresh_id(self, tasks: list[Task]) -> str:
        taken = {t.id for t in tasks}
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate and candidate not in taken:
                return candidate
        raise RuntimeError("id_factory kept returning ids that are already in use")

    @staticmethod
    def _index_of(tasks: list[Task], task_id: str) -> int | None:
        for i, task in enumerate(tasks):
            if task.id == task_id:
                return i
        return None

    @staticmethod
    def _decode(raw: str | bytes) -> list[Task]:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CorruptStateError(f"Task snapshot is not valid UTF-8: {e}") from e

        # Strict JSON validation: dueDate/createdAt must be strings, not epoch numbers.
        try:
            tasks = _TASK_LIST.validate_json(raw, strict=True)
        except PydanticValidationError as e:
            first = e.errors(include_url=False)[0]
            where = ".".join(str(p) for p in first["loc"]) or "(root)"
            raise CorruptStateError(
                f"Task snapshot failed validation ({e.error_count()} errors, "
                f"first at {where}: {first['msg']})"
            ) from e
        except (ValueError, RecursionError) as e:
            raise CorruptStateError(f"Task snapshot could not be decoded: {e}") from e

        seen: set[str] = set()
        for task in tasks:
            if task.id in seen:
                raise CorruptStateError(f"Task snapshot has duplicate id {task.id!r}")
            seen.add(task.id)
        return tasks


def _validation_error(message: str, exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors(include_url=False)
    fields = ", ".join(".".join(str(p) for p in err["loc"]) or "(input)" for err in errors)
    return ValidationError(f"{message}: {fields}", errors)
