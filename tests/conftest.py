# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.core.state import AppState
from taskboard.tasks.task_models import Task, TaskPriority, TaskStatus
from taskboard.tasks.task_store import TaskStore


class MemoryStorage:
    """
    In-memory SnapshotStorage used by store tests.

    - `payload` holds the last successful write (None = nothing persisted)
    - set `fail_writes = True` to make write() raise like a full disk
    """

    def __init__(self, payload: str | bytes | None = None) -> None:
        self.payload = payload
        self.writes = 0
        self.fail_writes = False

    def read(self) -> str | bytes | None:
        return self.payload

    def write(self, payload: str) -> None:
        if self.fail_writes:
            raise OSError(28, "No space left on device")
        self.payload = payload
        self.writes += 1


class StepClock:
    """Deterministic clock: each call advances by `step` (0 = frozen)."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


def make_task(
    task_id: str,
    title: str,
    *,
    description: str = "",
    status: TaskStatus = TaskStatus.PENDING,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due: date = date(2024, 1, 20),
    created_at: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
    tags: tuple[str, ...] = (),
) -> Task:
    return Task(
        id=task_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=due,
        created_at=created_at,
        tags=tags,
    )


@pytest.fixture()
def task_factory() -> Callable[..., Task]:
    return make_task


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def clock() -> StepClock:
    return StepClock(datetime(2024, 2, 1, 12, 0, tzinfo=UTC))


@pytest.fixture()
def store(storage: MemoryStorage, clock: StepClock) -> TaskStore:
    """A loaded store seeded with the three demonstration tasks."""
    s = TaskStore(storage, clock=clock)
    s.load()
    return s


@pytest.fixture()
def five_tasks() -> tuple[Task, ...]:
    """
    Fixed fixture for filter/search tests.

    completed + mentions "doc": t3 (title), t5 (description, different case)
    completed without "doc": t4
    not completed but mentions "doc": t1
    """
    return (
        make_task("t1", "Write docs outline", status=TaskStatus.PENDING, due=date(2024, 1, 22)),
        make_task("t2", "Fix login bug", status=TaskStatus.IN_PROGRESS, due=date(2024, 1, 19)),
        make_task("t3", "Publish Docstrings", status=TaskStatus.COMPLETED, due=date(2024, 1, 10)),
        make_task(
            "t4",
            "Plan sprint",
            description="Capacity review",
            status=TaskStatus.COMPLETED,
            due=date(2024, 1, 12),
        ),
        make_task(
            "t5",
            "Release 1.2",
            description="Attach the DOC bundle",
            status=TaskStatus.COMPLETED,
            due=date(2024, 1, 14),
        ),
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        tasks_path=tmp_path / "data" / "tasks.json",
        date_format="%b %d, %Y",
        recent_limit=5,
        upcoming_limit=5,
        reset_on_corrupt=True,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store)
