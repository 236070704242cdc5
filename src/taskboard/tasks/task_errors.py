# src/taskboard/tasks/task_errors.py

"""
Errors raised by the task store and query helpers.

Everything derives from TaskStoreError so the hosting app can catch one type.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class TaskStoreError(Exception):
    """Base class for task store failures."""


class NotFoundError(TaskStoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id!r}")
        self.task_id = task_id


class ValidationError(TaskStoreError):
    """Bad create/update input. Raised before anything is mutated."""

    def __init__(self, message: str, errors: Sequence[dict[str, Any]] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class CorruptStateError(TaskStoreError):
    """Persisted snapshot could not be parsed or failed schema validation."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class PersistenceError(TaskStoreError):
    """Durable write rejected; the in-memory collection was left untouched."""


class StoreNotLoadedError(TaskStoreError):
    """Store used before load() succeeded (or after close())."""
