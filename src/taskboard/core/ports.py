# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The store depends on a Protocol for durable storage instead of a concrete file,
and the console layer depends on TaskRepo instead of the concrete TaskStore.
This keeps storage swappable and makes testing easier.
"""

from collections.abc import Mapping
from typing import Any, Protocol


class SnapshotStorage(Protocol):
    """
    A single durable key holding the whole task collection as JSON text.

    read() returns None when nothing has been persisted yet; text or UTF-8 bytes otherwise.
    write() must replace the previous value atomically and raise OSError on failure.
    """

    def read(self) -> str | bytes | None: ...
    def write(self, payload: str) -> None: ...


class TaskRepo(Protocol):
    def load(self) -> tuple[Any, ...]: ...
    def reset_to_seed(self) -> tuple[Any, ...]: ...
    def snapshot(self) -> tuple[Any, ...]: ...
    def get(self, task_id: str) -> Any | None: ...
    def count(self) -> int: ...

    def create(self, data: Mapping[str, Any]) -> Any: ...
    def update(self, task_id: str, changes: Mapping[str, Any]) -> Any: ...
    def delete(self, task_id: str) -> bool: ...

    def close(self) -> None: ...
