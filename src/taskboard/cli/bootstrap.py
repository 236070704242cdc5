# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the JSON file storage into a TaskStore and loads it,
- recovers from a corrupt snapshot by moving it aside and re-seeding.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_errors import CorruptStateError
from ..tasks.task_file import JsonTaskFile
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def load_task_store(store: TaskStore, storage: JsonTaskFile, *, reset_on_corrupt: bool) -> None:
    """
    load() the store; on CorruptStateError quarantine the file and fall back to the seed.

    With reset_on_corrupt=False the error is re-raised so the caller can stop instead.
    """
    try:
        store.load()
    except CorruptStateError as e:
        logger.warning("Stored tasks at %s are unreadable: %s", storage.path, e)
        if not reset_on_corrupt:
            raise
        storage.quarantine()
        store.reset_to_seed()


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = JsonTaskFile(settings.tasks_path)
    store = TaskStore(storage)
    load_task_store(store, storage, reset_on_corrupt=settings.reset_on_corrupt)

    return AppState(settings=settings, task_store=store)
