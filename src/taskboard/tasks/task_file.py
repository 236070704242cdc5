# src/taskboard/tasks/task_file.py

from __future__ import annotations

import contextlib
import logging
import os
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonTaskFile:
    """
    File-backed SnapshotStorage: one JSON file is the durable key.

    Writes go to a sibling temp file, are fsynced, then moved over the target with
    os.replace, so a reader never sees a half-written snapshot.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> bytes | None:
        """Raw bytes; decoding is left to the store so bad encodings count as corruption."""
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None

    def write(self, payload: str) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self._path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        logger.debug("Snapshot written path=%s bytes=%d", self._path, len(payload))

    def quarantine(self) -> Path | None:
        """
        Move an unreadable snapshot aside so a reset does not overwrite it.

        Returns the new location, or None if there was nothing to move.
        """
        if not self._path.exists():
            return None
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
        target = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        os.replace(self._path, target)
        logger.warning("Corrupt snapshot moved aside: %s -> %s", self._path, target)
        return target
