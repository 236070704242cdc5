# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import TaskRepo


@dataclass
class AppState:
    """
    Everything the console layer needs, passed explicitly.

    There is no module-level store; whoever builds AppState owns the store lifecycle.
    """

    settings: Any
    task_store: TaskRepo
