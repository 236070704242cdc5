# src/taskboard/tasks/task_stats.py

"""
Aggregate counters over a task snapshot.

Pure functions: no store access and no clock reads. Anything time-dependent takes `now`.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .task_models import Task, TaskPriority, TaskStatus
from .task_query import is_overdue


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    in_progress: int
    pending: int
    overdue: int

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "completed": self.completed,
            "inProgress": self.in_progress,
            "pending": self.pending,
            "overdue": self.overdue,
        }


def _round_half_up(x: float) -> int:
    # Built-in round() is banker's rounding; dashboards expect 12.5 -> 13.
    return int(math.floor(x + 0.5))


def compute_stats(tasks: Iterable[Task], now: datetime) -> TaskStats:
    total = completed = in_progress = pending = overdue = 0
    for task in tasks:
        total += 1
        if task.status is TaskStatus.COMPLETED:
            completed += 1
        elif task.status is TaskStatus.IN_PROGRESS:
            in_progress += 1
        else:
            pending += 1
        if is_overdue(task, now):
            overdue += 1
    return TaskStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        pending=pending,
        overdue=overdue,
    )


def completion_rate(stats: TaskStats) -> int:
    """Percent of tasks completed, 0..100. An empty collection is 0%."""
    if stats.total <= 0:
        return 0
    return _round_half_up(stats.completed / stats.total * 100)


def priority_distribution(tasks: Iterable[Task]) -> dict[TaskPriority, int]:
    counts = {p: 0 for p in (TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW)}
    for task in tasks:
        counts[task.priority] += 1
    return counts


def status_distribution(stats: TaskStats) -> dict[str, int]:
    """Slices for the completion chart. Overdue overlaps pending/in-progress."""
    return {
        "Completed": stats.completed,
        "In Progress": stats.in_progress,
        "Pending": stats.pending,
        "Overdue": stats.overdue,
    }


def active_count(stats: TaskStats) -> int:
    return stats.pending + stats.in_progress


def productivity_score(stats: TaskStats) -> int:
    """
    Weighted progress score capped at 100.

    completed counts 10 points, in-progress 5, averaged over max(1, total).
    """
    raw = (stats.completed * 10 + stats.in_progress * 5) / max(1, stats.total)
    return min(100, _round_half_up(raw))
