# src/taskboard/tasks/task_query.py

"""
Derived views over a task snapshot (filters, searches, orderings, date labels).

Every function is pure: same inputs (including `now`) give the same output, the input
is never mutated, and results come back as tuples.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from .task_errors import ValidationError
from .task_models import Task, TaskStatus

STATUS_ALL = "all"

DEFAULT_DATE_FORMAT = "%b %d, %Y"
SHORT_DATE_FORMAT = "%b %d"


def is_overdue(task: Task, now: datetime) -> bool:
    """Incomplete and due on a calendar day before `now`'s day."""
    return task.status is not TaskStatus.COMPLETED and task.due_date < now.date()


def _coerce_status(status: str) -> TaskStatus | None:
    if status == STATUS_ALL:
        return None
    try:
        return TaskStatus(status)
    except ValueError:
        allowed = ", ".join([STATUS_ALL, *(s.value for s in TaskStatus)])
        raise ValidationError(f"Unknown status filter {status!r} (expected one of: {allowed})") from None


def filter_by_status(tasks: Iterable[Task], status: str) -> tuple[Task, ...]:
    wanted = _coerce_status(status)
    if wanted is None:
        return tuple(tasks)
    return tuple(t for t in tasks if t.status is wanted)


def _matches(task: Task, needle: str) -> bool:
    return needle in task.title.casefold() or needle in task.description.casefold()


def search(tasks: Iterable[Task], term: str) -> tuple[Task, ...]:
    if not term:
        return tuple(tasks)
    needle = term.casefold()
    return tuple(t for t in tasks if _matches(t, needle))


def filter_and_search(tasks: Iterable[Task], status: str, term: str) -> tuple[Task, ...]:
    return search(filter_by_status(tasks, status), term)


def recent(tasks: Iterable[Task], n: int) -> tuple[Task, ...]:
    """Newest first by created_at; equal timestamps keep insertion order."""
    if n <= 0:
        return ()
    # sorted(reverse=True) is still stable for equal keys.
    ordered = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    return tuple(ordered[:n])


def upcoming(tasks: Iterable[Task], n: int) -> tuple[Task, ...]:
    """Incomplete tasks, soonest due first; equal dates keep insertion order."""
    if n <= 0:
        return ()
    open_tasks = [t for t in tasks if t.status is not TaskStatus.COMPLETED]
    open_tasks.sort(key=lambda t: t.due_date)
    return tuple(open_tasks[:n])


def date_label(
    due_date: date,
    now: datetime,
    *,
    completed: bool = False,
    fmt: str = DEFAULT_DATE_FORMAT,
) -> str:
    today = now.date()
    if due_date == today:
        return "Today"
    if due_date == today + timedelta(days=1):
        return "Tomorrow"
    if due_date < today and not completed:
        return "Overdue"
    return due_date.strftime(fmt)


def task_date_label(task: Task, now: datetime, *, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    return date_label(task.due_date, now, completed=task.is_completed, fmt=fmt)


def visible_tags(tags: Sequence[str], limit: int = 3) -> tuple[tuple[str, ...], int]:
    """First `limit` tags plus how many were left out ("+N")."""
    limit = max(0, limit)
    return tuple(tags[:limit]), max(0, len(tags) - limit)
