# src/taskboard/tasks/task_seed.py

"""First-run demonstration tasks, written only when no snapshot exists yet."""

from __future__ import annotations

from typing import Any

from .task_models import Task

SEED_RECORDS: tuple[dict[str, Any], ...] = (
    {
        "id": "1",
        "title": "Complete project proposal",
        "description": "Write and submit the Q4 project proposal",
        "status": "in-progress",
        "priority": "high",
        "dueDate": "2024-01-20",
        "createdAt": "2024-01-10T10:00:00Z",
        "tags": ["work", "urgent"],
    },
    {
        "id": "2",
        "title": "Review team feedback",
        "description": "Go through the feedback from the last sprint",
        "status": "pending",
        "priority": "medium",
        "dueDate": "2024-01-18",
        "createdAt": "2024-01-11T14:30:00Z",
        "tags": ["team", "review"],
    },
    {
        "id": "3",
        "title": "Update documentation",
        "description": "Update API documentation with latest changes",
        "status": "completed",
        "priority": "low",
        "dueDate": "2024-01-15",
        "createdAt": "2024-01-08T09:15:00Z",
        "tags": ["documentation"],
    },
)


def seed_tasks() -> list[Task]:
    return [Task.model_validate(rec) for rec in SEED_RECORDS]
