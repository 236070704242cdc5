# src/taskboard/tasks/task_models.py

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, AwareDatetime, BaseModel, ConfigDict, Field, model_validator


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the literal strings used in the persisted JSON.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("title must not be blank")
    return value


Title = Annotated[str, AfterValidator(_require_text)]


class Task(BaseModel):
    """
    A single trackable unit of work.

    Instances are frozen: the store replaces records on update instead of mutating them,
    so a snapshot handed to a consumer never changes underneath it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    title: Title
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date = Field(alias="dueDate")
    created_at: AwareDatetime = Field(alias="createdAt")
    tags: tuple[str, ...] = ()

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


class TaskCreate(BaseModel):
    """
    Caller-supplied fields for a new task.

    id/createdAt/status are assigned by the store; if a caller passes them they are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Title
    description: str
    priority: TaskPriority
    due_date: date = Field(alias="dueDate")
    tags: tuple[str, ...] = ()


class TaskUpdate(BaseModel):
    """Partial update: only the fields the caller actually supplied are merged."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Title | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = Field(default=None, alias="dueDate")
    tags: tuple[str, ...] | None = None

    @model_validator(mode="after")
    def _reject_explicit_none(self) -> TaskUpdate:
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
