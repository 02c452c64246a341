"""Task-related models mirroring the remote API's JSON bodies."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from .user import ApiModel


class TaskStatus(str, Enum):
    """Workflow state of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class Assignee(ApiModel):
    """Link between a task and a user, with who assigned it and when."""

    user_id: int
    assigned_by: int
    assigned_at: datetime


class Task(ApiModel):
    id: int
    owner_id: int
    title: str
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus
    priority: int
    assignees: list[Assignee] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("assignees", mode="before")
    @classmethod
    def _null_assignees(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def assignee_ids(self) -> list[int]:
        return [assignee.user_id for assignee in self.assignees]


class TaskCreate(ApiModel):
    """Payload for ``POST /tasks``."""

    title: str
    description: str = ""
    priority: int = 1
    due_date: datetime | None = None
    assignee_ids: list[int] | None = Field(default=None, alias="assigneeIDs")


class TaskUpdate(ApiModel):
    """Partial payload for ``PATCH /tasks/{id}``; only set fields are sent."""

    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus | None = None
    priority: int | None = None
    assignee_ids: list[int] | None = Field(default=None, alias="assigneeIDs")


__all__ = [
    "Assignee",
    "Task",
    "TaskCreate",
    "TaskStatus",
    "TaskUpdate",
]
