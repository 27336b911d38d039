"""Schemas for task create/update/read API operations and stream payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator
from sqlmodel import SQLModel

from app.schemas.common import NonEmptyStr

RUNTIME_ANNOTATION_TYPES = (date, datetime, UUID)

TaskStatus = Literal["todo", "in_progress", "testing", "in_review", "done"]
TaskPriority = Literal["low", "medium", "high"]
TASK_STATUSES: tuple[TaskStatus, ...] = ("todo", "in_progress", "testing", "in_review", "done")


class TaskBase(SQLModel):
    """Shared user-editable task fields used across create and update payloads."""

    description: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    due_date: date | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    time_spent: float = Field(default=0.0, ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    is_blocked: bool = False
    blocked_reason: str | None = None
    agent_context: str | None = None
    project_id: str | None = None


class TaskCreate(TaskBase):
    """Payload for creating a task."""

    title: NonEmptyStr = Field(examples=["Wire up the release checklist"])
    assignee: str | None = Field(
        default=None,
        description="Defaults to the configured default assignee when omitted.",
    )


class TaskUpdate(SQLModel):
    """Partial task update; only fields present in the payload are applied."""

    title: NonEmptyStr | None = None
    description: str | None = None
    status: TaskStatus | None = None
    assignee: str | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    time_spent: float | None = Field(default=None, ge=0)
    progress: int | None = Field(default=None, ge=0, le=100)
    is_blocked: bool | None = None
    blocked_reason: str | None = None
    agent_context: str | None = None
    project_id: str | None = None
    actor: str | None = Field(
        default=None,
        description="Name recorded in the activity log for this change.",
        examples=["build-agent"],
    )

    @field_validator("assignee")
    @classmethod
    def _strip_assignee(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class TaskRead(TaskBase):
    """Full task record as returned by the API and pushed on the event stream."""

    id: UUID
    title: str
    assignee: str
    worked_by: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
