"""Task model representing board work items and agent execution metadata."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel

from app.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (date, datetime)


class Task(SQLModel, table=True):
    """Board task with workflow status, effort tracking, and agent context."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: str | None = Field(default=None, index=True)

    title: str
    description: str | None = Field(default=None, sa_column=Column(Text))
    status: str = Field(default="todo", index=True)
    assignee: str = Field(default="unassigned", index=True)
    priority: str = Field(default="medium", index=True)
    due_date: date | None = None
    estimated_hours: float | None = None
    time_spent: float = Field(default=0.0)
    progress: int = Field(default=0)
    is_blocked: bool = Field(default=False)
    blocked_reason: str | None = None
    agent_context: str | None = Field(default=None, sa_column=Column(Text))
    worked_by: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
