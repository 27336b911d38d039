"""Comment model for human and agent annotations on tasks."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from app.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (datetime,)


class TaskComment(SQLModel, table=True):
    """Free-text comment attached to a task."""

    __tablename__ = "task_comments"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    task_id: UUID = Field(foreign_key="tasks.id", index=True)
    author: str
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, index=True)
