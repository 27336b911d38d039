"""Activity log entries recording per-field task changes."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from app.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (datetime,)


class TaskActivity(SQLModel, table=True):
    """One recorded action against a task (create, field change, comment, ...)."""

    __tablename__ = "task_activity"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    task_id: UUID = Field(index=True)
    actor: str | None = None
    action: str = Field(index=True)
    field: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
