"""Schemas for task activity log reads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class TaskActivityRead(SQLModel):
    """Serialized task activity entry."""

    id: UUID
    task_id: UUID
    actor: str | None = None
    action: str
    field: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime
