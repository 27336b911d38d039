"""Schemas for task comment create and read operations."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

from app.schemas.common import NonEmptyStr

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class TaskCommentCreate(SQLModel):
    """Payload for posting a comment on a task."""

    author: NonEmptyStr = Field(examples=["build-agent"])
    content: NonEmptyStr = Field(examples=["Blocked on the staging credentials."])


class TaskCommentRead(SQLModel):
    """Serialized task comment."""

    id: UUID
    task_id: UUID
    author: str
    content: str
    created_at: datetime
