"""Singleton watcher-config row describing the automated agent loop."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)
WATCHER_CONFIG_ID = 1


class WatcherConfig(SQLModel, table=True):
    """Process-wide agent watcher state; exactly one row (id=1) ever exists."""

    __tablename__ = "watcher_config"  # pyright: ignore[reportAssignmentType]

    id: int = Field(default=WATCHER_CONFIG_ID, primary_key=True)
    is_running: bool = Field(default=False)
    last_run: datetime | None = None
    current_task_id: UUID | None = None
    active_task_ids: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    updated_at: datetime = Field(default_factory=utcnow)
