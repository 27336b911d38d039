"""Schemas for the agent watcher singleton and its control actions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Self
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)

WatcherActionName = Literal["toggle", "heartbeat", "start_task", "end_task", "update"]
_TASK_ACTIONS = frozenset({"start_task", "end_task"})


class WatcherConfigRead(SQLModel):
    """Watcher state as returned by the API and pushed on the event stream."""

    is_running: bool
    last_run: datetime | None = None
    current_task_id: UUID | None = None
    active_task_ids: list[str] = Field(default_factory=list)
    updated_at: datetime


class WatcherAction(SQLModel):
    """Control request for the watcher singleton.

    ``toggle`` flips ``is_running``; ``heartbeat`` stamps ``last_run`` and the
    task the agent is holding; ``start_task``/``end_task`` add or remove one id
    from ``active_task_ids``; ``update`` applies the explicit fields given.
    """

    action: WatcherActionName = "update"
    task_id: UUID | None = None
    current_task_id: UUID | None = None
    is_running: bool | None = None
    active_task_ids: list[str] | None = None

    @model_validator(mode="after")
    def _require_task_id(self) -> Self:
        if self.action in _TASK_ACTIONS and self.task_id is None:
            raise ValueError(f"task_id is required for action={self.action}")
        return self
