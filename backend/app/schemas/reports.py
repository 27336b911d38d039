"""Board metrics report payload."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class TaskReport(SQLModel):
    """Aggregate counts and flow metrics over every task on the board."""

    total_tasks: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_assignee: dict[str, int] = Field(default_factory=dict)
    by_contributor: dict[str, int] = Field(
        default_factory=dict,
        description="Tasks each contributor has held; falls back to the assignee.",
    )
    completed_by_contributor: dict[str, int] = Field(default_factory=dict)
    completed_this_week: int = 0
    avg_cycle_time_hours: float | None = Field(
        default=None,
        description="Mean hours from creation to the last update of done tasks.",
        examples=[18.5],
    )
    velocity_per_day: float = 0.0
    overdue_count: int = 0
    blocked_count: int = 0
