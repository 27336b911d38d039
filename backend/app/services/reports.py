"""Board metrics computed over the full task table."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from app.core.logging import get_logger
from app.core.time import utcnow
from app.schemas.reports import TaskReport
from app.services.tasks import DONE_STATUS, list_tasks

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.models.tasks import Task

logger = get_logger(__name__)

REPORT_WINDOW = timedelta(days=7)


def _bump(counts: dict[str, int], key: str) -> None:
    counts[key] = counts.get(key, 0) + 1


def build_task_report(tasks: Iterable[Task], *, now: datetime | None = None) -> TaskReport:
    """Aggregate ``tasks`` into a report as of ``now`` (naive UTC).

    Cycle time runs from ``created_at`` to ``updated_at`` of a done task, and a
    task is overdue once its due date is before today and it is not done.
    """
    now = now or utcnow()
    week_start = now - REPORT_WINDOW
    today = now.date()
    report = TaskReport()
    cycle_hours: list[float] = []

    for task in tasks:
        done = task.status == DONE_STATUS
        report.total_tasks += 1
        _bump(report.by_status, task.status)
        _bump(report.by_priority, task.priority)
        _bump(report.by_assignee, task.assignee)
        # Rows written before worked_by tracking count their assignee.
        for contributor in task.worked_by or [task.assignee]:
            _bump(report.by_contributor, contributor)
            if done:
                _bump(report.completed_by_contributor, contributor)

        if done:
            if task.updated_at >= week_start:
                report.completed_this_week += 1
            cycle_hours.append((task.updated_at - task.created_at).total_seconds() / 3600)
        elif task.due_date is not None and task.due_date < today:
            report.overdue_count += 1
        if task.is_blocked:
            report.blocked_count += 1

    if cycle_hours:
        report.avg_cycle_time_hours = round(sum(cycle_hours) / len(cycle_hours), 1)
    report.velocity_per_day = round(report.completed_this_week / REPORT_WINDOW.days, 1)
    return report


async def get_task_report(session: AsyncSession) -> TaskReport:
    report = build_task_report(await list_tasks(session))
    logger.debug(
        "reports.tasks.built",
        extra={"total_tasks": report.total_tasks, "completed": report.completed_this_week},
    )
    return report
