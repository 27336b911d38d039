"""Task CRUD, comment, and activity-log operations used by the REST API."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import col, select

from app.core.config import settings
from app.core.logging import get_logger
from app.core.time import next_timestamp
from app.models.task_activity import TaskActivity
from app.models.task_comments import TaskComment
from app.models.tasks import Task
from app.schemas.tasks import TaskRead
from app.services.notifications import TaskEvent, TaskNotification, send_task_notification
from app.services.state_store import all_tasks_statement

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

    from app.schemas.comments import TaskCommentCreate
    from app.schemas.tasks import TaskCreate, TaskUpdate

logger = get_logger(__name__)

REVIEW_STATUS = "in_review"
DONE_STATUS = "done"


def parse_status_filter(raw: str | None) -> set[str] | None:
    """Parse a comma-separated ``status`` query value; blank means no filter."""
    if raw is None:
        return None
    statuses = {value.strip() for value in raw.split(",") if value.strip()}
    return statuses or None


async def list_tasks(session: AsyncSession, *, statuses: set[str] | None = None) -> list[Task]:
    statement = all_tasks_statement()
    if statuses:
        statement = statement.where(col(Task.status).in_(statuses))
    result = await session.exec(statement)
    return list(result.all())


def _activity_value(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, date | datetime):
        return value.isoformat()
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    return str(value)


def _record(
    session: AsyncSession,
    *,
    task_id: UUID,
    action: str,
    actor: str | None = None,
    field: str | None = None,
    old_value: object = None,
    new_value: object = None,
) -> None:
    session.add(
        TaskActivity(
            task_id=task_id,
            actor=actor,
            action=action,
            field=field,
            old_value=_activity_value(old_value),
            new_value=_activity_value(new_value),
        ),
    )


def _append_contributor(worked_by: Iterable[str], name: str | None) -> list[str]:
    contributors = list(worked_by)
    if name and name not in contributors:
        contributors.append(name)
    return contributors


async def _notify(event: TaskEvent, task: Task, **extra: Any) -> None:
    await send_task_notification(
        TaskNotification(
            event=event,
            task=TaskRead.model_validate(task, from_attributes=True),
            **extra,
        ),
    )


async def create_task(session: AsyncSession, payload: TaskCreate) -> Task:
    """Persist a new task and record its creation."""
    assignee = (payload.assignee or "").strip() or settings.default_assignee
    task = Task(
        **payload.model_dump(exclude={"assignee"}),
        assignee=assignee,
        worked_by=[],
    )
    session.add(task)
    _record(session, task_id=task.id, action="created", new_value=task.status)
    await session.commit()
    await session.refresh(task)
    logger.info("tasks.created", extra={"task_id": str(task.id), "status": task.status})
    await _notify("task.created", task)
    return task


def _normalized_changes(task: Task, payload: TaskUpdate) -> dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True, exclude={"actor"})
    if changes.get("status") == REVIEW_STATUS:
        changes["assignee"] = settings.review_assignee
    if "assignee" in changes and changes["assignee"] is None:
        del changes["assignee"]
    if changes.get("is_blocked") is False:
        changes["blocked_reason"] = None
    for required in ("title", "time_spent", "progress", "is_blocked", "status", "priority"):
        if required in changes and changes[required] is None:
            del changes[required]
    return {key: value for key, value in changes.items() if getattr(task, key) != value}


async def update_task(session: AsyncSession, task: Task, payload: TaskUpdate) -> Task:
    """Apply a partial update, logging each changed field.

    Moving a task into review hands it to the configured reviewer, and every
    assignee a task passes through is remembered in ``worked_by``.
    """
    changes = _normalized_changes(task, payload)
    if not changes:
        return task

    for key, value in changes.items():
        action = "status_changed" if key == "status" else "updated"
        _record(
            session,
            task_id=task.id,
            action=action,
            actor=payload.actor,
            field=key,
            old_value=getattr(task, key),
            new_value=value,
        )
        setattr(task, key, value)
    if "assignee" in changes:
        task.worked_by = _append_contributor(task.worked_by, task.assignee)
    task.updated_at = next_timestamp(task.updated_at)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    logger.info(
        "tasks.updated",
        extra={"task_id": str(task.id), "fields": ",".join(sorted(changes))},
    )
    completed = changes.get("status") == DONE_STATUS
    await _notify("task.completed" if completed else "task.updated", task)
    return task


async def delete_task(session: AsyncSession, task: Task) -> None:
    """Delete a task and its comments; its activity history is retained."""
    snapshot = TaskRead.model_validate(task, from_attributes=True)
    await session.execute(delete(TaskComment).where(col(TaskComment.task_id) == task.id))
    _record(session, task_id=task.id, action="deleted", old_value=task.title)
    await session.delete(task)
    await session.commit()
    logger.info("tasks.deleted", extra={"task_id": str(snapshot.id)})
    await send_task_notification(TaskNotification(event="task.deleted", task=snapshot))


async def list_comments(session: AsyncSession, task_id: UUID) -> list[TaskComment]:
    statement = (
        select(TaskComment)
        .where(col(TaskComment.task_id) == task_id)
        .order_by(col(TaskComment.created_at))
    )
    result = await session.exec(statement)
    return list(result.all())


async def add_comment(
    session: AsyncSession,
    task: Task,
    payload: TaskCommentCreate,
) -> TaskComment:
    """Append a comment and record it in the task's activity log."""
    comment = TaskComment(task_id=task.id, author=payload.author, content=payload.content)
    session.add(comment)
    _record(session, task_id=task.id, action="commented", actor=payload.author)
    await session.commit()
    await session.refresh(comment)
    logger.info(
        "tasks.comment.created",
        extra={"task_id": str(task.id), "comment_id": str(comment.id)},
    )
    await _notify(
        "task.commented",
        task,
        comment_author=comment.author,
        comment_content=comment.content,
    )
    return comment


def activity_statement(task_id: UUID) -> SelectOfScalar[TaskActivity]:
    return (
        select(TaskActivity)
        .where(col(TaskActivity.task_id) == task_id)
        .order_by(col(TaskActivity.created_at).desc())
    )
