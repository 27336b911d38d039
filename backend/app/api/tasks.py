"""Task CRUD, comment, and activity endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, status

from app.api.deps import SESSION_DEP, TASK_DEP
from app.db.pagination import paginate
from app.schemas.activity import TaskActivityRead
from app.schemas.comments import TaskCommentCreate, TaskCommentRead
from app.schemas.common import OkResponse
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from app.services import tasks as task_service

if TYPE_CHECKING:
    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.models.task_comments import TaskComment
    from app.models.tasks import Task

router = APIRouter(prefix="/tasks", tags=["tasks"])
STATUS_QUERY = Query(
    default=None,
    alias="status",
    description="Comma-separated statuses to include, e.g. `todo,in_progress`.",
)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    status_filter: str | None = STATUS_QUERY,
    session: AsyncSession = SESSION_DEP,
) -> list[Task]:
    """List all tasks, newest first, optionally filtered by status.

    This is the non-streaming read path clients fall back to when the event
    stream is unavailable.
    """
    statuses = task_service.parse_status_filter(status_filter)
    return await task_service.list_tasks(session, statuses=statuses)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    session: AsyncSession = SESSION_DEP,
) -> Task:
    """Create a task."""
    return await task_service.create_task(session, payload)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task: Task = TASK_DEP) -> Task:
    """Fetch one task."""
    return task


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    payload: TaskUpdate,
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> Task:
    """Partially update a task.

    Clients persist a finished drag here; moving into `in_review` reassigns the
    task to the configured reviewer.
    """
    return await task_service.update_task(session, task, payload)


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> OkResponse:
    """Delete a task and its comments."""
    await task_service.delete_task(session, task)
    return OkResponse()


@router.get("/{task_id}/comments", response_model=list[TaskCommentRead])
async def list_task_comments(
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> list[TaskComment]:
    """List a task's comments, oldest first."""
    return await task_service.list_comments(session, task.id)


@router.post(
    "/{task_id}/comments",
    response_model=TaskCommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_task_comment(
    payload: TaskCommentCreate,
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> TaskComment:
    """Post a comment on a task."""
    return await task_service.add_comment(session, task, payload)


@router.get("/{task_id}/activity", response_model=DefaultLimitOffsetPage[TaskActivityRead])
async def list_task_activity(
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> LimitOffsetPage[TaskActivityRead]:
    """List a task's activity log, newest first."""
    return await paginate(session, task_service.activity_statement(task.id))
