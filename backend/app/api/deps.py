"""Reusable FastAPI dependencies for sessions, the state store, and task lookup.

Routes compose from these instead of opening sessions or stores themselves, so
tests can swap any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, HTTPException, status

from app.db.session import async_session_maker, get_session
from app.models.tasks import Task
from app.services.state_store import SqlStateStore, StateStore

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

SESSION_DEP = Depends(get_session)


def get_state_store() -> StateStore:
    """Return the store the event stream polls."""
    return SqlStateStore(async_session_maker)


STATE_STORE_DEP = Depends(get_state_store)


async def get_task_or_404(
    task_id: UUID,
    session: AsyncSession = SESSION_DEP,
) -> Task:
    """Load a task by id or raise HTTP 404."""
    task = await session.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


TASK_DEP = Depends(get_task_or_404)
