"""Board metrics report endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from app.api.deps import SESSION_DEP
from app.schemas.reports import TaskReport
from app.services.reports import get_task_report

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=TaskReport)
async def task_report(session: AsyncSession = SESSION_DEP) -> TaskReport:
    """Status, priority and contributor breakdowns plus cycle time and velocity."""
    return await get_task_report(session)
