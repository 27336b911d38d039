"""Watcher singleton read and control endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from app.api.deps import SESSION_DEP
from app.schemas.watcher import WatcherAction, WatcherConfigRead
from app.services.watcher import apply_watcher_action, get_or_create_watcher_config

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.models.watcher_config import WatcherConfig

router = APIRouter(prefix="/watcher", tags=["watcher"])


@router.get("", response_model=WatcherConfigRead)
async def get_watcher(session: AsyncSession = SESSION_DEP) -> WatcherConfig:
    """Return the current watcher state."""
    return await get_or_create_watcher_config(session)


@router.post("", response_model=WatcherConfigRead)
async def post_watcher_action(
    payload: WatcherAction,
    session: AsyncSession = SESSION_DEP,
) -> WatcherConfig:
    """Apply a watcher action.

    Agents send `heartbeat` on every loop and `start_task`/`end_task` around
    each task they pick up; the board's on/off switch sends `toggle`.
    """
    return await apply_watcher_action(session, payload)
