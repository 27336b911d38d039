"""Watcher singleton access and control actions (toggle, heartbeat, task claims)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from app.core.logging import get_logger
from app.core.time import next_timestamp, utcnow
from app.models.watcher_config import WATCHER_CONFIG_ID, WatcherConfig

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.schemas.watcher import WatcherAction

logger = get_logger(__name__)


async def get_or_create_watcher_config(session: AsyncSession) -> WatcherConfig:
    """Return the singleton row, inserting the default one on first access."""
    config = await session.get(WatcherConfig, WATCHER_CONFIG_ID)
    if config is not None:
        return config
    config = WatcherConfig(id=WATCHER_CONFIG_ID)
    session.add(config)
    try:
        await session.commit()
    except IntegrityError:
        # Another connection created the row between our read and insert.
        await session.rollback()
        existing = await session.get(WatcherConfig, WATCHER_CONFIG_ID)
        if existing is None:
            raise
        return existing
    await session.refresh(config)
    logger.info("watcher.config.created")
    return config


def _apply_action(config: WatcherConfig, action: WatcherAction) -> None:
    task_id = str(action.task_id) if action.task_id is not None else None
    if action.action == "toggle":
        config.is_running = not config.is_running
    elif action.action == "heartbeat":
        config.last_run = utcnow()
        config.current_task_id = action.current_task_id
    elif action.action == "start_task":
        if task_id not in config.active_task_ids:
            config.active_task_ids = [*config.active_task_ids, task_id]
    elif action.action == "end_task":
        config.active_task_ids = [value for value in config.active_task_ids if value != task_id]
    else:
        updates = action.model_dump(
            exclude_unset=True,
            include={"is_running", "current_task_id", "active_task_ids"},
        )
        for key, value in updates.items():
            if key == "active_task_ids" and value is None:
                value = []
            setattr(config, key, value)


async def apply_watcher_action(session: AsyncSession, action: WatcherAction) -> WatcherConfig:
    """Apply one control action to the watcher singleton and persist it."""
    config = await get_or_create_watcher_config(session)
    _apply_action(config, action)
    config.updated_at = next_timestamp(config.updated_at)
    session.add(config)
    await session.commit()
    await session.refresh(config)
    logger.info(
        "watcher.action.applied",
        extra={
            "action": action.action,
            "is_running": config.is_running,
            "active_task_count": len(config.active_task_ids),
        },
    )
    return config
