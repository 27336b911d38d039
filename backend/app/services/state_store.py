"""Read-side state store consumed by the change detector and the REST read path."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from app.models.tasks import Task
from app.schemas.tasks import TaskRead
from app.schemas.watcher import WatcherConfigRead
from app.services.watcher import get_or_create_watcher_config

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar


class StateStoreError(RuntimeError):
    """Raised when the backing store cannot be read."""


class StateStore(Protocol):
    """The two read shapes the event stream depends on, plus single-task lookup."""

    async def get_all_tasks(self) -> list[TaskRead]: ...

    async def get_watcher_config(self) -> WatcherConfigRead: ...

    async def get_task(self, task_id: UUID) -> TaskRead | None: ...


def all_tasks_statement() -> SelectOfScalar[Task]:
    """Tasks newest first; id breaks ties so the ordering is stable across reads."""
    return select(Task).order_by(col(Task.created_at).desc(), col(Task.id))


async def list_all_tasks(session: AsyncSession) -> list[Task]:
    result = await session.exec(all_tasks_statement())
    return list(result.all())


class SqlStateStore:
    """State store backed by the application's SQLModel tables.

    Every read opens its own short-lived session so concurrent reads (tasks and
    watcher config fetched together each poll tick) never share a connection.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get_all_tasks(self) -> list[TaskRead]:
        try:
            async with self._session_maker() as session:
                tasks = await list_all_tasks(session)
        except SQLAlchemyError as exc:
            raise StateStoreError("Failed to read tasks") from exc
        return [TaskRead.model_validate(task, from_attributes=True) for task in tasks]

    async def get_watcher_config(self) -> WatcherConfigRead:
        try:
            async with self._session_maker() as session:
                config = await get_or_create_watcher_config(session)
        except SQLAlchemyError as exc:
            raise StateStoreError("Failed to read watcher config") from exc
        return WatcherConfigRead.model_validate(config, from_attributes=True)

    async def get_task(self, task_id: UUID) -> TaskRead | None:
        try:
            async with self._session_maker() as session:
                task = await session.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise StateStoreError(f"Failed to read task {task_id}") from exc
        if task is None:
            return None
        return TaskRead.model_validate(task, from_attributes=True)
