"""Thin HTTP client for the task board's non-streaming endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from pydantic import TypeAdapter

from app.core.logging import get_logger
from app.schemas.tasks import TaskRead
from app.schemas.watcher import WatcherConfigRead

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from app.schemas.tasks import TaskStatus

logger = get_logger(__name__)

_TASK_LIST_ADAPTER = TypeAdapter(list[TaskRead])


class TaskApiClient:
    """Reads and writes tasks over the REST API.

    ``list_tasks`` is the fallback read path when the event stream never
    connects; ``update_status`` matches the persist callable that
    :meth:`BoardViewModel.end_drag` expects.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        actor: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.actor = actor
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=10.0)

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/api/v1/events"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v1{path}"

    async def list_tasks(self, statuses: Iterable[TaskStatus] | None = None) -> list[TaskRead]:
        params = {"status": ",".join(statuses)} if statuses else None
        response = await self._client.get(self._url("/tasks"), params=params)
        response.raise_for_status()
        return _TASK_LIST_ADAPTER.validate_json(response.content)

    async def get_watcher(self) -> WatcherConfigRead:
        response = await self._client.get(self._url("/watcher"))
        response.raise_for_status()
        return WatcherConfigRead.model_validate_json(response.content)

    async def update_task(self, task_id: UUID, **changes: Any) -> TaskRead:
        if self.actor is not None:
            changes.setdefault("actor", self.actor)
        response = await self._client.patch(
            self._url(f"/tasks/{task_id}"),
            json=changes,
        )
        response.raise_for_status()
        logger.debug(
            "client.task.updated",
            extra={"task_id": str(task_id), "fields": sorted(changes)},
        )
        return TaskRead.model_validate_json(response.content)

    async def update_status(self, task_id: UUID, status: TaskStatus) -> TaskRead:
        return await self.update_task(task_id, status=status)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
