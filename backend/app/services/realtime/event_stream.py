"""Per-connection server-sent event stream driven by a cooperative poll task.

Each connection owns its own poll task, change detector, and closed flag, and
hands frames to the HTTP response through an in-memory channel: the poll task
is the only producer, the response body the only consumer. Nothing here is
shared between connections.

Teardown converges on :meth:`EventStreamConnection.close` whichever side
notices first: the response consumer going away (client abort, runtime
cancellation), a write into a channel whose reader is gone, or the poll loop
seeing the client disconnect.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from uuid import uuid4

import anyio
from sse_starlette.sse import ServerSentEvent

from app.core.logging import get_logger
from app.services.realtime.change_detector import ChangeDetector
from app.services.realtime.events import (
    connected_event,
    heartbeat_event,
    tasks_event,
    watcher_event,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from app.services.state_store import StateStore

logger = get_logger(__name__)

STREAM_POLL_SECONDS = 2.0
_STREAM_BUFFER_SIZE = 16


def _running_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class EventStreamConnection:
    """One client's event stream: cold-start sync, then poll, diff, push, heartbeat."""

    def __init__(
        self,
        store: StateStore,
        *,
        poll_seconds: float = STREAM_POLL_SECONDS,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
        buffer_size: int = _STREAM_BUFFER_SIZE,
    ) -> None:
        self.id = uuid4().hex
        self.store = store
        self.poll_seconds = poll_seconds
        self.detector = ChangeDetector()
        self.closed = False
        self._is_disconnected = is_disconnected
        self._send_channel, self._receive_channel = anyio.create_memory_object_stream[
            ServerSentEvent
        ](buffer_size)
        self._poll_task: asyncio.Task[None] | None = None

    @property
    def poll_task(self) -> asyncio.Task[None] | None:
        return self._poll_task

    def start(self) -> None:
        """Schedule the poll task on the running loop; no-op once started or closed."""
        if self._poll_task is not None or self.closed:
            return
        self._poll_task = asyncio.create_task(self._run(), name=f"event-stream-{self.id}")
        logger.info("stream.connection.opened", extra={"connection_id": self.id})

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """Response body: yields frames until the producer stops or the consumer goes away."""
        self.start()
        try:
            async with self._receive_channel:
                async for event in self._receive_channel:
                    yield event
        finally:
            self.close(reason="consumer_closed")

    def close(self, *, reason: str = "closed") -> None:
        """Mark closed, stop the poll task, and release the channel. Idempotent."""
        if self.closed:
            return
        self.closed = True
        task = self._poll_task
        if task is not None and not task.done() and task is not _running_task():
            task.cancel()
        self._send_channel.close()
        logger.info(
            "stream.connection.closed",
            extra={"connection_id": self.id, "reason": reason},
        )

    async def _write(self, event: ServerSentEvent) -> bool:
        if self.closed:
            return False
        try:
            await self._send_channel.send(event)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            self.close(reason="write_failed")
            return False
        return True

    async def _client_gone(self) -> bool:
        if self._is_disconnected is None:
            return False
        return await self._is_disconnected()

    async def _sync(self) -> None:
        try:
            changes = await self.detector.poll(self.store)
        except Exception:
            logger.exception("stream.poll.failed", extra={"connection_id": self.id})
            return
        if changes.tasks is not None:
            if not await self._write(tasks_event(changes.tasks)):
                return
            logger.debug(
                "stream.tasks.sent",
                extra={"connection_id": self.id, "task_count": len(changes.tasks)},
            )
        if changes.watcher is not None and await self._write(watcher_event(changes.watcher)):
            logger.debug("stream.watcher.sent", extra={"connection_id": self.id})

    async def _run(self) -> None:
        try:
            if not await self._write(connected_event()):
                return
            await self._sync()
            while not self.closed:
                await asyncio.sleep(self.poll_seconds)
                if self.closed:
                    break
                if await self._client_gone():
                    self.close(reason="client_disconnected")
                    break
                await self._sync()
                await self._write(heartbeat_event())
        finally:
            self.close(reason="poll_stopped")
