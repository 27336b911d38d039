"""Client-side controller for the task event stream.

``TaskStreamSession`` keeps at most one live stream open against
``GET /api/v1/events`` and reconnects with exponential backoff when the
transport fails. Reconnection is an explicit state machine: an attempt counter
plus a single pending timer that is always cancelled before a new one is set.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import httpx
from httpx_sse import SSEError, aconnect_sse
from pydantic import TypeAdapter, ValidationError

from app.core.logging import get_logger
from app.schemas.tasks import TaskRead
from app.schemas.watcher import WatcherConfigRead
from app.services.realtime.events import CONNECTED_EVENT, TASKS_EVENT, WATCHER_EVENT

if TYPE_CHECKING:
    from collections.abc import Callable

    from httpx_sse import ServerSentEvent

logger = get_logger(__name__)

RECONNECT_BASE_DELAY_SECONDS = 1.0
RECONNECT_MAX_DELAY_SECONDS = 30.0
MAX_RECONNECT_ATTEMPTS = 10

_TASK_LIST_ADAPTER = TypeAdapter(list[TaskRead])


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


def reconnect_delay(
    attempt: int,
    *,
    base: float = RECONNECT_BASE_DELAY_SECONDS,
    cap: float = RECONNECT_MAX_DELAY_SECONDS,
) -> float:
    """Return the delay before reconnect number ``attempt`` (0-based)."""
    return min(base * (2**attempt), cap)


def _call_later(delay: float, callback: Callable[[], object]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class TaskStreamSession:
    """Subscribe to task and watcher pushes with automatic reconnection.

    Callbacks are plain callables invoked on the event loop. Exceptions raised
    by a callback are logged and never tear down the stream.
    """

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        on_tasks_update: Callable[[list[TaskRead]], object] | None = None,
        on_watcher_update: Callable[[WatcherConfigRead], object] | None = None,
        on_connect: Callable[[], object] | None = None,
        on_disconnect: Callable[[], object] | None = None,
        enabled: bool = True,
        base_delay: float = RECONNECT_BASE_DELAY_SECONDS,
        max_delay: float = RECONNECT_MAX_DELAY_SECONDS,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        schedule: Callable[[float, Callable[[], object]], TimerHandle] | None = None,
    ) -> None:
        self.url = url
        self.on_tasks_update = on_tasks_update
        self.on_watcher_update = on_watcher_update
        self.on_connect = on_connect
        self.on_disconnect = on_disconnect
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_attempts = max_attempts
        self._client = client
        self._owns_client = client is None
        self._schedule = schedule or _call_later
        self._enabled = enabled
        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._timer: TimerHandle | None = None
        self._stream_task: asyncio.Task[None] | None = None
        # Bumped on every connect/disconnect so a superseded stream task can
        # tell it no longer owns the session.
        self._generation = 0

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._attempts

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def reconnect_pending(self) -> bool:
        return self._timer is not None

    @property
    def stream_task(self) -> asyncio.Task[None] | None:
        return self._stream_task

    def _http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        return self._client

    def _clear_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _stop_stream(self) -> None:
        task = self._stream_task
        self._stream_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def connect(self) -> None:
        """Open a fresh stream, replacing any live one. No-op while disabled."""
        if not self._enabled:
            return
        self._clear_timer()
        self._stop_stream()
        self._generation += 1
        self._state = ConnectionState.CONNECTING
        self._stream_task = asyncio.create_task(
            self._run_stream(self._generation),
            name="task-stream-session",
        )
        logger.info(
            "stream.client.connecting",
            extra={"url": self.url, "attempt": self._attempts},
        )

    def disconnect(self) -> None:
        """Stop streaming and cancel any pending reconnect. Idempotent."""
        self._clear_timer()
        self._stop_stream()
        self._generation += 1
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        logger.info("stream.client.disconnected", extra={"url": self.url})
        self._invoke(self.on_disconnect)

    def set_enabled(self, enabled: bool) -> None:
        """Live-updates switch: off disconnects and stays down, on reconnects from scratch.

        Repeating the current setting is a no-op while a stream is open or a
        reconnect is pending, so the switch never restarts a working stream.
        """
        active = self._stream_task is not None or self._timer is not None
        if enabled == self._enabled and (not enabled or active):
            return
        self._enabled = enabled
        if enabled:
            self._attempts = 0
            self.connect()
        else:
            self.disconnect()

    async def aclose(self) -> None:
        task = self._stream_task
        self.disconnect()
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _invoke(self, callback: Callable[..., object] | None, *args: object) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("stream.client.callback_failed")

    def _dispatch(self, sse: ServerSentEvent) -> None:
        if sse.event == CONNECTED_EVENT:
            self._state = ConnectionState.CONNECTED
            self._attempts = 0
            logger.info("stream.client.connected", extra={"url": self.url})
            self._invoke(self.on_connect)
            return
        if sse.event not in {TASKS_EVENT, WATCHER_EVENT}:
            return
        try:
            if sse.event == TASKS_EVENT:
                payload: object = _TASK_LIST_ADAPTER.validate_json(sse.data)
                callback = self.on_tasks_update
            else:
                payload = WatcherConfigRead.model_validate_json(sse.data)
                callback = self.on_watcher_update
        except ValidationError:
            # A single malformed message is dropped; the stream stays up.
            logger.warning(
                "stream.client.payload_dropped",
                extra={"event": sse.event, "size": len(sse.data)},
            )
            return
        self._invoke(callback, payload)

    async def _run_stream(self, generation: int) -> None:
        error: Exception | None = None
        try:
            async with aconnect_sse(self._http_client(), "GET", self.url) as event_source:
                event_source.response.raise_for_status()
                async for sse in event_source.aiter_sse():
                    if generation != self._generation:
                        return
                    self._dispatch(sse)
        except (httpx.HTTPError, SSEError) as exc:
            error = exc
        if generation != self._generation:
            return
        self._handle_failure(error)

    def _handle_failure(self, error: Exception | None) -> None:
        self._stream_task = None
        was_disconnected = self._state is ConnectionState.DISCONNECTED
        self._state = ConnectionState.DISCONNECTED
        logger.warning(
            "stream.client.transport_failed",
            extra={
                "url": self.url,
                "error": repr(error) if error is not None else "stream_ended",
                "attempt": self._attempts,
            },
        )
        if not was_disconnected:
            self._invoke(self.on_disconnect)
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        self._clear_timer()
        if not self._enabled:
            return
        if self._attempts + 1 >= self.max_attempts:
            logger.error(
                "stream.client.reconnect_exhausted",
                extra={"url": self.url, "attempts": self._attempts + 1},
            )
            return
        delay = reconnect_delay(self._attempts, base=self.base_delay, cap=self.max_delay)
        self._attempts += 1
        self._timer = self._schedule(delay, self._reconnect)
        logger.info(
            "stream.client.reconnect_scheduled",
            extra={"url": self.url, "delay_seconds": delay, "attempt": self._attempts},
        )

    def _reconnect(self) -> None:
        self._timer = None
        self.connect()
