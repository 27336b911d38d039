"""Server-sent event stream of task and watcher snapshots."""

from __future__ import annotations

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from app.api.deps import STATE_STORE_DEP
from app.services.realtime.event_stream import EventStreamConnection
from app.services.realtime.events import EVENT_SEPARATOR, STREAM_HEADERS, heartbeat_event
from app.services.state_store import StateStore

router = APIRouter(tags=["events"])
# The connection sends its own heartbeat every poll tick; the transport ping
# only covers a stalled poll loop and is formatted as the same comment.
STREAM_PING_SECONDS = 3600


@router.get("/events")
async def stream_events(
    request: Request,
    store: StateStore = STATE_STORE_DEP,
) -> EventSourceResponse:
    """Stream live board state.

    Sends `connected`, then full `tasks` and `watcher` snapshots, then polls
    every two seconds and pushes a snapshot whenever it changed, with a
    `: heartbeat` comment on every tick.
    """
    connection = EventStreamConnection(store, is_disconnected=request.is_disconnected)
    return EventSourceResponse(
        connection.events(),
        headers=STREAM_HEADERS,
        ping=STREAM_PING_SECONDS,
        ping_message_factory=heartbeat_event,
        sep=EVENT_SEPARATOR,
    )
