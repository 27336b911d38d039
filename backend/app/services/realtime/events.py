"""Named stream events and their server-sent-event framing."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from sse_starlette.sse import ServerSentEvent

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.schemas.tasks import TaskRead
    from app.schemas.watcher import WatcherConfigRead

CONNECTED_EVENT = "connected"
TASKS_EVENT = "tasks"
WATCHER_EVENT = "watcher"
HEARTBEAT_COMMENT = "heartbeat"
# Plain `\n` framing: `event: <name>\ndata: <json>\n\n`.
EVENT_SEPARATOR = "\n"

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    # Disable proxy buffering (nginx) so heartbeats and pushes are not delayed.
    "X-Accel-Buffering": "no",
}


def _compact_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"))


def connected_event() -> ServerSentEvent:
    return ServerSentEvent(
        data=_compact_json({"status": "connected"}),
        event=CONNECTED_EVENT,
        sep=EVENT_SEPARATOR,
    )


def tasks_event(tasks: Sequence[TaskRead]) -> ServerSentEvent:
    return ServerSentEvent(
        data=_compact_json([task.model_dump(mode="json") for task in tasks]),
        event=TASKS_EVENT,
        sep=EVENT_SEPARATOR,
    )


def watcher_event(config: WatcherConfigRead) -> ServerSentEvent:
    return ServerSentEvent(
        data=_compact_json(config.model_dump(mode="json")),
        event=WATCHER_EVENT,
        sep=EVENT_SEPARATOR,
    )


def heartbeat_event() -> ServerSentEvent:
    """Comment-only frame (`: heartbeat`) that keeps intermediaries from idling out."""
    return ServerSentEvent(comment=HEARTBEAT_COMMENT, sep=EVENT_SEPARATOR)
