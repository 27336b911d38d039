"""Best-effort push notifications for task lifecycle events (ntfy-compatible)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.tasks import TaskRead

logger = get_logger(__name__)

TaskEvent = Literal[
    "task.created",
    "task.updated",
    "task.completed",
    "task.deleted",
    "task.commented",
]
_EVENT_LABELS: dict[str, str] = {
    "task.created": "New task",
    "task.updated": "Updated",
    "task.completed": "Completed",
    "task.deleted": "Deleted",
    "task.commented": "New comment",
}
_PRIORITY_LEVELS = {"high": "5", "medium": "3", "low": "2"}


def _header_safe(value: str) -> str:
    # HTTP header values must stay ASCII; the body carries the full text.
    return value.encode("ascii", errors="replace").decode("ascii")


@dataclass(frozen=True)
class TaskNotification:
    """One outbound notification about a task."""

    event: TaskEvent
    task: TaskRead
    comment_author: str | None = None
    comment_content: str | None = None

    @property
    def title(self) -> str:
        return f"{_EVENT_LABELS[self.event]}: {self.task.title}"

    def body(self) -> str:
        if self.event == "task.commented":
            return f"{self.comment_author}: {self.comment_content}"
        lines = [
            self.task.description or "No description",
            "",
            f"Priority: {self.task.priority}",
            f"Assignee: {self.task.assignee}",
            f"Status: {self.task.status}",
        ]
        if self.task.due_date is not None:
            lines.append(f"Due: {self.task.due_date.isoformat()}")
        return "\n".join(lines)

    def headers(self) -> dict[str, str]:
        return {
            "Title": _header_safe(self.title),
            "Priority": _PRIORITY_LEVELS.get(self.task.priority, "3"),
            "Tags": _header_safe(f"task,{self.task.priority},{self.task.assignee.lower()}"),
        }


async def send_task_notification(
    notification: TaskNotification,
    *,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Deliver a notification; failures are logged and reported as ``False``."""
    if not settings.notify_url:
        return False
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=settings.notify_timeout_seconds)
    try:
        response = await http.post(
            settings.notify_url,
            headers=notification.headers(),
            content=notification.body().encode("utf-8"),
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning(
            "notifications.delivery_failed",
            extra={
                "event": notification.event,
                "task_id": str(notification.task.id),
                "error": str(exc),
            },
        )
        return False
    finally:
        if owns_client:
            await http.aclose()
    logger.info(
        "notifications.delivered",
        extra={"event": notification.event, "task_id": str(notification.task.id)},
    )
    return True
