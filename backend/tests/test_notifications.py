# ruff: noqa: INP001
"""Tests for best-effort task notifications."""

from __future__ import annotations

from datetime import date, datetime
from uuid import uuid4

import httpx
import pytest

from app.core.config import settings
from app.schemas.tasks import TaskRead
from app.services.notifications import TaskNotification, send_task_notification


def _task(**overrides: object) -> TaskRead:
    fields: dict[str, object] = {
        "id": uuid4(),
        "title": "Rotate deploy keys",
        "assignee": "Ops-Agent",
        "priority": "high",
        "status": "in_progress",
        "created_at": datetime(2026, 5, 1, 10, 0, 0),
        "updated_at": datetime(2026, 5, 1, 10, 0, 0),
    }
    fields.update(overrides)
    return TaskRead(**fields)


def test_notification_headers_and_body() -> None:
    notification = TaskNotification(
        event="task.completed",
        task=_task(description="Quarterly rotation", due_date=date(2026, 5, 3)),
    )

    headers = notification.headers()

    assert headers["Title"] == "Completed: Rotate deploy keys"
    assert headers["Priority"] == "5"
    assert headers["Tags"] == "task,high,ops-agent"
    body = notification.body()
    assert body.startswith("Quarterly rotation")
    assert "Assignee: Ops-Agent" in body
    assert "Due: 2026-05-03" in body


def test_comment_notification_body_and_ascii_headers() -> None:
    notification = TaskNotification(
        event="task.commented",
        task=_task(title="Résumé parser"),
        comment_author="reviewer",
        comment_content="Looks good",
    )

    assert notification.body() == "reviewer: Looks good"
    assert notification.headers()["Title"].isascii()


@pytest.mark.asyncio
async def test_send_is_disabled_without_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "notify_url", "")

    sent = await send_task_notification(TaskNotification(event="task.created", task=_task()))

    assert sent is False


@pytest.mark.asyncio
async def test_send_posts_to_topic(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "notify_url", "https://ntfy.test/board")
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        sent = await send_task_notification(
            TaskNotification(event="task.created", task=_task()),
            client=client,
        )

    assert sent is True
    assert len(requests) == 1
    assert str(requests[0].url) == "https://ntfy.test/board"
    assert requests[0].headers["Title"] == "New task: Rotate deploy keys"


@pytest.mark.asyncio
async def test_send_failure_is_logged_not_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "notify_url", "https://ntfy.test/board")

    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        sent = await send_task_notification(
            TaskNotification(event="task.deleted", task=_task()),
            client=client,
        )

    assert sent is False
