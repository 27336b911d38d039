# ruff: noqa: INP001
"""Tests for the REST client used as the fallback read path and drag persister."""

from __future__ import annotations

import json
from datetime import datetime
from uuid import uuid4

import httpx
import pytest

from app.client.api import TaskApiClient
from app.client.board import BoardViewModel
from app.schemas.tasks import TaskRead

BASE_TIME = datetime(2026, 6, 1, 9, 0, 0)


def _task(**overrides: object) -> TaskRead:
    fields: dict[str, object] = {
        "id": uuid4(),
        "title": "Review migration",
        "assignee": "unassigned",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    fields.update(overrides)
    return TaskRead(**fields)


@pytest.mark.asyncio
async def test_list_tasks_sends_status_filter() -> None:
    task = _task(status="testing")
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[task.model_dump(mode="json")])

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as http:
        api = TaskApiClient("http://board.test/", client=http)
        tasks = await api.list_tasks(["testing", "done"])

    assert tasks == [task]
    assert seen[0].url.path == "/api/v1/tasks"
    assert seen[0].url.params["status"] == "testing,done"
    assert api.events_url == "http://board.test/api/v1/events"


@pytest.mark.asyncio
async def test_update_status_persists_a_board_drag() -> None:
    task = _task(status="todo")
    bodies: list[dict[str, object]] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.path == f"/api/v1/tasks/{task.id}"
        body = json.loads(request.content)
        bodies.append(body)
        updated = task.model_copy(update={"status": body["status"]})
        return httpx.Response(200, json=updated.model_dump(mode="json"))

    board = BoardViewModel([task])
    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as http:
        api = TaskApiClient("http://board.test", client=http, actor="board-ui")
        board.start_drag(task.id)
        board.drag_over("in_progress")
        result = await board.end_drag(api.update_status)

    assert bodies == [{"status": "in_progress", "actor": "board-ui"}]
    assert result is not None and result.status == "in_progress"


@pytest.mark.asyncio
async def test_http_errors_propagate() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Task not found"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as http:
        api = TaskApiClient("http://board.test", client=http)
        with pytest.raises(httpx.HTTPStatusError):
            await api.update_status(uuid4(), "done")
