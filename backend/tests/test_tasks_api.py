# ruff: noqa: INP001
"""Integration tests for task, comment, activity, and watcher APIs."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import APIRouter, FastAPI
from fastapi_pagination import add_pagination
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.tasks import router as tasks_router
from app.api.watcher import router as watcher_router
from app.core.config import settings
from app.db.session import get_session
from app.models.task_activity import TaskActivity
from app.models.task_comments import TaskComment


async def _make_engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    return engine


def _build_test_app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    app = FastAPI()
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(tasks_router)
    api_v1.include_router(watcher_router)
    app.include_router(api_v1)
    add_pagination(app)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    return app


@pytest_asyncio.fixture
async def session_maker() -> async_sessionmaker[AsyncSession]:
    engine = await _make_engine()
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncClient:
    app = _build_test_app(session_maker)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as http:
        yield http


def _ts(value: object) -> datetime:
    return datetime.fromisoformat(str(value))


async def _create(client: AsyncClient, **fields: object) -> dict[str, object]:
    payload = {"title": "Write release notes", **fields}
    response = await client.post("/api/v1/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_task_applies_defaults(client: AsyncClient) -> None:
    body = await _create(client)

    assert body["status"] == "todo"
    assert body["priority"] == "medium"
    assert body["assignee"] == settings.default_assignee
    assert body["worked_by"] == []
    assert body["progress"] == 0


@pytest.mark.asyncio
async def test_create_task_rejects_blank_title(client: AsyncClient) -> None:
    response = await client.post("/api/v1/tasks", json={"title": "   "})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_tasks_newest_first_with_status_filter(client: AsyncClient) -> None:
    first = await _create(client, title="first")
    second = await _create(client, title="second", status="in_progress")

    response = await client.get("/api/v1/tasks")
    assert response.status_code == 200
    assert [task["id"] for task in response.json()] == [second["id"], first["id"]]

    filtered = await client.get("/api/v1/tasks", params={"status": "in_progress,done"})
    assert [task["id"] for task in filtered.json()] == [second["id"]]


@pytest.mark.asyncio
async def test_get_unknown_task_returns_404(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/tasks/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found"


@pytest.mark.asyncio
async def test_moving_to_review_reassigns_to_reviewer(client: AsyncClient) -> None:
    task = await _create(client, assignee="builder")

    response = await client.patch(
        f"/api/v1/tasks/{task['id']}",
        json={"status": "in_review", "actor": "builder"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_review"
    assert body["assignee"] == settings.review_assignee
    assert body["worked_by"] == [settings.review_assignee]


@pytest.mark.asyncio
async def test_reassignment_accumulates_worked_by(client: AsyncClient) -> None:
    task = await _create(client)

    await client.patch(f"/api/v1/tasks/{task['id']}", json={"assignee": "alice"})
    await client.patch(f"/api/v1/tasks/{task['id']}", json={"assignee": "bob"})
    response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"assignee": "alice"})

    assert response.json()["worked_by"] == ["alice", "bob"]


@pytest.mark.asyncio
async def test_update_advances_updated_at(client: AsyncClient) -> None:
    task = await _create(client)

    response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"progress": 40})

    body = response.json()
    assert body["progress"] == 40
    assert _ts(body["updated_at"]) > _ts(task["updated_at"])


@pytest.mark.asyncio
async def test_noop_update_keeps_updated_at(client: AsyncClient) -> None:
    task = await _create(client, priority="high")

    response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"priority": "high"})

    assert response.json()["updated_at"] == task["updated_at"]


@pytest.mark.asyncio
async def test_unblocking_clears_reason(client: AsyncClient) -> None:
    task = await _create(client, is_blocked=True, blocked_reason="waiting on creds")

    response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"is_blocked": False})

    body = response.json()
    assert body["is_blocked"] is False
    assert body["blocked_reason"] is None


@pytest.mark.asyncio
async def test_progress_outside_range_is_rejected_not_clamped(client: AsyncClient) -> None:
    task = await _create(client, progress=30)

    for value in (-1, 101):
        response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"progress": value})
        assert response.status_code == 422

    current = await client.get(f"/api/v1/tasks/{task['id']}")
    assert current.json()["progress"] == 30


@pytest.mark.asyncio
async def test_update_rejects_unknown_status(client: AsyncClient) -> None:
    task = await _create(client)

    response = await client.patch(f"/api/v1/tasks/{task['id']}", json={"status": "archived"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_comments_and_activity_are_recorded(client: AsyncClient) -> None:
    task = await _create(client)
    await client.patch(
        f"/api/v1/tasks/{task['id']}",
        json={"status": "in_progress", "actor": "agent-7"},
    )

    created = await client.post(
        f"/api/v1/tasks/{task['id']}/comments",
        json={"author": "agent-7", "content": "Picked this up."},
    )
    assert created.status_code == 201
    assert created.json()["content"] == "Picked this up."

    comments = await client.get(f"/api/v1/tasks/{task['id']}/comments")
    assert [comment["author"] for comment in comments.json()] == ["agent-7"]

    activity = await client.get(f"/api/v1/tasks/{task['id']}/activity")
    assert activity.status_code == 200
    page = activity.json()
    actions = {item["action"] for item in page["items"]}
    assert {"created", "status_changed", "commented"} <= actions
    status_change = next(item for item in page["items"] if item["action"] == "status_changed")
    assert status_change["field"] == "status"
    assert status_change["old_value"] == "todo"
    assert status_change["new_value"] == "in_progress"
    assert status_change["actor"] == "agent-7"


@pytest.mark.asyncio
async def test_delete_task_removes_comments_keeps_activity(
    client: AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    task = await _create(client)
    await client.post(
        f"/api/v1/tasks/{task['id']}/comments",
        json={"author": "reviewer", "content": "LGTM"},
    )

    response = await client.delete(f"/api/v1/tasks/{task['id']}")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert (await client.get(f"/api/v1/tasks/{task['id']}")).status_code == 404

    async with session_maker() as session:
        comments = (await session.exec(select(TaskComment))).all()
        activity = (
            await session.exec(
                select(TaskActivity).where(col(TaskActivity.action) == "deleted"),
            )
        ).all()
    assert comments == []
    assert len(activity) == 1


@pytest.mark.asyncio
async def test_watcher_singleton_defaults(client: AsyncClient) -> None:
    response = await client.get("/api/v1/watcher")

    assert response.status_code == 200
    body = response.json()
    assert body["is_running"] is False
    assert body["active_task_ids"] == []
    assert body["current_task_id"] is None


@pytest.mark.asyncio
async def test_watcher_actions(client: AsyncClient) -> None:
    task_id = str(uuid4())
    initial = (await client.get("/api/v1/watcher")).json()

    toggled = (await client.post("/api/v1/watcher", json={"action": "toggle"})).json()
    assert toggled["is_running"] is True
    assert _ts(toggled["updated_at"]) > _ts(initial["updated_at"])

    started = await client.post(
        "/api/v1/watcher",
        json={"action": "start_task", "task_id": task_id},
    )
    assert started.json()["active_task_ids"] == [task_id]

    again = await client.post(
        "/api/v1/watcher",
        json={"action": "start_task", "task_id": task_id},
    )
    assert again.json()["active_task_ids"] == [task_id]

    beat = await client.post(
        "/api/v1/watcher",
        json={"action": "heartbeat", "current_task_id": task_id},
    )
    assert beat.json()["current_task_id"] == task_id
    assert beat.json()["last_run"] is not None

    ended = await client.post(
        "/api/v1/watcher",
        json={"action": "end_task", "task_id": task_id},
    )
    assert ended.json()["active_task_ids"] == []


@pytest.mark.asyncio
async def test_watcher_task_actions_require_task_id(client: AsyncClient) -> None:
    response = await client.post("/api/v1/watcher", json={"action": "start_task"})

    assert response.status_code == 422
