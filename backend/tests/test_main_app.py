# ruff: noqa: INP001
"""Smoke tests for application wiring."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.error_handling import REQUEST_ID_HEADER
from app.main import app
from app.schemas.comments import TaskCommentCreate
from app.schemas.common import OkResponse


def test_health_probes_respond() -> None:
    client = TestClient(app)

    for path in ("/health", "/healthz", "/readyz"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert response.headers.get(REQUEST_ID_HEADER)


def test_api_routes_are_mounted() -> None:
    paths = {route.path for route in app.routes}

    assert "/api/v1/events" in paths
    assert "/api/v1/tasks" in paths
    assert "/api/v1/tasks/{task_id}/activity" in paths
    assert "/api/v1/watcher" in paths
    assert "/api/v1/reports" in paths


def test_openapi_tags_cover_routers() -> None:
    schema = TestClient(app).get("/openapi.json").json()

    assert {tag["name"] for tag in schema["tags"]} == {
        "health",
        "tasks",
        "watcher",
        "reports",
        "events",
    }


def test_request_schemas_publish_field_examples() -> None:
    comment = TaskCommentCreate.model_json_schema()["properties"]
    ok = OkResponse.model_json_schema()["properties"]

    assert comment["author"]["examples"] == ["build-agent"]
    assert ok["ok"]["examples"] == [True]
    assert OkResponse().ok is True
