# ruff: noqa: INP001
"""Tests for database URL handling and SQLite connection setup."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from app.db.session import _create_engine, _normalize_database_url, _sqlite_file


def test_normalize_database_url_picks_async_drivers() -> None:
    assert (
        _normalize_database_url("postgresql://u:p@db/board")
        == "postgresql+psycopg://u:p@db/board"
    )
    assert _normalize_database_url("sqlite:///board.db") == "sqlite+aiosqlite:///board.db"
    assert _normalize_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


def test_sqlite_file_ignores_memory_and_other_backends() -> None:
    assert _sqlite_file("sqlite+aiosqlite:///:memory:") is None
    assert _sqlite_file("postgresql+psycopg://u@db/board") is None
    assert _sqlite_file("sqlite+aiosqlite:////tmp/board/tasks.db") == Path("/tmp/board/tasks.db")


@pytest.mark.asyncio
async def test_sqlite_engine_creates_directory_and_enables_pragmas(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "board.db"
    engine = _create_engine(f"sqlite:///{db_path}")
    try:
        assert db_path.parent.is_dir()
        async with engine.connect() as conn:
            foreign_keys = (await conn.execute(text("PRAGMA foreign_keys"))).scalar_one()
            journal_mode = (await conn.execute(text("PRAGMA journal_mode"))).scalar_one()
    finally:
        await engine.dispose()

    assert foreign_keys == 1
    assert journal_mode == "wal"
