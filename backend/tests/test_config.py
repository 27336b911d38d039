# ruff: noqa: INP001
"""Tests for settings validation and environment-driven defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_dev_defaults_enable_auto_migrate(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DB_AUTO_MIGRATE", raising=False)

    settings = Settings(_env_file=None, environment="dev")

    assert settings.db_auto_migrate is True


def test_explicit_auto_migrate_is_respected() -> None:
    settings = Settings(_env_file=None, environment="dev", db_auto_migrate=False)

    assert settings.db_auto_migrate is False


def test_non_dev_does_not_auto_migrate(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DB_AUTO_MIGRATE", raising=False)

    settings = Settings(_env_file=None, environment="prod")

    assert settings.db_auto_migrate is False


def test_rejects_unknown_log_format() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_format="xml")


def test_rejects_blank_review_assignee() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, review_assignee="  ")


def test_reads_workflow_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REVIEW_ASSIGNEE", "qa-bot")
    monkeypatch.setenv("DEFAULT_ASSIGNEE", "triage")

    settings = Settings(_env_file=None)

    assert settings.review_assignee == "qa-bot"
    assert settings.default_assignee == "triage"
