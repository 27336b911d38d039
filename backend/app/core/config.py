"""Application settings and environment configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = BACKEND_ROOT / ".env"
DEFAULT_DATABASE_URL = f"sqlite+aiosqlite:///{BACKEND_ROOT / 'taskboard.db'}"


class Settings(BaseSettings):
    """Typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        # Load `backend/.env` regardless of current working directory.
        env_file=[DEFAULT_ENV_FILE, ".env"],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"
    database_url: str = DEFAULT_DATABASE_URL

    cors_origins: str = ""
    base_url: str = ""

    # Database lifecycle
    db_auto_migrate: bool = False

    # Task workflow
    default_assignee: str = "unassigned"
    review_assignee: str = "reviewer"

    # Push notifications (ntfy-compatible topic URL); empty disables delivery.
    notify_url: str = ""
    notify_timeout_seconds: float = Field(default=5.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_use_utc: bool = False
    request_log_slow_ms: int = Field(default=1000, ge=0)
    request_log_include_health: bool = False

    @model_validator(mode="after")
    def _defaults(self) -> Self:
        if self.log_format not in {"text", "json"}:
            raise ValueError("LOG_FORMAT must be either 'text' or 'json'.")
        if not self.review_assignee.strip():
            raise ValueError("REVIEW_ASSIGNEE must be non-empty.")
        # In dev, default to applying Alembic migrations at startup to avoid
        # schema drift (e.g. missing newly-added columns).
        if "db_auto_migrate" not in self.model_fields_set and self.environment == "dev":
            self.db_auto_migrate = True
        return self


settings = Settings()
