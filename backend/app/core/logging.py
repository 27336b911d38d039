"""Logging configuration with text and JSON line formatters."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

from app.core.config import settings

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

# Attributes present on every LogRecord; anything else came from `extra={}`.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
    | {"message", "asctime"},
)
_configured = False


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends `extra` context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _record_extras(record)
        if not extras:
            return base
        context = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{base} {context}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with `extra` context flattened to top-level keys."""

    def __init__(self, *, use_utc: bool) -> None:
        super().__init__()
        self._use_utc = use_utc

    def format(self, record: logging.LogRecord) -> str:
        tz = UTC if self._use_utc else None
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=tz).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.log_format == "json":
        return JsonFormatter(use_utc=settings.log_use_utc)
    formatter = TextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    if settings.log_use_utc:
        formatter.converter = time.gmtime
    return formatter


def configure_logging() -> None:
    """Install the root handler once, using the configured level and format."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    root = logging.getLogger()
    root.handlers = [handler]
    level_name = settings.log_level.upper()
    root.setLevel(TRACE_LEVEL if level_name == "TRACE" else level_name)
    # Uvicorn's access log duplicates the request-context middleware output.
    logging.getLogger("uvicorn.access").propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a named application logger."""
    return logging.getLogger(name)
