# ruff: noqa: INP001
"""Pytest configuration shared across backend tests."""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Deterministic defaults for import-time settings initialization, regardless of
# shell env: no file database, no outbound notifications, no startup migrations.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["NOTIFY_URL"] = ""
os.environ["DB_AUTO_MIGRATE"] = "false"
os.environ.setdefault("LOG_LEVEL", "INFO")
