"""Fingerprint-based change detection over the task list and watcher config.

The task fingerprint covers only ``(id, status, updated_at)`` per task, in
store order. ``updated_at`` advances on every mutation, so the triple catches
every real change without hashing free-text fields. The fingerprint only gates
*whether* a snapshot is sent; the snapshot itself is always the full list.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.core.logging import TRACE_LEVEL, get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.schemas.tasks import TaskRead
    from app.schemas.watcher import WatcherConfigRead
    from app.services.state_store import StateStore

logger = get_logger(__name__)


def tasks_fingerprint(tasks: Sequence[TaskRead]) -> str:
    """Stable serialization of the ordered ``(id, status, updated_at)`` triples."""
    triples = [[str(task.id), task.status, task.updated_at.isoformat()] for task in tasks]
    return json.dumps(triples, separators=(",", ":"))


def watcher_fingerprint(config: WatcherConfigRead) -> str:
    """Full serialized form of the watcher config."""
    return json.dumps(config.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))


@dataclass
class DetectedChanges:
    """Snapshots to broadcast for one tick; ``None`` means unchanged."""

    tasks: list[TaskRead] | None = None
    watcher: WatcherConfigRead | None = None

    @property
    def empty(self) -> bool:
        return self.tasks is None and self.watcher is None


@dataclass
class ChangeDetector:
    """Last-sent fingerprints for one stream connection.

    A fresh detector has no fingerprints, so its first observation always
    reports both snapshots (the cold-start sync). Instances must never be
    shared between connections.
    """

    last_tasks_fingerprint: str | None = None
    last_watcher_fingerprint: str | None = None

    def observe(
        self,
        tasks: Sequence[TaskRead],
        watcher: WatcherConfigRead,
    ) -> DetectedChanges:
        """Compare against the previous observation and record the new fingerprints."""
        changes = DetectedChanges()

        current_tasks = tasks_fingerprint(tasks)
        if current_tasks != self.last_tasks_fingerprint:
            changes.tasks = list(tasks)
            self.last_tasks_fingerprint = current_tasks

        current_watcher = watcher_fingerprint(watcher)
        if current_watcher != self.last_watcher_fingerprint:
            changes.watcher = watcher
            self.last_watcher_fingerprint = current_watcher

        return changes

    async def poll(self, store: StateStore) -> DetectedChanges:
        """Fetch tasks and watcher config concurrently, then diff fingerprints.

        Store errors propagate; the caller decides whether to skip the tick.
        """
        tasks, watcher = await asyncio.gather(
            store.get_all_tasks(),
            store.get_watcher_config(),
        )
        changes = self.observe(tasks, watcher)
        logger.log(
            TRACE_LEVEL,
            "stream.detector.polled",
            extra={
                "task_count": len(tasks),
                "tasks_changed": changes.tasks is not None,
                "watcher_changed": changes.watcher is not None,
            },
        )
        return changes
