"""Merge pushed task snapshots into local state without needless churn.

Equality deliberately ignores ``created_at``/``updated_at``: they move on every
write but are not rendered on their own, so a timestamp-only bump must leave the
local object (and therefore anything memoized on its identity) untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from app.schemas.tasks import TaskRead, TaskStatus

VISIBLE_TASK_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "description",
    "status",
    "priority",
    "assignee",
    "due_date",
    "estimated_hours",
    "time_spent",
    "progress",
    "is_blocked",
    "blocked_reason",
    "project_id",
    "agent_context",
)


def tasks_equal(left: TaskRead, right: TaskRead) -> bool:
    """True when every user-visible field matches."""
    if left is right:
        return True
    return all(getattr(left, name) == getattr(right, name) for name in VISIBLE_TASK_FIELDS)


def merge_tasks(current: list[TaskRead], incoming: list[TaskRead]) -> list[TaskRead]:
    """Reconcile ``incoming`` against ``current``.

    - Different lengths: something was added or removed, so ``incoming`` is
      returned as-is.
    - Otherwise each incoming task that is field-equal to the current task with
      the same id is replaced by that current object.
    - If no task changed at all, ``current`` itself is returned.
    """
    if len(current) != len(incoming):
        return incoming

    current_by_id = {task.id: task for task in current}
    merged: list[TaskRead] = []
    changed = False
    for task in incoming:
        existing = current_by_id.get(task.id)
        if existing is not None and tasks_equal(existing, task):
            merged.append(existing)
            continue
        changed = True
        merged.append(task)
    return merged if changed else current


def apply_drag_override(
    incoming: Sequence[TaskRead],
    task_id: UUID | None,
    local_status: TaskStatus | None,
) -> list[TaskRead]:
    """Pin the dragged task's status to its local, optimistic value.

    Only the copy in the returned list is changed; the pushed objects are not
    mutated.
    """
    if task_id is None or local_status is None:
        return list(incoming)
    result: list[TaskRead] = []
    for task in incoming:
        if task.id == task_id and task.status != local_status:
            task = task.model_copy(update={"status": local_status})
        result.append(task)
    return result
