"""Client-side view models fed by the event stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.client.reconcile import apply_drag_override, merge_tasks, tasks_equal
from app.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from uuid import UUID

    from app.schemas.tasks import TaskRead, TaskStatus
    from app.schemas.watcher import WatcherConfigRead

    PersistStatus = Callable[[UUID, TaskStatus], Awaitable[object]]

logger = get_logger(__name__)


class DragInProgressError(RuntimeError):
    """Raised when a drag starts while another one is still active."""


@dataclass
class ActiveDrag:
    task_id: UUID
    original_status: TaskStatus
    status: TaskStatus


class BoardViewModel:
    """Local mirror of the board: task list, watcher state, and the active drag.

    ``tasks`` is only reassigned when something visible changed, so callers can
    compare list identity (or ``revision``) to decide whether to re-render.
    While a drag is active its optimistic status wins over every pushed
    snapshot; one drag is tracked at a time.
    """

    def __init__(self, tasks: list[TaskRead] | None = None) -> None:
        self.tasks: list[TaskRead] = list(tasks or [])
        self.watcher: WatcherConfigRead | None = None
        self.revision = 0
        self._drag: ActiveDrag | None = None

    @property
    def active_task_id(self) -> UUID | None:
        return self._drag.task_id if self._drag is not None else None

    def find(self, task_id: UUID) -> TaskRead | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    def _set_tasks(self, tasks: list[TaskRead]) -> bool:
        if tasks is self.tasks:
            return False
        self.tasks = tasks
        self.revision += 1
        return True

    def apply_tasks(self, incoming: list[TaskRead]) -> bool:
        """Merge a pushed snapshot; returns whether the local list changed."""
        drag = self._drag
        if drag is not None:
            incoming = apply_drag_override(incoming, drag.task_id, drag.status)
        return self._set_tasks(merge_tasks(self.tasks, incoming))

    def apply_watcher(self, config: WatcherConfigRead) -> None:
        self.watcher = config

    def _with_status(self, task_id: UUID, status: TaskStatus) -> None:
        self._set_tasks(
            [
                task.model_copy(update={"status": status}) if task.id == task_id else task
                for task in self.tasks
            ],
        )

    def start_drag(self, task_id: UUID) -> None:
        if self._drag is not None:
            raise DragInProgressError(f"Task {self._drag.task_id} is already being dragged")
        task = self.find(task_id)
        if task is None:
            return
        self._drag = ActiveDrag(task_id=task_id, original_status=task.status, status=task.status)

    def drag_over(self, status: TaskStatus) -> None:
        """Move the dragged task into ``status`` locally (optimistic)."""
        drag = self._drag
        if drag is None or drag.status == status:
            return
        drag.status = status
        self._with_status(drag.task_id, status)

    def cancel_drag(self) -> None:
        drag = self._drag
        if drag is None:
            return
        self._drag = None
        if drag.status != drag.original_status:
            self._with_status(drag.task_id, drag.original_status)

    async def end_drag(self, persist: PersistStatus) -> TaskRead | None:
        """Finish the drag and persist the new status if it moved.

        The override stays in force until the update call returns so a push
        racing the write cannot flash the card back to its old column.
        """
        drag = self._drag
        if drag is None:
            return None
        try:
            if drag.status != drag.original_status:
                await persist(drag.task_id, drag.status)
        except Exception:
            logger.exception(
                "board.drag.persist_failed",
                extra={"task_id": str(drag.task_id), "status": drag.status},
            )
        finally:
            if self._drag is drag:
                self._drag = None
        return self.find(drag.task_id)


class TaskDetailView:
    """A single task followed by id, e.g. an inspector panel.

    Pushed copies that are field-equal to the held one are ignored, so the view
    does not churn on unrelated poll ticks.
    """

    def __init__(self, task_id: UUID, task: TaskRead | None = None) -> None:
        self.task_id = task_id
        self.task = task

    def apply(self, task: TaskRead | None) -> bool:
        if task is None:
            changed = self.task is not None
            self.task = None
            return changed
        if self.task is not None and tasks_equal(self.task, task):
            return False
        self.task = task
        return True

    def apply_tasks(self, tasks: list[TaskRead]) -> bool:
        return self.apply(next((task for task in tasks if task.id == self.task_id), None))
