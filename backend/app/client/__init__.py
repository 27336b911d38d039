"""Python client for the task board: REST calls, live stream, and view models."""

from app.client.api import TaskApiClient
from app.client.board import BoardViewModel, DragInProgressError, TaskDetailView
from app.client.reconcile import apply_drag_override, merge_tasks, tasks_equal
from app.client.session import ConnectionState, TaskStreamSession, reconnect_delay

__all__ = [
    "BoardViewModel",
    "ConnectionState",
    "DragInProgressError",
    "TaskApiClient",
    "TaskDetailView",
    "TaskStreamSession",
    "apply_drag_override",
    "merge_tasks",
    "reconnect_delay",
    "tasks_equal",
]
