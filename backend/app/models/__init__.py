"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from app.models.task_activity import TaskActivity
from app.models.task_comments import TaskComment
from app.models.tasks import Task
from app.models.watcher_config import WatcherConfig

__all__ = [
    "Task",
    "TaskActivity",
    "TaskComment",
    "WatcherConfig",
]
