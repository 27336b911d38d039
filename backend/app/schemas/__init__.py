"""Public schema exports shared across API route modules."""

from app.schemas.activity import TaskActivityRead
from app.schemas.comments import TaskCommentCreate, TaskCommentRead
from app.schemas.common import OkResponse
from app.schemas.health import HealthStatusResponse
from app.schemas.reports import TaskReport
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from app.schemas.watcher import WatcherAction, WatcherConfigRead

__all__ = [
    "HealthStatusResponse",
    "OkResponse",
    "TaskActivityRead",
    "TaskCommentCreate",
    "TaskCommentRead",
    "TaskCreate",
    "TaskRead",
    "TaskReport",
    "TaskUpdate",
    "WatcherAction",
    "WatcherConfigRead",
]
