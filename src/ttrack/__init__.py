"""ttrack - single-user time tracking for named tasks."""

__version__ = "1.0.0"

from .models import Task, TaskStatus, DEFAULT_PATH, HEADER
from .storage import TaskStore, StorageUnavailable
from .core import TaskController, InvalidTaskName, format_elapsed

__all__ = [
    "Task",
    "TaskStatus",
    "DEFAULT_PATH",
    "HEADER",
    "TaskStore",
    "StorageUnavailable",
    "TaskController",
    "InvalidTaskName",
    "format_elapsed",
]
