"""Start/stop rules for tracked tasks.

Each operation is a fresh load -> mutate -> save round trip against the
store; nothing is cached between calls.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from .models import NOT_ENDED, TICKS_PER_SECOND, Task, TaskStatus
from .storage import TaskStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class InvalidTaskName(ValueError):
    """Task name cannot be stored in the record file."""


def validate_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidTaskName("task name must not be empty")
    if "\n" in name or "\r" in name:
        raise InvalidTaskName("task name must not contain line breaks")


def seconds_between(start: int, end: int) -> int:
    """Whole seconds from start to end ticks, never negative."""
    return max(0, (end - start) // TICKS_PER_SECOND)


def date_of(ticks: int) -> str:
    """Local calendar date (YYYY-MM-DD) of a tick value."""
    return datetime.fromtimestamp(ticks / TICKS_PER_SECOND).strftime("%Y-%m-%d")


def total_elapsed(task: Task, now: int) -> int:
    """Accumulated seconds plus the open interval of a running task."""
    if task.running:
        return task.elapsed_seconds + seconds_between(task.start_time, now)
    return task.elapsed_seconds


def format_elapsed(total: int) -> str:
    """HH:MM:SS; hours are not wrapped into days."""
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def find_running(tasks: List[Task]) -> Optional[Task]:
    for t in tasks:
        if t.running:
            return t
    return None


def find_task(tasks: List[Task], name: str) -> Optional[Task]:
    """Exact, case-sensitive name match."""
    for t in tasks:
        if t.name == name:
            return t
    return None


class TaskController:
    """Applies start/stop intents to the stored task set."""

    def __init__(self, store: TaskStore, clock: Clock = time.time_ns) -> None:
        self.store = store
        self.clock = clock

    def start(self, name: str) -> bool:
        """Start or resume a task.

        Returns False, writing nothing, while any task is running.
        """
        validate_name(name)
        tasks = self.store.load()

        current = find_running(tasks)
        if current is not None:
            logger.info("start %r rejected: %r is running", name, current.name)
            return False

        now = self.clock()
        task = find_task(tasks, name)
        if task is not None:
            if task.running:
                return False
            task.start_time = now
            task.end_time = NOT_ENDED
            task.running = True
            task.date = date_of(now)
        else:
            tasks.append(
                Task(
                    name=name,
                    start_time=now,
                    elapsed_seconds=0,
                    running=True,
                    date=date_of(now),
                )
            )

        self.store.save(tasks)
        logger.info("started %r", name)
        return True

    def stop(self, name: str) -> None:
        """Stop the named task if it is running; otherwise do nothing."""
        tasks = self.store.load()
        task = next((t for t in tasks if t.name == name and t.running), None)
        if task is None:
            logger.debug("stop %r: not running", name)
            return

        task.running = False
        task.end_time = self.clock()
        task.elapsed_seconds += seconds_between(task.start_time, task.end_time)
        self.store.save(tasks)
        logger.info("stopped %r at %ds", name, task.elapsed_seconds)

    def status(self) -> List[TaskStatus]:
        """All tasks in file order, with running time computed as of now."""
        now = self.clock()
        return [
            TaskStatus(
                name=t.name,
                running=t.running,
                date=t.date,
                elapsed_seconds=total_elapsed(t, now),
            )
            for t in self.store.load()
        ]

    def running(self) -> Optional[TaskStatus]:
        """Status row of the running task, or None."""
        for row in self.status():
            if row.running:
                return row
        return None

    def clear_all(self) -> None:
        """Drop every task. Callers confirm first if they want to."""
        self.store.clear()
        logger.info("cleared all tasks in %s", self.store.path)
