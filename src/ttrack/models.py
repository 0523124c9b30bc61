"""Data models and constants for ttrack."""

import os
from dataclasses import dataclass

DEFAULT_DIR = os.path.expanduser("~/.ttrack")
DEFAULT_PATH = os.path.join(DEFAULT_DIR, "timetracker.csv")

HEADER = "task,start_time,end_time,elapsed_time,date"
FIELDS = HEADER.split(",")

# end_time value written for a task that is still running
NOT_ENDED = 0

TICKS_PER_SECOND = 1_000_000_000


@dataclass
class Task:
    """A tracked task as stored in the record file.

    Times are integer ticks (nanoseconds since the Unix epoch).
    """

    name: str
    start_time: int = 0
    end_time: int = NOT_ENDED
    elapsed_seconds: int = 0
    running: bool = False
    date: str = ""


@dataclass(frozen=True)
class TaskStatus:
    """Read-only status row: elapsed_seconds includes the open interval."""

    name: str
    running: bool
    date: str
    elapsed_seconds: int
