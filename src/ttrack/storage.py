"""File I/O for the ttrack record file."""

import logging
import os
import tempfile
from typing import List, Optional

from .models import HEADER, NOT_ENDED, Task

logger = logging.getLogger(__name__)


class StorageUnavailable(OSError):
    """The record file cannot be created, read or written."""


def _parse_int(raw: str, field: str, lineno: int) -> int:
    raw = raw.strip()
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning("line %d: bad %s value %r, using 0", lineno, field, raw)
        return 0


def _decode(raw: bytes, lineno: int) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("line %d: not valid UTF-8, undecodable bytes replaced", lineno)
        return raw.decode("utf-8", errors="replace")


def parse_line(line: str, lineno: int = 0) -> Optional[Task]:
    """Parse one record line, or return None for a blank line.

    The four trailing fields never contain commas, so the line is split from
    the right and the name keeps any commas of its own.
    """
    line = line.rstrip("\r\n")
    if not line.strip():
        return None

    parts = line.rsplit(",", 4)
    if len(parts) < 5:
        parts = line.split(",")
        parts += [""] * (5 - len(parts))
    name, start_str, end_str, elapsed_str, date_str = parts

    end_time = _parse_int(end_str, "end_time", lineno)
    # running status lives in the end-time sentinel
    running = end_time == NOT_ENDED
    return Task(
        name=name,
        start_time=_parse_int(start_str, "start_time", lineno),
        end_time=end_time,
        elapsed_seconds=_parse_int(elapsed_str, "elapsed_time", lineno),
        running=running,
        date=date_str.strip(),
    )


def format_line(task: Task) -> str:
    """Serialize a task without the trailing newline."""
    end = NOT_ENDED if task.running else task.end_time
    return f"{task.name},{task.start_time},{end},{task.elapsed_seconds},{task.date}"


class TaskStore:
    """Whole-file CSV store for task records.

    Every load reads the full file and every save rewrites it. Saves go
    through a temporary file that is renamed over the store.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(os.path.expanduser(path))

    def __repr__(self) -> str:
        return f"TaskStore({self.path!r})"

    def _initialize(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(HEADER + "\n")
        except OSError as e:
            raise StorageUnavailable(f"cannot create {self.path}: {e.strerror or e}") from e
        logger.info("created record file %s", self.path)

    def load(self) -> List[Task]:
        """Return all tasks in file order, creating an empty file if absent."""
        if not os.path.exists(self.path):
            self._initialize()
            return []

        try:
            with open(self.path, "rb") as f:
                raw_lines = f.readlines()
        except OSError as e:
            raise StorageUnavailable(f"cannot read {self.path}: {e.strerror or e}") from e

        tasks: List[Task] = []
        for lineno, raw in enumerate(raw_lines, start=1):
            line = _decode(raw, lineno)
            if lineno == 1 and line.strip() == HEADER:
                continue
            task = parse_line(line, lineno)
            if task is not None:
                tasks.append(task)
        logger.debug("loaded %d task(s) from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: List[Task]) -> None:
        """Rewrite the file from in-memory state (header + tasks)."""
        directory = os.path.dirname(self.path)
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".ttrack-", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(HEADER + "\n")
                for t in tasks:
                    f.write(format_line(t) + "\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageUnavailable(f"cannot write {self.path}: {e.strerror or e}") from e
        logger.debug("saved %d task(s) to %s", len(tasks), self.path)

    def clear(self) -> None:
        """Replace the stored set with an empty one."""
        self.save([])
