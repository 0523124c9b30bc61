import logging
from pathlib import Path

import pytest

from ttrack.core import TaskController
from ttrack.models import TICKS_PER_SECOND
from ttrack.storage import TaskStore


class FakeClock:
    """Nanosecond clock that only moves when told to."""

    def __init__(self, seconds: float = 1_700_000_000) -> None:
        self.now = int(seconds * TICKS_PER_SECOND)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * TICKS_PER_SECOND)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep settings, .env lookup and log files inside tmp_path."""
    for name in ("TTRACK_FILE", "TTRACK_LOG_LEVEL", "TTRACK_REFRESH_MS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TTRACK_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    logging.captureWarnings(False)


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "timetracker.csv"


@pytest.fixture()
def store(store_path: Path) -> TaskStore:
    return TaskStore(str(store_path))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ctl(store: TaskStore, clock: FakeClock) -> TaskController:
    return TaskController(store, clock=clock)
