import logging
import os
from pathlib import Path

import pytest

from ttrack import storage
from ttrack.models import HEADER, Task
from ttrack.storage import StorageUnavailable, TaskStore, format_line, parse_line


def write_raw(path: Path, *lines: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")


def test_load_missing_file_creates_header_only(store: TaskStore, store_path: Path) -> None:
    assert not store_path.exists()

    assert store.load() == []
    assert store_path.read_text(encoding="utf-8") == HEADER + "\n"


def test_round_trip_preserves_fields(store: TaskStore) -> None:
    tasks = [
        Task("writing", 1_700_000_000_123_456_789, 1_700_000_090_000_000_001, 90, False, "2023-11-14"),
        Task("coding", 1_700_000_100_000_000_000, 0, 12, True, "2023-11-15"),
        Task("a, b and c", 5, 6, 0, False, "2023-11-16"),
    ]
    store.save(tasks)

    assert store.load() == tasks


def test_save_writes_fixed_field_order(store: TaskStore, store_path: Path) -> None:
    store.save([Task("writing", 10, 0, 3, True, "2024-01-02")])

    assert store_path.read_text(encoding="utf-8").splitlines() == [
        HEADER,
        "writing,10,0,3,2024-01-02",
    ]


def test_running_is_derived_from_end_time_sentinel(store: TaskStore, store_path: Path) -> None:
    write_raw(
        store_path,
        HEADER,
        "a,100,0,5,2024-01-01",
        "b,100,,5,2024-01-01",
        "c,100,200,5,2024-01-01",
    )

    running = {t.name: t.running for t in store.load()}
    assert running == {"a": True, "b": True, "c": False}


def test_stopped_task_with_running_flag_is_written_as_running() -> None:
    line = format_line(Task("x", 1, 999, 0, True, "2024-01-01"))
    assert line == "x,1,0,0,2024-01-01"


def test_malformed_numbers_become_zero(store: TaskStore, store_path: Path, caplog) -> None:
    write_raw(
        store_path,
        HEADER,
        "bad,abc,12x,??,2024-01-01",
        "good,100,200,7,2024-01-02",
    )

    with caplog.at_level(logging.WARNING, logger="ttrack.storage"):
        tasks = store.load()

    assert [t.name for t in tasks] == ["bad", "good"]
    bad = tasks[0]
    assert bad.start_time == 0
    assert bad.end_time == 0
    assert bad.elapsed_seconds == 0
    assert bad.running
    assert tasks[1] == Task("good", 100, 200, 7, False, "2024-01-02")
    assert "line 2" in caplog.text


@pytest.mark.parametrize("end", ["12x", "00", " 0 ", "-0"])
def test_end_time_read_as_zero_means_running(end: str) -> None:
    task = parse_line(f"bad,100,{end},5,2024-01-01")

    assert task == Task("bad", 100, 0, 5, True, "2024-01-01")


@pytest.mark.parametrize("end", ["12x", "00"])
def test_odd_end_time_is_stable_across_save(
    store: TaskStore, store_path: Path, end: str
) -> None:
    write_raw(store_path, HEADER, f"bad,100,{end},5,2024-01-01")

    first = store.load()
    store.save(first)

    assert store.load() == first


def test_invalid_utf8_row_does_not_abort_load(
    store: TaskStore, store_path: Path, caplog
) -> None:
    store_path.parent.mkdir(parents=True)
    store_path.write_bytes(
        (HEADER + "\n").encode("utf-8")
        + b"caf\xe9,1,2,3,2024-01-01\n"
        + b"ok,1,2,3,2024-01-02\n"
    )

    with caplog.at_level(logging.WARNING, logger="ttrack.storage"):
        tasks = store.load()

    assert [t.name for t in tasks] == ["caf\ufffd", "ok"]
    assert tasks[1] == Task("ok", 1, 2, 3, False, "2024-01-02")
    assert "line 2" in caplog.text


def test_empty_elapsed_field_is_zero() -> None:
    task = parse_line("x,100,200,,2024-01-01")
    assert task is not None
    assert task.elapsed_seconds == 0


def test_short_rows_are_padded() -> None:
    task = parse_line("lonely")
    assert task == Task("lonely", 0, 0, 0, True, "")


def test_blank_lines_are_skipped(store: TaskStore, store_path: Path) -> None:
    write_raw(store_path, HEADER, "", "a,1,2,3,2024-01-01", "   ")

    assert [t.name for t in store.load()] == ["a"]


def test_file_without_header_keeps_first_row(store: TaskStore, store_path: Path) -> None:
    write_raw(store_path, "a,1,2,3,2024-01-01")

    assert [t.name for t in store.load()] == ["a"]


def test_crlf_line_endings(store: TaskStore, store_path: Path) -> None:
    store_path.parent.mkdir(parents=True)
    store_path.write_bytes((HEADER + "\r\na,1,2,3,2024-01-01\r\n").encode("utf-8"))

    assert store.load() == [Task("a", 1, 2, 3, False, "2024-01-01")]


def test_clear_leaves_header_only(store: TaskStore, store_path: Path) -> None:
    store.save([Task("a", 1, 2, 3, False, "2024-01-01")])
    store.clear()

    assert store.load() == []
    assert store_path.read_text(encoding="utf-8") == HEADER + "\n"


def test_storage_unavailable_is_an_oserror() -> None:
    assert issubclass(StorageUnavailable, OSError)


def test_load_fails_when_file_cannot_be_created(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    store = TaskStore(str(blocker / "timetracker.csv"))

    with pytest.raises(StorageUnavailable):
        store.load()


def test_save_fails_when_directory_is_unusable(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    store = TaskStore(str(blocker / "timetracker.csv"))

    with pytest.raises(StorageUnavailable):
        store.save([])


def test_failed_save_keeps_previous_file(
    store: TaskStore, store_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store.save([Task("a", 1, 2, 3, False, "2024-01-01")])
    before = store_path.read_bytes()

    def broken_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(storage.os, "replace", broken_replace)

    with pytest.raises(StorageUnavailable):
        store.save([])

    assert store_path.read_bytes() == before
    assert os.listdir(store_path.parent) == [store_path.name]


def test_path_is_expanded_and_absolute(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    store = TaskStore("~/tt.csv")

    assert store.path == str(tmp_path / "tt.csv")
