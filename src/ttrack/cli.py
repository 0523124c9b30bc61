"""ttrack command-line interface."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import get_settings
from .core import InvalidTaskName, TaskController, format_elapsed
from .logging_setup import setup_logging
from .models import TaskStatus
from .storage import StorageUnavailable, TaskStore

logger = logging.getLogger(__name__)

ROW_FMT = "{:<20} {:<10} {:<12} {:<15}"


def format_row(row: TaskStatus) -> str:
    return ROW_FMT.format(
        row.name,
        "Running" if row.running else "Stopped",
        row.date,
        format_elapsed(row.elapsed_seconds),
    )


def print_status(rows: List[TaskStatus]) -> None:
    """Print the status table in file order."""
    print(ROW_FMT.format("Task", "Status", "Date", "Elapsed Time").rstrip())
    print("-" * 57)
    for row in rows:
        print(format_row(row).rstrip())


def prompt_yes_no(question: str) -> bool:
    """Simple y/N terminal prompt."""
    try:
        ans = input(f"{question} [y/N]: ").strip().lower()
    except EOFError:
        return False
    return ans in ("y", "yes")


def task_name(args: argparse.Namespace) -> str:
    return " ".join(args.name).strip()


def cmd_start(ctl: TaskController, args: argparse.Namespace) -> None:
    name = task_name(args)
    if not ctl.start(name):
        current = ctl.running()
        running = current.name if current else "?"
        sys.exit(f"Another task is already running: {running}")
    print(f"Started: {name}")


def cmd_stop(ctl: TaskController, args: argparse.Namespace) -> None:
    current = ctl.running()
    name = task_name(args) if args.name else (current.name if current else None)
    if name is None:
        print("No task is running.")
        return
    if current is None or current.name != name:
        print(f"No running task named {name}.")
        return
    ctl.stop(name)
    total = next(r.elapsed_seconds for r in ctl.status() if r.name == name)
    print(f"Stopped: {name} ({format_elapsed(total)} total)")


def cmd_status(ctl: TaskController, args: argparse.Namespace) -> None:
    rows = ctl.status()
    if not rows:
        print("(no tasks yet)")
        return
    print_status(rows)


def cmd_clear(ctl: TaskController, args: argparse.Namespace) -> None:
    if not args.yes and not prompt_yes_no("Delete ALL task data?"):
        print("Clear cancelled.")
        return
    ctl.clear_all()
    print("All task data cleared.")


def cmd_path(ctl: TaskController, args: argparse.Namespace) -> None:
    print(os.path.abspath(ctl.store.path))


def build_parser(default_file: str) -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="ttrack", description="Track time spent on named tasks."
    )
    p.add_argument(
        "-f",
        "--file",
        default=default_file,
        help=f"Path to the record file (default: {default_file})",
    )
    sub = p.add_subparsers(dest="cmd")

    s_start = sub.add_parser("start", help="Start or resume a task")
    s_start.add_argument("name", nargs="+", help="Task name")
    s_start.set_defaults(func=cmd_start)

    s_stop = sub.add_parser("stop", help="Stop a running task")
    s_stop.add_argument(
        "name", nargs="*", help="Task name (default: whichever task is running)"
    )
    s_stop.set_defaults(func=cmd_stop)

    s_status = sub.add_parser("status", help="Show all tasks and elapsed time")
    s_status.set_defaults(func=cmd_status)

    s_clear = sub.add_parser("clear", help="Delete all task data")
    s_clear.add_argument("-y", "--yes", action="store_true", help="Do not ask first")
    s_clear.set_defaults(func=cmd_clear)

    s_path = sub.add_parser("path", help="Show the absolute path to the record file")
    s_path.set_defaults(func=cmd_path)

    s_tui = sub.add_parser("tui", help="Full-screen interface (the default)")
    s_tui.set_defaults(func=None)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point. Launches TUI if no subcommand given."""
    settings = get_settings()
    parser = build_parser(settings.data_file)
    args = parser.parse_args(argv)

    interactive = args.cmd in (None, "tui")
    setup_logging(settings.log_dir, console_level=settings.log_level, console=not interactive)

    ctl = TaskController(TaskStore(args.file))
    try:
        if interactive:
            from .tui import main as tui_main

            tui_main(ctl, refresh_ms=settings.refresh_ms)
        else:
            args.func(ctl, args)
    except (StorageUnavailable, InvalidTaskName) as e:
        logger.info("%s failed: %s", args.cmd or "tui", e)
        sys.exit(f"ttrack: {e}")


if __name__ == "__main__":
    main()
