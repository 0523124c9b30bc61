"""ttrack curses-based terminal user interface."""

import curses
import curses.textpad
import curses.ascii as ascii
import logging
from typing import List, Optional, Tuple

from . import digits
from .config import DEFAULT_REFRESH_MS
from .core import InvalidTaskName, TaskController, format_elapsed
from .models import TaskStatus
from .storage import StorageUnavailable

logger = logging.getLogger(__name__)

HELP_TEXT = [
    "ttrack - Keymap",
    "Movement:  up/k up   down/j down   g top   G bottom",
    "Actions:   s start a task (prompted)   Enter start/stop task under cursor",
    "           x stop the running task     c clear ALL task data",
    "System:    R reload file   ? help   q/ESC quit",
    "",
    "Prompts: Enter submits, ESC cancels",
    "Only one task runs at a time; stop it before starting another.",
]

TABLE_FMT = "{:<20} {:<10} {:<12} {:<15}"


def timer_lines(row: Optional[TaskStatus], width: int) -> List[str]:
    """Lines of the live timer panel for the running task (or none)."""
    if row is None:
        return ["No task running", "Press 's' to start one."]
    clock = format_elapsed(row.elapsed_seconds)
    lines = [f"Running: {row.name}"]
    if digits.width(clock) <= width:
        lines.extend(digits.render(clock))
    else:
        lines.append(clock)
    return lines


def edit_geometry(width: int, prompt: str) -> Tuple[int, int]:
    """Column and width of the input field after the prompt label."""
    x = min(len(prompt) + 3, max(0, width - 3))
    return x, max(1, width - 2 - x)


def help_size(height: int, width: int) -> Optional[Tuple[int, int]]:
    """Size of the help window, or None if the screen is too small for it."""
    win_h = min(len(HELP_TEXT) + 2, height - 2)
    win_w = min(max(len(line) for line in HELP_TEXT) + 4, width - 2)
    if win_h < 3 or win_w < 5:
        return None
    return win_h, win_w


class TUI:
    """Curses TUI over a single record file."""

    def __init__(self, stdscr, ctl: TaskController, refresh_ms: int = DEFAULT_REFRESH_MS):
        self.stdscr = stdscr
        self.ctl = ctl
        self.refresh_ms = refresh_ms
        self.rows: List[TaskStatus] = []
        self.cursor = 0
        self.scroll = 0
        self.status = "Press ? for help. s to start; x to stop; c to clear."
        curses.curs_set(0)
        self.stdscr.keypad(True)
        self.stdscr.timeout(self.refresh_ms)
        self.height, self.width = self.stdscr.getmaxyx()

        self.has_colors = curses.has_colors()
        if self.has_colors:
            curses.start_color()
            try:
                curses.use_default_colors()
            except curses.error:
                pass
            curses.init_pair(1, curses.COLOR_GREEN, -1)
            curses.init_pair(2, curses.COLOR_CYAN, -1)
            self.COL_RUNNING = curses.color_pair(1)
            self.COL_TIMER = curses.color_pair(2) | curses.A_BOLD
        else:
            self.COL_RUNNING = curses.A_BOLD
            self.COL_TIMER = curses.A_BOLD

    def refresh_rows(self):
        """Reload task rows from disk."""
        try:
            self.rows = self.ctl.status()
        except StorageUnavailable as e:
            self.rows = []
            self.message(str(e))
        if self.rows:
            self.cursor = max(0, min(len(self.rows) - 1, self.cursor))
        else:
            self.cursor = 0

    def running_row(self) -> Optional[TaskStatus]:
        for row in self.rows:
            if row.running:
                return row
        return None

    def draw(self):
        """Render header, live timer, task table, and status line."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()
        self.refresh_rows()

        self.stdscr.addnstr(0, 0, "Time Tracker", self.width - 1, curses.A_BOLD)
        self.stdscr.addnstr(1, 0, self.ctl.store.path, self.width - 1, curses.A_DIM)

        y = 3
        for i, line in enumerate(timer_lines(self.running_row(), self.width - 2)):
            if y >= self.height - 2:
                break
            attrs = self.COL_TIMER if i > 0 and self.running_row() else curses.A_NORMAL
            x = max(0, (self.width - len(line)) // 2)
            self.stdscr.addnstr(y, x, line, max(1, self.width - 1 - x), attrs)
            y += 1

        top = y + 1
        if top + 2 < self.height - 2:
            header = TABLE_FMT.format("Task", "Status", "Date", "Elapsed Time")
            self.stdscr.addnstr(top, 0, header, self.width - 1, curses.A_BOLD)
            self.stdscr.hline(top + 1, 0, curses.ACS_HLINE, min(self.width, len(header)))
            body_top = top + 2
            body_h = self.height - 2 - body_top

            if not self.rows:
                self.stdscr.addnstr(body_top, 0, "(no tasks yet)", self.width - 1, curses.A_DIM)
            else:
                if self.cursor < self.scroll:
                    self.scroll = self.cursor
                elif self.cursor >= self.scroll + body_h:
                    self.scroll = self.cursor - body_h + 1
                for i in range(self.scroll, min(self.scroll + body_h, len(self.rows))):
                    row = self.rows[i]
                    line = TABLE_FMT.format(
                        row.name,
                        "Running" if row.running else "Stopped",
                        row.date,
                        format_elapsed(row.elapsed_seconds),
                    )
                    attrs = self.COL_RUNNING if row.running else curses.A_NORMAL
                    if i == self.cursor:
                        attrs |= curses.A_REVERSE
                    self.stdscr.addnstr(body_top + i - self.scroll, 0, line, self.width - 1, attrs)

        self.stdscr.hline(self.height - 2, 0, curses.ACS_HLINE, self.width)
        self.stdscr.addnstr(self.height - 1, 0, self.status[: self.width - 1], self.width - 1)

        self.stdscr.refresh()

    def prompt(self, prompt: str, initial: str = "") -> Optional[str]:
        """Inline text input (Enter submits, ESC cancels)."""
        if self.height < 5 or self.width < 6:
            return None
        curses.curs_set(1)
        self.stdscr.timeout(-1)
        win = curses.newwin(3, self.width, self.height - 4, 0)
        win.erase()
        win.border()
        win.addnstr(0, 2, " Input (Enter submits, ESC cancels) ", self.width - 4, curses.A_DIM)
        win.addnstr(1, 2, (prompt + " ").ljust(self.width - 4), self.width - 4)
        win.refresh()
        edit_x, edit_w = edit_geometry(self.width, prompt)
        edit = curses.newwin(1, edit_w, self.height - 3, edit_x)
        edit.keypad(True)
        tb = curses.textpad.Textbox(edit, insert_mode=True)
        edit.addstr(0, 0, initial)

        cancelled = {"value": False}

        def validator(ch: int) -> int:
            if ch in (10, 13):
                return ascii.BEL
            if ch == 27:
                cancelled["value"] = True
                return ascii.BEL
            if ch in (curses.KEY_BACKSPACE, 127, 8):
                return ascii.BS
            return ch

        s = tb.edit(validator)
        curses.curs_set(0)
        self.stdscr.timeout(self.refresh_ms)
        if cancelled["value"]:
            return None
        s = (s or "").strip()
        if s == "":
            return None
        return s

    def confirm(self, prompt: str) -> bool:
        """One-line y/N prompt on the status bar."""
        msg = f"{prompt} [y/N]: "
        curses.curs_set(1)
        self.stdscr.timeout(-1)
        self.stdscr.addnstr(self.height - 1, 0, msg.ljust(self.width - 1), self.width - 1)
        self.stdscr.refresh()
        ch = self.stdscr.getch()
        curses.curs_set(0)
        self.stdscr.timeout(self.refresh_ms)
        return ch in (ord("y"), ord("Y"))

    def message(self, text: str):
        self.status = text

    def move_cursor(self, delta: int):
        if self.rows:
            self.cursor = max(0, min(len(self.rows) - 1, self.cursor + delta))

    def start_task(self, name: str):
        try:
            started = self.ctl.start(name)
        except InvalidTaskName as e:
            self.message(f"Invalid name: {e}")
            return
        if started:
            self.message(f"Started: {name}")
        else:
            current = self.ctl.running()
            self.message(f"Another task is already running: {current.name if current else '?'}")

    def prompt_start(self):
        name = self.prompt("Start task:")
        if name is None:
            self.message("Start cancelled.")
            return
        self.start_task(name)

    def stop_running(self):
        current = self.ctl.running()
        if current is None:
            self.message("No task is running.")
            return
        self.ctl.stop(current.name)
        self.message(f"Stopped: {current.name}")

    def toggle_selected(self):
        """Start the task under the cursor, or stop it if it is running."""
        if not self.rows:
            self.prompt_start()
            return
        row = self.rows[self.cursor]
        if row.running:
            self.ctl.stop(row.name)
            self.message(f"Stopped: {row.name}")
        else:
            self.start_task(row.name)

    def clear_all(self):
        if not self.confirm("Delete ALL task data?"):
            self.message("Clear cancelled.")
            return
        self.ctl.clear_all()
        self.cursor = 0
        self.scroll = 0
        self.message("All task data cleared.")

    def help_popup(self):
        h, w = self.height, self.width
        size = help_size(h, w)
        if size is None:
            self.message("Window too small for help.")
            return
        win_h, win_w = size
        win = curses.newwin(win_h, win_w, (h - win_h) // 2, (w - win_w) // 2)
        win.border()
        for i, line in enumerate(HELP_TEXT[: win_h - 2], start=1):
            win.addnstr(i, 2, line, win_w - 4)
        win.addnstr(win_h - 1, 2, "Press any key...", win_w - 4, curses.A_DIM)
        win.refresh()
        self.stdscr.timeout(-1)
        win.getch()
        self.stdscr.timeout(self.refresh_ms)

    def handle_key(self, ch: int) -> bool:
        """Dispatch one key; return False to quit."""
        if ch in (ord("q"), 27):
            return False
        elif ch in (curses.KEY_UP, ord("k")):
            self.move_cursor(-1)
        elif ch in (curses.KEY_DOWN, ord("j")):
            self.move_cursor(+1)
        elif ch == ord("g"):
            self.cursor = 0
        elif ch == ord("G"):
            self.cursor = max(0, len(self.rows) - 1)
        elif ch == ord("s"):
            self.prompt_start()
        elif ch in (10, 13, curses.KEY_ENTER):
            self.toggle_selected()
        elif ch == ord("x"):
            self.stop_running()
        elif ch == ord("c"):
            self.clear_all()
        elif ch == ord("R"):
            self.message("Reloaded from disk.")
        elif ch == ord("?"):
            self.help_popup()
        return True

    def run(self):
        """Main event loop; getch times out so the timer keeps ticking."""
        while True:
            self.draw()
            ch = self.stdscr.getch()
            if ch == -1 or ch == curses.KEY_RESIZE:
                continue
            try:
                if not self.handle_key(ch):
                    break
            except StorageUnavailable as e:
                logger.error("storage error: %s", e)
                self.message(str(e))


def main(ctl: TaskController, refresh_ms: int = DEFAULT_REFRESH_MS) -> None:
    """TUI entry point."""

    def _main(stdscr):
        tui = TUI(stdscr, ctl, refresh_ms)
        tui.run()

    curses.wrapper(_main)
