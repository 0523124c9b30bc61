"""Logging configuration for the ttrack CLI and TUI."""

import logging
import os
import sys

LOG_FILE = "ttrack.log"


class _ConsoleNoiseFilter(logging.Filter):
    """Keep ttrack records; let third-party loggers through only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "ttrack" or record.name.startswith("ttrack."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    log_dir: str,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    console: bool = True,
) -> None:
    """
    Configure logging with:
    - File handler: full logs in <log_dir>/ttrack.log
    - Console handler (stderr), unless console=False (the TUI owns the screen)

    Call this once, before the first log call. An unwritable log directory
    drops the file handler rather than failing the command.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)

    # route warnings.warn(...) into logging as "py.warnings"
    logging.captureWarnings(True)

    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, LOG_FILE), encoding="utf-8")
    except OSError as e:
        if not console:
            root.addHandler(logging.NullHandler())
        logging.getLogger(__name__).warning("file logging disabled: %s", e)
        return
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)
