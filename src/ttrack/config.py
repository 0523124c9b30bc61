"""Settings loaded from environment variables (+ optional .env)."""

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .models import DEFAULT_DIR, DEFAULT_PATH

ENV_PREFIX = "TTRACK"

DEFAULT_REFRESH_MS = 1000


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: str) -> str:
    return os.path.expanduser(_env(name, default))


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


@dataclass(frozen=True)
class Settings:
    data_file: str
    log_dir: str
    log_level: int
    refresh_ms: int

    @staticmethod
    def from_env() -> "Settings":
        refresh_ms = _env_int(_k("REFRESH_MS"), DEFAULT_REFRESH_MS)
        if refresh_ms <= 0:
            refresh_ms = DEFAULT_REFRESH_MS
        return Settings(
            data_file=_env_path(_k("FILE"), DEFAULT_PATH),
            log_dir=_env_path(_k("LOG_DIR"), DEFAULT_DIR),
            log_level=_level(_env(_k("LOG_LEVEL"), "WARNING")),
            refresh_ms=refresh_ms,
        )


def get_settings(dotenv: bool = True) -> Settings:
    """Read settings, loading .env from the working directory first (existing vars win)."""
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    return Settings.from_env()
