# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read at import time except the environment.
- Settings are passed explicitly to bootstrap; get_settings() is only the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_path: Path

    # ---- Views ----
    date_format: str
    recent_limit: int
    upcoming_limit: int

    # ---- Recovery ----
    reset_on_corrupt: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard").strip() or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")

        date_format = _env(_k("DATE_FORMAT"), "%b %d, %Y")
        recent_limit = _env_int(_k("RECENT_LIMIT"), 5)
        upcoming_limit = _env_int(_k("UPCOMING_LIMIT"), 5)

        reset_on_corrupt = _env_bool(_k("RESET_ON_CORRUPT"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_path=tasks_path,
            date_format=date_format,
            recent_limit=recent_limit,
            upcoming_limit=upcoming_limit,
            reset_on_corrupt=reset_on_corrupt,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
