"""Application data directory for settings and logs."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

APP_NAME = "taskpulse"
SETTINGS_FILENAME = "settings.json"
LOG_FILENAME = "taskpulse.log"

_DATA_DIR_OVERRIDE: Path | None = None


def default_app_data_dir() -> Path:
    """``%APPDATA%``, then ``$XDG_DATA_HOME``, then ``~/.local/share``."""
    root = os.environ.get("APPDATA") or os.environ.get("XDG_DATA_HOME")
    base = Path(root) if root else Path.home() / ".local" / "share"
    return base / APP_NAME


def set_app_data_directory(path: Path | str | None) -> Path:
    """Point this process at ``path`` (``None`` restores the default)."""
    global _DATA_DIR_OVERRIDE
    _DATA_DIR_OVERRIDE = Path(path).expanduser() if path else None
    app_data_dir.cache_clear()
    return app_data_dir()


@lru_cache(maxsize=1)
def app_data_dir() -> Path:
    base = _DATA_DIR_OVERRIDE or default_app_data_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base


def settings_path() -> Path:
    return app_data_dir() / SETTINGS_FILENAME


def log_path() -> Path:
    return app_data_dir() / LOG_FILENAME


def ensure_app_structure() -> None:
    app_data_dir()
