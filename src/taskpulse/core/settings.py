"""Settings management for TaskPulse."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

from .exceptions import SettingsError
from .paths import ensure_app_structure, settings_path

_SUPPORTED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(slots=True)
class Settings:
    analytics_window_days: int = 30
    display_days: int = 7
    tick_interval_ms: int = 1000
    recent_tasks_limit: int = 5
    recent_entries_limit: int = 10
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Settings":
        defaults = cls()
        try:
            settings = cls(
                analytics_window_days=int(payload.get("analytics_window_days", defaults.analytics_window_days)),
                display_days=int(payload.get("display_days", defaults.display_days)),
                tick_interval_ms=int(payload.get("tick_interval_ms", defaults.tick_interval_ms)),
                recent_tasks_limit=int(payload.get("recent_tasks_limit", defaults.recent_tasks_limit)),
                recent_entries_limit=int(payload.get("recent_entries_limit", defaults.recent_entries_limit)),
                log_level=str(payload.get("log_level", defaults.log_level)).strip().upper(),
            )
        except (TypeError, ValueError) as exc:
            raise SettingsError("Settings values must be integers") from exc
        validate_settings(settings)
        return settings


def validate_settings(settings: Settings) -> None:
    if not 1 <= settings.analytics_window_days <= 365:
        raise SettingsError("Analytics window must be between 1 and 365 days")
    if not 1 <= settings.display_days <= 31:
        raise SettingsError("Display series must cover between 1 and 31 days")
    if settings.display_days > settings.analytics_window_days + 1:
        raise SettingsError("Display series cannot be longer than the analytics window")
    if not 100 <= settings.tick_interval_ms <= 60_000:
        raise SettingsError("Tick interval must be between 100 and 60000 milliseconds")
    if settings.recent_tasks_limit < 1 or settings.recent_entries_limit < 1:
        raise SettingsError("Recent item limits must be at least 1")
    if settings.log_level not in _SUPPORTED_LOG_LEVELS:
        raise SettingsError(f"Unsupported log level: {settings.log_level}")


class SettingsManager:
    def __init__(self, path: Path | None = None, logger: logging.Logger | None = None) -> None:
        if path is None:
            ensure_app_structure()
        self._path = Path(path) if path is not None else settings_path()
        self._logger = logger or logging.getLogger("taskpulse.settings")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Settings:
        if not self._path.exists():
            self._logger.info(
                "Settings file missing; using defaults",
                extra={"event": "settings_load_default", "path": str(self._path)},
            )
            return Settings()

        try:
            with self._path.open("r", encoding="utf-8") as infile:
                payload = json.load(infile)
        except json.JSONDecodeError as exc:
            self._logger.exception("Invalid JSON in settings file", extra={"event": "settings_load_invalid_json"})
            raise SettingsError("Settings file is malformed") from exc
        except OSError as exc:
            self._logger.exception("Unexpected error loading settings")
            raise SettingsError("Unable to load settings") from exc

        if not isinstance(payload, dict):
            raise SettingsError("Settings payload is invalid")

        settings = Settings.from_dict(payload)
        self._logger.info("Settings loaded successfully", extra={"event": "settings_loaded", **settings.to_dict()})
        return settings

    def save(self, settings: Settings) -> None:
        self._logger.info("Saving settings", extra={"event": "settings_save", **settings.to_dict()})
        validate_settings(settings)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as outfile:
                json.dump(settings.to_dict(), outfile, indent=2)
                outfile.flush()
                os.fsync(outfile.fileno())
            temp_path.replace(self._path)
        except OSError as exc:
            self._logger.exception("Failed to save settings")
            raise SettingsError("Unable to save settings") from exc

    def update(self, transform: Callable[[Settings], Settings]) -> Settings:
        current = self.load()
        updated = transform(current)
        self.save(updated)
        return updated
