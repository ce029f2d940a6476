"""Read exported task and time-entry JSON documents into records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, TypeVar

from .exceptions import ImportFormatError, TaskPulseError
from .models import Task, TimeEntry

RecordT = TypeVar("RecordT")


def load_tasks(path: Path) -> list[Task]:
    """Load tasks from a JSON array or a ``{"tasks": [...]}`` document."""
    return _load_records(path, "tasks", Task.from_json_dict)


def load_time_entries(path: Path) -> list[TimeEntry]:
    """Load entries from a JSON array or a ``{"time_entries": [...]}`` document."""
    return _load_records(path, "time_entries", TimeEntry.from_json_dict)


def _load_records(path: Path, key: str, factory: Callable[[dict[str, Any]], RecordT]) -> list[RecordT]:
    path = Path(path)
    if not path.exists():
        raise ImportFormatError(f"File does not exist: {path}")

    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"{path.name} is not valid JSON: {exc.msg}") from exc
    except OSError as exc:
        raise ImportFormatError(f"Unable to read {path}: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get(key)
    if not isinstance(payload, list):
        raise ImportFormatError(f"{path.name} must contain a list of {key.replace('_', ' ')}")

    records: list[RecordT] = []
    for index, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ImportFormatError(f"Record {index}: expected an object")
        try:
            records.append(factory(item))
        except (KeyError, TypeError, ValueError, TaskPulseError) as exc:  # re-wrap with record context
            raise ImportFormatError(f"Record {index}: {exc}") from exc
    return records
