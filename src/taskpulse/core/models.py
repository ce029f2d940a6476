"""Domain models for TaskPulse."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional
import uuid

from .exceptions import ValidationError


def _default_record_id() -> str:
    return uuid.uuid4().hex


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: "str | Priority") -> "Priority":
        if isinstance(value, Priority):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Unsupported priority: {value}") from exc


@dataclass(frozen=True, slots=True)
class Category:
    """A named, colored grouping label applied to tasks."""

    name: str
    color: str = ""
    id: str = field(default_factory=_default_record_id)

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise ValidationError("Category name must be non-empty")

    def to_json_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_json_dict(cls, payload: dict[str, Any]) -> "Category":
        return cls(
            name=str(payload.get("name") or ""),
            color=str(payload.get("color") or ""),
            id=str(payload.get("id") or _default_record_id()),
        )


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of work with completion state, optional schedule and category."""

    title: str
    created_at: datetime
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    completed_at: Optional[datetime] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_time: Optional[int] = None
    category: Optional[Category] = None
    id: str = field(default_factory=_default_record_id)

    def __post_init__(self) -> None:
        if not (self.title or "").strip():
            raise ValidationError("Task title must be non-empty")
        _normalize_datetimes(self, "created_at", "completed_at", "due_date")
        if not isinstance(self.priority, Priority):
            object.__setattr__(self, "priority", Priority.parse(self.priority))
        if self.completed and self.completed_at is None:
            raise ValidationError("Completed tasks require completed_at")
        if not self.completed and self.completed_at is not None:
            raise ValidationError("Pending tasks cannot carry completed_at")
        if self.estimated_time is not None and self.estimated_time <= 0:
            raise ValidationError("estimated_time must be a positive number of minutes")

    def with_completion(self, completed: bool, at: datetime) -> "Task":
        """Return a copy with the completion flag toggled to ``completed``."""
        return replace(self, completed=completed, completed_at=at if completed else None)

    def is_overdue(self, now: datetime) -> bool:
        return not self.completed and self.due_date is not None and self.due_date < now

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "due_date": _format_datetime(self.due_date),
            "priority": self.priority.value,
            "estimated_time": self.estimated_time,
            "category": self.category.to_json_dict() if self.category else None,
            "created_at": _format_datetime(self.created_at),
            "completed_at": _format_datetime(self.completed_at),
        }

    @classmethod
    def from_json_dict(cls, payload: dict[str, Any]) -> "Task":
        category_payload = payload.get("category")
        estimated = payload.get("estimated_time")
        return cls(
            id=str(payload.get("id") or _default_record_id()),
            title=str(payload.get("title") or ""),
            description=payload.get("description") or None,
            completed=bool(payload.get("completed", False)),
            due_date=_parse_optional_datetime(payload.get("due_date")),
            priority=Priority.parse(payload.get("priority") or Priority.MEDIUM),
            estimated_time=int(estimated) if estimated is not None else None,
            category=Category.from_json_dict(category_payload) if category_payload else None,
            created_at=_parse_datetime(payload["created_at"]),
            completed_at=_parse_optional_datetime(payload.get("completed_at")),
        )


@dataclass(frozen=True, slots=True)
class TimeEntry:
    """A recorded interval of tracked time against one task."""

    task_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    task_title: Optional[str] = None
    id: str = field(default_factory=_default_record_id)

    def __post_init__(self) -> None:
        if not (self.task_id or "").strip():
            raise ValidationError("Time entries must reference a task")
        _normalize_datetimes(self, "start_time", "end_time")
        if (self.end_time is None) != (self.duration is None):
            raise ValidationError("end_time and duration must be set together")
        if self.duration is not None:
            if self.duration < 0:
                raise ValidationError("duration must be non-negative")
            if self.end_time is not None and self.end_time < self.start_time:
                raise ValidationError("end_time must not precede start_time")

    @property
    def is_open(self) -> bool:
        return self.end_time is None and self.duration is None

    @property
    def is_closed(self) -> bool:
        return not self.is_open

    def close(self, end_time: datetime, duration: int) -> "TimeEntry":
        if self.is_closed:
            raise ValidationError("Time entry is already closed")
        return replace(self, end_time=end_time, duration=duration)

    @property
    def pretty_duration(self) -> str:
        if self.duration is None:
            return "In progress..."
        return format_duration(self.duration)

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "start_time": _format_datetime(self.start_time),
            "end_time": _format_datetime(self.end_time),
            "duration": self.duration,
        }

    @classmethod
    def from_json_dict(cls, payload: dict[str, Any]) -> "TimeEntry":
        duration = payload.get("duration")
        task = payload.get("task")
        title = payload.get("task_title") or (task.get("title") if isinstance(task, dict) else None)
        return cls(
            id=str(payload.get("id") or _default_record_id()),
            task_id=str(payload.get("task_id") or ""),
            start_time=_parse_datetime(payload["start_time"]),
            end_time=_parse_optional_datetime(payload.get("end_time")),
            duration=int(duration) if duration is not None else None,
            task_title=title,
        )


def format_duration(seconds: int) -> str:
    """Render ``seconds`` as ``M:SS`` or ``H:MM:SS`` once past an hour."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def to_local_naive(value: datetime) -> datetime:
    """Convert an offset-aware timestamp to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _normalize_datetimes(record: object, *names: str) -> None:
    # Records are frozen, so normalised values go in through object.__setattr__.
    for name in names:
        value = getattr(record, name)
        if isinstance(value, datetime) and value.tzinfo is not None:
            object.__setattr__(record, name, to_local_naive(value))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="seconds")


def _parse_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _parse_optional_datetime(value: str | datetime | None) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return _parse_datetime(value)
