"""Search, status and priority filtering for the task list."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from .exceptions import ValidationError
from .models import Priority, Task

ALL = "all"


class StatusFilter(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


def filter_tasks(
    tasks: Iterable[Task],
    search_text: str = "",
    status: StatusFilter | str = StatusFilter.ALL,
    priority: Priority | str = ALL,
) -> list[Task]:
    """Return the tasks matching every active filter, in input order."""
    status_filter = _parse_status(status)
    priority_filter = _parse_priority(priority)
    needle = (search_text or "").strip().lower()

    return [
        task
        for task in tasks
        if _matches_search(task, needle)
        and _matches_status(task, status_filter)
        and (priority_filter is None or task.priority == priority_filter)
    ]


def _matches_search(task: Task, needle: str) -> bool:
    if not needle:
        return True
    if needle in task.title.lower():
        return True
    return task.description is not None and needle in task.description.lower()


def _matches_status(task: Task, status: StatusFilter) -> bool:
    if status is StatusFilter.COMPLETED:
        return task.completed
    if status is StatusFilter.PENDING:
        return not task.completed
    return True


def _parse_status(value: StatusFilter | str) -> StatusFilter:
    if isinstance(value, StatusFilter):
        return value
    try:
        return StatusFilter(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unsupported status filter: {value}") from exc


def _parse_priority(value: Priority | str) -> Optional[Priority]:
    if isinstance(value, Priority):
        return value
    if str(value).strip().lower() == ALL:
        return None
    return Priority.parse(value)
