"""Persistence contract consumed by the tracker core.

The core never stores records itself. Callers hand in objects satisfying these
protocols; implementations signal failure by raising
:class:`~taskpulse.core.exceptions.RepositoryError`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .models import Task, TimeEntry


@runtime_checkable
class TaskRepository(Protocol):
    """Task records scoped to a user."""

    def list(self, user_id: str, since: Optional[datetime] = None) -> Sequence[Task]:
        """Return the user's tasks, newest first, optionally created on or after ``since``."""
        ...

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        """Apply ``patch`` (``completed`` / ``completed_at``) and return the stored task."""
        ...

    def delete(self, task_id: str) -> None:
        ...


@runtime_checkable
class TimeEntryRepository(Protocol):
    """Time entry records scoped to a user."""

    def list(self, user_id: str, limit: Optional[int] = None) -> Sequence[TimeEntry]:
        """Return the user's entries, newest first."""
        ...

    def insert(self, entry: Mapping[str, Any]) -> TimeEntry:
        """Persist a new open entry from ``{user_id, task_id, start_time}``."""
        ...

    def update(self, entry_id: str, patch: Mapping[str, Any]) -> TimeEntry:
        """Close an entry with ``{end_time, duration}`` and return the stored entry."""
        ...
