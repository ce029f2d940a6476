from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from taskpulse.core.exceptions import RepositoryError
from taskpulse.core.models import Category, Priority, Task, TimeEntry


def make_task(
    title: str,
    created_at: datetime,
    *,
    completed: bool = False,
    priority: Priority | str = Priority.MEDIUM,
    description: Optional[str] = None,
    due_date: Optional[datetime] = None,
    category: Optional[Category] = None,
    estimated_time: Optional[int] = None,
) -> Task:
    return Task(
        title=title,
        created_at=created_at,
        completed=completed,
        completed_at=created_at if completed else None,
        priority=priority,
        description=description,
        due_date=due_date,
        category=category,
        estimated_time=estimated_time,
    )


def closed_entry(task_id: str, start: datetime, duration: int) -> TimeEntry:
    return TimeEntry(task_id=task_id, start_time=start, end_time=start + timedelta(seconds=duration), duration=duration)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class FakeTimeEntryRepository:
    def __init__(self) -> None:
        self.entries: dict[str, TimeEntry] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_insert = False
        self.fail_update = False

    def list(self, user_id: str, limit: Optional[int] = None) -> list[TimeEntry]:
        self.calls.append(("list", user_id))
        ordered = sorted(self.entries.values(), key=lambda entry: entry.start_time, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    def insert(self, entry: Mapping[str, Any]) -> TimeEntry:
        self.calls.append(("insert", dict(entry)))
        if self.fail_insert:
            raise RepositoryError("insert rejected")
        stored = TimeEntry(task_id=entry["task_id"], start_time=entry["start_time"])
        self.entries[stored.id] = stored
        return stored

    def update(self, entry_id: str, patch: Mapping[str, Any]) -> TimeEntry:
        self.calls.append(("update", entry_id, dict(patch)))
        if self.fail_update:
            raise RepositoryError("update rejected")
        stored = self.entries[entry_id].close(patch["end_time"], patch["duration"])
        self.entries[entry_id] = stored
        return stored


class FakeTaskRepository:
    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks = {task.id: task for task in tasks or []}
        self.calls: list[tuple[str, Any]] = []
        self.fail = False

    def list(self, user_id: str, since: Optional[datetime] = None) -> list[Task]:
        self.calls.append(("list", user_id, since))
        if self.fail:
            raise RepositoryError("list rejected")
        tasks = [task for task in self.tasks.values() if since is None or task.created_at >= since]
        return sorted(tasks, key=lambda task: task.created_at, reverse=True)

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        self.calls.append(("update", task_id, dict(patch)))
        if self.fail:
            raise RepositoryError("update rejected")
        stored = replace(self.tasks[task_id], **patch)
        self.tasks[task_id] = stored
        return stored

    def delete(self, task_id: str) -> None:
        self.calls.append(("delete", task_id))
        if self.fail:
            raise RepositoryError("delete rejected")
        self.tasks.pop(task_id, None)
