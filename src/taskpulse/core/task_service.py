"""Task completion, deletion and dashboard figures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from .analytics import AnalysisWindow, AnalyticsSnapshot, aggregate, round_half_away
from .exceptions import RepositoryError
from .models import Task, to_local_naive
from .repository import TaskRepository, TimeEntryRepository

DEFAULT_RECENT_TASKS = 5


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    today_tasks: int = 0
    overdue_tasks: int = 0

    @property
    def completion_rate(self) -> int:
        if not self.total_tasks:
            return 0
        return round_half_away(self.completed_tasks / self.total_tasks * 100)

    def to_dict(self) -> dict[str, int]:
        return {
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "today_tasks": self.today_tasks,
            "overdue_tasks": self.overdue_tasks,
            "completion_rate": self.completion_rate,
        }


def dashboard_stats(tasks: Iterable[Task], now: datetime) -> DashboardStats:
    tasks = list(tasks)
    now = to_local_naive(now)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)
    return DashboardStats(
        total_tasks=len(tasks),
        completed_tasks=sum(1 for task in tasks if task.completed),
        today_tasks=sum(1 for task in tasks if task.due_date is not None and today <= task.due_date < tomorrow),
        overdue_tasks=sum(1 for task in tasks if task.is_overdue(now)),
    )


def recent_tasks(tasks: Iterable[Task], limit: int = DEFAULT_RECENT_TASKS) -> list[Task]:
    ordered = sorted(tasks, key=lambda task: task.created_at, reverse=True)
    return ordered[: max(0, limit)]


class TaskService:
    """Mutates tasks through the repository and feeds the dashboard views."""

    def __init__(
        self,
        user_id: str,
        tasks: TaskRepository,
        time_entries: TimeEntryRepository,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._user_id = user_id
        self._tasks = tasks
        self._time_entries = time_entries
        self._clock = clock
        self._logger = logger or logging.getLogger("taskpulse.tasks")

    def list_tasks(self, since: Optional[datetime] = None) -> list[Task]:
        try:
            return list(self._tasks.list(self._user_id, since=since))
        except RepositoryError:
            self._logger.exception("Failed to load tasks", extra={"event": "tasks_load_failed"})
            raise

    def toggle_completion(self, task: Task) -> Task:
        toggled = task.with_completion(not task.completed, to_local_naive(self._clock()))
        completed = toggled.completed
        try:
            updated = self._tasks.update(task.id, {"completed": completed, "completed_at": toggled.completed_at})
        except RepositoryError:
            self._logger.exception(
                "Failed to toggle task completion",
                extra={"event": "task_toggle_failed", "task_id": task.id, "completed": completed},
            )
            raise
        self._logger.info(
            "Task completed" if completed else "Task reopened",
            extra={"event": "task_toggle", "task_id": task.id, "completed": completed},
        )
        return updated

    def delete_task(self, task_id: str) -> None:
        try:
            self._tasks.delete(task_id)
        except RepositoryError:
            self._logger.exception("Failed to delete task", extra={"event": "task_delete_failed", "task_id": task_id})
            raise
        self._logger.info("Task deleted", extra={"event": "task_delete", "task_id": task_id})

    def load_dashboard(self, limit: int = DEFAULT_RECENT_TASKS) -> tuple[DashboardStats, list[Task]]:
        tasks = self.list_tasks()
        return dashboard_stats(tasks, self._clock()), recent_tasks(tasks, limit)

    def load_analytics(self, window: Optional[AnalysisWindow] = None, display_days: int = 7) -> AnalyticsSnapshot:
        window = window or AnalysisWindow.trailing(today=to_local_naive(self._clock()).date())
        since = datetime.combine(window.start, datetime.min.time())
        tasks = self.list_tasks(since=since)
        try:
            entries = self._time_entries.list(self._user_id)
        except RepositoryError:
            self._logger.exception("Failed to load time entries", extra={"event": "entries_load_failed"})
            raise
        snapshot = aggregate(tasks, entries, window, display_days=display_days)
        self._logger.debug(
            "Analytics computed",
            extra={
                "event": "analytics_computed",
                "tasks": len(tasks),
                "window_start": window.start.isoformat(),
                "window_end": window.end.isoformat(),
            },
        )
        return snapshot
