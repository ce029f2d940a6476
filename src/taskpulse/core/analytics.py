"""Productivity analytics aggregation.

:func:`aggregate` turns raw tasks and time entries into the series and weekly
figures shown on the analytics view. It is pure: identical inputs always give
an identical :class:`AnalyticsSnapshot`, and empty inputs give a zero-filled
one rather than an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from .exceptions import ValidationError
from .models import Task, TimeEntry

DEFAULT_WINDOW_DAYS = 30
DISPLAY_DAYS = 7
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def round_half_away(value: float) -> int:
    """Round to the nearest integer, sending halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True, slots=True)
class AnalysisWindow:
    """Inclusive date range the aggregator buckets over."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("Window end must not precede its start")

    @classmethod
    def trailing(cls, days: int = DEFAULT_WINDOW_DAYS, today: Optional[date] = None) -> "AnalysisWindow":
        if days < 0:
            raise ValidationError("Window length must be non-negative")
        end = today or date.today()
        return cls(start=end - timedelta(days=days), end=end)

    @property
    def days(self) -> list[date]:
        span = (self.end - self.start).days
        return [self.start + timedelta(days=offset) for offset in range(span + 1)]

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def tail(self, days: int) -> "AnalysisWindow":
        start = max(self.start, self.end - timedelta(days=days - 1))
        return AnalysisWindow(start=start, end=self.end)


@dataclass(slots=True)
class DailyCompletion:
    day: date
    completed: int = 0
    total: int = 0

    @property
    def label(self) -> str:
        return WEEKDAY_LABELS[self.day.weekday()]


@dataclass(slots=True)
class DailyMinutes:
    day: date
    minutes: int = 0

    @property
    def label(self) -> str:
        return WEEKDAY_LABELS[self.day.weekday()]


@dataclass(slots=True)
class CategoryCount:
    name: str
    color: str
    value: int = 0


@dataclass(frozen=True, slots=True)
class WeeklyStats:
    tasks_completed: int = 0
    time_tracked: int = 0
    average_time_per_task: int = 0
    completion_rate: int = 0


@dataclass(slots=True)
class AnalyticsSnapshot:
    window: AnalysisWindow
    daily_completion: list[DailyCompletion] = field(default_factory=list)
    category_breakdown: list[CategoryCount] = field(default_factory=list)
    time_spent: list[DailyMinutes] = field(default_factory=list)
    weekly_stats: WeeklyStats = field(default_factory=WeeklyStats)
    display_days: int = DISPLAY_DAYS

    @property
    def daily_completion_display(self) -> list[DailyCompletion]:
        return self.daily_completion[-self.display_days:]

    @property
    def time_spent_display(self) -> list[DailyMinutes]:
        return self.time_spent[-self.display_days:]

    def to_dict(self) -> dict[str, Any]:
        return {
            "window": {"start": self.window.start.isoformat(), "end": self.window.end.isoformat()},
            "daily_completion": [
                {"date": bucket.label, "completed": bucket.completed, "total": bucket.total}
                for bucket in self.daily_completion_display
            ],
            "category_breakdown": [
                {"name": item.name, "value": item.value, "color": item.color}
                for item in self.category_breakdown
            ],
            "time_spent": [
                {"date": bucket.label, "minutes": bucket.minutes} for bucket in self.time_spent_display
            ],
            "weekly_stats": {
                "tasks_completed": self.weekly_stats.tasks_completed,
                "time_tracked": self.weekly_stats.time_tracked,
                "average_time_per_task": self.weekly_stats.average_time_per_task,
                "completion_rate": self.weekly_stats.completion_rate,
            },
        }


def aggregate(
    tasks: Iterable[Task],
    time_entries: Iterable[TimeEntry],
    window: Optional[AnalysisWindow] = None,
    display_days: int = DISPLAY_DAYS,
) -> AnalyticsSnapshot:
    """Build the analytics snapshot for ``window`` (trailing 30 days by default)."""
    if display_days < 1:
        raise ValidationError("display_days must be at least 1")
    window = window or AnalysisWindow.trailing()
    tasks = list(tasks)
    closed_entries = [entry for entry in time_entries if entry.is_closed]
    in_window = [task for task in tasks if window.contains(_day_of(task.created_at))]

    completion = {day: DailyCompletion(day=day) for day in window.days}
    for task in in_window:
        bucket = completion[_day_of(task.created_at)]
        bucket.total += 1
        if task.completed:
            bucket.completed += 1

    minutes = {day: DailyMinutes(day=day) for day in window.days}
    for entry in closed_entries:
        bucket = minutes.get(_day_of(entry.start_time))
        if bucket is not None:
            bucket.minutes += round_half_away(entry.duration / 60)

    return AnalyticsSnapshot(
        window=window,
        daily_completion=list(completion.values()),
        category_breakdown=category_breakdown(in_window),
        time_spent=list(minutes.values()),
        weekly_stats=weekly_stats(tasks, closed_entries, window.tail(display_days)),
        display_days=display_days,
    )


def category_breakdown(tasks: Iterable[Task]) -> list[CategoryCount]:
    counts: dict[str, CategoryCount] = {}
    for task in tasks:
        if task.category is None:
            continue
        name = task.category.name
        item = counts.get(name)
        if item is None:
            item = counts[name] = CategoryCount(name=name, color=task.category.color)
        item.value += 1
    return list(counts.values())


def weekly_stats(tasks: Iterable[Task], time_entries: Iterable[TimeEntry], window: AnalysisWindow) -> WeeklyStats:
    week_tasks = [task for task in tasks if window.contains(_day_of(task.created_at))]
    tasks_completed = sum(1 for task in week_tasks if task.completed)
    tracked_seconds = sum(
        entry.duration
        for entry in time_entries
        if entry.is_closed and window.contains(_day_of(entry.start_time))
    )

    average = round_half_away(tracked_seconds / tasks_completed / 60) if tasks_completed else 0
    rate = round_half_away(tasks_completed / len(week_tasks) * 100) if week_tasks else 0
    return WeeklyStats(
        tasks_completed=tasks_completed,
        time_tracked=round_half_away(tracked_seconds / 60),
        average_time_per_task=average,
        completion_rate=rate,
    )


def _day_of(value: datetime) -> date:
    return value.date()
