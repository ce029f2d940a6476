from datetime import datetime, timedelta, timezone

import pytest

from taskpulse.core.exceptions import ValidationError
from taskpulse.core.models import Category, Priority, Task, TimeEntry, format_duration, to_local_naive

NOW = datetime(2025, 3, 14, 10, 0, 0)


def test_task_requires_title():
    with pytest.raises(ValidationError):
        Task(title="   ", created_at=NOW)


def test_completed_at_tracks_completion_flag():
    with pytest.raises(ValidationError):
        Task(title="write", created_at=NOW, completed=True)
    with pytest.raises(ValidationError):
        Task(title="write", created_at=NOW, completed_at=NOW)

    task = Task(title="write", created_at=NOW)
    done = task.with_completion(True, NOW + timedelta(hours=1))
    assert done.completed_at == NOW + timedelta(hours=1)
    reopened = done.with_completion(False, NOW + timedelta(hours=2))
    assert reopened.completed is False
    assert reopened.completed_at is None
    assert reopened.created_at == NOW


def test_priority_parsed_from_text():
    task = Task(title="write", created_at=NOW, priority="HIGH")
    assert task.priority is Priority.HIGH
    with pytest.raises(ValidationError):
        Task(title="write", created_at=NOW, priority="urgent")


def test_estimated_time_must_be_positive():
    with pytest.raises(ValidationError):
        Task(title="write", created_at=NOW, estimated_time=0)


def test_time_entry_open_and_closed_states():
    entry = TimeEntry(task_id="t1", start_time=NOW)
    assert entry.is_open
    closed = entry.close(NOW + timedelta(seconds=90), 90)
    assert closed.is_closed
    assert closed.pretty_duration == "1:30"
    with pytest.raises(ValidationError):
        closed.close(NOW + timedelta(seconds=120), 120)


@pytest.mark.parametrize(
    "end_time, duration",
    [
        (NOW + timedelta(seconds=5), None),
        (None, 5),
        (NOW + timedelta(seconds=5), -1),
        (NOW - timedelta(seconds=5), 5),
    ],
)
def test_time_entry_rejects_half_closed_records(end_time, duration):
    with pytest.raises(ValidationError):
        TimeEntry(task_id="t1", start_time=NOW, end_time=end_time, duration=duration)


def test_format_duration():
    assert format_duration(0) == "0:00"
    assert format_duration(65) == "1:05"
    assert format_duration(3725) == "1:02:05"


def test_task_json_dict_accepts_utc_suffix_and_category():
    task = Task.from_json_dict(
        {
            "id": "abc",
            "title": "Plan sprint",
            "priority": "low",
            "completed": True,
            "created_at": "2025-03-14T09:00:00Z",
            "completed_at": "2025-03-14T11:00:00Z",
            "category": {"id": "c1", "name": "Work", "color": "#8884d8"},
        }
    )
    assert task.id == "abc"
    assert task.created_at == datetime(2025, 3, 14, 9, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert task.created_at.tzinfo is None
    assert task.category == Category(name="Work", color="#8884d8", id="c1")
    assert task.to_json_dict()["category"]["name"] == "Work"


def test_time_entry_json_dict_reads_joined_task_title():
    entry = TimeEntry.from_json_dict(
        {"id": "e1", "task_id": "t1", "start_time": "2025-03-14T09:00:00", "task": {"title": "Plan sprint"}}
    )
    assert entry.task_title == "Plan sprint"
    assert entry.pretty_duration == "In progress..."


def test_offset_timestamps_are_stored_as_naive_local_time():
    utc_start = datetime(2025, 3, 14, 9, tzinfo=timezone.utc)
    entry = TimeEntry(task_id="t1", start_time=utc_start)
    assert entry.start_time.tzinfo is None
    assert entry.start_time == to_local_naive(utc_start)

    closed = entry.close(entry.start_time + timedelta(minutes=5), 300)
    assert closed.end_time - closed.start_time == timedelta(minutes=5)


def test_to_local_naive_leaves_naive_values_alone():
    assert to_local_naive(NOW) is NOW
