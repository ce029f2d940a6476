from datetime import datetime, timedelta

import pytest

from taskpulse.core.exceptions import ValidationError
from taskpulse.core.models import Priority
from taskpulse.core.task_filter import StatusFilter, filter_tasks

from helpers import make_task

BASE = datetime(2025, 3, 14, 9, 0, 0)


@pytest.fixture
def tasks():
    return [
        make_task("Write Report", BASE + timedelta(hours=3), priority="high", description="quarterly numbers"),
        make_task("Call plumber", BASE + timedelta(hours=2), completed=True, priority="low"),
        make_task("Review PR", BASE + timedelta(hours=1), priority="high", description="Report generator"),
        make_task("Groceries", BASE, completed=True, priority="medium"),
    ]


def test_no_filters_keep_everything_in_order(tasks):
    assert filter_tasks(tasks, "", "all", "all") == tasks


def test_search_is_case_insensitive_on_title_and_description(tasks):
    result = filter_tasks(tasks, "  REPORT ")
    assert [task.title for task in result] == ["Write Report", "Review PR"]


def test_search_ignores_missing_description(tasks):
    assert filter_tasks(tasks, "numbers") == [tasks[0]]
    assert filter_tasks(tasks, "plumb") == [tasks[1]]


def test_status_filters(tasks):
    assert [t.title for t in filter_tasks(tasks, status=StatusFilter.COMPLETED)] == ["Call plumber", "Groceries"]
    assert [t.title for t in filter_tasks(tasks, status="pending")] == ["Write Report", "Review PR"]


def test_filters_compose(tasks):
    result = filter_tasks(tasks, "r", status="pending", priority=Priority.HIGH)
    assert [task.title for task in result] == ["Write Report", "Review PR"]
    assert filter_tasks(tasks, "groceries", status="pending") == []


def test_unknown_filter_values_rejected(tasks):
    with pytest.raises(ValidationError):
        filter_tasks(tasks, status="archived")
    with pytest.raises(ValidationError):
        filter_tasks(tasks, priority="urgent")
