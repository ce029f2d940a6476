import json

import pytest

from taskpulse.core.exceptions import ImportFormatError
from taskpulse.core.importer import load_tasks, load_time_entries


def test_load_tasks_from_list(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps([{"title": "Write", "created_at": "2025-03-14T09:00:00", "priority": "high"}]),
        encoding="utf-8",
    )
    tasks = load_tasks(path)
    assert len(tasks) == 1
    assert tasks[0].priority.value == "high"


def test_load_time_entries_from_document(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(
        json.dumps(
            {
                "time_entries": [
                    {"task_id": "t1", "start_time": "2025-03-14T09:00:00", "end_time": "2025-03-14T09:10:00", "duration": 600},
                    {"task_id": "t1", "start_time": "2025-03-14T11:00:00"},
                ]
            }
        ),
        encoding="utf-8",
    )
    entries = load_time_entries(path)
    assert [entry.is_closed for entry in entries] == [True, False]


def test_missing_file(tmp_path):
    with pytest.raises(ImportFormatError):
        load_tasks(tmp_path / "nope.json")


def test_malformed_record_reports_index(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            [
                {"title": "ok", "created_at": "2025-03-14T09:00:00"},
                {"title": "bad", "created_at": "yesterday"},
            ]
        ),
        encoding="utf-8",
    )
    with pytest.raises(ImportFormatError, match="Record 2"):
        load_tasks(path)


def test_invalid_json(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text("[", encoding="utf-8")
    with pytest.raises(ImportFormatError):
        load_tasks(path)
