"""Unit tests for upm.core.timelog module."""
import datetime as dt

import pytest

from upm.core.timelog import (
    TimeLogEntry,
    calculate_time_log_stats,
    filter_time_logs,
    get_daily_totals,
    parse_log_date,
)


def _entry(entry_id, task_id="t1", date="2024-03-04", hours=1.0, **kwargs):
    kwargs.setdefault("task_name", task_id.upper())
    return TimeLogEntry(id=entry_id, task_id=task_id, date=date, hours=hours, **kwargs)


@pytest.fixture
def entries():
    return [
        _entry("a", "t1", "2024-03-04", 2.0, notes="Kickoff meeting"),
        _entry("b", "t2", "2024-03-04", 1.5),
        _entry("c", "t1", "2024-03-06", 3.0, subtask_id="s1", subtask_name="Wireframe"),
        _entry("d", "t2", "2024-03-05", 0.5),
    ]


class TestParseLogDate:
    """Tests for parse_log_date function."""

    def test_iso_date(self):
        assert parse_log_date(" 2024-03-04 ") == "2024-03-04"

    def test_empty_is_today(self):
        assert parse_log_date(None) == dt.date.today().isoformat()

    def test_invalid(self):
        """Non-ISO dates are rejected with a readable message."""
        with pytest.raises(ValueError, match="YYYY-MM-DD"):
            parse_log_date("4 March")


class TestTimeLogEntry:
    """Tests for TimeLogEntry serialization."""

    def test_task_entry_dict(self):
        """Task entries omit subtask fields."""
        data = _entry("a", created_at="2024-03-04T09:00:00").to_dict()
        assert data == {
            "id": "a",
            "taskId": "t1",
            "taskName": "T1",
            "date": "2024-03-04",
            "hours": 1.0,
            "createdAt": "2024-03-04T09:00:00",
        }

    def test_from_dict(self):
        """Wire keys map back onto fields, with lenient hours."""
        entry = TimeLogEntry.from_dict({
            "id": "x", "taskId": "t1", "taskName": "Design", "date": "2024-03-04",
            "hours": "2.5", "subtaskId": "s1", "subtaskName": "Wireframe", "notes": "n",
        })
        assert entry.hours == 2.5
        assert entry.subtask_name == "Wireframe"
        assert entry.notes == "n"
        assert entry.created_at

    def test_from_dict_bad_date(self):
        with pytest.raises(ValueError):
            TimeLogEntry.from_dict({"id": "x", "taskId": "t1", "date": "yesterday", "hours": 1})


class TestFilterTimeLogs:
    """Tests for filter_time_logs function."""

    def test_most_recent_first(self, entries):
        assert [e.id for e in filter_time_logs(entries)] == ["c", "d", "a", "b"]

    def test_by_task(self, entries):
        assert [e.id for e in filter_time_logs(entries, task_ids=["t2"])] == ["d", "b"]

    def test_by_subtask(self, entries):
        assert [e.id for e in filter_time_logs(entries, subtask_id="s1")] == ["c"]

    def test_date_range_inclusive(self, entries):
        found = filter_time_logs(entries, start_date="2024-03-05", end_date="2024-03-06")
        assert [e.id for e in found] == ["c", "d"]

    def test_search_names_and_notes(self, entries):
        """Search is case-insensitive over task name, subtask name and notes."""
        assert [e.id for e in filter_time_logs(entries, query="kickoff")] == ["a"]
        assert [e.id for e in filter_time_logs(entries, query="WIRE")] == ["c"]


class TestTotals:
    """Tests for stats and daily totals."""

    def test_stats(self, entries):
        stats = calculate_time_log_stats(entries)
        assert stats.total_entries == 4
        assert stats.total_hours == 7.0
        assert stats.by_task == {"t1": 5.0, "t2": 2.0}
        assert stats.by_date == {"2024-03-04": 3.5, "2024-03-05": 0.5, "2024-03-06": 3.0}

    def test_stats_empty(self):
        stats = calculate_time_log_stats([])
        assert stats.total_entries == 0
        assert stats.by_date == {}

    def test_daily_totals_sorted(self, entries):
        assert get_daily_totals(entries) == [
            ("2024-03-04", 3.5),
            ("2024-03-05", 0.5),
            ("2024-03-06", 3.0),
        ]

    def test_daily_totals_range(self, entries):
        assert get_daily_totals(entries, start_date="2024-03-05") == [
            ("2024-03-05", 0.5),
            ("2024-03-06", 3.0),
        ]
