"""Dated time-log entries for tasks and subtasks."""

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable, Tuple

from ..utils.helpers import get_timestamp, parse_hours


def parse_log_date(value: Optional[str]) -> str:
    """ISO date (YYYY-MM-DD) for an entry; today when `value` is empty."""
    if not value:
        return dt.date.today().isoformat()
    try:
        return dt.date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None


@dataclass
class TimeLogEntry:
    """
    Hours spent on a task, or on one of its subtasks, on a given day.

    Task and subtask names are copied in at logging time so the log still
    reads correctly after a rename or a subtask delete.
    """

    id: str
    task_id: str
    task_name: str
    date: str
    hours: float
    subtask_id: Optional[str] = None
    subtask_name: Optional[str] = None
    notes: str = ''
    created_at: str = field(default_factory=get_timestamp)
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'taskId': self.task_id,
            'taskName': self.task_name,
            'date': self.date,
            'hours': self.hours,
            'createdAt': self.created_at,
        }
        if self.subtask_id:
            data['subtaskId'] = self.subtask_id
            data['subtaskName'] = self.subtask_name or ''
        if self.notes:
            data['notes'] = self.notes
        if self.updated_at:
            data['updatedAt'] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeLogEntry':
        return cls(
            id=str(data.get('id', '')),
            task_id=str(data.get('taskId', '')),
            task_name=data.get('taskName', ''),
            date=parse_log_date(data.get('date')),
            hours=parse_hours(data.get('hours')),
            subtask_id=data.get('subtaskId'),
            subtask_name=data.get('subtaskName'),
            notes=data.get('notes') or '',
            created_at=data.get('createdAt') or get_timestamp(),
            updated_at=data.get('updatedAt'),
        )


@dataclass
class TimeLogStats:
    """Totals over a set of entries."""
    total_hours: float = 0.0
    total_entries: int = 0
    by_task: Dict[str, float] = field(default_factory=dict)
    by_date: Dict[str, float] = field(default_factory=dict)


def filter_time_logs(
    entries: Iterable[TimeLogEntry],
    task_ids: Optional[Iterable[str]] = None,
    subtask_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    query: Optional[str] = None
) -> List[TimeLogEntry]:
    """
    Entries matching every given filter, most recent date first.

    `query` is a case-insensitive search over task name, subtask name and
    notes. Date bounds are inclusive.
    """
    wanted = set(task_ids) if task_ids else None
    needle = query.lower() if query else None

    def keep(entry: TimeLogEntry) -> bool:
        if wanted is not None and entry.task_id not in wanted:
            return False
        if subtask_id and entry.subtask_id != subtask_id:
            return False
        if start_date and entry.date < start_date:
            return False
        if end_date and entry.date > end_date:
            return False
        if needle:
            haystack = (entry.task_name, entry.subtask_name or '', entry.notes)
            return any(needle in text.lower() for text in haystack)
        return True

    return sorted((e for e in entries if keep(e)), key=lambda e: e.date, reverse=True)


def calculate_time_log_stats(entries: Iterable[TimeLogEntry]) -> TimeLogStats:
    stats = TimeLogStats()
    for entry in entries:
        stats.total_entries += 1
        stats.total_hours += entry.hours
        stats.by_task[entry.task_id] = stats.by_task.get(entry.task_id, 0.0) + entry.hours
        stats.by_date[entry.date] = stats.by_date.get(entry.date, 0.0) + entry.hours
    return stats


def get_daily_totals(
    entries: Iterable[TimeLogEntry],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> List[Tuple[str, float]]:
    """(date, hours) pairs in date order, optionally bounded (inclusive)."""
    in_range = filter_time_logs(entries, start_date=start_date, end_date=end_date)
    by_date = calculate_time_log_stats(in_range).by_date
    return sorted(by_date.items())
