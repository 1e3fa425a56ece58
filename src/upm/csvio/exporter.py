"""CSV export: the progress report, the plain task list and the time log."""

import csv
import datetime as dt
import io
from typing import List, Mapping, Optional, Sequence

from ..core.project import ProjectMeta
from ..core.stats import Stats
from ..core.task import Task, TaskState
from ..core.timelog import TimeLogEntry

REPORT_COLUMNS = [
    'Phase', 'Task', 'Category', 'Estimated Hours', 'Actual Hours',
    'Status', 'Notes', 'Dependencies', 'Critical Path',
]

TASK_COLUMNS = [
    'Task', 'Phase', 'Category', 'Estimated Hours', 'Actual Hours', 'Status', 'Notes',
]

TIME_LOG_COLUMNS = ['Date', 'Task', 'Subtask', 'Hours', 'Notes', 'Created At']


def _one_line(text: str) -> str:
    return ' '.join(text.splitlines())


def _format_number(value: float) -> str:
    return f"{value:g}"


def _write_rows(buffer: io.StringIO, header: Sequence[str], rows: List[List[str]]) -> None:
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(header)
    quoted = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    quoted.writerows(rows)


def _task_values(task: Task, state: TaskState) -> List[str]:
    return [
        task.name,
        task.phase_title,
        task.category,
        _format_number(state.est_hours or 0),
        state.actual_hours or '',
        str(state.status),
        _one_line(state.notes or ''),
    ]


def export_to_csv(
    tasks: Sequence[Task],
    task_states: Mapping[str, TaskState],
    meta: ProjectMeta,
    stats: Stats,
    generated: Optional[dt.datetime] = None
) -> str:
    """Full progress report: title, metadata block, summary, then the task table."""
    generated = generated or dt.datetime.now()
    out = io.StringIO()

    out.write(f"# {meta.name or 'Untitled'} - Project Progress Report\n")
    out.write(f"Generated: {generated.strftime('%Y-%m-%d %H:%M')}\n")
    if meta.description:
        out.write(f"Description: {_one_line(meta.description)}\n")
    if meta.initial_prompt:
        out.write(f"Initial Prompt: {_one_line(meta.initial_prompt)}\n")
    out.write(f"Project Type: {meta.project_type or 'custom'}\n")
    out.write(f"Experience Level: {meta.experience_level or 'intermediate'}\n")
    out.write(f"Project Lead: {meta.lead or 'Not specified'}\n")
    out.write(f"Status: {meta.status or 'active'}\n")
    if meta.start_date:
        out.write(f"Start Date: {meta.start_date}\n")
    if meta.target_end_date:
        out.write(f"Target End Date: {meta.target_end_date}\n")
    if meta.budget:
        out.write(f"Budget: ${meta.budget:,.2f}\n")
    if meta.timeline:
        out.write(f"Timeline: {meta.timeline}\n")
    out.write("\n")

    out.write("SUMMARY STATISTICS\n")
    out.write(f"Total Tasks: {stats.total}\n")
    out.write(f"Completed: {stats.completed}\n")
    out.write(f"In Progress: {stats.in_progress}\n")
    out.write(f"Blocked: {stats.blocked}\n")
    out.write(f"Pending: {stats.pending}\n")
    out.write("\n")
    out.write(f"Total Estimated Hours: {stats.total_est:.1f}\n")
    out.write(f"Total Actual Hours: {stats.total_actual:.1f}\n")
    out.write(f"Variance: {stats.variance:.1f} hours\n")
    out.write(f"Tasks Over Estimate: {stats.overruns}\n")
    out.write("\n")

    out.write("TASK DETAILS\n")
    rows = []
    for task in tasks:
        state = task_states.get(task.id) or TaskState()
        name, phase_title, category, est, actual, status, notes = _task_values(task, state)
        rows.append([
            phase_title, name, category, est, actual, status, notes,
            ';'.join(task.dependencies),
            'Yes' if task.critical_path else 'No',
        ])
    _write_rows(out, REPORT_COLUMNS, rows)

    return out.getvalue()


def export_tasks_to_csv(tasks: Sequence[Task], task_states: Mapping[str, TaskState]) -> str:
    """Plain task table; `import_csv` reads it back."""
    out = io.StringIO()
    rows = [_task_values(t, task_states.get(t.id) or TaskState()) for t in tasks]
    _write_rows(out, TASK_COLUMNS, rows)
    return out.getvalue()


def export_time_logs_to_csv(entries: Sequence[TimeLogEntry]) -> str:
    """Time-log entries, one row each, in the order given."""
    out = io.StringIO()
    rows = [
        [
            e.date,
            e.task_name,
            e.subtask_name or '',
            _format_number(e.hours),
            _one_line(e.notes),
            e.created_at,
        ]
        for e in entries
    ]
    _write_rows(out, TIME_LOG_COLUMNS, rows)
    return out.getvalue()


def default_export_filename(project_name: str, tasks_only: bool = False, today: Optional[dt.date] = None) -> str:
    stamp = (today or dt.date.today()).isoformat()
    if tasks_only:
        return f"tasks_{stamp}.csv"
    return f"project_{'_'.join(project_name.split())}_{stamp}.csv"


def default_time_log_filename(project_name: str, today: Optional[dt.date] = None) -> str:
    stamp = (today or dt.date.today()).isoformat()
    return f"timelog_{'_'.join(project_name.split())}_{stamp}.csv"
