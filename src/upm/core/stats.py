"""Project statistics computed from tasks and their progress states."""

import datetime as dt
import math
from dataclasses import dataclass
from typing import Optional, List, Dict, Mapping, Tuple

from .task import Task, TaskState, TaskStatus


@dataclass
class Stats:
    """Aggregate progress and hours for a set of tasks."""
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    blocked: int = 0
    total_est: float = 0.0
    total_actual: float = 0.0
    overruns: int = 0

    @property
    def pending(self) -> int:
        return self.total - self.completed - self.in_progress - self.blocked

    @property
    def percent_complete(self) -> int:
        return calculate_percent_complete(self.completed, self.total)

    @property
    def variance(self) -> float:
        return calculate_time_variance(self.total_actual, self.total_est)


@dataclass
class TaskHours:
    """Estimated vs actual hours for one task."""
    task: Task
    est: float
    actual: float

    @property
    def variance(self) -> float:
        return self.actual - self.est

    @property
    def percent_complete(self) -> float:
        return (self.actual / self.est) * 100 if self.est > 0 else 0.0


def _status(task_states: Mapping[str, TaskState], task_id: str) -> Optional[TaskStatus]:
    state = task_states.get(task_id)
    return state.status if state else None


def calculate_progress(tasks: List[Task], task_states: Mapping[str, TaskState]) -> Stats:
    """Count statuses and sum hours; tasks without state count toward totals only."""
    stats = Stats(total=len(tasks))

    for task in tasks:
        status = _status(task_states, task.id)
        if status == TaskStatus.COMPLETE:
            stats.completed += 1
        elif status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif status == TaskStatus.BLOCKED:
            stats.blocked += 1

        state = task_states.get(task.id)
        if state:
            est = state.est_hours or 0.0
            actual = state.actual_hours_value
            stats.total_est += est
            stats.total_actual += actual
            if actual > est:
                stats.overruns += 1

    return stats


def calculate_percent_complete(completed: int, total: int) -> int:
    if total == 0:
        return 0
    return round(completed / total * 100)


def calculate_time_variance(total_actual: float, total_est: float) -> float:
    return total_actual - total_est


def calculate_time_variance_percent(total_actual: float, total_est: float) -> int:
    if total_est == 0:
        return 0
    return round((total_actual - total_est) / total_est * 100)


def get_phase_stats(tasks: List[Task], task_states: Mapping[str, TaskState], phase: str) -> Stats:
    return calculate_progress([t for t in tasks if t.phase == phase], task_states)


def get_category_stats(tasks: List[Task], task_states: Mapping[str, TaskState], category: str) -> Stats:
    return calculate_progress([t for t in tasks if t.category == category], task_states)


def estimate_completion_date(
    tasks: List[Task],
    task_states: Mapping[str, TaskState],
    hours_per_day: float = 8,
    today: Optional[dt.date] = None
) -> Optional[dt.date]:
    """
    Project a finish date from remaining estimated hours.

    Returns None until at least one task is complete.
    """
    stats = calculate_progress(tasks, task_states)
    if stats.completed == 0:
        return None

    remaining = stats.total_est - stats.total_actual
    days_remaining = math.ceil(remaining / hours_per_day)
    return (today or dt.date.today()) + dt.timedelta(days=days_remaining)


def get_at_risk_tasks(tasks: List[Task], task_states: Mapping[str, TaskState]) -> List[Task]:
    """Tasks whose actual hours exceed their estimate."""
    at_risk = []
    for task in tasks:
        state = task_states.get(task.id)
        if state and state.actual_hours_value > (state.est_hours or 0.0):
            at_risk.append(task)
    return at_risk


def get_critical_path_tasks(tasks: List[Task]) -> List[Task]:
    return [t for t in tasks if t.critical_path]


def calculate_burn_rate(total_actual: float, days_since_start: float) -> float:
    """Hours burned per day."""
    if days_since_start == 0:
        return 0.0
    return total_actual / days_since_start


def calculate_time_breakdown(
    tasks: List[Task],
    task_states: Mapping[str, TaskState]
) -> List[TaskHours]:
    """
    Per-task hours.

    Tasks with subtasks aggregate subtask hours; others use the tracked
    state, falling back to the task's adjusted estimate.
    """
    rows = []
    for task in tasks:
        if task.subtasks:
            est = sum(st.est_hours or 0.0 for st in task.subtasks)
            actual = sum(st.actual_hours or 0.0 for st in task.subtasks)
        else:
            state = task_states.get(task.id)
            est = (state.est_hours if state else 0.0) or task.adjusted_est_hours or 0.0
            actual = state.actual_hours_value if state else 0.0
        rows.append(TaskHours(task=task, est=est, actual=actual))
    return rows


def calculate_phase_hours(
    tasks: List[Task],
    task_states: Mapping[str, TaskState]
) -> Dict[str, Tuple[float, float]]:
    """Hours summed per phase key, using the same rules as `calculate_time_breakdown`."""
    totals: Dict[str, List[float]] = {}
    for row in calculate_time_breakdown(tasks, task_states):
        bucket = totals.setdefault(row.task.phase, [0.0, 0.0])
        bucket[0] += row.est
        bucket[1] += row.actual
    return {phase: (est, actual) for phase, (est, actual) in totals.items()}
