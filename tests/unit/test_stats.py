"""Unit tests for upm.core.stats module."""
import datetime as dt

import pytest

from upm.core.stats import (
    calculate_burn_rate,
    calculate_percent_complete,
    calculate_phase_hours,
    calculate_progress,
    calculate_time_breakdown,
    calculate_time_variance,
    calculate_time_variance_percent,
    estimate_completion_date,
    get_at_risk_tasks,
    get_category_stats,
    get_critical_path_tasks,
    get_phase_stats,
)
from upm.core.task import TaskState, TaskStatus


@pytest.fixture
def tracked(store):
    """Store tasks with mixed progress."""
    store.update_task_state("t1", "status", TaskStatus.COMPLETE)
    store.update_task_state("t1", "actual_hours", "10")
    store.update_task_state("t2", "status", TaskStatus.IN_PROGRESS)
    store.update_task_state("t2", "actual_hours", "4")
    return store.tasks, store.task_states


class TestCalculateProgress:
    """Tests for calculate_progress function."""

    def test_counts_and_hours(self, tracked):
        """Statuses are counted and hours summed."""
        tasks, states = tracked
        stats = calculate_progress(tasks, states)

        assert stats.total == 3
        assert stats.completed == 1
        assert stats.in_progress == 1
        assert stats.blocked == 0
        assert stats.pending == 1
        assert stats.total_est == 131.0
        assert stats.total_actual == 14.0
        assert stats.overruns == 1
        assert stats.percent_complete == 33
        assert stats.variance == -117.0

    def test_tasks_without_state(self, make_task):
        """Tasks without state count toward the total only."""
        stats = calculate_progress([make_task("a", hours=5.0)], {})
        assert stats.total == 1
        assert stats.total_est == 0.0
        assert stats.pending == 1

    def test_empty(self):
        """No tasks gives zeros."""
        stats = calculate_progress([], {})
        assert stats.total == 0
        assert stats.percent_complete == 0


class TestSimpleCalculations:
    """Tests for the arithmetic helpers."""

    def test_percent_complete(self):
        """Rounded percentage."""
        assert calculate_percent_complete(1, 3) == 33
        assert calculate_percent_complete(0, 0) == 0

    def test_variance(self):
        """Actual minus estimate."""
        assert calculate_time_variance(12.0, 10.0) == 2.0

    def test_variance_percent(self):
        """Variance relative to estimate."""
        assert calculate_time_variance_percent(12.0, 10.0) == 20
        assert calculate_time_variance_percent(5.0, 0.0) == 0

    def test_burn_rate(self):
        """Hours per day."""
        assert calculate_burn_rate(40.0, 5) == 8.0
        assert calculate_burn_rate(40.0, 0) == 0.0


class TestGrouping:
    """Tests for phase and category statistics."""

    def test_phase_stats(self, tracked):
        """Only tasks in the phase are counted."""
        tasks, states = tracked
        stats = get_phase_stats(tasks, states, "planning")
        assert stats.total == 1
        assert stats.completed == 1

    def test_category_stats(self, tracked):
        """Only tasks in the category are counted."""
        tasks, states = tracked
        stats = get_category_stats(tasks, states, "Development")
        assert stats.total == 1
        assert stats.in_progress == 1

    def test_critical_path(self, make_task):
        """Only flagged tasks are returned."""
        tasks = [make_task("a"), make_task("b", critical_path=True)]
        assert [t.id for t in get_critical_path_tasks(tasks)] == ["b"]


class TestEstimates:
    """Tests for completion estimates and risk."""

    def test_completion_date(self, tracked):
        """Remaining hours are spread over working days."""
        tasks, states = tracked
        today = dt.date(2024, 1, 1)
        finish = estimate_completion_date(tasks, states, hours_per_day=8, today=today)
        assert finish == today + dt.timedelta(days=15)

    def test_completion_date_needs_a_completed_task(self, store):
        """Nothing complete means no estimate."""
        assert estimate_completion_date(store.tasks, store.task_states) is None

    def test_at_risk(self, tracked):
        """Tasks over estimate are at risk."""
        tasks, states = tracked
        assert [t.id for t in get_at_risk_tasks(tasks, states)] == ["t1"]


class TestTimeBreakdown:
    """Tests for per-task hours."""

    def test_breakdown(self, tracked):
        """Subtask sums replace task hours when subtasks exist."""
        tasks, states = tracked
        rows = {row.task.id: row for row in calculate_time_breakdown(tasks, states)}

        assert (rows["t1"].est, rows["t1"].actual) == (8.0, 10.0)
        assert rows["t1"].variance == 2.0
        assert rows["t1"].percent_complete == 125.0
        assert (rows["t3"].est, rows["t3"].actual) == (5.5, 0.0)

    def test_falls_back_to_adjusted_hours(self, make_task):
        """Without state the adjusted estimate is used."""
        rows = calculate_time_breakdown([make_task("a", hours=3.0)], {})
        assert rows[0].est == 3.0
        assert rows[0].percent_complete == 0.0

    def test_phase_hours(self, tracked):
        """Hours are summed per phase key."""
        tasks, states = tracked
        hours = calculate_phase_hours(tasks, states)
        assert hours["planning"] == (8.0, 10.0)
        assert hours["build"] == (24.0, 4.0)
        assert hours["imported"] == (5.5, 0.0)

    def test_state_estimate_wins(self, make_task):
        """A tracked estimate overrides the task's own hours."""
        task = make_task("a", hours=3.0)
        rows = calculate_time_breakdown([task], {"a": TaskState(est_hours=7.0)})
        assert rows[0].est == 7.0
