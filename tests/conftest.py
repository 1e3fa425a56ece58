"""Pytest configuration and fixtures for upm tests."""
import logging
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from upm.core.config import Config  # noqa: E402
from upm.core.store import TaskStore  # noqa: E402
from upm.core.task import Task, TaskState, Subtask, SubtaskStatus, HourMode  # noqa: E402


SAMPLE_CSV = """# Website Redesign - Project Progress Report
Description: Refresh the marketing site
Project Lead: Jane Doe
Budget: $12,500.00

Task,Phase,Category,Estimated Hours,Actual Hours,Status,Notes
Design mockups,Planning,Design,8,10,complete,"Client approved, v2"
Build pages,Build Out,Development,24,6,in progress,
Launch,Release,Ops,4,,,
"""


@pytest.fixture(autouse=True)
def reset_upm_logger():
    """Drop handlers the CLI attaches to the package logger between tests."""
    yield
    logger = logging.getLogger("upm")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_csv() -> str:
    """CSV with a metadata block and three tasks."""
    return SAMPLE_CSV


@pytest.fixture
def sample_csv_file(tmp_path: Path) -> Path:
    """SAMPLE_CSV written to disk."""
    path = tmp_path / "website.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def temp_config(tmp_path: Path) -> Config:
    """Config pointing at an uninitialized workspace in tmp_path."""
    return Config(workspace_dir=str(tmp_path / ".upm"))


@pytest.fixture
def workspace(temp_config: Config) -> Config:
    """Config with an initialized workspace."""
    temp_config.init_workspace()
    return temp_config


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults."""
    def _make(task_id: str = "t1", name: str = "Task", hours: float = 0.0, **kwargs) -> Task:
        kwargs.setdefault("base_est_hours", hours)
        kwargs.setdefault("adjusted_est_hours", hours)
        return Task(id=task_id, name=name, **kwargs)
    return _make


@pytest.fixture
def store(make_task) -> TaskStore:
    """Store with two manual tasks and one auto-hours task with subtasks."""
    subtasks = [
        Subtask(id="s1", name="Wireframe", order=0, est_hours=2.0),
        Subtask(id="s2", name="Review", order=1, est_hours=3.5, status=SubtaskStatus.COMPLETED,
                completed_date="2024-01-01T10:00:00"),
    ]
    tasks = [
        make_task("t1", "Design", 8.0, phase="planning", phase_title="Planning", category="Design"),
        make_task("t2", "Build", 24.0, phase="build", phase_title="Build", category="Development"),
        make_task("t3", "Polish", 99.0, subtask_hour_mode=HourMode.AUTO, subtasks=subtasks),
    ]
    states = {t.id: TaskState(est_hours=t.adjusted_est_hours) for t in tasks}
    return TaskStore(tasks, states)
