"""Core modules for task tracking and project management."""

from .config import Config
from .task import Task, TaskStatus, TaskState, Subtask, SubtaskStatus, HourMode, calculate_task_hours
from .store import TaskStore, SubtaskProgress
from .project import Project, ProjectMeta
from .timelog import TimeLogEntry, TimeLogStats
from .validator import Validator, ValidationResult

__all__ = [
    'Config',
    'Task',
    'TaskStatus',
    'TaskState',
    'Subtask',
    'SubtaskStatus',
    'HourMode',
    'calculate_task_hours',
    'TaskStore',
    'SubtaskProgress',
    'Project',
    'ProjectMeta',
    'TimeLogEntry',
    'TimeLogStats',
    'Validator',
    'ValidationResult',
]
