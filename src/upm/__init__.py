"""
upm - Universal Project Manager core: CSV task import, task/subtask tracking
and project statistics.

Version: 1.0.0
"""

__version__ = '1.0.0'

from .core.config import Config
from .core.project import Project, ProjectMeta
from .core.store import TaskStore
from .core.task import Task, TaskState, TaskStatus, Subtask, SubtaskStatus, HourMode
from .csvio.importer import import_csv, validate_csv, ImportResult

__all__ = [
    'Config',
    'Project',
    'ProjectMeta',
    'TaskStore',
    'Task',
    'TaskState',
    'TaskStatus',
    'Subtask',
    'SubtaskStatus',
    'HourMode',
    'import_csv',
    'validate_csv',
    'ImportResult',
]
