"""Project metadata and persistence."""

import json
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, List, Dict, Any

from .config import Config
from .store import TaskStore
from .task import Task, TaskState
from .timelog import TimeLogEntry
from ..utils.exceptions import FileOperationError, ProjectNotFoundError, UpmError
from ..utils.helpers import load_yaml, save_yaml, ensure_dir, get_timestamp, generate_id, dumps
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Python field name -> wire key
_META_KEYS = {
    'id': 'id',
    'name': 'name',
    'description': 'description',
    'initial_prompt': 'initialPrompt',
    'project_type': 'projectType',
    'experience_level': 'experienceLevel',
    'lead': 'lead',
    'status': 'status',
    'start_date': 'startDate',
    'target_end_date': 'targetEndDate',
    'budget': 'budget',
    'timeline': 'timeline',
    'created_at': 'createdAt',
    'updated_at': 'updatedAt',
}


@dataclass
class ProjectMeta:
    """
    Project-level fields.

    Every field is optional so the same record describes both a saved
    project and the partial metadata recovered from a CSV header block.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    initial_prompt: Optional[str] = None
    project_type: Optional[str] = None
    experience_level: Optional[str] = None
    lead: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    target_end_date: Optional[str] = None
    budget: Optional[float] = None
    timeline: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def merged_with(self, other: 'ProjectMeta') -> 'ProjectMeta':
        """Copy of self with every field that `other` sets taken from `other`."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for f in fields(other):
            value = getattr(other, f.name)
            if value is not None:
                values[f.name] = value
        return ProjectMeta(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire dictionary, omitting unset fields."""
        return {
            key: getattr(self, attr)
            for attr, key in _META_KEYS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectMeta':
        """Create from wire dictionary; unknown keys are ignored."""
        values = {attr: data.get(key) for attr, key in _META_KEYS.items()}
        if values['budget'] is not None:
            values['budget'] = float(values['budget'])
        return cls(**values)


class Project:
    """A project: metadata plus its task store, persisted as YAML in the workspace."""

    def __init__(self, meta: ProjectMeta, store: Optional[TaskStore] = None):
        if not meta.name or not meta.name.strip():
            raise ValueError("Project must have a name")

        now = get_timestamp()
        self.meta = meta.merged_with(ProjectMeta(
            id=meta.id or generate_id('project'),
            project_type=meta.project_type or 'custom',
            experience_level=meta.experience_level or 'intermediate',
            status=meta.status or 'active',
            created_at=meta.created_at or now,
            updated_at=meta.updated_at or now,
        ))
        self.store = store or TaskStore()

    @property
    def name(self) -> str:
        return self.meta.name or ''

    def touch(self) -> None:
        self.meta.updated_at = get_timestamp()

    def tasks_to_dict(self) -> Dict[str, Any]:
        return {
            'tasks': [t.to_dict() for t in self.store.tasks],
            'taskStates': {tid: s.to_dict() for tid, s in self.store.task_states.items()},
            'timeLogs': [e.to_dict() for e in self.store.time_logs],
        }

    @staticmethod
    def store_from_dict(data: Dict[str, Any]) -> TaskStore:
        tasks = [Task.from_dict(t) for t in data.get('tasks') or []]
        states = {
            tid: TaskState.from_dict(s)
            for tid, s in (data.get('taskStates') or {}).items()
        }
        time_logs = [TimeLogEntry.from_dict(e) for e in data.get('timeLogs') or []]
        return TaskStore(tasks, states, time_logs)

    def save(self, config: Config) -> None:
        """Save project.yaml and tasks.yaml."""
        project_dir = config.get_project_dir(self.name)
        ensure_dir(str(project_dir))

        self.touch()
        save_yaml(self.meta.to_dict(), str(config.get_project_file(self.name)))
        save_yaml(self.tasks_to_dict(), str(config.get_tasks_file(self.name)))

        logger.info(f"Project {self.name} saved to {project_dir}")

    @classmethod
    def load(cls, project_name: str, config: Config) -> 'Project':
        """Load a project by name (or directory slug)."""
        project_file = config.get_project_file(project_name)
        if not project_file.exists():
            raise ProjectNotFoundError(f"Project '{project_name}' not found")

        tasks_file = config.get_tasks_file(project_name)
        try:
            meta = ProjectMeta.from_dict(load_yaml(str(project_file)) or {})
            if tasks_file.exists():
                store = cls.store_from_dict(load_yaml(str(tasks_file)) or {})
            else:
                logger.warning(f"Tasks file not found: {tasks_file}")
                store = TaskStore()
        except (ValueError, TypeError, AttributeError) as e:
            raise UpmError(f"Project '{project_name}' is corrupt: {e}") from e

        project = cls(meta, store)
        logger.debug(f"Project {project.name} loaded with {len(store)} task(s)")
        return project

    @staticmethod
    def delete(project_name: str, config: Config) -> None:
        project_dir = config.get_project_dir(project_name)
        if not config.project_exists(project_name):
            raise ProjectNotFoundError(f"Project '{project_name}' not found")
        shutil.rmtree(project_dir)
        logger.info(f"Project {project_name} deleted")

    @classmethod
    def list_all(cls, config: Config) -> List['Project']:
        return [cls.load(name, config) for name in config.list_projects()]

    # ---- JSON project files ----

    def to_json(self) -> str:
        """Serialize the whole project in the JSON export format."""
        return dumps({'meta': self.meta.to_dict(), **self.tasks_to_dict()}, indent=2)

    def export_json(self, path: Path) -> None:
        try:
            Path(path).write_text(self.to_json(), encoding='utf-8')
        except OSError as e:
            raise FileOperationError(f"Failed to write {path}: {e}") from e

    @classmethod
    def from_json(cls, content: str) -> 'Project':
        """
        Build a project from a JSON export.

        The payload must contain meta, tasks and taskStates, and meta must
        carry id, name and projectType; timeLogs is optional. A new project
        id is assigned. Malformed field values raise UpmError.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise UpmError(f"Failed to parse JSON project file: {e}") from e

        if not isinstance(data, dict) or not all(k in data for k in ('meta', 'tasks', 'taskStates')):
            raise UpmError("Invalid project file format. Missing required fields (meta, tasks, or taskStates).")

        meta_data = data['meta'] or {}
        if not isinstance(meta_data, dict) or not all(meta_data.get(k) for k in ('id', 'name', 'projectType')):
            raise UpmError("Invalid project metadata. Missing required fields (id, name, or projectType).")

        try:
            meta = ProjectMeta.from_dict(meta_data)
            store = cls.store_from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise UpmError(f"Invalid project data: {e}") from e

        meta.id = generate_id('project')
        return cls(meta, store)

    def __str__(self) -> str:
        return f"Project({self.name}: {len(self.store)} tasks [{self.meta.status}])"
