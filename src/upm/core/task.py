"""Task, subtask and task-state records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

from ..utils.helpers import parse_hours


class TaskStatus(str, Enum):
    """Progress status tracked for a task."""
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    COMPLETE = 'complete'
    BLOCKED = 'blocked'
    ON_HOLD = 'on-hold'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'TaskStatus':
        """Read a loosely written status ("In Progress", "done") or default to pending."""
        if not raw:
            return cls.PENDING
        key = '-'.join(str(raw).strip().lower().replace('_', ' ').split())
        aliases = {
            'completed': cls.COMPLETE,
            'done': cls.COMPLETE,
            'in-progress': cls.IN_PROGRESS,
            'started': cls.IN_PROGRESS,
            'hold': cls.ON_HOLD,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return cls.PENDING


class SubtaskStatus(str, Enum):
    """Subtask status enumeration."""
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    BLOCKED = 'blocked'
    COMPLETED = 'completed'

    def __str__(self):
        return self.value


class HourMode(str, Enum):
    """Where a task's estimated hours come from."""
    MANUAL = 'manual'
    AUTO = 'auto'

    def __str__(self):
        return self.value


def normalize_phase(phase_title: str) -> str:
    """Phase key for a display title: lowercased, whitespace runs as underscores."""
    return '_'.join(phase_title.lower().split())


@dataclass
class Subtask:
    """
    A step inside a task.

    `order` defines display and iteration order within the parent; values
    need not be contiguous.
    """

    id: str
    name: str
    order: int = 0
    status: SubtaskStatus = SubtaskStatus.PENDING
    est_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    notes: str = ''
    completed_date: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.status, str):
            self.status = SubtaskStatus(self.status)

    @property
    def is_completed(self) -> bool:
        return self.status == SubtaskStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert subtask to its wire dictionary."""
        data: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'order': self.order,
            'status': str(self.status),
        }
        if self.est_hours is not None:
            data['estHours'] = self.est_hours
        if self.actual_hours is not None:
            data['actualHours'] = self.actual_hours
        if self.notes:
            data['notes'] = self.notes
        if self.completed_date:
            data['completedDate'] = self.completed_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Subtask':
        """Create subtask from dictionary."""
        est = data.get('estHours')
        actual = data.get('actualHours')
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            order=int(data.get('order', 0)),
            status=SubtaskStatus(data.get('status', 'pending')),
            est_hours=parse_hours(est) if est is not None else None,
            actual_hours=parse_hours(actual) if actual is not None else None,
            notes=data.get('notes') or '',
            completed_date=data.get('completedDate'),
        )


@dataclass
class Task:
    """
    Planned unit of work.

    Wire format (camelCase keys, shared with CSV/JSON exports):
        id: string
        task: string
        phase: normalized phase key
        phaseTitle: display title
        category: string
        baseEstHours: number
        adjustedEstHours: number
        notes: string (optional)
        criticalPath: boolean (optional)
        dependencies: [task_id] (optional)
        subtaskHourMode: manual|auto (optional)
        subtasks: [subtask] (optional)
    """

    id: str
    name: str
    phase: str = 'imported'
    phase_title: str = 'Imported'
    category: str = 'Other'
    base_est_hours: float = 0.0
    adjusted_est_hours: float = 0.0
    notes: Optional[str] = None
    critical_path: bool = False
    dependencies: List[str] = field(default_factory=list)
    subtask_hour_mode: HourMode = HourMode.MANUAL
    subtasks: List[Subtask] = field(default_factory=list)

    def __post_init__(self):
        if isinstance(self.subtask_hour_mode, str):
            self.subtask_hour_mode = HourMode(self.subtask_hour_mode)

    def sorted_subtasks(self) -> List[Subtask]:
        """Subtasks in display order (stable on `order`)."""
        return sorted(self.subtasks, key=lambda st: st.order)

    def to_dict(self) -> Dict[str, Any]:
        """Convert task to its wire dictionary."""
        data: Dict[str, Any] = {
            'id': self.id,
            'task': self.name,
            'phase': self.phase,
            'phaseTitle': self.phase_title,
            'category': self.category,
            'baseEstHours': self.base_est_hours,
            'adjustedEstHours': self.adjusted_est_hours,
        }
        if self.notes:
            data['notes'] = self.notes
        if self.critical_path:
            data['criticalPath'] = True
        if self.dependencies:
            data['dependencies'] = list(self.dependencies)
        if self.subtask_hour_mode != HourMode.MANUAL:
            data['subtaskHourMode'] = str(self.subtask_hour_mode)
        if self.subtasks:
            data['subtasks'] = [st.to_dict() for st in self.subtasks]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        """Create task from dictionary."""
        return cls(
            id=str(data.get('id', '')),
            name=data.get('task', ''),
            phase=data.get('phase', 'imported'),
            phase_title=data.get('phaseTitle', 'Imported'),
            category=data.get('category', 'Other'),
            base_est_hours=parse_hours(data.get('baseEstHours')),
            adjusted_est_hours=parse_hours(data.get('adjustedEstHours')),
            notes=data.get('notes'),
            critical_path=bool(data.get('criticalPath', False)),
            dependencies=list(data.get('dependencies') or []),
            subtask_hour_mode=HourMode(data.get('subtaskHourMode', 'manual')),
            subtasks=[Subtask.from_dict(st) for st in data.get('subtasks') or []],
        )

    def __str__(self) -> str:
        return f"Task({self.id}: {self.name} [{self.phase_title}])"


@dataclass
class TaskState:
    """
    Tracked progress for a task, kept apart from the plan itself.

    `actual_hours` is free text as typed by the user; use `actual_hours_value`
    to read it as a number.
    """

    status: TaskStatus = TaskStatus.PENDING
    est_hours: float = 0.0
    actual_hours: str = ''
    notes: str = ''

    def __post_init__(self):
        if isinstance(self.status, str):
            self.status = TaskStatus.parse(self.status)

    @property
    def actual_hours_value(self) -> float:
        return parse_hours(self.actual_hours)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': str(self.status),
            'estHours': self.est_hours,
            'actualHours': self.actual_hours,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TaskState':
        actual = data.get('actualHours')
        return cls(
            status=TaskStatus.parse(data.get('status')),
            est_hours=parse_hours(data.get('estHours')),
            actual_hours='' if actual is None else str(actual),
            notes=data.get('notes') or '',
        )


def calculate_task_hours(task: Task) -> float:
    """
    Estimated hours for a task.

    In auto mode the estimate is the sum of subtask estimates and the
    task's own adjusted hours are ignored.
    """
    if task.subtask_hour_mode == HourMode.AUTO:
        return sum(st.est_hours or 0.0 for st in task.subtasks)
    return task.adjusted_est_hours
