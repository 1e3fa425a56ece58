"""In-memory task and subtask store."""

from dataclasses import dataclass, replace
from typing import Optional, List, Dict, Any, Iterable, Sequence, Union

from .timelog import TimeLogEntry, parse_log_date
from .task import (
    Task,
    TaskState,
    TaskStatus,
    Subtask,
    SubtaskStatus,
    calculate_task_hours,
)
from ..utils.exceptions import TaskNotFoundError, SubtaskNotFoundError, TimeLogNotFoundError
from ..utils.helpers import generate_id, get_timestamp
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Time multipliers per experience level
EXPERIENCE_MULTIPLIERS = {
    'novice': 1.5,
    'intermediate': 1.0,
    'expert': 0.75,
}

BULK_HOUR_MODES = ('divide', 'custom', 'none')

_STATE_FIELDS = {'status', 'est_hours', 'actual_hours', 'notes'}


@dataclass
class SubtaskProgress:
    """Subtask completion for one task."""
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(self.completed / self.total * 100)


class TaskStore:
    """
    Task list plus a side mapping of per-task progress state.

    Every mutation rebinds `tasks`, `task_states` and `time_logs` to new
    containers built from replaced records, so a snapshot obtained earlier
    never changes under its holder. Task ids are unique; a task's state and
    time-log entries are removed with it. The store has a single owner and
    no locking.
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        task_states: Optional[Dict[str, TaskState]] = None,
        time_logs: Iterable[TimeLogEntry] = ()
    ):
        self._tasks: List[Task] = list(tasks)
        self._task_states: Dict[str, TaskState] = dict(task_states or {})
        self._time_logs: List[TimeLogEntry] = list(time_logs)

    @property
    def tasks(self) -> List[Task]:
        """Current task list (a copy)."""
        return list(self._tasks)

    @property
    def task_states(self) -> Dict[str, TaskState]:
        """Current state mapping (a copy)."""
        return dict(self._task_states)

    @property
    def time_logs(self) -> List[TimeLogEntry]:
        """Time-log entries in the order they were logged (a copy)."""
        return list(self._time_logs)

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- lookups ----

    def get_task(self, task_id: str) -> Task:
        """Get task by ID."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(f"Task '{task_id}' not found")

    def has_task(self, task_id: str) -> bool:
        return any(t.id == task_id for t in self._tasks)

    def get_task_state(self, task_id: str) -> TaskState:
        """State for a task, or a fresh pending state if none is tracked."""
        return self._task_states.get(task_id) or TaskState()

    def _replace_task(self, task_id: str, **changes: Any) -> Task:
        if 'id' in changes and changes['id'] != task_id:
            raise ValueError("Task id cannot be changed")
        updated = replace(self.get_task(task_id), **changes)
        self._tasks = [updated if t.id == task_id else t for t in self._tasks]
        return updated

    # ---- tasks ----

    def add_task(self, task: Task, state: Optional[TaskState] = None) -> Task:
        """Append a task and initialize its progress state."""
        if self.has_task(task.id):
            raise ValueError(f"Task '{task.id}' already exists")

        self._tasks = self._tasks + [task]
        self._task_states = {
            **self._task_states,
            task.id: state or TaskState(est_hours=task.adjusted_est_hours),
        }
        logger.debug(f"Task {task.id} added")
        return task

    def add_tasks(
        self,
        tasks: Sequence[Task],
        states: Optional[Dict[str, TaskState]] = None
    ) -> int:
        """Merge a batch of tasks (typically an import) and return how many were added."""
        states = states or {}
        seen = {t.id for t in self._tasks}
        added = []
        for t in tasks:
            if t.id not in seen:
                seen.add(t.id)
                added.append(t)

        self._tasks = self._tasks + added
        self._task_states = {
            **self._task_states,
            **{t.id: states.get(t.id) or TaskState(est_hours=t.adjusted_est_hours) for t in added},
        }

        if len(added) != len(tasks):
            logger.warning(f"Skipped {len(tasks) - len(added)} task(s) with duplicate ids")
        logger.info(f"Merged {len(added)} task(s) into store")
        return len(added)

    def update_task(self, task_or_id: Union[Task, str], **changes: Any) -> Task:
        """
        Update a task.

        Accepts either a full replacement Task or a task id plus field changes.
        """
        if isinstance(task_or_id, Task):
            task = task_or_id
            self.get_task(task.id)
            self._tasks = [task if t.id == task.id else t for t in self._tasks]
            return task
        return self._replace_task(task_or_id, **changes)

    def delete_task(self, task_id: str) -> None:
        """Delete a task together with its progress state and time-log entries."""
        self.get_task(task_id)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._task_states = {k: v for k, v in self._task_states.items() if k != task_id}
        self._time_logs = [e for e in self._time_logs if e.task_id != task_id]
        logger.debug(f"Task {task_id} deleted")

    def reorder_tasks(self, task_ids: Sequence[str]) -> None:
        """
        Put tasks in the given order.

        Tasks not named keep their relative order after the named ones.
        """
        by_id = {t.id: t for t in self._tasks}
        missing = [tid for tid in task_ids if tid not in by_id]
        if missing:
            raise TaskNotFoundError(f"Task '{missing[0]}' not found")

        seen = set()
        ordered = []
        for tid in task_ids:
            if tid not in seen:
                seen.add(tid)
                ordered.append(by_id[tid])
        self._tasks = ordered + [t for t in self._tasks if t.id not in seen]

    def move_task(self, task_id: str, to_index: int) -> None:
        """Move one task to a new position (drag and drop)."""
        task = self.get_task(task_id)
        remaining = [t for t in self._tasks if t.id != task_id]
        to_index = max(0, min(to_index, len(remaining)))
        self._tasks = remaining[:to_index] + [task] + remaining[to_index:]

    def move_task_to_phase(self, task_id: str, phase: str, phase_title: str) -> Task:
        return self._replace_task(task_id, phase=phase, phase_title=phase_title)

    # ---- task states ----

    def update_task_state(self, task_id: str, field_name: str, value: Any) -> TaskState:
        """Set one progress field for a task."""
        if field_name not in _STATE_FIELDS:
            raise ValueError(f"Unknown task state field: {field_name}")
        self.get_task(task_id)

        if field_name == 'status':
            value = TaskStatus.parse(value) if not isinstance(value, TaskStatus) else value
        elif field_name == 'actual_hours':
            value = '' if value is None else str(value)

        state = replace(self.get_task_state(task_id), **{field_name: value})
        self._task_states = {**self._task_states, task_id: state}
        return state

    def bulk_update_task_states(self, updates: Dict[str, Dict[str, Any]]) -> None:
        """Apply partial state changes to several tasks at once."""
        new_states = dict(self._task_states)
        for task_id, changes in updates.items():
            self.get_task(task_id)
            unknown = set(changes) - _STATE_FIELDS
            if unknown:
                raise ValueError(f"Unknown task state field(s): {', '.join(sorted(unknown))}")
            new_states[task_id] = replace(new_states.get(task_id) or TaskState(), **changes)
        self._task_states = new_states

    def apply_experience_level(self, level: str) -> None:
        """Rescale adjusted hours from base hours for an experience level."""
        try:
            multiplier = EXPERIENCE_MULTIPLIERS[level]
        except KeyError:
            raise ValueError(f"Unknown experience level: {level}") from None

        self._tasks = [
            replace(t, adjusted_est_hours=round(t.base_est_hours * multiplier, 2))
            for t in self._tasks
        ]
        self.bulk_update_task_states({
            t.id: {'est_hours': t.adjusted_est_hours} for t in self._tasks
        })
        logger.info(f"Applied experience level {level} (x{multiplier})")

    # ---- subtasks ----

    def _get_subtask(self, task: Task, subtask_id: str) -> Subtask:
        for st in task.subtasks:
            if st.id == subtask_id:
                return st
        raise SubtaskNotFoundError(f"Subtask '{subtask_id}' not found on task '{task.id}'")

    def _next_order(self, task: Task) -> int:
        return max((st.order for st in task.subtasks), default=-1) + 1

    def add_subtask(
        self,
        task_id: str,
        name: str,
        est_hours: Optional[float] = None,
        notes: str = ''
    ) -> Subtask:
        """Append a subtask after the last one in order."""
        task = self.get_task(task_id)
        subtask = Subtask(
            id=generate_id('subtask'),
            name=name,
            order=self._next_order(task),
            est_hours=est_hours,
            notes=notes,
        )
        self._replace_task(task_id, subtasks=task.subtasks + [subtask])
        return subtask

    def bulk_add_subtasks(
        self,
        task_id: str,
        names: Iterable[str],
        hour_mode: str = 'divide',
        hours: Optional[float] = None
    ) -> List[Subtask]:
        """
        Add one subtask per non-blank name.

        Hour modes:
            divide: split the task's estimated hours evenly
            custom: give each subtask `hours`
            none:   leave estimates empty
        """
        if hour_mode not in BULK_HOUR_MODES:
            raise ValueError(f"Unknown hour mode: {hour_mode}")

        task = self.get_task(task_id)
        lines = [n.strip() for n in names if n and n.strip()]
        if not lines:
            return []

        per_subtask: Optional[float] = None
        if hour_mode == 'divide':
            task_hours = calculate_task_hours(task)
            if task_hours > 0:
                per_subtask = task_hours / len(lines)
        elif hour_mode == 'custom':
            if hours is None or hours < 0:
                raise ValueError("Custom hour mode needs a non-negative number of hours")
            per_subtask = float(hours)

        start = self._next_order(task)
        new_subtasks = [
            Subtask(id=generate_id('subtask'), name=line, order=start + i, est_hours=per_subtask)
            for i, line in enumerate(lines)
        ]
        self._replace_task(task_id, subtasks=task.subtasks + new_subtasks)
        logger.debug(f"Added {len(new_subtasks)} subtask(s) to task {task_id}")
        return new_subtasks

    def update_subtask(self, task_id: str, subtask_id: str, **changes: Any) -> Subtask:
        task = self.get_task(task_id)
        updated = replace(self._get_subtask(task, subtask_id), **changes)
        self._replace_task(
            task_id,
            subtasks=[updated if st.id == subtask_id else st for st in task.subtasks],
        )
        return updated

    def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        task = self.get_task(task_id)
        self._get_subtask(task, subtask_id)
        self._replace_task(task_id, subtasks=[st for st in task.subtasks if st.id != subtask_id])

    def reorder_subtasks(self, task_id: str, subtask_ids: Sequence[str]) -> List[Subtask]:
        """Renumber subtasks so their `order` follows `subtask_ids`; unnamed ones follow."""
        task = self.get_task(task_id)
        for sid in subtask_ids:
            self._get_subtask(task, sid)

        position = {sid: i for i, sid in enumerate(dict.fromkeys(subtask_ids))}
        rest = [st for st in task.sorted_subtasks() if st.id not in position]
        ordered = sorted(
            (st for st in task.subtasks if st.id in position),
            key=lambda st: position[st.id],
        ) + rest
        renumbered = [replace(st, order=i) for i, st in enumerate(ordered)]
        self._replace_task(task_id, subtasks=renumbered)
        return renumbered

    def toggle_subtask_status(self, task_id: str, subtask_id: str) -> Subtask:
        """Flip a subtask between completed and pending, stamping the completion time."""
        subtask = self._get_subtask(self.get_task(task_id), subtask_id)
        if subtask.is_completed:
            return self.update_subtask(
                task_id, subtask_id, status=SubtaskStatus.PENDING, completed_date=None
            )
        return self.update_subtask(
            task_id, subtask_id, status=SubtaskStatus.COMPLETED, completed_date=get_timestamp()
        )

    # ---- time log ----

    def log_time(
        self,
        task_id: str,
        hours: float,
        date: Optional[str] = None,
        notes: str = '',
        subtask_id: Optional[str] = None
    ) -> TimeLogEntry:
        """
        Record hours against a task or one of its subtasks.

        The hours are also added to the running actual: the task state's
        `actual_hours` for a task entry, the subtask's `actual_hours` for a
        subtask entry.
        """
        if hours <= 0:
            raise ValueError("Logged hours must be positive")
        task = self.get_task(task_id)
        subtask = self._get_subtask(task, subtask_id) if subtask_id else None

        entry = TimeLogEntry(
            id=generate_id('timelog'),
            task_id=task_id,
            task_name=task.name,
            date=parse_log_date(date),
            hours=float(hours),
            subtask_id=subtask.id if subtask else None,
            subtask_name=subtask.name if subtask else None,
            notes=notes or '',
        )
        self._add_actual_hours(entry, entry.hours)
        self._time_logs = self._time_logs + [entry]
        logger.debug(f"Logged {entry.hours:g}h on {entry.date} for task {task_id}")
        return entry

    def get_time_log(self, log_id: str) -> TimeLogEntry:
        for entry in self._time_logs:
            if entry.id == log_id:
                return entry
        raise TimeLogNotFoundError(f"Time log entry '{log_id}' not found")

    def delete_time_log(self, log_id: str) -> None:
        """Remove an entry and take its hours back off the running actual."""
        entry = self.get_time_log(log_id)
        self._add_actual_hours(entry, -entry.hours)
        self._time_logs = [e for e in self._time_logs if e.id != log_id]

    def _add_actual_hours(self, entry: TimeLogEntry, delta: float) -> None:
        # Targets deleted since the entry was written have nothing to adjust
        if not self.has_task(entry.task_id):
            return
        task = self.get_task(entry.task_id)
        if entry.subtask_id:
            if any(st.id == entry.subtask_id for st in task.subtasks):
                current = self._get_subtask(task, entry.subtask_id).actual_hours or 0.0
                self.update_subtask(entry.task_id, entry.subtask_id,
                                    actual_hours=max(0.0, round(current + delta, 2)))
            return
        current = self.get_task_state(entry.task_id).actual_hours_value
        self.update_task_state(entry.task_id, 'actual_hours', f"{max(0.0, round(current + delta, 2)):g}")

    # ---- derived values ----

    def calculate_task_hours(self, task_id: str) -> float:
        return calculate_task_hours(self.get_task(task_id))

    def get_subtask_progress(self, task_id: str) -> SubtaskProgress:
        task = self.get_task(task_id)
        completed = sum(1 for st in task.subtasks if st.is_completed)
        return SubtaskProgress(completed=completed, total=len(task.subtasks))
