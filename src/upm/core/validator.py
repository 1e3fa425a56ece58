"""Validation system for projects and tasks."""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from .project import Project
from .task import Task
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationError:
    """Validation error information."""
    severity: str  # 'error', 'warning', 'info'
    message: str
    context: Optional[Dict] = None


@dataclass
class ValidationResult:
    """Result of validation."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationError] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if there are any errors."""
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        """Check if there are any warnings."""
        return len(self.warnings) > 0

    def get_all_issues(self) -> List[ValidationError]:
        """Get all issues (errors and warnings)."""
        return self.errors + self.warnings

    @property
    def error(self) -> Optional[str]:
        """First error message, if any."""
        return self.errors[0].message if self.errors else None


class Validator:
    """Validator for projects and tasks."""

    @staticmethod
    def validate_task(task: Task, task_ids: set) -> ValidationResult:
        """
        Validate one task against the rest of the project.

        Checks:
        - Name present
        - Hours not negative
        - Dependencies point at existing tasks
        - Subtask order values are unique
        """
        errors = []
        warnings = []

        if not task.name or not task.name.strip():
            errors.append(ValidationError(
                severity='error',
                message=f"Task {task.id} has no name",
                context={'task_id': task.id}
            ))

        if task.base_est_hours < 0 or task.adjusted_est_hours < 0:
            errors.append(ValidationError(
                severity='error',
                message=f"Task {task.id} has negative estimated hours",
                context={'task_id': task.id}
            ))

        for dep_id in task.dependencies:
            if dep_id not in task_ids:
                errors.append(ValidationError(
                    severity='error',
                    message=f"Task {task.id} depends on non-existent task {dep_id}",
                    context={'task_id': task.id, 'missing_dependency': dep_id}
                ))

        for st in task.subtasks:
            if st.est_hours is not None and st.est_hours < 0:
                errors.append(ValidationError(
                    severity='error',
                    message=f"Subtask {st.id} of task {task.id} has negative estimated hours",
                    context={'task_id': task.id, 'subtask_id': st.id}
                ))

        orders = Counter(st.order for st in task.subtasks)
        duplicated = sorted(order for order, count in orders.items() if count > 1)
        if duplicated:
            warnings.append(ValidationError(
                severity='warning',
                message=f"Task {task.id} has subtasks sharing order value(s) {duplicated}",
                context={'task_id': task.id, 'orders': duplicated}
            ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    @staticmethod
    def validate_project(project: Project) -> ValidationResult:
        """
        Validate entire project.

        Checks:
        - Task ids are unique
        - Every task is valid
        - Project has tasks and a lead
        """
        errors = []
        warnings = []

        tasks = project.store.tasks
        id_counts = Counter(t.id for t in tasks)
        for task_id, count in id_counts.items():
            if count > 1:
                errors.append(ValidationError(
                    severity='error',
                    message=f"Task id {task_id} is used by {count} tasks",
                    context={'task_id': task_id}
                ))

        if not tasks:
            warnings.append(ValidationError(
                severity='warning',
                message=f"Project {project.name} has no tasks",
                context={'project_name': project.name}
            ))

        task_ids = set(id_counts)
        for task in tasks:
            result = Validator.validate_task(task, task_ids)
            errors.extend(result.errors)
            warnings.extend(result.warnings)

        if not project.meta.lead:
            warnings.append(ValidationError(
                severity='warning',
                message=f"Project {project.name} has no lead",
                context={'project_name': project.name}
            ))

        logger.debug(f"Validated {project.name}: {len(errors)} error(s), {len(warnings)} warning(s)")
        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)
