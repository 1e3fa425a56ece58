"""CSV import: turn spreadsheet text into tasks and project metadata."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Sequence, Union

from .columns import ColumnMap, resolve_columns
from .metadata import extract_metadata
from .tokenizer import detect_delimiter, parse_line
from ..core.project import ProjectMeta
from ..core.task import Task, TaskState, TaskStatus, normalize_phase
from ..core.validator import ValidationError, ValidationResult
from ..utils.exceptions import CSVImportError, FileOperationError
from ..utils.helpers import generate_id, parse_hours
from ..utils.logger import get_logger

logger = get_logger(__name__)

BOM = '\ufeff'

# Lines searched for the header row
HEADER_SEARCH_LINES = 10

DEFAULT_PHASE_TITLE = 'Imported'
DEFAULT_CATEGORY = 'Other'

MISSING_TASK_COLUMN = 'CSV must have a Task/Name/Title column'


@dataclass
class SkippedRow:
    """A data row left out of the import, with the reason."""
    line_number: int
    reason: str


@dataclass
class ImportResult:
    """Everything recovered from one CSV import."""
    tasks: List[Task] = field(default_factory=list)
    meta: ProjectMeta = field(default_factory=ProjectMeta)
    task_states: Dict[str, TaskState] = field(default_factory=dict)
    skipped: List[SkippedRow] = field(default_factory=list)
    delimiter: str = ','

    @property
    def imported_count(self) -> int:
        return len(self.tasks)


def _split_lines(text: str) -> List[str]:
    """Drop a leading BOM and split into trimmed lines."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return [line.strip() for line in text.split('\n')]


def find_header_index(lines: Sequence[str]) -> int:
    """
    First of the leading lines that mentions "task".

    Falls back to line 0; whether that line is usable is decided by
    column resolution, not here.
    """
    for i, line in enumerate(lines[:HEADER_SEARCH_LINES]):
        if 'task' in line.lower():
            return i
    return 0


def _locate_header(lines: Sequence[str], delimiter: str, extended: bool):
    header_index = find_header_index(lines)
    header = parse_line(lines[header_index], delimiter) if lines else []
    return header_index, header, resolve_columns(header, extended=extended)


def _build_task(values: Sequence[str], columns: ColumnMap) -> Task:
    phase_title = columns.value(values, 'phase') or DEFAULT_PHASE_TITLE
    est_hours = parse_hours(columns.value(values, 'est_hours'))
    notes = columns.value(values, 'notes')

    return Task(
        id=generate_id('import'),
        name=columns.value(values, 'task').strip(),
        phase=normalize_phase(phase_title),
        phase_title=phase_title,
        category=columns.value(values, 'category') or DEFAULT_CATEGORY,
        base_est_hours=est_hours,
        adjusted_est_hours=est_hours,
        notes=notes or None,
    )


def _build_state(task: Task, values: Sequence[str], columns: ColumnMap) -> TaskState:
    return TaskState(
        status=TaskStatus.parse(columns.value(values, 'status')),
        est_hours=task.adjusted_est_hours,
        actual_hours=columns.value(values, 'actual_hours'),
        notes=columns.value(values, 'notes'),
    )


def import_csv(text: str, extended_aliases: bool = False) -> ImportResult:
    """
    Parse CSV (or tab-separated) text into tasks.

    Only a missing task-name column aborts the import (CSVImportError).
    Bad numbers, absent optional columns and blank names are absorbed:
    values default and unusable rows are listed in `ImportResult.skipped`.

    Args:
        text: Raw file content
        extended_aliases: Also accept "hours"/"estimated" estimate headers

    Returns:
        ImportResult with tasks, metadata and initial task states
    """
    lines = _split_lines(text)
    delimiter = detect_delimiter('\n'.join(lines))
    logger.debug(f"Detected delimiter: {delimiter!r}")

    header_index, header, columns = _locate_header(lines, delimiter, extended_aliases)
    logger.debug(f"Header at line {header_index + 1}: {header}")
    meta = extract_metadata(lines[:header_index])

    if not columns.found('task'):
        raise CSVImportError(
            f"{MISSING_TASK_COLUMN}. Please ensure your CSV has a column named "
            f"\"Task\", \"Name\", or \"Title\""
        )

    result = ImportResult(meta=meta, delimiter=delimiter)

    for i in range(header_index + 1, len(lines)):
        line = lines[i]
        if not line:
            continue

        line_number = i + 1
        values = parse_line(line, delimiter)
        if len(values) < 2:
            result.skipped.append(SkippedRow(line_number, 'fewer than 2 fields'))
            continue

        if not columns.value(values, 'task').strip():
            result.skipped.append(SkippedRow(line_number, 'empty task name'))
            continue

        task = _build_task(values, columns)
        result.tasks.append(task)
        result.task_states[task.id] = _build_state(task, values, columns)

    for row in result.skipped:
        logger.debug(f"Skipped line {row.line_number}: {row.reason}")
    logger.info(f"Imported {result.imported_count} task(s), skipped {len(result.skipped)} row(s)")
    return result


def validate_csv(text: str) -> ValidationResult:
    """
    Structural pre-check run before an import.

    Applies the same header rules as `import_csv` without building tasks.
    """
    lines = _split_lines(text)
    non_blank = [line for line in lines if line]

    if len(non_blank) < 2:
        return ValidationResult(is_valid=False, errors=[ValidationError(
            severity='error',
            message='CSV must have at least a header row and one data row',
            context={'line_count': len(non_blank)}
        )])

    delimiter = detect_delimiter('\n'.join(lines))
    header_index, header, columns = _locate_header(lines, delimiter, extended=False)

    if not columns.found('task'):
        return ValidationResult(is_valid=False, errors=[ValidationError(
            severity='error',
            message=f'CSV must have a "Task" column (searched first {HEADER_SEARCH_LINES} lines)',
            context={'header_line': header_index + 1, 'header': header}
        )])

    return ValidationResult(is_valid=True)


def read_file_as_text(path: Union[str, Path]) -> str:
    """Read an import file as UTF-8 text; a leading BOM is left for the importer to strip."""
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise FileOperationError(f"Failed to read file {path}: {e}") from e
