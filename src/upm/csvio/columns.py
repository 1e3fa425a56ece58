"""Map header names to the task fields they carry."""

import re
from dataclasses import dataclass, fields
from typing import Dict, List, Sequence

from ..utils.logger import get_logger

logger = get_logger(__name__)

NOT_FOUND = -1

_SEPARATORS_RE = re.compile(r'[\s_\-]+')

# Accepted header names per field, most specific first
COLUMN_ALIASES: Dict[str, List[str]] = {
    'task': ['task', 'name', 'title'],
    'phase': ['phase', 'stage'],
    'category': ['category', 'type'],
    'est_hours': ['estimated hours', 'est hours', 'estimate'],
    'actual_hours': ['actual hours', 'actual'],
    'status': ['status', 'state'],
    'notes': ['notes', 'note', 'description'],
}

# Looser estimate headers accepted by the extended importer
EXTENDED_EST_HOURS_ALIASES = ['hours', 'estimated']


@dataclass
class ColumnMap:
    """Zero-based column index per field, NOT_FOUND when absent."""
    task: int = NOT_FOUND
    phase: int = NOT_FOUND
    category: int = NOT_FOUND
    est_hours: int = NOT_FOUND
    actual_hours: int = NOT_FOUND
    status: int = NOT_FOUND
    notes: int = NOT_FOUND

    def found(self, name: str) -> bool:
        return getattr(self, name) != NOT_FOUND

    def value(self, row: Sequence[str], name: str) -> str:
        """Field value from a tokenized row, '' when the column is absent or short."""
        index = getattr(self, name)
        if index == NOT_FOUND or index >= len(row):
            return ''
        return row[index]

    def describe(self) -> str:
        return ', '.join(f"{f.name}={getattr(self, f.name)}" for f in fields(self))


def _compact(text: str) -> str:
    return _SEPARATORS_RE.sub('', text)


def find_column_index(header: Sequence[str], names: Sequence[str]) -> int:
    """
    Index of the first header cell matching one of `names`.

    Exact (case-insensitive) matches are tried across the whole header
    before any substring match, so "Task" wins over "Subtask Notes".
    Both passes also compare with separators removed, which lets
    "estHours" or "Est_Hours" stand for "est hours".
    """
    normalized = [h.strip().lower() for h in header]
    compact_names = [(name, _compact(name)) for name in names]

    for i, cell in enumerate(normalized):
        compact_cell = _compact(cell)
        if any(cell == name or compact_cell == compact for name, compact in compact_names):
            return i

    for i, cell in enumerate(normalized):
        compact_cell = _compact(cell)
        if any(name in cell or compact in compact_cell for name, compact in compact_names):
            return i

    return NOT_FOUND


def resolve_columns(header: Sequence[str], extended: bool = False) -> ColumnMap:
    """Build the column map for a tokenized header row."""
    aliases = {name: list(names) for name, names in COLUMN_ALIASES.items()}
    if extended:
        aliases['est_hours'] += EXTENDED_EST_HOURS_ALIASES

    column_map = ColumnMap(**{
        name: find_column_index(header, names) for name, names in aliases.items()
    })
    logger.debug(f"Column mapping: {column_map.describe()}")
    return column_map
