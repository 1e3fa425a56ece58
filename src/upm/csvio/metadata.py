"""Project metadata found above the tabular part of a CSV file."""

import re
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..core.project import ProjectMeta
from ..utils.logger import get_logger

logger = get_logger(__name__)

# "# Website Redesign - Project Progress Report"
TITLE_RE = re.compile(r'^#?\s*(?P<name>.+?)\s+-\s+Project\b', re.IGNORECASE)

# "SUMMARY STATISTICS", "TASK DETAILS"
SECTION_RE = re.compile(r'^[A-Z][A-Z0-9 &/_-]*$')

BUDGET_RE = re.compile(r'\d[\d,]*(?:\.\d+)?|\.\d+')

LEAD_PLACEHOLDERS = {'not specified', 'n/a', 'project lead'}


def _text(value: str) -> Optional[str]:
    return value or None


def _lower(value: str) -> Optional[str]:
    return value.lower() or None


def _lead(value: str) -> Optional[str]:
    if not value or value.lower() in LEAD_PLACEHOLDERS:
        return None
    return value


def _budget(value: str) -> Optional[float]:
    match = BUDGET_RE.search(value)
    if not match:
        return None
    return float(match.group(0).replace(',', ''))


# Normalized key -> (ProjectMeta field, conversion)
METADATA_FIELDS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    'description': ('description', _text),
    'initial prompt': ('initial_prompt', _text),
    'project type': ('project_type', _text),
    'experience level': ('experience_level', _lower),
    'project lead': ('lead', _lead),
    'status': ('status', _text),
    'start date': ('start_date', _text),
    'target end date': ('target_end_date', _text),
    'budget': ('budget', _budget),
    'timeline': ('timeline', _text),
}


def is_section_marker(line: str) -> bool:
    """An all-caps heading line without a colon."""
    return ':' not in line and bool(SECTION_RE.match(line)) and any(c.isalpha() for c in line)


def extract_metadata(lines: Sequence[str]) -> ProjectMeta:
    """
    Read `key: value` lines from the top of the file.

    Stops at the first blank line or section marker. A first line shaped
    like "<name> - Project ..." names the project. Keys outside
    METADATA_FIELDS are skipped; values that convert to nothing (a
    placeholder lead, a budget without digits) leave the field unset.
    """
    meta = ProjectMeta()

    for index, line in enumerate(lines):
        line = line.strip()
        if not line or is_section_marker(line):
            break

        if index == 0:
            title = TITLE_RE.match(line)
            if title:
                meta.name = title.group('name').strip()
                continue

        if ':' not in line:
            continue

        key, _, value = line.partition(':')
        key = key.strip().lstrip('#').strip().lower()
        entry = METADATA_FIELDS.get(key)
        if entry is None:
            logger.debug(f"Ignoring metadata key: {key!r}")
            continue

        field_name, convert = entry
        converted = convert(value.strip())
        if converted is not None:
            setattr(meta, field_name, converted)

    return meta
