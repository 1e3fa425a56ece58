"""Helper functions for serialization and data manipulation."""

import dataclasses
import datetime as dt
import decimal
import enum
import json
import math
import os
import pathlib
import re
import uuid
from collections.abc import Mapping, Sequence, Set
from typing import Any, Optional

import yaml


_JSON_PRIMITIVES = (str, int, float, bool, type(None))

# Leading numeric prefix, the way a lenient float parse reads "8h" or "2.5 hrs".
_LEADING_NUMBER_RE = re.compile(r'^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)')


def to_serializable(obj, _seen: Optional[set[int]] = None):
    """
    Convert `obj` into a structure that `json.dumps` and `yaml.dump` can handle.
    Returns only JSON-safe types: dict, list, str, int, float, bool, None.
    """
    if isinstance(obj, _JSON_PRIMITIVES):
        return obj

    if _seen is None:
        _seen = set()

    oid = id(obj)
    if oid in _seen:
        # Circular reference detected
        return f"<CircularRef type={type(obj).__name__} id={oid}>"

    might_recurse = isinstance(obj, (Mapping, Sequence, Set)) or hasattr(obj, "__dict__")
    if might_recurse:
        _seen.add(oid)

    if isinstance(obj, (dt.datetime, dt.date, dt.time)):
        return obj.isoformat()

    if isinstance(obj, dt.timedelta):
        return obj.total_seconds()

    if isinstance(obj, decimal.Decimal):
        return str(obj)

    if isinstance(obj, (uuid.UUID, pathlib.Path)):
        return str(obj)

    if isinstance(obj, enum.Enum):
        return to_serializable(obj.value, _seen)

    # Records that define their own wire format
    if hasattr(obj, 'to_dict') and callable(getattr(obj, 'to_dict')):
        return to_serializable(obj.to_dict(), _seen)

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return to_serializable(dataclasses.asdict(obj), _seen)

    if isinstance(obj, Mapping):
        # Keys must be strings in JSON; we stringify anything else
        return {
            str(to_serializable(k, _seen)): to_serializable(v, _seen)
            for k, v in obj.items()
        }

    if isinstance(obj, Set) and not isinstance(obj, (str, bytes, bytearray, memoryview)):
        return [to_serializable(x, _seen) for x in obj]

    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray, memoryview)):
        return [to_serializable(x, _seen) for x in obj]

    if hasattr(obj, "__dict__"):
        return {
            k: to_serializable(v, _seen)
            for k, v in vars(obj).items()
            if not callable(v) and not k.startswith("_")
        }

    return str(obj)


def dumps(obj, *, indent: Optional[int] = None, ensure_ascii: bool = False, sort_keys: bool = False) -> str:
    """
    Serialize any Python object to JSON string.
    """
    return json.dumps(
        to_serializable(obj),
        indent=indent,
        ensure_ascii=ensure_ascii,
        sort_keys=sort_keys,
        separators=None if indent else (",", ":"),
    )


def load_yaml(file_path: str) -> Any:
    """Load YAML file and return parsed content."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def save_yaml(data: Any, file_path: str, *, indent: int = 2) -> None:
    """Save data to YAML file."""
    with open(file_path, 'w', encoding='utf-8') as f:
        yaml.dump(
            to_serializable(data),
            f,
            default_flow_style=False,
            allow_unicode=True,
            indent=indent,
            sort_keys=False
        )


def ensure_dir(path: str) -> None:
    """Ensure directory exists, create if necessary."""
    os.makedirs(path, exist_ok=True)


def get_timestamp() -> str:
    """Get current timestamp in ISO-8601 format."""
    return dt.datetime.now().isoformat()


def generate_id(prefix: str) -> str:
    """Generate a collision-resistant identifier such as ``task_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def parse_hours(value: Any, default: float = 0.0) -> float:
    """
    Parse an hours value leniently.

    Numbers pass through; strings are read up to the first non-numeric
    character ("8h" -> 8.0). Anything unparseable, and NaN, yields `default`.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            return default
        number = float(match.group(1))

    if math.isnan(number) or math.isinf(number):
        return default
    return number


def slugify(name: str) -> str:
    """Turn a display name into a directory-safe slug."""
    slug = re.sub(r'[^a-z0-9]+', '-', name.strip().lower()).strip('-')
    return slug or 'project'


def truncate_text(text: str, max_length: int = 80, suffix: str = "...") -> str:
    """Truncate text to max_length with suffix if needed."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def short_id(identifier: str, length: int = 8) -> str:
    """
    Display form of a generated id: its prefix plus the first `length` hex
    digits ("task_3f2a1b4c"). The result is a prefix of the full id, so it
    can be typed back wherever unique prefixes are accepted.
    """
    prefix, sep, rest = identifier.partition('_')
    if not sep:
        return identifier[:length]
    return f"{prefix}_{rest[:length]}"
