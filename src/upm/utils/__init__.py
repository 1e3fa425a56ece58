"""Utility modules for helpers, logging and errors."""

from .logger import setup_logger, get_logger
from .helpers import (
    to_serializable,
    dumps,
    load_yaml,
    save_yaml,
    get_timestamp,
    generate_id,
    parse_hours,
    slugify,
    short_id,
    truncate_text,
)
from .exceptions import (
    UpmError,
    CSVImportError,
    ConfigError,
    FileOperationError,
    ProjectNotFoundError,
    TaskNotFoundError,
    SubtaskNotFoundError,
    TimeLogNotFoundError,
)
from .error_handling import cli_error_handler, handle_cli_errors

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Helpers
    'to_serializable',
    'dumps',
    'load_yaml',
    'save_yaml',
    'get_timestamp',
    'generate_id',
    'parse_hours',
    'slugify',
    'short_id',
    'truncate_text',
    # Exceptions
    'UpmError',
    'CSVImportError',
    'ConfigError',
    'FileOperationError',
    'ProjectNotFoundError',
    'TaskNotFoundError',
    'SubtaskNotFoundError',
    'TimeLogNotFoundError',
    # Error handling
    'cli_error_handler',
    'handle_cli_errors',
]
