"""CSV import and export."""

from .tokenizer import detect_delimiter, parse_line
from .columns import ColumnMap, NOT_FOUND, find_column_index, resolve_columns
from .metadata import extract_metadata
from .importer import ImportResult, SkippedRow, import_csv, validate_csv, read_file_as_text
from .exporter import (
    export_to_csv,
    export_tasks_to_csv,
    export_time_logs_to_csv,
    default_export_filename,
    default_time_log_filename,
)

__all__ = [
    'detect_delimiter',
    'parse_line',
    'ColumnMap',
    'NOT_FOUND',
    'find_column_index',
    'resolve_columns',
    'extract_metadata',
    'ImportResult',
    'SkippedRow',
    'import_csv',
    'validate_csv',
    'read_file_as_text',
    'export_to_csv',
    'export_tasks_to_csv',
    'export_time_logs_to_csv',
    'default_export_filename',
    'default_time_log_filename',
]
