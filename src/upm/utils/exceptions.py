"""Custom exceptions for upm.

Provides a hierarchy of exceptions for consistent error handling.
"""


class UpmError(Exception):
    """Base exception for upm.

    All custom exceptions should inherit from this class.
    """
    pass


class CSVImportError(UpmError):
    """Structural error in CSV import.

    Raised when the input has no identifiable task column. Row-level
    anomalies never raise; they are recorded on the import result.
    """
    pass


class ConfigError(UpmError):
    """Error in configuration.

    Raised when the workspace is missing or the config file is invalid.
    """
    pass


class FileOperationError(UpmError):
    """Error in file operations.

    Raised when file read/write operations fail.
    """
    pass


class ProjectNotFoundError(UpmError):
    """Raised when a project does not exist in the workspace."""
    pass


class TaskNotFoundError(UpmError):
    """Raised when a task id is not present in the store."""
    pass


class SubtaskNotFoundError(UpmError):
    """Raised when a subtask id is not present on its parent task."""
    pass


class TimeLogNotFoundError(UpmError):
    """Raised when a time-log entry id is not present in the store."""
    pass
