"""Error handling utilities for upm.

Provides context managers and decorators for consistent error handling.
"""
import sys
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Generator, TypeVar

from .exceptions import UpmError
from .logger import get_logger

F = TypeVar('F', bound=Callable)

logger = get_logger(__name__)

RED = '\033[0;31m'
NC = '\033[0m'


def report_error(msg: str) -> None:
    """Print an error message in red to stderr."""
    print(f"{RED}[ERROR]{NC} {msg}", file=sys.stderr)


@contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Context manager for CLI error handling.

    Catches UpmError exceptions and converts them to sys.exit() calls
    with appropriate error messages.

    Usage:
        def command():
            with cli_error_handler():
                project = Project.load(name, config)
                # ... rest of command logic
    """
    try:
        yield
    except UpmError as e:
        logger.debug(f"Command failed: {e!r}")
        report_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)


def handle_cli_errors(func: F) -> F:
    """Decorator for CLI command functions.

    Wraps a function to catch UpmError exceptions and convert them
    to sys.exit() calls with appropriate error messages.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        with cli_error_handler():
            return func(*args, **kwargs)
    return wrapper  # type: ignore
