"""Logging for upm: colored console output plus a rotating workspace log file."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

ROOT_LOGGER = 'upm'

LOG_FILE = 'upm.log'
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_DATEFMT = '%Y-%m-%d %H:%M:%S'
CONSOLE_DATEFMT = '%H:%M:%S'

# Rotate at 1MB, keep 3 backups
MAX_LOG_BYTES = 1_000_000
LOG_BACKUPS = 3

RESET = '\033[0m'
LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}


class ColoredFormatter(logging.Formatter):
    """Formatter that paints the level name when `color` is on."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = CONSOLE_DATEFMT, color: bool = True):
        super().__init__(fmt, datefmt)
        self.color = color

    def format(self, record):
        code = LEVEL_COLORS.get(record.levelno)
        if not self.color or code is None:
            return super().format(record)
        # Other handlers share the record
        painted = logging.makeLogRecord(record.__dict__)
        painted.levelname = f"{code}{record.levelname}{RESET}"
        return super().format(painted)


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def console_handler(level: int, stream: Optional[TextIO] = None, color: bool = True) -> logging.Handler:
    """Stream handler for stderr; colors only when the stream is a terminal."""
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(color=color and _is_terminal(stream)))
    return handler


def file_handler(log_dir: str) -> logging.Handler:
    """Rotating `upm.log` under `log_dir`, recording everything from DEBUG up."""
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path / LOG_FILE,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8',
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, FILE_DATEFMT))
    return handler


def setup_logger(
    level: int = logging.WARNING,
    log_dir: Optional[str] = None,
    console: bool = True,
    color: bool = True,
    name: str = ROOT_LOGGER
) -> logging.Logger:
    """
    Configure the package logger once per CLI invocation.

    Module loggers (`upm.core.store`, ...) propagate here. Handlers from a
    previous call are closed first, so repeated setup never duplicates
    output.

    Args:
        level: Console threshold
        log_dir: Workspace log directory; no file is written when None
        console: Emit to stderr
        color: Allow ANSI colors on the console
        name: Logger to configure
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if console:
        logger.addHandler(console_handler(level, color=color))
    if log_dir is not None:
        logger.addHandler(file_handler(log_dir))
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.setLevel(logging.DEBUG if log_dir is not None else level)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger for a module; pass `__name__`."""
    return logging.getLogger(name)
