"""CLI modules for command-line interface."""

from .commands import cli
from .formatters import Formatter

__all__ = ['cli', 'Formatter']
