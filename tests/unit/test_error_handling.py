"""Unit tests for upm.utils.error_handling module."""
import pytest

from upm.utils import (
    cli_error_handler,
    handle_cli_errors,
    UpmError,
    CSVImportError,
    ProjectNotFoundError,
)


class TestCliErrorHandler:
    """Tests for cli_error_handler context manager."""

    def test_passes_through_normal_execution(self):
        """Normal execution passes through without issues."""
        result = []
        with cli_error_handler():
            result.append(1)
            result.append(2)
        assert result == [1, 2]

    def test_catches_upm_error_and_exits(self, capsys):
        """Catches UpmError and exits with code 1."""
        with pytest.raises(SystemExit) as exc_info:
            with cli_error_handler():
                raise UpmError("Test error message")

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Test error message" in captured.err
        assert "[ERROR]" in captured.err

    def test_catches_csv_import_error_subclass(self, capsys):
        """Catches CSVImportError (subclass of UpmError)."""
        with pytest.raises(SystemExit) as exc_info:
            with cli_error_handler():
                raise CSVImportError("CSV must have a Task/Name/Title column")

        assert exc_info.value.code == 1
        assert "Task/Name/Title" in capsys.readouterr().err

    def test_catches_keyboard_interrupt(self, capsys):
        """Catches KeyboardInterrupt and exits with code 130."""
        with pytest.raises(SystemExit) as exc_info:
            with cli_error_handler():
                raise KeyboardInterrupt()

        assert exc_info.value.code == 130
        assert "Aborted" in capsys.readouterr().out

    def test_does_not_catch_other_exceptions(self):
        """Does not catch non-UpmError exceptions."""
        with pytest.raises(ValueError):
            with cli_error_handler():
                raise ValueError("Not an UpmError")


class TestHandleCliErrors:
    """Tests for handle_cli_errors decorator."""

    def test_returns_value(self):
        """Decorated function returns normally."""
        @handle_cli_errors
        def ok():
            return 42

        assert ok() == 42

    def test_converts_error_to_exit(self, capsys):
        """Decorated function exits on UpmError."""
        @handle_cli_errors
        def missing():
            raise ProjectNotFoundError("Project 'x' not found")

        with pytest.raises(SystemExit) as exc_info:
            missing()

        assert exc_info.value.code == 1
        assert "Project 'x' not found" in capsys.readouterr().err

    def test_preserves_metadata(self):
        """Decorator keeps the wrapped function's name and docstring."""
        @handle_cli_errors
        def documented():
            """Docs."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docs."
