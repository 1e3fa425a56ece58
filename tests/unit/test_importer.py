"""Unit tests for upm.csvio.importer module."""
import pytest

from upm.core.task import TaskStatus
from upm.csvio.importer import (
    find_header_index,
    import_csv,
    read_file_as_text,
    validate_csv,
)
from upm.utils.exceptions import CSVImportError, FileOperationError


class TestImportCsv:
    """Tests for import_csv function."""

    def test_minimal_example(self):
        """The basic four-column import produces one fully mapped task."""
        result = import_csv("task,phase,category,estHours\nDesign,Planning,Design,8")

        assert result.imported_count == 1
        task = result.tasks[0]
        assert task.name == "Design"
        assert task.phase == "planning"
        assert task.phase_title == "Planning"
        assert task.category == "Design"
        assert task.base_est_hours == 8
        assert task.adjusted_est_hours == 8

    def test_wire_format_of_imported_task(self):
        """Imported tasks serialize with the camelCase record keys."""
        task = import_csv("Task,Phase\nDesign,Planning").tasks[0]
        data = task.to_dict()
        assert data["task"] == "Design"
        assert data["phaseTitle"] == "Planning"
        assert data["baseEstHours"] == data["adjustedEstHours"] == 0.0

    def test_missing_task_column_raises(self):
        """A header without task/name/title aborts the import."""
        with pytest.raises(CSVImportError, match="Task/Name/Title"):
            import_csv("phase,category\nPlanning,Design")

    def test_blank_task_name_rows_excluded(self):
        """Rows with a blank name are skipped and not counted."""
        text = "Task,Phase\nDesign,Planning\n   ,Build\nLaunch,Release"
        result = import_csv(text)

        assert [t.name for t in result.tasks] == ["Design", "Launch"]
        assert result.imported_count == 2
        assert [(s.line_number, s.reason) for s in result.skipped] == [(3, "empty task name")]

    def test_single_field_rows_skipped(self):
        """Rows with fewer than two fields are skipped."""
        result = import_csv("Task,Phase\nDesign,Planning\nstray")
        assert result.imported_count == 1
        assert result.skipped[0].reason == "fewer than 2 fields"

    def test_blank_lines_ignored(self):
        """Empty lines are neither imported nor reported."""
        result = import_csv("Task,Phase\n\nDesign,Planning\n\n")
        assert result.imported_count == 1
        assert result.skipped == []

    def test_defaults_for_missing_columns(self):
        """Phase and category fall back to defaults."""
        task = import_csv("Task,Notes\nDesign,something").tasks[0]
        assert task.phase == "imported"
        assert task.phase_title == "Imported"
        assert task.category == "Other"
        assert task.base_est_hours == 0.0
        assert task.notes == "something"

    def test_empty_optional_values_default(self):
        """Empty phase and category cells also default."""
        task = import_csv("Task,Phase,Category\nDesign,,").tasks[0]
        assert task.phase_title == "Imported"
        assert task.category == "Other"

    @pytest.mark.parametrize("raw,expected", [
        ("8", 8.0),
        ("2.5", 2.5),
        ("8h", 8.0),
        ("abc", 0.0),
        ("NaN", 0.0),
        ("", 0.0),
    ])
    def test_hours_parsing(self, raw, expected):
        """Estimated hours parse leniently and default to zero."""
        task = import_csv(f"Task,Estimated Hours\nDesign,{raw}").tasks[0]
        assert task.base_est_hours == expected

    def test_phase_whitespace_collapsed(self):
        """Phase key is lowercased with whitespace runs as underscores."""
        task = import_csv("Task,Phase\nBuild,  Build   Out  Phase").tasks[0]
        assert task.phase == "build_out_phase"
        assert task.phase_title == "Build   Out  Phase"

    def test_bom_stripped(self):
        """A leading byte-order mark does not break header detection."""
        result = import_csv("\ufeffTask,Phase\nDesign,Planning")
        assert result.tasks[0].name == "Design"

    def test_crlf_line_endings(self):
        """Windows line endings are tolerated."""
        result = import_csv("Task,Phase\r\nDesign,Planning\r\n")
        assert result.tasks[0].phase_title == "Planning"

    def test_tab_delimited(self):
        """Tab-separated input is detected and parsed."""
        result = import_csv("Task\tPhase\tEstimated Hours\nDesign, mockups\tPlanning\t5")
        assert result.delimiter == "\t"
        assert result.tasks[0].name == "Design, mockups"
        assert result.tasks[0].base_est_hours == 5.0

    def test_quoted_fields(self):
        """Quoted fields keep delimiters and escaped quotes."""
        result = import_csv('Task,Notes\n"Write ""About"" page","a, b"')
        task = result.tasks[0]
        assert task.name == 'Write "About" page'
        assert task.notes == "a, b"

    def test_unique_ids(self):
        """Every imported task gets a distinct id."""
        text = "Task,Phase\n" + "\n".join(f"T{i},P" for i in range(50))
        ids = [t.id for t in import_csv(text).tasks]
        assert len(set(ids)) == 50
        assert all(i.startswith("import_") for i in ids)

    def test_ids_unique_across_imports(self):
        """Two imports of the same text never share ids."""
        text = "Task,Phase\nDesign,Planning"
        assert import_csv(text).tasks[0].id != import_csv(text).tasks[0].id

    def test_header_found_below_metadata(self, sample_csv):
        """The header row is located after a metadata block."""
        result = import_csv(sample_csv)

        assert [t.name for t in result.tasks] == ["Design mockups", "Build pages", "Launch"]
        assert result.meta.name == "Website Redesign"
        assert result.meta.lead == "Jane Doe"
        assert result.meta.budget == 12500.0

    def test_task_states_seeded_from_row(self, sample_csv):
        """Status, actual hours and notes columns seed the tracked state."""
        result = import_csv(sample_csv)
        design, build, launch = result.tasks

        assert result.task_states[design.id].status == TaskStatus.COMPLETE
        assert result.task_states[design.id].actual_hours == "10"
        assert result.task_states[design.id].notes == "Client approved, v2"
        assert result.task_states[design.id].est_hours == 8.0
        assert result.task_states[build.id].status == TaskStatus.IN_PROGRESS
        assert result.task_states[launch.id].status == TaskStatus.PENDING
        assert result.task_states[launch.id].actual_hours == ""

    def test_no_metadata_for_plain_csv(self):
        """A file that starts with its header has no metadata."""
        assert import_csv("Task,Phase\nDesign,Planning").meta.is_empty()

    def test_name_header_without_task_keyword(self):
        """A "Name" header on line 0 is used when no line mentions task."""
        result = import_csv("Name,Est Hrs\nDesign,3")
        assert result.tasks[0].name == "Design"

    def test_extended_aliases(self):
        """Extended aliases map a bare "Hours" header to the estimate."""
        text = "Task,Hours\nDesign,6"
        assert import_csv(text).tasks[0].base_est_hours == 0.0
        assert import_csv(text, extended_aliases=True).tasks[0].base_est_hours == 6.0

    def test_empty_input_raises(self):
        """Empty text has no task column."""
        with pytest.raises(CSVImportError):
            import_csv("")

    def test_header_only(self):
        """A header without data rows imports nothing."""
        result = import_csv("Task,Phase\n")
        assert result.tasks == []
        assert result.skipped == []


class TestFindHeaderIndex:
    """Tests for find_header_index function."""

    def test_first_line_mentioning_task(self):
        """Returns the first line containing "task"."""
        assert find_header_index(["Description: x", "", "Task,Phase"]) == 2

    def test_case_insensitive(self):
        """Matches regardless of case."""
        assert find_header_index(["TASKS\tHOURS"]) == 0

    def test_defaults_to_zero(self):
        """Falls back to the first line."""
        assert find_header_index(["a,b", "c,d"]) == 0

    def test_only_first_ten_lines_searched(self):
        """A "task" line past line ten is not the header."""
        lines = [f"Line {i}: x" for i in range(10)] + ["Task,Phase"]
        assert find_header_index(lines) == 0


class TestValidateCsv:
    """Tests for validate_csv function."""

    def test_valid(self, sample_csv):
        """Well-formed input passes."""
        result = validate_csv(sample_csv)
        assert result.is_valid
        assert not result.has_errors()

    def test_too_few_lines(self):
        """A single line fails."""
        result = validate_csv("Task,Phase\n\n")
        assert not result.is_valid
        assert result.error == "CSV must have at least a header row and one data row"

    def test_missing_task_column(self):
        """A header without a task column fails."""
        result = validate_csv("phase,category\nPlanning,Design")
        assert not result.is_valid
        assert "Task" in result.error
        assert "first 10 lines" in result.error

    def test_agrees_with_import(self):
        """Anything the validator accepts imports without raising."""
        text = "Name,Est Hrs\nDesign,3"
        assert validate_csv(text).is_valid
        assert import_csv(text).imported_count == 1


class TestReadFileAsText:
    """Tests for read_file_as_text function."""

    def test_reads_utf8(self, tmp_path):
        """Reads file content as text."""
        path = tmp_path / "tasks.csv"
        path.write_text("Task\nCafé", encoding="utf-8")
        assert read_file_as_text(path) == "Task\nCafé"

    def test_missing_file_raises(self, tmp_path):
        """A missing file raises FileOperationError."""
        with pytest.raises(FileOperationError):
            read_file_as_text(tmp_path / "missing.csv")

    def test_invalid_encoding_raises(self, tmp_path):
        """Undecodable bytes raise FileOperationError."""
        path = tmp_path / "bad.csv"
        path.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(FileOperationError):
            read_file_as_text(path)
