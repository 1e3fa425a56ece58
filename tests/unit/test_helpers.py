"""Unit tests for upm.utils.helpers module."""
import dataclasses
import datetime as dt
import enum
import json

import pytest

from upm.utils.helpers import (
    dumps,
    generate_id,
    load_yaml,
    parse_hours,
    save_yaml,
    short_id,
    slugify,
    to_serializable,
    truncate_text,
)


class Color(enum.Enum):
    RED = "red"


@dataclasses.dataclass
class Point:
    x: int
    y: int


class WithToDict:
    def to_dict(self):
        return {"kind": "custom"}


class TestToSerializable:
    """Tests for to_serializable function."""

    def test_primitives_pass_through(self):
        """JSON primitives are returned unchanged."""
        for value in ("a", 1, 1.5, True, None):
            assert to_serializable(value) == value

    def test_enum_dataclass_and_dates(self):
        """Enums, dataclasses and dates are converted."""
        data = to_serializable({"c": Color.RED, "p": Point(1, 2), "d": dt.date(2024, 1, 2)})
        assert data == {"c": "red", "p": {"x": 1, "y": 2}, "d": "2024-01-02"}

    def test_to_dict_preferred(self):
        """Objects with to_dict use it."""
        assert to_serializable([WithToDict()]) == [{"kind": "custom"}]

    def test_sets_and_tuples(self):
        """Sets and tuples become lists."""
        assert to_serializable((1, 2)) == [1, 2]
        assert to_serializable({3}) == [3]

    def test_circular_reference(self):
        """Cycles are cut instead of recursing forever."""
        loop = []
        loop.append(loop)
        result = to_serializable(loop)
        assert result[0].startswith("<CircularRef")


class TestDumps:
    """Tests for dumps function."""

    def test_compact_by_default(self):
        """No whitespace between items without indent."""
        assert dumps({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_unicode_kept(self):
        """Non-ASCII text is not escaped."""
        assert json.loads(dumps({"n": "Café"})) == {"n": "Café"}
        assert "Café" in dumps({"n": "Café"})


class TestYaml:
    """Tests for YAML helpers."""

    def test_round_trip(self, tmp_path):
        """save_yaml output loads back."""
        path = tmp_path / "data.yaml"
        save_yaml({"b": 1, "a": [Color.RED]}, str(path))
        assert load_yaml(str(path)) == {"b": 1, "a": ["red"]}

    def test_key_order_preserved(self, tmp_path):
        """Keys are written in insertion order."""
        path = tmp_path / "data.yaml"
        save_yaml({"z": 1, "a": 2}, str(path))
        assert path.read_text(encoding="utf-8").splitlines()[0] == "z: 1"


class TestParseHours:
    """Tests for parse_hours function."""

    @pytest.mark.parametrize("value,expected", [
        (8, 8.0),
        (2.5, 2.5),
        ("8", 8.0),
        ("  3.25 ", 3.25),
        ("8h", 8.0),
        (".5", 0.5),
        ("-2", -2.0),
        ("1e2", 100.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        ("inf", 0.0),
    ])
    def test_values(self, value, expected):
        """Leading numbers are read; everything else defaults."""
        assert parse_hours(value) == expected

    def test_custom_default(self):
        """The default is configurable."""
        assert parse_hours("n/a", default=8) == 8


class TestSmallHelpers:
    """Tests for id, slug and truncation helpers."""

    def test_generate_id(self):
        """Ids carry the prefix and are unique."""
        ids = {generate_id("task") for _ in range(100)}
        assert len(ids) == 100
        assert all(i.startswith("task_") for i in ids)

    @pytest.mark.parametrize("name,slug", [
        ("Website Redesign", "website-redesign"),
        ("  Q3 / Launch!! ", "q3-launch"),
        ("***", "project"),
    ])
    def test_slugify(self, name, slug):
        """Names become directory-safe slugs."""
        assert slugify(name) == slug

    def test_truncate_text(self):
        """Long text is cut with a suffix."""
        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."

    @pytest.mark.parametrize("identifier, expected", [
        ("subtask_0123456789abcdef0123456789abcdef", "subtask_01234567"),
        ("import_abc", "import_abc"),
        ("t1", "t1"),
    ])
    def test_short_id(self, identifier, expected):
        """Short ids keep the prefix and are prefixes of the full id."""
        assert short_id(identifier) == expected
        assert identifier.startswith(short_id(identifier))
