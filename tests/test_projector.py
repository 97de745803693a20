"""Tests for the relational projection rules."""

import json

import pytest

from fleetindex.indexer import projector
from fleetindex.indexer.exceptions import MappingError
from fleetindex.packages.ecs import EcsField
from fleetindex.packages.model import Field, Location, Var

LOC = Location("fields.yml", 3, 3)


class TestNullRules:
    """empty_is_null() and json_or_null()"""

    def test_empty_text_is_null(self):
        assert projector.empty_is_null("") is None
        assert projector.empty_is_null(None) is None
        assert projector.empty_is_null("x") == "x"

    @pytest.mark.parametrize("value", [None, [], {}, ""])
    def test_empty_composites_are_null(self, value):
        """Absent and empty composite values store NULL."""
        assert projector.json_or_null(value) is None

    @pytest.mark.parametrize("value, expected", [(0, "0"), (False, "false"), (["a"], '["a"]')])
    def test_explicit_values_are_kept(self, value, expected):
        """A set zero or False is preserved, not nulled."""
        assert projector.json_or_null(value) == expected

    def test_unencodable_value(self):
        """Values JSON cannot encode raise MappingError."""
        with pytest.raises(MappingError, match="default of var"):
            projector.json_or_null(object(), "default of var 'x'")


class TestVarRow:
    """var_row()"""

    def test_optional_text_is_null(self):
        """Empty description and title become NULL; explicit False is kept."""
        row = projector.var_row(Var(name="x", type="text", location=LOC, multi=False))

        assert row["description"] is None
        assert row["title"] is None
        assert row["multi"] is False
        assert row["required"] is None
        assert row["default_value"] is None

    def test_default_is_json(self):
        row = projector.var_row(Var(name="tags", type="text", location=LOC, default=["forwarded"]))

        assert json.loads(row["default_value"]) == ["forwarded"]

    def test_empty_default_matches_absent_default(self):
        """An empty list default stores the same NULL as no default at all."""
        empty = projector.var_row(Var(name="tags", type="text", location=LOC, default=[]))
        absent = projector.var_row(Var(name="tags", type="text", location=LOC))

        assert empty["default_value"] is None
        assert empty["default_value"] == absent["default_value"]


class TestFieldRow:
    """field_row() and ECS backfill"""

    def test_local_values_win(self):
        """A locally declared type is never replaced by the ECS one."""
        f = Field(name="event.category", location=LOC, type="wildcard", external="ecs")
        ecs = EcsField(name="event.category", data_type="keyword", description="ECS text")

        row = projector.field_row(f, ecs)

        assert row["type"] == "wildcard"
        assert row["description"] == "ECS text"
        assert row["unresolvable"] is None

    def test_array_normalize_is_backfilled(self):
        """ECS array fields get normalize ["array"] when not set locally."""
        f = Field(name="event.category", location=LOC, external="ecs")

        row = projector.field_row(f, EcsField(name="event.category", data_type="keyword", array=True))

        assert json.loads(row["normalize"]) == ["array"]

    def test_unresolved_external_is_marked(self):
        """external: ecs without a definition is flagged unresolvable."""
        row = projector.field_row(Field(name="host.name", location=LOC, external="ecs"))

        assert row["unresolvable"] is True
        assert row["type"] is None

    def test_non_positive_ignore_above_is_null(self):
        assert projector.field_row(Field(name="a", location=LOC, ignore_above=0))["ignore_above"] is None
        assert projector.field_row(Field(name="a", location=LOC, ignore_above=256))["ignore_above"] == 256

    def test_location_columns(self):
        row = projector.field_row(Field(name="a", location=LOC))

        assert (row["file_path"], row["line_number"], row["col"]) == ("fields.yml", 3, 3)


class TestNarrowIndex:
    """narrow_index()"""

    @pytest.mark.parametrize(
        "index, expected",
        [("logs-*", "logs-*"), (["a-*", "b-*"], "a-*"), ([], ""), (None, "")],
    )
    def test_first_entry(self, index, expected):
        assert projector.narrow_index(index) == expected
