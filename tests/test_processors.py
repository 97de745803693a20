"""Tests for ingest processor tree flattening."""

import json
import math

import pytest

from fleetindex.indexer.exceptions import ProcessorFlattenError
from fleetindex.indexer.processors import flatten_pipeline, flatten_processors
from fleetindex.packages.model import Location, Processor


def proc(proc_type, line=1, on_failure=None, **attributes):
    """Build a processor node located at pipeline.yml:<line>."""
    return Processor(
        type=proc_type,
        attributes=attributes,
        location=Location("pipeline.yml", line, 5),
        on_failure=on_failure or [],
    )


class TestLocators:
    """Locator format and numbering."""

    def test_flat_list(self):
        """Each processor is addressed by base, index and type."""
        flat = flatten_processors([proc("set", field="a"), proc("remove", field="b")], "/processors")

        assert [f.json_pointer for f in flat] == ["/processors/0/set", "/processors/1/remove"]
        assert [f.type for f in flat] == ["set", "remove"]

    def test_null_entries_keep_their_index(self):
        """Null list entries are skipped without renumbering later siblings."""
        flat = flatten_processors([proc("set"), None, proc("json")], "/processors")

        assert [f.json_pointer for f in flat] == ["/processors/0/set", "/processors/2/json"]

    def test_empty_list(self):
        """An empty processor list flattens to nothing."""
        assert flatten_processors([], "/processors") == []
        assert flatten_pipeline([], []) == []

    def test_pipeline_level_on_failure_base(self):
        """Pipeline-level on_failure is rooted at /on_failure after the body."""
        flat = flatten_pipeline([proc("set")], [proc("set", field="event.kind")])

        assert [f.json_pointer for f in flat] == ["/processors/0/set", "/on_failure/0/set"]

    def test_origin_is_copied(self):
        """Each record carries the file, line and column of its node."""
        (flat,) = flatten_processors([proc("set", line=12)], "/processors")

        assert (flat.file_path, flat.line, flat.column) == ("pipeline.yml", 12, 5)

    def test_locators_are_stable(self):
        """Flattening the same tree twice yields the same locators in the same order."""
        tree = [
            proc("rename", field="message", on_failure=[proc("set"), proc("append", on_failure=[proc("remove")])]),
            None,
            proc("json"),
        ]

        first = flatten_pipeline(tree, [proc("set")])
        second = flatten_pipeline(tree, [proc("set")])

        assert [f.json_pointer for f in first] == [f.json_pointer for f in second]
        assert [f.attributes for f in first] == [f.attributes for f in second]


class TestChildrenFirst:
    """on_failure branches are emitted before their parent."""

    def test_nested_ordering(self):
        """Depth-first, children before parent, at every level."""
        tree = [
            proc("set", field="ecs.version"),
            proc(
                "rename",
                field="message",
                on_failure=[
                    proc("set", field="error.message"),
                    proc("append", field="tags", on_failure=[proc("remove", field="tags")]),
                ],
            ),
            None,
            proc("json", field="event.original"),
        ]

        flat = flatten_processors(tree, "/processors")

        assert [f.json_pointer for f in flat] == [
            "/processors/0/set",
            "/processors/1/rename/on_failure/0/set",
            "/processors/1/rename/on_failure/1/append/on_failure/0/remove",
            "/processors/1/rename/on_failure/1/append",
            "/processors/1/rename",
            "/processors/3/json",
        ]

    def test_parent_embeds_failure_summary(self):
        """The parent keeps a type->attributes summary of its immediate failure branch."""
        tree = [
            proc(
                "rename",
                field="message",
                on_failure=[
                    proc("set", field="error.message", value="x"),
                    None,
                    proc("append", field="tags", on_failure=[proc("remove", field="tags")]),
                ],
            )
        ]

        parent = flatten_processors(tree, "/processors")[-1]

        assert parent.attributes["field"] == "message"
        assert parent.attributes["on_failure"] == [
            {"set": {"field": "error.message", "value": "x"}},
            {"append": {"field": "tags"}},
        ]

    def test_source_tree_is_not_mutated(self):
        """Adding the summary does not touch the input processor's attributes."""
        node = proc("rename", field="message", on_failure=[proc("set")])

        flatten_processors([node], "/processors")

        assert "on_failure" not in node.attributes

    def test_processor_without_failure_branch_has_no_summary(self):
        """No on_failure key is added when the branch is empty."""
        (flat,) = flatten_processors([proc("set", field="a")], "/processors")

        assert "on_failure" not in flat.attributes


class TestMarshalling:
    """Attribute serialization."""

    def test_attributes_as_json(self):
        """Attributes are serialized as a JSON object."""
        (flat,) = flatten_processors([proc("set", field="a", value=1)], "/processors")

        assert json.loads(flat.marshal_attributes()) == {"field": "a", "value": 1}

    def test_empty_attributes_are_null(self):
        """A processor with no configuration marshals to None."""
        (flat,) = flatten_processors([proc("drop")], "/processors")

        assert flat.marshal_attributes() is None

    def test_unserializable_attribute_fails_whole_tree(self):
        """A value JSON cannot encode raises with the offending locator."""
        tree = [proc("set"), proc("script", on_failure=[proc("set", value=object())])]

        with pytest.raises(ProcessorFlattenError) as exc_info:
            flatten_processors(tree, "/processors")

        assert exc_info.value.json_pointer == "/processors/1/script/on_failure/0/set"

    def test_nan_is_rejected(self):
        """NaN has no JSON representation and is rejected."""
        with pytest.raises(ProcessorFlattenError):
            flatten_processors([proc("set", value=math.nan)], "/processors")
