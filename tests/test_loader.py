"""Tests for YAML loading with source locations."""

import pytest

from fleetindex.indexer.exceptions import DocumentError
from fleetindex.packages.loader import LocatedDict, load_yaml, location_of
from fleetindex.packages.model import Location


class TestLoadYaml:
    """load_yaml()"""

    def test_mappings_carry_one_based_location(self, tmp_path):
        """Every mapping knows the file, line and column it starts at."""
        path = tmp_path / "doc.yml"
        path.write_text("name: demo\nprocessors:\n  - set:\n      field: a\n", encoding="utf-8")

        doc = load_yaml(path)

        assert isinstance(doc, LocatedDict)
        assert (doc.line, doc.column) == (1, 1)
        item = doc["processors"][0]
        assert isinstance(item, LocatedDict)
        assert item.location == Location(str(path), 3, 5)
        assert item["set"].line == 4

    def test_timestamps_stay_strings(self, tmp_path):
        """Date-like scalars are not turned into datetime objects."""
        path = tmp_path / "doc.yml"
        path.write_text("released: 2024-01-01\n", encoding="utf-8")

        assert load_yaml(path)["released"] == "2024-01-01"

    def test_json_documents(self, tmp_path):
        """JSON pipelines load through the same loader."""
        path = tmp_path / "pipeline.json"
        path.write_text('{"processors": [{"set": {"field": "a"}}]}', encoding="utf-8")

        doc = load_yaml(path)

        assert doc["processors"][0]["set"] == {"field": "a"}

    def test_tab_indented_json(self, tmp_path):
        """Tab-indented JSON pipelines load with their locations intact."""
        path = tmp_path / "default.json"
        path.write_text(
            '{\n\t"description": "tabs",\n\t"processors": [\n\t\t{\n'
            '\t\t\t"set": {"field": "a", "value": "b\\tc"}\n\t\t}\n\t]\n}\n',
            encoding="utf-8",
        )

        doc = load_yaml(path)

        assert doc["description"] == "tabs"
        item = doc["processors"][0]
        assert item["set"] == {"field": "a", "value": "b\tc"}
        assert item.location == Location(str(path), 4, 3)

    def test_tabs_in_yaml_are_still_errors(self, tmp_path):
        """Only JSON files get tab indentation relaxed."""
        path = tmp_path / "doc.yml"
        path.write_text("a:\n\tb: 1\n", encoding="utf-8")

        with pytest.raises(DocumentError):
            load_yaml(path)

    def test_malformed_document(self, tmp_path):
        """Invalid YAML raises DocumentError naming the file."""
        path = tmp_path / "bad.yml"
        path.write_text("a: [unclosed\n", encoding="utf-8")

        with pytest.raises(DocumentError, match="bad.yml"):
            load_yaml(path)

    def test_missing_file(self, tmp_path):
        """An unreadable file raises DocumentError."""
        with pytest.raises(DocumentError):
            load_yaml(tmp_path / "missing.yml")


class TestLocationOf:
    """location_of()"""

    def test_scalar_falls_back_to_file(self, tmp_path):
        """Nodes without a location resolve to the file itself."""
        assert location_of("text", tmp_path / "x.yml") == Location(str(tmp_path / "x.yml"))
