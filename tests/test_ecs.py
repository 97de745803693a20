"""Tests for ECS dictionary lookups."""

from fleetindex.packages.ecs import EcsDictionary


class TestEcsDictionary:
    """EcsDictionary.lookup()"""

    def test_lookup(self, ecs_dir):
        """A known field resolves to its type, description and array flag."""
        definition = EcsDictionary(ecs_dir).lookup("event.category", "v8.17.0")

        assert definition.data_type == "keyword"
        assert definition.description == "High-level event category."
        assert definition.array is True

    def test_git_prefix_is_ignored(self, ecs_dir):
        """References copied from build.yml may keep their git@ prefix."""
        definition = EcsDictionary(ecs_dir).lookup("@timestamp", "git@v8.17.0")

        assert definition.data_type == "date"
        assert definition.array is False

    def test_unknown_field(self, ecs_dir):
        """Fields missing from the dictionary are unresolved."""
        assert EcsDictionary(ecs_dir).lookup("host.name", "v8.17.0") is None

    def test_unknown_reference(self, ecs_dir):
        """A reference with no dictionary on disk resolves nothing."""
        assert EcsDictionary(ecs_dir).lookup("event.category", "v1.0.0") is None

    def test_no_directory(self):
        """Without an ECS directory every lookup is unresolved."""
        assert EcsDictionary().lookup("event.category", "v8.17.0") is None

    def test_non_mapping_dictionary(self, tmp_path):
        """A dictionary file whose root is not a mapping resolves nothing."""
        (tmp_path / "v1.0.0").mkdir()
        (tmp_path / "v1.0.0" / "ecs_flat.yml").write_text("- event.category\n- host.name\n", encoding="utf-8")

        assert EcsDictionary(tmp_path).lookup("event.category", "v1.0.0") is None
