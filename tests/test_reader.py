"""Tests for reading package directories into the typed model."""

from pathlib import Path

import pytest

from fleetindex.indexer.exceptions import DocumentError
from fleetindex.packages.fields import flatten_fields
from fleetindex.packages.loader import load_yaml
from fleetindex.packages.reader import discover_packages, read_ingest_pipeline, read_package


class TestDiscovery:
    """discover_packages()"""

    def test_sorted_package_dirs(self, integrations_dir):
        """Packages are listed in directory-name order."""
        assert [p.name for p in discover_packages(integrations_dir)] == ["minimal_pkg", "sample_pkg"]

    def test_dirs_without_manifest_are_ignored(self, tmp_path):
        """Only directories holding manifest.yml count as packages."""
        (tmp_path / "packages" / "not_a_package").mkdir(parents=True)
        pkg = tmp_path / "packages" / "real"
        pkg.mkdir()
        (pkg / "manifest.yml").write_text("name: real\n", encoding="utf-8")

        assert [p.name for p in discover_packages(tmp_path)] == ["real"]

    def test_no_packages(self, tmp_path):
        """An empty checkout is an error."""
        with pytest.raises(DocumentError, match="no packages"):
            discover_packages(tmp_path)


class TestPackageManifest:
    """Top-level manifest reading."""

    def test_manifest_attributes(self, sample_pkg_dir):
        """Scalar, nested and list attributes are read."""
        pkg = read_package(sample_pkg_dir)
        m = pkg.manifest

        assert pkg.dir_name == "sample_pkg"
        assert (m.name, m.version, m.type, m.format_version) == ("sample_pkg", "1.2.3", "integration", "3.0.0")
        assert m.categories == ["security", "network"]
        assert m.conditions.kibana_version == "^8.12.0"
        assert m.conditions.elastic_subscription == "basic"
        assert m.owner.github == "elastic/security-service-integrations"
        assert m.agent_privileges_root is None
        assert m.icons[0].src == "/img/logo.svg"
        assert m.location.line == 1

    def test_vars_and_policy_templates(self, sample_pkg_dir):
        """Vars are read per owner, including policy template inputs."""
        m = read_package(sample_pkg_dir).manifest

        assert [v.name for v in m.vars] == ["api_key"]
        assert m.vars[0].secret is True
        assert m.vars[0].description == ""

        (pt,) = m.policy_templates
        assert pt.data_streams == ["log"]
        (pt_input,) = pt.inputs
        assert pt_input.type == "httpjson"
        assert [v.name for v in pt_input.vars] == ["url"]
        assert pt_input.vars[0].default == "https://example.com"

    def test_changelog_and_build(self, sample_pkg_dir):
        """Changelog releases keep file order; the ECS reference drops git@."""
        pkg = read_package(sample_pkg_dir)

        assert [r.version for r in pkg.changelog.releases] == ["1.2.3", "1.0.0"]
        assert pkg.changelog.releases[0].changes[0].type == "bugfix"
        assert pkg.changelog.releases[0].location.line == 2
        assert pkg.build.ecs_reference == "git@v8.17.0"
        assert pkg.ecs_reference == "v8.17.0"

    def test_minimal_package(self, integrations_dir):
        """Optional documents are None or empty when absent."""
        pkg = read_package(integrations_dir / "packages" / "minimal_pkg")

        assert pkg.changelog is None
        assert pkg.build is None
        assert pkg.ecs_reference == ""
        assert pkg.data_streams == []
        assert pkg.transforms == []


class TestDataStreams:
    """Data stream directories."""

    def test_fields_are_flattened_in_file_order(self, sample_pkg_dir):
        """Fields from every fields/*.yml file, dotted, groups skipped."""
        (ds,) = read_package(sample_pkg_dir).data_streams

        assert ds.name == "log"
        assert [f.name for f in ds.fields] == [
            "data_stream.type",
            "@timestamp",
            "event.category",
            "host.name",
            "sample.log.id",
            "sample.log.count",
        ]
        assert ds.fields[4].ignore_above == 1024
        assert ds.fields[4].yaml_path == "$[0].fields[0].fields[0]"
        assert Path(ds.fields[0].location.file_path).name == "base-fields.yml"

    def test_streams_and_vars(self, sample_pkg_dir):
        """Streams carry their own vars."""
        (ds,) = read_package(sample_pkg_dir).data_streams
        (stream,) = ds.manifest.streams

        assert stream.input == "httpjson"
        assert [v.name for v in stream.vars] == ["interval", "tags"]
        assert stream.vars[1].default == ["forwarded"]
        assert ds.manifest.elasticsearch.source_mode == "synthetic"

    def test_pipeline_tree(self, sample_pkg_dir):
        """Processors keep null placeholders and split off on_failure."""
        (ds,) = read_package(sample_pkg_dir).data_streams
        assert [p.name for p in ds.pipelines] == ["default.yml", "json-events.json"]
        pipeline = ds.pipelines[0]

        assert pipeline.name == "default.yml"
        assert pipeline.description == "Pipeline for sample logs"
        assert [p.type if p else None for p in pipeline.processors] == ["set", "rename", None, "json"]

        rename = pipeline.processors[1]
        assert "on_failure" not in rename.attributes
        assert [p.type for p in rename.on_failure] == ["set", "append"]
        assert rename.on_failure[1].on_failure[0].type == "remove"
        assert [p.type for p in pipeline.on_failure] == ["set"]
        assert (pipeline.processors[0].location.line, pipeline.processors[0].location.column) == (4, 5)

    def test_tab_indented_json_pipeline(self, sample_pkg_dir):
        (ds,) = read_package(sample_pkg_dir).data_streams
        pipeline = ds.pipelines[1]

        assert pipeline.description == "Pipeline for JSON encoded events"
        assert [p.type if p else None for p in pipeline.processors] == ["set", None, "remove"]
        assert pipeline.processors[0].location.file_path.endswith("json-events.json")
        assert pipeline.processors[0].location.line == 4

    def test_sample_event(self, sample_pkg_dir):
        """sample_event.json is parsed as JSON."""
        (ds,) = read_package(sample_pkg_dir).data_streams

        assert ds.sample_event.event["message"] == "hello"

    def test_multi_key_processor_is_rejected(self, tmp_path):
        """A processor entry must be a single-key mapping."""
        path = tmp_path / "default.yml"
        path.write_text("processors:\n  - set: {field: a}\n    remove: {field: b}\n", encoding="utf-8")

        with pytest.raises(DocumentError, match="single-key"):
            read_ingest_pipeline(path)


class TestTransforms:
    """Transform directories."""

    def test_transform_definition(self, sample_pkg_dir):
        """Definition, manifest and fields are read together."""
        (t,) = read_package(sample_pkg_dir).transforms
        tr = t.definition

        assert t.name == "latest"
        assert tr.source.index == ["logs-sample_pkg.log-*", "logs-sample_pkg.other-*"]
        assert tr.dest.aliases[0].alias == "logs-sample_pkg_latest"
        assert tr.dest.aliases[0].move_on_creation is True
        assert tr.latest.unique_key == ["host.name"]
        assert tr.sync_time.delay == "60s"
        assert tr.retention_policy_time.max_age == "7d"
        assert t.manifest.start is True
        assert [f.name for f in t.fields] == ["host.name", "sample.latest.count"]


class TestFlattenFields:
    """flatten_fields()"""

    def test_typed_container_is_emitted(self, tmp_path):
        """object/nested containers are fields themselves; their children follow."""
        path = tmp_path / "fields.yml"
        path.write_text(
            "- name: labels\n  type: object\n  fields:\n    - name: env\n      type: keyword\n",
            encoding="utf-8",
        )

        fields = flatten_fields(load_yaml(path), path)

        assert [(f.name, f.type) for f in fields] == [("labels", "object"), ("labels.env", "keyword")]

    def test_unnamed_field(self, tmp_path):
        """A field entry without a name is malformed."""
        path = tmp_path / "fields.yml"
        path.write_text("- type: keyword\n", encoding="utf-8")

        with pytest.raises(DocumentError, match="no name"):
            flatten_fields(load_yaml(path), path)
