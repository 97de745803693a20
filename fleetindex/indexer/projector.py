"""Relational projection of package entities onto table rows.

Each *_row function returns a dict keyed by column name for one table.
Parent keys are passed in by the writer. The coercion rules are shared by
every table:

- optional text columns store NULL for "" (empty_is_null); required text
  columns keep the raw value, "" when the source omitted it
- optional booleans and numbers store NULL only when the source did not set
  them; an explicit False or 0 is kept
- composite values are JSON text; None, [], {} and "" become NULL
  (json_or_null)
"""

import json
from typing import Any

from fleetindex.packages.ecs import EcsField
from fleetindex.packages.model import (
    BuildManifest,
    Change,
    Changelog,
    DataStream,
    DestAlias,
    Field,
    Icon,
    IngestPipeline,
    Location,
    Package,
    PolicyTemplate,
    PolicyTemplateInput,
    Release,
    SampleEvent,
    Screenshot,
    Stream,
    Transform,
    Var,
    VarOption,
)

from .exceptions import MappingError
from .processors import FlatProcessor

Row = dict[str, Any]


def empty_is_null(value: str | None) -> str | None:
    """'' -> None for optional text columns."""
    if value is None or value == "":
        return None
    return value


def json_or_null(value: Any, what: str = "value") -> str | None:
    """Encode a composite value as JSON text; absent or empty values are NULL.

    Raises:
        MappingError: the value is not JSON serializable
    """
    if value is None:
        return None
    if isinstance(value, (list, dict, str, tuple)) and len(value) == 0:
        return None
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise MappingError(f"cannot encode {what} as JSON: {e}", {"value": repr(value)[:200]}) from e


def _positive_or_null(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


def _location(loc: Location, required: bool = True) -> Row:
    if required:
        return {"file_path": loc.file_path, "line_number": loc.line, "col": loc.column}
    return {
        "file_path": loc.file_path,
        "line_number": _positive_or_null(loc.line),
        "col": _positive_or_null(loc.column),
    }


# ---------------------------------------------------------------------------
# Package level
# ---------------------------------------------------------------------------


def integration_row(pkg: Package) -> Row:
    m = pkg.manifest
    return {
        "name": m.name,
        "dir_name": pkg.dir_name,
        "title": m.title,
        "version": m.version,
        "description": m.description,
        "type": m.type,
        "format_version": m.format_version,
        "license": empty_is_null(m.license),
        "release": empty_is_null(m.release),
        "policy_templates_behavior": empty_is_null(m.policy_templates_behavior),
        "conditions_elastic_subscription": empty_is_null(m.conditions.elastic_subscription),
        "conditions_elastic_capabilities": json_or_null(
            m.conditions.elastic_capabilities, "conditions.elastic.capabilities"
        ),
        "conditions_kibana_version": empty_is_null(m.conditions.kibana_version),
        "source_license": empty_is_null(m.source_license),
        "owner_github": m.owner.github,
        "owner_type": m.owner.type,
        "elasticsearch_privileges_cluster": json_or_null(
            m.elasticsearch_privileges_cluster, "elasticsearch.privileges.cluster"
        ),
        "agent_privileges_root": m.agent_privileges_root,
        "file_path": str(pkg.path),
    }


def category_row(owner_column: str, owner_id: int, category: str) -> Row:
    return {owner_column: owner_id, "category": category}


def icon_row(owner_column: str, owner_id: int, icon: Icon) -> Row:
    return {
        owner_column: owner_id,
        "src": empty_is_null(icon.src),
        "title": empty_is_null(icon.title),
        "size": empty_is_null(icon.size),
        "type": empty_is_null(icon.type),
        "dark_mode": icon.dark_mode,
    }


def screenshot_row(owner_column: str, owner_id: int, screenshot: Screenshot) -> Row:
    return {
        owner_column: owner_id,
        "src": empty_is_null(screenshot.src),
        "title": empty_is_null(screenshot.title),
        "size": empty_is_null(screenshot.size),
        "type": empty_is_null(screenshot.type),
    }


def discovery_field_row(integration_id: int, name: str) -> Row:
    return {"integration_id": integration_id, "name": empty_is_null(name)}


def build_manifest_row(integration_id: int, build: BuildManifest) -> Row:
    return {
        "integration_id": integration_id,
        "dependencies_ecs_reference": empty_is_null(build.ecs_reference),
        "dependencies_ecs_import_mappings": build.ecs_import_mappings,
        "file_path": build.location.file_path,
    }


def changelog_row(integration_id: int, changelog: Changelog) -> Row:
    return {"integration_id": integration_id, "file_path": changelog.location.file_path}


def release_row(changelog_id: int, release: Release) -> Row:
    return {
        "changelog_id": changelog_id,
        "version": empty_is_null(release.version),
        **_location(release.location, required=False),
    }


def change_row(release_id: int, change: Change) -> Row:
    return {
        "release_id": release_id,
        "description": empty_is_null(change.description),
        "type": empty_is_null(change.type),
        "link": empty_is_null(change.link),
        **_location(change.location, required=False),
    }


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


def var_row(var: Var) -> Row:
    return {
        "name": var.name,
        "default_value": json_or_null(var.default, f"default of var {var.name!r}"),
        "description": empty_is_null(var.description),
        "type": var.type,
        "title": empty_is_null(var.title),
        "multi": var.multi,
        "required": var.required,
        "secret": var.secret,
        "show_user": var.show_user,
        "hide_in_deployment_modes": json_or_null(var.hide_in_deployment_modes, "hide_in_deployment_modes"),
        **_location(var.location),
    }


def var_option_row(var_id: int, option: VarOption) -> Row:
    return {
        "var_id": var_id,
        "value": empty_is_null(option.value),
        "text": empty_is_null(option.text),
    }


def var_join_row(owner_column: str, owner_id: int, var_id: int) -> Row:
    return {owner_column: owner_id, "var_id": var_id}


# ---------------------------------------------------------------------------
# Policy templates
# ---------------------------------------------------------------------------


def policy_template_row(integration_id: int, pt: PolicyTemplate) -> Row:
    row = {
        "integration_id": integration_id,
        "name": pt.name,
        "title": pt.title,
        "description": pt.description,
        "type": empty_is_null(pt.type),
        "input": empty_is_null(pt.input),
        "template_path": empty_is_null(pt.template_path),
        "multiple": pt.multiple,
        "fips_compatible": pt.fips_compatible,
        "deployment_modes_default_enabled": None,
        "deployment_modes_agentless_enabled": None,
        "deployment_modes_agentless_is_default": None,
        "deployment_modes_agentless_organization": None,
        "deployment_modes_agentless_division": None,
        "deployment_modes_agentless_team": None,
        "deployment_modes_agentless_resources_requests_memory": None,
        "deployment_modes_agentless_resources_requests_cpu": None,
    }

    modes = pt.deployment_modes
    if modes is None:
        return row

    if modes.default is not None:
        row["deployment_modes_default_enabled"] = modes.default.enabled

    agentless = modes.agentless
    if agentless is not None:
        row["deployment_modes_agentless_enabled"] = agentless.enabled
        row["deployment_modes_agentless_is_default"] = agentless.is_default
        row["deployment_modes_agentless_organization"] = empty_is_null(agentless.organization)
        row["deployment_modes_agentless_division"] = empty_is_null(agentless.division)
        row["deployment_modes_agentless_team"] = empty_is_null(agentless.team)
        if agentless.resources is not None:
            row["deployment_modes_agentless_resources_requests_memory"] = empty_is_null(
                agentless.resources.memory
            )
            row["deployment_modes_agentless_resources_requests_cpu"] = empty_is_null(agentless.resources.cpu)

    return row


def policy_template_data_stream_row(policy_template_id: int, data_stream_name: str) -> Row:
    return {"policy_template_id": policy_template_id, "data_stream_name": data_stream_name}


def policy_template_input_row(policy_template_id: int, pt_input: PolicyTemplateInput) -> Row:
    return {
        "policy_template_id": policy_template_id,
        "type": pt_input.type,
        "title": pt_input.title,
        "description": pt_input.description,
        "input_group": empty_is_null(pt_input.input_group),
        "template_path": empty_is_null(pt_input.template_path),
        "multi": pt_input.multi,
    }


# ---------------------------------------------------------------------------
# Data streams
# ---------------------------------------------------------------------------


def data_stream_row(integration_id: int, ds: DataStream) -> Row:
    m = ds.manifest
    row = {
        "integration_id": integration_id,
        "name": ds.name,
        "dataset": empty_is_null(m.dataset),
        "dataset_is_prefix": m.dataset_is_prefix,
        "ilm_policy": empty_is_null(m.ilm_policy),
        "release": empty_is_null(m.release),
        "title": m.title,
        "type": empty_is_null(m.type),
        "elasticsearch_index_mode": None,
        "elasticsearch_source_mode": None,
        "elasticsearch_dynamic_dataset": None,
        "elasticsearch_dynamic_namespace": None,
        "elasticsearch_privileges_properties": None,
        "elasticsearch_index_template_settings": None,
        "elasticsearch_index_template_mappings": None,
        "elasticsearch_index_template_ingest_pipeline_name": None,
        "elasticsearch_index_template_data_stream_hidden": None,
        "file_path": str(ds.path),
    }

    es = m.elasticsearch
    if es is None:
        return row

    row["elasticsearch_index_mode"] = empty_is_null(es.index_mode)
    row["elasticsearch_source_mode"] = empty_is_null(es.source_mode)
    row["elasticsearch_dynamic_dataset"] = es.dynamic_dataset
    row["elasticsearch_dynamic_namespace"] = es.dynamic_namespace
    row["elasticsearch_privileges_properties"] = json_or_null(
        es.privileges_properties, "elasticsearch.privileges.properties"
    )

    template = es.index_template
    if template is not None:
        row["elasticsearch_index_template_settings"] = json_or_null(template.settings, "index_template.settings")
        row["elasticsearch_index_template_mappings"] = json_or_null(template.mappings, "index_template.mappings")
        row["elasticsearch_index_template_ingest_pipeline_name"] = empty_is_null(template.ingest_pipeline_name)
        row["elasticsearch_index_template_data_stream_hidden"] = template.data_stream_hidden

    return row


def stream_row(data_stream_id: int, stream: Stream) -> Row:
    return {
        "data_stream_id": data_stream_id,
        "input": stream.input,
        "description": stream.description,
        "title": stream.title,
        "template_path": empty_is_null(stream.template_path),
        "enabled": stream.enabled,
    }


def field_row(f: Field, external_def: EcsField | None = None) -> Row:
    """Row for one flattened field.

    When external_def is given, absent local type, pattern, normalize and
    description are taken from it; local values always win. A field that
    declares `external: ecs` without a resolved definition is marked
    unresolvable.
    """
    row = {
        "name": f.name,
        "type": empty_is_null(f.type),
        "description": empty_is_null(f.description),
        "value": json_or_null(f.value, f"value of field {f.name!r}"),
        "example": json_or_null(f.example, f"example of field {f.name!r}"),
        "pattern": empty_is_null(f.pattern),
        "date_format": empty_is_null(f.date_format),
        "analyzer": empty_is_null(f.analyzer),
        "search_analyzer": empty_is_null(f.search_analyzer),
        "ignore_above": _positive_or_null(f.ignore_above),
        "multi_fields": json_or_null(f.multi_fields, f"multi_fields of field {f.name!r}"),
        "enabled": f.enabled,
        "dynamic": empty_is_null(f.dynamic),
        "indexed": f.index,
        "doc_values": f.doc_values,
        "copy_to": empty_is_null(f.copy_to),
        "scaling_factor": f.scaling_factor,
        "alias_target_path": empty_is_null(f.alias_target_path),
        "normalize": json_or_null(f.normalize, "normalize"),
        "normalizer": empty_is_null(f.normalizer),
        "null_value": json_or_null(f.null_value, f"null_value of field {f.name!r}"),
        "dimension": f.dimension,
        "metric_type": empty_is_null(f.metric_type),
        "unit": empty_is_null(f.unit),
        "external": empty_is_null(f.external),
        "unresolvable": None,
        "yaml_path": empty_is_null(f.yaml_path),
        **_location(f.location),
    }

    if external_def is not None:
        if row["type"] is None and external_def.data_type:
            row["type"] = external_def.data_type
        if row["pattern"] is None and external_def.pattern:
            row["pattern"] = external_def.pattern
        if row["normalize"] is None and external_def.array:
            row["normalize"] = json.dumps(["array"])
        if row["description"] is None and external_def.description:
            row["description"] = external_def.description
    elif f.external == "ecs":
        row["unresolvable"] = True

    return row


def data_stream_field_row(data_stream_id: int, field_id: int, f: Field) -> Row:
    return {
        "data_stream_id": data_stream_id,
        "field_id": field_id,
        "fields_file_name": f.location.file_path.replace("\\", "/").rsplit("/", 1)[-1],
    }


def ingest_pipeline_row(data_stream_id: int, pipeline: IngestPipeline) -> Row:
    return {
        "data_stream_id": data_stream_id,
        "name": empty_is_null(pipeline.name),
        "description": empty_is_null(pipeline.description),
        "version": pipeline.version,
        "meta": json_or_null(pipeline.meta, f"_meta of pipeline {pipeline.name!r}"),
        "file_path": pipeline.location.file_path,
    }


def ingest_processor_row(ingest_pipeline_id: int, proc: FlatProcessor) -> Row:
    return {
        "ingest_pipeline_id": ingest_pipeline_id,
        "type": proc.type,
        "attributes": proc.marshal_attributes(),
        "json_pointer": proc.json_pointer,
        "file_path": proc.file_path,
        "line_number": proc.line,
        "col": proc.column,
    }


def sample_event_row(data_stream_id: int, sample: SampleEvent) -> Row:
    return {
        "data_stream_id": data_stream_id,
        "event": json_or_null(sample.event, "sample event"),
        "file_path": sample.location.file_path,
    }


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def narrow_index(index: str | list[str] | None) -> str:
    """Single representative of a str-or-list index: the first list entry."""
    if isinstance(index, list):
        return index[0] if index else ""
    return index or ""


def transform_row(integration_id: int, t: Transform) -> Row:
    row: Row = {column: None for column in _TRANSFORM_OPTIONAL_COLUMNS}
    row.update(
        {
            "integration_id": integration_id,
            "name": t.name,
            "transform_source_index": "",
            "transform_dest_index": "",
            "file_path": str(t.path),
        }
    )

    tr = t.definition
    if tr is not None:
        if tr.source is not None:
            row["transform_source_index"] = narrow_index(tr.source.index)
            indices = tr.source.index if isinstance(tr.source.index, list) else None
            if tr.source.index and not indices:
                indices = [tr.source.index]
            row["transform_source_indices"] = json_or_null(indices, "source.index")
            row["transform_source_query"] = json_or_null(tr.source.query, "source.query")
            row["transform_source_runtime_mappings"] = json_or_null(
                tr.source.runtime_mappings, "source.runtime_mappings"
            )

        if tr.dest is not None:
            row["transform_dest_index"] = tr.dest.index or ""
            row["transform_dest_pipeline"] = tr.dest.pipeline
            row["transform_dest_aliases_json"] = json_or_null(tr.dest.raw_aliases, "dest.aliases")

        if tr.pivot is not None:
            row["transform_pivot_group_by"] = json_or_null(tr.pivot.group_by, "pivot.group_by")
            row["transform_pivot_aggregations"] = json_or_null(tr.pivot.aggregations, "pivot.aggregations")
            row["transform_pivot_aggs"] = json_or_null(tr.pivot.aggs, "pivot.aggs")

        if tr.latest is not None:
            row["transform_latest_sort"] = tr.latest.sort
            row["transform_latest_unique_key"] = json_or_null(tr.latest.unique_key, "latest.unique_key")

        row["transform_description"] = tr.description
        row["transform_frequency"] = tr.frequency

        if tr.settings is not None:
            s = tr.settings
            row["transform_settings_dates_as_epoch_millis"] = s.dates_as_epoch_millis
            row["transform_settings_docs_per_second"] = s.docs_per_second
            row["transform_settings_align_checkpoints"] = s.align_checkpoints
            row["transform_settings_max_page_search_size"] = s.max_page_search_size
            row["transform_settings_use_point_in_time"] = s.use_point_in_time
            row["transform_settings_deduce_mappings"] = s.deduce_mappings
            row["transform_settings_unattended"] = s.unattended

        row["transform_meta"] = json_or_null(tr.meta, "_meta")

        if tr.retention_policy_time is not None:
            row["transform_retention_policy_time_field"] = tr.retention_policy_time.field
            row["transform_retention_policy_time_max_age"] = tr.retention_policy_time.max_age

        if tr.sync_time is not None:
            row["transform_sync_time_field"] = tr.sync_time.field
            row["transform_sync_time_delay"] = tr.sync_time.delay

    if t.manifest is not None:
        row["manifest_start"] = t.manifest.start
        row["manifest_destination_index_template_mappings"] = json_or_null(
            t.manifest.destination_index_template_mappings, "destination_index_template.mappings"
        )
        row["manifest_destination_index_template_settings"] = json_or_null(
            t.manifest.destination_index_template_settings, "destination_index_template.settings"
        )

    return row


_TRANSFORM_OPTIONAL_COLUMNS = (
    "transform_source_indices",
    "transform_source_query",
    "transform_source_runtime_mappings",
    "transform_dest_pipeline",
    "transform_dest_aliases_json",
    "transform_pivot_group_by",
    "transform_pivot_aggregations",
    "transform_pivot_aggs",
    "transform_latest_sort",
    "transform_latest_unique_key",
    "transform_description",
    "transform_frequency",
    "transform_settings_dates_as_epoch_millis",
    "transform_settings_docs_per_second",
    "transform_settings_align_checkpoints",
    "transform_settings_max_page_search_size",
    "transform_settings_use_point_in_time",
    "transform_settings_deduce_mappings",
    "transform_settings_unattended",
    "transform_meta",
    "transform_retention_policy_time_field",
    "transform_retention_policy_time_max_age",
    "transform_sync_time_field",
    "transform_sync_time_delay",
    "manifest_destination_index_template_mappings",
    "manifest_destination_index_template_settings",
    "manifest_start",
)


def transform_field_row(transform_id: int, field_id: int) -> Row:
    return {"transform_id": transform_id, "field_id": field_id}


def transform_dest_alias_row(transform_id: int, alias: DestAlias) -> Row:
    return {
        "transform_id": transform_id,
        "alias": alias.alias,
        "move_on_creation": alias.move_on_creation,
    }
