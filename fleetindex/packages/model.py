"""Typed in-memory representation of a Fleet integration package.

Every optional sub-document is its own dataclass and is None when the
source omits it, so "absent" and "present but empty" stay distinguishable
all the way to the projector. Scalars the source did not set are None;
required text fields default to "".
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Location:
    """Origin of a node: file path plus 1-based line and column."""

    file_path: str
    line: int = 0
    column: int = 0


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


@dataclass
class Icon:
    src: str = ""
    title: str = ""
    size: str = ""
    type: str = ""
    dark_mode: bool | None = None


@dataclass
class Screenshot:
    src: str = ""
    title: str = ""
    size: str = ""
    type: str = ""


@dataclass
class VarOption:
    value: str = ""
    text: str = ""


@dataclass
class Var:
    """A configuration variable. Each owner gets its own instance."""

    name: str
    type: str
    location: Location
    default: Any = None
    description: str = ""
    title: str = ""
    multi: bool | None = None
    required: bool | None = None
    secret: bool | None = None
    show_user: bool | None = None
    hide_in_deployment_modes: list[str] | None = None
    options: list[VarOption] = field(default_factory=list)


@dataclass
class Field:
    """A field definition after flattening (name is the full dotted path)."""

    name: str
    location: Location
    type: str = ""
    description: str = ""
    value: Any = None
    example: Any = None
    pattern: str = ""
    date_format: str = ""
    analyzer: str = ""
    search_analyzer: str = ""
    ignore_above: int | None = None
    multi_fields: list[Any] | None = None
    enabled: bool | None = None
    dynamic: str = ""
    index: bool | None = None
    doc_values: bool | None = None
    copy_to: str = ""
    scaling_factor: int | None = None
    alias_target_path: str = ""
    normalize: list[str] | None = None
    normalizer: str = ""
    null_value: Any = None
    dimension: bool | None = None
    metric_type: str = ""
    unit: str = ""
    external: str = ""
    yaml_path: str = ""


# ---------------------------------------------------------------------------
# Package manifest
# ---------------------------------------------------------------------------


@dataclass
class Conditions:
    elastic_subscription: str = ""
    elastic_capabilities: list[str] | None = None
    kibana_version: str = ""


@dataclass
class Owner:
    github: str = ""
    type: str = ""


@dataclass
class ResourceRequests:
    memory: str = ""
    cpu: str = ""


@dataclass
class DefaultDeploymentMode:
    enabled: bool | None = None


@dataclass
class AgentlessDeploymentMode:
    enabled: bool | None = None
    is_default: bool | None = None
    organization: str = ""
    division: str = ""
    team: str = ""
    resources: ResourceRequests | None = None


@dataclass
class DeploymentModes:
    default: DefaultDeploymentMode | None = None
    agentless: AgentlessDeploymentMode | None = None


@dataclass
class PolicyTemplateInput:
    type: str = ""
    title: str = ""
    description: str = ""
    input_group: str = ""
    template_path: str = ""
    multi: bool | None = None
    vars: list[Var] = field(default_factory=list)


@dataclass
class PolicyTemplate:
    name: str = ""
    title: str = ""
    description: str = ""
    type: str = ""
    input: str = ""
    template_path: str = ""
    multiple: bool | None = None
    fips_compatible: bool | None = None
    categories: list[str] = field(default_factory=list)
    data_streams: list[str] = field(default_factory=list)
    icons: list[Icon] = field(default_factory=list)
    screenshots: list[Screenshot] = field(default_factory=list)
    vars: list[Var] = field(default_factory=list)
    inputs: list[PolicyTemplateInput] = field(default_factory=list)
    deployment_modes: DeploymentModes | None = None


@dataclass
class PackageManifest:
    location: Location
    name: str = ""
    title: str = ""
    version: str = ""
    description: str = ""
    type: str = ""
    format_version: str = ""
    license: str = ""
    release: str = ""
    policy_templates_behavior: str = ""
    conditions: Conditions = field(default_factory=Conditions)
    source_license: str = ""
    owner: Owner = field(default_factory=Owner)
    # None when the elasticsearch / agent blocks are absent.
    elasticsearch_privileges_cluster: list[str] | None = None
    agent_privileges_root: bool | None = None
    categories: list[str] = field(default_factory=list)
    icons: list[Icon] = field(default_factory=list)
    screenshots: list[Screenshot] = field(default_factory=list)
    discovery_fields: list[str] = field(default_factory=list)
    vars: list[Var] = field(default_factory=list)
    policy_templates: list[PolicyTemplate] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Data streams
# ---------------------------------------------------------------------------


@dataclass
class Stream:
    input: str = ""
    title: str = ""
    description: str = ""
    template_path: str = ""
    enabled: bool | None = None
    vars: list[Var] = field(default_factory=list)


@dataclass
class IndexTemplate:
    settings: dict[str, Any] | None = None
    mappings: dict[str, Any] | None = None
    ingest_pipeline_name: str = ""
    data_stream_hidden: bool | None = None


@dataclass
class DataStreamElasticsearch:
    index_mode: str = ""
    source_mode: str = ""
    dynamic_dataset: bool | None = None
    dynamic_namespace: bool | None = None
    privileges_properties: list[str] | None = None
    index_template: IndexTemplate | None = None


@dataclass
class DataStreamManifest:
    location: Location
    title: str = ""
    type: str = ""
    dataset: str = ""
    dataset_is_prefix: bool | None = None
    ilm_policy: str = ""
    release: str = ""
    elasticsearch: DataStreamElasticsearch | None = None
    streams: list[Stream] = field(default_factory=list)


@dataclass
class Processor:
    """One ingest processor node; on_failure may contain None for null list items."""

    type: str
    attributes: dict[str, Any]
    location: Location
    on_failure: list["Processor | None"] = field(default_factory=list)


@dataclass
class IngestPipeline:
    name: str
    location: Location
    description: str = ""
    version: int | None = None
    meta: dict[str, Any] | None = None
    processors: list[Processor | None] = field(default_factory=list)
    on_failure: list[Processor | None] = field(default_factory=list)


@dataclass
class SampleEvent:
    event: Any
    location: Location


@dataclass
class DataStream:
    path: Path
    manifest: DataStreamManifest
    fields: list[Field] = field(default_factory=list)
    pipelines: list[IngestPipeline] = field(default_factory=list)
    sample_event: SampleEvent | None = None

    @property
    def name(self) -> str:
        return self.path.name


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


@dataclass
class TransformSource:
    # A single index name or a list of them.
    index: str | list[str] | None = None
    query: dict[str, Any] | None = None
    runtime_mappings: dict[str, Any] | None = None


@dataclass
class DestAlias:
    alias: str | None = None
    move_on_creation: bool | None = None


@dataclass
class TransformDest:
    index: str | None = None
    pipeline: str | None = None
    aliases: list[DestAlias] = field(default_factory=list)
    raw_aliases: list[Any] | None = None


@dataclass
class TransformPivot:
    group_by: dict[str, Any] | None = None
    aggregations: dict[str, Any] | None = None
    aggs: dict[str, Any] | None = None


@dataclass
class TransformLatest:
    sort: str | None = None
    unique_key: list[str] | None = None


@dataclass
class TransformSettings:
    dates_as_epoch_millis: bool | None = None
    docs_per_second: float | None = None
    align_checkpoints: bool | None = None
    max_page_search_size: int | None = None
    use_point_in_time: bool | None = None
    deduce_mappings: bool | None = None
    unattended: bool | None = None


@dataclass
class TimeWindow:
    """retention_policy.time / sync.time: a field plus max_age or delay."""

    field: str | None = None
    max_age: str | None = None
    delay: str | None = None


@dataclass
class TransformDefinition:
    location: Location
    source: TransformSource | None = None
    dest: TransformDest | None = None
    pivot: TransformPivot | None = None
    latest: TransformLatest | None = None
    description: str | None = None
    frequency: str | None = None
    settings: TransformSettings | None = None
    meta: dict[str, Any] | None = None
    retention_policy_time: TimeWindow | None = None
    sync_time: TimeWindow | None = None


@dataclass
class TransformManifest:
    location: Location
    start: bool | None = None
    destination_index_template_mappings: dict[str, Any] | None = None
    destination_index_template_settings: dict[str, Any] | None = None


@dataclass
class Transform:
    path: Path
    definition: TransformDefinition | None = None
    manifest: TransformManifest | None = None
    fields: list[Field] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name


# ---------------------------------------------------------------------------
# Changelog / build manifest
# ---------------------------------------------------------------------------


@dataclass
class Change:
    location: Location
    description: str = ""
    type: str = ""
    link: str = ""


@dataclass
class Release:
    location: Location
    version: str = ""
    changes: list[Change] = field(default_factory=list)


@dataclass
class Changelog:
    location: Location
    releases: list[Release] = field(default_factory=list)


@dataclass
class BuildManifest:
    location: Location
    ecs_reference: str = ""
    ecs_import_mappings: bool | None = None


# ---------------------------------------------------------------------------
# Package root
# ---------------------------------------------------------------------------


@dataclass
class Package:
    path: Path
    manifest: PackageManifest
    data_streams: list[DataStream] = field(default_factory=list)
    transforms: list[Transform] = field(default_factory=list)
    changelog: Changelog | None = None
    build: BuildManifest | None = None

    @property
    def dir_name(self) -> str:
        return self.path.name

    @property
    def ecs_reference(self) -> str:
        """ECS reference from the build manifest with any git@ prefix removed."""
        if self.build is None or not self.build.ecs_reference:
            return ""
        return self.build.ecs_reference.removeprefix("git@")
