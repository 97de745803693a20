"""Read Fleet package directories into the typed model.

Layout read for each package directory:

    manifest.yml
    changelog.yml
    _dev/build/build.yml
    data_stream/<name>/manifest.yml
    data_stream/<name>/fields/*.yml
    data_stream/<name>/elasticsearch/ingest_pipeline/*.{yml,yaml,json}
    data_stream/<name>/sample_event.json
    elasticsearch/transform/<name>/{transform.yml,manifest.yml,fields/*.yml}

No semantic validation is done; only structure that prevents mapping a
document (a list where a mapping is required, a processor that is not a
single-key mapping) raises DocumentError.
"""

import json
from pathlib import Path
from typing import Any

from fleetindex.indexer.exceptions import DocumentError
from fleetindex.utils.constants import (
    BUILD_MANIFEST,
    CHANGELOG_FILE,
    DATA_STREAM_DIR,
    INGEST_PIPELINE_DIR,
    PACKAGE_MANIFEST,
    PACKAGES_GLOB,
    SAMPLE_EVENT_FILE,
    TRANSFORM_DIR,
)
from fleetindex.utils.logging import logger

from .fields import as_bool, as_int, as_str_list, as_text, flatten_fields
from .loader import LocatedDict, load_yaml, location_of
from .model import (
    AgentlessDeploymentMode,
    BuildManifest,
    Change,
    Changelog,
    Conditions,
    DataStream,
    DataStreamElasticsearch,
    DataStreamManifest,
    DefaultDeploymentMode,
    DeploymentModes,
    DestAlias,
    Field,
    Icon,
    IndexTemplate,
    IngestPipeline,
    Location,
    Owner,
    Package,
    PackageManifest,
    PolicyTemplate,
    PolicyTemplateInput,
    Processor,
    Release,
    ResourceRequests,
    SampleEvent,
    Screenshot,
    Stream,
    TimeWindow,
    Transform,
    TransformDefinition,
    TransformDest,
    TransformLatest,
    TransformManifest,
    TransformPivot,
    TransformSettings,
    TransformSource,
    Var,
    VarOption,
)

PIPELINE_SUFFIXES = (".yml", ".yaml", ".json")


# ---------------------------------------------------------------------------
# Structural accessors
# ---------------------------------------------------------------------------


def _mapping(node: Any, key: str, path: Path) -> LocatedDict | None:
    if node is None:
        return None
    value = node.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise DocumentError(f"{path}: '{key}' must be a mapping, got {type(value).__name__}")
    return value


def _list(node: Any, key: str, path: Path) -> list:
    if node is None:
        return []
    value = node.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"{path}: '{key}' must be a list, got {type(value).__name__}")
    return value


def _dig(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _opt_text(value: Any) -> str | None:
    return None if value is None else as_text(value)


def _json_dict(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _require_mapping(doc: Any, path: Path) -> LocatedDict:
    if not isinstance(doc, dict):
        raise DocumentError(f"{path}: document root must be a mapping")
    return doc


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


def _read_vars(node: Any, path: Path) -> list[Var]:
    result = []
    for raw in _list(node, "vars", path):
        if not isinstance(raw, dict):
            raise DocumentError(f"{path}: var entries must be mappings")
        hide = raw.get("hide_in_deployment_modes")
        result.append(
            Var(
                name=as_text(raw.get("name")),
                type=as_text(raw.get("type")),
                location=location_of(raw, path),
                default=raw.get("default"),
                description=as_text(raw.get("description")),
                title=as_text(raw.get("title")),
                multi=as_bool(raw.get("multi")),
                required=as_bool(raw.get("required")),
                secret=as_bool(raw.get("secret")),
                show_user=as_bool(raw.get("show_user")),
                hide_in_deployment_modes=as_str_list(hide),
                options=[
                    VarOption(value=as_text(o.get("value")), text=as_text(o.get("text")))
                    for o in _list(raw, "options", path)
                    if isinstance(o, dict)
                ],
            )
        )
    return result


def _read_icons(node: Any, path: Path) -> list[Icon]:
    return [
        Icon(
            src=as_text(raw.get("src")),
            title=as_text(raw.get("title")),
            size=as_text(raw.get("size")),
            type=as_text(raw.get("type")),
            dark_mode=as_bool(raw.get("dark_mode")),
        )
        for raw in _list(node, "icons", path)
        if isinstance(raw, dict)
    ]


def _read_screenshots(node: Any, path: Path) -> list[Screenshot]:
    return [
        Screenshot(
            src=as_text(raw.get("src")),
            title=as_text(raw.get("title")),
            size=as_text(raw.get("size")),
            type=as_text(raw.get("type")),
        )
        for raw in _list(node, "screenshots", path)
        if isinstance(raw, dict)
    ]


def _read_fields_dir(fields_dir: Path) -> list[Field]:
    fields: list[Field] = []
    if not fields_dir.is_dir():
        return fields
    for path in sorted(fields_dir.glob("*.yml")):
        fields.extend(flatten_fields(load_yaml(path), path))
    return fields


# ---------------------------------------------------------------------------
# Package manifest
# ---------------------------------------------------------------------------


def _read_deployment_modes(raw: LocatedDict | None, path: Path) -> DeploymentModes | None:
    if raw is None:
        return None

    default = None
    default_raw = _mapping(raw, "default", path)
    if default_raw is not None:
        default = DefaultDeploymentMode(enabled=as_bool(default_raw.get("enabled")))

    agentless = None
    agentless_raw = _mapping(raw, "agentless", path)
    if agentless_raw is not None:
        resources = None
        requests = _dig(agentless_raw, "resources", "requests")
        if isinstance(requests, dict):
            resources = ResourceRequests(
                memory=as_text(requests.get("memory")),
                cpu=as_text(requests.get("cpu")),
            )
        agentless = AgentlessDeploymentMode(
            enabled=as_bool(agentless_raw.get("enabled")),
            is_default=as_bool(agentless_raw.get("is_default")),
            organization=as_text(agentless_raw.get("organization")),
            division=as_text(agentless_raw.get("division")),
            team=as_text(agentless_raw.get("team")),
            resources=resources,
        )

    return DeploymentModes(default=default, agentless=agentless)


def _read_policy_template(raw: LocatedDict, path: Path) -> PolicyTemplate:
    inputs = []
    for input_raw in _list(raw, "inputs", path):
        if not isinstance(input_raw, dict):
            raise DocumentError(f"{path}: policy template inputs must be mappings")
        inputs.append(
            PolicyTemplateInput(
                type=as_text(input_raw.get("type")),
                title=as_text(input_raw.get("title")),
                description=as_text(input_raw.get("description")),
                input_group=as_text(input_raw.get("input_group")),
                template_path=as_text(input_raw.get("template_path")),
                multi=as_bool(input_raw.get("multi")),
                vars=_read_vars(input_raw, path),
            )
        )

    return PolicyTemplate(
        name=as_text(raw.get("name")),
        title=as_text(raw.get("title")),
        description=as_text(raw.get("description")),
        type=as_text(raw.get("type")),
        input=as_text(raw.get("input")),
        template_path=as_text(raw.get("template_path")),
        multiple=as_bool(raw.get("multiple")),
        fips_compatible=as_bool(raw.get("fips_compatible")),
        categories=[as_text(c) for c in _list(raw, "categories", path)],
        data_streams=[as_text(d) for d in _list(raw, "data_streams", path)],
        icons=_read_icons(raw, path),
        screenshots=_read_screenshots(raw, path),
        vars=_read_vars(raw, path),
        inputs=inputs,
        deployment_modes=_read_deployment_modes(_mapping(raw, "deployment_modes", path), path),
    )


def read_package_manifest(path: Path) -> PackageManifest:
    raw = _require_mapping(load_yaml(path), path)

    elasticsearch = _mapping(raw, "elasticsearch", path)
    cluster = None
    if elasticsearch is not None:
        cluster = as_str_list(_dig(elasticsearch, "privileges", "cluster"))

    agent = _mapping(raw, "agent", path)
    root = None
    if agent is not None:
        root = bool(as_bool(_dig(agent, "privileges", "root")))

    discovery = _mapping(raw, "discovery", path)
    discovery_fields = [
        as_text(f.get("name")) for f in _list(discovery, "fields", path) if isinstance(f, dict)
    ]

    policy_templates = []
    for pt_raw in _list(raw, "policy_templates", path):
        if not isinstance(pt_raw, dict):
            raise DocumentError(f"{path}: policy_templates entries must be mappings")
        policy_templates.append(_read_policy_template(pt_raw, path))

    return PackageManifest(
        location=Location(str(path), raw.line, raw.column),
        name=as_text(raw.get("name")),
        title=as_text(raw.get("title")),
        version=as_text(raw.get("version")),
        description=as_text(raw.get("description")),
        type=as_text(raw.get("type")),
        format_version=as_text(raw.get("format_version")),
        license=as_text(raw.get("license")),
        release=as_text(raw.get("release")),
        policy_templates_behavior=as_text(raw.get("policy_templates_behavior")),
        conditions=Conditions(
            elastic_subscription=as_text(_dig(raw, "conditions", "elastic", "subscription")),
            elastic_capabilities=as_str_list(_dig(raw, "conditions", "elastic", "capabilities")),
            kibana_version=as_text(_dig(raw, "conditions", "kibana", "version")),
        ),
        source_license=as_text(_dig(raw, "source", "license")),
        owner=Owner(
            github=as_text(_dig(raw, "owner", "github")),
            type=as_text(_dig(raw, "owner", "type")),
        ),
        elasticsearch_privileges_cluster=cluster,
        agent_privileges_root=root,
        categories=[as_text(c) for c in _list(raw, "categories", path)],
        icons=_read_icons(raw, path),
        screenshots=_read_screenshots(raw, path),
        discovery_fields=discovery_fields,
        vars=_read_vars(raw, path),
        policy_templates=policy_templates,
    )


# ---------------------------------------------------------------------------
# Data streams
# ---------------------------------------------------------------------------


def _read_data_stream_manifest(path: Path) -> DataStreamManifest:
    raw = _require_mapping(load_yaml(path), path)

    elasticsearch = None
    es_raw = _mapping(raw, "elasticsearch", path)
    if es_raw is not None:
        index_template = None
        it_raw = _mapping(es_raw, "index_template", path)
        if it_raw is not None:
            hidden = _dig(it_raw, "data_stream", "hidden")
            index_template = IndexTemplate(
                settings=_json_dict(it_raw.get("settings")),
                mappings=_json_dict(it_raw.get("mappings")),
                ingest_pipeline_name=as_text(_dig(it_raw, "ingest_pipeline", "name")),
                data_stream_hidden=as_bool(hidden),
            )
        elasticsearch = DataStreamElasticsearch(
            index_mode=as_text(es_raw.get("index_mode")),
            source_mode=as_text(es_raw.get("source_mode")),
            dynamic_dataset=as_bool(es_raw.get("dynamic_dataset")),
            dynamic_namespace=as_bool(es_raw.get("dynamic_namespace")),
            privileges_properties=as_str_list(_dig(es_raw, "privileges", "properties")),
            index_template=index_template,
        )

    streams = []
    for s_raw in _list(raw, "streams", path):
        if not isinstance(s_raw, dict):
            raise DocumentError(f"{path}: streams entries must be mappings")
        streams.append(
            Stream(
                input=as_text(s_raw.get("input")),
                title=as_text(s_raw.get("title")),
                description=as_text(s_raw.get("description")),
                template_path=as_text(s_raw.get("template_path")),
                enabled=as_bool(s_raw.get("enabled")),
                vars=_read_vars(s_raw, path),
            )
        )

    return DataStreamManifest(
        location=Location(str(path), raw.line, raw.column),
        title=as_text(raw.get("title")),
        type=as_text(raw.get("type")),
        dataset=as_text(raw.get("dataset")),
        dataset_is_prefix=as_bool(raw.get("dataset_is_prefix")),
        ilm_policy=as_text(raw.get("ilm_policy")),
        release=as_text(raw.get("release")),
        elasticsearch=elasticsearch,
        streams=streams,
    )


def _read_processors(items: Any, where: str, path: Path) -> list[Processor | None]:
    """Parse a processor list; null items are kept as None placeholders."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise DocumentError(f"{path}: '{where}' must be a list of processors")

    result: list[Processor | None] = []
    for i, item in enumerate(items):
        if item is None:
            result.append(None)
            continue
        if not isinstance(item, dict) or len(item) != 1:
            raise DocumentError(f"{path}: {where}[{i}] must be a single-key processor mapping")

        (proc_type, body), = item.items()
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise DocumentError(f"{path}: {where}[{i}] ({proc_type}) configuration must be a mapping")

        attributes = {k: v for k, v in body.items() if k != "on_failure"}
        result.append(
            Processor(
                type=as_text(proc_type),
                attributes=attributes,
                location=location_of(item, path),
                on_failure=_read_processors(body.get("on_failure"), f"{where}[{i}].on_failure", path),
            )
        )
    return result


def read_ingest_pipeline(path: Path) -> IngestPipeline:
    raw = _require_mapping(load_yaml(path), path)
    return IngestPipeline(
        name=path.name,
        location=Location(str(path), raw.line, raw.column),
        description=as_text(raw.get("description")),
        version=as_int(raw.get("version")),
        meta=_json_dict(raw.get("_meta")),
        processors=_read_processors(raw.get("processors"), "processors", path),
        on_failure=_read_processors(raw.get("on_failure"), "on_failure", path),
    )


def _read_sample_event(path: Path) -> SampleEvent | None:
    if not path.is_file():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            event = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DocumentError(f"malformed sample event {path}: {e}", {"file": str(path)}) from e
    return SampleEvent(event=event, location=Location(str(path), 1, 1))


def read_data_stream(ds_dir: Path) -> DataStream:
    manifest = _read_data_stream_manifest(ds_dir / "manifest.yml")

    pipelines = []
    pipeline_dir = ds_dir / INGEST_PIPELINE_DIR
    if pipeline_dir.is_dir():
        for path in sorted(pipeline_dir.iterdir()):
            if path.is_file() and path.suffix in PIPELINE_SUFFIXES:
                pipelines.append(read_ingest_pipeline(path))

    return DataStream(
        path=ds_dir,
        manifest=manifest,
        fields=_read_fields_dir(ds_dir / "fields"),
        pipelines=pipelines,
        sample_event=_read_sample_event(ds_dir / SAMPLE_EVENT_FILE),
    )


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def _read_transform_definition(path: Path) -> TransformDefinition:
    raw = _require_mapping(load_yaml(path), path)

    source = None
    source_raw = _mapping(raw, "source", path)
    if source_raw is not None:
        index = source_raw.get("index")
        if isinstance(index, list):
            index = [as_text(i) for i in index]
        elif index is not None:
            index = as_text(index)
        source = TransformSource(
            index=index,
            query=_json_dict(source_raw.get("query")),
            runtime_mappings=_json_dict(source_raw.get("runtime_mappings")),
        )

    dest = None
    dest_raw = _mapping(raw, "dest", path)
    if dest_raw is not None:
        raw_aliases = _list(dest_raw, "aliases", path)
        dest = TransformDest(
            index=_opt_text(dest_raw.get("index")),
            pipeline=_opt_text(dest_raw.get("pipeline")),
            aliases=[
                DestAlias(
                    alias=_opt_text(a.get("alias")),
                    move_on_creation=as_bool(a.get("move_on_creation")),
                )
                for a in raw_aliases
                if isinstance(a, dict)
            ],
            raw_aliases=raw_aliases or None,
        )

    pivot = None
    pivot_raw = _mapping(raw, "pivot", path)
    if pivot_raw is not None:
        pivot = TransformPivot(
            group_by=_json_dict(pivot_raw.get("group_by")),
            aggregations=_json_dict(pivot_raw.get("aggregations")),
            aggs=_json_dict(pivot_raw.get("aggs")),
        )

    latest = None
    latest_raw = _mapping(raw, "latest", path)
    if latest_raw is not None:
        latest = TransformLatest(
            sort=_opt_text(latest_raw.get("sort")),
            unique_key=as_str_list(latest_raw.get("unique_key")),
        )

    settings = None
    settings_raw = _mapping(raw, "settings", path)
    if settings_raw is not None:
        docs_per_second = settings_raw.get("docs_per_second")
        settings = TransformSettings(
            dates_as_epoch_millis=as_bool(settings_raw.get("dates_as_epoch_millis")),
            docs_per_second=float(docs_per_second) if isinstance(docs_per_second, (int, float)) else None,
            align_checkpoints=as_bool(settings_raw.get("align_checkpoints")),
            max_page_search_size=as_int(settings_raw.get("max_page_search_size")),
            use_point_in_time=as_bool(settings_raw.get("use_point_in_time")),
            deduce_mappings=as_bool(settings_raw.get("deduce_mappings")),
            unattended=as_bool(settings_raw.get("unattended")),
        )

    retention = None
    retention_raw = _dig(raw, "retention_policy", "time")
    if isinstance(retention_raw, dict):
        retention = TimeWindow(
            field=_opt_text(retention_raw.get("field")),
            max_age=_opt_text(retention_raw.get("max_age")),
        )

    sync = None
    sync_raw = _dig(raw, "sync", "time")
    if isinstance(sync_raw, dict):
        sync = TimeWindow(
            field=_opt_text(sync_raw.get("field")),
            delay=_opt_text(sync_raw.get("delay")),
        )

    return TransformDefinition(
        location=Location(str(path), raw.line, raw.column),
        source=source,
        dest=dest,
        pivot=pivot,
        latest=latest,
        description=_opt_text(raw.get("description")),
        frequency=_opt_text(raw.get("frequency")),
        settings=settings,
        meta=_json_dict(raw.get("_meta")),
        retention_policy_time=retention,
        sync_time=sync,
    )


def _read_transform_manifest(path: Path) -> TransformManifest:
    raw = _require_mapping(load_yaml(path), path)
    template = _mapping(raw, "destination_index_template", path)
    return TransformManifest(
        location=Location(str(path), raw.line, raw.column),
        start=as_bool(raw.get("start")),
        destination_index_template_mappings=_json_dict(_dig(template, "mappings")),
        destination_index_template_settings=_json_dict(_dig(template, "settings")),
    )


def read_transform(transform_dir: Path) -> Transform:
    definition_path = transform_dir / "transform.yml"
    manifest_path = transform_dir / "manifest.yml"
    return Transform(
        path=transform_dir,
        definition=_read_transform_definition(definition_path) if definition_path.is_file() else None,
        manifest=_read_transform_manifest(manifest_path) if manifest_path.is_file() else None,
        fields=_read_fields_dir(transform_dir / "fields"),
    )


# ---------------------------------------------------------------------------
# Changelog / build
# ---------------------------------------------------------------------------


def read_changelog(path: Path) -> Changelog:
    doc = load_yaml(path)
    if doc is None:
        doc = []
    if not isinstance(doc, list):
        raise DocumentError(f"{path}: changelog must be a list of releases")

    releases = []
    for release_raw in doc:
        if not isinstance(release_raw, dict):
            raise DocumentError(f"{path}: changelog releases must be mappings")
        changes = [
            Change(
                location=location_of(c, path),
                description=as_text(c.get("description")),
                type=as_text(c.get("type")),
                link=as_text(c.get("link")),
            )
            for c in _list(release_raw, "changes", path)
            if isinstance(c, dict)
        ]
        releases.append(
            Release(
                location=location_of(release_raw, path),
                version=as_text(release_raw.get("version")),
                changes=changes,
            )
        )
    return Changelog(location=Location(str(path), 1, 1), releases=releases)


def read_build_manifest(path: Path) -> BuildManifest:
    raw = _require_mapping(load_yaml(path), path)
    ecs = _dig(raw, "dependencies", "ecs")
    return BuildManifest(
        location=Location(str(path), raw.line, raw.column),
        ecs_reference=as_text(_dig(ecs, "reference")),
        ecs_import_mappings=as_bool(_dig(ecs, "import_mappings")),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def discover_packages(integrations_dir: Path | str) -> list[Path]:
    """List package directories under <integrations_dir>/packages in sorted order.

    Raises:
        DocumentError: the directory holds no packages
    """
    root = Path(integrations_dir)
    dirs = sorted(p for p in root.glob(PACKAGES_GLOB) if (p / PACKAGE_MANIFEST).is_file())
    if not dirs:
        raise DocumentError(f"no packages found under {root / 'packages'}", {"dir": str(root)})
    return dirs


def read_package(pkg_dir: Path | str) -> Package:
    """Read one package directory into a Package."""
    pkg_dir = Path(pkg_dir)
    logger.debug("Reading package {dir}", dir=pkg_dir.name)

    manifest_path = pkg_dir / PACKAGE_MANIFEST
    if not manifest_path.is_file():
        raise DocumentError(f"{pkg_dir}: missing {PACKAGE_MANIFEST}", {"dir": str(pkg_dir)})

    data_streams = []
    ds_root = pkg_dir / DATA_STREAM_DIR
    if ds_root.is_dir():
        for ds_dir in sorted(ds_root.iterdir()):
            if (ds_dir / "manifest.yml").is_file():
                data_streams.append(read_data_stream(ds_dir))

    transforms = []
    transform_root = pkg_dir / TRANSFORM_DIR
    if transform_root.is_dir():
        for transform_dir in sorted(transform_root.iterdir()):
            if transform_dir.is_dir():
                transforms.append(read_transform(transform_dir))

    changelog_path = pkg_dir / CHANGELOG_FILE
    build_path = pkg_dir / BUILD_MANIFEST

    return Package(
        path=pkg_dir,
        manifest=read_package_manifest(manifest_path),
        data_streams=data_streams,
        transforms=transforms,
        changelog=read_changelog(changelog_path) if changelog_path.is_file() else None,
        build=read_build_manifest(build_path) if build_path.is_file() else None,
    )
