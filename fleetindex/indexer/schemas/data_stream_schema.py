"""
Data stream schema definitions.

Tables:
- data_streams, streams
- fields (shared with transforms), data_stream_fields
- ingest_pipelines, ingest_processors (flattened processor trees)
- sample_events
"""

from .utils import Column, TableSchema, id_column, location_columns, references

DATA_STREAMS = TableSchema(
    name="data_streams",
    description="Data streams within integration packages. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("name", "TEXT", "name of the data stream (directory name)", nullable=False),
        Column("dataset", "TEXT", "dataset name"),
        Column("dataset_is_prefix", "BOOLEAN", "whether dataset is a prefix"),
        Column("ilm_policy", "TEXT", "ILM policy name"),
        Column("release", "TEXT", "release information"),
        Column("title", "TEXT", "title of the data stream", nullable=False),
        Column("type", "TEXT", "type of the data stream"),
        Column("elasticsearch_index_mode", "TEXT", "index mode setting"),
        Column("elasticsearch_source_mode", "TEXT", "source mode setting"),
        Column("elasticsearch_dynamic_dataset", "BOOLEAN", "dynamic dataset setting"),
        Column("elasticsearch_dynamic_namespace", "BOOLEAN", "dynamic namespace setting"),
        Column("elasticsearch_privileges_properties", "TEXT", "properties privileges (JSON array)"),
        Column("elasticsearch_index_template_settings", "TEXT", "index template settings (JSON)"),
        Column("elasticsearch_index_template_mappings", "TEXT", "index template mappings (JSON)"),
        Column("elasticsearch_index_template_ingest_pipeline_name", "TEXT", "ingest pipeline name"),
        Column("elasticsearch_index_template_data_stream_hidden", "BOOLEAN", "data stream hidden setting"),
        Column("file_path", "TEXT", "path to the data stream directory", nullable=False),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

STREAMS = TableSchema(
    name="streams",
    description="Individual streams within data stream manifests. Related to data_streams via foreign key.",
    columns=[
        id_column(),
        Column("data_stream_id", "INTEGER", "foreign key to data_streams table", nullable=False),
        Column("input", "TEXT", "input type", nullable=False),
        Column("description", "TEXT", "description of the stream", nullable=False),
        Column("title", "TEXT", "title of the stream", nullable=False),
        Column("template_path", "TEXT", "path to the template"),
        Column("enabled", "BOOLEAN", "whether the stream is enabled"),
    ],
    foreign_keys=[references("data_stream_id", "data_streams")],
)

FIELDS = TableSchema(
    name="fields",
    description="Elasticsearch field definitions used in data streams and transforms.",
    columns=[
        id_column(),
        Column("name", "TEXT", "flattened (dotted) name of the field", nullable=False),
        Column("type", "TEXT", "type of the field as used in Elasticsearch"),
        Column("description", "TEXT", "description of the field"),
        Column("value", "TEXT", "value of the field"),
        Column("example", "TEXT", "example of the field value"),
        Column("pattern", "TEXT", "regex pattern for the field"),
        Column("date_format", "TEXT", "input format for date fields"),
        Column("analyzer", "TEXT", "analyzer to use for the field"),
        Column("search_analyzer", "TEXT", "search analyzer to use for the field"),
        Column("ignore_above", "INTEGER", "ignore above setting for the field"),
        Column("multi_fields", "TEXT", "multi-fields configuration (JSON)"),
        Column("enabled", "BOOLEAN", "whether the field is enabled"),
        Column("dynamic", "TEXT", "dynamic setting for the field"),
        Column("indexed", "BOOLEAN", "whether the field should be indexed"),
        Column("doc_values", "BOOLEAN", "whether doc values should be stored"),
        Column("copy_to", "TEXT", "copy_to setting"),
        Column("scaling_factor", "INTEGER", "scaling factor for scaled_float fields"),
        Column(
            "alias_target_path",
            "TEXT",
            "for alias type fields this is the path to the target field",
        ),
        Column(
            "normalize",
            "TEXT",
            "expected ECS normalizations for a field (options are 'array') (JSON)",
        ),
        Column("normalizer", "TEXT", "name of a Elasticsearch normalizer to use"),
        Column("null_value", "TEXT", "null value replacement"),
        Column("dimension", "BOOLEAN", "whether the field is a dimension in TSDB"),
        Column("metric_type", "TEXT", "metric type for TSDB fields"),
        Column("unit", "TEXT", "unit of measurement for the field"),
        Column("external", "TEXT", "external definition source (possible values are 'ecs')"),
        Column(
            "unresolvable",
            "BOOLEAN",
            "set when the external definition could not be resolved",
        ),
        Column("yaml_path", "TEXT", "YAML path to the field definition"),
        *location_columns("field"),
    ],
)

DATA_STREAM_FIELDS = TableSchema(
    name="data_stream_fields",
    description="Join table linking data streams to their field definitions.",
    columns=[
        Column("data_stream_id", "INTEGER", "foreign key to data_streams table", nullable=False),
        Column("field_id", "INTEGER", "foreign key to fields table", nullable=False),
        Column("fields_file_name", "TEXT", "name of the fields file", nullable=False),
    ],
    primary_key=["data_stream_id", "field_id"],
    foreign_keys=[references("data_stream_id", "data_streams"), references("field_id", "fields")],
)

INGEST_PIPELINES = TableSchema(
    name="ingest_pipelines",
    description="Ingest pipeline configurations within data streams. Related to data_streams via foreign key.",
    columns=[
        id_column(),
        Column("data_stream_id", "INTEGER", "foreign key to data_streams table", nullable=False),
        Column("name", "TEXT", "name of the pipeline (file name)"),
        Column("description", "TEXT", "description of the ingest pipeline"),
        Column(
            "version",
            "INTEGER",
            "version number used by external systems to track ingest pipelines",
        ),
        Column("meta", "TEXT", "optional metadata about the ingest pipeline (JSON)"),
        Column("file_path", "TEXT", "path to the ingest node pipeline file", nullable=False),
    ],
    foreign_keys=[references("data_stream_id", "data_streams")],
)

INGEST_PROCESSORS = TableSchema(
    name="ingest_processors",
    description="Ingest processors within pipelines. Related to ingest_pipelines via foreign key.",
    columns=[
        id_column(),
        Column("ingest_pipeline_id", "INTEGER", "foreign key to ingest_pipelines table", nullable=False),
        Column("type", "TEXT", "ingest processor type", nullable=False),
        Column("attributes", "JSON", "processor configuration (JSON)"),
        Column(
            "json_pointer",
            "TEXT",
            "JSON Pointer (RFC 6901) location within the pipeline "
            "(e.g. '/processors/12/append' or '/on_failure/1/append').",
            nullable=False,
        ),
        *location_columns("processor"),
    ],
    foreign_keys=[references("ingest_pipeline_id", "ingest_pipelines")],
)

SAMPLE_EVENTS = TableSchema(
    name="sample_events",
    description="Sample event data for data streams. Related to data_streams via foreign key.",
    columns=[
        id_column(),
        Column("data_stream_id", "INTEGER", "foreign key to data_streams table", nullable=False),
        Column("event", "TEXT", "sample event data (JSON)"),
        Column("file_path", "TEXT", "path to the sample event file", nullable=False),
    ],
    foreign_keys=[references("data_stream_id", "data_streams")],
)


DATA_STREAM_TABLES: dict[str, TableSchema] = {
    "data_streams": DATA_STREAMS,
    "streams": STREAMS,
    "fields": FIELDS,
    "data_stream_fields": DATA_STREAM_FIELDS,
    "ingest_pipelines": INGEST_PIPELINES,
    "ingest_processors": INGEST_PROCESSORS,
    "sample_events": SAMPLE_EVENTS,
}
