"""Elasticsearch transform schema definitions (elasticsearch/transform/<name>/)."""

from .utils import Column, TableSchema, id_column, references

TRANSFORMS = TableSchema(
    name="transforms",
    description="Elasticsearch transform configurations within integration packages.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("name", "TEXT", "name of the transform (directory name)", nullable=False),
        Column(
            "transform_source_index",
            "TEXT",
            "source index (first entry when a list is given)",
            nullable=False,
        ),
        Column("transform_source_indices", "TEXT", "all source indices (JSON array)"),
        Column("transform_source_query", "TEXT", "query to filter source documents (JSON)"),
        Column("transform_source_runtime_mappings", "TEXT", "runtime field mappings (JSON)"),
        Column("transform_dest_index", "TEXT", "destination index name", nullable=False),
        Column("transform_dest_pipeline", "TEXT", "ingest pipeline to use for the destination"),
        Column("transform_dest_aliases_json", "TEXT", "aliases to the destination index (JSON)"),
        Column("transform_pivot_group_by", "TEXT", "grouping configuration (JSON)"),
        Column("transform_pivot_aggregations", "TEXT", "aggregations to perform (JSON)"),
        Column("transform_pivot_aggs", "TEXT", "alternative name for aggregations (JSON)"),
        Column("transform_latest_sort", "TEXT", "sort field for determining the latest documents"),
        Column("transform_latest_unique_key", "TEXT", "unique key fields (JSON array)"),
        Column("transform_description", "TEXT", "description of the transform"),
        Column("transform_frequency", "TEXT", "frequency of the transform execution"),
        Column(
            "transform_settings_dates_as_epoch_millis",
            "BOOLEAN",
            "whether dates should be stored as epoch milliseconds",
        ),
        Column(
            "transform_settings_docs_per_second",
            "REAL",
            "number of documents processed per second limit",
        ),
        Column("transform_settings_align_checkpoints", "BOOLEAN", "whether checkpoints should be aligned"),
        Column(
            "transform_settings_max_page_search_size",
            "INTEGER",
            "maximum page size for search requests",
        ),
        Column(
            "transform_settings_use_point_in_time",
            "BOOLEAN",
            "whether to use point-in-time for search requests",
        ),
        Column(
            "transform_settings_deduce_mappings",
            "BOOLEAN",
            "whether to deduce mappings automatically",
        ),
        Column("transform_settings_unattended", "BOOLEAN", "whether the transform runs in unattended mode"),
        Column("transform_meta", "TEXT", "arbitrary metadata for the transform (JSON)"),
        Column("transform_retention_policy_time_field", "TEXT", "field used for time-based retention"),
        Column("transform_retention_policy_time_max_age", "TEXT", "maximum age for retaining documents"),
        Column("transform_sync_time_field", "TEXT", "field used for time-based synchronization"),
        Column("transform_sync_time_delay", "TEXT", "delay for synchronization"),
        Column(
            "manifest_destination_index_template_mappings",
            "TEXT",
            "destination index template mappings (JSON)",
        ),
        Column(
            "manifest_destination_index_template_settings",
            "TEXT",
            "destination index template settings (JSON)",
        ),
        Column("manifest_start", "BOOLEAN", "whether to start the transform"),
        Column("file_path", "TEXT", "path to the transform directory", nullable=False),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

TRANSFORM_FIELDS = TableSchema(
    name="transform_fields",
    description="Join table linking transforms to their field definitions.",
    columns=[
        Column("transform_id", "INTEGER", "foreign key to transforms table", nullable=False),
        Column("field_id", "INTEGER", "foreign key to fields table", nullable=False),
    ],
    primary_key=["transform_id", "field_id"],
    foreign_keys=[references("transform_id", "transforms"), references("field_id", "fields")],
)

TRANSFORM_DEST_ALIASES = TableSchema(
    name="transform_dest_aliases",
    description="Aliases for transform destination indices. Related to transforms via foreign key.",
    columns=[
        id_column(),
        Column("transform_id", "INTEGER", "foreign key to transforms table", nullable=False),
        Column("alias", "TEXT", "name of the alias"),
        Column(
            "move_on_creation",
            "BOOLEAN",
            "whether the destination index should be the only index in this alias",
        ),
    ],
    foreign_keys=[references("transform_id", "transforms")],
)


TRANSFORM_TABLES: dict[str, TableSchema] = {
    "transforms": TRANSFORMS,
    "transform_fields": TRANSFORM_FIELDS,
    "transform_dest_aliases": TRANSFORM_DEST_ALIASES,
}
