"""
Package schema definitions - root integration rows and package-level children.

Tables:
- integrations (one row per package directory)
- integration_categories, integration_icons, integration_screenshots, discovery_fields
- build_manifests (_dev/build/build.yml)
- changelogs -> releases -> changes (changelog.yml)
"""

from .utils import Column, TableSchema, id_column, location_columns, references

INTEGRATIONS = TableSchema(
    name="integrations",
    description=(
        "Main table storing integration package information. "
        "Each integration represents a complete Fleet package."
    ),
    columns=[
        id_column(),
        Column("name", "TEXT", "name of the package", nullable=False),
        Column("dir_name", "TEXT", "directory name of the package", nullable=False, unique=True),
        Column("title", "TEXT", "title of the package", nullable=False),
        Column("version", "TEXT", "version of the package", nullable=False),
        Column("description", "TEXT", "description of the package", nullable=False),
        Column("type", "TEXT", "type of package (e.g. integration)", nullable=False),
        Column("format_version", "TEXT", "version of the package format", nullable=False),
        Column("license", "TEXT", "license under which the package is being released (deprecated)"),
        Column("release", "TEXT", "stability of the package (deprecated, use prerelease tags in the version)"),
        Column(
            "policy_templates_behavior",
            "TEXT",
            "expected behavior when there are more than one policy template defined",
        ),
        Column("conditions_elastic_subscription", "TEXT", "elastic subscription requirement"),
        Column(
            "conditions_elastic_capabilities",
            "TEXT",
            "stack features required by the package (JSON array)",
        ),
        Column("conditions_kibana_version", "TEXT", "kibana version requirement"),
        Column("source_license", "TEXT", "source license information"),
        Column("owner_github", "TEXT", "github owner information", nullable=False),
        Column(
            "owner_type",
            "TEXT",
            "describes who owns the package and the level of support that is provided",
            nullable=False,
        ),
        Column("elasticsearch_privileges_cluster", "TEXT", "cluster privilege requirements (JSON array)"),
        Column(
            "agent_privileges_root",
            "BOOLEAN",
            "set to true if collection requires root privileges in the agent",
        ),
        Column("file_path", "TEXT", "path to the integration directory", nullable=False),
    ],
)

INTEGRATION_CATEGORIES = TableSchema(
    name="integration_categories",
    description="Categories associated with integrations. Join table for many-to-many relationship.",
    columns=[
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("category", "TEXT", "category name", nullable=False),
    ],
    primary_key=["integration_id", "category"],
    foreign_keys=[references("integration_id", "integrations")],
)

INTEGRATION_ICONS = TableSchema(
    name="integration_icons",
    description="Icons associated with integrations. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("src", "TEXT", "source path of the icon"),
        Column("title", "TEXT", "title of the icon"),
        Column("size", "TEXT", "size specification"),
        Column("type", "TEXT", "MIME type of the icon"),
        Column("dark_mode", "BOOLEAN", "whether the icon is for dark mode"),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

INTEGRATION_SCREENSHOTS = TableSchema(
    name="integration_screenshots",
    description="Screenshots associated with integrations. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("src", "TEXT", "source path of the screenshot"),
        Column("title", "TEXT", "title of the screenshot"),
        Column("size", "TEXT", "size specification"),
        Column("type", "TEXT", "MIME type of the screenshot"),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

DISCOVERY_FIELDS = TableSchema(
    name="discovery_fields",
    description=(
        "Fields associated with package discovery capabilities. "
        "Related to integrations via foreign key."
    ),
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("name", "TEXT", "name of the field"),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

BUILD_MANIFESTS = TableSchema(
    name="build_manifests",
    description="Build configuration for integration packages. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("dependencies_ecs_reference", "TEXT", "ECS source reference"),
        Column(
            "dependencies_ecs_import_mappings",
            "BOOLEAN",
            "whether to import common used dynamic templates and properties",
        ),
        Column("file_path", "TEXT", "path to the build.yml file", nullable=False),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

CHANGELOGS = TableSchema(
    name="changelogs",
    description="Version history for integration packages. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("file_path", "TEXT", "path to the changelog file", nullable=False),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

RELEASES = TableSchema(
    name="releases",
    description="Individual releases within changelogs. Related to changelogs via foreign key.",
    columns=[
        id_column(),
        Column("changelog_id", "INTEGER", "foreign key to changelogs table", nullable=False),
        Column("version", "TEXT", "version of the release"),
        *location_columns("release", required=False),
    ],
    foreign_keys=[references("changelog_id", "changelogs")],
)

CHANGES = TableSchema(
    name="changes",
    description="Individual changes within releases. Related to releases via foreign key.",
    columns=[
        id_column(),
        Column("release_id", "INTEGER", "foreign key to releases table", nullable=False),
        Column("description", "TEXT", "description of the change"),
        Column("type", "TEXT", "type of change (e.g., enhancement, bugfix)"),
        Column("link", "TEXT", "link to more information about the change"),
        *location_columns("change", required=False),
    ],
    foreign_keys=[references("release_id", "releases")],
)


PACKAGE_TABLES: dict[str, TableSchema] = {
    "integrations": INTEGRATIONS,
    "integration_categories": INTEGRATION_CATEGORIES,
    "integration_icons": INTEGRATION_ICONS,
    "integration_screenshots": INTEGRATION_SCREENSHOTS,
    "discovery_fields": DISCOVERY_FIELDS,
    "build_manifests": BUILD_MANIFESTS,
    "changelogs": CHANGELOGS,
    "releases": RELEASES,
    "changes": CHANGES,
}
