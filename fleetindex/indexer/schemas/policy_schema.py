"""Policy template schema definitions (manifest.yml policy_templates and their inputs)."""

from .utils import Column, TableSchema, id_column, references

POLICY_TEMPLATES = TableSchema(
    name="policy_templates",
    description="Policy templates offered by integration packages. Related to integrations via foreign key.",
    columns=[
        id_column(),
        Column("integration_id", "INTEGER", "foreign key to integrations table", nullable=False),
        Column("name", "TEXT", "name of the policy template", nullable=False),
        Column("title", "TEXT", "title of the policy template", nullable=False),
        Column("description", "TEXT", "description of the policy template", nullable=False),
        Column("type", "TEXT", "type of data stream"),
        Column("input", "TEXT", "input type"),
        Column("template_path", "TEXT", "path to template"),
        Column("multiple", "BOOLEAN", "whether multiple instances are allowed"),
        Column(
            "fips_compatible",
            "BOOLEAN",
            "indicate if this package is capable of satisfying FIPS requirements",
        ),
        Column("deployment_modes_default_enabled", "BOOLEAN", "defaults to true in Fleet"),
        Column("deployment_modes_agentless_enabled", "BOOLEAN", "agentless deployment enabled"),
        Column("deployment_modes_agentless_is_default", "BOOLEAN", "use agentless mode by default"),
        Column(
            "deployment_modes_agentless_organization",
            "TEXT",
            "responsible organization of the integration",
        ),
        Column("deployment_modes_agentless_division", "TEXT", "division responsible for the integration"),
        Column("deployment_modes_agentless_team", "TEXT", "team responsible for the integration"),
        Column(
            "deployment_modes_agentless_resources_requests_memory",
            "TEXT",
            "memory allocation for agentless deployment",
        ),
        Column(
            "deployment_modes_agentless_resources_requests_cpu",
            "TEXT",
            "CPU allocation for agentless deployment",
        ),
    ],
    foreign_keys=[references("integration_id", "integrations")],
)

POLICY_TEMPLATE_INPUTS = TableSchema(
    name="policy_template_inputs",
    description="Input configurations for policy templates. Related to policy_templates via foreign key.",
    columns=[
        id_column(),
        Column("policy_template_id", "INTEGER", "foreign key to policy_templates table", nullable=False),
        Column("type", "TEXT", "input type", nullable=False),
        Column("title", "TEXT", "title of the input", nullable=False),
        Column("description", "TEXT", "description of the input", nullable=False),
        Column("input_group", "TEXT", "input group classification"),
        Column("template_path", "TEXT", "path to the input template"),
        Column("multi", "BOOLEAN", "whether multiple instances are allowed"),
    ],
    foreign_keys=[references("policy_template_id", "policy_templates")],
)

POLICY_TEMPLATE_CATEGORIES = TableSchema(
    name="policy_template_categories",
    description="Categories associated with policy templates. Join table for many-to-many relationship.",
    columns=[
        Column("policy_template_id", "INTEGER", "foreign key to policy_templates table", nullable=False),
        Column("category", "TEXT", "category name", nullable=False),
    ],
    primary_key=["policy_template_id", "category"],
    foreign_keys=[references("policy_template_id", "policy_templates")],
)

POLICY_TEMPLATE_DATA_STREAMS = TableSchema(
    name="policy_template_data_streams",
    description="Data streams associated with policy templates. Join table for many-to-many relationship.",
    columns=[
        Column("policy_template_id", "INTEGER", "foreign key to policy_templates table", nullable=False),
        Column("data_stream_name", "TEXT", "name of the data stream", nullable=False),
    ],
    primary_key=["policy_template_id", "data_stream_name"],
    foreign_keys=[references("policy_template_id", "policy_templates")],
)

POLICY_TEMPLATE_ICONS = TableSchema(
    name="policy_template_icons",
    description="Icons associated with policy templates. Related to policy_templates via foreign key.",
    columns=[
        id_column(),
        Column("policy_template_id", "INTEGER", "foreign key to policy_templates table", nullable=False),
        Column("src", "TEXT", "source path of the icon"),
        Column("title", "TEXT", "title of the icon"),
        Column("size", "TEXT", "size specification"),
        Column("type", "TEXT", "MIME type of the icon"),
        Column("dark_mode", "BOOLEAN", "whether the icon is for dark mode"),
    ],
    foreign_keys=[references("policy_template_id", "policy_templates")],
)

POLICY_TEMPLATE_SCREENSHOTS = TableSchema(
    name="policy_template_screenshots",
    description="Screenshots associated with policy templates. Related to policy_templates via foreign key.",
    columns=[
        id_column(),
        Column("policy_template_id", "INTEGER", "foreign key to policy_templates table", nullable=False),
        Column("src", "TEXT", "source path of the screenshot"),
        Column("title", "TEXT", "title of the screenshot"),
        Column("size", "TEXT", "size specification"),
        Column("type", "TEXT", "MIME type of the screenshot"),
    ],
    foreign_keys=[references("policy_template_id", "policy_templates")],
)


POLICY_TABLES: dict[str, TableSchema] = {
    "policy_templates": POLICY_TEMPLATES,
    "policy_template_inputs": POLICY_TEMPLATE_INPUTS,
    "policy_template_categories": POLICY_TEMPLATE_CATEGORIES,
    "policy_template_data_streams": POLICY_TEMPLATE_DATA_STREAMS,
    "policy_template_icons": POLICY_TEMPLATE_ICONS,
    "policy_template_screenshots": POLICY_TEMPLATE_SCREENSHOTS,
}
