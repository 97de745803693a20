"""
Variable schema definitions.

vars is a master table: every owning context (package, policy template,
policy template input, stream) gets its own row and reaches it through a
join table. Rows are never shared between owners.
"""

from .utils import Column, TableSchema, id_column, location_columns, references

VARS = TableSchema(
    name="vars",
    description=(
        "Configuration variables used throughout the package. "
        "This is a master table for all variables."
    ),
    columns=[
        id_column(),
        Column("name", "TEXT", "variable name", nullable=False),
        Column("default_value", "TEXT", "default value(s) for the variable (JSON)"),
        Column("description", "TEXT", "short description of the variable"),
        Column(
            "type",
            "TEXT",
            "data type of variable (e.g., bool, email, integer, password, select, "
            "text, textarea, time_zone, url, yaml)",
            nullable=False,
        ),
        Column("title", "TEXT", "title of the variable displayed in the UI"),
        Column("multi", "BOOLEAN", "specifies if the variable can contain multiple values"),
        Column("required", "BOOLEAN", "specifies if the variable is required"),
        Column("secret", "BOOLEAN", "indicates that the variable contains sensitive information"),
        Column(
            "show_user",
            "BOOLEAN",
            "indicates whether this variable should be shown to the user by default",
        ),
        Column(
            "hide_in_deployment_modes",
            "TEXT",
            "deployment modes where this variable should be hidden (JSON array)",
        ),
        *location_columns("variable"),
    ],
)

VAR_OPTIONS = TableSchema(
    name="var_options",
    description="Options for select-type variables. Related to vars via foreign key.",
    columns=[
        id_column(),
        Column("var_id", "INTEGER", "foreign key to vars table", nullable=False),
        Column("value", "TEXT", "option value"),
        Column("text", "TEXT", "display text for the option"),
    ],
    foreign_keys=[references("var_id", "vars")],
)


def _var_join(name: str, owner_column: str, owner_table: str, description: str) -> TableSchema:
    return TableSchema(
        name=name,
        description=description,
        columns=[
            Column(owner_column, "INTEGER", f"foreign key to {owner_table} table", nullable=False),
            Column("var_id", "INTEGER", "foreign key to vars table", nullable=False),
        ],
        primary_key=[owner_column, "var_id"],
        foreign_keys=[references(owner_column, owner_table), references("var_id", "vars")],
    )


INTEGRATION_VARS = _var_join(
    "integration_vars",
    "integration_id",
    "integrations",
    "Join table linking integrations to their configuration variables.",
)

POLICY_TEMPLATE_VARS = _var_join(
    "policy_template_vars",
    "policy_template_id",
    "policy_templates",
    "Join table linking policy templates to their configuration variables.",
)

POLICY_TEMPLATE_INPUT_VARS = _var_join(
    "policy_template_input_vars",
    "policy_template_input_id",
    "policy_template_inputs",
    "Join table linking policy template inputs to their configuration variables.",
)

STREAM_VARS = _var_join(
    "stream_vars",
    "stream_id",
    "streams",
    "Join table linking streams to their configuration variables.",
)


VAR_TABLES: dict[str, TableSchema] = {
    "vars": VARS,
    "var_options": VAR_OPTIONS,
    "integration_vars": INTEGRATION_VARS,
    "policy_template_vars": POLICY_TEMPLATE_VARS,
    "policy_template_input_vars": POLICY_TEMPLATE_INPUT_VARS,
    "stream_vars": STREAM_VARS,
}
