"""Schema utility classes - Foundation for all schema definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Column:
    """Represents a database column with type, constraints and documentation."""

    name: str
    type: str
    comment: str = ""
    nullable: bool = True
    default: str | None = None
    primary_key: bool = False
    autoincrement: bool = False
    unique: bool = False

    def to_sql(self) -> str:
        """Generate SQL column definition."""
        parts = [self.name, self.type]
        if self.primary_key:
            parts.append("PRIMARY KEY")

            if self.autoincrement and self.type.upper() == "INTEGER":
                parts.append("AUTOINCREMENT")
        if self.unique:
            parts.append("UNIQUE")
        if not self.nullable:
            parts.append("NOT NULL")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


def id_column() -> Column:
    """Surrogate key shared by every entity table."""
    return Column("id", "INTEGER", "unique identifier", primary_key=True, autoincrement=True)


def location_columns(what: str, required: bool = True) -> list[Column]:
    """file_path/line_number/col triple for rows sourced from a located YAML node."""
    return [
        Column("file_path", "TEXT", f"file path where the {what} is defined", nullable=False),
        Column("line_number", "INTEGER", "line number in the file", nullable=not required),
        Column("col", "INTEGER", "character position in the file", nullable=not required),
    ]


@dataclass
class ForeignKey:
    """Foreign key relationship metadata."""

    local_columns: list[str]
    foreign_table: str
    foreign_columns: list[str]

    def to_sql(self) -> str:
        local = ", ".join(self.local_columns)
        foreign = ", ".join(self.foreign_columns)
        return f"FOREIGN KEY ({local}) REFERENCES {self.foreign_table}({foreign})"


def references(column: str, table: str) -> ForeignKey:
    """Single-column foreign key onto table(id)."""
    return ForeignKey([column], table, ["id"])


@dataclass
class TableSchema:
    """Represents a complete table schema.

    The generated DDL carries the table description and every column comment
    as SQL comments; that text is what the catalog introspection returns.
    """

    name: str
    columns: list[Column]
    description: str = ""
    primary_key: list[str] | None = None
    foreign_keys: list[ForeignKey] = field(default_factory=list)

    def column_names(self) -> list[str]:
        """Get list of column names in definition order."""
        return [col.name for col in self.columns]

    def create_table_sql(self) -> str:
        """Generate a commented CREATE TABLE statement."""
        items: list[tuple[str, str]] = [(col.to_sql(), col.comment) for col in self.columns]

        if self.primary_key:
            pk_cols = ", ".join(self.primary_key)
            items.append((f"PRIMARY KEY ({pk_cols})", ""))

        for fk in self.foreign_keys:
            items.append((fk.to_sql(), ""))

        lines = []
        for i, (definition, comment) in enumerate(items):
            line = "    " + definition
            if i < len(items) - 1:
                line += ","
            if comment:
                line += f" -- {comment}"
            lines.append(line)

        header = f"-- {self.description}\n" if self.description else ""
        return f"{header}CREATE TABLE IF NOT EXISTS {self.name} (\n" + "\n".join(lines) + "\n)"
