# =============================================================================
# core/models/schema.py - Schema Description Models
# =============================================================================
# These models describe the database schema as the AI sees it:
# - ColumnDescriptor: one column (name, type, nullability, default marker)
# - TableDescriptor: one table and its ordered columns
# - SchemaDescription: all introspected tables, rendered to prompt text
#
# A SchemaDescription is rebuilt wholesale on every introspection and is
# never patched in place.
#
# Rendered form:
#   Table: dummytable
#     - id (integer, not null, auto-increment)
#     - name (text, not null)
#     - description (text, nullable)
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


NO_SCHEMA_MARKER = "No schema available"


class ColumnDescriptor(BaseModel):
    """A single column as inferred or declared for a table."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column name")
    type: str = Field(..., description="Declared or inferred SQL type")
    nullable: bool = Field(default=True, description="Whether NULL is allowed")
    default: str | None = Field(
        default=None,
        description="Default marker, e.g. 'auto-increment'"
    )
    position: int = Field(..., ge=1, description="1-based column position")

    def render(self) -> str:
        """Render as a single bullet line for the prompt."""
        parts = [self.type, "nullable" if self.nullable else "not null"]
        if self.default:
            parts.append(self.default)
        return f"  - {self.name} ({', '.join(parts)})"


class TableDescriptor(BaseModel):
    """A table and its columns in stable order."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[ColumnDescriptor, ...] = Field(default_factory=tuple)
    degraded: bool = Field(
        default=False,
        description="True when the fallback descriptor set was substituted"
    )

    def render(self) -> str:
        lines = [f"Table: {self.name}"]
        lines.extend(column.render() for column in self.columns)
        return "\n".join(lines)

    def to_api(self) -> list[dict[str, Any]]:
        """Column list in the shape the get-schema endpoint returns."""
        return [column.model_dump() for column in self.columns]


class SchemaDescription(BaseModel):
    """
    Ordered set of table descriptors.

    `render()` is deterministic: the same descriptors always produce the
    same text, so re-introspecting an unchanged table is byte-identical.
    """

    model_config = ConfigDict(frozen=True)

    tables: tuple[TableDescriptor, ...] = Field(default_factory=tuple)

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]

    def get_table(self, name: str) -> TableDescriptor | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def render_tables(self) -> str:
        """Only the table blocks, separated by blank lines."""
        return "\n\n".join(table.render() for table in self.tables)

    def render(self) -> str:
        """
        Full prompt text: table blocks followed by example queries.

        The examples use the first table so the model sees concrete,
        executable statements against real names.
        """
        if not self.tables:
            return NO_SCHEMA_MARKER

        primary = self.tables[0].name
        return (
            f"{self.render_tables()}\n"
            "\n"
            "Example queries you can suggest:\n"
            f"- SELECT * FROM {primary};\n"
            f"- SELECT * FROM {primary} WHERE name = 'some_value';\n"
            f"- INSERT INTO {primary} (name, description) VALUES ('new_name', 'new_description');\n"
            f"- UPDATE {primary} SET name = 'updated_name' WHERE id = 1;\n"
            f"- DELETE FROM {primary} WHERE id = 1;\n"
            "\n"
            "The user has a PostgreSQL database accessed through Supabase. "
            f"Always use the lowercase table names shown above (e.g. '{primary}') in your queries."
        )

    def to_api(self) -> dict[str, list[dict[str, Any]]]:
        """Mapping of table name -> column list for API responses."""
        return {table.name: table.to_api() for table in self.tables}
