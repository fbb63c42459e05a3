# =============================================================================
# core/models/catalog.py - Catalog Snapshot Schemas
# =============================================================================
# These models describe the structure of a connected database:
# - ColumnSchema: one column (name, SQL type, nullability)
# - TableSchema: one table with its columns and row count
# - CatalogSnapshot: every table, plus when the snapshot was taken
#
# A snapshot is fetched once per query and handed to the code generator and
# the data insight agent as plain text via to_prompt_text().
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class ColumnSchema(BaseModel):
    """
    A single column in a table.

    Example:
        {"name": "email", "type": "VARCHAR(255)", "nullable": true}
    """

    name: str = Field(..., description="Column name")
    type: str = Field(..., description="SQL type as reported by the database")
    nullable: bool = Field(default=True, description="Whether NULL values are allowed")


class TableSchema(BaseModel):
    """A table, its columns, and how many rows it held when inspected."""

    name: str = Field(..., description="Table name")
    columns: list[ColumnSchema] = Field(default_factory=list)
    row_count: int = Field(default=0, ge=0, description="Row count at snapshot time")

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


class CatalogSnapshot(BaseModel):
    """
    Point-in-time description of every table in a database.

    Example:
        {
            "tables": [
                {"name": "orders", "columns": [...], "row_count": 1200}
            ],
            "last_updated": "2024-01-15T10:30:00"
        }
    """

    tables: list[TableSchema] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.utcnow)

    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> TableSchema | None:
        """Find a table by name (case-insensitive)."""
        lowered = name.lower()
        for table in self.tables:
            if table.name.lower() == lowered:
                return table
        return None

    def to_prompt_text(self) -> str:
        """
        Render the catalog for an LLM prompt.

        Format:
            Table: orders (1200 rows)
              - id: INTEGER
              - email: VARCHAR (nullable)
        """
        if not self.tables:
            return "(no tables)"

        blocks = []
        for table in self.tables:
            lines = [f"Table: {table.name} ({table.row_count} rows)"]
            for col in table.columns:
                suffix = " (nullable)" if col.nullable else ""
                lines.append(f"  - {col.name}: {col.type}{suffix}")
            blocks.append("\n".join(lines))

        return "\n\n".join(blocks)
