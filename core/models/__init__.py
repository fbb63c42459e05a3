# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas shared by the store adapter, the
# agents and the API:
# - catalog.py: CatalogSnapshot schema (database structure for AI context)
#
# These models define the "contract" between the database and the agents.
# =============================================================================

from .catalog import (
    ColumnSchema,
    TableSchema,
    CatalogSnapshot,
)

__all__ = [
    "ColumnSchema",
    "TableSchema",
    "CatalogSnapshot",
]
