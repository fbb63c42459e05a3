# =============================================================================
# agents/models/generation.py - Code Generation Schemas
# =============================================================================
# Input and output of the Code Generation agent's `generate` tool.
#
# A CodeArtifact is either:
# - sql: a single read-only statement, run directly against the store
# - python: a transformation script, run in the sandbox (lib/sandbox.py)
# =============================================================================

from typing import Literal

from pydantic import BaseModel, Field

from core.models.catalog import CatalogSnapshot

CodeKind = Literal["sql", "python"]


class GenerateInput(BaseModel):
    """Everything the generator sees for one iteration."""

    query: str = Field(..., min_length=1)
    catalog: CatalogSnapshot
    requires_visualization: bool = False
    max_rows: int = Field(default=500, ge=1)
    refinement_hint: str | None = Field(
        default=None,
        description="Feedback from the previous iteration (error text or evaluator suggestion)"
    )


class CodeArtifact(BaseModel):
    """One generated piece of code."""

    code: str = Field(..., min_length=1, description="Executable code, no markdown fences")
    kind: CodeKind = Field(..., description="sql or python")
    requires_visualization: bool = False
