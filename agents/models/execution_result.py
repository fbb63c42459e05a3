# =============================================================================
# agents/models/execution_result.py - Execution Result Schema
# =============================================================================
# This module defines the ExecutionResult schema - the output from the
# Execution agent after running one code artifact.
#
# The result contains:
# - Success/failure status
# - Result rows (list of dicts) when successful
# - Error message and taxonomy code when not
# - Elapsed time
#
# Example:
#   run = execution_agent.invoke("execute", {"code": "SELECT 1 AS n", "kind": "sql"})
#   result = run.output
#   if result.success:
#       print(f"Returned {result.row_count} rows")
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agents.models.generation import CodeKind


class ExecuteInput(BaseModel):
    code: str = Field(..., min_length=1, description="Code to execute")
    kind: CodeKind = Field(..., description="sql or python")


class ExecutionResult(BaseModel):
    """
    Result of executing one CodeArtifact.

    Gate rejections and runtime errors are reported here with success=False
    rather than as a failed tool invocation, so the orchestrator can feed
    the error text back to the generator.
    """

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    success: bool = Field(
        ...,
        description="Whether the code executed successfully"
    )

    error: str | None = Field(
        default=None,
        description="Error message if success=False"
    )

    error_code: str | None = Field(
        default=None,
        description="Taxonomy code (e.g., 'UNSAFE_STATEMENT', 'EXECUTION_FAULT')"
    )

    # -------------------------------------------------------------------------
    # Data
    # -------------------------------------------------------------------------

    data: list[dict[str, Any]] | None = Field(
        default=None,
        description="Result rows when successful"
    )

    # -------------------------------------------------------------------------
    # Timing
    # -------------------------------------------------------------------------

    executed_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp when execution completed"
    )

    execution_time_ms: float = Field(
        default=0.0,
        ge=0.0,
        description="Execution time in milliseconds"
    )

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    @property
    def row_count(self) -> int:
        return len(self.data or [])

    def get_summary(self) -> str:
        """Get a human-readable summary of the result."""
        if not self.success:
            return f"Failed: [{self.error_code}] {self.error}"
        return f"Returned {self.row_count} rows in {self.execution_time_ms:.0f}ms"
