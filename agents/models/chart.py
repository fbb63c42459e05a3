# =============================================================================
# agents/models/chart.py - Visualization Schemas
# =============================================================================
# Input and output of the Chart Generation agent's `generate_chart` tool.
# The spec is rendered by the client; no chart is drawn server-side.
#
# Example:
#   {"kind": "bar", "title": "Orders by status", "x_field": "status", "y_field": "n"}
# =============================================================================

from typing import Any, Literal

from pydantic import BaseModel, Field

ChartKind = Literal["bar", "line", "scatter", "pie", "table"]


class ChartInput(BaseModel):
    query: str = Field(..., min_length=1)
    data: list[dict[str, Any]] = Field(..., min_length=1)
    explanation: str = ""


class VisualizationSpec(BaseModel):
    kind: ChartKind
    title: str
    x_field: str
    y_field: str


class ChartOutput(BaseModel):
    spec: VisualizationSpec
    reasoning: str = ""


class ChartCompletion(VisualizationSpec):
    """Shape the model is asked to return."""

    reasoning: str = ""
