# =============================================================================
# agents/models/reasoning.py - Reasoning and Evaluation Schemas
# =============================================================================
# Input and output of the Reasoning agent's two tools:
# - reason:   result rows -> plain-language explanation + insights
# - evaluate: result rows + explanation -> satisfied or not, and why
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ReasonInput(BaseModel):
    query: str = Field(..., min_length=1)
    data: list[dict[str, Any]] = Field(default_factory=list)


class ReasoningOutput(BaseModel):
    """Explanation of a result set for a non-technical reader."""

    explanation: str = Field(..., min_length=1, description="2-3 sentences, no code mechanics")
    insights: list[str] = Field(default_factory=list)


class EvaluateInput(BaseModel):
    query: str = Field(..., min_length=1)
    data: list[dict[str, Any]] = Field(default_factory=list)
    explanation: str = ""


class EvaluationOutcome(BaseModel):
    """
    Whether a result answers the query.

    Example:
        {"satisfied": false, "reason": "Only 2023 was included",
         "suggested_refinement": "Include all years"}
    """

    satisfied: bool
    reason: str = "No reason provided"
    suggested_refinement: str | None = None

    @field_validator("suggested_refinement")
    @classmethod
    def blank_refinement_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v
