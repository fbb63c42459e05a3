# =============================================================================
# agents/models/insight.py - Dataset Insight Schemas
# =============================================================================

from pydantic import BaseModel, Field

from core.models.catalog import CatalogSnapshot


class InsightInput(BaseModel):
    catalog: CatalogSnapshot


class InsightCompletion(BaseModel):
    """Shape the model is asked to return."""

    dataset_description: str = Field(..., min_length=1)
    suggested_questions: list[str] = Field(default_factory=list)


class DataInsightOutput(BaseModel):
    """What a dataset contains and what a user might ask about it."""

    dataset_description: str
    suggested_questions: list[str] = Field(default_factory=list)
    table_count: int = Field(default=0, ge=0)
