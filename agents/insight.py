# =============================================================================
# agents/insight.py - Data Insight Agent
# =============================================================================
# Describes a connected database and suggests questions to ask about it.
# Falls back to a description built from table names and a fixed set of
# starter questions when the model's answer can't be used.
# =============================================================================

import logging

from agents.models.insight import DataInsightOutput, InsightCompletion, InsightInput
from agents.prompts.insight_system import INSIGHT_SYSTEM_PROMPT
from agents.runtime.agent import Agent, ToolContract
from core.models.catalog import CatalogSnapshot
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS = [
    "What are the most recent entries in the database?",
    "How is the data distributed across different categories?",
    "Are there any trends or patterns in the data?",
    "What are the relationships between different tables?",
    "How much data is stored in this database?",
]


def default_description(catalog: CatalogSnapshot) -> str:
    names = ", ".join(catalog.table_names()) or "none"
    return (
        f"This database contains {len(catalog.tables)} tables: {names}. "
        "It stores various data entities and their relationships."
    )


def format_catalog_for_analysis(catalog: CatalogSnapshot) -> str:
    blocks = []
    for table in catalog.tables:
        columns = ", ".join(f"{c.name} ({c.type})" for c in table.columns)
        blocks.append(f"Table: {table.name}\nColumns: {columns}\nRows: {table.row_count}")
    return "Database Schema Analysis:\n\n" + "\n\n".join(blocks)


class DataInsightAgent(Agent):
    """Summarizes a catalog for a first-time user."""

    name = "data-insight"
    description = "Describes a dataset and suggests questions about it"

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="analyze_schema",
            description="Describe the dataset and suggest analytical questions",
            input_model=InsightInput,
            output_model=DataInsightOutput,
            handler=self.analyze_schema,
        ))

    def analyze_schema(self, payload: InsightInput) -> DataInsightOutput:
        catalog = payload.catalog
        try:
            completion = self.chat_json(
                INSIGHT_SYSTEM_PROMPT,
                format_catalog_for_analysis(catalog),
                InsightCompletion,
                temperature=0.7,
                max_tokens=500,
            )
        except ApplicationError as e:
            logger.warning(f"Insight generation failed, using defaults: {e}")
            return DataInsightOutput(
                dataset_description=default_description(catalog),
                suggested_questions=list(DEFAULT_QUESTIONS),
                table_count=len(catalog.tables),
            )

        return DataInsightOutput(
            dataset_description=completion.dataset_description,
            suggested_questions=completion.suggested_questions or list(DEFAULT_QUESTIONS),
            table_count=len(catalog.tables),
        )
