# =============================================================================
# agents/chart.py - Chart Generation Agent
# =============================================================================
# Picks a chart type and axes for a non-empty result set.
#
# The model chooses first, given a per-column type analysis. If its answer
# can't be parsed, or names columns that aren't in the data, a heuristic
# takes over:
#   - x axis: first text column, y axis: first numeric column
#   - more than 50 rows -> table
#   - at most 7 rows and exactly 2 columns -> pie
#   - otherwise -> bar
# =============================================================================

from __future__ import annotations

import logging
import re
from typing import Any

import pandas as pd

from agents.models.chart import (
    ChartCompletion,
    ChartInput,
    ChartKind,
    ChartOutput,
    VisualizationSpec,
)
from agents.prompts.chart_system import build_chart_message, build_chart_prompt
from agents.runtime.agent import Agent, ToolContract
from lib.errors import ValidationFailedError
from lib.utils import ApplicationError, format_rows_for_prompt

logger = logging.getLogger(__name__)

DATE_KEYWORDS = ["date", "time", "year", "month", "day", "created", "updated", "timestamp"]
DATE_VALUE = re.compile(r"^(\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{2}-\d{2}-\d{4})")

TABLE_ROW_THRESHOLD = 50
PIE_MAX_ROWS = 7
CATEGORICAL_MAX_UNIQUE = 20


# =============================================================================
# Column Analysis
# =============================================================================

def _is_numeric_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    try:
        float(str(value))
        return True
    except ValueError:
        return False


def _looks_like_date(column: str, values: pd.Series) -> bool:
    lowered = column.lower()
    if any(kw in lowered for kw in DATE_KEYWORDS):
        return True
    return bool(DATE_VALUE.match(str(values.iloc[0])))


def analyze_columns(df: pd.DataFrame, sample_size: int = 10) -> dict[str, str]:
    """
    Classify each column from its first few non-null values.

    Returns:
        {column: "date/time" | "numeric" | "categorical (N unique values)"
                 | "text" | "unknown (all null)"}
    """
    analysis: dict[str, str] = {}
    sample = df.head(sample_size)

    for column in df.columns:
        values = sample[column].dropna()
        if values.empty:
            analysis[column] = "unknown (all null)"
            continue

        if _looks_like_date(str(column), values):
            analysis[column] = "date/time"
        elif all(_is_numeric_value(v) for v in values):
            analysis[column] = "numeric"
        else:
            unique = values.astype(str).nunique()
            if unique <= CATEGORICAL_MAX_UNIQUE:
                analysis[column] = f"categorical ({unique} unique values)"
            else:
                analysis[column] = "text"

    return analysis


def format_analysis(analysis: dict[str, str]) -> str:
    if not analysis:
        return "No data available"
    return "\n".join(f"- {column}: {kind}" for column, kind in analysis.items())


def shorten_title(query: str, limit: int = 50) -> str:
    return query[:limit] + ("..." if len(query) > limit else "")


def fallback_spec(query: str, data: list[dict[str, Any]]) -> VisualizationSpec:
    """Pick a chart from the data's shape alone."""
    columns = list(data[0].keys()) if data else []
    first = data[0] if data else {}

    x_field = next(
        (c for c in columns if isinstance(first.get(c), str) and not _is_numeric_value(first[c])),
        columns[0] if columns else "",
    )
    y_field = next(
        (c for c in columns if c != x_field and first.get(c) is not None and _is_numeric_value(first[c])),
        columns[1] if len(columns) > 1 else x_field,
    )

    kind: ChartKind = "bar"
    if len(data) > TABLE_ROW_THRESHOLD:
        kind = "table"
    elif len(data) <= PIE_MAX_ROWS and len(columns) == 2:
        kind = "pie"

    return VisualizationSpec(kind=kind, title=shorten_title(query), x_field=x_field, y_field=y_field)


# =============================================================================
# Agent
# =============================================================================

class ChartGenerationAgent(Agent):
    """Generates visualization specs from query results."""

    name = "chart-generation"
    description = "Generates optimal visualization specifications from query results"

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="generate_chart",
            description="Generate a visualization specification for query results",
            input_model=ChartInput,
            output_model=ChartOutput,
            handler=self.generate_chart,
        ))

    def generate_chart(self, payload: ChartInput) -> ChartOutput:
        df = pd.DataFrame(payload.data)
        columns = [str(c) for c in df.columns]

        try:
            completion = self.chat_json(
                build_chart_prompt(columns, format_analysis(analyze_columns(df)), len(df)),
                build_chart_message(
                    payload.query,
                    payload.explanation,
                    format_rows_for_prompt(payload.data[:5]),
                ),
                ChartCompletion,
                temperature=0.3,
                max_tokens=400,
            )
            missing = [f for f in (completion.x_field, completion.y_field) if f not in columns]
            if missing:
                raise ValidationFailedError(
                    f"Chart spec names unknown columns: {', '.join(missing)}",
                    details={"columns": columns},
                )
        except ApplicationError as e:
            logger.warning(f"Model chart selection failed, using fallback: {e}")
            return ChartOutput(
                spec=fallback_spec(payload.query, payload.data),
                reasoning="Fallback: auto-detected from data structure",
            )

        spec = VisualizationSpec(
            kind=completion.kind,
            title=completion.title,
            x_field=completion.x_field,
            y_field=completion.y_field,
        )
        logger.info(f"Chart selected: {spec.kind} ({spec.x_field} vs {spec.y_field})")
        return ChartOutput(spec=spec, reasoning=completion.reasoning)
