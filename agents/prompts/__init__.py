# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# This package contains system prompts for each agent:
# - understanding_system.py: intent classification
# - codegen_system.py: SQL / script generation
# - reasoning_system.py: explanation and self-evaluation
# - chart_system.py: chart type and axis selection
# - insight_system.py: dataset description and suggested questions
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.understanding_system import (
    UNDERSTANDING_SYSTEM_PROMPT,
    build_classification_input,
)
from agents.prompts.codegen_system import (
    CODEGEN_SYSTEM_PROMPT,
    build_codegen_message,
    build_codegen_prompt,
)
from agents.prompts.reasoning_system import (
    EVALUATION_SYSTEM_PROMPT,
    REASONING_SYSTEM_PROMPT,
    build_evaluation_message,
    build_reasoning_message,
)
from agents.prompts.chart_system import (
    CHART_SYSTEM_PROMPT,
    build_chart_message,
    build_chart_prompt,
)
from agents.prompts.insight_system import INSIGHT_SYSTEM_PROMPT

__all__ = [
    "UNDERSTANDING_SYSTEM_PROMPT",
    "build_classification_input",
    "CODEGEN_SYSTEM_PROMPT",
    "build_codegen_message",
    "build_codegen_prompt",
    "EVALUATION_SYSTEM_PROMPT",
    "REASONING_SYSTEM_PROMPT",
    "build_evaluation_message",
    "build_reasoning_message",
    "CHART_SYSTEM_PROMPT",
    "build_chart_message",
    "build_chart_prompt",
    "INSIGHT_SYSTEM_PROMPT",
]
