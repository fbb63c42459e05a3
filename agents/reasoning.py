# =============================================================================
# agents/reasoning.py - Reasoning Agent
# =============================================================================
# Two tools over an execution result:
#
# - reason:   a 2-3 sentence plain-language explanation (no SQL, no code
#             mechanics) plus any further sentences as insights
# - evaluate: an independent judgment of whether the result answers the
#             query, with a suggested refinement when it doesn't
#
# Failures of either tool are reported normally; the orchestrator decides
# the defaults.
# =============================================================================

import logging
import re

from agents.models.reasoning import (
    EvaluateInput,
    EvaluationOutcome,
    ReasonInput,
    ReasoningOutput,
)
from agents.prompts.reasoning_system import (
    EVALUATION_SYSTEM_PROMPT,
    REASONING_SYSTEM_PROMPT,
    build_evaluation_message,
    build_reasoning_message,
)
from agents.runtime.agent import Agent, ToolContract
from lib.utils import format_rows_for_prompt

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
MAX_EXPLANATION_SENTENCES = 3


def split_explanation(text: str) -> ReasoningOutput:
    """
    First three sentences become the explanation, the rest insights.

    Example:
        split_explanation("There are 7 orders. Most shipped. One is late. Check carrier.")
        # explanation="There are 7 orders. Most shipped. One is late."
        # insights=["Check carrier."]
    """
    sentences = [s.strip() for s in SENTENCE_BOUNDARY.split(text.strip()) if s.strip()]
    explanation = " ".join(sentences[:MAX_EXPLANATION_SENTENCES])
    if explanation and explanation[-1] not in ".!?":
        explanation += "."
    return ReasoningOutput(
        explanation=explanation,
        insights=sentences[MAX_EXPLANATION_SENTENCES:],
    )


class ReasoningAgent(Agent):
    """Explains results and judges whether they answer the query."""

    name = "reasoning"
    description = "Generates natural language explanations of data results"

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="reason",
            description="Generate explanation for execution results",
            input_model=ReasonInput,
            output_model=ReasoningOutput,
            handler=self.reason,
        ))
        self.register(ToolContract(
            name="evaluate",
            description="Evaluate if the result satisfies the user query",
            input_model=EvaluateInput,
            output_model=EvaluationOutcome,
            handler=self.evaluate,
        ))

    def reason(self, payload: ReasonInput) -> ReasoningOutput:
        response = self.chat(
            REASONING_SYSTEM_PROMPT,
            build_reasoning_message(payload.query, format_rows_for_prompt(payload.data)),
            temperature=0.7,
            max_tokens=300,
        )
        return split_explanation(response)

    def evaluate(self, payload: EvaluateInput) -> EvaluationOutcome:
        outcome = self.chat_json(
            EVALUATION_SYSTEM_PROMPT,
            build_evaluation_message(
                payload.query,
                format_rows_for_prompt(payload.data),
                payload.explanation,
            ),
            EvaluationOutcome,
            temperature=0.3,
            max_tokens=500,
        )
        logger.info(f"Evaluation: satisfied={outcome.satisfied} ({outcome.reason})")
        return outcome
