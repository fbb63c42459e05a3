# =============================================================================
# agents/understanding.py - Query Understanding Agent
# =============================================================================
# First stage of every query: is this a data question or small talk, and
# should the answer be charted?
#
# Classification is done by the model. When the model's answer can't be
# used and CLASSIFICATION_HEURISTIC_FALLBACK is on, a keyword heuristic
# takes over; otherwise the failure is reported and the orchestrator
# applies its own default ("requires data, no visualization").
#
# Usage:
#   agent = QueryUnderstandingAgent(context)
#   run = agent.invoke("classify", {"query": "plot sales by month"})
#   run.output.should_visualize   # True
# =============================================================================

import logging
import re

from agents.models.understanding import ClassifyInput, QueryUnderstandingOutput
from agents.prompts.understanding_system import UNDERSTANDING_SYSTEM_PROMPT
from agents.runtime.agent import Agent, ToolContract
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


# =============================================================================
# Keyword Heuristics
# =============================================================================

GREETING = re.compile(r"^(hi|hello|hey|howdy|greetings)\b", re.IGNORECASE)
CAPABILITIES = re.compile(r"^(what can you do|help$|how do (i|you))", re.IGNORECASE)
THANKS = re.compile(r"^(thanks|thank you|thx)\b", re.IGNORECASE)
FAREWELL = re.compile(r"^(bye|goodbye|see you)\b", re.IGNORECASE)
IDENTITY = re.compile(r"^(who|what) are you\b", re.IGNORECASE)

CASUAL_PATTERNS = [GREETING, CAPABILITIES, THANKS, FAREWELL, IDENTITY]

VISUAL_KEYWORDS = [
    "chart", "graph", "plot", "visualize", "visualise", "show", "display",
    "histogram", "timeline", "trend", "compare", "breakdown",
]

CHAT_RESPONSES = {
    "greeting": (
        "Hello! I'm your data analysis assistant. Ask me about your database in plain "
        "English, like 'Show me the top 10 customers by revenue' or 'What are the sales "
        "trends this month?'"
    ),
    "capabilities": (
        "Describe the data you want to see and I'll write the query, run it and explain "
        "the results. I can also chart trends and comparisons. Try 'Count records by "
        "category' or 'Show monthly sales trends'."
    ),
    "thanks": "You're welcome! Ask anytime you have more questions about your data.",
    "farewell": "Goodbye! Come back anytime you need help analyzing your data.",
    "identity": (
        "I'm an AI data analysis assistant. I help you explore your database through "
        "natural language. Just ask me a question about your data!"
    ),
    "default": (
        "I'm here to help you analyze your data. Try asking a question about your "
        "database, like 'What are the top selling products?'"
    ),
}


def default_chat_response(message: str) -> str:
    """Canned reply for a conversational message."""
    text = message.strip()
    if GREETING.search(text):
        return CHAT_RESPONSES["greeting"]
    if CAPABILITIES.search(text):
        return CHAT_RESPONSES["capabilities"]
    if THANKS.search(text):
        return CHAT_RESPONSES["thanks"]
    if FAREWELL.search(text):
        return CHAT_RESPONSES["farewell"]
    if IDENTITY.search(text):
        return CHAT_RESPONSES["identity"]
    return CHAT_RESPONSES["default"]


def infer_intent(message: str) -> str:
    lowered = message.lower()
    if "count" in lowered or "how many" in lowered:
        return "counting"
    if "sum" in lowered or "total" in lowered:
        return "aggregation"
    if "average" in lowered or "mean" in lowered:
        return "statistical"
    if "trend" in lowered or "over time" in lowered:
        return "temporal"
    if "compare" in lowered or "difference" in lowered:
        return "comparison"
    return "analysis"


def heuristic_classify(message: str) -> QueryUnderstandingOutput:
    """Keyword-based classification used when the model can't be parsed."""
    text = message.strip()

    if any(p.search(text) for p in CASUAL_PATTERNS):
        return QueryUnderstandingOutput(
            requires_database=False,
            should_visualize=False,
            intent="casual_chat",
            chat_response=default_chat_response(text),
        )

    lowered = text.lower()
    return QueryUnderstandingOutput(
        requires_database=True,
        should_visualize=any(kw in lowered for kw in VISUAL_KEYWORDS),
        intent=infer_intent(lowered),
    )


# =============================================================================
# Agent
# =============================================================================

class QueryUnderstandingAgent(Agent):
    """Classifies user intent and visualization need."""

    name = "query-understanding"
    description = "Classifies user query intent and visualization requirements"

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="classify",
            description="Classify user query intent and determine visualization needs",
            input_model=ClassifyInput,
            output_model=QueryUnderstandingOutput,
            handler=self.classify,
        ))

    def classify(self, payload: ClassifyInput) -> QueryUnderstandingOutput:
        try:
            result = self.chat_json(
                UNDERSTANDING_SYSTEM_PROMPT,
                payload.query,
                QueryUnderstandingOutput,
                temperature=0.3,
                max_tokens=300,
            )
        except ApplicationError as e:
            if not self.context.settings.CLASSIFICATION_HEURISTIC_FALLBACK:
                raise
            logger.warning(f"Model classification failed, using keyword heuristic: {e}")
            return heuristic_classify(payload.latest_message or payload.query)

        if not result.requires_database and not result.chat_response:
            result.chat_response = default_chat_response(payload.latest_message or payload.query)

        logger.info(
            f"Classified query: requires_database={result.requires_database}, "
            f"should_visualize={result.should_visualize}, intent={result.intent}"
        )
        return result
