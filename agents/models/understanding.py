# =============================================================================
# agents/models/understanding.py - Query Classification Schemas
# =============================================================================
# Input and output of the Query Understanding agent's `classify` tool.
#
# Example output:
#   {"requires_database": true, "should_visualize": true,
#    "intent": "monthly revenue trend", "chat_response": null}
# =============================================================================

from pydantic import BaseModel, Field


class ClassifyInput(BaseModel):
    query: str = Field(..., min_length=1, description="User query, possibly prefixed with chat history")
    latest_message: str | None = Field(
        default=None,
        description="The current query alone, used by the keyword fallback"
    )


class QueryUnderstandingOutput(BaseModel):
    """How the orchestrator should route a query."""

    requires_database: bool = Field(
        default=True,
        description="False for greetings and small talk that need no data"
    )

    should_visualize: bool = Field(
        default=False,
        description="Whether the user asked for (or would clearly benefit from) a chart"
    )

    intent: str = Field(
        default="analysis",
        description="Brief description of what the user wants"
    )

    chat_response: str | None = Field(
        default=None,
        description="Reply for conversational queries"
    )
