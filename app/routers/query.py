# =============================================================================
# app/routers/query.py - Natural Language Query Endpoint
# =============================================================================
# Runs one question through the agent pipeline against the session's
# database and returns the full orchestration state.
#
# Conversational messages are answered without touching the database, so
# they work before a database is configured.
# =============================================================================

import logging
from typing import Any, Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import OrchestratorDep

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatTurn(BaseModel):
    """One previous message in the conversation."""
    role: Literal["user", "assistant"]
    content: str


class QueryRequest(BaseModel):
    """A natural-language question."""
    query: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Question about the data",
        examples=[
            "How many orders were placed last month?",
            "Plot revenue by region",
            "Which customers have never ordered?",
        ]
    )
    chat_history: list[ChatTurn] = Field(
        default_factory=list,
        description="Previous turns, oldest first"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"query": "Show monthly revenue as a chart"},
                {
                    "query": "and only for Europe?",
                    "chat_history": [
                        {"role": "user", "content": "Show monthly revenue"},
                        {"role": "assistant", "content": "Revenue grew every month this year."},
                    ],
                },
            ]
        }
    }


class QueryResponse(BaseModel):
    """Full record of how the question was answered."""
    query: str
    catalog: dict[str, Any] | None
    responses: list[dict[str, Any]]
    iterations: int
    iteration_history: list[dict[str, Any]]
    final_result: dict[str, Any] | None


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/{session_id}/query", response_model=QueryResponse)
def run_query(
    session_id: str,
    request: QueryRequest,
    orchestrator: OrchestratorDep,
):
    """
    Answer a natural-language question.

    Returns the final result plus every stage's output and the iteration
    history. Raises 400 STORE_NOT_CONFIGURED for data questions when the
    session has no database.
    """
    logger.info(f"Query for session {session_id}: '{request.query[:80]}'")
    state = orchestrator.process_query(
        request.query,
        chat_history=[turn.model_dump() for turn in request.chat_history],
    )
    return state.to_dict()
