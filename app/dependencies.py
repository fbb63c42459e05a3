# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Tests swap collaborators with app.dependency_overrides, e.g.
#   app.dependency_overrides[get_completion] = lambda: FakeCompletion([...])
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Path

from agents.orchestrator import AgentOrchestrator
from lib.llm import OpenAICompletion, TextCompletion
from lib.store import SessionConfigStore, session_configs


def get_session_configs() -> SessionConfigStore:
    """Process-wide session database configs."""
    return session_configs


@lru_cache
def get_completion() -> TextCompletion:
    """
    Get the text-completion client.

    Cached so every request reuses one HTTP client.
    """
    return OpenAICompletion()


# Type aliases for dependency injection
SessionConfigsDep = Annotated[SessionConfigStore, Depends(get_session_configs)]
CompletionDep = Annotated[TextCompletion, Depends(get_completion)]


def get_orchestrator(
    session_id: Annotated[str, Path(min_length=1, max_length=128, description="Client-chosen session ID")],
    configs: SessionConfigsDep,
    completion: CompletionDep,
) -> AgentOrchestrator:
    """
    Build an orchestrator bound to the session's database.

    A new orchestrator (and set of agents) per request keeps queries
    independent. The store is None when the session has no database; data
    operations then raise StoreNotConfiguredError.
    """
    return AgentOrchestrator(
        completion=completion,
        store=configs.get_adapter(session_id),
    )


OrchestratorDep = Annotated[AgentOrchestrator, Depends(get_orchestrator)]
