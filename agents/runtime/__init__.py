# =============================================================================
# agents/runtime/ - Agent Runtime
# =============================================================================
# Tool contracts, run results and the Agent base class shared by every
# specialized agent.
# =============================================================================

from agents.runtime.agent import (
    Agent,
    AgentContext,
    RemoteExecutor,
    RunResult,
    ToolContract,
)

__all__ = [
    "Agent",
    "AgentContext",
    "RemoteExecutor",
    "RunResult",
    "ToolContract",
]
