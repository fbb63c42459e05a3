# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the agent pipeline that answers questions about a
# SQL database:
# - understanding.py: classifies intent (data query vs chat, chart or not)
# - codegen.py: generates one SQL statement or Python script per round
# - execution.py: guardrails + execution gate (store, sandbox or remote)
# - reasoning.py: explains results and evaluates whether they answer the query
# - chart.py: picks a visualization for the final result
# - insight.py: describes a dataset and suggests questions
# - orchestrator.py: runs the agents in sequence with bounded refinement
#
# The agents work together:
#   Understanding -> CodeGen -> Execution -> Reasoning (reason, evaluate) -> Chart
#
# Runtime:
# - runtime/agent.py: ToolContract, RunResult, AgentContext, Agent
# =============================================================================

from agents.orchestrator import AgentOrchestrator
from agents.models.state import FinalResult, IterationInfo, OrchestrationState

__all__ = [
    "AgentOrchestrator",
    "FinalResult",
    "IterationInfo",
    "OrchestrationState",
]
