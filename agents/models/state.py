# =============================================================================
# agents/models/state.py - Orchestration State
# =============================================================================
# Per-query record of everything the orchestrator did:
#
# - responses: append-only list of StageRecords (one per tool invocation)
# - iteration_history: one IterationInfo per generate/execute/evaluate round
# - final_result: set exactly once, when the loop exits or aborts
#
# The state is created by AgentOrchestrator.process_query() and returned to
# the caller; nothing else holds on to it.
#
# Example:
#   state = orchestrator.process_query("how many orders are there?")
#   print(state.iterations, state.final_result.explanation)
#   payload = state.to_dict()   # JSON-ready
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from agents.models.chart import VisualizationSpec
from agents.models.execution_result import ExecutionResult
from agents.models.generation import CodeArtifact
from agents.models.reasoning import EvaluationOutcome
from agents.runtime.agent import RunResult
from core.models.catalog import CatalogSnapshot

Stage = Literal[
    "understanding", "chat", "generation", "execution",
    "reasoning", "evaluation", "chart",
]


class IterationInfo(BaseModel):
    """What happened in one round of the refinement loop."""

    iteration: int = Field(..., ge=1)
    refinement_hint: str | None = Field(
        default=None,
        description="Feedback that shaped this round (None for the first)"
    )
    artifact: CodeArtifact | None = None
    execution: ExecutionResult | None = None
    evaluation: EvaluationOutcome | None = None


class FinalResult(BaseModel):
    """The answer handed back to the caller."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    explanation: str = ""
    insights: list[str] = Field(default_factory=list)
    execution_time_ms: float = Field(default=0.0, ge=0.0)
    requires_visualization: bool = False
    visualization_spec: VisualizationSpec | None = None
    iterations: int = Field(default=0, ge=0)
    iteration_history: list[IterationInfo] = Field(default_factory=list)
    is_chat: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class StageRecord:
    stage: Stage
    result: RunResult
    iteration: int = 0
    recorded_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "iteration": self.iteration,
            "recorded_at": self.recorded_at.isoformat(),
            "result": self.result.model_dump(mode="json"),
        }


@dataclass
class OrchestrationState:
    """
    Mutable record of one query's trip through the agent loop.

    Attributes:
        query: The user's query (without chat history)
        catalog: Snapshot fetched once per data query; None for chat
        responses: Every stage's RunResult, in order
        iterations: Number of loop rounds started
        iteration_history: One entry per round
        final_result: Set exactly once via finalize()
    """

    query: str
    catalog: CatalogSnapshot | None = None
    responses: list[StageRecord] = field(default_factory=list)
    iterations: int = 0
    iteration_history: list[IterationInfo] = field(default_factory=list)
    final_result: FinalResult | None = None

    def record(self, stage: Stage, result: RunResult) -> StageRecord:
        """Append a stage record. Records are never removed or reordered."""
        entry = StageRecord(stage=stage, result=result, iteration=self.iterations)
        self.responses.append(entry)
        return entry

    def begin_iteration(self, refinement_hint: str | None = None) -> IterationInfo:
        self.iterations += 1
        info = IterationInfo(iteration=self.iterations, refinement_hint=refinement_hint)
        self.iteration_history.append(info)
        return info

    @property
    def is_finalized(self) -> bool:
        return self.final_result is not None

    def finalize(self, result: FinalResult) -> FinalResult:
        """
        Set the final result.

        Raises:
            RuntimeError: If a final result was already set
        """
        if self.final_result is not None:
            raise RuntimeError("Final result already set for this query")
        self.final_result = result
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "catalog": self.catalog.model_dump(mode="json") if self.catalog else None,
            "responses": [r.to_dict() for r in self.responses],
            "iterations": self.iterations,
            "iteration_history": [i.model_dump(mode="json") for i in self.iteration_history],
            "final_result": (
                self.final_result.model_dump(mode="json") if self.final_result else None
            ),
        }
