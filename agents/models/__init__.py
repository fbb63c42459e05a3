# =============================================================================
# agents/models/ - Agent Communication Schemas
# =============================================================================
# This package contains Pydantic models that define the contracts between agents:
# - understanding.py: ClassifyInput / QueryUnderstandingOutput
# - generation.py: GenerateInput / CodeArtifact (CodeGen -> Execution contract)
# - execution_result.py: ExecuteInput / ExecutionResult
# - reasoning.py: ReasoningOutput / EvaluationOutcome
# - chart.py: VisualizationSpec
# - insight.py: DataInsightOutput
# - state.py: OrchestrationState, IterationInfo, FinalResult
#
# These models ensure type-safe communication between agents and provide
# clear documentation of what each agent expects and produces.
# =============================================================================

from agents.models.understanding import ClassifyInput, QueryUnderstandingOutput
from agents.models.generation import CodeArtifact, CodeKind, GenerateInput
from agents.models.execution_result import ExecuteInput, ExecutionResult
from agents.models.reasoning import (
    EvaluateInput,
    EvaluationOutcome,
    ReasonInput,
    ReasoningOutput,
)
from agents.models.chart import ChartInput, ChartOutput, VisualizationSpec
from agents.models.insight import DataInsightOutput, InsightInput

__all__ = [
    "ClassifyInput",
    "QueryUnderstandingOutput",
    "CodeArtifact",
    "CodeKind",
    "GenerateInput",
    "ExecuteInput",
    "ExecutionResult",
    "EvaluateInput",
    "EvaluationOutcome",
    "ReasonInput",
    "ReasoningOutput",
    "ChartInput",
    "ChartOutput",
    "VisualizationSpec",
    "DataInsightOutput",
    "InsightInput",
]
