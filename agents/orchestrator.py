# =============================================================================
# agents/orchestrator.py - Agent Orchestrator
# =============================================================================
# Coordinates the deterministic, sequential agent loop:
#
#   Understanding -> Chat reply
#                 -> { Generate -> Execute -> Reason -> Evaluate }* -> Chart? -> Finalize
#
# Loop rules:
# - An execution failure with rounds left feeds its error text to the next
#   generation round (Reason/Evaluate are skipped). With no rounds left it
#   ends the query with that error.
# - A generation failure ends the query immediately.
# - Reason/Evaluate failures are replaced with defaults.
# - An unsatisfied evaluation starts another round with the evaluator's
#   suggested refinement, until MAX_ITERATIONS.
#
# Only StoreNotConfiguredError is raised to the caller; everything else ends
# up in state.final_result.
#
# Usage:
#   orchestrator = AgentOrchestrator(store=SQLAlchemyStoreAdapter(url))
#   state = orchestrator.process_query("how many orders shipped late?")
#   print(state.final_result.explanation)
# =============================================================================

from __future__ import annotations

import logging

from app.config import Settings, get_settings
from agents.chart import ChartGenerationAgent
from agents.codegen import CodeGenerationAgent
from agents.execution import ExecutionAgent
from agents.insight import DEFAULT_QUESTIONS, DataInsightAgent, default_description
from agents.models.chart import ChartInput, VisualizationSpec
from agents.models.execution_result import ExecuteInput, ExecutionResult
from agents.models.generation import GenerateInput
from agents.models.insight import DataInsightOutput, InsightInput
from agents.models.reasoning import (
    EvaluateInput,
    EvaluationOutcome,
    ReasonInput,
    ReasoningOutput,
)
from agents.models.state import FinalResult, OrchestrationState
from agents.models.understanding import ClassifyInput, QueryUnderstandingOutput
from agents.prompts.understanding_system import build_classification_input
from agents.reasoning import ReasoningAgent
from agents.runtime.agent import AgentContext, RemoteExecutor, RunResult
from agents.understanding import QueryUnderstandingAgent
from core.models.catalog import CatalogSnapshot
from lib.errors import StoreNotConfiguredError
from lib.llm import OpenAICompletion, TextCompletion
from lib.store import StoreAdapter

logger = logging.getLogger(__name__)

DEFAULT_CHAT_RESPONSE = "I'm here to help you analyze your data. Ask me anything about your database!"
DEFAULT_EXPLANATION = "The query ran successfully, but an explanation could not be generated."
DEFAULT_REFINEMENT = "The previous result did not satisfy the request. Try a different approach."


class AgentOrchestrator:
    """
    Runs one query through the agent pipeline.

    Each instance owns its own agents; create one per query (or per session)
    rather than sharing one across threads.

    Attributes:
        max_rows: Row ceiling enforced on generated SQL
        max_iterations: Maximum generate/execute/evaluate rounds
    """

    def __init__(
        self,
        completion: TextCompletion | None = None,
        store: StoreAdapter | None = None,
        remote: RemoteExecutor | None = None,
        settings: Settings | None = None,
        max_rows: int | None = None,
        max_iterations: int | None = None,
    ):
        self.settings = settings or get_settings()
        self.context = AgentContext(
            completion=completion or OpenAICompletion(),
            store=store,
            remote=remote,
            settings=self.settings,
        )
        self.max_rows = max_rows or self.settings.MAX_ROWS
        self.max_iterations = max_iterations or self.settings.MAX_ITERATIONS

        self.understanding_agent = QueryUnderstandingAgent(self.context)
        self.codegen_agent = CodeGenerationAgent(self.context)
        self.execution_agent = ExecutionAgent(self.context)
        self.reasoning_agent = ReasoningAgent(self.context)
        self.chart_agent = ChartGenerationAgent(self.context)
        self.insight_agent = DataInsightAgent(self.context)

    @property
    def store(self) -> StoreAdapter | None:
        return self.context.store

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def process_query(
        self,
        query: str,
        chat_history: list[dict] | None = None,
    ) -> OrchestrationState:
        """
        Answer one natural-language query.

        Args:
            query: The user's question
            chat_history: Previous turns as [{"role": ..., "content": ...}]

        Returns:
            OrchestrationState with final_result set

        Raises:
            StoreNotConfiguredError: Data query without a configured database
        """
        state = OrchestrationState(query=query)
        logger.info(f"Starting agent loop for query: '{query[:80]}'")

        # ---------------------------------------------------------------------
        # Stage 1: Query Understanding
        # ---------------------------------------------------------------------
        understanding = self._classify(state, query, chat_history)

        if not understanding.requires_database:
            return self._chat_reply(state, understanding)

        if self.store is None:
            raise StoreNotConfiguredError()

        try:
            state.catalog = self.store.fetch_catalog()
        except Exception as e:
            logger.exception("Catalog fetch failed")
            state.finalize(FinalResult(
                error=f"Failed to read database schema: {e}",
                error_code="EXECUTION_FAULT",
                requires_visualization=understanding.should_visualize,
            ))
            return state

        # ---------------------------------------------------------------------
        # Stages 2-5: Generate -> Execute -> Reason -> Evaluate
        # ---------------------------------------------------------------------
        hint: str | None = None
        execution: ExecutionResult | None = None
        reasoning = ReasoningOutput(explanation=DEFAULT_EXPLANATION)

        while state.iterations < self.max_iterations:
            info = state.begin_iteration(hint)
            logger.info(f"Iteration {state.iterations}/{self.max_iterations}")

            # Generate
            generation = self.codegen_agent.invoke("generate", GenerateInput(
                query=query,
                catalog=state.catalog,
                requires_visualization=understanding.should_visualize,
                max_rows=self.max_rows,
                refinement_hint=hint,
            ))
            state.record("generation", generation)

            if not generation.success:
                logger.error(f"Code generation failed: {generation.error}")
                return self._abort(state, generation, understanding)

            artifact = generation.output
            info.artifact = artifact

            # Execute
            execution_run = self.execution_agent.invoke(
                "execute", ExecuteInput(code=artifact.code, kind=artifact.kind)
            )
            state.record("execution", execution_run)

            if execution_run.success:
                execution = execution_run.output
            else:
                execution = ExecutionResult(
                    success=False,
                    error=execution_run.error or "Execution failed",
                    error_code=execution_run.error_code,
                    execution_time_ms=execution_run.execution_time_ms,
                )
            info.execution = execution

            if not execution.success:
                logger.warning(f"Execution failed: {execution.error}")
                if state.iterations < self.max_iterations:
                    hint = (
                        f"Previous execution failed with error: {execution.error}. "
                        "Please fix the code."
                    )
                    continue
                state.finalize(FinalResult(
                    error=execution.error,
                    error_code=execution.error_code,
                    requires_visualization=understanding.should_visualize,
                    iterations=state.iterations,
                    iteration_history=list(state.iteration_history),
                ))
                return state

            rows = execution.data or []

            # Reason
            reasoning_run = self.reasoning_agent.invoke(
                "reason", ReasonInput(query=query, data=rows)
            )
            state.record("reasoning", reasoning_run)
            if reasoning_run.success:
                reasoning = reasoning_run.output
            else:
                logger.warning(f"Reasoning failed, using default: {reasoning_run.error}")
                reasoning = ReasoningOutput(explanation=DEFAULT_EXPLANATION)

            # Evaluate
            evaluation_run = self.reasoning_agent.invoke("evaluate", EvaluateInput(
                query=query,
                data=rows,
                explanation=reasoning.explanation,
            ))
            state.record("evaluation", evaluation_run)
            if evaluation_run.success:
                evaluation = evaluation_run.output
            else:
                logger.warning(f"Evaluation failed, using default: {evaluation_run.error}")
                evaluation = EvaluationOutcome(
                    satisfied=self.settings.EVALUATION_DEFAULT_SATISFIED,
                    reason="Unable to evaluate result; using default outcome",
                )
            info.evaluation = evaluation

            if evaluation.satisfied:
                logger.info(f"Result satisfied query after {state.iterations} iteration(s)")
                break

            if state.iterations >= self.max_iterations:
                logger.info("Iteration budget exhausted; returning last result")
                break

            hint = evaluation.suggested_refinement or DEFAULT_REFINEMENT
            logger.info(f"Refining: {hint}")

        # ---------------------------------------------------------------------
        # Stage 6: Chart (optional)
        # ---------------------------------------------------------------------
        rows = (execution.data or []) if execution else []
        spec = None
        if understanding.should_visualize and rows:
            spec = self._chart(state, query, rows, reasoning.explanation)

        # ---------------------------------------------------------------------
        # Finalize
        # ---------------------------------------------------------------------
        state.finalize(FinalResult(
            data=rows,
            explanation=reasoning.explanation,
            insights=reasoning.insights,
            execution_time_ms=execution.execution_time_ms if execution else 0.0,
            requires_visualization=understanding.should_visualize,
            visualization_spec=spec,
            iterations=state.iterations,
            iteration_history=list(state.iteration_history),
        ))
        logger.info(f"Query finished in {state.iterations} iteration(s), {len(rows)} rows")
        return state

    # -------------------------------------------------------------------------
    # Stage Helpers
    # -------------------------------------------------------------------------

    def _classify(
        self,
        state: OrchestrationState,
        query: str,
        chat_history: list[dict] | None,
    ) -> QueryUnderstandingOutput:
        classification_input = build_classification_input(
            query, chat_history, self.settings.CHAT_HISTORY_MESSAGES
        )
        run = self.understanding_agent.invoke(
            "classify", ClassifyInput(query=classification_input, latest_message=query)
        )
        state.record("understanding", run)

        if run.success:
            return run.output

        logger.warning(f"Query understanding failed, using default: {run.error}")
        return QueryUnderstandingOutput(
            requires_database=self.settings.CLASSIFICATION_DEFAULT_REQUIRES_DATA,
            should_visualize=False,
            intent="unknown",
        )

    def _chat_reply(
        self,
        state: OrchestrationState,
        understanding: QueryUnderstandingOutput,
    ) -> OrchestrationState:
        message = understanding.chat_response or DEFAULT_CHAT_RESPONSE
        logger.info("Detected casual chat, returning immediate response")

        state.record("chat", RunResult(
            success=True,
            output={"message": message},
            agent_name="orchestrator",
        ))
        state.finalize(FinalResult(explanation=message, is_chat=True))
        return state

    def _abort(
        self,
        state: OrchestrationState,
        run: RunResult,
        understanding: QueryUnderstandingOutput,
    ) -> OrchestrationState:
        state.finalize(FinalResult(
            error=run.error or "Stage failed",
            error_code=run.error_code,
            requires_visualization=understanding.should_visualize,
            iterations=state.iterations,
            iteration_history=list(state.iteration_history),
        ))
        return state

    def _chart(
        self,
        state: OrchestrationState,
        query: str,
        rows: list[dict],
        explanation: str,
    ) -> VisualizationSpec | None:
        run = self.chart_agent.invoke("generate_chart", ChartInput(
            query=query,
            data=rows,
            explanation=explanation,
        ))
        state.record("chart", run)
        if not run.success:
            logger.warning(f"Chart generation failed: {run.error}")
            return None
        return run.output.spec

    # -------------------------------------------------------------------------
    # Dataset Operations
    # -------------------------------------------------------------------------

    def get_schema(self) -> CatalogSnapshot:
        """
        Catalog snapshot of the configured database.

        Raises:
            StoreNotConfiguredError: If no store is configured
        """
        if self.store is None:
            raise StoreNotConfiguredError()
        return self.store.fetch_catalog()

    def get_data_insights(self) -> DataInsightOutput:
        """
        Describe the configured database and suggest questions.

        Raises:
            StoreNotConfiguredError: If no store is configured
        """
        catalog = self.get_schema()
        run = self.insight_agent.invoke("analyze_schema", InsightInput(catalog=catalog))
        if run.success:
            return run.output

        logger.warning(f"Data insight failed, using defaults: {run.error}")
        return DataInsightOutput(
            dataset_description=default_description(catalog),
            suggested_questions=list(DEFAULT_QUESTIONS),
            table_count=len(catalog.tables),
        )
