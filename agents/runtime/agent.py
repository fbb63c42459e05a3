# =============================================================================
# agents/runtime/agent.py - Agent and Tool Contract Runtime
# =============================================================================
# The building blocks every specialized agent is made of:
#
# - ToolContract: a named operation with a validated input model, an
#   optional validated output model, and a handler
# - RunResult: the outcome of one tool invocation (always produced)
# - AgentContext: the collaborators an agent needs (text completion, store,
#   remote executor, settings), built explicitly and passed down
# - Agent: a named bundle of tool contracts plus chat()/chat_json() helpers
#
# Invariant: no exception raised by a tool handler ever escapes invoke().
# Taxonomy errors (lib/errors.py) keep their code; anything else becomes
# EXECUTION_FAULT.
#
# Usage:
#   class EchoAgent(Agent):
#       name = "echo"
#
#       def register_tools(self) -> None:
#           self.register(ToolContract(
#               name="echo",
#               description="Return the input text",
#               input_model=EchoInput,
#               handler=lambda payload: {"text": payload.text},
#           ))
#
#   result = EchoAgent(context).invoke("echo", {"text": "hi"})
# =============================================================================

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol, TypeVar

from pydantic import BaseModel, Field, ValidationError

from app.config import Settings, get_settings
from lib.errors import (
    DuplicateToolError,
    EmptyCompletionError,
    ExecutionFaultError,
    MalformedCompletionError,
    ToolNotFoundError,
    ValidationFailedError,
)
from lib.llm import TextCompletion
from lib.store import StoreAdapter
from lib.utils import ApplicationError, extract_json

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# =============================================================================
# Contracts and Results
# =============================================================================

@dataclass(frozen=True)
class ToolContract:
    """
    A named operation an Agent can run.

    Attributes:
        name: Unique within the owning Agent
        description: One line shown in logs and tool listings
        input_model: Pydantic model the input is validated against
        handler: Called with the validated input model
        output_model: If set, the handler's return value is validated too
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], Any]
    output_model: type[BaseModel] | None = None


class RunResult(BaseModel):
    """Outcome of one tool invocation."""

    success: bool = Field(..., description="Whether the handler ran and its output validated")
    output: Any = Field(default=None, description="Handler output (validated model when declared)")
    error: str | None = Field(default=None, description="Human-readable failure message")
    error_code: str | None = Field(default=None, description="Taxonomy code, e.g. VALIDATION_FAILED")
    execution_time_ms: float = Field(default=0.0, ge=0.0)
    agent_name: str = Field(..., description="Agent that ran the tool")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class RemoteExecutor(Protocol):
    """Opaque call-by-name capability for delegated execution."""

    def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        ...


@dataclass
class AgentContext:
    """
    Collaborators shared by the agents of one orchestrator.

    Attributes:
        completion: Text-completion capability
        store: Database adapter (None until a database is configured)
        remote: Optional remote executor for delegated execution
        settings: Application settings
        temperature: Agent default temperature (None -> settings.LLM_TEMPERATURE)
        max_tokens: Agent default completion length (None -> settings.LLM_MAX_TOKENS)
    """

    completion: TextCompletion
    store: StoreAdapter | None = None
    remote: RemoteExecutor | None = None
    settings: Settings = field(default_factory=get_settings)
    temperature: float | None = None
    max_tokens: int | None = None


def _describe_validation_error(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    ]


# =============================================================================
# Agent Base Class
# =============================================================================

class Agent(ABC):
    """
    Named bundle of tool contracts bound to a text-completion capability.

    Subclasses set `name` and `description` and register their tools in
    register_tools(), which runs during construction.
    """

    name: str = "agent"
    description: str = ""

    def __init__(self, context: AgentContext):
        self.context = context
        self.temperature = (
            context.temperature if context.temperature is not None
            else context.settings.LLM_TEMPERATURE
        )
        self.max_tokens = context.max_tokens or context.settings.LLM_MAX_TOKENS
        self._tools: dict[str, ToolContract] = {}

        self.register_tools()
        logger.debug(f"Agent '{self.name}' ready with tools: {self.list_tools()}")

    @abstractmethod
    def register_tools(self) -> None:
        """Register this agent's tool contracts."""

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register(self, contract: ToolContract) -> None:
        """
        Add a tool contract.

        Raises:
            DuplicateToolError: If a contract with the same name exists
        """
        if contract.name in self._tools:
            raise DuplicateToolError(contract.name, self.name)
        self._tools[contract.name] = contract

    def list_tools(self) -> list[str]:
        return list(self._tools)

    def get_tool(self, tool_name: str) -> ToolContract | None:
        return self._tools.get(tool_name)

    # -------------------------------------------------------------------------
    # Invocation
    # -------------------------------------------------------------------------

    def _result(
        self,
        started: float,
        output: Any = None,
        error: ApplicationError | None = None,
    ) -> RunResult:
        elapsed_ms = (time.perf_counter() - started) * 1000
        if error is None:
            return RunResult(
                success=True,
                output=output,
                execution_time_ms=elapsed_ms,
                agent_name=self.name,
            )
        return RunResult(
            success=False,
            error=error.message,
            error_code=error.code,
            execution_time_ms=elapsed_ms,
            agent_name=self.name,
        )

    def invoke(self, tool_name: str, payload: Any) -> RunResult:
        """
        Run a registered tool.

        Args:
            tool_name: Name of a registered ToolContract
            payload: Dict or pydantic model matching the tool's input model

        Returns:
            RunResult - never raises for handler, validation or lookup faults
        """
        started = time.perf_counter()

        contract = self._tools.get(tool_name)
        if contract is None:
            logger.warning(f"[{self.name}] Unknown tool: {tool_name}")
            return self._result(
                started, error=ToolNotFoundError(tool_name, self.name, self.list_tools())
            )

        # Validate input
        try:
            if isinstance(payload, contract.input_model):
                validated = payload
            else:
                if isinstance(payload, BaseModel):
                    payload = payload.model_dump()
                validated = contract.input_model.model_validate(payload)
        except ValidationError as e:
            problems = _describe_validation_error(e)
            logger.warning(f"[{self.name}] Invalid input for {tool_name}: {problems}")
            return self._result(started, error=ValidationFailedError(
                f"Invalid input for tool '{tool_name}': {'; '.join(problems)}",
                details={"tool": tool_name, "errors": problems},
            ))

        # Run handler
        try:
            output = contract.handler(validated)
        except ApplicationError as e:
            logger.warning(f"[{self.name}] {tool_name} failed: {e}")
            return self._result(started, error=e)
        except Exception as e:
            logger.exception(f"[{self.name}] {tool_name} raised unexpectedly")
            return self._result(started, error=ExecutionFaultError(
                f"Tool '{tool_name}' failed: {e}",
                details={"tool": tool_name, "exception": type(e).__name__},
            ))

        # Validate output
        if contract.output_model is not None and not isinstance(output, contract.output_model):
            try:
                if isinstance(output, BaseModel):
                    output = output.model_dump()
                output = contract.output_model.model_validate(output)
            except ValidationError as e:
                problems = _describe_validation_error(e)
                logger.warning(f"[{self.name}] Invalid output from {tool_name}: {problems}")
                return self._result(started, error=ValidationFailedError(
                    f"Tool '{tool_name}' returned invalid output: {'; '.join(problems)}",
                    details={"tool": tool_name, "errors": problems},
                ))

        result = self._result(started, output=output)
        logger.info(f"[{self.name}] {tool_name} completed in {result.execution_time_ms:.1f}ms")
        return result

    # -------------------------------------------------------------------------
    # Completion Helpers
    # -------------------------------------------------------------------------

    def chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Free-text completion using the agent's defaults unless overridden.

        Raises:
            EmptyCompletionError: If the model returned nothing
        """
        text = self.context.completion.complete(
            system_prompt,
            user_message,
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens or self.max_tokens,
        )
        if not text or not text.strip():
            raise EmptyCompletionError(self.name)
        return text

    def chat_json(
        self,
        system_prompt: str,
        user_message: str,
        output_model: type[ModelT],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelT:
        """
        Completion parsed into output_model.

        The JSON object is taken from a fenced code block if present, else
        from the first balanced top-level {...} span.

        Raises:
            EmptyCompletionError: If the model returned nothing
            MalformedCompletionError: No JSON found, JSON invalid, or shape mismatch
        """
        text = self.chat(system_prompt, user_message, temperature, max_tokens)

        candidate = extract_json(text)
        if candidate is None:
            raise MalformedCompletionError("No JSON object found in model response", text)

        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise MalformedCompletionError(f"Model response is not valid JSON: {e.msg}", text)

        try:
            return output_model.model_validate(data)
        except ValidationError as e:
            raise MalformedCompletionError(
                f"Model response doesn't match {output_model.__name__}: "
                f"{'; '.join(_describe_validation_error(e))}",
                text,
            )
