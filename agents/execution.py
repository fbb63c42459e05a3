# =============================================================================
# agents/execution.py - Execution Gate and Execution Agent
# =============================================================================
# Runs a CodeArtifact after it passes the guardrails:
#
#   sql    -> check_statement() -> store.run_statement()
#   python -> check_script()    -> lib.sandbox.run_script()
#
# When a RemoteExecutor is configured the same checks run first, then the
# code is delegated by name ("execute_query" / "execute_code") and the
# reply text is parsed into rows.
#
# The agent never fails its tool invocation for a gate rejection or a
# database error: those come back as ExecutionResult(success=False) so the
# orchestrator can feed the error to the next generation round.
#
# Usage:
#   agent = ExecutionAgent(context)
#   run = agent.invoke("execute", {"code": "SELECT 1 AS n", "kind": "sql"})
#   run.output.data   # [{"n": 1}]
# =============================================================================

from __future__ import annotations

import json
import logging
import time
from typing import Any

from agents.guardrails import check_script, check_statement
from agents.models.execution_result import ExecuteInput, ExecutionResult
from agents.models.generation import CodeKind
from agents.runtime.agent import Agent, RemoteExecutor, ToolContract
from lib.errors import StoreNotConfiguredError
from lib.sandbox import run_script
from lib.store import StoreAdapter
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

REMOTE_TOOL_NAMES: dict[str, str] = {
    "sql": "execute_query",
    "python": "execute_code",
}


def parse_remote_reply(text: str) -> list[dict[str, Any]]:
    """
    Rows from a remote executor's reply.

    JSON arrays become rows, a JSON object becomes one row, anything else
    (including non-JSON text) becomes [{"result": ...}].
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return [{"result": text}]

    if isinstance(parsed, list):
        return [row if isinstance(row, dict) else {"result": row} for row in parsed]
    if isinstance(parsed, dict):
        return [parsed]
    return [{"result": parsed}]


# =============================================================================
# Execution Gate
# =============================================================================

class ExecutionGate:
    """
    Validates and runs generated code.

    Attributes:
        store: Database adapter, or None if no database is configured
        remote: Optional delegate for execution
    """

    def __init__(self, store: StoreAdapter | None = None, remote: RemoteExecutor | None = None):
        self.store = store
        self.remote = remote

    def fetch_data(self, statement: str) -> list[dict[str, Any]]:
        """Run one statement after the statement checks. Exposed to scripts."""
        check_statement(statement)
        if self.store is None:
            raise StoreNotConfiguredError()
        return self.store.run_statement(statement)

    def run(self, code: str, kind: CodeKind) -> list[dict[str, Any]]:
        """
        Check then execute one artifact.

        Raises:
            UnsafeStatementError: SQL failed the denylist (store never called)
            ForbiddenCapabilityError: Script failed the denylist (never evaluated)
            StoreNotConfiguredError: No store and no remote executor
            ExecutionFaultError: Script raised
        """
        if kind == "sql":
            check_statement(code)
        else:
            check_script(code)

        if self.remote is not None:
            return self._delegate(code, kind)

        if kind == "sql":
            if self.store is None:
                raise StoreNotConfiguredError()
            return self.store.run_statement(code)

        return run_script(code, fetch_data=self.fetch_data)

    def _delegate(self, code: str, kind: CodeKind) -> list[dict[str, Any]]:
        tool_name = REMOTE_TOOL_NAMES[kind]
        arguments = {"sql": code} if kind == "sql" else {"code": code}
        logger.info(f"Delegating {kind} execution to remote tool {tool_name}")
        reply = self.remote.call_tool(tool_name, arguments)
        return parse_remote_reply(reply)


# =============================================================================
# Execution Agent
# =============================================================================

class ExecutionAgent(Agent):
    """Wraps the ExecutionGate as an `execute` tool."""

    name = "execution"
    description = "Safely executes SQL and Python code"

    def __init__(self, context):
        self.gate = ExecutionGate(store=context.store, remote=context.remote)
        super().__init__(context)

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="execute",
            description="Execute code safely and return results",
            input_model=ExecuteInput,
            output_model=ExecutionResult,
            handler=self.execute,
        ))

    def execute(self, payload: ExecuteInput) -> ExecutionResult:
        started = time.perf_counter()

        def elapsed() -> float:
            return (time.perf_counter() - started) * 1000

        try:
            rows = self.gate.run(payload.code, payload.kind)
        except ApplicationError as e:
            logger.warning(f"Execution rejected or failed: {e}")
            return ExecutionResult(
                success=False,
                error=e.message,
                error_code=e.code,
                execution_time_ms=elapsed(),
            )
        except Exception as e:
            # Driver errors carry the useful message on .orig
            message = str(getattr(e, "orig", None) or e).strip().split("\n")[0]
            logger.warning(f"Execution failed: {message}")
            return ExecutionResult(
                success=False,
                error=message,
                error_code="EXECUTION_FAULT",
                execution_time_ms=elapsed(),
            )

        logger.info(f"Executed {payload.kind} artifact: {len(rows)} rows")
        return ExecutionResult(success=True, data=rows, execution_time_ms=elapsed())
