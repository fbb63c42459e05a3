# =============================================================================
# lib/errors.py - Error Taxonomy
# =============================================================================
# Every failure the agent runtime can report has a stable code here.
#
# Errors raised inside a tool handler never cross the Agent boundary: the
# Agent converts them to a RunResult with success=False and keeps the code.
# The only error that reaches the caller of a query is
# StoreNotConfiguredError, since no partial result is possible without a
# database.
#
# Usage:
#   from lib.errors import UnsafeStatementError
#   raise UnsafeStatementError("DROP TABLE")
# =============================================================================

from __future__ import annotations

from typing import Any

from lib.utils import ApplicationError


# =============================================================================
# Agent Runtime Errors
# =============================================================================

class ToolNotFoundError(ApplicationError):
    """Raised when an Agent is asked to run a tool it never registered."""

    def __init__(self, tool_name: str, agent_name: str, available: list[str] | None = None):
        super().__init__(
            message=f"Tool '{tool_name}' not found on agent '{agent_name}'",
            code="TOOL_NOT_FOUND",
            suggestion=f"Available tools: {', '.join(available)}" if available else None,
            details={"tool": tool_name, "agent": agent_name},
        )


class DuplicateToolError(ApplicationError):
    """Raised at construction time when two tools share a name."""

    def __init__(self, tool_name: str, agent_name: str):
        super().__init__(
            message=f"Tool '{tool_name}' is already registered on agent '{agent_name}'",
            code="DUPLICATE_TOOL",
            suggestion="Give each tool contract a unique name",
            details={"tool": tool_name, "agent": agent_name},
        )


class ValidationFailedError(ApplicationError):
    """Input or output of a tool did not match its declared shape."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            details=details,
        )


class ExecutionFaultError(ApplicationError):
    """Wraps an unexpected exception raised by a tool handler."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="EXECUTION_FAULT",
            details=details,
        )


# =============================================================================
# Completion Errors
# =============================================================================

class EmptyCompletionError(ApplicationError):
    """The text-completion capability returned nothing."""

    def __init__(self, agent_name: str):
        super().__init__(
            message=f"Model returned an empty response for agent '{agent_name}'",
            code="EMPTY_COMPLETION",
            suggestion="Check OPENAI_API_KEY, OPENAI_BASE_URL and that the model endpoint is reachable",
            details={"agent": agent_name},
        )


class MalformedCompletionError(ApplicationError):
    """The completion did not contain a JSON object of the expected shape."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(
            message=message,
            code="MALFORMED_COMPLETION",
            suggestion="The model didn't return the expected JSON. Try rephrasing the request.",
            details={"raw_response": raw_response[:500]},
        )


# =============================================================================
# Execution Gate Errors
# =============================================================================

class UnsafeStatementError(ApplicationError):
    """A generated SQL statement contains a mutating or structural operation."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Dangerous SQL operation detected ({operation}). Read-only queries only.",
            code="UNSAFE_STATEMENT",
            suggestion="Use a single SELECT statement",
            details={"operation": operation},
        )


class ForbiddenCapabilityError(ApplicationError):
    """A transformation script referenced a restricted name."""

    def __init__(self, identifier: str):
        super().__init__(
            message=f"Access to '{identifier}' is not allowed in sandbox",
            code="FORBIDDEN_CAPABILITY",
            suggestion="Scripts may only use fetch_data, sql, log, pd and np",
            details={"identifier": identifier},
        )


class StoreConnectionError(ApplicationError):
    """The database could not be reached with the supplied connection URL."""

    def __init__(self, target: str, error: str):
        super().__init__(
            message=f"Could not connect to database {target}: {error}",
            code="STORE_CONNECTION_FAILED",
            suggestion="Check host, port, database name and credentials in the connection URL",
            details={"target": target, "error": error},
        )


class StoreNotConfiguredError(ApplicationError):
    """No database connection is available for a data query."""

    def __init__(self, session_id: str | None = None):
        super().__init__(
            message="Database not configured. Please configure the database connection first.",
            code="STORE_NOT_CONFIGURED",
            suggestion="POST a connection URL to /sessions/{id}/database or set DATABASE_URL",
            details={"session_id": session_id} if session_id else None,
        )
