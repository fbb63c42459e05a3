# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Two families reach the handlers:
# - AInsightException: HTTP-layer errors that carry their own status code
# - ApplicationError (lib/): domain errors, mapped to a status by code
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.utils import ApplicationError


class AInsightException(Exception):
    """
    Base exception for the AInsight API.

    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "AINSIGHT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return error_body(self.message, self.code, self.suggestion, self.details)


def error_body(
    message: str,
    code: str,
    suggestion: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "detail": message,
        "code": code,
    }
    if suggestion:
        result["suggestion"] = suggestion
    if details:
        result["details"] = details
    return result


# =============================================================================
# Session Exceptions
# =============================================================================

class SessionNotFoundError(AInsightException):
    """Raised when a session has no database configuration."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session not found: {session_id}",
            code="SESSION_NOT_FOUND",
            status_code=404,
            suggestion="Configure a database with POST /sessions/{id}/database; idle sessions expire",
            details={"session_id": session_id}
        )


# =============================================================================
# Domain Error Status Mapping
# =============================================================================

STATUS_BY_CODE: dict[str, int] = {
    "STORE_NOT_CONFIGURED": 400,
    "STORE_CONNECTION_FAILED": 400,
    "UNSAFE_STATEMENT": 400,
    "FORBIDDEN_CAPABILITY": 400,
    "VALIDATION_FAILED": 422,
    "TOOL_NOT_FOUND": 500,
    "EMPTY_COMPLETION": 502,
    "MALFORMED_COMPLETION": 502,
}


# =============================================================================
# Exception Handlers
# =============================================================================

async def ainsight_exception_handler(
    request: Request,
    exc: AInsightException
) -> JSONResponse:
    """
    Convert AInsightException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def application_error_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """Convert a domain ApplicationError to JSON, choosing the status by code."""
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 500),
        content=error_body(exc.message, exc.code, exc.suggestion, exc.details),
    )
