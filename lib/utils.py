# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - ApplicationError: base class for every actionable error
# - extract_json: isolate one JSON object inside free-form model output
# - format_rows_for_prompt: compact, bounded JSON preview of result rows
# =============================================================================

from __future__ import annotations

import json
import re
from typing import Any


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }


# =============================================================================
# JSON Extraction
# =============================================================================

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _first_object_span(text: str) -> str | None:
    """
    Return the first balanced top-level {...} span in text.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False

        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]

        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)

    return None


def extract_json(text: str) -> str | None:
    """
    Isolate the JSON object inside a model response.

    Prefers a fenced ```json (or bare ```) code block; otherwise falls back
    to the first top-level brace-delimited span.

    Args:
        text: Raw completion text

    Returns:
        The JSON candidate string, or None if nothing JSON-shaped was found

    Example:
        extract_json('Sure!\\n```json\\n{"a": 1}\\n```')  # '{"a": 1}'
        extract_json('answer: {"a": {"b": 2}} done')     # '{"a": {"b": 2}}'
    """
    if not text or not text.strip():
        return None

    match = _FENCED_BLOCK.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    return _first_object_span(text)


# =============================================================================
# Prompt Helpers
# =============================================================================

def format_rows_for_prompt(rows: Any, max_chars: int = 2000) -> str:
    """
    Serialize result rows for inclusion in a prompt.

    Values that are not JSON-native (dates, decimals) are stringified, and
    the output is cut at max_chars so large result sets don't blow up the
    model context.
    """
    text = json.dumps(rows, indent=2, default=str)
    if len(text) > max_chars:
        return text[:max_chars] + "\n... (truncated)"
    return text
