# =============================================================================
# tests/test_utils.py - Shared Helper Tests
# =============================================================================

from datetime import date
from decimal import Decimal

from lib.utils import ApplicationError, extract_json, format_rows_for_prompt


class TestExtractJson:
    """Test extract_json()."""

    def test_fenced_json(self):
        text = 'Sure!\n```json\n{"a": 1}\n```\nAnything else?'
        assert extract_json(text) == '{"a": 1}'

    def test_bare_fence(self):
        assert extract_json('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_embedded_object(self):
        assert extract_json('answer: {"a": {"b": 2}} done') == '{"a": {"b": 2}}'

    def test_braces_inside_strings(self):
        assert extract_json('x {"text": "a } b", "n": 1} y') == '{"text": "a } b", "n": 1}'

    def test_unbalanced_then_balanced(self):
        assert extract_json('{ oops {"a": 1}') == '{"a": 1}'

    def test_nothing(self):
        assert extract_json("") is None
        assert extract_json("   ") is None
        assert extract_json("no json") is None


class TestFormatRows:
    """Test format_rows_for_prompt()."""

    def test_non_json_values_stringified(self):
        text = format_rows_for_prompt([{"d": date(2024, 1, 2), "amount": Decimal("1.50")}])
        assert "2024-01-02" in text
        assert "1.50" in text

    def test_truncated(self):
        rows = [{"n": i} for i in range(1000)]
        text = format_rows_for_prompt(rows, max_chars=100)
        assert text.endswith("... (truncated)")
        assert len(text) < 150


def test_application_error_to_dict():
    error = ApplicationError("Something broke", code="BROKEN", suggestion="Retry")
    assert error.to_dict() == {
        "code": "BROKEN",
        "message": "Something broke",
        "suggestion": "Retry",
        "details": {},
    }
    assert "Something broke" in str(error)
