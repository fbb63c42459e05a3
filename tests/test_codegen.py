# =============================================================================
# tests/test_codegen.py - Code Generation Tests
# =============================================================================
# This module contains tests for:
# - extract_code(): fenced and bare responses, sql vs python
# - enforce_row_limit(): LIMIT appended only when missing
# - CodeGenerationAgent with a scripted model
# =============================================================================

import pytest

from agents.codegen import (
    CodeGenerationAgent,
    classify_kind,
    enforce_row_limit,
    extract_code,
    has_row_limit,
)
from agents.models.generation import GenerateInput
from tests.conftest import FakeCompletion


# =============================================================================
# Extraction
# =============================================================================

class TestExtractCode:
    """Test extract_code() and classify_kind()."""

    def test_sql_fence(self):
        code, kind = extract_code("```sql\nSELECT * FROM orders\n```")
        assert code == "SELECT * FROM orders"
        assert kind == "sql"

    def test_python_fence(self):
        code, kind = extract_code("Here:\n```python\nreturn fetch_data('SELECT 1')\n```\nDone.")
        assert code == "return fetch_data('SELECT 1')"
        assert kind == "python"

    def test_unlabelled_fence_classified_by_content(self):
        assert extract_code("```\nwith t as (select 1) select * from t\n```")[1] == "sql"
        assert extract_code("```\ndf = pd.DataFrame([])\nreturn df\n```")[1] == "python"

    def test_bare_text(self):
        code, kind = extract_code("  SELECT 1  ")
        assert code == "SELECT 1"
        assert kind == "sql"

    @pytest.mark.parametrize("code, kind", [
        ("SELECT 1", "sql"),
        ("  select 1", "sql"),
        ("(SELECT 1) UNION (SELECT 2)", "sql"),
        ("WITH x AS (SELECT 1) SELECT * FROM x", "sql"),
        ("selected = 1", "python"),
        ("rows = fetch_data('SELECT 1')", "python"),
    ])
    def test_classify_kind(self, code, kind):
        assert classify_kind(code) == kind


# =============================================================================
# Row Limit
# =============================================================================

class TestRowLimit:
    """Test has_row_limit() and enforce_row_limit()."""

    def test_appends_limit(self):
        assert enforce_row_limit("SELECT * FROM orders;", 500) == "SELECT * FROM orders\nLIMIT 500;"

    def test_appends_after_trailing_comment(self):
        limited = enforce_row_limit("SELECT * FROM orders -- everything", 10)
        assert limited.endswith("\nLIMIT 10;")

    @pytest.mark.parametrize("statement", [
        "SELECT * FROM orders LIMIT 5",
        "SELECT * FROM orders limit 20;",
        "SELECT * FROM orders FETCH FIRST 10 ROWS ONLY",
        "SELECT TOP 10 * FROM orders",
        "SELECT TOP (10) * FROM orders",
    ])
    def test_existing_limit_untouched(self, statement):
        assert has_row_limit(statement)
        assert enforce_row_limit(statement, 500) == statement

    def test_enforced_limit_is_detected(self):
        limited = enforce_row_limit("SELECT id FROM orders", 50)
        assert has_row_limit(limited)
        assert enforce_row_limit(limited, 50) == limited


# =============================================================================
# Agent
# =============================================================================

class TestCodeGenerationAgent:
    """Test the generate tool."""

    def test_generates_limited_sql(self, make_context, sample_catalog):
        completion = FakeCompletion(codegen=["```sql\nSELECT status, COUNT(*) FROM orders GROUP BY status\n```"])
        agent = CodeGenerationAgent(make_context(completion))

        run = agent.invoke("generate", GenerateInput(
            query="orders by status",
            catalog=sample_catalog,
            max_rows=100,
        ))

        assert run.success is True
        assert run.output.kind == "sql"
        assert run.output.code.endswith("\nLIMIT 100;")

    def test_prompt_carries_schema_and_hint(self, make_context, sample_catalog):
        completion = FakeCompletion(codegen=["SELECT 1 LIMIT 1"])
        agent = CodeGenerationAgent(make_context(completion))

        agent.invoke("generate", GenerateInput(
            query="how many orders",
            catalog=sample_catalog,
            requires_visualization=True,
            refinement_hint="column nme does not exist",
        ))

        call = completion.calls_for("codegen")[0]
        assert "Table: orders (7 rows)" in call["system_prompt"]
        assert "LIMIT 500" in call["system_prompt"]
        assert "Previous attempt feedback: column nme does not exist" in call["user_message"]
        assert "visualization" in call["user_message"]

    def test_python_not_limited(self, make_context, sample_catalog):
        script = "```python\nrows = fetch_data('SELECT * FROM orders LIMIT 5')\nreturn rows\n```"
        agent = CodeGenerationAgent(make_context(FakeCompletion(codegen=[script])))

        run = agent.invoke("generate", GenerateInput(query="q", catalog=sample_catalog))

        assert run.output.kind == "python"
        assert "LIMIT 500" not in run.output.code

    def test_empty_fence_is_malformed(self, make_context, sample_catalog):
        agent = CodeGenerationAgent(make_context(FakeCompletion(codegen=["```sql\n```"])))

        run = agent.invoke("generate", GenerateInput(query="q", catalog=sample_catalog))

        assert run.success is False
        assert run.error_code == "MALFORMED_COMPLETION"

    def test_empty_response(self, make_context, sample_catalog):
        agent = CodeGenerationAgent(make_context(FakeCompletion(codegen=[""])))

        run = agent.invoke("generate", GenerateInput(query="q", catalog=sample_catalog))

        assert run.success is False
        assert run.error_code == "EMPTY_COMPLETION"
