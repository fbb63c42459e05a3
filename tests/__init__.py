# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the AInsight API:
# - test_agent_runtime.py: ToolContract / Agent invocation rules
# - test_guardrails.py, test_sandbox.py, test_execution.py: execution gate
# - test_understanding.py, test_codegen.py, test_reasoning.py, test_chart.py:
#   the specialized agents with a scripted model
# - test_orchestrator.py: end-to-end agent loop scenarios
# - test_store.py, test_cache.py: SQLAlchemy adapter (SQLite) and TTL cache
# - test_api.py: HTTP endpoints through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
