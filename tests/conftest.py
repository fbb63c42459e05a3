# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeCompletion: scripted model replies routed by system prompt
# - FakeStore: in-memory catalog and scripted statement results
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from agents.runtime.agent import AgentContext
from app.config import get_settings
from core.models.catalog import CatalogSnapshot, ColumnSchema, TableSchema


# =============================================================================
# Test Doubles
# =============================================================================

# Distinctive phrases from each agent's system prompt
ROLE_MARKERS = {
    "understanding": "intent classifier",
    "codegen": "SQL code generator",
    "reasoning": "explain the",
    "evaluation": "query result evaluator",
    "chart": "data visualization expert",
    "insight": "suggest questions",
}


class FakeCompletion:
    """
    Text completion double.

    Replies are either a flat queue (used in order, whatever the prompt) or
    per-role queues keyed by ROLE_MARKERS names. A role whose queue holds a
    single reply keeps returning it. Every call is recorded.
    """

    def __init__(self, replies=None, **by_role):
        self.replies = list(replies or [])
        self.by_role = {role: list(queue) for role, queue in by_role.items()}
        self.calls = []

    def role_of(self, system_prompt):
        for role, marker in ROLE_MARKERS.items():
            if marker in system_prompt:
                return role
        return None

    def complete(self, system_prompt, user_message, temperature=None, max_tokens=None):
        role = self.role_of(system_prompt)
        self.calls.append({
            "role": role,
            "system_prompt": system_prompt,
            "user_message": user_message,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

        if role in self.by_role:
            queue = self.by_role[role]
            if not queue:
                return ""
            reply = queue[0] if len(queue) == 1 else queue.pop(0)
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            return ""

        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_for(self, role):
        return [c for c in self.calls if c["role"] == role]


class FakeStore:
    """
    StoreAdapter double.

    Each run_statement() call takes the next scripted result; an Exception
    in the script is raised instead. The last result repeats.
    """

    def __init__(self, catalog, results=None):
        self.catalog = catalog
        self.results = list(results if results is not None else [[]])
        self.statements = []
        self.catalog_fetches = 0

    def fetch_catalog(self):
        self.catalog_fetches += 1
        return self.catalog

    def run_statement(self, statement):
        self.statements.append(statement)
        result = self.results[0] if len(self.results) == 1 else self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sample_catalog():
    """Two-table sales catalog."""
    return CatalogSnapshot(tables=[
        TableSchema(
            name="orders",
            columns=[
                ColumnSchema(name="id", type="INTEGER", nullable=False),
                ColumnSchema(name="customer_id", type="INTEGER"),
                ColumnSchema(name="status", type="VARCHAR(20)"),
                ColumnSchema(name="amount", type="NUMERIC(10, 2)"),
                ColumnSchema(name="created_at", type="TIMESTAMP"),
            ],
            row_count=7,
        ),
        TableSchema(
            name="customers",
            columns=[
                ColumnSchema(name="id", type="INTEGER", nullable=False),
                ColumnSchema(name="name", type="VARCHAR(100)"),
                ColumnSchema(name="region", type="VARCHAR(50)"),
            ],
            row_count=3,
        ),
    ])


@pytest.fixture
def fake_store(sample_catalog):
    return FakeStore(sample_catalog)


@pytest.fixture
def make_context():
    """Build an AgentContext around a FakeCompletion."""
    def _make(completion=None, store=None, remote=None, **settings_overrides):
        settings = get_settings()
        if settings_overrides:
            settings = settings.model_copy(update=settings_overrides)
        return AgentContext(
            completion=completion or FakeCompletion(),
            store=store,
            remote=remote,
            settings=settings,
        )
    return _make


@pytest.fixture
def sample_chat_history():
    """Sample chat turns for testing."""
    return [
        {"role": "user", "content": "How many orders do we have?"},
        {"role": "assistant", "content": "There are 7 orders."},
        {"role": "user", "content": "Which ones are still pending?"},
        {"role": "assistant", "content": "Two orders are pending."},
        {"role": "user", "content": "Thanks"},
        {"role": "assistant", "content": "You're welcome!"},
    ]
