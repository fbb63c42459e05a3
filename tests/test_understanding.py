# =============================================================================
# tests/test_understanding.py - Query Understanding Tests
# =============================================================================
# This module contains tests for:
# - Model classification through the classify tool
# - Keyword heuristic fallback (only when enabled)
# - Folding chat history into the classification input
# =============================================================================

import pytest

from agents.prompts.understanding_system import build_classification_input
from agents.understanding import (
    CHAT_RESPONSES,
    QueryUnderstandingAgent,
    default_chat_response,
    heuristic_classify,
    infer_intent,
)
from tests.conftest import FakeCompletion


# =============================================================================
# Heuristics
# =============================================================================

class TestHeuristics:
    """Test the keyword heuristic."""

    @pytest.mark.parametrize("message, reply_key", [
        ("hello there", "greeting"),
        ("Hey!", "greeting"),
        ("what can you do?", "capabilities"),
        ("thanks a lot", "thanks"),
        ("bye", "farewell"),
        ("who are you", "identity"),
    ])
    def test_casual_messages(self, message, reply_key):
        result = heuristic_classify(message)
        assert result.requires_database is False
        assert result.should_visualize is False
        assert result.chat_response == CHAT_RESPONSES[reply_key]

    def test_data_question(self):
        result = heuristic_classify("How many orders shipped last week?")
        assert result.requires_database is True
        assert result.should_visualize is False
        assert result.intent == "counting"

    def test_visual_keyword(self):
        result = heuristic_classify("Plot revenue by month")
        assert result.requires_database is True
        assert result.should_visualize is True

    def test_greeting_word_inside_sentence_is_data(self):
        assert heuristic_classify("Which customers said hello in feedback?").requires_database is True

    @pytest.mark.parametrize("message, intent", [
        ("total revenue", "aggregation"),
        ("average order size", "statistical"),
        ("sales over time", "temporal"),
        ("compare regions", "comparison"),
        ("list customers", "analysis"),
    ])
    def test_infer_intent(self, message, intent):
        assert infer_intent(message) == intent

    def test_default_chat_response(self):
        assert default_chat_response("nice weather") == CHAT_RESPONSES["default"]


# =============================================================================
# Chat History
# =============================================================================

class TestClassificationInput:
    """Test build_classification_input()."""

    def test_no_history(self):
        assert build_classification_input("how many orders?", None, 4) == "how many orders?"
        assert build_classification_input("how many orders?", [], 4) == "how many orders?"

    def test_only_recent_turns_included(self, sample_chat_history):
        text = build_classification_input("and last month?", sample_chat_history, 4)

        assert text.startswith("Previous conversation:\n")
        assert text.endswith("\n\nCurrent query: and last month?")
        assert "How many orders do we have?" not in text
        assert "user: Which ones are still pending?" in text
        assert "assistant: You're welcome!" in text

    def test_zero_turns(self, sample_chat_history):
        assert build_classification_input("q", sample_chat_history, 0) == "q"

    def test_non_dict_turns_skipped(self):
        history = ["stray text", None, {"role": "user", "content": "Top customers?"}, 42]

        text = build_classification_input("and by region?", history, 4)

        assert text == "Previous conversation:\nuser: Top customers?\n\nCurrent query: and by region?"
        assert build_classification_input("q", ["stray", 1], 4) == "q"


# =============================================================================
# Agent
# =============================================================================

class TestQueryUnderstandingAgent:
    """Test the classify tool."""

    def test_model_classification(self, make_context):
        completion = FakeCompletion(understanding=[
            '{"requires_database": true, "should_visualize": true, "intent": "trend"}'
        ])
        agent = QueryUnderstandingAgent(make_context(completion))

        run = agent.invoke("classify", {"query": "show monthly sales trend"})

        assert run.success is True
        assert run.output.requires_database is True
        assert run.output.should_visualize is True
        assert completion.calls[0]["temperature"] == 0.3

    def test_missing_chat_response_filled(self, make_context):
        completion = FakeCompletion(understanding=['{"requires_database": false, "intent": "greeting"}'])
        agent = QueryUnderstandingAgent(make_context(completion))

        run = agent.invoke("classify", {"query": "hi", "latest_message": "hi"})

        assert run.output.requires_database is False
        assert run.output.chat_response == CHAT_RESPONSES["greeting"]

    def test_unparseable_reply_fails_by_default(self, make_context):
        agent = QueryUnderstandingAgent(make_context(FakeCompletion(understanding=["I am not sure"])))

        run = agent.invoke("classify", {"query": "hello"})

        assert run.success is False
        assert run.error_code == "MALFORMED_COMPLETION"

    def test_heuristic_fallback_when_enabled(self, make_context):
        context = make_context(
            FakeCompletion(understanding=["I am not sure"]),
            CLASSIFICATION_HEURISTIC_FALLBACK=True,
        )
        agent = QueryUnderstandingAgent(context)

        run = agent.invoke("classify", {
            "query": "Previous conversation:\nuser: plot it\n\nCurrent query: hello",
            "latest_message": "hello",
        })

        assert run.success is True
        assert run.output.requires_database is False
        assert run.output.chat_response == CHAT_RESPONSES["greeting"]
