#!/usr/bin/env python3
# =============================================================================
# scripts/chat_interactive.py - Interactive Data Questions in the Terminal
# =============================================================================
# Ask questions about a database in plain English, straight from a terminal.
# Uses the same orchestrator as the API.
#
# Usage:
#   python scripts/chat_interactive.py                         # uses DATABASE_URL
#   python scripts/chat_interactive.py sqlite:///sales.db      # explicit URL
#
# Commands:
#   /quit or /exit - Exit the chat
#   /schema        - Show the database tables
#   /insights      - Describe the dataset and suggest questions
#   /code          - Show the code generated for the last answer
#   /clear         - Forget the conversation history
#   /help          - Show help
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

# Check for API key
if not os.getenv("OPENAI_API_KEY"):
    print("ERROR: OPENAI_API_KEY not found in environment")
    print("Please set it in your .env file or environment")
    sys.exit(1)

import logging

from agents.orchestrator import AgentOrchestrator
from agents.models.state import OrchestrationState
from app.config import settings
from lib.store import SQLAlchemyStoreAdapter
from lib.utils import ApplicationError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

MAX_PRINTED_ROWS = 10


def print_header(store: SQLAlchemyStoreAdapter):
    print("=" * 60)
    print("  AInsight - ask your database anything")
    print("=" * 60)
    print(f"  Database: {store.identity}")
    print(f"  Model:    {settings.OPENAI_MODEL}")
    print("  Type /help for commands, /quit to exit")
    print("=" * 60)
    print()


def print_help():
    print("\nCommands:")
    print("  /schema   - Show the database tables")
    print("  /insights - Describe the dataset and suggest questions")
    print("  /code     - Show the code generated for the last answer")
    print("  /clear    - Forget the conversation history")
    print("  /help     - Show this help")
    print("  /quit     - Exit")
    print()


def print_schema(orchestrator: AgentOrchestrator):
    catalog = orchestrator.get_schema()
    print()
    print(catalog.to_prompt_text())
    print()


def print_insights(orchestrator: AgentOrchestrator):
    insights = orchestrator.get_data_insights()
    print(f"\nAssistant: {insights.dataset_description}\n")
    print("  You could ask:")
    for question in insights.suggested_questions:
        print(f"  - {question}")
    print()


def print_rows(rows: list[dict]):
    if not rows:
        print("  (no rows)")
        return

    columns = list(rows[0].keys())
    print("  " + " | ".join(columns))
    print("  " + "-" * min(80, 3 * len(columns) + sum(len(c) for c in columns)))
    for row in rows[:MAX_PRINTED_ROWS]:
        print("  " + " | ".join(str(row.get(c, "")) for c in columns))
    if len(rows) > MAX_PRINTED_ROWS:
        print(f"  ... {len(rows) - MAX_PRINTED_ROWS} more rows")


def print_answer(state: OrchestrationState):
    result = state.final_result

    if result.error:
        print(f"Assistant: Sorry, I couldn't answer that. [{result.error_code}] {result.error}\n")
        return

    print(f"Assistant: {result.explanation}")
    for insight in result.insights:
        print(f"  * {insight}")

    if not result.is_chat:
        print()
        print_rows(result.data)
        if result.visualization_spec:
            spec = result.visualization_spec
            print(f"\n  [Suggested {spec.kind} chart: {spec.x_field} vs {spec.y_field}]")
        print(f"\n  [{result.iterations} iteration(s), {result.execution_time_ms:.0f}ms]")
    print()


def print_last_code(state: OrchestrationState | None):
    if state is None or not state.iteration_history:
        print("\n  No code generated yet.\n")
        return

    for info in state.iteration_history:
        if info.artifact is None:
            continue
        status = "ok" if info.execution and info.execution.success else "failed"
        print(f"\n  Iteration {info.iteration} ({info.artifact.kind}, {status}):")
        for line in info.artifact.code.splitlines():
            print(f"    {line}")
    print()


def main():
    """Main chat loop."""
    url = sys.argv[1] if len(sys.argv) > 1 else settings.DATABASE_URL
    if not url:
        print("ERROR: No database URL. Pass one as an argument or set DATABASE_URL.")
        sys.exit(1)

    store = SQLAlchemyStoreAdapter(url)
    try:
        store.test_connection()
    except ApplicationError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    orchestrator = AgentOrchestrator(store=store)

    print_header(store)
    conversation_history: list[dict] = []
    last_state = None

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            # Handle commands
            command = user_input.lower()
            if command in ["/quit", "/exit", "/q"]:
                print("\nAssistant: Goodbye!\n")
                break

            if command == "/help":
                print_help()
                continue

            if command == "/schema":
                print_schema(orchestrator)
                continue

            if command == "/insights":
                print_insights(orchestrator)
                continue

            if command == "/code":
                print_last_code(last_state)
                continue

            if command == "/clear":
                conversation_history = []
                print("\n  Conversation cleared.\n")
                continue

            print()
            last_state = orchestrator.process_query(user_input, chat_history=conversation_history)
            print_answer(last_state)

            conversation_history.append({"role": "user", "content": user_input})
            reply = last_state.final_result.explanation or last_state.final_result.error or ""
            conversation_history.append({"role": "assistant", "content": reply})

        except KeyboardInterrupt:
            print("\n\nAssistant: Goodbye!\n")
            break
        except ApplicationError as e:
            print(f"\nError: {e}\n")


if __name__ == "__main__":
    main()
