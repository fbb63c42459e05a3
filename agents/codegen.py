# =============================================================================
# agents/codegen.py - Code Generation Agent
# =============================================================================
# Turns a query plus the catalog snapshot into one executable artifact:
# a read-only SQL statement (preferred) or a Python transformation script.
#
# Post-processing:
# 1. extract_code(): take the fenced block, decide sql vs python
# 2. enforce_row_limit(): SQL without a row-limiting clause gets
#    "LIMIT <max_rows>" appended; SQL that has one is left untouched
#
# Usage:
#   agent = CodeGenerationAgent(context)
#   run = agent.invoke("generate", GenerateInput(query=..., catalog=..., max_rows=500))
#   run.output.code   # "SELECT COUNT(*) AS n FROM orders\nLIMIT 500;"
# =============================================================================

import logging
import re

from agents.models.generation import CodeArtifact, CodeKind, GenerateInput
from agents.prompts.codegen_system import build_codegen_message, build_codegen_prompt
from agents.runtime.agent import Agent, ToolContract
from lib.errors import MalformedCompletionError

logger = logging.getLogger(__name__)

FENCED_CODE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\n?([\s\S]*?)```")

SQL_LANGUAGES = {"sql", "postgresql", "postgres", "psql", "sqlite", "mysql"}
PYTHON_LANGUAGES = {"python", "py", "python3"}

SQL_START = re.compile(r"^\s*(?:\(\s*)*(SELECT|WITH)\b", re.IGNORECASE)

ROW_LIMIT_CLAUSE = re.compile(
    r"\bLIMIT\s+\d+|\bFETCH\s+(?:FIRST|NEXT)\s+\d+|\bTOP\s*\(?\s*\d+",
    re.IGNORECASE,
)


def classify_kind(code: str) -> CodeKind:
    """SQL if it starts like a query, otherwise a script."""
    return "sql" if SQL_START.match(code) else "python"


def extract_code(text: str) -> tuple[str, CodeKind]:
    """
    Pull the code out of a model response.

    A labelled fence decides the kind; an unlabelled fence or bare text is
    classified by its first keyword.

    Returns:
        (code, kind)
    """
    match = FENCED_CODE.search(text)
    if match is None:
        code = text.strip()
        return code, classify_kind(code)

    language = match.group(1).lower()
    code = match.group(2).strip()

    if language in SQL_LANGUAGES:
        return code, "sql"
    if language in PYTHON_LANGUAGES:
        return code, "python"
    return code, classify_kind(code)


def has_row_limit(statement: str) -> bool:
    return ROW_LIMIT_CLAUSE.search(statement) is not None


def enforce_row_limit(statement: str, max_rows: int) -> str:
    """
    Append a LIMIT clause if the statement has none.

    The clause goes on its own line so a trailing line comment can't
    swallow it.

    Example:
        enforce_row_limit("SELECT * FROM t;", 500)    # "SELECT * FROM t\\nLIMIT 500;"
        enforce_row_limit("SELECT * FROM t LIMIT 5", 500)  # unchanged
    """
    if has_row_limit(statement):
        return statement
    body = statement.rstrip().rstrip(";").rstrip()
    return f"{body}\nLIMIT {max_rows};"


class CodeGenerationAgent(Agent):
    """Generates one SQL statement or Python script per iteration."""

    name = "code-generation"
    description = "Generates executable SQL or Python code from natural language"

    def register_tools(self) -> None:
        self.register(ToolContract(
            name="generate",
            description="Generate executable code from user query and catalog",
            input_model=GenerateInput,
            output_model=CodeArtifact,
            handler=self.generate,
        ))

    def generate(self, payload: GenerateInput) -> CodeArtifact:
        system_prompt = build_codegen_prompt(payload.catalog.to_prompt_text(), payload.max_rows)
        message = build_codegen_message(
            payload.query,
            payload.requires_visualization,
            payload.refinement_hint,
        )

        response = self.chat(system_prompt, message)
        code, kind = extract_code(response)
        if not code:
            raise MalformedCompletionError("Model response contained no code", response)

        if kind == "sql":
            code = enforce_row_limit(code, payload.max_rows)

        logger.info(f"Generated {kind} artifact ({len(code)} chars)")
        logger.debug(f"Generated code:\n{code}")

        return CodeArtifact(
            code=code,
            kind=kind,
            requires_visualization=payload.requires_visualization,
        )
