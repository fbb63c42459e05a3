# =============================================================================
# agents/guardrails.py - Execution Guardrails
# =============================================================================
# Static checks that run before any generated code touches the database or
# the script sandbox:
#
# - check_statement(): SQL must be a single read-only statement. A fixed
#   denylist of mutating/structural operations is matched case-insensitively
#   after comments are stripped, and chained statements are rejected.
# - check_script(): transformation scripts may not name restricted
#   capabilities (process, filesystem, network, module loading, dynamic
#   evaluation) as bare identifiers, may not use dunder names, and may not
#   touch private, file I/O, evaluator or introspection attributes.
#
# Both raise on the first violation; nothing is executed here.
#
# Usage:
#   from agents.guardrails import check_statement, check_script
#   check_statement("SELECT * FROM orders LIMIT 10")   # ok
#   check_statement("drop table orders")               # UnsafeStatementError
#   check_script("rows = fetch_data('SELECT 1')")      # ok
#   check_script("import os")                          # ForbiddenCapabilityError
# =============================================================================

import logging
import re

from lib.errors import ForbiddenCapabilityError, UnsafeStatementError

logger = logging.getLogger(__name__)


# =============================================================================
# Statement Denylist
# =============================================================================

FORBIDDEN_STATEMENT_PATTERNS: list[re.Pattern] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in [
        r"\bDROP\s+\w+",
        r"\bALTER\s+\w+",
        r"\bCREATE\s+(?:OR\s+REPLACE\s+)?\w+",
        r"\bDELETE\s+FROM\b",
        r"\bTRUNCATE\b",
        r"\bINSERT\s+INTO\b",
        r"\bSELECT\b[\s\S]*?\bINTO\s+\S",
        r"\bUPDATE\s+[\s\S]*?\bSET\b",
        r"\bMERGE\s+INTO\b",
        r"\bREPLACE\s+INTO\b",
        r"\bGRANT\b",
        r"\bREVOKE\b",
        r"\bCOPY\b",
        r"\bATTACH\s+DATABASE\b",
        r"\bVACUUM\b",
        r"\bREINDEX\b",
    ]
]

_LINE_COMMENT = re.compile(r"--[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")


def strip_sql_comments(statement: str) -> str:
    """Replace -- and /* */ comments with a single space."""
    without_blocks = _BLOCK_COMMENT.sub(" ", statement)
    return _LINE_COMMENT.sub(" ", without_blocks)


def _has_chained_statement(statement: str) -> bool:
    body = _STRING_LITERAL.sub("''", statement).strip()
    body = body.rstrip(";").rstrip()
    return ";" in body


def check_statement(statement: str) -> None:
    """
    Reject anything but a single read-only SQL statement.

    Args:
        statement: Generated SQL

    Raises:
        UnsafeStatementError: On the first denylisted operation or on a
            second statement chained after a semicolon
    """
    cleaned = strip_sql_comments(statement)

    for pattern in FORBIDDEN_STATEMENT_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            operation = " ".join(match.group(0).split()[:2]).upper()
            if operation.startswith("UPDATE"):
                operation = "UPDATE ... SET"
            elif operation.startswith("SELECT"):
                operation = "SELECT ... INTO"
            logger.warning(f"Rejected statement with {operation}")
            raise UnsafeStatementError(operation)

    if _has_chained_statement(cleaned):
        logger.warning("Rejected chained statements")
        raise UnsafeStatementError("multiple statements")


# =============================================================================
# Script Denylist
# =============================================================================

FORBIDDEN_IDENTIFIERS: list[str] = [
    # Module loading
    "import", "__import__", "importlib", "builtins",
    # Dynamic evaluation and introspection
    "eval", "exec", "compile", "globals", "locals", "vars",
    "getattr", "setattr", "delattr",
    # Process and interpreter
    "os", "sys", "subprocess", "signal", "ctypes", "multiprocessing",
    "exit", "quit", "breakpoint", "input", "help",
    # Filesystem
    "open", "shutil", "pathlib", "pickle", "tempfile",
    # Network
    "socket", "requests", "urllib", "httpx", "http",
]

_IDENTIFIER_PATTERNS = [
    (name, re.compile(rf"(?<![.\w]){re.escape(name)}(?!\w)"))
    for name in FORBIDDEN_IDENTIFIERS
]

_DUNDER = re.compile(r"__\w+__")

# Attributes of in-scope objects that lead to file I/O, expression
# evaluators, frames or other modules. Matched with or without a call so
# aliasing ("reader = pd.read_csv") is caught too.
_RESTRICTED_ATTRIBUTE = re.compile(
    r"\.(?:[\s\\]|#[^\n]*)*(_\w*|read_\w+|to_(?:csv|excel|json|parquet|pickle|sql|hdf|feather|html|latex|"
    r"clipboard|markdown|stata|xml|orc|string|gbq)|load|loadtxt|save|savez\w*|savetxt|"
    r"fromfile|fromregex|tofile|genfromtxt|memmap|dump|dumps|eval|query|style|plot|"
    r"hist|boxplot|ctypes|io|api|core|lib|compat|testing|os|sys|"
    r"gi_frame|gi_code|gi_yieldfrom|cr_frame|cr_code|cr_await|ag_frame|ag_code|ag_await|"
    r"f_back|f_globals|f_locals|f_builtins|f_code|tb_frame|tb_next|co_code|co_consts)(?!\w)"
)


def check_script(code: str) -> None:
    """
    Reject scripts that reference restricted capabilities.

    Identifiers match as whole words not preceded by "." or another
    identifier character, so "opened", "exec_time" and "row.open" pass.
    Attribute names are checked separately against a fixed list.

    Raises:
        ForbiddenCapabilityError: On the first restricted name found
    """
    dunder = _DUNDER.search(code)
    if dunder:
        logger.warning(f"Rejected script using {dunder.group(0)}")
        raise ForbiddenCapabilityError(dunder.group(0))

    for name, pattern in _IDENTIFIER_PATTERNS:
        if pattern.search(code):
            logger.warning(f"Rejected script using {name}")
            raise ForbiddenCapabilityError(name)

    attribute = _RESTRICTED_ATTRIBUTE.search(code)
    if attribute:
        logger.warning(f"Rejected script using attribute {attribute.group(1)}")
        raise ForbiddenCapabilityError(attribute.group(1))
