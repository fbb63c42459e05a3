# =============================================================================
# lib/sandbox.py - Restricted Script Runner
# =============================================================================
# Runs a generated transformation script as the body of a function inside a
# scope that exposes only:
#
#   fetch_data(statement)     -> list of row dicts
#   sql(template, **params)   -> fetch_data with $name placeholders substituted
#   log(*args)                -> routed to this module's logger
#   pd, np                    -> namespaces holding a fixed set of pandas and
#                                numpy callables, never the modules themselves
#
# plus a minimal builtins table. Restricted names are also shadowed to None.
# Static checks (agents/guardrails.py) must run before run_script().
#
# The script's return value becomes the row set:
#   DataFrame -> records, Series -> records (index reset), list/tuple -> list,
#   dict -> [dict], None -> [], anything else -> [{"result": value}]
# Every row is then normalised to plain JSON values (numpy scalars, NaN
# and timestamps).
#
# Usage:
#   rows = run_script(
#       "df = pd.DataFrame(fetch_data('SELECT * FROM orders'))\n"
#       "return df.groupby('status').size().reset_index(name='n')",
#       fetch_data=store.run_statement,
#   )
# =============================================================================

from __future__ import annotations

import json
import logging
import textwrap
from decimal import Decimal
from string import Template
from types import SimpleNamespace
from typing import Any, Callable

import numpy as np
import pandas as pd

from lib.errors import ExecutionFaultError
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

SCRIPT_ENTRYPOINT = "__script__"

SAFE_BUILTINS: dict[str, Any] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "filter": filter,
    "float": float,
    "int": int,
    "isinstance": isinstance,
    "len": len,
    "list": list,
    "map": map,
    "max": max,
    "min": min,
    "range": range,
    "reversed": reversed,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
    "Exception": Exception,
    "KeyError": KeyError,
    "TypeError": TypeError,
    "ValueError": ValueError,
    "ZeroDivisionError": ZeroDivisionError,
}

SHADOWED_NAMES = [
    "open", "eval", "exec", "compile", "__import__", "globals", "locals",
    "vars", "getattr", "setattr", "delattr", "input", "breakpoint",
    "exit", "quit", "help", "os", "sys", "subprocess",
]

# The only pandas / numpy names a script can reach through `pd` and `np`
PANDAS_NAMES = [
    "DataFrame", "Series", "Categorical", "Grouper", "NA", "NaT",
    "Timedelta", "Timestamp", "concat", "crosstab", "cut", "date_range",
    "get_dummies", "isna", "melt", "merge", "notna", "pivot_table", "qcut",
    "to_datetime", "to_numeric", "to_timedelta", "unique",
]

NUMPY_NAMES = [
    "abs", "arange", "argsort", "array", "ceil", "clip", "corrcoef", "cumsum",
    "diff", "exp", "float64", "floor", "histogram", "inf", "int64", "isnan",
    "linspace", "log", "log10", "max", "maximum", "mean", "median", "min",
    "minimum", "nan", "ones", "percentile", "quantile", "round", "select",
    "sort", "sqrt", "std", "sum", "unique", "var", "where", "zeros",
]


def _namespace(module: Any, names: list[str]) -> SimpleNamespace:
    return SimpleNamespace(**{name: getattr(module, name) for name in names})


def _plain(value: Any) -> Any:
    """Convert one returned value into a JSON-serializable Python value."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    if isinstance(value, (np.ndarray, pd.Series, pd.Index)):
        return [_plain(v) for v in value.tolist()]
    if isinstance(value, np.datetime64):
        return None if np.isnat(value) else pd.Timestamp(value).isoformat()
    if isinstance(value, np.timedelta64):
        return None if np.isnat(value) else str(pd.Timedelta(value))
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, pd.Timedelta):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, (str, int, float, bool, Decimal)):
        return value
    return str(value)


def _to_rows(value: Any) -> list[dict[str, Any]]:
    """Convert a script's return value into JSON-friendly row dicts."""
    if value is None:
        return []

    if isinstance(value, pd.Series):
        value = value.reset_index()

    if isinstance(value, pd.DataFrame):
        return json.loads(value.to_json(orient="records", date_format="iso"))

    if isinstance(value, dict):
        return [_plain(value)]

    if isinstance(value, (list, tuple)):
        return [
            _plain(item) if isinstance(item, dict) else {"result": _plain(item)}
            for item in value
        ]

    return [{"result": _plain(value)}]


def build_source(code: str) -> str:
    """Wrap script code as the body of the entrypoint function."""
    body = textwrap.indent(textwrap.dedent(code).strip("\n"), "    ")
    return f"def {SCRIPT_ENTRYPOINT}():\n{body}\n    pass\n"


def run_script(
    code: str,
    fetch_data: Callable[[str], list[dict[str, Any]]],
) -> list[dict[str, Any]]:
    """
    Execute a transformation script.

    Args:
        code: Script body (may use `return`)
        fetch_data: Callable that runs one checked SQL statement

    Returns:
        The script's result as a list of row dicts

    Raises:
        ExecutionFaultError: Syntax error or any exception raised by the script
        ApplicationError: Errors raised by fetch_data pass through unchanged
    """

    def sql(template: str, **params: Any) -> list[dict[str, Any]]:
        return fetch_data(Template(template).substitute(params))

    def log(*args: Any) -> None:
        logger.info("[sandbox] " + " ".join(str(a) for a in args))

    try:
        compiled = compile(build_source(code), "<script>", "exec")
    except SyntaxError as e:
        # Line 1 of the compiled source is the def header
        line = (e.lineno or 1) - 1
        raise ExecutionFaultError(
            f"Script syntax error: {e.msg} (line {line})",
            details={"line": line},
        )

    scope: dict[str, Any] = {name: None for name in SHADOWED_NAMES}
    scope.update({
        "__builtins__": SAFE_BUILTINS,
        "fetch_data": fetch_data,
        "sql": sql,
        "log": log,
        "print": log,
        "pd": _namespace(pd, PANDAS_NAMES),
        "np": _namespace(np, NUMPY_NAMES),
    })

    try:
        exec(compiled, scope)
        result = scope[SCRIPT_ENTRYPOINT]()
    except ApplicationError:
        raise
    except Exception as e:
        raise ExecutionFaultError(
            f"Script execution failed: {type(e).__name__}: {e}",
            details={"exception": type(e).__name__},
        )

    rows = _to_rows(result)
    logger.debug(f"Script returned {len(rows)} rows")
    return rows
