"""Validation of user-supplied plan identifiers and options.

Everything here runs before any database access; malformed input raises
ParameterError.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from .errors import ParameterError

SQL_ID_RE = re.compile(r"^[0-9a-z]{13}$")
# Optionally schema-qualified, unquoted Oracle identifier
TABLE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_$#]{0,127}(\.[A-Za-z][A-Za-z0-9_$#]{0,127})?$")
# DBMS_XPLAN format: keywords with +/- modifiers, e.g. "basic +projection"
FORMAT_RE = re.compile(r"^[A-Za-z0-9_+\-, ]{1,200}$")
MAX_STATEMENT_ID_LEN = 30
DEFAULT_FORMAT = "TYPICAL"
DEFAULT_PLAN_TABLE = "PLAN_TABLE"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_sql_id(sql_id: Optional[str], required: bool = True) -> Optional[str]:
    """Check a 13-character SQL_ID (lower-case letters and digits)."""
    if _blank(sql_id):
        if required:
            raise ParameterError("A SQL_ID is required")
        return None
    sql_id = sql_id.strip()
    if not SQL_ID_RE.match(sql_id):
        raise ParameterError(f"Invalid SQL_ID: {sql_id!r} (expected 13 lower-case letters/digits)")
    return sql_id


def validate_table_name(name: Optional[str]) -> str:
    """Plan table name, defaulting to PLAN_TABLE."""
    if _blank(name):
        return DEFAULT_PLAN_TABLE
    name = name.strip()
    if not TABLE_NAME_RE.match(name):
        raise ParameterError(f"Invalid plan table name: {name!r}")
    return name.upper()


def validate_statement_id(statement_id: Optional[str]) -> Optional[str]:
    if _blank(statement_id):
        return None
    if len(statement_id) > MAX_STATEMENT_ID_LEN:
        raise ParameterError(
            f"Statement id is longer than {MAX_STATEMENT_ID_LEN} characters: {statement_id!r}"
        )
    return statement_id


def validate_format(plan_format: Optional[str]) -> str:
    """DBMS_XPLAN format options, passed through to the renderer."""
    if _blank(plan_format):
        return DEFAULT_FORMAT
    plan_format = plan_format.strip()
    if not FORMAT_RE.match(plan_format):
        raise ParameterError(f"Invalid plan format options: {plan_format!r}")
    return plan_format


def parse_non_negative_int(value: Any, name: str) -> Optional[int]:
    """Integer selector (child number, plan hash value, DBID); blank -> None."""
    if _blank(value):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ParameterError(f"{name} must be an integer, got {value!r}") from None
    if number < 0:
        raise ParameterError(f"{name} must not be negative, got {number}")
    return number
