# File: schemaforge/naming.py
"""
SchemaForge - Naming Rule Engine
=================================
Validates and suggests names for tables, columns, indexes and constraints
against a project's ``NamingRules``.

Validation order for every name:
    1. reject empty / blank names
    2. ``enforce_upper_case``: the raw name must already be uppercase
    3. tables only: required prefix, then required suffix
    4. configured regex pattern (full match)
    5. enforced case style

Suggestions are pure text transforms driven by the rules; they never touch
the input and are not guaranteed to satisfy every rule at once (e.g. a
PASCAL suggestion cannot satisfy ``enforce_upper_case``).
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from schemaforge.models import CaseStyle, IndexType, NamingRules

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.naming")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CAMEL_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([a-z])([A-Z])")
_WORD_SPLIT_RE: re.Pattern[str] = re.compile(r"[_\s-]+")
_SPACE_HYPHEN_RE: re.Pattern[str] = re.compile(r"[\s-]+")

AUDIT_COLUMNS: Sequence[str] = ("REG_ID", "REG_DT", "CHG_ID", "CHG_DT")

GENERIC_KEY_NAMES: FrozenSet[str] = frozenset({"ID", "SEQ_NO", "HIST_NO", "NO", "KEY"})

PK_CONSTRAINT_PREFIX: str = "PK__"
CLUSTERED_INDEX_PREFIX: str = "CIDX__"
INDEX_PREFIX: str = "IDX__"


# ---------------------------------------------------------------------------
# Case transforms
# ---------------------------------------------------------------------------


def _pascal_pass(name: str) -> str:
    separated: str = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", name)
    parts: List[str] = [p for p in _WORD_SPLIT_RE.split(separated) if p]
    return "".join(p[0].upper() + p[1:].lower() for p in parts)


def to_pascal(name: str) -> str:
    """
    ``user_name`` / ``userName`` / ``user-name`` → ``UserName``.

    Idempotent: ``to_pascal(to_pascal(x)) == to_pascal(x)``.
    """
    # One-letter words merge on the first pass ("a b" -> "AB"); the second
    # pass reaches the fixed point ("Ab").
    return _pascal_pass(_pascal_pass(name))


def to_snake(name: str) -> str:
    """``UserName`` / ``user-name`` → ``user_name``."""
    separated: str = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", name)
    return _SPACE_HYPHEN_RE.sub("_", separated).lower()


_CASE_TRANSFORMS: Dict[CaseStyle, Callable[[str], str]] = {
    CaseStyle.UPPER: str.upper,
    CaseStyle.LOWER: str.lower,
    CaseStyle.PASCAL: to_pascal,
    CaseStyle.SNAKE: to_snake,
}


def _is_pascal(name: str) -> bool:
    return name[:1].isupper() and "_" not in name and "-" not in name


def _is_snake(name: str) -> bool:
    return name == name.lower() and "-" not in name and " " not in name


_CASE_CHECKS: Dict[CaseStyle, Callable[[str], bool]] = {
    CaseStyle.UPPER: lambda n: n == n.upper(),
    CaseStyle.LOWER: lambda n: n == n.lower(),
    CaseStyle.PASCAL: _is_pascal,
    CaseStyle.SNAKE: _is_snake,
}


def apply_case(name: str, style: Optional[CaseStyle]) -> str:
    """Transform *name* into *style*; ``None`` returns it unchanged."""
    if style is None:
        return name
    return _CASE_TRANSFORMS[CaseStyle(style)](name)


def matches_case(name: str, style: Optional[CaseStyle]) -> bool:
    if style is None:
        return True
    return _CASE_CHECKS[CaseStyle(style)](name)


# ---------------------------------------------------------------------------
# Violation finders (return a reason string, or None when compliant)
# ---------------------------------------------------------------------------


def _find_violation(
    name: str,
    rules: NamingRules,
    pattern: Optional[str],
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
) -> Optional[str]:
    if not name or not name.strip():
        return "name must not be empty"

    if rules.enforce_upper_case and name != name.upper():
        return "name must be uppercase"

    if prefix and not name.startswith(prefix):
        return f"name must start with '{prefix}'"

    if suffix and not name.endswith(suffix):
        return f"name must end with '{suffix}'"

    if pattern and re.fullmatch(pattern, name) is None:
        return f"name must match pattern '{pattern}'"

    if not matches_case(name, rules.enforce_case):
        style: CaseStyle = CaseStyle(rules.enforce_case)
        return f"name must be {style.value} case"

    return None


def table_name_violation(name: str, rules: NamingRules) -> Optional[str]:
    return _find_violation(
        name, rules, rules.table_pattern, rules.table_prefix, rules.table_suffix
    )


def column_name_violation(name: str, rules: NamingRules) -> Optional[str]:
    # Table prefix/suffix apply to table names only.
    return _find_violation(name, rules, rules.column_pattern)


def index_name_violation(name: str, rules: NamingRules) -> Optional[str]:
    return _find_violation(name, rules, rules.index_pattern)


# ---------------------------------------------------------------------------
# Boolean validators
# ---------------------------------------------------------------------------


def validate_table_name(name: str, rules: NamingRules) -> bool:
    return table_name_violation(name, rules) is None


def validate_column_name(name: str, rules: NamingRules) -> bool:
    return column_name_violation(name, rules) is None


def validate_index_name(name: str, rules: NamingRules) -> bool:
    return index_name_violation(name, rules) is None


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def suggest_table_name(name: str, rules: NamingRules) -> str:
    """Case transform first, then add any missing prefix / suffix."""
    suggestion: str = apply_case(name, rules.enforce_case)
    if rules.table_prefix and not suggestion.startswith(rules.table_prefix):
        suggestion = rules.table_prefix + suggestion
    if rules.table_suffix and not suggestion.endswith(rules.table_suffix):
        suggestion = suggestion + rules.table_suffix
    return suggestion


def suggest_column_name(name: str, rules: NamingRules) -> str:
    return apply_case(name, rules.enforce_case)


def suggest_index_name(table_name: str, column_name: str, rules: NamingRules) -> str:
    return apply_case(f"IX_{table_name}_{column_name}", rules.enforce_case)


# ---------------------------------------------------------------------------
# MSSQL conventions (advisory)
# ---------------------------------------------------------------------------


def missing_audit_columns(column_names: Iterable[str]) -> List[str]:
    """Audit columns (REG_ID, REG_DT, CHG_ID, CHG_DT) absent from *column_names*."""
    present: FrozenSet[str] = frozenset(n.upper() for n in column_names)
    return [c for c in AUDIT_COLUMNS if c not in present]


def has_audit_columns(column_names: Iterable[str]) -> bool:
    return not missing_audit_columns(column_names)


def follows_table_column_naming(column_name: str) -> bool:
    """False for bare generic key names such as ``ID`` or ``SEQ_NO``."""
    return column_name.strip().upper() not in GENERIC_KEY_NAMES


def suggest_table_column_name(table_name: str, column_name: str) -> str:
    return f"{table_name}_{column_name}"


def constraint_prefix(index_type: IndexType, unique: bool) -> str:
    """``PK__`` for unique clustered, ``CIDX__`` for clustered, else ``IDX__``."""
    if IndexType(index_type) == IndexType.CLUSTERED:
        return PK_CONSTRAINT_PREFIX if unique else CLUSTERED_INDEX_PREFIX
    return INDEX_PREFIX


def build_constraint_name(
    table_name: str,
    column_names: Sequence[str],
    index_type: IndexType = IndexType.NONCLUSTERED,
    unique: bool = False,
) -> str:
    """
    Examples:
        >>> build_constraint_name("USER_INFO", ["USER_ID"], IndexType.CLUSTERED, True)
        'PK__USER_INFO__USER_ID'
        >>> build_constraint_name("ORDERS", ["CUST_ID", "ORDER_DT"])
        'IDX__ORDERS__CUST_ID__ORDER_DT'
    """
    prefix: str = constraint_prefix(index_type, unique)
    return prefix + table_name + "__" + "__".join(column_names)


def follows_constraint_naming(
    name: str,
    table_name: str,
    index_type: IndexType = IndexType.NONCLUSTERED,
    unique: bool = False,
) -> bool:
    expected: str = constraint_prefix(index_type, unique) + table_name + "__"
    return name.upper().startswith(expected.upper())


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "AUDIT_COLUMNS",
    "GENERIC_KEY_NAMES",
    "apply_case",
    "matches_case",
    "to_pascal",
    "to_snake",
    "table_name_violation",
    "column_name_violation",
    "index_name_violation",
    "validate_table_name",
    "validate_column_name",
    "validate_index_name",
    "suggest_table_name",
    "suggest_column_name",
    "suggest_index_name",
    "missing_audit_columns",
    "has_audit_columns",
    "follows_table_column_naming",
    "suggest_table_column_name",
    "constraint_prefix",
    "build_constraint_name",
    "follows_constraint_naming",
]

logger.debug("schemaforge.naming loaded — %d public symbols.", len(__all__))
