# File: schemaforge/type_validator.py
"""
SchemaForge - Column Data Type Validator
=========================================
Checks a single ``Column`` against the rules of its MSSQL data type:

    * length / precision / scale presence and ranges
    * scale vs. precision
    * IDENTITY and primary-key eligibility
    * DEFAULT literal syntax

The validator never mutates the column; it returns a ``ValidationOutcome``
holding plain-text errors and warnings.  A column without a data type is a
caller bug and raises ``ValueError`` immediately.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from schemaforge.datatypes import (
    DECIMAL_TYPES,
    INTEGER_TYPES,
    MAX_CAPABLE_TYPES,
    MAX_LENGTH,
    STRING_TYPES,
    DataType,
    DataTypeTraits,
    get_traits,
    type_family,
)
from schemaforge.models import Column

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.type_validator")

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

_LENGTH_LIMITS: Dict[DataType, int] = {
    DataType.CHAR: 8000,
    DataType.VARCHAR: 8000,
    DataType.NCHAR: 4000,
    DataType.NVARCHAR: 4000,
    DataType.BINARY: 8000,
    DataType.VARBINARY: 8000,
}

_PRECISION_RANGES: Dict[DataType, Tuple[int, int]] = {
    DataType.DECIMAL: (1, 38),
    DataType.NUMERIC: (1, 38),
    DataType.FLOAT: (1, 53),
    DataType.TIME: (0, 7),
    DataType.DATETIME2: (0, 7),
    DataType.DATETIMEOFFSET: (0, 7),
}

_INTEGER_RE: re.Pattern[str] = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE: re.Pattern[str] = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_FUNCTION_CALL_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\s*\(.*\)$")
_QUOTED_RE: re.Pattern[str] = re.compile(r"^N?'.*'$", re.DOTALL)


# ---------------------------------------------------------------------------
# Outcome container
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class ValidationOutcome:
    """Errors and warnings produced for one column."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _check_length(column: Column, dt: DataType, outcome: ValidationOutcome) -> None:
    length: Optional[int] = column.max_length
    if length is None:
        outcome.errors.append(f"{dt.value} type requires length.")
        return
    if length == MAX_LENGTH and dt in MAX_CAPABLE_TYPES:
        return

    limit: int = _LENGTH_LIMITS[dt]
    if length < 1 or length > limit:
        allowed: str = f"1 and {limit}"
        if dt in MAX_CAPABLE_TYPES:
            allowed += " (or MAX)"
        outcome.errors.append(
            f"{dt.value} length must be between {allowed}, got {length}."
        )


def _check_precision(column: Column, dt: DataType, outcome: ValidationOutcome) -> None:
    precision: Optional[int] = column.precision
    if precision is None:
        outcome.errors.append(f"{dt.value} type requires precision.")
        return

    low, high = _PRECISION_RANGES[dt]
    if precision < low or precision > high:
        outcome.errors.append(
            f"{dt.value} precision must be between {low} and {high}, got {precision}."
        )


def _check_scale(column: Column, dt: DataType, outcome: ValidationOutcome) -> None:
    scale: Optional[int] = column.scale
    if scale is None:
        outcome.errors.append(f"{dt.value} type requires scale.")
        return
    if scale < 0:
        outcome.errors.append(f"{dt.value} scale must not be negative, got {scale}.")
        return
    if column.precision is not None and scale > column.precision:
        outcome.errors.append(
            f"{dt.value} scale cannot exceed precision "
            f"(scale={scale}, precision={column.precision})."
        )


def _unwrap_parentheses(text: str) -> str:
    """``((0))`` → ``0``; SQL Server stores defaults in this form."""
    while text.startswith("(") and text.endswith(")"):
        inner: str = text[1:-1].strip()
        depth: int = 0
        balanced: bool = True
        for ch in inner:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth < 0:
                    balanced = False
                    break
        if not balanced or depth != 0:
            break
        text = inner
    return text


def _check_default_value(column: Column, dt: DataType, outcome: ValidationOutcome) -> None:
    raw: Optional[str] = column.default_value
    if raw is None or not raw.strip():
        return

    text: str = _unwrap_parentheses(raw.strip())
    if text.upper() == "NULL" or _FUNCTION_CALL_RE.match(text):
        return

    if dt in INTEGER_TYPES:
        if not _INTEGER_RE.match(text):
            outcome.errors.append(
                f"Default value '{raw}' is not a valid integer for {dt.value}."
            )
    elif dt in DECIMAL_TYPES:
        if not _DECIMAL_RE.match(text):
            outcome.errors.append(
                f"Default value '{raw}' is not a valid number for {dt.value}."
            )
    elif dt == DataType.BIT:
        if text not in ("0", "1"):
            outcome.errors.append(f"Default value '{raw}' for BIT must be 0 or 1.")
    elif dt in STRING_TYPES:
        if not _QUOTED_RE.match(text):
            outcome.warnings.append(
                f"Default value '{raw}' for {dt.value} should be wrapped in "
                f"single quotes, e.g. '{text}'."
            )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_column_data_type(column: Column) -> ValidationOutcome:
    """
    Validate *column*'s type parameters, flags and default literal.

    Raises:
        ValueError: If the column has no data type.
    """
    if column.data_type is None:
        raise ValueError(f"Column '{column.name}' has no data type.")

    dt: DataType = DataType(column.data_type)
    traits: DataTypeTraits = get_traits(dt)
    outcome: ValidationOutcome = ValidationOutcome()

    if traits.requires_length:
        _check_length(column, dt, outcome)
    if traits.requires_precision:
        _check_precision(column, dt, outcome)
    if traits.requires_scale:
        _check_scale(column, dt, outcome)

    if column.identity and not traits.supports_identity:
        outcome.errors.append(f"{dt.value} type does not support IDENTITY.")

    if column.primary_key and not traits.can_be_primary_key:
        outcome.errors.append(f"{dt.value} type cannot be used as a primary key.")

    _check_default_value(column, dt, outcome)

    if outcome.errors or outcome.warnings:
        logger.debug(
            "Column '%s' (%s): %d error(s), %d warning(s).",
            column.name,
            dt.value,
            len(outcome.errors),
            len(outcome.warnings),
        )
    return outcome


def is_compatible_type(a: DataType, b: DataType) -> bool:
    """
    True when *a* and *b* are the same type or share a type family
    (numeric, string, date).  Symmetric and reflexive.
    """
    if a is None or b is None:
        raise ValueError("Data types to compare must not be None.")
    first: DataType = DataType(a)
    second: DataType = DataType(b)
    if first == second:
        return True
    family = type_family(first)
    return family is not None and family == type_family(second)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationOutcome",
    "validate_column_data_type",
    "is_compatible_type",
]

logger.debug("schemaforge.type_validator loaded — %d public symbols.", len(__all__))
