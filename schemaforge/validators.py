# File: schemaforge/validators.py
"""
SchemaForge - Project Schema Validators
========================================
A **pure-function validation pipeline** over the Pydantic models defined in
``schemaforge.models``.

Pydantic handles per-field structural correctness.  This module adds the
semantic checks that decide whether a project can be exported:

    * naming rules for every table / column / index (``schemaforge.naming``)
    * data-type rules for every column (``schemaforge.type_validator``)
    * business rules (missing primary key, duplicate names)
    * structural rules (empty tables, empty indexes, clustered index count)
    * optional MSSQL conventions (audit columns, descriptions, key names)
    * advisory performance / best-practice / security checks (``validate_advanced``)

Every object is checked independently and every finding is accumulated, so
a single run reports the complete defect set.

Usage::

    from schemaforge.validators import validate_project
    result = validate_project(project)
    if not result.can_export:
        print(result.format_report())
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from schemaforge import naming
from schemaforge.datatypes import DataType
from schemaforge.models import (
    Column,
    ErrorType,
    Index,
    NamingRules,
    ObjectType,
    Project,
    Table,
)
from schemaforge.type_validator import ValidationOutcome, validate_column_data_type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight finding descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "error_type", "object_type", "object_name", "message", "suggestion")

    def __init__(
        self,
        level: str,
        error_type: ErrorType,
        object_type: Union[ObjectType, str],
        object_name: str,
        message: str,
        suggestion: Optional[str] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.error_type: ErrorType = error_type
        self.object_type: Union[ObjectType, str] = object_type
        self.object_name: str = object_name
        self.message: str = message
        self.suggestion: Optional[str] = suggestion

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {_enum_text(self.error_type)}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "error_type": _enum_text(self.error_type),
            "object_type": _enum_text(self.object_type),
            "object_name": self.object_name,
            "message": self.message,
            "suggestion": self.suggestion,
        }


def _enum_text(value: Any) -> str:
    return getattr(value, "value", value)


class ValidationResult:
    """
    Accumulates ``ValidationError`` instances for one project.

    Errors block export; warnings are advisory.
    """

    __slots__ = ("project_id", "project_name", "_items")

    def __init__(
        self,
        project_id: Optional[int] = None,
        project_name: Optional[str] = None,
    ) -> None:
        self.project_id: Optional[int] = project_id
        self.project_name: Optional[str] = project_name
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        error_type: ErrorType,
        object_type: Union[ObjectType, str],
        object_name: str,
        message: str,
        suggestion: Optional[str] = None,
    ) -> None:
        self._items.append(
            ValidationError("error", error_type, object_type, object_name, message, suggestion)
        )

    def add_warning(
        self,
        error_type: ErrorType,
        object_type: Union[ObjectType, str],
        object_name: str,
        message: str,
        suggestion: Optional[str] = None,
    ) -> None:
        self._items.append(
            ValidationError("warning", error_type, object_type, object_name, message, suggestion)
        )

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def can_export(self) -> bool:
        """Warnings never block an export."""
        return self.is_valid

    def for_object(self, object_name: str) -> List[ValidationError]:
        return [e for e in self._items if e.object_name == object_name]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "❌" if item.is_error else "⚠️"
            lines.append(
                f"  {prefix} [{_enum_text(item.error_type)}] "
                f"{_enum_text(item.object_type)} '{item.object_name}': {item.message}"
            )
            if item.suggestion:
                lines.append(f"       suggestion: {item.suggestion}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Per-object checks
# ---------------------------------------------------------------------------


def _check_table_naming(table: Table, rules: NamingRules, result: ValidationResult) -> None:
    reason: Optional[str] = naming.table_name_violation(table.name, rules)
    if reason is not None:
        result.add_error(
            ErrorType.NAMING_RULE,
            ObjectType.TABLE,
            table.name,
            f"Table name '{table.name}' violates naming rules: {reason}.",
            naming.suggest_table_name(table.name, rules),
        )


def _check_column(
    table: Table, column: Column, rules: NamingRules, result: ValidationResult
) -> None:
    qualified: str = f"{table.name}.{column.name}"

    reason: Optional[str] = naming.column_name_violation(column.name, rules)
    if reason is not None:
        result.add_error(
            ErrorType.NAMING_RULE,
            ObjectType.COLUMN,
            qualified,
            f"Column name '{column.name}' violates naming rules: {reason}.",
            naming.suggest_column_name(column.name, rules),
        )

    outcome: ValidationOutcome = validate_column_data_type(column)
    for message in outcome.errors:
        result.add_error(ErrorType.DATA_TYPE, ObjectType.COLUMN, qualified, message)
    for message in outcome.warnings:
        result.add_warning(ErrorType.DATA_TYPE, ObjectType.COLUMN, qualified, message)

    if column.identity and column.nullable:
        result.add_error(
            ErrorType.DATA_TYPE,
            ObjectType.COLUMN,
            qualified,
            f"IDENTITY column '{column.name}' must be NOT NULL.",
            "Set nullable to false.",
        )


def _check_index(
    table: Table, index: Index, rules: NamingRules, result: ValidationResult
) -> None:
    qualified: str = f"{table.name}.{index.name}"

    reason: Optional[str] = naming.index_name_violation(index.name, rules)
    if reason is not None:
        result.add_error(
            ErrorType.NAMING_RULE,
            ObjectType.INDEX,
            qualified,
            f"Index name '{index.name}' violates naming rules: {reason}.",
            f"IX_{index.name}",
        )

    if not index.columns:
        result.add_error(
            ErrorType.BUSINESS_RULE,
            ObjectType.INDEX,
            qualified,
            f"Index '{index.name}' has no columns.",
        )


def _check_business_rules(table: Table, result: ValidationResult) -> None:
    if not table.columns:
        result.add_error(
            ErrorType.BUSINESS_RULE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has no columns.",
        )
        return

    if not table.primary_key_columns:
        result.add_warning(
            ErrorType.BUSINESS_RULE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has no primary key.",
            "Add a primary key column.",
        )

    groups: Dict[str, List[str]] = defaultdict(list)
    for column in table.ordered_columns:
        groups[column.name.lower()].append(column.name)
    for names in groups.values():
        if len(names) > 1:
            result.add_error(
                ErrorType.BUSINESS_RULE,
                ObjectType.TABLE,
                table.name,
                f"Duplicate column names in table '{table.name}': {', '.join(names)}.",
                "Rename the columns so names are unique (case-insensitive).",
            )

    clustered: List[Index] = [i for i in table.indexes if i.is_clustered]
    if len(clustered) > 1:
        result.add_error(
            ErrorType.BUSINESS_RULE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has {len(clustered)} CLUSTERED indexes; "
            f"at most one is allowed.",
        )
    elif clustered and table.primary_key_columns:
        result.add_warning(
            ErrorType.BUSINESS_RULE,
            ObjectType.INDEX,
            f"{table.name}.{clustered[0].name}",
            f"Index '{clustered[0].name}' is CLUSTERED, so the primary key of "
            f"table '{table.name}' will be created NONCLUSTERED.",
            "Make the index NONCLUSTERED to keep a clustered primary key.",
        )


def _check_sql_server_conventions(
    table: Table, rules: NamingRules, result: ValidationResult
) -> None:
    if rules.require_description and not (table.description or "").strip():
        result.add_warning(
            ErrorType.SQL_SERVER_DESCRIPTION,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has no description.",
            "Describe the table's purpose.",
        )

    if rules.recommend_audit_columns:
        missing: List[str] = naming.missing_audit_columns(table.column_names)
        if missing:
            result.add_warning(
                ErrorType.SQL_SERVER_AUDIT,
                ObjectType.TABLE,
                table.name,
                f"Table '{table.name}' is missing audit columns: {', '.join(missing)}.",
                "REG_DT should default to GETDATE().",
            )

    if rules.enforce_table_column_naming:
        for column in table.primary_key_columns:
            if not naming.follows_table_column_naming(column.name):
                result.add_warning(
                    ErrorType.SQL_SERVER_NAMING,
                    ObjectType.COLUMN,
                    f"{table.name}.{column.name}",
                    f"Primary key column '{column.name}' uses a generic name.",
                    naming.suggest_table_column_name(table.name, column.name),
                )

    if rules.enforce_constraint_naming:
        for index in table.indexes:
            if not naming.follows_constraint_naming(
                index.name, table.name, index.index_type, index.unique
            ):
                result.add_warning(
                    ErrorType.SQL_SERVER_NAMING,
                    ObjectType.INDEX,
                    f"{table.name}.{index.name}",
                    f"Index '{index.name}' does not follow the constraint naming convention.",
                    naming.build_constraint_name(
                        table.name, index.column_names, index.index_type, index.unique
                    ),
                )


# ---------------------------------------------------------------------------
# Advanced (advisory) checks: warnings only, independent of naming rules
# ---------------------------------------------------------------------------

_INDEX_HINT_COLUMN_COUNT: int = 5
_WIDE_TABLE_COLUMN_COUNT: int = 50
_LARGE_STRING_LENGTH: int = 4000
_MIN_PASSWORD_LENGTH: int = 60  # bcrypt hashes are 60 characters

_KEY_TYPES: FrozenSet[DataType] = frozenset({DataType.INT, DataType.BIGINT})
_TEXT_TYPES: FrozenSet[DataType] = frozenset({DataType.VARCHAR, DataType.NVARCHAR})
_PASSWORD_MARKERS: Tuple[str, ...] = ("password", "pwd")
_PERSONAL_DATA_MARKERS: Tuple[str, ...] = ("email", "phone", "ssn")


def _check_performance(table: Table, result: ValidationResult) -> None:
    count: int = len(table.columns)
    if count > _INDEX_HINT_COLUMN_COUNT and not table.indexes:
        result.add_warning(
            ErrorType.PERFORMANCE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has {count} columns but no indexes.",
            "Index the columns used in lookups and joins.",
        )
    if count > _WIDE_TABLE_COLUMN_COUNT:
        result.add_warning(
            ErrorType.PERFORMANCE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has {count} columns.",
            "Consider normalising the table.",
        )

    for column in table.ordered_columns:
        if (
            column.data_type in _TEXT_TYPES
            and column.max_length is not None
            and column.max_length > _LARGE_STRING_LENGTH
        ):
            result.add_warning(
                ErrorType.PERFORMANCE,
                ObjectType.COLUMN,
                f"{table.name}.{column.name}",
                f"Column '{column.name}' is {column.data_type.value}({column.max_length}).",
                f"Keep string columns at or below {_LARGE_STRING_LENGTH} characters.",
            )

    if table.columns and not table.primary_key_columns and not any(
        i.is_clustered for i in table.indexes
    ):
        result.add_warning(
            ErrorType.PERFORMANCE,
            ObjectType.TABLE,
            table.name,
            f"Table '{table.name}' has neither a clustered index nor a primary key.",
            "Add a primary key or a CLUSTERED index.",
        )


def _check_best_practices(table: Table, result: ValidationResult) -> None:
    for column in table.ordered_columns:
        lowered: str = column.name.lower()
        if lowered.endswith("_id") and lowered != "id" and column.data_type not in _KEY_TYPES:
            result.add_warning(
                ErrorType.BEST_PRACTICE,
                ObjectType.COLUMN,
                f"{table.name}.{column.name}",
                f"Key-like column '{column.name}' is {column.data_type.value}, "
                f"not an integer type.",
                "Use INT or BIGINT for key columns.",
            )


def _check_security(table: Table, result: ValidationResult) -> None:
    for column in table.ordered_columns:
        lowered: str = column.name.lower()
        qualified: str = f"{table.name}.{column.name}"

        if any(marker in lowered for marker in _PASSWORD_MARKERS):
            if column.data_type not in _TEXT_TYPES:
                result.add_warning(
                    ErrorType.SECURITY,
                    ObjectType.COLUMN,
                    qualified,
                    f"Password column '{column.name}' is {column.data_type.value}, "
                    f"not a string type.",
                    "Store password hashes in VARCHAR or NVARCHAR.",
                )
            length: Optional[int] = column.max_length
            if length is not None and 0 < length < _MIN_PASSWORD_LENGTH:
                result.add_warning(
                    ErrorType.SECURITY,
                    ObjectType.COLUMN,
                    qualified,
                    f"Password column '{column.name}' holds {length} characters, "
                    f"too short for a password hash.",
                    f"Use a length of at least {_MIN_PASSWORD_LENGTH}.",
                )

        if column.nullable and any(marker in lowered for marker in _PERSONAL_DATA_MARKERS):
            result.add_warning(
                ErrorType.SECURITY,
                ObjectType.COLUMN,
                qualified,
                f"Personal-data column '{column.name}' allows NULL.",
                "Make the column NOT NULL if the value is always collected.",
            )


def advanced_findings(project: Project) -> ValidationResult:
    """
    Performance, best-practice and security advisories for *project*.

    Every finding is a warning, so the result is always exportable.  Naming
    rules are not needed.
    """
    result: ValidationResult = ValidationResult(project.id, project.name)
    for table in project.tables:
        _check_performance(table, result)
        _check_best_practices(table, result)
        _check_security(table, result)
    logger.debug("Project '%s' advisories: %s", project.name, result.summary())
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _missing_rules_result(project: Project) -> ValidationResult:
    result: ValidationResult = ValidationResult(project.id, project.name)
    result.add_error(
        ErrorType.NAMING_RULE,
        ObjectType.PROJECT,
        project.name,
        "Project has no naming rules configured.",
        "Configure naming rules before validating the schema.",
    )
    return result


def validate_table(table: Table, rules: NamingRules) -> ValidationResult:
    """Run naming, data-type, business and convention checks for one table."""
    result: ValidationResult = ValidationResult()

    _check_table_naming(table, rules, result)
    for column in table.ordered_columns:
        _check_column(table, column, rules, result)
    for index in table.indexes:
        _check_index(table, index, rules, result)
    _check_business_rules(table, result)
    _check_sql_server_conventions(table, rules, result)

    logger.debug("Table '%s': %s", table.name, result.summary())
    return result


def validate_table_in_project(project: Project, table_name: str) -> ValidationResult:
    """
    Validate a single table using its owning project's naming rules.

    Raises:
        KeyError: If *table_name* is not part of *project*.
    """
    table: Optional[Table] = project.get_table(table_name)
    if table is None:
        raise KeyError(f"Table '{table_name}' not found in project '{project.name}'.")
    if project.naming_rules is None:
        return _missing_rules_result(project)

    result: ValidationResult = ValidationResult(project.id, project.name)
    result.merge(validate_table(table, project.naming_rules))
    return result


def validate_project(project: Project) -> ValidationResult:
    """
    Validate every table, column and index of *project*.

    Without naming rules the result holds one NAMING_RULE error and no other
    checks are run.
    """
    if project.naming_rules is None:
        logger.warning("Project '%s' has no naming rules; skipping validation.", project.name)
        return _missing_rules_result(project)

    rules: NamingRules = project.naming_rules
    result: ValidationResult = ValidationResult(project.id, project.name)

    if not project.tables:
        result.add_error(
            ErrorType.BUSINESS_RULE,
            ObjectType.PROJECT,
            project.name,
            "Project has no tables.",
            "Add at least one table.",
        )

    groups: Dict[str, List[str]] = defaultdict(list)
    for table in project.tables:
        groups[table.name.lower()].append(table.name)
    for names in groups.values():
        if len(names) > 1:
            result.add_error(
                ErrorType.BUSINESS_RULE,
                ObjectType.TABLE,
                names[0],
                f"Duplicate table names: {', '.join(names)}.",
                "Rename the tables so names are unique (case-insensitive).",
            )

    for table in project.tables:
        result.merge(validate_table(table, rules))

    logger.info("Project '%s': %s", project.name, result.summary())
    return result


def validate_advanced(project: Project) -> ValidationResult:
    """``validate_project`` followed by the advisory pass of ``advanced_findings``."""
    result: ValidationResult = validate_project(project)
    result.merge(advanced_findings(project))
    return result


_NameCheck = Tuple[
    Callable[[str, NamingRules], Optional[str]],
    Callable[[str, NamingRules, Optional[str]], str],
]

_NAME_CHECKS: Dict[ObjectType, _NameCheck] = {
    ObjectType.TABLE: (
        naming.table_name_violation,
        lambda name, rules, _table: naming.suggest_table_name(name, rules),
    ),
    ObjectType.COLUMN: (
        naming.column_name_violation,
        lambda name, rules, _table: naming.suggest_column_name(name, rules),
    ),
    ObjectType.INDEX: (
        naming.index_name_violation,
        lambda name, rules, table: naming.suggest_index_name(table or "Table", name, rules),
    ),
}


def validate_name(
    object_type: Union[ObjectType, str],
    name: str,
    rules: Optional[NamingRules],
    table_name: Optional[str] = None,
) -> Optional[ValidationError]:
    """
    Real-time check of a single name.

    Returns ``None`` when compliant, otherwise one ``ValidationError`` with a
    type-specific suggestion.  Unknown object types are always invalid and
    carry no suggestion.
    """
    try:
        kind: ObjectType = ObjectType(str(_enum_text(object_type)).upper())
    except ValueError:
        kind = None  # type: ignore[assignment]

    if kind not in _NAME_CHECKS:
        return ValidationError(
            "error",
            ErrorType.NAMING_RULE,
            str(_enum_text(object_type)),
            name,
            f"Unknown object type '{_enum_text(object_type)}'.",
        )

    if rules is None:
        return ValidationError(
            "error",
            ErrorType.NAMING_RULE,
            kind,
            name,
            "No naming rules configured.",
        )

    find_violation, suggest = _NAME_CHECKS[kind]
    reason: Optional[str] = find_violation(name, rules)
    if reason is None:
        return None

    return ValidationError(
        "error",
        ErrorType.NAMING_RULE,
        kind,
        name,
        f"{kind.value.capitalize()} name '{name}' violates naming rules: {reason}.",
        suggest(name, rules, table_name),
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_project",
    "validate_table",
    "validate_table_in_project",
    "validate_name",
    "validate_advanced",
    "advanced_findings",
]

logger.debug("schemaforge.validators loaded — %d public symbols.", len(__all__))
