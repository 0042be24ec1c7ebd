# File: schemaforge/models.py
"""
SchemaForge - Core Data Models
===============================
Pydantic V2 models for the in-memory schema graph and its configuration.
These models are the single source of truth for the whole pipeline:
Project Loading → Validation → Generation → Export.

Aggregate layout::

    Project
     ├── NamingRules           (optional, per-project configuration)
     └── Table*
          ├── Column*          (ordered by ``order_index``)
          └── Index*
               └── IndexColumn*  (column name + sort order)

Structural invariants (dangling index columns, duplicate order indexes, a
nullable primary key) are enforced here and raise on construction or
assignment.  Data-quality findings (naming, type parameters, business rules)
are *not* raised here; they are reported by ``schemaforge.validators``.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)

from schemaforge.datatypes import DataType, to_sql_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.models")

# ---------------------------------------------------------------------------
# Enums — fixed sets used across the entire project
# ---------------------------------------------------------------------------


class CaseStyle(str, Enum):
    """Naming case style a schema object name must conform to."""

    UPPER = "UPPER"
    LOWER = "LOWER"
    PASCAL = "PASCAL"
    SNAKE = "SNAKE"


class IndexType(str, Enum):
    """MSSQL index kinds."""

    CLUSTERED = "CLUSTERED"
    NONCLUSTERED = "NONCLUSTERED"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class ObjectType(str, Enum):
    """Kinds of schema objects a validation finding can point at."""

    PROJECT = "PROJECT"
    TABLE = "TABLE"
    COLUMN = "COLUMN"
    INDEX = "INDEX"


class ErrorType(str, Enum):
    """Classification of a validation finding."""

    NAMING_RULE = "NAMING_RULE"
    BUSINESS_RULE = "BUSINESS_RULE"
    DATA_TYPE = "DATA_TYPE"
    SQL_SERVER_NAMING = "SQL_SERVER_NAMING"
    SQL_SERVER_AUDIT = "SQL_SERVER_AUDIT"
    SQL_SERVER_DESCRIPTION = "SQL_SERVER_DESCRIPTION"
    # Advisory-only kinds from ``validate_advanced``
    PERFORMANCE = "PERFORMANCE"
    BEST_PRACTICE = "BEST_PRACTICE"
    SECURITY = "SECURITY"


class ExportFormat(str, Enum):
    """Artifact formats produced by ``SchemaGenerator``."""

    SQL_SCRIPT = "sql"
    SQL_WITH_VALIDATION = "sql_validated"
    DOCUMENTATION = "markdown"
    HTML_DOCUMENTATION = "html"
    JSON_SCHEMA = "json"
    CSV_TABLE_LIST = "csv"

    @property
    def display_name(self) -> str:
        return _FORMAT_DISPLAY_NAMES[self]

    @property
    def file_extension(self) -> str:
        return _FORMAT_EXTENSIONS[self]


_FORMAT_DISPLAY_NAMES: Dict[ExportFormat, str] = {
    ExportFormat.SQL_SCRIPT: "SQL Script",
    ExportFormat.SQL_WITH_VALIDATION: "SQL Script with Validation",
    ExportFormat.DOCUMENTATION: "Markdown Documentation",
    ExportFormat.HTML_DOCUMENTATION: "HTML Documentation",
    ExportFormat.JSON_SCHEMA: "JSON Schema",
    ExportFormat.CSV_TABLE_LIST: "CSV Table List",
}

_FORMAT_EXTENSIONS: Dict[ExportFormat, str] = {
    ExportFormat.SQL_SCRIPT: ".sql",
    ExportFormat.SQL_WITH_VALIDATION: ".sql",
    ExportFormat.DOCUMENTATION: ".md",
    ExportFormat.HTML_DOCUMENTATION: ".html",
    ExportFormat.JSON_SCHEMA: ".json",
    ExportFormat.CSV_TABLE_LIST: ".csv",
}


# ---------------------------------------------------------------------------
# Base config shared by every model
# ---------------------------------------------------------------------------

_SHARED_CONFIG = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """
    A single table column.

    ``primary_key`` is declared before ``nullable`` so the nullability
    validator can see it: a primary key defaults to NOT NULL and can never
    be made nullable, either at construction or by assignment.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., description="Column name.")
    description: Optional[str] = Field(default=None, description="Column comment.")
    data_type: DataType = Field(..., description="MSSQL data type.")
    max_length: Optional[int] = Field(
        default=None, description="Declared length (-1 means MAX)."
    )
    precision: Optional[int] = Field(default=None, description="Numeric/time precision.")
    scale: Optional[int] = Field(default=None, description="Numeric scale.")
    primary_key: bool = Field(default=False, description="Part of the primary key.")
    nullable: Optional[bool] = Field(
        default=None,
        validate_default=True,
        description="NULL allowed (defaults to True unless primary key).",
    )
    identity: bool = Field(default=False, description="IDENTITY column.")
    identity_seed: int = Field(default=1, description="IDENTITY seed.")
    identity_increment: int = Field(default=1, description="IDENTITY increment.")
    default_value: Optional[str] = Field(
        default=None, description="DEFAULT literal, as SQL text."
    )
    order_index: Optional[int] = Field(
        default=None, ge=0, description="0-based position within the table."
    )

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalise_data_type(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, DataType):
            return v.strip().upper()
        return v

    @field_validator("nullable")
    @classmethod
    def _primary_key_not_nullable(
        cls, v: Optional[bool], info: ValidationInfo
    ) -> bool:
        is_pk: bool = bool(info.data.get("primary_key", False))
        if v is None:
            return not is_pk
        if v and is_pk:
            raise ValueError(
                f"Primary key column '{info.data.get('name')}' cannot be nullable."
            )
        return v

    @field_validator("default_value", mode="before")
    @classmethod
    def _stringify_default(cls, v: Any) -> Any:
        # YAML hands us native scalars for literals like 0 / 1.5 / true.
        if isinstance(v, bool):
            return "1" if v else "0"
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("primary_key")
    @classmethod
    def _nullable_column_not_primary_key(cls, v: bool, info: ValidationInfo) -> bool:
        # ``nullable`` is only present here on assignment; construction is
        # covered by the nullable validator, which runs afterwards.
        if v and info.data.get("nullable"):
            raise ValueError(
                f"Nullable column '{info.data.get('name')}' cannot be a primary key; "
                "set nullable=False first."
            )
        return v

    # -- Derived helpers ----------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def sql_type(self) -> str:
        """Rendered SQL type, e.g. ``NVARCHAR(100)`` or ``DECIMAL(18,2)``."""
        return to_sql_string(self.data_type, self.max_length, self.precision, self.scale)

    def set_primary_key(self, flag: bool) -> None:
        """Toggle the primary-key flag; promoting a column forces NOT NULL."""
        if flag:
            self.nullable = False
        self.primary_key = flag

    def __repr__(self) -> str:
        parts: List[str] = [self.name, self.sql_type]
        if self.primary_key:
            parts.append("PK")
        if self.identity:
            parts.append("IDENTITY")
        if not self.nullable:
            parts.append("NOT NULL")
        return f"<Column {' '.join(parts)}>"


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class IndexColumn(BaseModel):
    """One column entry of an index."""

    model_config = _SHARED_CONFIG

    column_name: str = Field(..., min_length=1, description="Referenced column.")
    sort_order: SortOrder = Field(default=SortOrder.ASC, description="ASC | DESC.")


class Index(BaseModel):
    """Table index (CLUSTERED / NONCLUSTERED, optionally UNIQUE)."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., description="Index name.")
    index_type: IndexType = Field(
        default=IndexType.NONCLUSTERED, description="CLUSTERED | NONCLUSTERED."
    )
    unique: bool = Field(default=False, description="UNIQUE index.")
    columns: List[IndexColumn] = Field(
        default_factory=list, description="Ordered column entries."
    )

    @field_validator("index_type", mode="before")
    @classmethod
    def _normalise_index_type(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, IndexType):
            return v.strip().upper()
        return v

    @field_validator("columns", mode="before")
    @classmethod
    def _expand_shorthand(cls, v: Any) -> Any:
        """Accept ``"Email"`` / ``"CreatedAt DESC"`` as shorthand entries."""
        if not isinstance(v, list):
            return v
        expanded: List[Any] = []
        for item in v:
            if isinstance(item, str):
                parts: List[str] = item.split()
                entry: Dict[str, Any] = {"column_name": parts[0] if parts else item}
                if len(parts) > 1:
                    entry["sort_order"] = parts[1].upper()
                expanded.append(entry)
            else:
                expanded.append(item)
        return expanded

    @computed_field  # type: ignore[misc]
    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    @property
    def is_clustered(self) -> bool:
        return self.index_type == IndexType.CLUSTERED

    @property
    def column_names(self) -> List[str]:
        return [c.column_name for c in self.columns]

    def __repr__(self) -> str:
        unique: str = "UNIQUE " if self.unique else ""
        return f"<Index {self.name} {unique}{self.index_type.value} {self.column_names}>"


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


def _check_index_references(
    table_name: Optional[str], columns: List[Column], indexes: List[Index]
) -> None:
    col_set: Set[str] = {c.name for c in columns}
    for idx in indexes:
        missing: List[str] = [c for c in idx.column_names if c not in col_set]
        if missing:
            raise ValueError(
                f"Index '{idx.name}' on table '{table_name}' references "
                f"non-existent columns: {missing}"
            )


class Table(BaseModel):
    """
    A table: ordered columns plus indexes.

    Columns without an explicit ``order_index`` are numbered after the
    highest one already present (0-based).
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., description="Table name.")
    description: Optional[str] = Field(default=None, description="Table comment.")
    position_x: float = Field(default=0.0, description="Canvas X (presentation only).")
    position_y: float = Field(default=0.0, description="Canvas Y (presentation only).")
    columns: List[Column] = Field(default_factory=list, description="Columns.")
    indexes: List[Index] = Field(default_factory=list, description="Indexes.")

    # Field validators (not model validators) so a rejected assignment never
    # reaches the model.  ``indexes`` is only in ``info.data`` on assignment.

    @field_validator("columns")
    @classmethod
    def _number_columns(cls, v: List[Column], info: ValidationInfo) -> List[Column]:
        table_name: Any = info.data.get("name")
        seen: Set[int] = set()
        for column in v:
            if column.order_index is None:
                continue
            if column.order_index in seen:
                raise ValueError(
                    f"Duplicate order_index {column.order_index} in table '{table_name}'."
                )
            seen.add(column.order_index)

        _check_index_references(table_name, v, info.data.get("indexes") or [])

        next_index: int = max(seen) + 1 if seen else 0
        for column in v:
            if column.order_index is None:
                column.order_index = next_index
                next_index += 1
        return v

    @field_validator("indexes")
    @classmethod
    def _index_columns_exist(cls, v: List[Index], info: ValidationInfo) -> List[Index]:
        # ``columns`` is missing from info.data when it failed validation itself.
        if "columns" in info.data:
            _check_index_references(info.data.get("name"), info.data["columns"], v)
        return v

    # -- Computed helpers ---------------------------------------------------

    @property
    def next_order_index(self) -> int:
        """Order index the next appended column receives (0 for an empty table)."""
        used: List[int] = [c.order_index for c in self.columns if c.order_index is not None]
        return max(used) + 1 if used else 0

    @property
    def ordered_columns(self) -> List[Column]:
        return sorted(
            self.columns,
            key=lambda c: c.order_index if c.order_index is not None else 0,
        )

    @property
    def primary_key_columns(self) -> List[Column]:
        return [c for c in self.ordered_columns if c.primary_key]

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.ordered_columns]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def get_index(self, name: str) -> Optional[Index]:
        for idx in self.indexes:
            if idx.name == name:
                return idx
        return None

    # -- Mutation -----------------------------------------------------------

    def add_column(self, column: Column) -> Column:
        """Append *column*, assigning the next order index when unset."""
        if column.order_index is None:
            column.order_index = self.next_order_index
        elif any(c.order_index == column.order_index for c in self.columns):
            raise ValueError(
                f"Duplicate order_index {column.order_index} in table '{self.name}'."
            )
        self.columns.append(column)
        logger.debug("Added column %r to table '%s'.", column, self.name)
        return column

    def remove_column(self, name: str) -> Column:
        """Remove and return the column *name*; refuses while an index uses it."""
        column: Optional[Column] = self.get_column(name)
        if column is None:
            raise KeyError(f"Column '{name}' not found in table '{self.name}'.")
        users: List[str] = [i.name for i in self.indexes if name in i.column_names]
        if users:
            raise ValueError(
                f"Column '{name}' is still referenced by index(es): {users}"
            )
        self.columns.remove(column)
        return column

    def __repr__(self) -> str:
        return (
            f"<Table {self.name} "
            f"({len(self.columns)} cols, {len(self.indexes)} indexes)>"
        )


# ---------------------------------------------------------------------------
# Naming rules
# ---------------------------------------------------------------------------


class NamingRules(BaseModel):
    """Per-project naming configuration plus MSSQL convention toggles."""

    model_config = _SHARED_CONFIG

    table_prefix: Optional[str] = Field(default=None, description="Required table prefix.")
    table_suffix: Optional[str] = Field(default=None, description="Required table suffix.")
    table_pattern: Optional[str] = Field(default=None, description="Table name regex.")
    column_pattern: Optional[str] = Field(default=None, description="Column name regex.")
    index_pattern: Optional[str] = Field(default=None, description="Index name regex.")
    enforce_case: Optional[CaseStyle] = Field(
        default=CaseStyle.PASCAL, description="Case style (None disables the check)."
    )

    # MSSQL conventions
    enforce_upper_case: bool = Field(default=False, description="Names must be uppercase.")
    recommend_audit_columns: bool = Field(
        default=False, description="Recommend REG_ID/REG_DT/CHG_ID/CHG_DT."
    )
    require_description: bool = Field(
        default=False, description="Tables should carry a description."
    )
    enforce_table_column_naming: bool = Field(
        default=False, description="Flag bare PK names such as ID / SEQ_NO."
    )
    enforce_constraint_naming: bool = Field(
        default=False, description="Index names follow PK__/CIDX__/IDX__ prefixes."
    )
    abbreviation_rules: Optional[str] = Field(
        default=None, description="Free-text abbreviation guidance."
    )

    @field_validator("enforce_case", mode="before")
    @classmethod
    def _normalise_case(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, CaseStyle):
            return v.strip().upper()
        return v

    @field_validator("table_pattern", "column_pattern", "index_pattern")
    @classmethod
    def _pattern_compiles(cls, v: Optional[str]) -> Optional[str]:
        if v:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"Invalid regular expression {v!r}: {exc}") from exc
        return v or None


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class Project(BaseModel):
    """Root aggregate handed to the validator and the generator."""

    model_config = _SHARED_CONFIG

    id: Optional[int] = Field(default=None, description="Caller-side identifier.")
    name: str = Field(..., min_length=1, description="Project name.")
    description: Optional[str] = Field(default=None, description="Project description.")
    naming_rules: Optional[NamingRules] = Field(
        default=None, description="Naming configuration (validation needs one)."
    )
    tables: List[Table] = Field(default_factory=list, description="Tables, in order.")

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def __repr__(self) -> str:
        return f"<Project {self.name} ({len(self.tables)} tables)>"


# ---------------------------------------------------------------------------
# Generation options
# ---------------------------------------------------------------------------


class SchemaGenerationOptions(BaseModel):
    """Knobs controlling SQL script output."""

    model_config = _SHARED_CONFIG

    include_drop_statements: bool = Field(default=False, description="Emit DROP statements.")
    include_existence_checks: bool = Field(
        default=True, description="Guard CREATE TABLE with IF NOT EXISTS."
    )
    include_comments: bool = Field(default=True, description="Emit explanatory comments.")
    include_constraints: bool = Field(default=True, description="Emit CHECK/UNIQUE constraints.")
    include_indexes: bool = Field(default=True, description="Emit CREATE INDEX statements.")
    batch_script: bool = Field(
        default=False,
        description="Single transactional batch instead of GO-separated statements.",
    )
    schema_name: Optional[str] = Field(
        default=None, description="Target schema qualifier (e.g. 'dbo')."
    )

    @field_validator("schema_name")
    @classmethod
    def _blank_schema_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def default_options(cls) -> "SchemaGenerationOptions":
        return cls()

    @classmethod
    def production_options(cls) -> "SchemaGenerationOptions":
        """Existence checks on, no drops, single transactional batch."""
        return cls(
            include_existence_checks=True,
            include_drop_statements=False,
            batch_script=True,
        )

    @classmethod
    def development_options(cls) -> "SchemaGenerationOptions":
        """Drop-and-recreate script without existence checks."""
        return cls(
            include_drop_statements=True,
            include_existence_checks=False,
            include_comments=True,
        )

    @classmethod
    def from_preset(cls, preset: str, **overrides: Any) -> "SchemaGenerationOptions":
        """Build options from a preset name, then apply field overrides."""
        factories: Dict[str, Any] = {
            "default": cls.default_options,
            "production": cls.production_options,
            "development": cls.development_options,
        }
        key: str = preset.strip().lower()
        if key not in factories:
            raise ValueError(
                f"Unknown options preset '{preset}'. Expected one of: {sorted(factories)}"
            )
        base: SchemaGenerationOptions = factories[key]()
        if not overrides:
            return base
        return cls.model_validate({**base.model_dump(), **overrides})


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CaseStyle",
    "Column",
    "DataType",
    "ErrorType",
    "ExportFormat",
    "Index",
    "IndexColumn",
    "IndexType",
    "NamingRules",
    "ObjectType",
    "Project",
    "SchemaGenerationOptions",
    "SortOrder",
    "Table",
]

logger.debug("schemaforge.models loaded — %d public symbols.", len(__all__))
