# File: schemaforge/__init__.py
"""
SchemaForge — MSSQL Schema Modeling & DDL Generator
=====================================================

Models a relational database project (tables, columns, indexes, naming
rules), validates it against configurable naming rules and SQL Server
data-type constraints, and renders T-SQL scripts or documentation.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌─────────────────┐
    │  CLI / Entry │────▶│ SchemaExporter │────▶│ SchemaGenerator │
    │   (cli.py)   │     │ (exporters.py) │     │ (generator.py)  │
    └──────────────┘     └────────────────┘     └────────┬────────┘
                                                         │
                    ┌────────────────┬───────────────────┤
                    ▼                ▼                   ▼
             ┌────────────┐   ┌──────────┐   ┌────────────────────┐
             │ validators │──▶│  naming  │   │  type_validator    │
             │   (.py)    │   │  (.py)   │   │  + datatypes (.py) │
             └────────────┘   └──────────┘   └────────────────────┘

Usage::

    # As a library
    from schemaforge import load_project, validate_project, generate_schema
    project, options = load_project("shop.yaml")
    print(validate_project(project).format_report())
    print(generate_schema(project, "sql", options).content)

    # From the command line
    python -m schemaforge --schema shop.yaml --output ./out -f sql -f markdown

Public API:
    - SchemaGenerator            — Renders SQL / Markdown / HTML / JSON / CSV
    - SchemaExporter             — Writes artifacts plus a manifest
    - validate_project           — Full project validation
    - validate_column_data_type  — Per-column data-type rules
    - load_project               — JSON/YAML project loader
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "SchemaForge Team"
__license__: str = "MIT"

from schemaforge.datatypes import (
    DataTypeTraits,
    TypeFamily,
    get_traits,
    to_sql_string,
)
from schemaforge.models import (
    CaseStyle,
    Column,
    DataType,
    ErrorType,
    ExportFormat,
    Index,
    IndexColumn,
    IndexType,
    NamingRules,
    ObjectType,
    Project,
    SchemaGenerationOptions,
    SortOrder,
    Table,
)
from schemaforge.type_validator import (
    ValidationOutcome,
    is_compatible_type,
    validate_column_data_type,
)
from schemaforge.naming import (
    apply_case,
    suggest_column_name,
    suggest_index_name,
    suggest_table_name,
    validate_column_name,
    validate_index_name,
    validate_table_name,
)
from schemaforge.validators import (
    ValidationError,
    ValidationResult,
    advanced_findings,
    validate_advanced,
    validate_name,
    validate_project,
    validate_table,
)
from schemaforge.generator import (
    GenerationResult,
    SchemaGenerator,
    generate_alter_table_sql,
    generate_statistics_update_script,
    generate_schema,
)
from schemaforge.exporters import ExportManifest, ExportResult, SchemaExporter
from schemaforge.loader import load_project, parse_raw_project

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Data types
    "DataType",
    "DataTypeTraits",
    "TypeFamily",
    "get_traits",
    "to_sql_string",
    # Models
    "CaseStyle",
    "Column",
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
    # Type validation
    "ValidationOutcome",
    "validate_column_data_type",
    "is_compatible_type",
    # Naming
    "apply_case",
    "validate_table_name",
    "validate_column_name",
    "validate_index_name",
    "suggest_table_name",
    "suggest_column_name",
    "suggest_index_name",
    # Schema validation
    "ValidationError",
    "ValidationResult",
    "validate_project",
    "validate_table",
    "validate_name",
    "validate_advanced",
    "advanced_findings",
    # Generation
    "GenerationResult",
    "SchemaGenerator",
    "generate_schema",
    "generate_alter_table_sql",
    "generate_statistics_update_script",
    # Export / loading
    "SchemaExporter",
    "ExportManifest",
    "ExportResult",
    "load_project",
    "parse_raw_project",
]
