# File: schemaforge/generator.py
"""
SchemaForge - Schema Artifact Generator
========================================
Renders a ``Project`` into text artifacts:

    1. MSSQL DDL script                  (ExportFormat.SQL_SCRIPT)
    2. DDL script with validation notes  (ExportFormat.SQL_WITH_VALIDATION)
    3. Markdown documentation            (ExportFormat.DOCUMENTATION)
    4. HTML documentation                (ExportFormat.HTML_DOCUMENTATION)
    5. JSON schema description           (ExportFormat.JSON_SCHEMA)
    6. CSV table listing                 (ExportFormat.CSV_TABLE_LIST)

It also produces ALTER scripts that migrate one version of a table to
another.

**Contracts:**
    - All string assembly uses the ``List[str]`` + ``"\\n".join()`` pattern.
    - Rendering never mutates the project.
    - Only SQL_WITH_VALIDATION runs the validator; every other format renders
      the schema as-is.
    - An unknown format raises ``ValueError``; otherwise a complete artifact
      is returned.
"""

from __future__ import annotations

import csv
import html
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from schemaforge.datatypes import DataType
from schemaforge.models import (
    Column,
    ExportFormat,
    Index,
    IndexType,
    Project,
    SchemaGenerationOptions,
    Table,
)
from schemaforge.naming import build_constraint_name
from schemaforge.utils import (
    indent_lines,
    qualify_name,
    quote_identifier,
    sql_block_comment,
    sql_line_comment,
    sql_string_literal,
    timed,
)
from schemaforge.validators import ValidationError, ValidationResult, validate_project

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.generator")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_RULE: str = "-- " + "=" * 72
_BATCH_SEPARATOR: str = "GO"
_COMPLETION_MESSAGE: str = "Schema creation completed successfully."

# Range CHECK constraints emitted for narrow types.
_CHECK_EXPRESSIONS: Dict[DataType, str] = {
    DataType.BIT: "{col} IN (0, 1)",
    DataType.TINYINT: "{col} >= 0 AND {col} <= 255",
    DataType.SMALLINT: "{col} >= -32768 AND {col} <= 32767",
}


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationResult:
    """Output of ``SchemaGenerator.generate()``."""

    content: str = ""
    success: bool = True
    format: ExportFormat = ExportFormat.SQL_SCRIPT
    validation: Optional[ValidationResult] = None
    elapsed_seconds: float = 0.0

    @property
    def file_extension(self) -> str:
        return self.format.file_extension


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def coerce_format(fmt: Union[ExportFormat, str]) -> ExportFormat:
    """Accept an ``ExportFormat``, its value (``"sql"``) or its name (``"SQL_SCRIPT"``)."""
    if isinstance(fmt, ExportFormat):
        return fmt
    if isinstance(fmt, str):
        key: str = fmt.strip()
        try:
            return ExportFormat(key.lower())
        except ValueError:
            pass
        if key.upper() in ExportFormat.__members__:
            return ExportFormat[key.upper()]
    raise ValueError(
        f"Unsupported export format {fmt!r}. "
        f"Expected one of: {[f.value for f in ExportFormat]}"
    )


def _coerce_options(
    options: Union[SchemaGenerationOptions, Dict[str, Any], None],
) -> SchemaGenerationOptions:
    if options is None:
        return SchemaGenerationOptions.default_options()
    if isinstance(options, SchemaGenerationOptions):
        return options
    if isinstance(options, dict):
        return SchemaGenerationOptions.model_validate(options)
    raise ValueError(f"Unsupported generation options: {options!r}")


# ---------------------------------------------------------------------------
# Column / index fragments
# ---------------------------------------------------------------------------


def column_definition(
    column: Column,
    include_identity: bool = True,
    include_default: bool = True,
) -> str:
    """``[Name] TYPE NULL|NOT NULL [IDENTITY(s,i)] [DEFAULT x]``, in that order."""
    parts: List[str] = [
        quote_identifier(column.name),
        column.sql_type,
        "NULL" if column.nullable else "NOT NULL",
    ]
    if include_identity and column.identity:
        parts.append(f"IDENTITY({column.identity_seed},{column.identity_increment})")
    if include_default and column.default_value is not None and column.default_value.strip():
        parts.append(f"DEFAULT {column.default_value.strip()}")
    return " ".join(parts)


def _index_column_list(index: Index) -> str:
    return ", ".join(
        f"{quote_identifier(c.column_name)} {c.sort_order.value}" for c in index.columns
    )


def _index_as_constraint(index: Index, options: SchemaGenerationOptions) -> bool:
    """Unique indexes become UNIQUE constraints when constraints are emitted."""
    return index.unique and options.include_constraints


def _primary_key_name(table: Table, project: Project) -> str:
    rules = project.naming_rules
    if rules is not None and rules.enforce_constraint_naming:
        return build_constraint_name(
            table.name,
            [c.name for c in table.primary_key_columns],
            IndexType.CLUSTERED,
            unique=True,
        )
    return f"PK_{table.name}"


def _primary_key_kind(table: Table) -> str:
    """A table holds one clustered index; a declared one takes precedence over the PK."""
    if any(i.is_clustered and i.columns for i in table.indexes):
        return IndexType.NONCLUSTERED.value
    return IndexType.CLUSTERED.value


def _unique_constraint_name(table: Table, index: Index) -> str:
    base: str = index.name[3:] if index.name.upper().startswith("IX_") else index.name
    return f"UQ_{table.name}_{base}"


def _object_id_literal(qualified: str) -> str:
    return "N" + sql_string_literal(qualified)


# ---------------------------------------------------------------------------
# SchemaGenerator
# ---------------------------------------------------------------------------


class SchemaGenerator:
    """
    Stateless artifact renderer.

    ``generated_at`` pins the timestamp written into headers; when omitted
    the current time is used per call.
    """

    def __init__(self, generated_at: Optional[datetime] = None) -> None:
        self._generated_at: Optional[datetime] = generated_at

    # ===================================================================
    # Entry point
    # ===================================================================

    def generate(
        self,
        project: Project,
        fmt: Union[ExportFormat, str] = ExportFormat.SQL_SCRIPT,
        options: Union[SchemaGenerationOptions, Dict[str, Any], None] = None,
    ) -> GenerationResult:
        """
        Render *project* in *fmt*.

        Raises:
            ValueError: On an unknown format or unusable options.
        """
        export_format: ExportFormat = coerce_format(fmt)
        opts: SchemaGenerationOptions = _coerce_options(options)
        validation: Optional[ValidationResult] = None

        with timed(f"generate {export_format.value}") as elapsed:
            if export_format == ExportFormat.SQL_SCRIPT:
                content: str = self.render_sql(project, opts)
            elif export_format == ExportFormat.SQL_WITH_VALIDATION:
                validation = validate_project(project)
                content = self.render_sql(project, opts, validation)
            elif export_format == ExportFormat.DOCUMENTATION:
                content = self.render_markdown(project, opts)
            elif export_format == ExportFormat.HTML_DOCUMENTATION:
                content = self.render_html(project, opts)
            elif export_format == ExportFormat.JSON_SCHEMA:
                content = self.render_json(project)
            else:
                content = self.render_csv(project)

        logger.info(
            "Generated %s for project '%s' (%d chars).",
            export_format.display_name,
            project.name,
            len(content),
        )
        return GenerationResult(
            content=content,
            success=True,
            format=export_format,
            validation=validation,
            elapsed_seconds=elapsed.seconds,
        )

    def _timestamp(self) -> str:
        moment: datetime = self._generated_at or datetime.now()
        return moment.strftime("%Y-%m-%d %H:%M:%S")

    # ===================================================================
    # 1 + 2. SQL script (optionally annotated)
    # ===================================================================

    def render_sql(
        self,
        project: Project,
        options: SchemaGenerationOptions,
        validation: Optional[ValidationResult] = None,
    ) -> str:
        lines: List[str] = []
        schema: Optional[str] = options.schema_name

        if options.include_comments:
            lines.extend(self._sql_header(project))
        if validation is not None:
            lines.extend(self._validation_header(project, validation))

        if options.batch_script:
            lines.extend(["SET NOCOUNT ON;", "SET XACT_ABORT ON;", "BEGIN TRANSACTION;", ""])

        if schema:
            lines.extend(
                [
                    f"IF NOT EXISTS (SELECT * FROM sys.schemas WHERE name = "
                    f"{_object_id_literal(schema)})",
                    "BEGIN",
                    f"    EXEC({sql_string_literal('CREATE SCHEMA ' + quote_identifier(schema))});",
                    "END",
                ]
            )
            self._end_statement(lines, options)

        if options.include_drop_statements:
            if options.include_comments:
                lines.append("-- Drop existing objects")
            for table in reversed(project.tables):
                lines.extend(self._drop_statements(table, options))
            self._end_statement(lines, options)

        for table in project.tables:
            if validation is not None:
                lines.extend(self._table_annotations(table, validation))
            lines.extend(self._create_table(project, table, options))
            self._end_statement(lines, options)

            if options.include_constraints:
                constraints: List[str] = self._constraints(table, options)
                if constraints:
                    lines.extend(constraints)
                    self._end_statement(lines, options)

            if options.include_indexes:
                indexes: List[str] = self._create_indexes(table, options)
                if indexes:
                    lines.extend(indexes)
                    self._end_statement(lines, options)

        if options.batch_script:
            lines.append("COMMIT TRANSACTION;")
        lines.append(f"PRINT {sql_string_literal(_COMPLETION_MESSAGE)};")
        if not options.batch_script:
            lines.append(_BATCH_SEPARATOR)

        return "\n".join(lines) + "\n"

    @staticmethod
    def _end_statement(lines: List[str], options: SchemaGenerationOptions) -> None:
        if not options.batch_script:
            lines.append(_BATCH_SEPARATOR)
        lines.append("")

    def _sql_header(self, project: Project) -> List[str]:
        header: List[str] = [
            _RULE,
            f"-- Project: {sql_line_comment(project.name)}",
            f"-- Generated: {self._timestamp()}",
        ]
        if project.description:
            header.append(f"-- Description: {sql_line_comment(project.description)}")
        header.extend([_RULE, ""])
        return header

    @staticmethod
    def _validation_header(project: Project, validation: ValidationResult) -> List[str]:
        lines: List[str] = [
            "/*",
            f" * Validation report for {sql_block_comment(project.name)}",
            f" * Errors: {validation.error_count}, Warnings: {validation.warning_count}",
        ]
        if validation.can_export:
            lines.append(" * Status: ready for export")
        else:
            lines.append(" * Status: fix the errors below before running this script")

        def _emit(title: str, items: Sequence[ValidationError]) -> None:
            if not items:
                return
            lines.append(" *")
            lines.append(f" * {title}:")
            for item in items:
                lines.append(f" *   - {sql_block_comment(item.object_name)}: "
                             f"{sql_block_comment(item.message)}")
                if item.suggestion:
                    lines.append(f" *     suggestion: {sql_block_comment(item.suggestion)}")

        _emit("Errors", validation.errors)
        _emit("Warnings", validation.warnings)
        lines.extend([" */", ""])
        return lines

    @staticmethod
    def _table_annotations(table: Table, validation: ValidationResult) -> List[str]:
        prefix: str = table.name + "."
        lines: List[str] = []
        for item in validation.all_items:
            if item.object_name != table.name and not item.object_name.startswith(prefix):
                continue
            level: str = "ERROR" if item.is_error else "WARNING"
            text: str = f"-- [{level}] {item.object_name}: {sql_line_comment(item.message)}"
            if item.suggestion:
                text += f" (suggestion: {sql_line_comment(item.suggestion)})"
            lines.append(text)
        return lines

    @staticmethod
    def _drop_statements(table: Table, options: SchemaGenerationOptions) -> List[str]:
        target: str = qualify_name(table.name, options.schema_name)
        lines: List[str] = []
        for index in table.indexes:
            if _index_as_constraint(index, options) or not index.columns:
                continue
            lines.extend(
                [
                    f"IF EXISTS (SELECT * FROM sys.indexes WHERE name = "
                    f"{_object_id_literal(index.name)} AND object_id = "
                    f"OBJECT_ID({_object_id_literal(target)}))",
                    f"    DROP INDEX {quote_identifier(index.name)} ON {target};",
                ]
            )
        lines.extend(
            [
                f"IF OBJECT_ID({_object_id_literal(target)}, N'U') IS NOT NULL",
                f"    DROP TABLE {target};",
            ]
        )
        return lines

    def _create_table(
        self, project: Project, table: Table, options: SchemaGenerationOptions
    ) -> List[str]:
        target: str = qualify_name(table.name, options.schema_name)
        lines: List[str] = []

        if options.include_comments:
            lines.append(f"-- Table: {sql_line_comment(table.name)}")
            if table.description:
                lines.append(f"-- {sql_line_comment(table.description)}")

        if not table.columns:
            lines.append(f"-- Table {target} has no columns and was skipped.")
            return lines

        entries: List[Tuple[str, Optional[str]]] = [
            (column_definition(c), c.description) for c in table.ordered_columns
        ]
        pk_columns: List[Column] = table.primary_key_columns
        if pk_columns:
            pk_list: str = ", ".join(f"{quote_identifier(c.name)} ASC" for c in pk_columns)
            entries.append(
                (
                    f"CONSTRAINT {quote_identifier(_primary_key_name(table, project))} "
                    f"PRIMARY KEY {_primary_key_kind(table)} ({pk_list})",
                    None,
                )
            )

        body: List[str] = [f"CREATE TABLE {target} ("]
        for position, (definition, comment) in enumerate(entries):
            line: str = "    " + definition
            if position < len(entries) - 1:
                line += ","
            if comment and options.include_comments:
                line += f" -- {sql_line_comment(comment)}"
            body.append(line)
        body.append(");")

        if options.include_existence_checks:
            lines.append(
                f"IF NOT EXISTS (SELECT * FROM sys.objects WHERE object_id = "
                f"OBJECT_ID({_object_id_literal(target)}) AND type in (N'U'))"
            )
            lines.append("BEGIN")
            lines.extend(indent_lines(body))
            lines.append("END")
        else:
            lines.extend(body)
        return lines

    @staticmethod
    def _constraints(table: Table, options: SchemaGenerationOptions) -> List[str]:
        target: str = qualify_name(table.name, options.schema_name)
        lines: List[str] = []

        def _add(constraint_name: str, object_type: str, body: str) -> None:
            statement: str = (
                f"ALTER TABLE {target} ADD CONSTRAINT "
                f"{quote_identifier(constraint_name)} {body};"
            )
            if not options.include_existence_checks:
                lines.append(statement)
                return
            qualified: str = qualify_name(constraint_name, options.schema_name)
            lines.append(
                f"IF OBJECT_ID({_object_id_literal(qualified)}, N'{object_type}') IS NULL"
            )
            lines.append("    " + statement)

        for column in table.ordered_columns:
            template: Optional[str] = _CHECK_EXPRESSIONS.get(column.data_type)
            if template is None:
                continue
            expression: str = template.format(col=quote_identifier(column.name))
            _add(f"CK_{table.name}_{column.name}", "C", f"CHECK ({expression})")

        for index in table.indexes:
            if not _index_as_constraint(index, options) or not index.columns:
                continue
            _add(
                _unique_constraint_name(table, index),
                "UQ",
                f"UNIQUE {index.index_type.value} ({_index_column_list(index)})",
            )
        return lines

    @staticmethod
    def _create_index(index: Index, target: str, guarded: bool) -> List[str]:
        unique: str = "UNIQUE " if index.unique else ""
        statement: str = (
            f"CREATE {unique}{index.index_type.value} INDEX {quote_identifier(index.name)} "
            f"ON {target} ({_index_column_list(index)});"
        )
        if not guarded:
            return [statement]
        return [
            f"IF NOT EXISTS (SELECT * FROM sys.indexes WHERE name = "
            f"{_object_id_literal(index.name)} AND object_id = "
            f"OBJECT_ID({_object_id_literal(target)}))",
            "    " + statement,
        ]

    def _create_indexes(self, table: Table, options: SchemaGenerationOptions) -> List[str]:
        target: str = qualify_name(table.name, options.schema_name)
        lines: List[str] = []
        for index in table.indexes:
            if _index_as_constraint(index, options):
                continue
            if not index.columns:
                if options.include_comments:
                    lines.append(f"-- Index {quote_identifier(index.name)} has no columns and was skipped.")
                continue
            lines.extend(self._create_index(index, target, options.include_existence_checks))
        return lines

    # ===================================================================
    # ALTER script
    # ===================================================================

    def generate_alter_table_sql(
        self,
        original: Table,
        modified: Table,
        options: Optional[SchemaGenerationOptions] = None,
    ) -> str:
        """
        Statements migrating *original* to *modified*.

        Columns and indexes are matched by case-insensitive name.  Removed or
        changed indexes are dropped before column changes and re-created
        afterwards.  DEFAULT constraints are looked up by column (CREATE
        TABLE leaves them system-named), dropped before the column is
        altered or dropped, and re-added as ``DF_<table>_<column>``.
        IDENTITY cannot be changed in place; such columns get a comment.
        """
        opts: SchemaGenerationOptions = _coerce_options(options)
        schema: Optional[str] = opts.schema_name
        target: str = qualify_name(modified.name, schema)
        lines: List[str] = []

        if original.name != modified.name:
            lines.append(
                f"EXEC sp_rename {_object_id_literal(qualify_name(original.name, schema))}, "
                f"{_object_id_literal(modified.name)};"
            )

        old_columns: Dict[str, Column] = {c.name.lower(): c for c in original.columns}
        new_columns: Dict[str, Column] = {c.name.lower(): c for c in modified.columns}
        old_indexes: Dict[str, Index] = {i.name.lower(): i for i in original.indexes}
        new_indexes: Dict[str, Index] = {i.name.lower(): i for i in modified.indexes}

        changed_indexes: List[str] = [
            key
            for key, idx in new_indexes.items()
            if key in old_indexes and not _same_index(old_indexes[key], idx)
        ]

        # (old, new) pairs whose type, nullability or DEFAULT differ.
        altered: List[Tuple[Column, Column]] = []
        for column in modified.ordered_columns:
            previous: Optional[Column] = old_columns.get(column.name.lower())
            if previous is None:
                continue
            if not _same_identity(previous, column):
                lines.append(
                    f"-- {quote_identifier(column.name)}: IDENTITY changes cannot be "
                    f"applied with ALTER COLUMN; rebuild {target} to apply them."
                )
                logger.warning(
                    "IDENTITY change on '%s.%s' is not scriptable as ALTER COLUMN.",
                    modified.name,
                    column.name,
                )
            if not _same_shape(previous, column) or not _same_default(previous, column):
                altered.append((previous, column))

        for key, idx in old_indexes.items():
            if key not in new_indexes or key in changed_indexes:
                lines.append(f"DROP INDEX {quote_identifier(idx.name)} ON {target};")

        dropped: List[Column] = [
            c for c in original.ordered_columns if c.name.lower() not in new_columns
        ]
        stale_defaults: List[Column] = [c for c in dropped if _default_text(c)]
        stale_defaults.extend(old for old, _new in altered if _default_text(old))
        if stale_defaults:
            lines.append("DECLARE @default_name SYSNAME, @drop_default NVARCHAR(MAX);")
            for column in stale_defaults:
                lines.extend(_drop_default_lines(target, column.name))

        for column in modified.ordered_columns:
            if column.name.lower() not in old_columns:
                lines.append(f"ALTER TABLE {target} ADD {column_definition(column)};")

        for column in dropped:
            lines.append(
                f"ALTER TABLE {target} DROP COLUMN {quote_identifier(column.name)};"
            )

        for previous, column in altered:
            if not _same_shape(previous, column):
                definition: str = column_definition(
                    column, include_identity=False, include_default=False
                )
                lines.append(f"ALTER TABLE {target} ALTER COLUMN {definition};")

        for _previous, column in altered:
            default: str = _default_text(column)
            if default:
                name: str = quote_identifier(f"DF_{modified.name}_{column.name}")
                lines.append(
                    f"ALTER TABLE {target} ADD CONSTRAINT {name} "
                    f"DEFAULT {default} FOR {quote_identifier(column.name)};"
                )

        for key, idx in new_indexes.items():
            if (key not in old_indexes or key in changed_indexes) and idx.columns:
                lines.extend(self._create_index(idx, target, guarded=False))

        logger.debug(
            "ALTER script for '%s' → '%s': %d statement line(s).",
            original.name,
            modified.name,
            len(lines),
        )
        return "\n".join(lines) + ("\n" if lines else "")

    def generate_statistics_update_script(
        self,
        project: Project,
        options: Optional[SchemaGenerationOptions] = None,
    ) -> str:
        """``UPDATE STATISTICS ... WITH FULLSCAN`` for every table with columns."""
        opts: SchemaGenerationOptions = _coerce_options(options)
        lines: List[str] = []
        if opts.include_comments:
            lines.append(f"-- Statistics update for {sql_line_comment(project.name)}")
        for table in project.tables:
            if table.columns:
                target: str = qualify_name(table.name, opts.schema_name)
                lines.append(f"UPDATE STATISTICS {target} WITH FULLSCAN;")
        return "\n".join(lines) + "\n"

    # ===================================================================
    # 3. Markdown documentation
    # ===================================================================

    def render_markdown(self, project: Project, options: SchemaGenerationOptions) -> str:
        lines: List[str] = [f"# {project.name}", ""]
        if project.description:
            lines.extend([project.description, ""])
        lines.extend(
            [
                f"- Generated: {self._timestamp()}",
                f"- Tables: {len(project.tables)}",
                "",
                "## Tables",
                "",
                "| # | Table | Description | Columns | Indexes |",
                "|---|-------|-------------|---------|---------|",
            ]
        )
        for number, table in enumerate(project.tables, start=1):
            lines.append(
                f"| {number} | {_md(table.name)} | {_md(table.description)} | "
                f"{len(table.columns)} | {len(table.indexes)} |"
            )
        lines.append("")

        for table in project.tables:
            lines.extend([f"## {table.name}", ""])
            if table.description:
                lines.extend([table.description, ""])

            lines.extend(
                [
                    "### Columns",
                    "",
                    "| # | Name | Type | Nullable | PK | Identity | Default | Description |",
                    "|---|------|------|----------|----|----------|---------|-------------|",
                ]
            )
            for column in table.ordered_columns:
                lines.append(
                    f"| {column.order_index} | {_md(column.name)} | {column.sql_type} | "
                    f"{_yes_no(column.nullable)} | {_yes_no(column.primary_key)} | "
                    f"{_identity_text(column)} | {_md(column.default_value)} | "
                    f"{_md(column.description)} |"
                )
            lines.append("")

            if table.indexes:
                lines.extend(
                    [
                        "### Indexes",
                        "",
                        "| Name | Type | Unique | Columns |",
                        "|------|------|--------|---------|",
                    ]
                )
                for index in table.indexes:
                    lines.append(
                        f"| {_md(index.name)} | {index.index_type.value} | "
                        f"{_yes_no(index.unique)} | {_md(_index_column_list(index))} |"
                    )
                lines.append("")

        lines.extend(["## SQL Script", "", "```sql", self.render_sql(project, options).rstrip(), "```", ""])
        return "\n".join(lines)

    # ===================================================================
    # 4. HTML documentation
    # ===================================================================

    def render_html(self, project: Project, options: SchemaGenerationOptions) -> str:
        esc = html.escape
        lines: List[str] = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{esc(project.name)} - Schema Documentation</title>",
            "<style>",
            "body { font-family: sans-serif; margin: 2em; }",
            "table { border-collapse: collapse; margin-bottom: 1.5em; }",
            "th, td { border: 1px solid #ccc; padding: 4px 8px; text-align: left; }",
            "th { background: #f0f0f0; }",
            "pre { background: #f7f7f7; padding: 1em; overflow-x: auto; }",
            "</style>",
            "</head>",
            "<body>",
            f"<h1>{esc(project.name)}</h1>",
        ]
        if project.description:
            lines.append(f"<p>{esc(project.description)}</p>")
        lines.append(
            f"<p>Generated: {esc(self._timestamp())} &middot; Tables: {len(project.tables)}</p>"
        )

        lines.append("<h2>Tables</h2>")
        lines.append(_html_table(
            ["#", "Table", "Description", "Columns", "Indexes"],
            [
                [str(n), t.name, t.description or "", str(len(t.columns)), str(len(t.indexes))]
                for n, t in enumerate(project.tables, start=1)
            ],
        ))

        for table in project.tables:
            lines.append(f'<h2 id="{esc(table.name, quote=True)}">{esc(table.name)}</h2>')
            if table.description:
                lines.append(f"<p>{esc(table.description)}</p>")
            lines.append("<h3>Columns</h3>")
            lines.append(_html_table(
                ["#", "Name", "Type", "Nullable", "PK", "Identity", "Default", "Description"],
                [
                    [
                        str(c.order_index),
                        c.name,
                        c.sql_type,
                        _yes_no(c.nullable),
                        _yes_no(c.primary_key),
                        _identity_text(c),
                        c.default_value or "",
                        c.description or "",
                    ]
                    for c in table.ordered_columns
                ],
            ))
            if table.indexes:
                lines.append("<h3>Indexes</h3>")
                lines.append(_html_table(
                    ["Name", "Type", "Unique", "Columns"],
                    [
                        [i.name, i.index_type.value, _yes_no(i.unique), _index_column_list(i)]
                        for i in table.indexes
                    ],
                ))

        lines.append("<h2>SQL Script</h2>")
        lines.append(f"<pre><code>{esc(self.render_sql(project, options))}</code></pre>")
        lines.extend(["</body>", "</html>", ""])
        return "\n".join(lines)

    # ===================================================================
    # 5. JSON schema description
    # ===================================================================

    def render_json(self, project: Project) -> str:
        document: Dict[str, Any] = {
            "project": {
                "id": project.id,
                "name": project.name,
                "description": project.description,
                "generated_at": self._timestamp(),
                "naming_rules": (
                    project.naming_rules.model_dump(mode="json", exclude_none=True)
                    if project.naming_rules is not None
                    else None
                ),
            },
            "tables": [_table_to_dict(t) for t in project.tables],
        }
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    # ===================================================================
    # 6. CSV table listing
    # ===================================================================

    @staticmethod
    def render_csv(project: Project) -> str:
        buffer: io.StringIO = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            ["table_name", "description", "column_count", "index_count", "primary_key_columns"]
        )
        for table in project.tables:
            writer.writerow(
                [
                    table.name,
                    table.description or "",
                    len(table.columns),
                    len(table.indexes),
                    "; ".join(c.name for c in table.primary_key_columns),
                ]
            )
        return buffer.getvalue()


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _same_shape(a: Column, b: Column) -> bool:
    """Everything ``ALTER COLUMN`` can change: type parameters and nullability."""
    return (
        a.data_type == b.data_type
        and a.max_length == b.max_length
        and a.precision == b.precision
        and a.scale == b.scale
        and a.nullable == b.nullable
    )


def _default_text(column: Column) -> str:
    return (column.default_value or "").strip()


def _same_default(a: Column, b: Column) -> bool:
    return _default_text(a) == _default_text(b)


def _same_identity(a: Column, b: Column) -> bool:
    if not a.identity and not b.identity:
        return True
    return (a.identity, a.identity_seed, a.identity_increment) == (
        b.identity,
        b.identity_seed,
        b.identity_increment,
    )


def _drop_default_lines(target: str, column_name: str) -> List[str]:
    """Drop whatever DEFAULT constraint is bound to *column_name*, by lookup."""
    return [
        "SET @default_name = NULL;",
        "SELECT @default_name = dc.name FROM sys.default_constraints dc "
        "INNER JOIN sys.columns c ON c.object_id = dc.parent_object_id "
        "AND c.column_id = dc.parent_column_id "
        f"WHERE dc.parent_object_id = OBJECT_ID({_object_id_literal(target)}) "
        f"AND c.name = {_object_id_literal(column_name)};",
        "IF @default_name IS NOT NULL",
        "BEGIN",
        f"    SET @drop_default = N{sql_string_literal(f'ALTER TABLE {target} DROP CONSTRAINT ')} "
        "+ QUOTENAME(@default_name) + N';';",
        "    EXEC sp_executesql @drop_default;",
        "END",
    ]


def _same_index(a: Index, b: Index) -> bool:
    return (
        a.index_type == b.index_type
        and a.unique == b.unique
        and [(c.column_name.lower(), c.sort_order) for c in a.columns]
        == [(c.column_name.lower(), c.sort_order) for c in b.columns]
    )


def _yes_no(flag: Optional[bool]) -> str:
    return "Y" if flag else "N"


def _identity_text(column: Column) -> str:
    if not column.identity:
        return ""
    return f"({column.identity_seed},{column.identity_increment})"


def _md(value: Optional[str]) -> str:
    if not value:
        return ""
    return " ".join(value.split()).replace("|", "\\|")


def _html_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    parts: List[str] = ["<table>", "<tr>"]
    parts.extend(f"<th>{html.escape(h)}</th>" for h in headers)
    parts.append("</tr>")
    for row in rows:
        parts.append("<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>")
    parts.append("</table>")
    return "\n".join(parts)


def _table_to_dict(table: Table) -> Dict[str, Any]:
    return {
        "name": table.name,
        "description": table.description,
        "columns": [
            {
                "name": c.name,
                "data_type": c.data_type.value,
                "sql_type": c.sql_type,
                "max_length": c.max_length,
                "precision": c.precision,
                "scale": c.scale,
                "nullable": c.nullable,
                "primary_key": c.primary_key,
                "identity": c.identity,
                "identity_seed": c.identity_seed,
                "identity_increment": c.identity_increment,
                "default_value": c.default_value,
                "order_index": c.order_index,
                "description": c.description,
            }
            for c in table.ordered_columns
        ],
        "indexes": [
            {
                "name": i.name,
                "index_type": i.index_type.value,
                "unique": i.unique,
                "composite": i.is_composite,
                "columns": [
                    {"column_name": c.column_name, "sort_order": c.sort_order.value}
                    for c in i.columns
                ],
            }
            for i in table.indexes
        ],
    }


# ---------------------------------------------------------------------------
# Functional entry points
# ---------------------------------------------------------------------------


def generate_schema(
    project: Project,
    fmt: Union[ExportFormat, str] = ExportFormat.SQL_SCRIPT,
    options: Union[SchemaGenerationOptions, Dict[str, Any], None] = None,
) -> GenerationResult:
    """Shortcut for ``SchemaGenerator().generate(...)``."""
    return SchemaGenerator().generate(project, fmt, options)


def generate_alter_table_sql(
    original: Table,
    modified: Table,
    options: Optional[SchemaGenerationOptions] = None,
) -> str:
    return SchemaGenerator().generate_alter_table_sql(original, modified, options)


def generate_statistics_update_script(
    project: Project,
    options: Optional[SchemaGenerationOptions] = None,
) -> str:
    return SchemaGenerator().generate_statistics_update_script(project, options)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationResult",
    "SchemaGenerator",
    "coerce_format",
    "column_definition",
    "generate_schema",
    "generate_alter_table_sql",
    "generate_statistics_update_script",
]

logger.debug("schemaforge.generator loaded — %d public symbols.", len(__all__))
