# File: schemaforge/cli.py
"""
SchemaForge - Command-Line Interface
=====================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Validate only
    python -m schemaforge --schema shop.yaml --validate-only

    # Print the SQL script to stdout
    python -m schemaforge -s shop.yaml

    # Export several artifacts with the production preset
    python -m schemaforge -s shop.yaml -o ./out -f sql -f markdown --preset production

    # Check a single name against the project's naming rules
    python -m schemaforge -s shop.yaml --check-name COLUMN customerName

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

_FORMAT_CHOICES: List[str] = ["sql", "sql_validated", "markdown", "html", "json", "csv"]


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root schemaforge logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("schemaforge")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemaforge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemaforge",
        description=(
            "SchemaForge — MSSQL schema validator and DDL/documentation generator.\n\n"
            "Reads a project definition (JSON/YAML), validates naming and data-type "
            "rules, and renders SQL scripts or documentation."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s shop.yaml --validate-only\n"
            "  %(prog)s -s shop.yaml -o ./out -f sql -f markdown\n"
            "  %(prog)s -s shop.yaml --preset development\n"
            "  %(prog)s -s shop.yaml --check-name TABLE orderItems\n"
        ),
    )

    parser.add_argument("--version", action="version", version=f"SchemaForge v{__version__}")

    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the project definition file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory. When omitted the first format is printed to stdout.",
    )
    parser.add_argument(
        "-f", "--format",
        dest="formats",
        action="append",
        choices=_FORMAT_CHOICES,
        default=None,
        help="Artifact format (repeatable, default: sql).",
    )

    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the project; generate nothing.",
    )
    mode_group.add_argument(
        "--advanced",
        action="store_true",
        default=False,
        help="With --validate-only, add performance / best-practice / security advisories.",
    )
    mode_group.add_argument(
        "--check-name",
        nargs=2,
        metavar=("KIND", "NAME"),
        default=None,
        help="Check one name (KIND = TABLE | COLUMN | INDEX) against the naming rules.",
    )
    mode_group.add_argument(
        "--table",
        type=str,
        default=None,
        metavar="TABLE",
        help="Table name used for INDEX suggestions with --check-name.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render artifacts but don't write files to disk.",
    )

    options_group = parser.add_argument_group("generation options")
    options_group.add_argument(
        "--preset",
        choices=["default", "production", "development"],
        default=None,
        help="Replace the file's options with a named preset.",
    )
    options_group.add_argument(
        "--schema-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Target schema qualifier (e.g. 'dbo').",
    )
    options_group.add_argument(
        "--drops",
        dest="include_drop_statements",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Emit DROP statements.",
    )
    options_group.add_argument(
        "--existence-checks",
        dest="include_existence_checks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Guard CREATE statements with IF NOT EXISTS.",
    )
    options_group.add_argument(
        "--batch",
        dest="batch_script",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Emit one transactional batch instead of GO-separated statements.",
    )

    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Refuse to export when validation reports errors.",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Option override builder
# ---------------------------------------------------------------------------


def _build_options(args: argparse.Namespace, file_options: Any) -> Any:
    """Merge preset / CLI overrides into the options loaded from the file."""
    from schemaforge.models import SchemaGenerationOptions

    base: SchemaGenerationOptions = (
        SchemaGenerationOptions.from_preset(args.preset) if args.preset else file_options
    )

    overrides: Dict[str, object] = {}
    if args.schema_name is not None:
        overrides["schema_name"] = args.schema_name
    for key in ("include_drop_statements", "include_existence_checks", "batch_script"):
        value: Optional[bool] = getattr(args, key)
        if value is not None:
            overrides[key] = value

    if not overrides:
        return base
    return SchemaGenerationOptions.model_validate({**base.model_dump(), **overrides})


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


def _print_validation_report(schema_path: Path, project: Any, result: Any) -> None:
    print(f"\n{'='*50}")
    print("  Schema Validation Report")
    print(f"{'='*50}")
    print(f"  File:     {schema_path.name}")
    print(f"  Project:  {project.name}")
    print(f"  Tables:   {len(project.tables)}")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({result.error_count}):")
        for err in result.errors:
            print(f"    ✗ {err.object_name}: {err.message}")
            if err.suggestion:
                print(f"        → {err.suggestion}")

    if result.warnings:
        print(f"\n  Warnings ({result.warning_count}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn.object_name}: {warn.message}")
            if warn.suggestion:
                print(f"        → {warn.suggestion}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")
    print(f"{'='*50}\n")


def _run_validate_only(schema_path: Path, project: Any, advanced: bool = False) -> int:
    from schemaforge.utils import timed
    from schemaforge.validators import validate_advanced, validate_project

    logger.info("Running validation-only mode for: %s", schema_path)
    with timed("validation"):
        result = validate_advanced(project) if advanced else validate_project(project)
    _print_validation_report(schema_path, project, result)
    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


def _run_check_name(project: Any, kind: str, name: str, table: Optional[str]) -> int:
    from schemaforge.validators import validate_name

    finding = validate_name(kind, name, project.naming_rules, table)
    if finding is None:
        print(f"✓ {kind.upper()} name '{name}' is compliant.")
        return EXIT_SUCCESS
    print(f"✗ {finding.message}")
    if finding.suggestion:
        print(f"  suggestion: {finding.suggestion}")
    return EXIT_VALIDATION_ERROR


def _run_print(project: Any, fmt: str, options: Any, strict: bool) -> int:
    from schemaforge.generator import SchemaGenerator
    from schemaforge.validators import validate_project

    if strict:
        result = validate_project(project)
        if not result.can_export:
            logger.error("Validation failed: %s", result.summary())
            print(result.format_report(), file=sys.stderr)
            return EXIT_VALIDATION_ERROR

    try:
        generated = SchemaGenerator().generate(project, fmt, options)
    except ValueError as exc:
        logger.error("Generation failed: %s", exc)
        return EXIT_GENERATION_ERROR

    sys.stdout.write(generated.content)
    return EXIT_SUCCESS


def _run_export(
    project: Any, formats: List[str], options: Any, output_dir: Path, args: argparse.Namespace
) -> int:
    from schemaforge.exporters import SchemaExporter

    exporter: SchemaExporter = SchemaExporter(
        output_dir,
        options=options,
        strict=args.strict,
        dry_run=args.dry_run,
    )
    try:
        result = exporter.export(project, formats)
    except ValueError as exc:
        logger.error("Generation failed: %s", exc)
        return EXIT_GENERATION_ERROR

    for record in result.manifest.files:
        print(f"  ✓ {record.relative_path:<40s} {record.size_bytes:>8,d} bytes")

    if result.success:
        return EXIT_SUCCESS

    for error in result.errors:
        print(f"  ✗ {error}", file=sys.stderr)
    if result.validation is not None and not result.validation.can_export and args.strict:
        print(result.validation.format_report(), file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    return EXIT_EXPORT_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    from schemaforge.loader import load_project

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    try:
        project, file_options = load_project(schema_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load project: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    if args.check_name:
        kind, name = args.check_name
        sys.exit(_run_check_name(project, kind, name, args.table))

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, project, args.advanced))

    try:
        options = _build_options(args, file_options)
    except ValueError as exc:
        logger.error("Invalid generation options: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    formats: List[str] = args.formats or ["sql"]

    if args.output is None:
        sys.exit(_run_print(project, formats[0], options, args.strict))

    output_dir: Path = Path(args.output).resolve()
    logger.info("Schema:  %s", schema_path)
    logger.info("Output:  %s", output_dir)
    logger.info("Formats: %s", ", ".join(formats))

    exit_code: int = _run_export(project, formats, options, output_dir, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Export completed successfully.")
    else:
        logger.error("Export failed with exit code %d.", exit_code)
    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("schemaforge.cli loaded.")
