# File: schemaforge/exporters.py
"""
SchemaForge - Artifact Exporter (File-System Manager)
======================================================

Responsible for:
    1. Rendering the requested formats through ``SchemaGenerator``.
    2. Writing each artifact atomically (write-to-temp then rename).
    3. Producing an export manifest with checksums for reproducibility.
    4. Optionally refusing to export a project that fails validation.

Write failures are recorded on the ``ExportResult`` instead of aborting the
batch; files written before a failure stay intact.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from schemaforge.generator import GenerationResult, SchemaGenerator, coerce_format
from schemaforge.models import ExportFormat, Project, SchemaGenerationOptions
from schemaforge.utils import ArtifactStats, artifact_stats, file_stem, timed, write_artifact
from schemaforge.validators import ValidationResult, validate_project

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.exporters")

_FILE_SUFFIXES: Dict[ExportFormat, str] = {
    ExportFormat.SQL_WITH_VALIDATION: "_validated",
    ExportFormat.DOCUMENTATION: "_schema",
    ExportFormat.HTML_DOCUMENTATION: "_schema",
    ExportFormat.JSON_SCHEMA: "_schema",
    ExportFormat.CSV_TABLE_LIST: "_tables",
}

MANIFEST_FILE_NAME: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    format: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Complete manifest of all exported files, serialisable to JSON."""

    project_name: str = ""
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "format": f.format,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``SchemaExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    validation: Optional[ValidationResult]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# SchemaExporter
# ---------------------------------------------------------------------------


def artifact_file_name(project: Project, export_format: ExportFormat) -> str:
    """``<snake_project_name><suffix><ext>``, e.g. ``online_shop_validated.sql``."""
    stem: str = file_stem(project.name) or "schema"
    return f"{stem}{_FILE_SUFFIXES.get(export_format, '')}{export_format.file_extension}"


class SchemaExporter:
    """
    Renders and writes schema artifacts into one output directory.

    Usage::

        exporter = SchemaExporter(Path("./out"), options=production_options)
        result = exporter.export(project, ["sql", "markdown"])
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        options: Optional[SchemaGenerationOptions] = None,
        generator: Optional[SchemaGenerator] = None,
        strict: bool = False,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            output_dir: Root directory for output files.
            options: Generation options (defaults when omitted).
            generator: Renderer to use (a fresh ``SchemaGenerator`` by default).
            strict: Refuse to export when validation reports errors.
            atomic_writes: Use the write-to-temp + rename pattern.
            generate_manifest: Write ``manifest.json`` next to the artifacts.
            dry_run: Render everything but write nothing.
        """
        self._output_dir: Path = Path(output_dir).resolve()
        self._options: SchemaGenerationOptions = (
            options or SchemaGenerationOptions.default_options()
        )
        self._generator: SchemaGenerator = generator or SchemaGenerator()
        self._strict: bool = strict
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest
        self._dry_run: bool = dry_run

        self._errors: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "SchemaExporter initialised: output_dir=%s, strict=%s, dry_run=%s.",
            self._output_dir,
            self._strict,
            self._dry_run,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(
        self,
        project: Project,
        formats: Sequence[Union[ExportFormat, str]] = (ExportFormat.SQL_SCRIPT,),
    ) -> ExportResult:
        """
        Render every format in *formats* and write it to the output directory.

        Raises:
            ValueError: On an unknown format (before anything is written).
        """
        self._errors = []
        self._file_records = []
        export_formats: List[ExportFormat] = [coerce_format(f) for f in formats]
        validation: Optional[ValidationResult] = None

        with timed("export") as elapsed:
            if self._strict:
                validation = validate_project(project)
                if not validation.can_export:
                    self._errors.append(
                        f"Validation failed with {validation.error_count} error(s); "
                        f"nothing was exported."
                    )

            if not self._errors:
                for export_format in export_formats:
                    result: GenerationResult = self._generator.generate(
                        project, export_format, self._options
                    )
                    if result.validation is not None:
                        validation = result.validation
                    self._write_artifact(
                        artifact_file_name(project, export_format),
                        result.content,
                        export_format,
                    )

                if self._generate_manifest and not self._dry_run:
                    self._write_manifest_file(project)

        manifest: ExportManifest = self._build_manifest(project)
        success: bool = not self._errors

        if success:
            logger.info(
                "Export completed: %d file(s), %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                elapsed.seconds,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                elapsed.seconds,
            )

        return ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            validation=validation,
            elapsed_seconds=elapsed.seconds,
        )

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_artifact(self, rel_path: str, content: str, export_format: ExportFormat) -> None:
        full_path: Path = self._output_dir / rel_path
        stats: ArtifactStats = artifact_stats(content)
        record: FileRecord = FileRecord(
            relative_path=rel_path,
            format=export_format.value,
            size_bytes=stats.size_bytes,
            line_count=stats.line_count,
            sha256=stats.sha256,
        )

        if self._dry_run:
            logger.info("Dry-run: would write %s (%d bytes).", rel_path, record.size_bytes)
            self._file_records.append(record)
            return

        try:
            write_artifact(full_path, content, atomic=self._atomic_writes)
        except OSError as exc:
            error_msg: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
            self._errors.append(error_msg)
            logger.error(error_msg)
            return

        self._file_records.append(record)
        logger.debug("Wrote %s (%d bytes, %d lines).", rel_path, record.size_bytes, record.line_count)

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self, project: Project) -> ExportManifest:
        from schemaforge import __version__

        return ExportManifest(
            project_name=project.name,
            generator_version=__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            files=list(self._file_records),
        )

    def _write_manifest_file(self, project: Project) -> None:
        manifest_path: Path = self._output_dir / MANIFEST_FILE_NAME
        try:
            write_artifact(manifest_path, self._build_manifest(project).to_json(), atomic=self._atomic_writes)
        except OSError as exc:
            self._errors.append(f"Could not write manifest: {exc}")
            logger.error("Failed to write manifest: %s", exc)
            return
        logger.debug("Wrote manifest to %s.", manifest_path)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILE_NAME",
    "artifact_file_name",
]

logger.debug("schemaforge.exporters loaded — %d public symbols.", len(__all__))
