# File: schemaforge/loader.py
"""
SchemaForge - Project File Loader
==================================
Reads a project definition from JSON or YAML and materialises it into the
Pydantic models of ``schemaforge.models``.

Expected layout (YAML shown)::

    project:
      id: 1
      name: Shop
      description: Online shop schema
    naming_rules:
      enforce_case: UPPER
      table_prefix: TB_
    options:
      preset: production        # default | production | development
      schema_name: sales        # any SchemaGenerationOptions field overrides
    tables:
      - name: TB_CUSTOMER
        columns:
          - {name: CUSTOMER_ID, data_type: INT, primary_key: true, identity: true}
          - {name: EMAIL, data_type: NVARCHAR, max_length: 200}
        indexes:
          - {name: IX_CUSTOMER_EMAIL, unique: true, columns: [EMAIL]}

Deserialisation is the only place raw mappings are touched; the rest of the
package works on validated models.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from schemaforge.models import Project, SchemaGenerationOptions

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.loader")


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_project_file(path: Path) -> Dict[str, Any]:
    """
    Load a project definition file (JSON or YAML), dispatching on extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Project path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# Raw mapping → models
# ---------------------------------------------------------------------------


def parse_options(raw: Any) -> SchemaGenerationOptions:
    """
    Build generation options from a preset name, a mapping with an optional
    ``preset`` key plus overrides, or ``None`` (defaults).
    """
    if raw is None:
        return SchemaGenerationOptions.default_options()
    if isinstance(raw, str):
        return SchemaGenerationOptions.from_preset(raw)
    if not isinstance(raw, dict):
        raise ValueError(f"'options' must be a mapping or preset name, got {type(raw).__name__}.")

    overrides: Dict[str, Any] = dict(raw)
    preset: str = str(overrides.pop("preset", "default"))
    return SchemaGenerationOptions.from_preset(preset, **overrides)


def parse_raw_project(raw: Dict[str, Any]) -> Tuple[Project, SchemaGenerationOptions]:
    """
    Parse a raw dictionary (from JSON/YAML) into a validated ``Project`` and
    its ``SchemaGenerationOptions``.

    Raises:
        ValueError: If required keys are missing or model validation fails.
    """
    meta: Any = raw.get("project", {})
    if not isinstance(meta, dict):
        raise ValueError("'project' must be a mapping with at least a 'name'.")
    if not meta.get("name"):
        raise ValueError("Project definition is missing 'project.name'.")

    rules_data: Optional[Dict[str, Any]] = raw.get("naming_rules", meta.get("naming_rules"))
    if rules_data is None:
        logger.info("No naming rules found in input — validation will report it.")

    project_data: Dict[str, Any] = {
        "id": meta.get("id"),
        "name": meta["name"],
        "description": meta.get("description"),
        "naming_rules": rules_data,
        "tables": raw.get("tables", []) or [],
    }

    try:
        project: Project = Project.model_validate(project_data)
    except ValueError as exc:
        raise ValueError(f"Project validation failed: {exc}") from exc

    try:
        options: SchemaGenerationOptions = parse_options(raw.get("options"))
    except ValueError as exc:
        raise ValueError(f"Options validation failed: {exc}") from exc

    logger.debug(
        "Parsed project '%s' with %d table(s).", project.name, len(project.tables)
    )
    return project, options


def load_project(path: Path) -> Tuple[Project, SchemaGenerationOptions]:
    """Convenience: ``parse_raw_project(load_project_file(path))``."""
    return parse_raw_project(load_project_file(path))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "load_project_file",
    "parse_options",
    "parse_raw_project",
    "load_project",
]

logger.debug("schemaforge.loader loaded — %d public symbols.", len(__all__))
