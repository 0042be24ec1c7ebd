"""
tests/conftest.py
Shared fixtures for the schemaforge test suite.

All fixtures are session-scoped or function-scoped as appropriate.
No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import json
import pathlib
from datetime import datetime
from typing import Any, Dict

import pytest
import yaml

from schemaforge.generator import SchemaGenerator
from schemaforge.loader import parse_raw_project
from schemaforge.models import (
    CaseStyle,
    Column,
    Index,
    NamingRules,
    Project,
    SchemaGenerationOptions,
    Table,
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"

FIXED_TIMESTAMP: datetime = datetime(2024, 1, 2, 3, 4, 5)


# ---------------------------------------------------------------------------
# Raw project data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_project_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference project not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def project_dict(raw_project_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_project_dict)


@pytest.fixture()
def project_yaml_path(project_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the project dict to a temporary YAML file and return its path."""
    path = tmp_path / "project.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(project_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def project_json_path(project_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the project dict to a temporary JSON file and return its path."""
    path = tmp_path / "project.json"
    path.write_text(json.dumps(project_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def minimal_project_dict() -> Dict[str, Any]:
    """Smallest valid project: one table with a single primary-key column."""
    return {
        "project": {"id": 7, "name": "Minimal App", "description": "Minimal test project"},
        "naming_rules": {"enforce_case": "PASCAL"},
        "tables": [
            {
                "name": "Account",
                "columns": [
                    {"name": "AccountId", "data_type": "INT", "primary_key": True, "identity": True},
                ],
            }
        ],
    }


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def example_project(project_dict: Dict[str, Any]) -> Project:
    """The reference project parsed into models."""
    project, _options = parse_raw_project(project_dict)
    return project


@pytest.fixture()
def pascal_rules() -> NamingRules:
    return NamingRules(enforce_case=CaseStyle.PASCAL)


@pytest.fixture()
def upper_rules() -> NamingRules:
    """UPPER case with a required ``TB_`` table prefix."""
    return NamingRules(enforce_case=CaseStyle.UPPER, table_prefix="TB_")


@pytest.fixture()
def customer_table() -> Table:
    """A small, fully valid PASCAL table."""
    return Table(
        name="Customer",
        description="Shop customers",
        columns=[
            Column(name="CustomerId", data_type="INT", primary_key=True, identity=True),
            Column(name="Email", data_type="NVARCHAR", max_length=200, nullable=False),
            Column(name="IsActive", data_type="BIT", nullable=False, default_value="1"),
        ],
        indexes=[Index(name="IX_Customer_Email", unique=True, columns=["Email"])],
    )


@pytest.fixture()
def customer_project(customer_table: Table) -> Project:
    return Project(
        id=1,
        name="Shop",
        description="Test shop",
        naming_rules=NamingRules(enforce_case=None),
        tables=[customer_table],
    )


# ---------------------------------------------------------------------------
# Generator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def generator() -> SchemaGenerator:
    """Generator with a pinned timestamp so output is deterministic."""
    return SchemaGenerator(generated_at=FIXED_TIMESTAMP)


@pytest.fixture()
def default_options() -> SchemaGenerationOptions:
    return SchemaGenerationOptions.default_options()
