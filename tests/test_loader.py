"""
tests/test_loader.py
Unit tests for schemaforge.loader.

Tests cover:
- JSON / YAML file loading and error handling
- Raw mapping → Project parsing
- Options presets and overrides
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict

import pytest

from schemaforge.loader import (
    load_project,
    load_project_file,
    parse_options,
    parse_raw_project,
)
from schemaforge.models import CaseStyle, DataType, SortOrder


# ===========================================================================
# File loading
# ===========================================================================


class TestLoadProjectFile:
    def test_yaml(self, project_yaml_path: pathlib.Path) -> None:
        data = load_project_file(project_yaml_path)
        assert data["project"]["name"] == "Online Shop"

    def test_json(self, project_json_path: pathlib.Path) -> None:
        data = load_project_file(project_json_path)
        assert len(data["tables"]) == 3

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_project_file(tmp_path / "nope.yaml")

    def test_directory_rejected(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_project_file(tmp_path)

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("project: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_project_file(path)

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_project_file(path)

    def test_top_level_must_be_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_project_file(path)

    def test_unknown_extension_falls_back(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "project.txt"
        path.write_text("project:\n  name: Plain\n", encoding="utf-8")
        assert load_project_file(path) == {"project": {"name": "Plain"}}


# ===========================================================================
# Parsing
# ===========================================================================


class TestParseRawProject:
    def test_reference_project(self, project_dict: Dict[str, Any]) -> None:
        project, options = parse_raw_project(project_dict)
        assert project.id == 1
        assert project.name == "Online Shop"
        assert [t.name for t in project.tables] == ["Customer", "Product", "CustomerOrder"]
        assert options.schema_name == "dbo"
        assert options.batch_script is False

    def test_models_are_materialised(self, project_dict: Dict[str, Any]) -> None:
        project, _ = parse_raw_project(project_dict)
        product = project.get_table("Product")
        assert product is not None
        assert product.get_column("UnitPrice").data_type is DataType.DECIMAL  # type: ignore[union-attr]
        assert product.get_column("Notes").sql_type == "NVARCHAR(MAX)"  # type: ignore[union-attr]
        assert product.get_column("Stock").default_value == "0"  # type: ignore[union-attr]
        order_index = project.get_table("CustomerOrder").indexes[0]  # type: ignore[union-attr]
        assert [c.sort_order for c in order_index.columns] == [SortOrder.ASC, SortOrder.DESC]

    def test_naming_rules(self, project_dict: Dict[str, Any]) -> None:
        project, _ = parse_raw_project(project_dict)
        assert project.naming_rules is not None
        assert project.naming_rules.enforce_case is None
        assert project.naming_rules.require_description is True

    def test_minimal(self, minimal_project_dict: Dict[str, Any]) -> None:
        project, options = parse_raw_project(minimal_project_dict)
        assert project.naming_rules.enforce_case is CaseStyle.PASCAL  # type: ignore[union-attr]
        assert options.include_existence_checks is True

    def test_rules_nested_under_project(self, minimal_project_dict: Dict[str, Any]) -> None:
        rules = minimal_project_dict.pop("naming_rules")
        minimal_project_dict["project"]["naming_rules"] = rules
        project, _ = parse_raw_project(minimal_project_dict)
        assert project.naming_rules is not None

    def test_missing_rules_allowed(self, minimal_project_dict: Dict[str, Any]) -> None:
        del minimal_project_dict["naming_rules"]
        project, _ = parse_raw_project(minimal_project_dict)
        assert project.naming_rules is None

    def test_missing_project_name(self, minimal_project_dict: Dict[str, Any]) -> None:
        del minimal_project_dict["project"]["name"]
        with pytest.raises(ValueError, match="project.name"):
            parse_raw_project(minimal_project_dict)

    def test_missing_project_section(self) -> None:
        with pytest.raises(ValueError):
            parse_raw_project({"tables": []})

    def test_invalid_column(self, minimal_project_dict: Dict[str, Any]) -> None:
        minimal_project_dict["tables"][0]["columns"][0]["data_type"] = "BLOB"
        with pytest.raises(ValueError, match="Project validation failed"):
            parse_raw_project(minimal_project_dict)

    def test_dangling_index(self, minimal_project_dict: Dict[str, Any]) -> None:
        minimal_project_dict["tables"][0]["indexes"] = [{"name": "IX_X", "columns": ["Missing"]}]
        with pytest.raises(ValueError, match="non-existent columns"):
            parse_raw_project(minimal_project_dict)

    def test_invalid_options(self, minimal_project_dict: Dict[str, Any]) -> None:
        minimal_project_dict["options"] = {"preset": "staging"}
        with pytest.raises(ValueError, match="Options validation failed"):
            parse_raw_project(minimal_project_dict)


class TestParseOptions:
    def test_none(self) -> None:
        assert parse_options(None).include_drop_statements is False

    def test_preset_name(self) -> None:
        assert parse_options("development").include_drop_statements is True

    def test_preset_with_overrides(self) -> None:
        opts = parse_options({"preset": "production", "schema_name": "sales", "include_comments": False})
        assert opts.batch_script is True
        assert opts.schema_name == "sales"
        assert opts.include_comments is False

    def test_explicit_fields(self) -> None:
        assert parse_options({"batch_script": True}).batch_script is True

    def test_unknown_field(self) -> None:
        with pytest.raises(ValueError):
            parse_options({"emit_foreign_keys": True})

    def test_wrong_type(self) -> None:
        with pytest.raises(ValueError):
            parse_options(["production"])


class TestLoadProject:
    def test_yaml_round_trip(self, project_yaml_path: pathlib.Path) -> None:
        project, options = load_project(project_yaml_path)
        assert len(project.tables) == 3
        assert options.schema_name == "dbo"

    def test_json(self, tmp_path: pathlib.Path, minimal_project_dict: Dict[str, Any]) -> None:
        path = tmp_path / "minimal.json"
        path.write_text(json.dumps(minimal_project_dict), encoding="utf-8")
        project, _ = load_project(path)
        assert project.name == "Minimal App"
