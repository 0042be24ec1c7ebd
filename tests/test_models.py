"""
tests/test_models.py
Unit tests for schemaforge.models.

Tests cover:
- Column construction, normalisation and the primary-key/nullability invariant
- Index shorthand parsing
- Table order indexes, column helpers and index references
- NamingRules, Project and SchemaGenerationOptions
- ExportFormat metadata
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemaforge.models import (
    CaseStyle,
    Column,
    DataType,
    ExportFormat,
    Index,
    IndexType,
    NamingRules,
    Project,
    SchemaGenerationOptions,
    SortOrder,
    Table,
)


# ===========================================================================
# Column
# ===========================================================================


class TestColumn:
    def test_data_type_normalised(self) -> None:
        col = Column(name="Total", data_type=" decimal ", precision=18, scale=2)
        assert col.data_type is DataType.DECIMAL

    def test_unknown_data_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Column(name="Blob", data_type="BLOB")

    def test_nullable_defaults_to_true(self) -> None:
        assert Column(name="Note", data_type="NVARCHAR", max_length=10).nullable is True

    def test_primary_key_defaults_to_not_null(self) -> None:
        col = Column(name="Id", data_type="INT", primary_key=True)
        assert col.nullable is False

    def test_nullable_primary_key_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be nullable"):
            Column(name="Id", data_type="INT", primary_key=True, nullable=True)

    def test_assigning_nullable_on_primary_key_rejected(self) -> None:
        col = Column(name="Id", data_type="INT", primary_key=True)
        with pytest.raises(ValidationError):
            col.nullable = True

    def test_promoting_nullable_column_by_assignment_rejected(self) -> None:
        col = Column(name="Code", data_type="INT")
        with pytest.raises(ValidationError, match="cannot be a primary key"):
            col.primary_key = True
        assert col.primary_key is False
        assert col.nullable is True

    def test_rejected_nullable_assignment_leaves_column_unchanged(self) -> None:
        col = Column(name="Id", data_type="INT", primary_key=True)
        with pytest.raises(ValidationError):
            col.nullable = True
        assert col.nullable is False

    def test_set_primary_key_forces_not_null(self) -> None:
        col = Column(name="Code", data_type="INT")
        col.set_primary_key(True)
        assert col.primary_key is True
        assert col.nullable is False

    def test_set_primary_key_false_keeps_nullability(self) -> None:
        col = Column(name="Id", data_type="INT", primary_key=True)
        col.set_primary_key(False)
        assert col.primary_key is False
        assert col.nullable is False

    @pytest.mark.parametrize(
        "raw, expected", [(0, "0"), (1.5, "1.5"), (True, "1"), (False, "0"), ("GETDATE()", "GETDATE()")]
    )
    def test_default_value_stringified(self, raw: object, expected: str) -> None:
        col = Column(name="X", data_type="INT", default_value=raw)
        assert col.default_value == expected

    def test_sql_type(self) -> None:
        assert Column(name="Notes", data_type="NVARCHAR", max_length=-1).sql_type == "NVARCHAR(MAX)"
        assert Column(name="Price", data_type="DECIMAL", precision=10, scale=2).sql_type == "DECIMAL(10,2)"

    def test_negative_order_index_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Column(name="X", data_type="INT", order_index=-1)

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            Column(name="X", data_type="INT", autoincrement=True)


# ===========================================================================
# Index
# ===========================================================================


class TestIndex:
    def test_shorthand_columns(self) -> None:
        idx = Index(name="IX_Order_Date", columns=["CustomerId", "OrderedAt desc"])
        assert idx.column_names == ["CustomerId", "OrderedAt"]
        assert idx.columns[0].sort_order is SortOrder.ASC
        assert idx.columns[1].sort_order is SortOrder.DESC

    def test_index_type_normalised(self) -> None:
        idx = Index(name="CIX", index_type="clustered", columns=["Id"])
        assert idx.index_type is IndexType.CLUSTERED
        assert idx.is_clustered

    def test_defaults(self) -> None:
        idx = Index(name="IX_A", columns=["A"])
        assert idx.index_type is IndexType.NONCLUSTERED
        assert idx.unique is False
        assert idx.is_composite is False

    def test_composite(self) -> None:
        assert Index(name="IX_AB", columns=["A", "B"]).is_composite is True


# ===========================================================================
# Table
# ===========================================================================


class TestTable:
    def test_order_indexes_assigned_from_zero(self) -> None:
        table = Table(
            name="T",
            columns=[
                Column(name="A", data_type="INT"),
                Column(name="B", data_type="INT"),
                Column(name="C", data_type="INT"),
            ],
        )
        assert [c.order_index for c in table.columns] == [0, 1, 2]

    def test_missing_order_indexes_follow_highest(self) -> None:
        table = Table(
            name="T",
            columns=[
                Column(name="A", data_type="INT", order_index=5),
                Column(name="B", data_type="INT"),
            ],
        )
        assert table.get_column("B").order_index == 6  # type: ignore[union-attr]

    def test_duplicate_order_index_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate order_index"):
            Table(
                name="T",
                columns=[
                    Column(name="A", data_type="INT", order_index=1),
                    Column(name="B", data_type="INT", order_index=1),
                ],
            )

    def test_ordered_columns(self) -> None:
        table = Table(
            name="T",
            columns=[
                Column(name="Late", data_type="INT", order_index=3),
                Column(name="Early", data_type="INT", order_index=0),
            ],
        )
        assert table.column_names == ["Early", "Late"]

    def test_next_order_index_empty_table(self) -> None:
        assert Table(name="T").next_order_index == 0

    def test_add_column_assigns_next_index(self, customer_table: Table) -> None:
        added = customer_table.add_column(Column(name="Phone", data_type="VARCHAR", max_length=20))
        assert added.order_index == 3
        assert customer_table.column_names[-1] == "Phone"

    def test_add_column_duplicate_index_rejected(self, customer_table: Table) -> None:
        with pytest.raises(ValueError, match="Duplicate order_index"):
            customer_table.add_column(Column(name="Phone", data_type="INT", order_index=0))

    def test_remove_column(self, customer_table: Table) -> None:
        removed = customer_table.remove_column("IsActive")
        assert removed.name == "IsActive"
        assert customer_table.get_column("IsActive") is None

    def test_remove_missing_column(self, customer_table: Table) -> None:
        with pytest.raises(KeyError):
            customer_table.remove_column("Nope")

    def test_remove_indexed_column_refused(self, customer_table: Table) -> None:
        with pytest.raises(ValueError, match="IX_Customer_Email"):
            customer_table.remove_column("Email")
        assert customer_table.get_column("Email") is not None

    def test_primary_key_columns(self, customer_table: Table) -> None:
        assert [c.name for c in customer_table.primary_key_columns] == ["CustomerId"]

    def test_dangling_index_column_rejected(self) -> None:
        with pytest.raises(ValidationError, match="non-existent columns"):
            Table(
                name="T",
                columns=[Column(name="A", data_type="INT")],
                indexes=[Index(name="IX_T_B", columns=["B"])],
            )

    def test_dangling_index_assignment_leaves_table_unchanged(self, customer_table: Table) -> None:
        with pytest.raises(ValidationError, match="non-existent columns"):
            customer_table.indexes = [Index(name="IX_Customer_Missing", columns=["Missing"])]
        assert [i.name for i in customer_table.indexes] == ["IX_Customer_Email"]

    def test_columns_assignment_dropping_indexed_column_rejected(self, customer_table: Table) -> None:
        keep = [c for c in customer_table.columns if c.name != "Email"]
        with pytest.raises(ValidationError, match="non-existent columns"):
            customer_table.columns = keep
        assert customer_table.get_column("Email") is not None

    def test_columns_assignment_with_duplicate_order_rejected(self, customer_table: Table) -> None:
        clash = [Column(name="A", data_type="INT", order_index=0), Column(name="B", data_type="INT", order_index=0)]
        with pytest.raises(ValidationError, match="Duplicate order_index"):
            customer_table.columns = clash
        assert len(customer_table.columns) == 3

    def test_columns_assignment_numbers_new_columns(self) -> None:
        table = Table(name="T")
        table.columns = [Column(name="A", data_type="INT"), Column(name="B", data_type="INT")]
        assert [c.order_index for c in table.columns] == [0, 1]

    def test_get_index(self, customer_table: Table) -> None:
        assert customer_table.get_index("IX_Customer_Email") is not None
        assert customer_table.get_index("IX_Missing") is None


# ===========================================================================
# NamingRules / Project
# ===========================================================================


class TestNamingRules:
    def test_defaults(self) -> None:
        rules = NamingRules()
        assert rules.enforce_case is CaseStyle.PASCAL
        assert rules.enforce_upper_case is False
        assert rules.table_prefix is None

    def test_case_normalised(self) -> None:
        assert NamingRules(enforce_case="snake").enforce_case is CaseStyle.SNAKE

    def test_case_can_be_disabled(self) -> None:
        assert NamingRules(enforce_case=None).enforce_case is None

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid regular expression"):
            NamingRules(table_pattern="([A-Z")

    def test_blank_pattern_becomes_none(self) -> None:
        assert NamingRules(column_pattern="").column_pattern is None


class TestProject:
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Project(name="")

    def test_get_table(self, customer_project: Project) -> None:
        assert customer_project.get_table("Customer") is not None
        assert customer_project.get_table("Missing") is None


# ===========================================================================
# SchemaGenerationOptions
# ===========================================================================


class TestGenerationOptions:
    def test_default_options(self) -> None:
        opts = SchemaGenerationOptions.default_options()
        assert opts.include_existence_checks is True
        assert opts.include_drop_statements is False
        assert opts.batch_script is False
        assert opts.schema_name is None

    def test_production_options(self) -> None:
        opts = SchemaGenerationOptions.production_options()
        assert opts.include_existence_checks is True
        assert opts.include_drop_statements is False
        assert opts.batch_script is True

    def test_development_options(self) -> None:
        opts = SchemaGenerationOptions.development_options()
        assert opts.include_drop_statements is True
        assert opts.include_existence_checks is False

    def test_from_preset_with_overrides(self) -> None:
        opts = SchemaGenerationOptions.from_preset("Production", schema_name="sales")
        assert opts.batch_script is True
        assert opts.schema_name == "sales"

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValueError, match="Unknown options preset"):
            SchemaGenerationOptions.from_preset("staging")

    def test_blank_schema_name(self) -> None:
        assert SchemaGenerationOptions(schema_name="  ").schema_name is None


# ===========================================================================
# ExportFormat
# ===========================================================================


class TestExportFormat:
    @pytest.mark.parametrize(
        "fmt, ext",
        [
            (ExportFormat.SQL_SCRIPT, ".sql"),
            (ExportFormat.SQL_WITH_VALIDATION, ".sql"),
            (ExportFormat.DOCUMENTATION, ".md"),
            (ExportFormat.HTML_DOCUMENTATION, ".html"),
            (ExportFormat.JSON_SCHEMA, ".json"),
            (ExportFormat.CSV_TABLE_LIST, ".csv"),
        ],
    )
    def test_file_extension(self, fmt: ExportFormat, ext: str) -> None:
        assert fmt.file_extension == ext

    def test_display_names_unique(self) -> None:
        names = [f.display_name for f in ExportFormat]
        assert len(set(names)) == len(names)
        assert ExportFormat.SQL_SCRIPT.display_name == "SQL Script"
