"""
tests/test_type_validator.py
Unit tests for schemaforge.type_validator.

Tests cover:
- Length, precision and scale rules
- IDENTITY and primary-key eligibility
- DEFAULT literal checks
- Type compatibility
- Parameter and compatibility properties across every data type
"""

from __future__ import annotations

import itertools

import pytest

from schemaforge.datatypes import requires_length, requires_precision, requires_scale
from schemaforge.models import Column, DataType
from schemaforge.type_validator import (
    ValidationOutcome,
    is_compatible_type,
    validate_column_data_type,
)


def _check(**fields: object) -> ValidationOutcome:
    fields.setdefault("name", "Col")
    return validate_column_data_type(Column(**fields))


# ===========================================================================
# Length
# ===========================================================================


class TestLength:
    def test_missing_length(self) -> None:
        outcome = _check(data_type="NVARCHAR")
        assert outcome.errors == ["NVARCHAR type requires length."]

    def test_valid_length(self) -> None:
        assert _check(data_type="NVARCHAR", max_length=4000).is_valid

    def test_length_over_limit(self) -> None:
        outcome = _check(data_type="NVARCHAR", max_length=5000)
        assert outcome.errors == [
            "NVARCHAR length must be between 1 and 4000 (or MAX), got 5000."
        ]

    def test_zero_length(self) -> None:
        assert not _check(data_type="VARCHAR", max_length=0).is_valid

    @pytest.mark.parametrize("dt", ["VARCHAR", "NVARCHAR", "VARBINARY"])
    def test_max_allowed(self, dt: str) -> None:
        assert _check(data_type=dt, max_length=-1).is_valid

    def test_max_not_allowed_for_char(self) -> None:
        outcome = _check(data_type="CHAR", max_length=-1)
        assert outcome.errors == ["CHAR length must be between 1 and 8000, got -1."]

    def test_length_ignored_for_int(self) -> None:
        assert _check(data_type="INT", max_length=99999).is_valid


# ===========================================================================
# Precision / scale
# ===========================================================================


class TestPrecisionScale:
    def test_valid_decimal(self) -> None:
        outcome = _check(data_type="DECIMAL", precision=18, scale=2)
        assert outcome.is_valid
        assert not outcome.warnings

    def test_missing_precision_and_scale(self) -> None:
        outcome = _check(data_type="DECIMAL")
        assert outcome.errors == ["DECIMAL type requires precision.", "DECIMAL type requires scale."]

    def test_scale_exceeds_precision_single_error(self) -> None:
        outcome = _check(data_type="DECIMAL", precision=10, scale=15)
        assert len(outcome.errors) == 1
        assert "scale cannot exceed precision" in outcome.errors[0]

    def test_precision_out_of_range(self) -> None:
        outcome = _check(data_type="NUMERIC", precision=39, scale=0)
        assert outcome.errors == ["NUMERIC precision must be between 1 and 38, got 39."]

    def test_negative_scale(self) -> None:
        outcome = _check(data_type="DECIMAL", precision=10, scale=-1)
        assert outcome.errors == ["DECIMAL scale must not be negative, got -1."]

    @pytest.mark.parametrize("precision, valid", [(0, True), (7, True), (8, False)])
    def test_time_precision(self, precision: int, valid: bool) -> None:
        assert _check(data_type="TIME", precision=precision).is_valid is valid

    def test_datetime2_requires_precision(self) -> None:
        assert _check(data_type="DATETIME2").errors == ["DATETIME2 type requires precision."]

    def test_float_precision_range(self) -> None:
        assert _check(data_type="FLOAT", precision=53).is_valid
        assert not _check(data_type="FLOAT", precision=54).is_valid


# ===========================================================================
# Identity / primary key
# ===========================================================================


class TestIdentityAndPrimaryKey:
    def test_nvarchar_identity_single_error(self) -> None:
        outcome = _check(data_type="NVARCHAR", max_length=50, identity=True)
        assert outcome.errors == ["NVARCHAR type does not support IDENTITY."]

    @pytest.mark.parametrize("dt", ["TINYINT", "SMALLINT", "INT", "BIGINT"])
    def test_integer_identity(self, dt: str) -> None:
        assert _check(data_type=dt, identity=True).is_valid

    def test_decimal_identity(self) -> None:
        assert _check(data_type="DECIMAL", precision=10, scale=0, identity=True).is_valid

    @pytest.mark.parametrize("dt", ["TEXT", "NTEXT", "IMAGE", "XML"])
    def test_ineligible_primary_key(self, dt: str) -> None:
        outcome = _check(data_type=dt, primary_key=True)
        assert outcome.errors == [f"{dt} type cannot be used as a primary key."]

    def test_construction_does_not_enforce_identity(self) -> None:
        col = Column(name="Code", data_type="NVARCHAR", max_length=10, identity=True)
        assert col.identity is True


# ===========================================================================
# Default values
# ===========================================================================


class TestDefaultValue:
    @pytest.mark.parametrize("value", ["0", "-5", "((0))", "NULL", "null", "NEXT_ID()"])
    def test_valid_integer_defaults(self, value: str) -> None:
        assert _check(data_type="INT", default_value=value).is_valid

    def test_invalid_integer_default(self) -> None:
        outcome = _check(data_type="INT", default_value="abc")
        assert outcome.errors == ["Default value 'abc' is not a valid integer for INT."]

    @pytest.mark.parametrize("value", ["1.5", "-0.25", "1e3", ".5", "(0.0)"])
    def test_valid_decimal_defaults(self, value: str) -> None:
        assert _check(data_type="DECIMAL", precision=10, scale=2, default_value=value).is_valid

    def test_invalid_decimal_default(self) -> None:
        assert not _check(data_type="MONEY", default_value="ten").is_valid

    def test_bit_default(self) -> None:
        assert _check(data_type="BIT", default_value="1").is_valid
        outcome = _check(data_type="BIT", default_value="2")
        assert outcome.errors == ["Default value '2' for BIT must be 0 or 1."]

    def test_date_function_default(self) -> None:
        assert _check(data_type="DATETIME", default_value="GETDATE()").is_valid

    def test_unquoted_string_default_warns(self) -> None:
        outcome = _check(data_type="NVARCHAR", max_length=20, default_value="pending")
        assert outcome.is_valid, "An unquoted string default is only a warning"
        assert len(outcome.warnings) == 1
        assert "single quotes" in outcome.warnings[0]

    @pytest.mark.parametrize("value", ["'pending'", "N'pending'", "('x')"])
    def test_quoted_string_default(self, value: str) -> None:
        outcome = _check(data_type="VARCHAR", max_length=20, default_value=value)
        assert outcome.is_valid and not outcome.warnings

    def test_blank_default_ignored(self) -> None:
        assert _check(data_type="INT", default_value="   ").is_valid


# ===========================================================================
# Contract / compatibility
# ===========================================================================


class TestContract:
    def test_missing_data_type_raises(self) -> None:
        col = Column.model_construct(name="Broken", data_type=None)
        with pytest.raises(ValueError, match="has no data type"):
            validate_column_data_type(col)

    def test_outcome_truthiness(self) -> None:
        assert bool(ValidationOutcome()) is True
        assert bool(ValidationOutcome(errors=["x"])) is False

    def test_validator_does_not_mutate(self) -> None:
        col = Column(name="Price", data_type="DECIMAL", precision=10, scale=15)
        before = col.model_dump()
        validate_column_data_type(col)
        assert col.model_dump() == before


class TestCompatibility:
    def test_same_type(self) -> None:
        assert is_compatible_type(DataType.BIT, DataType.BIT)

    def test_same_family(self) -> None:
        assert is_compatible_type(DataType.INT, DataType.BIGINT)
        assert is_compatible_type(DataType.NVARCHAR, DataType.TEXT)
        assert is_compatible_type(DataType.DATE, DataType.DATETIME2)

    def test_different_family(self) -> None:
        assert not is_compatible_type(DataType.INT, DataType.NVARCHAR)

    def test_no_family(self) -> None:
        assert not is_compatible_type(DataType.BIT, DataType.UNIQUEIDENTIFIER)

    def test_none_raises(self) -> None:
        with pytest.raises(ValueError):
            is_compatible_type(None, DataType.INT)  # type: ignore[arg-type]


# ===========================================================================
# Properties over every data type
# ===========================================================================


_ALL_TYPES = list(DataType)
_LENGTH_TYPES = [dt for dt in _ALL_TYPES if requires_length(dt)]


class TestEveryDataType:
    @pytest.mark.parametrize("dt", _ALL_TYPES, ids=lambda dt: dt.value)
    def test_missing_parameters_reported(self, dt: DataType) -> None:
        outcome = _check(data_type=dt)
        expected = [
            f"{dt.value} type requires {param}."
            for param, needed in (
                ("length", requires_length(dt)),
                ("precision", requires_precision(dt)),
                ("scale", requires_scale(dt)),
            )
            if needed
        ]
        assert outcome.errors == expected
        assert not outcome.warnings

    @pytest.mark.parametrize("dt", _ALL_TYPES, ids=lambda dt: dt.value)
    def test_length_message_only_for_length_types(self, dt: DataType) -> None:
        messages = _check(data_type=dt).errors
        assert any("length" in m for m in messages) is requires_length(dt)
        assert any("scale" in m for m in messages) is requires_scale(dt)

    @pytest.mark.parametrize("dt", _LENGTH_TYPES, ids=lambda dt: dt.value)
    def test_zero_length_rejected(self, dt: DataType) -> None:
        outcome = _check(data_type=dt, max_length=0)
        assert len(outcome.errors) == 1
        assert outcome.errors[0].startswith(f"{dt.value} length must be between 1 and ")
        assert outcome.errors[0].endswith(", got 0.")

    @pytest.mark.parametrize("dt", _ALL_TYPES, ids=lambda dt: dt.value)
    def test_compatibility_reflexive(self, dt: DataType) -> None:
        assert is_compatible_type(dt, dt)

    @pytest.mark.parametrize(
        "a, b", list(itertools.product(_ALL_TYPES, repeat=2)), ids=lambda dt: dt.value
    )
    def test_compatibility_symmetric(self, a: DataType, b: DataType) -> None:
        assert is_compatible_type(a, b) is is_compatible_type(b, a)
