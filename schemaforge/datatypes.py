# File: schemaforge/datatypes.py
"""
SchemaForge - MSSQL Data Type Catalog
======================================
Static, data-driven catalog of every column data type SchemaForge models.

Each ``DataType`` maps to a frozen ``DataTypeTraits`` record describing the
structural requirements of the type (length / precision / scale) and its
capabilities (IDENTITY support, primary-key eligibility).  The catalog is
built once at import time and never mutated afterwards.

Usage::

    from schemaforge.datatypes import DataType, to_sql_string
    to_sql_string(DataType.DECIMAL, precision=18, scale=2)   # 'DECIMAL(18,2)'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.datatypes")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DataType(str, Enum):
    """Supported MSSQL column data types."""

    # Character
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    NCHAR = "NCHAR"
    NVARCHAR = "NVARCHAR"
    TEXT = "TEXT"
    NTEXT = "NTEXT"

    # Exact / approximate numeric
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"
    DECIMAL = "DECIMAL"
    NUMERIC = "NUMERIC"
    FLOAT = "FLOAT"
    REAL = "REAL"
    MONEY = "MONEY"
    SMALLMONEY = "SMALLMONEY"

    # Date / Time
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    DATETIME2 = "DATETIME2"
    SMALLDATETIME = "SMALLDATETIME"
    DATETIMEOFFSET = "DATETIMEOFFSET"

    # Binary
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    IMAGE = "IMAGE"

    # Special
    BIT = "BIT"
    UNIQUEIDENTIFIER = "UNIQUEIDENTIFIER"
    XML = "XML"
    JSON = "JSON"


class TypeFamily(str, Enum):
    """Informal families used for compatibility checks."""

    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"


# ---------------------------------------------------------------------------
# Traits record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DataTypeTraits:
    """Immutable capability record for a single ``DataType``."""

    requires_length: bool = False
    requires_precision: bool = False
    requires_scale: bool = False
    supports_identity: bool = False
    can_be_primary_key: bool = True
    family: Optional[TypeFamily] = None


_LENGTH = DataTypeTraits(requires_length=True)

_CATALOG: Dict[DataType, DataTypeTraits] = {
    DataType.CHAR: DataTypeTraits(requires_length=True, family=TypeFamily.STRING),
    DataType.VARCHAR: DataTypeTraits(requires_length=True, family=TypeFamily.STRING),
    DataType.NCHAR: DataTypeTraits(requires_length=True, family=TypeFamily.STRING),
    DataType.NVARCHAR: DataTypeTraits(requires_length=True, family=TypeFamily.STRING),
    DataType.TEXT: DataTypeTraits(can_be_primary_key=False, family=TypeFamily.STRING),
    DataType.NTEXT: DataTypeTraits(can_be_primary_key=False, family=TypeFamily.STRING),
    DataType.TINYINT: DataTypeTraits(supports_identity=True, family=TypeFamily.NUMERIC),
    DataType.SMALLINT: DataTypeTraits(supports_identity=True, family=TypeFamily.NUMERIC),
    DataType.INT: DataTypeTraits(supports_identity=True, family=TypeFamily.NUMERIC),
    DataType.BIGINT: DataTypeTraits(supports_identity=True, family=TypeFamily.NUMERIC),
    DataType.DECIMAL: DataTypeTraits(
        requires_precision=True,
        requires_scale=True,
        supports_identity=True,
        family=TypeFamily.NUMERIC,
    ),
    DataType.NUMERIC: DataTypeTraits(
        requires_precision=True,
        requires_scale=True,
        supports_identity=True,
        family=TypeFamily.NUMERIC,
    ),
    DataType.FLOAT: DataTypeTraits(requires_precision=True, family=TypeFamily.NUMERIC),
    DataType.REAL: DataTypeTraits(family=TypeFamily.NUMERIC),
    DataType.MONEY: DataTypeTraits(family=TypeFamily.NUMERIC),
    DataType.SMALLMONEY: DataTypeTraits(family=TypeFamily.NUMERIC),
    DataType.DATE: DataTypeTraits(family=TypeFamily.DATE),
    DataType.TIME: DataTypeTraits(requires_precision=True, family=TypeFamily.DATE),
    DataType.DATETIME: DataTypeTraits(family=TypeFamily.DATE),
    DataType.DATETIME2: DataTypeTraits(requires_precision=True, family=TypeFamily.DATE),
    DataType.SMALLDATETIME: DataTypeTraits(family=TypeFamily.DATE),
    DataType.DATETIMEOFFSET: DataTypeTraits(requires_precision=True, family=TypeFamily.DATE),
    DataType.BINARY: _LENGTH,
    DataType.VARBINARY: _LENGTH,
    DataType.IMAGE: DataTypeTraits(can_be_primary_key=False),
    DataType.BIT: DataTypeTraits(),
    DataType.UNIQUEIDENTIFIER: DataTypeTraits(),
    DataType.XML: DataTypeTraits(can_be_primary_key=False),
    DataType.JSON: DataTypeTraits(),
}

# Types whose length may be declared as MAX (stored as -1).
MAX_LENGTH: int = -1
MAX_CAPABLE_TYPES: FrozenSet[DataType] = frozenset(
    {DataType.VARCHAR, DataType.NVARCHAR, DataType.VARBINARY}
)

INTEGER_TYPES: FrozenSet[DataType] = frozenset(
    {DataType.TINYINT, DataType.SMALLINT, DataType.INT, DataType.BIGINT}
)
DECIMAL_TYPES: FrozenSet[DataType] = frozenset(
    {
        DataType.DECIMAL,
        DataType.NUMERIC,
        DataType.FLOAT,
        DataType.REAL,
        DataType.MONEY,
        DataType.SMALLMONEY,
    }
)
STRING_TYPES: FrozenSet[DataType] = frozenset(
    dt for dt, traits in _CATALOG.items() if traits.family is TypeFamily.STRING
)


# ---------------------------------------------------------------------------
# Lookup API
# ---------------------------------------------------------------------------


def get_traits(data_type: DataType) -> DataTypeTraits:
    """Return the traits record for *data_type* (accepts enum or name)."""
    return _CATALOG[DataType(data_type)]


def requires_length(data_type: DataType) -> bool:
    return get_traits(data_type).requires_length


def requires_precision(data_type: DataType) -> bool:
    return get_traits(data_type).requires_precision


def requires_scale(data_type: DataType) -> bool:
    return get_traits(data_type).requires_scale


def supports_identity(data_type: DataType) -> bool:
    return get_traits(data_type).supports_identity


def can_be_primary_key(data_type: DataType) -> bool:
    return get_traits(data_type).can_be_primary_key


def type_family(data_type: DataType) -> Optional[TypeFamily]:
    return get_traits(data_type).family


def to_sql_string(
    data_type: DataType,
    length: Optional[int] = None,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> str:
    """
    Render the SQL type expression for *data_type*.

    Examples:
        >>> to_sql_string(DataType.NVARCHAR, length=100)
        'NVARCHAR(100)'
        >>> to_sql_string(DataType.VARCHAR, length=-1)
        'VARCHAR(MAX)'
        >>> to_sql_string(DataType.DECIMAL, precision=18, scale=2)
        'DECIMAL(18,2)'
        >>> to_sql_string(DataType.INT)
        'INT'

    Length wins over precision/scale; arguments the type does not use are
    ignored.
    """
    dt: DataType = DataType(data_type)
    traits: DataTypeTraits = _CATALOG[dt]
    name: str = dt.value

    if traits.requires_length and length is not None:
        rendered: str = "MAX" if length == MAX_LENGTH else str(length)
        return f"{name}({rendered})"

    if traits.requires_precision and precision is not None:
        if traits.requires_scale and scale is not None:
            return f"{name}({precision},{scale})"
        return f"{name}({precision})"

    return name


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DataType",
    "TypeFamily",
    "DataTypeTraits",
    "MAX_LENGTH",
    "MAX_CAPABLE_TYPES",
    "INTEGER_TYPES",
    "DECIMAL_TYPES",
    "STRING_TYPES",
    "get_traits",
    "requires_length",
    "requires_precision",
    "requires_scale",
    "supports_identity",
    "can_be_primary_key",
    "type_family",
    "to_sql_string",
]

logger.debug("schemaforge.datatypes loaded — %d data types.", len(_CATALOG))
