"""Mapping of source column types onto Arrow types.

Types are taken from what the source declares, not from the fetched values,
so an empty result keeps its schema and a nullable integer column stays an
integer. ``None`` means "unknown": the column type is inferred from its values.
"""
from __future__ import annotations

import datetime
import decimal
import logging
from typing import Any, Dict, List, Optional, Sequence

import pyarrow as pa

from dbexport.data_access.engines import DatabaseType
from dbexport.errors import QueryError

logger = logging.getLogger(__name__)


def arrow_type_from_declared(declared: Optional[str]) -> Optional[pa.DataType]:
    """Map a declared column type (``VARCHAR(20)``, ``BIGINT``, ...) to Arrow.

    Follows SQLite's type-affinity rules, which match the common names used
    by the other engines as well.
    """
    if not declared:
        return None
    normalized = declared.strip().upper()
    if "INT" in normalized:
        return pa.int64()
    if any(token in normalized for token in ("CHAR", "CLOB", "TEXT")):
        return pa.string()
    if "BLOB" in normalized:
        return pa.binary()
    if any(token in normalized for token in ("REAL", "FLOA", "DOUB", "NUMERIC", "DECIMAL")):
        return pa.float64()
    if "BOOL" in normalized:
        return pa.bool_()
    if "TIMESTAMP" in normalized or "DATETIME" in normalized:
        return pa.timestamp("us")
    if normalized == "DATE":
        return pa.date32()
    return None


def _decimal_type(precision: Any, scale: Any) -> Optional[pa.DataType]:
    if not isinstance(precision, int) or not isinstance(scale, int):
        return None
    if 0 < precision <= 38 and 0 <= scale <= precision:
        return pa.decimal128(precision, scale)
    return None


# psycopg2 reports the column type OID
_POSTGRES_OIDS: Dict[int, pa.DataType] = {
    16: pa.bool_(),
    17: pa.binary(),
    18: pa.string(),
    19: pa.string(),
    20: pa.int64(),
    21: pa.int16(),
    23: pa.int32(),
    25: pa.string(),
    26: pa.int64(),
    700: pa.float32(),
    701: pa.float64(),
    1042: pa.string(),
    1043: pa.string(),
    1082: pa.date32(),
    1083: pa.time64("us"),
    1114: pa.timestamp("us"),
    1184: pa.timestamp("us", tz="UTC"),
    2950: pa.string(),
}
_POSTGRES_NUMERIC = 1700

# PyMySQL reports a FIELD_TYPE constant
_MYSQL_FIELD_TYPES: Dict[int, pa.DataType] = {
    1: pa.int64(),
    2: pa.int64(),
    3: pa.int64(),
    4: pa.float32(),
    5: pa.float64(),
    7: pa.timestamp("us"),
    8: pa.int64(),
    9: pa.int64(),
    10: pa.date32(),
    12: pa.timestamp("us"),
    13: pa.int64(),
    14: pa.date32(),
    15: pa.string(),
    247: pa.string(),
    253: pa.string(),
    254: pa.string(),
}
_MYSQL_DECIMALS = {0, 246}

# pyodbc reports the Python class values are returned as
_PYTHON_TYPES: Dict[type, pa.DataType] = {
    bool: pa.bool_(),
    int: pa.int64(),
    float: pa.float64(),
    str: pa.string(),
    bytes: pa.binary(),
    bytearray: pa.binary(),
    datetime.datetime: pa.timestamp("us"),
    datetime.date: pa.date32(),
    datetime.time: pa.time64("us"),
}


def arrow_type_from_description(entry: Sequence[Any], database_type: DatabaseType) -> Optional[pa.DataType]:
    """Map one DB-API ``cursor.description`` entry to an Arrow type."""
    type_code = entry[1] if len(entry) > 1 else None
    if type_code is None:
        return None
    precision = entry[4] if len(entry) > 4 else None
    scale = entry[5] if len(entry) > 5 else None

    if database_type == DatabaseType.POSTGRES:
        if type_code == _POSTGRES_NUMERIC:
            return _decimal_type(precision, scale)
        return _POSTGRES_OIDS.get(type_code)
    if database_type == DatabaseType.MYSQL:
        if type_code in _MYSQL_DECIMALS:
            return _decimal_type(precision, scale)
        return _MYSQL_FIELD_TYPES.get(type_code)
    if database_type == DatabaseType.SQLSERVER:
        if type_code is decimal.Decimal:
            return _decimal_type(precision, scale)
        return _PYTHON_TYPES.get(type_code)
    return None


def _column_array(name: str, values: List[Any], arrow_type: Optional[pa.DataType]) -> pa.Array:
    if arrow_type is not None:
        try:
            return pa.array(values, type=arrow_type)
        except (pa.ArrowInvalid, pa.ArrowTypeError, OverflowError) as exc:
            # SQLite only records a type affinity, so stored values may not match it
            logger.warning(
                "Column %r does not fit declared type %s, inferring from values: %s", name, arrow_type, exc
            )
    try:
        return pa.array(values)
    except (pa.ArrowInvalid, pa.ArrowTypeError, OverflowError) as exc:
        raise QueryError(f"Column {name!r} holds values of incompatible types: {exc}") from exc


def build_table(
    names: Sequence[str],
    rows: Sequence[Sequence[Any]],
    types: Sequence[Optional[pa.DataType]],
) -> pa.Table:
    """Assemble fetched rows into an Arrow table using the given column types."""
    columns = list(zip(*rows)) if rows else [() for _ in names]
    arrays = [
        _column_array(name, list(values), arrow_type)
        for name, values, arrow_type in zip(names, columns, types)
    ]
    return pa.Table.from_arrays(arrays, names=list(names))
