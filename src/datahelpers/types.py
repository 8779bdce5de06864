"""
Value and dtype conversion between Python, NumPy, pandas and PyArrow.

This module provides:
- TypeConverter: normalise NumPy/pandas/PyArrow scalars to plain Python values
- pandas_dtype / arrow_type: column value type -> DataFrame dtype
- python_type_from_dtype: DataFrame dtype -> column value type
"""
import datetime
import decimal
import logging
import math
from typing import Any

import numpy as np
import pandas as pd
import pyarrow as pa

logger = logging.getLogger(__name__)

NUMPY_FLOAT_TYPES = (np.floating,)
NUMPY_INT_TYPES = (np.integer, np.unsignedinteger)

# Nullable pandas dtypes keyed by column value type; bool is checked before int
PANDAS_DTYPES: dict[type, str] = {
    bool: 'boolean',
    int: 'Int64',
    float: 'Float64',
    str: 'string',
    datetime.datetime: 'datetime64[ns]',
}

ARROW_TYPES: dict[type, pa.DataType] = {
    bool: pa.bool_(),
    int: pa.int64(),
    float: pa.float64(),
    str: pa.string(),
    bytes: pa.binary(),
    datetime.datetime: pa.timestamp('us'),
    datetime.date: pa.date32(),
    datetime.time: pa.time64('us'),
}


def _lookup(mapping: dict[type, Any], value_type: type) -> Any | None:
    """Find the mapping entry for `value_type` or its nearest base class."""
    for klass in getattr(value_type, '__mro__', (value_type,)):
        if klass in mapping:
            return mapping[klass]
    return None


def pandas_dtype(value_type: type) -> str | None:
    """Nullable pandas dtype for a column value type, None for object."""
    if value_type is datetime.date:
        return None
    return _lookup(PANDAS_DTYPES, value_type)


def arrow_type(value_type: type) -> pa.DataType | None:
    """PyArrow type for a column value type, None to let Arrow infer."""
    return _lookup(ARROW_TYPES, value_type)


def python_type_from_dtype(dtype: Any, sample: Any = None) -> type:
    """Resolve a DataFrame column dtype to a Python value type.

    Object columns fall back to the type of `sample` (the first non-null value)
    and then to `str`.
    """
    if isinstance(dtype, pd.ArrowDtype):
        arrow = dtype.pyarrow_dtype
        if pa.types.is_boolean(arrow):
            return bool
        if pa.types.is_integer(arrow):
            return int
        if pa.types.is_floating(arrow):
            return float
        if pa.types.is_timestamp(arrow):
            return datetime.datetime
        if pa.types.is_date(arrow):
            return datetime.date
        if pa.types.is_decimal(arrow):
            return decimal.Decimal
        if pa.types.is_binary(arrow):
            return bytes
        if pa.types.is_string(arrow) or pa.types.is_large_string(arrow):
            return str

    if pd.api.types.is_bool_dtype(dtype):
        return bool
    if pd.api.types.is_integer_dtype(dtype):
        return int
    if pd.api.types.is_float_dtype(dtype):
        return float
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return datetime.datetime
    if pd.api.types.is_string_dtype(dtype) and sample is None:
        return str

    if sample is not None:
        return type(TypeConverter.convert_value(sample))
    return str


def _convert_numpy_value(val: Any) -> float | int | datetime.datetime | None:
    """Convert NumPy value to Python type."""
    if isinstance(val, np.floating) and np.isnan(val):
        return None

    if isinstance(val, np.datetime64):
        if np.isnat(val):
            return None
        return pd.Timestamp(val).to_pydatetime()

    return val.item()


def _convert_pyarrow_value(value: pa.Scalar) -> Any:
    """Convert PyArrow scalar to Python type."""
    if not value.is_valid:
        return None
    return value.as_py()


class TypeConverter:
    """Universal type conversion for sink parameters.

    Handles NumPy, pandas and PyArrow scalars; NaN, NaT and pandas NA become
    None.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a sink-compatible format."""
        if value is None:
            return None

        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None

        if value is pd.NaT or value is pd.NA:
            return None

        if isinstance(value, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_, np.datetime64)):
            return _convert_numpy_value(value)

        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()

        if isinstance(value, pa.Scalar):
            return _convert_pyarrow_value(value)

        return value

    @staticmethod
    def convert_row(row: tuple[Any, ...]) -> tuple[Any, ...]:
        """Convert every cell of a row."""
        return tuple(TypeConverter.convert_value(v) for v in row)
