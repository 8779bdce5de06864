"""
Column-typed tables built from record sequences.

A Table is a transient snapshot: an ordered tuple of column descriptors plus
one row tuple per record, cells aligned with columns by index. Tables are
built fresh on every call and handed to a sink, to pandas, or discarded.
"""
import logging
import typing
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Self

import pandas as pd
import pyarrow as pa
from datahelpers.cache import DescriptorCache
from datahelpers.describe import AttributeDescriptor, describe
from datahelpers.exceptions import MappingError, ValidationError
from datahelpers.types import TypeConverter, arrow_type, pandas_dtype
from datahelpers.types import python_type_from_dtype

logger = logging.getLogger(__name__)

__all__ = [
    'ColumnDescriptor',
    'Table',
    'to_table',
    'read_record',
    'resolve_record_type',
]


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Name and value type of one table column."""
    name: str
    value_type: type

    @classmethod
    def from_attribute(cls, attribute: AttributeDescriptor) -> Self:
        return cls(name=attribute.name, value_type=attribute.value_type)

    def to_dict(self) -> dict[str, str]:
        return {'name': self.name, 'python_type': self.value_type.__name__}


@dataclass
class Table:
    """In-memory column-typed snapshot of a record sequence.

    Row width is checked on construction. Column value types are declarative:
    cells are not checked against them unless `validate_types()` is called.
    """
    columns: tuple[ColumnDescriptor, ...]
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    name: str | None = None

    def __post_init__(self) -> None:
        self.columns = tuple(self.columns)
        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValidationError(f'Row {i} has {len(row)} cells, expected {width}')

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return iter(self.rows)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def column_index(self, name: str) -> int:
        """Position of the named column; raises KeyError if absent."""
        for i, col in enumerate(self.columns):
            if col.name == name:
                return i
        raise KeyError(name)

    def validate_types(self) -> None:
        """Check every cell is None or an instance of its column value type.

        Raises
            ValidationError: On the first mismatching cell
        """
        for i, row in enumerate(self.rows):
            for col, value in zip(self.columns, row):
                if value is not None and not isinstance(value, col.value_type):
                    raise ValidationError(
                        f'Row {i} column {col.name!r}: expected {col.value_type.__name__},'
                        f' got {type(value).__name__}')

    def get_column_types_dict(self) -> dict[str, dict[str, str]]:
        return {col.name: col.to_dict() for col in self.columns}

    def to_dicts(self) -> list[dict[str, Any]]:
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]

    def to_dataframe(self, dtype_backend: str = 'numpy_nullable') -> pd.DataFrame:
        """Convert to a pandas DataFrame typed after the column value types.

        `numpy_nullable` uses pandas extension dtypes (Int64, boolean, string)
        so nulls survive in integer and boolean columns; `pyarrow` builds an
        Arrow table and maps it to `pd.ArrowDtype` columns. Column metadata is
        stored in `df.attrs['column_types']`.
        """
        names = self.column_names
        columns_data = [[row[i] for row in self.rows] for i in range(len(names))]

        if dtype_backend == 'pyarrow':
            arrays = [pa.array(values, type=arrow_type(col.value_type))
                      for col, values in zip(self.columns, columns_data)]
            df = pa.table(arrays, names=names).to_pandas(types_mapper=pd.ArrowDtype)
        elif dtype_backend == 'numpy_nullable':
            df = pd.DataFrame({
                col.name: pd.Series(values, dtype=pandas_dtype(col.value_type) or object)
                for col, values in zip(self.columns, columns_data)
                }, columns=names)
        else:
            raise ValueError(f'Unsupported dtype_backend: {dtype_backend}')

        df.attrs['column_types'] = self.get_column_types_dict()
        return df

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, name: str | None = None) -> Self:
        """Build a table from a DataFrame.

        Column types are resolved from the frame's dtypes; NaN, NaT and
        NumPy/Arrow scalars are normalised to plain Python values.
        """
        columns = []
        for col_name in df.columns:
            series = df[col_name]
            non_null = series.dropna()
            sample = non_null.iloc[0] if len(non_null) else None
            columns.append(ColumnDescriptor(str(col_name), python_type_from_dtype(series.dtype, sample)))

        rows = [TypeConverter.convert_row(row)
                for row in df.itertuples(index=False, name=None)]
        return cls(tuple(columns), rows, name=name)


def read_record(record: Any, attributes: tuple[AttributeDescriptor, ...],
                index: int | None = None) -> tuple[Any, ...]:
    """Read every attribute of one record into a row tuple.

    Any exception raised while reading is re-raised as MappingError.
    """
    values = []
    for attribute in attributes:
        try:
            values.append(attribute.get_value(record))
        except Exception as e:
            where = f' at index {index}' if index is not None else ''
            raise MappingError(
                f'Could not read {attribute.name!r} from {type(record).__name__}{where}: {e}'
                ) from e
    return tuple(values)


def resolve_record_type(records: list[Any], record_type: type | None) -> type:
    """Record type of a materialized sequence, the type of the first record by default.

    Raises
        ValidationError: If the sequence is empty and no type is given, or the
            type is a plain mapping with no declared keys
    """
    if record_type is None:
        if not records:
            raise ValidationError('record_type is required to convert an empty sequence')
        record_type = type(records[0])

    if isinstance(record_type, type) and not typing.is_typeddict(record_type) \
            and issubclass(record_type, Mapping):
        raise ValidationError(
            f'{record_type.__name__} records declare no columns; pass a TypedDict as record_type')
    return record_type


def to_table(records: Iterable[Any], record_type: type | None = None,
             cache: DescriptorCache | None = None) -> Table:
    """Convert a sequence of records into a column-typed table.

    Columns follow the descriptor order of `record_type` (the type of the
    first record when omitted); one row per record, in input order. The input
    is consumed exactly once.
    """
    records = list(records)
    record_type = resolve_record_type(records, record_type)

    attributes = describe(record_type, cache)
    columns = tuple(ColumnDescriptor.from_attribute(a) for a in attributes)
    rows = [read_record(record, attributes, i) for i, record in enumerate(records)]

    logger.debug(f'Built table {record_type.__name__} with {len(columns)} columns and {len(rows)} rows')
    return Table(columns, rows, name=record_type.__name__)
