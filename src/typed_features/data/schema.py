"""
Table Schema
============

Column metadata for tabular data, inferred from pandas DataFrames.

The schema is the only thing feature derivation needs from the tabular
engine: column names in declaration order, a storage type per column and
whether the column may hold missing values.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from numbers import Integral as IntegralNumber
from numbers import Real as RealNumber
from typing import Any, Iterator, Optional, Set, Tuple

import pandas as pd
from pandas.api import types as ptypes


class StorageType(Enum):
    """Storage representation of a column, independent of the feature type."""
    DOUBLE = "double"
    LONG = "long"
    BOOLEAN = "boolean"
    STRING = "string"
    MAP_DOUBLE = "map<string,double>"
    MAP_LONG = "map<string,long>"
    MAP_BOOLEAN = "map<string,boolean>"
    MAP_STRING = "map<string,string>"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ColumnSpec:
    """
    Schema entry for one column.

    Attributes:
        name: Column name
        storage_type: Storage representation
        nullable: Whether the column may hold missing values
        dtype: Original dtype description (for error messages)
    """
    name: str
    storage_type: StorageType
    nullable: bool = True
    dtype: str = ""


def _scalar_storage_type(value: Any) -> StorageType:
    if isinstance(value, bool):
        return StorageType.BOOLEAN
    if isinstance(value, IntegralNumber):
        return StorageType.LONG
    if isinstance(value, RealNumber):
        return StorageType.DOUBLE
    return StorageType.STRING


_MAP_STORAGE = {
    StorageType.BOOLEAN: StorageType.MAP_BOOLEAN,
    StorageType.LONG: StorageType.MAP_LONG,
    StorageType.DOUBLE: StorageType.MAP_DOUBLE,
    StorageType.STRING: StorageType.MAP_STRING,
}


def _common_storage_type(kinds: Set[StorageType]) -> StorageType:
    """Storage type shared by all values; integers widen to doubles, other mixes are text."""
    if len(kinds) == 1:
        return next(iter(kinds))
    if kinds == {StorageType.LONG, StorageType.DOUBLE}:
        return StorageType.DOUBLE
    return StorageType.STRING


def _object_storage_type(series: pd.Series) -> StorageType:
    """Infer the storage type of an object column from all of its present values."""
    present = series.dropna()
    if present.empty:
        return StorageType.STRING

    mappings = [value for value in present if isinstance(value, Mapping)]
    if not mappings:
        return _common_storage_type({_scalar_storage_type(value) for value in present})
    if len(mappings) != len(present):
        # Maps mixed with scalars have no single feature type
        return StorageType.UNSUPPORTED

    kinds = {
        _scalar_storage_type(value)
        for mapping in mappings
        for value in mapping.values()
    }
    if not kinds:
        return StorageType.MAP_STRING
    return _MAP_STORAGE[_common_storage_type(kinds)]


def storage_type_of(series: pd.Series) -> StorageType:
    """Map a pandas column to its storage type."""
    dtype = series.dtype
    if ptypes.is_bool_dtype(dtype):
        return StorageType.BOOLEAN
    if ptypes.is_integer_dtype(dtype):
        return StorageType.LONG
    if ptypes.is_float_dtype(dtype):
        return StorageType.DOUBLE
    if isinstance(dtype, pd.StringDtype):
        return StorageType.STRING
    if ptypes.is_object_dtype(dtype):
        return _object_storage_type(series)
    return StorageType.UNSUPPORTED


def _is_nullable(series: pd.Series) -> bool:
    # Masked extension dtypes (Float64, Int64, boolean, string) always admit NA
    if isinstance(series.dtype, pd.api.extensions.ExtensionDtype):
        return True
    return bool(series.isna().any())


@dataclass(frozen=True)
class TableSchema:
    """Ordered collection of column specs."""
    columns: Tuple[ColumnSpec, ...]

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "TableSchema":
        """
        Infer a schema from a DataFrame.

        Args:
            df: Input DataFrame

        Returns:
            Schema with one entry per column, in column order
        """
        columns = []
        for position in range(df.shape[1]):
            series = df.iloc[:, position]
            columns.append(
                ColumnSpec(
                    name=str(df.columns[position]),
                    storage_type=storage_type_of(series),
                    nullable=_is_nullable(series),
                    dtype=str(series.dtype),
                )
            )
        return cls(columns=tuple(columns))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def index_of(self, name: str) -> int:
        """Position of the first column called ``name``."""
        for position, column in enumerate(self.columns):
            if column.name == name:
                return position
        raise KeyError(f"Column not found: {name}")

    def get(self, name: str) -> Optional[ColumnSpec]:
        """Get a column spec by name, or None if absent."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)
