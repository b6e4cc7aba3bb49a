"""Tabular data access: loading and schema inference."""

from .load_data import (
    first_row,
    row_at,
    load_passengers_local,
    load_table,
)
from .schema import (
    ColumnSpec,
    StorageType,
    TableSchema,
    storage_type_of,
)

__all__ = [
    "first_row",
    "row_at",
    "load_passengers_local",
    "load_table",
    "ColumnSpec",
    "StorageType",
    "TableSchema",
    "storage_type_of",
]
