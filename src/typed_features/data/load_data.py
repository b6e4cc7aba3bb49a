"""
Data Loading Module
===================

Load tabular data with pandas and expose rows in the shape feature
extraction expects.
"""

from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from ..utils.logging import get_logger

logger = get_logger(__name__)


READERS = {
    ".csv": pd.read_csv,
    ".parquet": pd.read_parquet,
    ".json": pd.read_json,
}


def load_table(path: Union[str, Path], **read_kwargs) -> pd.DataFrame:
    """
    Load a table from disk.

    Args:
        path: Path to a CSV, Parquet or JSON file
        **read_kwargs: Passed through to the pandas reader

    Returns:
        DataFrame with the table contents
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")

    reader = READERS.get(path.suffix.lower())
    if reader is None:
        raise ValueError(f"Unsupported table format: {path.suffix}")

    logger.info(f"Loading table from: {path}")
    df = reader(path, **read_kwargs)
    logger.info(f"Loaded {len(df):,} rows, {df.shape[1]} columns")

    return df


def row_at(df: pd.DataFrame, position: int) -> pd.Series:
    """
    Return one row of a DataFrame without upcasting its cells.

    ``df.iloc[i]`` coerces a row of int64 and float64 columns to float64,
    which rounds large integers. Cells are read column by column instead
    and kept in an object Series.

    Args:
        df: Input DataFrame
        position: Row position

    Returns:
        Row as a positionally addressable Series
    """
    values = [df.iat[position, column] for column in range(df.shape[1])]
    return pd.Series(values, index=df.columns, dtype=object, name=df.index[position])


def first_row(df: pd.DataFrame) -> pd.Series:
    """
    Return the first row of a DataFrame (the ``head()`` row).

    Args:
        df: Input DataFrame

    Returns:
        Row as a positionally addressable Series
    """
    if df.empty:
        raise ValueError("Cannot take the first row of an empty DataFrame")
    return row_at(df, 0)


def load_passengers_local() -> pd.DataFrame:
    """
    Build a small passenger table for local development and examples.

    Returns:
        pandas DataFrame with one row per passenger
    """
    logger.info("Loading sample passenger table (local)")

    df = pd.DataFrame({
        "passenger_id": np.arange(1, 7, dtype=np.int64),
        "gender": ["Male", "Female", "Female", "Male", None, "Female"],
        "age": [22.0, 38.0, 26.0, 35.0, np.nan, 4.0],
        "height": [170.0, 165.0, 160.0, 180.0, 175.0, 100.0],
        "boarded": [True, True, False, True, False, True],
        "survived": [0.0, 1.0, 1.0, 0.0, 0.0, 1.0],
    })

    logger.info(f"Loaded {len(df)} passengers")

    return df
