"""
Feature Type Registry
=====================

Per-type defaults: aggregator, row conversion and empty value.

The registry also owns the reverse mapping from a column's storage type to
a feature type, used when deriving features from a table schema. Lookups of
unregistered types fail with ``TypeNotSupportedError`` while features are
being built, never during evaluation.

Example:
    >>> registry = get_type_registry()
    >>> str(registry.default_aggregator_for(Real))
    'SumReal'
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

import pandas as pd

from ..data.schema import ColumnSpec, StorageType
from ..exceptions import NonNullableEmptyError, TypeNotSupportedError
from ..utils.config import config
from ..utils.logging import get_logger
from . import aggregators as aggs
from .aggregators import Aggregator
from .types import (
    Binary,
    BinaryMap,
    FeatureType,
    Integral,
    IntegralMap,
    OPMap,
    Real,
    RealMap,
    RealNN,
    Text,
    TextMap,
)

logger = get_logger(__name__)


def is_missing(cell: Any) -> bool:
    """Check if a row cell holds no value (None, NaN, NA, NaT)."""
    if cell is None:
        return True
    if isinstance(cell, (Mapping, list, tuple, set)):
        return False
    try:
        return bool(pd.isna(cell))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class RowConverter:
    """Converts between feature values and row cells for one feature type."""

    feature_type: Type[FeatureType]
    empty_value: FeatureType

    def from_row(self, cell: Any) -> FeatureType:
        """Convert a row cell into a feature value."""
        if is_missing(cell):
            if issubclass(self.feature_type, RealNN):
                raise NonNullableEmptyError(
                    f"{self.feature_type.short_name()} cannot be built from a missing cell"
                )
            return self.empty_value
        if isinstance(cell, self.feature_type):
            return cell
        return self.feature_type(cell)

    def to_row(self, value: FeatureType) -> Any:
        """Convert a feature value into a row cell (None when empty)."""
        if value.is_empty:
            return None
        if isinstance(value, OPMap):
            return dict(value.value)
        return value.value


@dataclass(frozen=True)
class FeatureTypeInfo:
    """
    Registration record for a feature type.

    Attributes:
        feature_type: The feature type class
        default_aggregator: Aggregator used when none is supplied
        empty_value: Default value for failed extractions
        storage_types: Storage types this feature type is inferred from
        nullable: Column nullability required for inference (None = any)
    """

    feature_type: Type[FeatureType]
    default_aggregator: Aggregator
    empty_value: FeatureType
    storage_types: Tuple[StorageType, ...] = ()
    nullable: Optional[bool] = None

    @property
    def converter(self) -> RowConverter:
        return RowConverter(self.feature_type, self.empty_value)

    def matches(self, column: ColumnSpec) -> bool:
        if column.storage_type not in self.storage_types:
            return False
        return self.nullable is None or self.nullable == column.nullable


class FeatureTypeRegistry:
    """
    Registry of supported feature types.

    Reverse lookups try types in registration order, so a non-nullable
    variant must be registered before its nullable counterpart.
    """

    def __init__(self, infos: Optional[List[FeatureTypeInfo]] = None):
        self._infos: Dict[Type[FeatureType], FeatureTypeInfo] = {}
        for info in infos or []:
            self.register(info)

    def register(self, info: FeatureTypeInfo) -> None:
        """Register (or replace) a feature type."""
        aggregator_type = getattr(info.default_aggregator, "output_type", None)
        if aggregator_type is not info.feature_type:
            raise ValueError(
                f"Default aggregator {info.default_aggregator} produces "
                f"{getattr(aggregator_type, '__name__', aggregator_type)}, "
                f"expected {info.feature_type.short_name()}"
            )
        self._infos[info.feature_type] = info
        logger.debug(f"Registered feature type {info.feature_type.short_name()}")

    def is_registered(self, feature_type: Type[FeatureType]) -> bool:
        return feature_type in self._infos

    def registered_types(self) -> List[Type[FeatureType]]:
        return list(self._infos.keys())

    def get(self, feature_type: Type[FeatureType]) -> FeatureTypeInfo:
        """Get the registration record of a feature type."""
        info = self._infos.get(feature_type)
        if info is None:
            name = getattr(feature_type, "__qualname__", repr(feature_type))
            raise TypeNotSupportedError(
                f"Feature type {name} is not supported",
                context={"feature_type": name},
            )
        return info

    def default_aggregator_for(self, feature_type: Type[FeatureType]) -> Aggregator:
        return self.get(feature_type).default_aggregator

    def row_converter_for(self, feature_type: Type[FeatureType]) -> RowConverter:
        return self.get(feature_type).converter

    def empty_value_of(self, feature_type: Type[FeatureType]) -> FeatureType:
        return self.get(feature_type).empty_value

    def feature_type_for(self, column: ColumnSpec) -> Type[FeatureType]:
        """
        Infer the feature type of a table column.

        Args:
            column: Column spec from a table schema

        Returns:
            Feature type class

        Raises:
            TypeNotSupportedError: If no registered type stores this column
        """
        for info in self._infos.values():
            if info.matches(column):
                return info.feature_type
        raise TypeNotSupportedError(
            f"Column '{column.name}' of type {column.dtype or column.storage_type.value} "
            f"is not supported",
            context={"column": column.name, "storage_type": column.storage_type.value},
        )


def default_type_infos(text_separator: str = " ") -> List[FeatureTypeInfo]:
    """Registration records for the built-in feature types."""
    return [
        FeatureTypeInfo(
            RealNN, aggs.SumRealNN, RealNN(0.0),
            storage_types=(StorageType.DOUBLE,), nullable=False,
        ),
        FeatureTypeInfo(Real, aggs.SumReal, Real(), storage_types=(StorageType.DOUBLE,)),
        FeatureTypeInfo(Integral, aggs.SumIntegral, Integral(), storage_types=(StorageType.LONG,)),
        FeatureTypeInfo(Binary, aggs.LogicalOr, Binary(), storage_types=(StorageType.BOOLEAN,)),
        FeatureTypeInfo(
            Text, aggs.concat_text(text_separator), Text(),
            storage_types=(StorageType.STRING,),
        ),
        FeatureTypeInfo(
            RealMap, aggs.UnionSumRealMap, RealMap(),
            storage_types=(StorageType.MAP_DOUBLE,),
        ),
        FeatureTypeInfo(
            IntegralMap, aggs.UnionSumIntegralMap, IntegralMap(),
            storage_types=(StorageType.MAP_LONG,),
        ),
        FeatureTypeInfo(
            BinaryMap, aggs.UnionBinaryMap, BinaryMap(),
            storage_types=(StorageType.MAP_BOOLEAN,),
        ),
        FeatureTypeInfo(
            TextMap, aggs.union_concat_text_map(text_separator), TextMap(),
            storage_types=(StorageType.MAP_STRING,),
        ),
    ]


# Singleton registry instance
_registry_instance: Optional[FeatureTypeRegistry] = None


def get_type_registry() -> FeatureTypeRegistry:
    """
    Get or create the default feature type registry.

    Returns:
        FeatureTypeRegistry instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = FeatureTypeRegistry(default_type_infos(config.text_separator))
        logger.info(
            f"FeatureTypeRegistry initialized with "
            f"{len(_registry_instance.registered_types())} types"
        )
    return _registry_instance


def reset_type_registry() -> None:
    """Drop the default registry so the next access rebuilds it from config."""
    global _registry_instance
    _registry_instance = None
