"""
Typed feature construction: types, aggregators, registry and builders.
"""

from .aggregators import (
    Aggregator,
    ConcatText,
    CustomAggregator,
    Event,
    FirstReal,
    FirstText,
    LastReal,
    LastText,
    LogicalAnd,
    LogicalOr,
    MaxIntegral,
    MaxReal,
    MaxRealNN,
    MinIntegral,
    MinReal,
    MinRealNN,
    SumIntegral,
    SumReal,
    SumRealNN,
    UnionBinaryMap,
    UnionConcatTextMap,
    UnionMaxRealMap,
    UnionSumIntegralMap,
    UnionSumRealMap,
)
from .builder import FeatureBuilder, FeatureGeneratorBuilder, RowCellExtractor
from .derivation import derive_features
from .feature import Feature, StageKind
from .generator import FeatureGeneratorStage
from .registry import (
    FeatureTypeInfo,
    FeatureTypeRegistry,
    RowConverter,
    get_type_registry,
)
from .stages import TransformerStage, transform_features
from .types import (
    Binary,
    BinaryMap,
    FeatureType,
    Integral,
    IntegralMap,
    Real,
    RealMap,
    RealNN,
    Text,
    TextMap,
)

__all__ = [
    # Types
    "FeatureType",
    "Real",
    "RealNN",
    "Integral",
    "Binary",
    "Text",
    "TextMap",
    "RealMap",
    "IntegralMap",
    "BinaryMap",
    # Aggregators
    "Aggregator",
    "CustomAggregator",
    "Event",
    "SumReal",
    "SumRealNN",
    "SumIntegral",
    "MaxReal",
    "MinReal",
    "MaxRealNN",
    "MinRealNN",
    "MaxIntegral",
    "MinIntegral",
    "FirstReal",
    "LastReal",
    "FirstText",
    "LastText",
    "LogicalOr",
    "LogicalAnd",
    "ConcatText",
    "UnionSumRealMap",
    "UnionMaxRealMap",
    "UnionSumIntegralMap",
    "UnionBinaryMap",
    "UnionConcatTextMap",
    # Registry
    "FeatureTypeInfo",
    "FeatureTypeRegistry",
    "RowConverter",
    "get_type_registry",
    # Features and stages
    "Feature",
    "StageKind",
    "FeatureGeneratorStage",
    "TransformerStage",
    "transform_features",
    # Builders
    "FeatureBuilder",
    "FeatureGeneratorBuilder",
    "RowCellExtractor",
    "derive_features",
]
