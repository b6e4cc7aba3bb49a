"""
typed-features: typed feature construction for ML pipelines.

Declare named, strongly-typed features extracted from raw records or table
rows, with default or custom time-windowed aggregation.
"""

__version__ = "1.0.0"

from .exceptions import (
    AggregatorTypeMismatchError,
    BuilderConsumedError,
    FeatureError,
    NonNullableEmptyError,
    ResponseNotFoundError,
    ResponseTypeMismatchError,
    TypeNotSupportedError,
)
from .features import (
    Feature,
    FeatureBuilder,
    FeatureType,
    derive_features,
    get_type_registry,
)

__all__ = [
    "__version__",
    "AggregatorTypeMismatchError",
    "BuilderConsumedError",
    "FeatureError",
    "NonNullableEmptyError",
    "ResponseNotFoundError",
    "ResponseTypeMismatchError",
    "TypeNotSupportedError",
    "Feature",
    "FeatureBuilder",
    "FeatureType",
    "derive_features",
    "get_type_registry",
]
