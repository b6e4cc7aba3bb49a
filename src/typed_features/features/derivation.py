"""
Schema-Driven Feature Derivation
================================

Derive one raw feature per column of a table.
"""

from typing import List, Optional, Tuple, Type, Union

import pandas as pd

from ..data.schema import TableSchema
from ..exceptions import ResponseNotFoundError, ResponseTypeMismatchError
from ..utils.logging import get_logger
from .builder import FeatureBuilder
from .feature import Feature
from .registry import FeatureTypeRegistry, get_type_registry
from .types import FeatureType

logger = get_logger(__name__)


def derive_features(
    data: Union[pd.DataFrame, TableSchema],
    response: str,
    response_type: Type[FeatureType],
    registry: Optional[FeatureTypeRegistry] = None,
) -> Tuple[Feature, List[Feature]]:
    """
    Derive features from a table schema.

    Every column becomes a raw feature reading its cell by position. The
    response column is validated first, then all column types are inferred,
    so no feature is built when any check fails.

    Args:
        data: DataFrame (schema is inferred) or an explicit schema
        response: Name of the response column
        response_type: Expected feature type of the response column
        registry: Optional type registry (uses singleton if None)

    Returns:
        Tuple of (response feature, predictor features in column order)

    Raises:
        ResponseNotFoundError: If no column is called ``response``
        ResponseTypeMismatchError: If the response column has another type
        TypeNotSupportedError: If a column's storage type is not supported
    """
    registry = registry or get_type_registry()
    schema = data if isinstance(data, TableSchema) else TableSchema.from_frame(data)

    response_column = schema.get(response)
    if response_column is None:
        raise ResponseNotFoundError(
            f"Response feature '{response}' was not found in dataframe schema",
            context={"response": response, "columns": list(schema.names)},
        )

    actual_type = registry.feature_type_for(response_column)
    if actual_type is not response_type:
        raise ResponseTypeMismatchError(
            f"Response feature '{response}' is of type {actual_type.type_name()}, "
            f"but expected {response_type.type_name()}",
            context={"response": response},
        )

    column_types = [registry.feature_type_for(column) for column in schema]

    response_feature: Optional[Feature] = None
    predictors: List[Feature] = []
    for position, (column, feature_type) in enumerate(zip(schema, column_types)):
        builder = FeatureBuilder.from_row(
            feature_type, index=position, name=column.name, registry=registry
        )
        if response_feature is None and column.name == response:
            response_feature = builder.as_response()
        else:
            predictors.append(builder.as_predictor())

    logger.info(
        f"Derived {len(predictors) + 1} features from schema: "
        f"response={response} ({response_type.short_name()}), "
        f"predictors={[f.name for f in predictors]}"
    )

    return response_feature, predictors
