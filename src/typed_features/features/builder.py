"""
Feature Builder
===============

Fluent construction of raw features.

Example:
    >>> age = (
    ...     FeatureBuilder.real("age", input_type=Passenger)
    ...     .extract(lambda p: Real(p.age), default=Real(0.0))
    ...     .aggregate(MaxReal)
    ...     .window(timedelta(days=7))
    ...     .as_predictor()
    ... )
    >>> age.evaluate(passenger)
    Real(value=22.0)

A ``FeatureGeneratorBuilder`` (returned by ``extract``) is single-use: its
terminal call (``as_predictor`` / ``as_response``) consumes it, and any
later call raises ``BuilderConsumedError``.
"""

from datetime import timedelta
from typing import Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar, Union

import pandas as pd

from ..data.schema import TableSchema
from ..exceptions import AggregatorTypeMismatchError, BuilderConsumedError
from ..utils.config import config
from ..utils.logging import get_logger
from .aggregators import Aggregator, CustomAggregator
from .feature import Feature
from .generator import FeatureGeneratorStage, coerce_value, describe_source
from .registry import FeatureTypeRegistry, RowConverter, get_type_registry
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

logger = get_logger(__name__)

I = TypeVar("I")
O = TypeVar("O", bound=FeatureType)


class RowCellExtractor:
    """
    Extraction function reading one cell of a row.

    Rows are addressed by position when ``index`` is set, otherwise by
    column name. A plain class (rather than a lambda) keeps the function
    picklable for distributed execution engines. Build rows with
    ``data.row_at`` rather than ``df.iloc[i]`` so cells keep their column dtype.
    """

    def __init__(self, converter: RowConverter, index: Optional[int] = None, key: Optional[str] = None):
        if index is None and key is None:
            raise ValueError("Either a column index or a column name is required")
        self.converter = converter
        self.index = index
        self.key = key

    def cell(self, row: Any) -> Any:
        if self.index is None:
            return row[self.key]
        if isinstance(row, pd.Series):
            return row.iloc[self.index]
        return row[self.index]

    def __call__(self, row: Any) -> FeatureType:
        return self.converter.from_row(self.cell(row))

    @property
    def source(self) -> str:
        if self.index is None:
            return f"row[{self.key!r}]"
        return f"row[{self.index}]"

    def __repr__(self) -> str:
        return f"RowCellExtractor({self.source})"


class FeatureBuilder(Generic[I, O]):
    """
    Entry point for building a raw feature.

    Binds the feature name and its input/output types. Call ``extract`` to
    continue with a ``FeatureGeneratorBuilder``.
    """

    def __init__(
        self,
        output_type: Type[O],
        input_type: type = object,
        name: Optional[str] = None,
        registry: Optional[FeatureTypeRegistry] = None,
    ):
        """
        Initialize feature builder.

        Args:
            output_type: Feature type of the built feature
            input_type: Declared type of input records
            name: Feature name (uses the configured default if None)
            registry: Optional type registry (uses singleton if None)

        Raises:
            TypeNotSupportedError: If ``output_type`` is not registered
        """
        self._registry = registry or get_type_registry()
        self._registry.get(output_type)

        self.output_type = output_type
        self.input_type = input_type
        self.name = name or config.default_feature_name

    @classmethod
    def of(
        cls,
        output_type: Type[O],
        name: Optional[str] = None,
        input_type: type = object,
        registry: Optional[FeatureTypeRegistry] = None,
    ) -> "FeatureBuilder":
        return cls(output_type, input_type=input_type, name=name, registry=registry)

    @classmethod
    def real(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(Real, name, **kwargs)

    @classmethod
    def real_nn(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(RealNN, name, **kwargs)

    @classmethod
    def integral(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(Integral, name, **kwargs)

    @classmethod
    def binary(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(Binary, name, **kwargs)

    @classmethod
    def text(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(Text, name, **kwargs)

    @classmethod
    def text_map(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(TextMap, name, **kwargs)

    @classmethod
    def real_map(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(RealMap, name, **kwargs)

    @classmethod
    def integral_map(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(IntegralMap, name, **kwargs)

    @classmethod
    def binary_map(cls, name: Optional[str] = None, **kwargs) -> "FeatureBuilder":
        return cls.of(BinaryMap, name, **kwargs)

    def extract(
        self,
        fn: Callable[[I], Any],
        default: Any = None,
        *,
        source: Optional[str] = None,
    ) -> "FeatureGeneratorBuilder":
        """
        Bind the extraction function.

        Args:
            fn: Function from input record to feature value
            default: Value used when ``fn`` raises (the type's empty value if None)
            source: Readable description of ``fn`` (inspected from ``fn`` if None)

        Returns:
            Builder for the remaining, optional steps
        """
        if default is None:
            default_value = self._registry.empty_value_of(self.output_type)
        else:
            default_value = coerce_value(default, self.output_type)

        return FeatureGeneratorBuilder(
            name=self.name,
            output_type=self.output_type,
            input_type=self.input_type,
            extract_fn=fn,
            extract_source=source or describe_source(fn),
            default_value=default_value,
            registry=self._registry,
        )

    @staticmethod
    def from_row(
        output_type: Type[O],
        index: Optional[int] = None,
        name: Optional[str] = None,
        registry: Optional[FeatureTypeRegistry] = None,
    ) -> "FeatureGeneratorBuilder":
        """
        Start a feature that reads one cell of a row.

        Args:
            output_type: Feature type of the cell
            index: Column position (reads the cell named ``name`` if None)
            name: Feature name
            registry: Optional type registry (uses singleton if None)

        Returns:
            Builder for the remaining, optional steps
        """
        builder = FeatureBuilder(output_type, input_type=pd.Series, name=name, registry=registry)
        converter = builder._registry.row_converter_for(output_type)
        extractor = RowCellExtractor(converter, index=index, key=None if index is not None else builder.name)
        return builder.extract(extractor, source=extractor.source)

    @staticmethod
    def from_dataframe(
        data: Union[pd.DataFrame, TableSchema],
        response: str,
        response_type: Type[FeatureType],
        registry: Optional[FeatureTypeRegistry] = None,
    ) -> Tuple[Feature, List[Feature]]:
        """Derive one feature per column; see ``derive_features``."""
        from .derivation import derive_features

        return derive_features(data, response, response_type, registry=registry)


class FeatureGeneratorBuilder(Generic[I, O]):
    """Optional aggregation steps and terminal role of a raw feature."""

    def __init__(
        self,
        name: str,
        output_type: Type[O],
        input_type: type,
        extract_fn: Callable[[I], Any],
        extract_source: str,
        default_value: O,
        registry: FeatureTypeRegistry,
    ):
        self.name = name
        self.output_type = output_type
        self.input_type = input_type
        self.extract_fn = extract_fn
        self.extract_source = extract_source
        self.default_value = default_value
        self._registry = registry
        self._aggregator: Optional[Aggregator] = None
        self._aggregate_window: Optional[timedelta] = None
        self._consumed = False

    def _check_not_consumed(self) -> None:
        if self._consumed:
            raise BuilderConsumedError(
                f"Feature builder for '{self.name}' has already produced its feature"
            )

    def aggregate(self, *args: Any) -> "FeatureGeneratorBuilder":
        """
        Override the type's default aggregator.

        Accepts one of:
            aggregate(aggregator): use an ``Aggregator`` instance
            aggregate(combine): combine raw values, zero is the type's empty value
            aggregate(zero, combine): combine raw values from an explicit zero

        Returns:
            This builder
        """
        self._check_not_consumed()

        if len(args) == 1 and isinstance(args[0], Aggregator):
            aggregator = args[0]
            if aggregator.output_type is not self.output_type:
                raise AggregatorTypeMismatchError(
                    f"Aggregator {aggregator} produces {aggregator.output_type.type_name()}, "
                    f"but feature '{self.name}' is of type {self.output_type.type_name()}"
                )
        elif len(args) == 1 and callable(args[0]):
            zero = self._registry.empty_value_of(self.output_type)
            aggregator = CustomAggregator(self.output_type, zero, args[0])
        elif len(args) == 2 and callable(args[1]):
            aggregator = CustomAggregator(self.output_type, args[0], args[1])
        else:
            raise TypeError(
                "aggregate() expects an Aggregator, a combine function, "
                "or a zero value and a combine function"
            )

        self._aggregator = aggregator
        return self

    def window(self, duration: timedelta) -> "FeatureGeneratorBuilder":
        """Limit aggregation to events within ``duration`` of the cutoff."""
        self._check_not_consumed()
        if not isinstance(duration, timedelta):
            raise TypeError(f"Aggregate window must be a timedelta, got {type(duration).__name__}")
        if duration < timedelta(0):
            raise ValueError(f"Aggregate window must not be negative: {duration}")
        self._aggregate_window = duration
        return self

    def as_predictor(self) -> Feature[O]:
        """Finish the feature as a model input."""
        return self._build(is_response=False)

    def as_response(self) -> Feature[O]:
        """Finish the feature as a model target."""
        return self._build(is_response=True)

    def _build(self, is_response: bool) -> Feature[O]:
        self._check_not_consumed()
        self._consumed = True

        aggregator = self._aggregator or self._registry.default_aggregator_for(self.output_type)
        stage = FeatureGeneratorStage(
            extract_fn=self.extract_fn,
            extract_source=self.extract_source,
            default_value=self.default_value,
            aggregator=aggregator,
            output_name=self.name,
            output_type=self.output_type,
            input_type=self.input_type,
            output_is_response=is_response,
            aggregate_window=self._aggregate_window,
            log_extract_failures=config.log_extract_failures,
            failure_log_level=config.failure_log_level,
        )
        feature = Feature(
            name=self.name,
            feature_type=self.output_type,
            is_response=is_response,
            origin_stage=stage,
        )

        logger.debug(
            f"Built {'response' if is_response else 'predictor'} feature "
            f"{feature.name} ({feature.uid}): {stage.operation_name}"
        )
        return feature
