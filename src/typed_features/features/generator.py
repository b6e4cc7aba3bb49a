"""
Feature Generator
=================

Stage that turns one raw input record into one feature value.

Extraction failures are recovered locally: if the user function raises,
the stage returns its default value instead, so a single malformed record
cannot abort a pass over a large dataset. Stages hold no mutable state and
may be evaluated concurrently on independent records.
"""

import inspect
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, ClassVar, Dict, Generic, Iterable, Optional, Tuple, Type, TypeVar

from ..utils.logging import get_logger
from .aggregators import Aggregator, Event
from .feature import StageKind, make_uid
from .types import FeatureType

logger = get_logger(__name__)

I = TypeVar("I")
O = TypeVar("O", bound=FeatureType)


def describe_source(fn: Callable[..., Any]) -> str:
    """Human-readable source of a function, falling back to its repr."""
    try:
        source = inspect.getsource(fn).strip()
    except (OSError, TypeError):
        source = ""
    return source or repr(fn)


def coerce_value(value: Any, output_type: Type[O]) -> O:
    """Wrap a raw value (or a value of another feature type) into ``output_type``."""
    if type(value) is output_type:
        return value
    if isinstance(value, FeatureType):
        value = value.value
    return output_type(value)


@dataclass(frozen=True, eq=False)
class FeatureGeneratorStage(Generic[I, O]):
    """
    Origin stage of a raw feature.

    Attributes:
        extract_fn: Function from input record to feature value
        extract_source: Readable source of ``extract_fn`` (display only)
        default_value: Value returned when ``extract_fn`` raises
        aggregator: Aggregator used to combine events
        output_name: Name of the produced feature
        output_type: Feature type class of the produced feature
        input_type: Declared type of input records
        output_is_response: Whether the produced feature is a response
        aggregate_window: Time span of events to aggregate (None = unbounded)
        log_extract_failures: Log extraction failures before masking them
        failure_log_level: Level used for those log records
    """
    extract_fn: Callable[[I], O]
    extract_source: str
    default_value: O
    aggregator: Aggregator
    output_name: str
    output_type: Type[O]
    input_type: type = object
    output_is_response: bool = False
    aggregate_window: Optional[timedelta] = None
    log_extract_failures: bool = False
    failure_log_level: int = logging.DEBUG
    uid: str = ""

    kind: ClassVar[StageKind] = StageKind.GENERATOR

    def __post_init__(self):
        if not self.uid:
            object.__setattr__(self, "uid", make_uid(type(self).__name__))

    @property
    def operation_name(self) -> str:
        return f"{self.aggregator}({self.output_name})"

    def extract(self, record: I) -> O:
        """Extract the feature value from one record, or the default on failure."""
        try:
            return coerce_value(self.extract_fn(record), self.output_type)
        except Exception as exc:
            if self.log_extract_failures:
                logger.log(
                    self.failure_log_level,
                    f"Extraction failed for feature '{self.output_name}', "
                    f"using default {self.default_value!r}: {exc!r}",
                )
            return self.default_value

    def event(
        self, record: I, date: datetime, is_response: Optional[bool] = None
    ) -> Event:
        """Extract one record into a timestamped event."""
        if is_response is None:
            is_response = self.output_is_response
        return Event(date=date, value=self.extract(record), is_response=is_response)

    def aggregate(
        self, events: Iterable[Event], cutoff: Optional[datetime] = None
    ) -> O:
        """Aggregate events with this stage's aggregator and window."""
        return self.aggregator.aggregate(
            events, cutoff=cutoff, window=self.aggregate_window
        )

    def generate(
        self,
        timed_records: Iterable[Tuple[datetime, I]],
        cutoff: Optional[datetime] = None,
    ) -> O:
        """
        Extract and aggregate a sequence of timestamped records.

        Args:
            timed_records: ``(date, record)`` pairs
            cutoff: Latest date to include (defaults to the latest record)

        Returns:
            Aggregated feature value
        """
        events = [self.event(record, date) for date, record in timed_records]
        return self.aggregate(events, cutoff=cutoff)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "kind": self.kind.value,
            "uid": self.uid,
            "operation_name": self.operation_name,
            "aggregator": str(self.aggregator),
            "aggregate_window_seconds": (
                self.aggregate_window.total_seconds()
                if self.aggregate_window is not None
                else None
            ),
            "input_type": getattr(self.input_type, "__name__", str(self.input_type)),
            "extract_source": self.extract_source,
        }
