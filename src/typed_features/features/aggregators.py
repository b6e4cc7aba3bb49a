"""
Aggregators
===========

Monoid reductions over timestamped feature events.

An aggregator has an identity (``zero``) and an associative ``combine``.
Empty values act as the identity for all built-in aggregators, so folding
a window that contains missing values never discards present ones.

Example:
    >>> events = [Event(datetime(2024, 1, 1), Real(1.0)), Event(datetime(2024, 1, 2), Real(3.0))]
    >>> MaxReal.aggregate(events)
    Real(value=3.0)
"""

import functools
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Generic, Iterable, List, Optional, Type, TypeVar

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

O = TypeVar("O", bound=FeatureType)


@dataclass(frozen=True)
class Event(Generic[O]):
    """A feature value observed at a point in time."""

    date: datetime
    value: O
    is_response: bool = False


def select_events(
    events: Iterable[Event],
    cutoff: Optional[datetime] = None,
    window: Optional[timedelta] = None,
) -> List[Event]:
    """
    Order events by date and keep those inside ``[cutoff - window, cutoff]``.

    Args:
        events: Events to filter
        cutoff: Latest date to keep (defaults to the latest event date)
        window: Maximum time span before the cutoff (unbounded if None)

    Returns:
        Selected events, oldest first
    """
    ordered = sorted(events, key=lambda e: e.date)
    if not ordered:
        return ordered

    if cutoff is not None:
        ordered = [e for e in ordered if e.date <= cutoff]
    if window is not None and ordered:
        end = cutoff if cutoff is not None else ordered[-1].date
        ordered = [e for e in ordered if e.date >= end - window]
    return ordered


class Aggregator(ABC, Generic[O]):
    """Base class for all aggregators."""

    name: str
    output_type: Type[O]

    @property
    def zero(self) -> O:
        return self.output_type()

    @abstractmethod
    def combine(self, left: O, right: O) -> O:
        """Combine two values of the output type."""

    def aggregate(
        self,
        events: Iterable[Event],
        cutoff: Optional[datetime] = None,
        window: Optional[timedelta] = None,
    ) -> O:
        """Fold the selected events left-to-right, starting from ``zero``."""
        selected = select_events(events, cutoff=cutoff, window=window)
        return functools.reduce(
            lambda acc, event: self.combine(acc, event.value), selected, self.zero
        )

    def __str__(self) -> str:
        return self.name


def _skip_empty(left: FeatureType, right: FeatureType) -> Optional[FeatureType]:
    if left.is_empty:
        return right
    if right.is_empty:
        return left
    return None


@dataclass(frozen=True)
class NumericAggregator(Aggregator[O]):
    """Combines present numeric values with a binary function (sum, max, min)."""

    name: str
    output_type: Type[O]
    fn: Callable[[Any, Any], Any]
    identity: Any = None

    @property
    def zero(self) -> O:
        if self.identity is None:
            return self.output_type()
        return self.output_type(self.identity)

    def combine(self, left: O, right: O) -> O:
        shortcut = _skip_empty(left, right)
        if shortcut is not None:
            return shortcut
        return self.output_type(self.fn(left.value, right.value))


@dataclass(frozen=True)
class PickAggregator(Aggregator[O]):
    """Keeps the first or the most recent present value."""

    name: str
    output_type: Type[O]
    keep_last: bool = True

    def combine(self, left: O, right: O) -> O:
        shortcut = _skip_empty(left, right)
        if shortcut is not None:
            return shortcut
        return right if self.keep_last else left


@dataclass(frozen=True)
class LogicalAggregator(Aggregator[Binary]):
    """Logical or/and over binary values."""

    name: str
    any_true: bool = True
    output_type: Type[Binary] = Binary

    def combine(self, left: Binary, right: Binary) -> Binary:
        shortcut = _skip_empty(left, right)
        if shortcut is not None:
            return shortcut
        if self.any_true:
            return Binary(left.value or right.value)
        return Binary(left.value and right.value)


@dataclass(frozen=True)
class ConcatTextAggregator(Aggregator[Text]):
    """Concatenates text values with a separator."""

    name: str = "ConcatText"
    separator: str = " "
    output_type: Type[Text] = Text

    def combine(self, left: Text, right: Text) -> Text:
        shortcut = _skip_empty(left, right)
        if shortcut is not None:
            return shortcut
        return Text(f"{left.value}{self.separator}{right.value}")


@dataclass(frozen=True)
class UnionMapAggregator(Aggregator[O]):
    """Merges maps key by key, combining values present on both sides."""

    name: str
    output_type: Type[O]
    fn: Callable[[Any, Any], Any]

    def combine(self, left: O, right: O) -> O:
        merged = dict(left.value)
        for key, value in right.value.items():
            merged[key] = self.fn(merged[key], value) if key in merged else value
        return self.output_type(merged)


class CustomAggregator(Aggregator[O]):
    """
    Ad hoc aggregator from a zero value and a combine function.

    ``combine`` receives and returns raw values (``float``, ``str``, ...),
    not feature type instances. Empty operands are passed through as
    ``None`` (or ``{}`` for maps), so every event goes through ``combine``.
    """

    name = "CustomAggregator"

    def __init__(self, output_type: Type[O], zero: Any, combine: Callable[[Any, Any], Any]):
        self.output_type = output_type
        self._zero = zero if isinstance(zero, output_type) else output_type(zero)
        self.combine_fn = combine

    @property
    def zero(self) -> O:
        return self._zero

    def combine(self, left: O, right: O) -> O:
        return self.output_type(self.combine_fn(left.value, right.value))

    def __repr__(self) -> str:
        return f"CustomAggregator(output_type={self.output_type.short_name()})"


def _text_join(separator: str) -> Callable[[str, str], str]:
    return lambda a, b: f"{a}{separator}{b}"


SumReal = NumericAggregator("SumReal", Real, operator.add)
SumRealNN = NumericAggregator("SumRealNN", RealNN, operator.add)
SumIntegral = NumericAggregator("SumIntegral", Integral, operator.add)
MaxReal = NumericAggregator("MaxReal", Real, max)
MinReal = NumericAggregator("MinReal", Real, min)
MaxRealNN = NumericAggregator("MaxRealNN", RealNN, max, identity=float("-inf"))
MinRealNN = NumericAggregator("MinRealNN", RealNN, min, identity=float("inf"))
MaxIntegral = NumericAggregator("MaxIntegral", Integral, max)
MinIntegral = NumericAggregator("MinIntegral", Integral, min)

FirstReal = PickAggregator("FirstReal", Real, keep_last=False)
LastReal = PickAggregator("LastReal", Real, keep_last=True)
FirstText = PickAggregator("FirstText", Text, keep_last=False)
LastText = PickAggregator("LastText", Text, keep_last=True)

LogicalOr = LogicalAggregator("LogicalOr", any_true=True)
LogicalAnd = LogicalAggregator("LogicalAnd", any_true=False)

ConcatText = ConcatTextAggregator()

UnionSumRealMap = UnionMapAggregator("UnionSumRealMap", RealMap, operator.add)
UnionMaxRealMap = UnionMapAggregator("UnionMaxRealMap", RealMap, max)
UnionSumIntegralMap = UnionMapAggregator("UnionSumIntegralMap", IntegralMap, operator.add)
UnionBinaryMap = UnionMapAggregator("UnionBinaryMap", BinaryMap, operator.or_)
UnionConcatTextMap = UnionMapAggregator("UnionConcatTextMap", TextMap, _text_join(" "))


def concat_text(separator: str) -> Aggregator:
    """Text concatenation with a custom separator."""
    if separator == ConcatText.separator:
        return ConcatText
    return ConcatTextAggregator(separator=separator)


def union_concat_text_map(separator: str) -> Aggregator:
    """Text map union that joins values present on both sides with ``separator``."""
    if separator == " ":
        return UnionConcatTextMap
    return UnionMapAggregator("UnionConcatTextMap", TextMap, _text_join(separator))
