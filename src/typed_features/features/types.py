"""
Feature Types
=============

Immutable value types carried by features.

Every feature has exactly one of these as its output type. Values are
normalised on construction, so ``Real(1) == Real(1.0)`` and ``Real(nan)``
is empty.
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..exceptions import NonNullableEmptyError


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _to_int(value: Any) -> int:
    # Integers and digit strings convert exactly, without a float round trip
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"Expected an integral value, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class FeatureType:
    """Base class for all feature value types."""

    value: Any = None

    @property
    def is_empty(self) -> bool:
        return self.value is None

    @classmethod
    def empty(cls) -> "FeatureType":
        return cls()

    @classmethod
    def type_name(cls) -> str:
        """Fully-qualified type name, e.g. ``typed_features.features.types.Real``."""
        return f"{cls.__module__}.{cls.__qualname__}"

    @classmethod
    def short_name(cls) -> str:
        return cls.__name__


@dataclass(frozen=True)
class Real(FeatureType):
    """Nullable floating point value."""

    value: Optional[float] = None

    def __post_init__(self):
        value = self.value
        if value is not None:
            value = float(value)
            if math.isnan(value):
                value = None
        object.__setattr__(self, "value", value)


@dataclass(frozen=True)
class RealNN(Real):
    """Non-nullable floating point value, typically used for responses."""

    value: float = 0.0

    def __post_init__(self):
        if self.value is None or _is_nan(self.value):
            raise NonNullableEmptyError("RealNN cannot be empty")
        object.__setattr__(self, "value", float(self.value))

    @classmethod
    def empty(cls) -> "RealNN":
        raise NonNullableEmptyError("RealNN cannot be empty")


@dataclass(frozen=True)
class Integral(FeatureType):
    """Nullable integer value."""

    value: Optional[int] = None

    def __post_init__(self):
        value = self.value
        if value is not None and not _is_nan(value):
            object.__setattr__(self, "value", _to_int(value))
        else:
            object.__setattr__(self, "value", None)


@dataclass(frozen=True)
class Binary(FeatureType):
    """Nullable boolean value."""

    value: Optional[bool] = None

    def __post_init__(self):
        value = self.value
        if value is not None and not _is_nan(value):
            object.__setattr__(self, "value", bool(value))
        else:
            object.__setattr__(self, "value", None)


@dataclass(frozen=True)
class Text(FeatureType):
    """Nullable string value."""

    value: Optional[str] = None

    def __post_init__(self):
        value = self.value
        if value is not None and not _is_nan(value):
            object.__setattr__(self, "value", str(value))
        else:
            object.__setattr__(self, "value", None)


@dataclass(frozen=True)
class OPMap(FeatureType):
    """Base class for string-keyed map values. Empty means no keys."""

    value: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        items = self.value or {}
        convert = type(self)._element
        object.__setattr__(
            self, "value", {str(k): convert(v) for k, v in dict(items).items()}
        )

    # Converts a single map value; overridden per map type.
    @staticmethod
    def _element(value: Any) -> Any:
        return value

    @property
    def is_empty(self) -> bool:
        return not self.value


@dataclass(frozen=True)
class TextMap(OPMap):
    """Map of string values."""

    _element = staticmethod(str)


@dataclass(frozen=True)
class RealMap(OPMap):
    """Map of floating point values."""

    _element = staticmethod(float)


@dataclass(frozen=True)
class IntegralMap(OPMap):
    """Map of integer values."""

    _element = staticmethod(_to_int)


@dataclass(frozen=True)
class BinaryMap(OPMap):
    """Map of boolean values."""

    _element = staticmethod(bool)
