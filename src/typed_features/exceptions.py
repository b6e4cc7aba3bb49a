"""
Exceptions
==========

Errors raised while building features.

Build-time and schema-time problems are fatal and propagate to the caller.
Failures inside a user extraction function are never raised: the generator
replaces them with its default value (see ``FeatureGeneratorStage.extract``).
"""

from typing import Any, Dict, Mapping, Optional


class FeatureError(RuntimeError):
    """
    Base class for all feature construction errors.

    Attributes:
        message: Human-readable error message (also the ``str()`` of the error)
        code: Stable, machine-friendly identifier for this error type
        context: Extra debugging information
    """

    default_code: str = "feature_error"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        data = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }
        if self.context:
            data["context"] = dict(self.context)
        return data


class TypeNotSupportedError(FeatureError):
    """Requested feature type (or storage type) is not in the registry."""

    default_code = "type_not_supported"


class ResponseNotFoundError(FeatureError):
    """Named response column is absent from the table schema."""

    default_code = "response_not_found"


class ResponseTypeMismatchError(FeatureError):
    """Named response column has a different feature type than expected."""

    default_code = "response_type_mismatch"


class BuilderConsumedError(FeatureError):
    """A feature builder was used after it produced its feature."""

    default_code = "builder_consumed"


class AggregatorTypeMismatchError(FeatureError):
    """Aggregator output type does not match the feature type."""

    default_code = "aggregator_type_mismatch"


class NonNullableEmptyError(FeatureError, ValueError):
    """A non-nullable feature type was given an empty value."""

    default_code = "non_nullable_empty"
