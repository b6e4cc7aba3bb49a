"""Transformation stages producing derived features."""

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Generic, Optional, Tuple, Type, TypeVar

from .feature import Feature, StageKind, make_uid
from .generator import coerce_value
from .registry import FeatureTypeRegistry, get_type_registry
from .types import FeatureType

O = TypeVar("O", bound=FeatureType)


@dataclass(frozen=True, eq=False)
class TransformerStage(Generic[O]):
    """Origin stage of a derived feature: applies a function to parent values."""
    operation_name: str
    transform_fn: Callable[..., Any]
    output_type: Type[O]
    output_name: str
    output_is_response: bool = False
    input_names: Tuple[str, ...] = ()
    uid: str = ""

    kind: ClassVar[StageKind] = StageKind.TRANSFORMER

    def __post_init__(self):
        if not self.uid:
            object.__setattr__(self, "uid", make_uid(type(self).__name__))

    def transform(self, *values: FeatureType) -> O:
        return coerce_value(self.transform_fn(*values), self.output_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "uid": self.uid,
            "operation_name": self.operation_name,
            "inputs": list(self.input_names),
        }


def transform_features(
    fn: Callable[..., Any],
    *features: Feature,
    output_type: Type[O],
    operation_name: str = "transform",
    name: Optional[str] = None,
    registry: Optional[FeatureTypeRegistry] = None,
) -> Feature[O]:
    """
    Build a derived feature from one or more parent features.

    The result is a response only if every parent is a response.

    Args:
        fn: Function from parent values (in order) to the output value
        *features: Parent features
        output_type: Feature type of the result
        operation_name: Short description of the transformation
        name: Output feature name (defaults to ``<parents>_<operation_name>``)
        registry: Type registry used to validate ``output_type``

    Returns:
        Derived feature
    """
    if not features:
        raise ValueError("At least one input feature is required")
    (registry or get_type_registry()).get(output_type)

    output_name = name or f"{'-'.join(f.name for f in features)}_{operation_name}"
    is_response = all(f.is_response for f in features)
    stage = TransformerStage(
        operation_name=operation_name,
        transform_fn=fn,
        output_type=output_type,
        output_name=output_name,
        output_is_response=is_response,
        input_names=tuple(f.name for f in features),
    )
    return Feature(
        name=output_name,
        feature_type=output_type,
        is_response=is_response,
        origin_stage=stage,
        parents=features,
    )
