"""
Feature
=======

Immutable descriptor of a single feature.

A feature is either raw (no parents, produced by a ``FeatureGeneratorStage``
from an input record) or derived (produced by a ``TransformerStage`` from its
parent features). Downstream code tells the two apart through
``origin_stage.kind``.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from ..utils.config import config
from .types import FeatureType

O = TypeVar("O", bound=FeatureType)


class StageKind(Enum):
    """Variant tag of the stage a feature originates from."""
    GENERATOR = "generator"
    TRANSFORMER = "transformer"


def make_uid(prefix: str) -> str:
    """Fresh identifier of the form ``<prefix>_<hex>``."""
    length = max(1, min(config.uid_length, 32))
    return f"{prefix}_{uuid.uuid4().hex[:length]}"


@dataclass(frozen=True, eq=False)
class Feature(Generic[O]):
    """
    Descriptor of one feature.

    Attributes:
        name: Feature name
        feature_type: Output feature type class
        is_response: True for model targets, False for predictors
        origin_stage: Generator (raw) or transformer (derived) stage
        parents: Input features, empty for raw features
        uid: Unique id, prefixed by the type name (raw) or stage name (derived)
    """
    name: str
    feature_type: Type[O]
    is_response: bool
    origin_stage: Any
    parents: Tuple["Feature", ...] = ()
    uid: str = ""

    def __post_init__(self):
        object.__setattr__(self, "parents", tuple(self.parents))
        if not self.uid:
            prefix = (
                self.feature_type.short_name()
                if not self.parents
                else type(self.origin_stage).__name__
            )
            object.__setattr__(self, "uid", make_uid(prefix))

    @property
    def is_raw(self) -> bool:
        return not self.parents

    @property
    def type_name(self) -> str:
        return self.feature_type.type_name()

    def evaluate(self, record: Any) -> O:
        """
        Compute this feature's value for one input record.

        Raw features extract from the record directly; derived features
        evaluate their parents on the same record and transform the results.
        """
        stage = self.origin_stage
        if stage.kind is StageKind.GENERATOR:
            return stage.extract(record)
        values = [parent.evaluate(record) for parent in self.parents]
        return stage.transform(*values)

    def raw_features(self) -> List["Feature"]:
        """Distinct raw ancestors of this feature (itself if raw)."""
        if self.is_raw:
            return [self]
        seen: Dict[str, Feature] = {}
        for parent in self.parents:
            for raw in parent.raw_features():
                seen.setdefault(raw.uid, raw)
        return list(seen.values())

    def transform_with(
        self,
        fn: Callable[..., Any],
        output_type: Type[FeatureType],
        operation_name: str = "transform",
        name: Optional[str] = None,
    ) -> "Feature":
        """Derive a new feature by applying ``fn`` to this feature's value."""
        from .stages import transform_features

        return transform_features(
            fn, self, output_type=output_type, operation_name=operation_name, name=name
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "name": self.name,
            "uid": self.uid,
            "type": self.type_name,
            "is_response": self.is_response,
            "is_raw": self.is_raw,
            "parents": [parent.name for parent in self.parents],
            "origin_stage": self.origin_stage.to_dict(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __repr__(self) -> str:
        return (
            f"Feature(name={self.name!r}, uid={self.uid!r}, "
            f"type={self.feature_type.short_name()}, is_response={self.is_response})"
        )
