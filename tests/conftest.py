"""
Pytest Configuration
====================

Shared fixtures and configuration for tests.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import pytest
import pandas as pd

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typed_features.features import (  # noqa: E402
    FeatureGeneratorStage,
    StageKind,
    get_type_registry,
)
from typed_features.features.registry import reset_type_registry  # noqa: E402
from typed_features.utils.config import config  # noqa: E402


@dataclass
class Passenger:
    """Raw domain record used by builder tests."""
    passenger_id: int
    gender: str
    age: Optional[int]
    boarded: int
    height: int
    weight: int
    description: str
    survived: int
    record_date: int
    string_map: Dict[str, str] = field(default_factory=dict)
    numeric_map: Dict[str, float] = field(default_factory=dict)
    boolean_map: Dict[str, bool] = field(default_factory=dict)


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload config and registry around every test so env overrides don't leak."""
    config.use(None)
    reset_type_registry()
    yield
    config.use(None)
    reset_type_registry()


@pytest.fixture
def passenger():
    """Single passenger aged 1."""
    return Passenger(
        passenger_id=0, gender="Male", age=1, boarded=2, height=3,
        weight=4, description="", survived=1, record_date=4,
    )


@pytest.fixture
def container_data():
    """One-row table with a text, an integer and a non-nullable float column."""
    return pd.DataFrame({"s": ["blah1"], "l": [10], "d": [2.0]})


@pytest.fixture
def passengers_data():
    """Sample passenger table."""
    from typed_features.data.load_data import load_passengers_local
    return load_passengers_local()


@pytest.fixture
def mlflow_tracking_uri(tmp_path):
    """Create temporary MLflow tracking URI."""
    import mlflow

    uri = f"sqlite:///{tmp_path}/mlflow.db"
    os.environ["MLFLOW_TRACKING_URI"] = uri
    mlflow.set_tracking_uri(uri)
    yield uri
    os.environ.pop("MLFLOW_TRACKING_URI", None)
    mlflow.set_tracking_uri(None)


@pytest.fixture
def assert_feature():
    """
    Assert a feature's metadata and its value on a given input.

    Raw features are checked through their generator stage (aggregator,
    operation name, window, source); derived ones by evaluation.
    """

    def _assert_feature(
        feature,
        record,
        out,
        name,
        is_response=False,
        parents=(),
        aggregator=None,
        aggregate_window=None,
        input_type=None,
    ):
        out_type = type(out)

        assert feature.name == name
        assert feature.is_response is is_response
        assert feature.parents == tuple(parents)
        assert feature.feature_type is out_type
        assert feature.is_raw == (len(parents) == 0)
        assert feature.type_name == out_type.type_name()

        stage = feature.origin_stage
        assert stage.output_name == name
        assert stage.output_is_response is is_response

        if feature.is_raw:
            assert feature.uid.startswith(out_type.short_name())
            assert stage.kind is StageKind.GENERATOR
            assert isinstance(stage, FeatureGeneratorStage)
            if input_type is not None:
                assert stage.input_type is input_type
            expected = aggregator or get_type_registry().default_aggregator_for(out_type)
            assert stage.aggregator == expected
            assert stage.operation_name == f"{expected}({name})"
            assert stage.extract(record) == out
            assert stage.extract_source
            assert stage.aggregate_window == aggregate_window
            assert stage.uid.startswith("FeatureGeneratorStage")
        else:
            assert feature.uid.startswith(type(stage).__name__)
            assert stage.kind is StageKind.TRANSFORMER
            assert stage.output_type is out_type

        assert feature.evaluate(record) == out

    return _assert_feature
