"""
Unit Tests - Schema Derivation
==============================

Tests for deriving features from table schemas.
"""

import numpy as np
import pandas as pd
import pytest

from typed_features.data.load_data import first_row, row_at
from typed_features.data.schema import ColumnSpec, StorageType, TableSchema
from typed_features.exceptions import (
    ResponseNotFoundError,
    ResponseTypeMismatchError,
    TypeNotSupportedError,
)
from typed_features.features import (
    Binary,
    FeatureBuilder,
    Integral,
    Real,
    RealNN,
    Text,
    derive_features,
)


class TestDeriveFeatures:
    """Tests for schema-driven derivation."""

    def test_features_from_dataframe(self, container_data, assert_feature):
        """Should derive a response and ordered predictors."""
        row = first_row(container_data)
        label, (fs, fl) = FeatureBuilder.from_dataframe(container_data, response="d", response_type=RealNN)

        assert_feature(label, row, RealNN(2.0), name="d", is_response=True)
        assert_feature(fs, row, Text("blah1"), name="s")
        assert_feature(fl, row, Integral(10), name="l")

    def test_response_not_found(self, container_data):
        """Unknown response names should fail with the column name."""
        with pytest.raises(ResponseNotFoundError) as exc_info:
            FeatureBuilder.from_dataframe(container_data, response="non_existent", response_type=RealNN)

        assert str(exc_info.value) == "Response feature 'non_existent' was not found in dataframe schema"
        assert isinstance(exc_info.value, RuntimeError)

    def test_response_type_mismatch(self, container_data):
        """Wrongly typed responses should report both type names."""
        with pytest.raises(ResponseTypeMismatchError) as exc_info:
            FeatureBuilder.from_dataframe(container_data, response="s", response_type=RealNN)
        assert str(exc_info.value) == (
            "Response feature 's' is of type typed_features.features.types.Text, "
            "but expected typed_features.features.types.RealNN"
        )

        with pytest.raises(ResponseTypeMismatchError) as exc_info:
            FeatureBuilder.from_dataframe(container_data, response="d", response_type=Text)
        assert str(exc_info.value) == (
            "Response feature 'd' is of type typed_features.features.types.RealNN, "
            "but expected typed_features.features.types.Text"
        )

    def test_predictor_order_follows_schema(self):
        """Predictors should keep the schema column order."""
        df = pd.DataFrame({"c": [1], "target": [0.5], "a": ["x"], "b": [True]})
        label, predictors = derive_features(df, "target", RealNN)

        assert label.name == "target"
        assert [f.name for f in predictors] == ["c", "a", "b"]
        assert [f.feature_type for f in predictors] == [Integral, Text, Binary]
        assert all(not f.is_response for f in predictors)
        assert all(f.is_raw for f in predictors)

    def test_nullable_response(self):
        """Float columns with missing values should be Real."""
        df = pd.DataFrame({"y": [1.0, None], "x": ["a", "b"]})

        label, _ = derive_features(df, "y", Real)
        assert label.feature_type is Real

        with pytest.raises(ResponseTypeMismatchError):
            derive_features(df, "y", RealNN)

    def test_evaluates_every_row(self, passengers_data):
        """Derived features should evaluate on each row of the table."""
        label, predictors = derive_features(passengers_data, "survived", RealNN)
        by_name = {f.name: f for f in predictors}

        values = [label.evaluate(row) for _, row in passengers_data.iterrows()]
        assert values == [RealNN(v) for v in passengers_data["survived"]]

        missing_age = passengers_data.iloc[4]
        assert by_name["age"].feature_type is Real
        assert by_name["age"].evaluate(missing_age) == Real()
        assert by_name["gender"].evaluate(missing_age) == Text()
        assert by_name["boarded"].evaluate(missing_age) == Binary(False)

    def test_explicit_schema(self):
        """Should accept an explicit schema instead of a DataFrame."""
        schema = TableSchema(columns=(
            ColumnSpec("id", StorageType.LONG, nullable=False),
            ColumnSpec("score", StorageType.DOUBLE, nullable=True),
            ColumnSpec("label", StorageType.DOUBLE, nullable=False),
        ))
        label, predictors = derive_features(schema, "label", RealNN)

        assert label.evaluate((7, None, 1.0)) == RealNN(1.0)
        assert [f.feature_type for f in predictors] == [Integral, Real]
        assert predictors[1].evaluate((7, None, 1.0)) == Real()

    def test_unsupported_column_fails_before_building(self):
        """Unsupported column types should fail the whole derivation."""
        df = pd.DataFrame({
            "when": pd.to_datetime(["2024-01-01"]),
            "y": [1.0],
        })
        with pytest.raises(TypeNotSupportedError):
            derive_features(df, "y", RealNN)

    def test_large_integer_ids_survive_row_reads(self):
        """Integer cells should not be upcast by float columns in the same row."""
        big = 2**53 + 1
        df = pd.DataFrame({
            "id": np.array([big, 1], dtype=np.int64),
            "score": [0.5, 1.5],
        })
        label, (id_feature,) = derive_features(df, "score", RealNN)

        assert id_feature.feature_type is Integral
        assert id_feature.evaluate(first_row(df)) == Integral(big)
        assert id_feature.evaluate(row_at(df, 1)) == Integral(1)
        assert label.evaluate(row_at(df, 1)) == RealNN(1.5)
