"""
Unit Tests - Feature Builder
============================

Tests for fluent feature construction.
"""

from datetime import timedelta

import pandas as pd
import pytest

from typed_features.exceptions import (
    AggregatorTypeMismatchError,
    BuilderConsumedError,
    TypeNotSupportedError,
)
from typed_features.features import (
    CustomAggregator,
    FeatureBuilder,
    FeatureType,
    Integral,
    MaxIntegral,
    MaxReal,
    Real,
    RealNN,
    Text,
)
from typed_features.utils.config import config

from conftest import Passenger


def age_as_real(p):
    return Real(p.age)


class TestFeatureBuilder:
    """Tests for building features from domain records."""

    def test_custom_name_predictor(self, passenger, assert_feature):
        """Should build a predictor with a custom name."""
        feature = FeatureBuilder.real("a", input_type=Passenger).extract(age_as_real).as_predictor()
        assert_feature(feature, passenger, Real(1.0), name="a", input_type=Passenger)

    def test_custom_name_response(self, passenger, assert_feature):
        """Should build a response with a custom name."""
        feature = FeatureBuilder(Real, Passenger, "b").extract(age_as_real).as_response()
        assert_feature(feature, passenger, Real(1.0), name="b", is_response=True)

    def test_default_name(self, passenger, assert_feature):
        """Unnamed features should use the default name."""
        feature = FeatureBuilder.real().extract(lambda p: Real(p.age)).as_response()
        assert_feature(feature, passenger, Real(1.0), name="feature", is_response=True)

    def test_default_name_from_environment(self, passenger, monkeypatch):
        """Default name should be configurable via environment."""
        monkeypatch.setenv("TYPED_FEATURES_DEFAULT_NAME", "unnamed")
        config.reload()

        feature = FeatureBuilder.real().extract(age_as_real).as_predictor()
        assert feature.name == "unnamed"

    def test_default_if_extract_raises(self, passenger, assert_feature):
        """Extraction errors should be replaced by the default value."""
        feature = (
            FeatureBuilder.real()
            .extract(lambda p: Real(p.age // 0), Real(123))
            .as_response()
        )
        assert_feature(feature, passenger, Real(123.0), name="feature", is_response=True)

    def test_empty_default_if_extract_raises(self, passenger):
        """Without an explicit default, the type's empty value is used."""
        feature = FeatureBuilder.real().extract(lambda p: Real(p.age // 0)).as_predictor()
        assert feature.evaluate(passenger) == Real()
        assert feature.evaluate(passenger).is_empty

    def test_raw_default_is_wrapped(self, passenger):
        """A raw default value should be wrapped into the feature type."""
        feature = FeatureBuilder.real().extract(lambda p: p.missing, 7).as_predictor()
        assert feature.origin_stage.default_value == Real(7.0)
        assert feature.evaluate(passenger) == Real(7.0)

    def test_raw_extracted_value_is_wrapped(self, passenger):
        """Extraction may return raw values."""
        feature = FeatureBuilder.integral("weight").extract(lambda p: p.weight).as_predictor()
        assert feature.evaluate(passenger) == Integral(4)

    def test_aggregated_feature(self, passenger, assert_feature):
        """Should use a supplied aggregator."""
        feature = FeatureBuilder.real().extract(age_as_real).aggregate(MaxReal).as_predictor()
        assert_feature(feature, passenger, Real(1.0), name="feature", aggregator=MaxReal)
        assert feature.origin_stage.operation_name == "MaxReal(feature)"

    def test_default_aggregator(self, passenger):
        """Without an aggregator, the type default should be used."""
        feature = FeatureBuilder.real("age").extract(age_as_real).as_predictor()
        assert feature.origin_stage.aggregator.name == "SumReal"
        assert feature.origin_stage.operation_name == "SumReal(age)"

    def test_aggregate_window(self, passenger, assert_feature):
        """Should set the aggregate window."""
        feature = (
            FeatureBuilder.real()
            .extract(age_as_real)
            .window(timedelta(milliseconds=123))
            .as_predictor()
        )
        assert_feature(
            feature, passenger, Real(1.0), name="feature",
            aggregate_window=timedelta(milliseconds=123),
        )

    def test_custom_aggregate_function(self, passenger, assert_feature):
        """Should build an aggregator from a combine function."""
        feature = (
            FeatureBuilder.real()
            .extract(age_as_real)
            .aggregate(lambda v1, _: v1)
            .as_predictor()
        )
        aggregator = feature.origin_stage.aggregator
        assert isinstance(aggregator, CustomAggregator)
        assert aggregator.zero == Real()
        assert_feature(feature, passenger, Real(1.0), name="feature", aggregator=aggregator)

    def test_custom_aggregate_function_with_zero(self, passenger, assert_feature):
        """Should build an aggregator from a zero and a combine function."""
        feature = (
            FeatureBuilder.real()
            .extract(age_as_real)
            .aggregate(Real.empty().value, lambda v1, _: v1)
            .as_predictor()
        )
        aggregator = feature.origin_stage.aggregator
        assert aggregator.zero == Real()
        assert aggregator.combine(Real(1.0), Real(2.0)) == Real(1.0)
        assert_feature(feature, passenger, Real(1.0), name="feature", aggregator=aggregator)

    def test_aggregator_type_mismatch(self):
        """An aggregator of another type should be rejected."""
        builder = FeatureBuilder.real().extract(age_as_real)
        with pytest.raises(AggregatorTypeMismatchError):
            builder.aggregate(MaxIntegral)

    def test_invalid_aggregate_arguments(self):
        """aggregate() without usable arguments should raise."""
        builder = FeatureBuilder.real().extract(age_as_real)
        with pytest.raises(TypeError):
            builder.aggregate()
        with pytest.raises(TypeError):
            builder.aggregate(1.0, 2.0)

    def test_window_validation(self):
        """Window should be a non-negative timedelta."""
        builder = FeatureBuilder.real().extract(age_as_real)
        with pytest.raises(TypeError):
            builder.window(123)
        with pytest.raises(ValueError):
            builder.window(timedelta(seconds=-1))

    def test_builder_consumed_once(self):
        """A generator builder should produce exactly one feature."""
        builder = FeatureBuilder.real().extract(age_as_real)
        builder.as_predictor()

        with pytest.raises(BuilderConsumedError):
            builder.as_response()
        with pytest.raises(BuilderConsumedError):
            builder.aggregate(MaxReal)
        with pytest.raises(BuilderConsumedError):
            builder.window(timedelta(days=1))

    def test_unsupported_type(self):
        """Unregistered feature types should fail at build time."""

        class Unregistered(FeatureType):
            pass

        with pytest.raises(TypeNotSupportedError):
            FeatureBuilder(Unregistered)

    def test_fresh_uids(self):
        """Each build should produce distinct uids."""
        f1 = FeatureBuilder.real("x").extract(age_as_real).as_predictor()
        f2 = FeatureBuilder.real("x").extract(age_as_real).as_predictor()
        assert f1.uid != f2.uid
        assert f1 != f2
        assert f1.origin_stage.uid != f2.origin_stage.uid


class TestFeatureBuilderFromRow:
    """Tests for building features that read row cells."""

    def test_from_row_with_name(self, assert_feature):
        """Should read the cell at the given index."""
        feature = FeatureBuilder.from_row(Text, 1, name="feat").as_predictor()
        assert_feature(feature, pd.Series([1.0, "2"]), Text("2"), name="feat")

    def test_from_row_default_name(self, assert_feature):
        """Unnamed row features should use the default name."""
        feature = FeatureBuilder.from_row(Real, 0).as_response()
        assert_feature(feature, (1.0, "2"), Real(1.0), name="feature", is_response=True)

    def test_from_row_by_column_name(self):
        """Without an index, the cell named after the feature is read."""
        feature = FeatureBuilder.from_row(RealNN, name="d").as_response()
        row = pd.Series({"s": "blah1", "d": 2.0})
        assert feature.evaluate(row) == RealNN(2.0)
        assert feature.origin_stage.extract_source == "row['d']"

    def test_from_row_missing_cell(self):
        """Missing cells should become empty values."""
        feature = FeatureBuilder.from_row(Real, 0).as_predictor()
        assert feature.evaluate((None,)) == Real()

    def test_from_row_missing_non_nullable_cell(self):
        """Missing non-nullable cells should fall back to the default."""
        feature = FeatureBuilder.from_row(RealNN, 0).as_predictor()
        assert feature.evaluate((float("nan"),)) == RealNN(0.0)
