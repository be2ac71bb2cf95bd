"""
Tests for cross-decade normalization and trends.
"""

import polars as pl
import pytest

from exhibitnet.common.exceptions import (
    ConfigurationError,
    DegenerateNormalizationError,
    ValidationError,
)
from exhibitnet.timeseries.normalization import normalize_metrics, calculate_metric_trends


def _normalized(long_df, metric):
    return long_df.filter(pl.col("metric") == metric).sort("decade")["normalized"].to_list()


class TestNormalizeMetrics:
    """Min-max scaling per metric."""

    def setup_method(self):
        self.table = pl.DataFrame({
            "decade": [1920, 1930, 1940, 1950],
            "node_count": [2, 10, 6, 4],
            "density": [1.0, 0.2, None, 0.6],
            "diameter": [1, 1, 1, 1],
        })

    def test_long_format(self):
        long_df = normalize_metrics(self.table, metrics=["node_count", "density"])

        assert long_df.columns == ["decade", "metric", "value", "normalized"]
        assert long_df.height == 8
        assert long_df["metric"].unique(maintain_order=True).to_list() == ["node_count", "density"]

    def test_endpoints(self):
        long_df = normalize_metrics(self.table, metrics=["node_count"])

        assert _normalized(long_df, "node_count") == pytest.approx([0.0, 1.0, 0.5, 0.25])

    def test_monotone_in_raw_value(self):
        long_df = normalize_metrics(self.table, metrics=["node_count"]).sort("value")
        normalized = long_df["normalized"].to_list()

        assert normalized == sorted(normalized)

    def test_undefined_stays_null(self):
        long_df = normalize_metrics(self.table, metrics=["density"])
        values = _normalized(long_df, "density")

        assert values[2] is None
        assert values[0] == pytest.approx(1.0)
        assert values[1] == pytest.approx(0.0)
        assert values[3] == pytest.approx(0.5)

    def test_degenerate_zero_policy(self):
        long_df = normalize_metrics(self.table, metrics=["diameter"])
        assert _normalized(long_df, "diameter") == [0.0, 0.0, 0.0, 0.0]

    def test_degenerate_skip_policy(self):
        long_df = normalize_metrics(self.table, metrics=["diameter"], on_degenerate="skip")
        assert _normalized(long_df, "diameter") == [None, None, None, None]

    def test_degenerate_raise_policy(self):
        with pytest.raises(DegenerateNormalizationError) as exc_info:
            normalize_metrics(self.table, metrics=["diameter"], on_degenerate="raise")
        assert exc_info.value.metric == "diameter"

    def test_single_defined_decade_is_degenerate(self):
        table = pl.DataFrame({"decade": [1920, 1930], "density": [None, 0.4]})
        long_df = normalize_metrics(table, metrics=["density"])

        assert _normalized(long_df, "density") == [None, 0.0]

    def test_all_undefined(self):
        table = pl.DataFrame({"decade": [1920], "density": [None]}, schema={"decade": pl.Int64, "density": pl.Float64})
        long_df = normalize_metrics(table, metrics=["density"])

        assert _normalized(long_df, "density") == [None]

    def test_nan_never_leaks(self):
        table = pl.DataFrame({"decade": [1920, 1930, 1940], "density": [0.5, float("nan"), 1.0]})
        long_df = normalize_metrics(table, metrics=["density"])

        assert long_df["normalized"].is_nan().sum() == 0
        assert _normalized(long_df, "density") == [0.0, None, 1.0]

    def test_unknown_policy(self):
        with pytest.raises(ConfigurationError):
            normalize_metrics(self.table, metrics=["node_count"], on_degenerate="mean")

    def test_missing_metric_column(self):
        with pytest.raises(ValidationError):
            normalize_metrics(self.table, metrics=["avg_betweenness"])

    def test_empty_table(self):
        table = pl.DataFrame(schema={"decade": pl.Int64, "density": pl.Float64})
        assert normalize_metrics(table, metrics=["density"]).is_empty()


class TestCalculateMetricTrends:
    """Linear trends over decades."""

    def test_slope_per_decade(self):
        table = pl.DataFrame({"decade": [1920, 1930, 1940], "node_count": [2, 4, 6]})
        trends = calculate_metric_trends(table, metrics=["node_count"])
        row = trends.row(0, named=True)

        assert row["metric"] == "node_count"
        assert row["points"] == 3
        assert row["slope"] == pytest.approx(2.0)
        assert row["r_value"] == pytest.approx(1.0)

    def test_undefined_points_skipped(self):
        table = pl.DataFrame({"decade": [1920, 1930, 1940], "density": [1.0, None, 0.0]})
        row = calculate_metric_trends(table, metrics=["density"]).row(0, named=True)

        assert row["points"] == 2
        assert row["slope"] == pytest.approx(-0.5)

    def test_too_few_points(self):
        table = pl.DataFrame({"decade": [1920, 1930], "density": [None, 0.3]})
        row = calculate_metric_trends(table, metrics=["density"]).row(0, named=True)

        assert row["points"] == 1
        assert row["slope"] is None

    def test_constant_metric(self):
        table = pl.DataFrame({"decade": [1920, 1930, 1940], "diameter": [2, 2, 2]})
        row = calculate_metric_trends(table, metrics=["diameter"]).row(0, named=True)

        assert row["slope"] == 0.0
        assert row["r_value"] is None
