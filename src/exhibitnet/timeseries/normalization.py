"""
Cross-decade comparison of network metrics.

Raw metrics of decades with very different activity are not comparable,
so each metric is min-max scaled over the decades where it is defined.
Trends are linear regression slopes of each metric over decades.
"""

from typing import List, Sequence
import numpy as np
import polars as pl
from scipy import stats

from ..common.config import DEFAULT_METRICS, DEGENERATE_POLICIES
from ..common.exceptions import (
    ValidationError,
    DegenerateNormalizationError,
    validate_parameter,
)
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

LONG_SCHEMA = {
    "decade": pl.Int64,
    "metric": pl.Utf8,
    "value": pl.Float64,
    "normalized": pl.Float64,
}

TREND_SCHEMA = {
    "metric": pl.Utf8,
    "points": pl.Int64,
    "slope": pl.Float64,
    "intercept": pl.Float64,
    "r_value": pl.Float64,
    "p_value": pl.Float64,
}


def normalize_metrics(
    table: pl.DataFrame,
    metrics: Sequence[str] = DEFAULT_METRICS,
    on_degenerate: str = "zero"
) -> pl.DataFrame:
    """
    Min-max normalize each metric across decades.

    Parameters
    ----------
    table : pl.DataFrame
        Output of ``metrics_table`` (one row per decade)
    metrics : Sequence[str]
        Metric columns to normalize
    on_degenerate : str, default "zero"
        What to do with a metric whose defined values are all equal
        (including a single defined decade):
        - "zero": normalized value 0.0 for every defined decade
        - "skip": normalized value null
        - "raise": raise DegenerateNormalizationError

    Returns
    -------
    pl.DataFrame
        Long table with columns decade, metric, value, normalized, ordered by
        metric (in the given order) then decade. Undefined values stay null in
        both columns. Normalized values lie in [0, 1], with 0 at the minimum
        and 1 at the maximum of each metric. NaN never appears.

    Raises
    ------
    ValidationError
        If the table lacks the decade column or a requested metric
    ConfigurationError
        If on_degenerate is not a known policy
    DegenerateNormalizationError
        For a constant metric under the "raise" policy

    Examples
    --------
    >>> long = normalize_metrics(metrics_table(rows), metrics=["density"])
    >>> long.filter(pl.col("metric") == "density")["normalized"].to_list()
    [0.0, 1.0, 0.42...]
    """
    validate_parameter(on_degenerate, DEGENERATE_POLICIES, "on_degenerate", "normalize_metrics")
    _validate_metric_columns(table, metrics)

    with LoggingTimer("normalize_metrics", {"decades": table.height, "metrics": len(metrics)}):
        frames = []
        for metric in metrics:
            column = (
                table
                .select(
                    pl.col("decade").cast(pl.Int64),
                    pl.lit(metric).alias("metric"),
                    pl.col(metric).cast(pl.Float64).fill_nan(None).alias("value"),
                )
                .sort("decade")
            )
            frames.append(_normalize_column(column, metric, on_degenerate))

    if not frames:
        return pl.DataFrame(schema=LONG_SCHEMA)

    return pl.concat(frames).select(list(LONG_SCHEMA))


def _normalize_column(column: pl.DataFrame, metric: str, on_degenerate: str) -> pl.DataFrame:
    defined = column["value"].drop_nulls()

    if defined.len() == 0:
        logger.debug("Metric %s is undefined in every decade", metric)
        return column.with_columns(pl.lit(None, dtype=pl.Float64).alias("normalized"))

    low = defined.min()
    high = defined.max()

    if high == low:
        if on_degenerate == "raise":
            raise DegenerateNormalizationError(
                f"Metric '{metric}' has the same value in every defined decade",
                metric=metric,
                value=float(low)
            )
        logger.info("Metric %s is constant (%s); policy '%s'", metric, low, on_degenerate)
        fill = 0.0 if on_degenerate == "zero" else None
        return column.with_columns(
            pl.when(pl.col("value").is_null())
            .then(None)
            .otherwise(pl.lit(fill, dtype=pl.Float64))
            .cast(pl.Float64)
            .alias("normalized")
        )

    return column.with_columns(
        ((pl.col("value") - low) / (high - low)).alias("normalized")
    )


def calculate_metric_trends(
    table: pl.DataFrame,
    metrics: Sequence[str] = DEFAULT_METRICS
) -> pl.DataFrame:
    """
    Linear trend of each metric over decades.

    The slope is expressed per decade. Decades where the metric is undefined
    are left out of the fit.

    Returns
    -------
    pl.DataFrame
        Columns metric, points, slope, intercept, r_value, p_value. The fit
        values are null when fewer than two decades define the metric.
    """
    _validate_metric_columns(table, metrics)

    rows = []
    for metric in metrics:
        column = (
            table
            .select(pl.col("decade"), pl.col(metric).cast(pl.Float64).fill_nan(None))
            .drop_nulls()
            .sort("decade")
        )
        rows.append(_calculate_trend(metric, column["decade"].to_numpy(), column[metric].to_numpy()))

    return pl.DataFrame(rows, schema=TREND_SCHEMA)


def _calculate_trend(metric: str, decades: np.ndarray, values: np.ndarray) -> dict:
    result = {"metric": metric, "points": int(len(values)),
              "slope": None, "intercept": None, "r_value": None, "p_value": None}

    if len(values) < 2:
        return result

    x = decades.astype(float) / 10.0
    if np.all(values == values[0]):
        result.update(slope=0.0, intercept=float(values[0]))
        return result

    fit = stats.linregress(x, values.astype(float))
    for key, value in (("slope", fit.slope), ("intercept", fit.intercept),
                       ("r_value", fit.rvalue), ("p_value", fit.pvalue)):
        result[key] = None if np.isnan(value) else float(value)
    return result


def _validate_metric_columns(table: pl.DataFrame, metrics: Sequence[str]) -> None:
    if "decade" not in table.columns:
        raise ValidationError("Metrics table has no decade column", field="decade")

    missing: List[str] = [m for m in metrics if m not in table.columns]
    if missing:
        raise ValidationError(
            f"Metrics table lacks columns {missing}",
            field="metrics",
            details={"available_columns": table.columns}
        )
