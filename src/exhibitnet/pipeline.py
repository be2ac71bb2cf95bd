"""
End-to-end decade analysis.

``run_pipeline`` chains the library's operations in the order an analysis
of an exhibition history needs them: segment records by decade, measure
each decade, normalize and trend the metrics, detect communities and
summarize gender and nationality per community, and optionally write one
snapshot per decade.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
import polars as pl

from .common.config import PipelineConfig
from .common.logging_config import get_logger, log_function_entry, LoggingTimer
from .network.construction import RecordsInput
from .network.metrics import MetricsRow
from .network.export import export_decade_snapshots
from .records.store import RecordStore
from .timeseries.segmentation import (
    DecadeSlice,
    segment_by_decade,
    compute_series,
    metrics_table,
    detect_communities_by_decade,
    attribute_distribution_by_decade,
)
from .timeseries.normalization import normalize_metrics, calculate_metric_trends

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Everything produced by one ``run_pipeline`` call."""

    config: PipelineConfig
    slices: Dict[int, DecadeSlice]
    rows: List[MetricsRow]
    metrics: pl.DataFrame
    normalized: pl.DataFrame
    trends: pl.DataFrame
    gender: pl.DataFrame
    nationality: pl.DataFrame
    snapshots: Dict[int, Path] = field(default_factory=dict)

    @property
    def decades(self) -> List[int]:
        return sorted(self.slices)

    @property
    def failed_decades(self) -> List[int]:
        return [row.decade for row in self.rows if not row.ok]


def run_pipeline(
    records: Union[RecordsInput, pl.DataFrame, str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[PipelineConfig] = None
) -> PipelineResult:
    """
    Run the full decade analysis.

    Parameters
    ----------
    records : RecordStore, iterable of ParticipationRecord, DataFrame or path
        Participation records
    output_dir : str or Path, optional
        Directory for per-decade snapshots. Nothing is written when omitted.
    config : PipelineConfig, optional
        Analysis parameters. Defaults to ``PipelineConfig.from_env()``.

    Returns
    -------
    PipelineResult

    Raises
    ------
    MissingDataError
        If records lack a required field
    DegenerateNormalizationError
        Under the "raise" policy when a metric is constant across decades

    Examples
    --------
    >>> result = run_pipeline(store, output_dir="snapshots")
    >>> result.metrics.select("decade", "node_count", "density")
    """
    config = config or PipelineConfig.from_env()
    log_function_entry("run_pipeline", output_dir=output_dir, config=config)

    if isinstance(records, (pl.DataFrame, str, Path)):
        store = RecordStore.from_dataframe(records)
    elif isinstance(records, RecordStore):
        store = records
    else:
        store = RecordStore.from_records(records)

    with LoggingTimer("run_pipeline", {"records": len(store)}):
        slices = segment_by_decade(store, **config.build_options())

        rows = compute_series(slices)
        table = metrics_table(rows)
        metrics = list(config.metrics)
        normalized = normalize_metrics(table, metrics=metrics, on_degenerate=config.on_degenerate)
        trends = calculate_metric_trends(table, metrics=metrics)

        labelled = detect_communities_by_decade(
            slices, resolution=config.resolution, random_seed=config.random_seed
        )

        if config.include_attributes:
            gender = attribute_distribution_by_decade(
                labelled, "gender",
                rare_threshold=config.rare_threshold, other_label=config.other_label
            )
            nationality = attribute_distribution_by_decade(
                labelled, "nationality",
                rare_threshold=config.rare_threshold, other_label=config.other_label
            )
        else:
            gender = attribute_distribution_by_decade({}, "gender")
            nationality = attribute_distribution_by_decade({}, "nationality")

        snapshots: Dict[int, Path] = {}
        if output_dir is not None:
            snapshots = export_decade_snapshots(
                labelled, output_dir, format=config.snapshot_format, overwrite=True
            )

    result = PipelineResult(
        config=config,
        slices=labelled,
        rows=rows,
        metrics=table,
        normalized=normalized,
        trends=trends,
        gender=gender,
        nationality=nationality,
        snapshots=snapshots,
    )

    logger.info("Pipeline finished: %d decades (%d failed), %d snapshots",
                len(result.decades), len(result.failed_decades), len(snapshots))
    return result
