"""
Decade segmentation of participation records.

Records are partitioned by the decade of their event date and one
co-occurrence graph is built per decade. Decades are independent: each is
built and measured in isolation, and a failure in one decade is recorded on
that decade instead of aborting the others.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import polars as pl

from ..common.exceptions import NetworkAnalysisError, ValidationError
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..network.graph import CooccurrenceGraph
from ..network.construction import build_cooccurrence_graph, RecordsInput
from ..network.metrics import MetricsRow, compute_graph_metrics, metrics_frame
from ..network.communities import (
    detect_communities,
    summarize_attribute,
    DEFAULT_RARE_THRESHOLD,
    DEFAULT_OTHER_LABEL,
)
from ..records.store import RecordStore, decade_expr

logger = get_logger(__name__)


@dataclass(frozen=True)
class DecadeSlice:
    """
    The co-occurrence graph of one decade.

    Exactly one of ``graph`` and ``error`` is set: ``graph`` when the decade
    was built, ``error`` (the failure message) when it was not.
    """

    decade: int
    graph: Optional[CooccurrenceGraph] = None
    error: Optional[str] = None
    record_count: int = 0

    @property
    def ok(self) -> bool:
        return self.graph is not None


def segment_by_decade(records: RecordsInput, **build_kwargs: Any) -> Dict[int, DecadeSlice]:
    """
    Build one co-occurrence graph per decade.

    Parameters
    ----------
    records : RecordStore or iterable of ParticipationRecord
        Participation records
    **build_kwargs
        Passed to ``build_cooccurrence_graph`` (include_attributes,
        include_isolates, weighted)

    Returns
    -------
    Dict[int, DecadeSlice]
        Ordered by ascending decade. Only decades with at least one record
        appear; a decade whose exhibitions yield no pair has an empty graph.

    Examples
    --------
    >>> slices = segment_by_decade(store)
    >>> [(d, s.graph.number_of_nodes) for d, s in slices.items()]
    [(1930, 4)]
    """
    if "label" in build_kwargs:
        raise ValidationError("label is set per decade and cannot be passed", field="label")

    store = records if isinstance(records, RecordStore) else RecordStore.from_records(records)
    log_function_entry("segment_by_decade", records=len(store), **build_kwargs)

    frame = store.frame.with_columns(decade_expr())
    decades = sorted(frame["decade"].unique().to_list())

    slices: Dict[int, DecadeSlice] = {}
    with LoggingTimer("segment_by_decade", {"records": len(store), "decades": len(decades)}):
        for decade in decades:
            subset = frame.filter(pl.col("decade") == decade).drop("decade")
            try:
                graph = build_cooccurrence_graph(
                    RecordStore(subset), label=decade, **build_kwargs
                )
                slices[decade] = DecadeSlice(decade, graph=graph, record_count=subset.height)
            except NetworkAnalysisError as e:
                logger.error("Decade %d could not be built: %s", decade, e, exc_info=True)
                slices[decade] = DecadeSlice(decade, error=str(e), record_count=subset.height)

    logger.info("Segmented %d records into %d decades: %s", len(store), len(slices), decades)
    return slices


def compute_series(slices: Dict[int, DecadeSlice]) -> List[MetricsRow]:
    """
    Metrics of every decade, sorted by decade.

    A decade that failed to build, or whose metrics fail, yields a row with
    status "failed", the error message and null metrics.
    """
    rows = []
    for decade, decade_slice in sorted(slices.items()):
        if decade_slice.graph is None:
            rows.append(MetricsRow.failed(decade, decade_slice.error or "graph not built"))
            continue
        try:
            rows.append(compute_graph_metrics(decade_slice.graph, decade=decade))
        except NetworkAnalysisError as e:
            logger.error("Metrics for decade %d failed: %s", decade, e, exc_info=True)
            rows.append(MetricsRow.failed(decade, str(e)))

    failed = sum(1 for row in rows if not row.ok)
    if failed:
        logger.warning("%d of %d decades failed", failed, len(rows))
    return rows


def metrics_table(rows: List[MetricsRow]) -> pl.DataFrame:
    """Decade metrics as a DataFrame (one row per decade, null for undefined)."""
    return metrics_frame(rows).sort("decade")


def detect_communities_by_decade(
    slices: Dict[int, DecadeSlice],
    resolution: float = 1.0,
    random_seed: Optional[int] = None
) -> Dict[int, DecadeSlice]:
    """
    Run community detection on every decade graph.

    Returns new slices whose graphs carry community labels. Failed decades
    pass through unchanged; a decade whose detection fails gets its error
    recorded and no graph.
    """
    labelled: Dict[int, DecadeSlice] = {}
    for decade, decade_slice in sorted(slices.items()):
        if decade_slice.graph is None:
            labelled[decade] = decade_slice
            continue
        try:
            graph = detect_communities(decade_slice.graph, resolution=resolution,
                                       random_seed=random_seed)
            labelled[decade] = DecadeSlice(decade, graph=graph,
                                           record_count=decade_slice.record_count)
        except NetworkAnalysisError as e:
            logger.error("Community detection for decade %d failed: %s", decade, e, exc_info=True)
            labelled[decade] = DecadeSlice(decade, error=str(e),
                                           record_count=decade_slice.record_count)
    return labelled


def attribute_distribution_by_decade(
    slices: Dict[int, DecadeSlice],
    attribute: str,
    rare_threshold: float = DEFAULT_RARE_THRESHOLD,
    other_label: str = DEFAULT_OTHER_LABEL,
    collapse_rare: Optional[bool] = None
) -> pl.DataFrame:
    """
    ``summarize_attribute`` for every labelled decade, stacked.

    Returns
    -------
    pl.DataFrame
        Columns decade, community, value, count, proportion. Decades without
        a graph or without community labels are skipped.
    """
    frames = []
    for decade, decade_slice in sorted(slices.items()):
        graph = decade_slice.graph
        if graph is None or not graph.has_communities:
            logger.debug("No %s distribution for decade %d: no labelled graph", attribute, decade)
            continue
        distribution = summarize_attribute(
            graph, attribute,
            rare_threshold=rare_threshold,
            other_label=other_label,
            collapse_rare=collapse_rare
        )
        if distribution.is_empty():
            continue
        frames.append(
            distribution
            .with_columns(pl.lit(decade, dtype=pl.Int64).alias("decade"))
            .select(["decade", "community", "value", "count", "proportion"])
        )

    if not frames:
        return pl.DataFrame(schema={
            "decade": pl.Int64,
            "community": pl.Int64,
            "value": pl.Utf8,
            "count": pl.Int64,
            "proportion": pl.Float64,
        })

    return pl.concat(frames)
