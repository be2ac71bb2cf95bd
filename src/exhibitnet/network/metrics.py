"""
Structural metrics of co-occurrence graphs.

Metrics that are mathematically undefined for a graph (the density of a
single node, the diameter of a graph without any reachable pair, ...) are
reported as ``None`` rather than raised or coerced to 0.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
import networkit as nk
import numpy as np
import polars as pl

from ..common.exceptions import ComputationError
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import CooccurrenceGraph, edge_density

logger = get_logger(__name__)

METRIC_COLUMNS = [
    "node_count",
    "edge_count",
    "density",
    "diameter",
    "component_count",
    "avg_degree",
    "avg_betweenness",
    "largest_component_size",
]

METRICS_SCHEMA = {
    "decade": pl.Int64,
    "node_count": pl.Int64,
    "edge_count": pl.Int64,
    "density": pl.Float64,
    "diameter": pl.Int64,
    "component_count": pl.Int64,
    "avg_degree": pl.Float64,
    "avg_betweenness": pl.Float64,
    "largest_component_size": pl.Int64,
    "status": pl.Utf8,
    "error": pl.Utf8,
}


@dataclass(frozen=True)
class MetricsRow:
    """
    Metrics of one graph (usually one decade).

    Undefined values are None. ``status`` is "ok", or "failed" when the
    decade could not be built or measured, in which case ``error`` holds
    the message and every metric is None.
    """

    decade: Optional[int]
    node_count: Optional[int]
    edge_count: Optional[int]
    density: Optional[float]
    diameter: Optional[int]
    component_count: Optional[int]
    avg_degree: Optional[float]
    avg_betweenness: Optional[float]
    largest_component_size: Optional[int]
    status: str = "ok"
    error: Optional[str] = None

    @classmethod
    def failed(cls, decade: Optional[int], error: str) -> 'MetricsRow':
        return cls(decade, None, None, None, None, None, None, None, None,
                   status="failed", error=error)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_graph_metrics(g: CooccurrenceGraph, decade: Optional[int] = None) -> MetricsRow:
    """
    Compute the structural metrics of a co-occurrence graph.

    Parameters
    ----------
    g : CooccurrenceGraph
        Graph to measure
    decade : int, optional
        Decade stored on the row. Defaults to ``g.label`` when it is an int.

    Returns
    -------
    MetricsRow
        - density: E / (N(N-1)/2), None when N <= 1
        - diameter: longest shortest path over reachable pairs of distinct
          nodes (max over components), None when N <= 1 or no pair is reachable
        - component_count: connected components with isolates as singletons,
          None when N <= 1
        - avg_degree, avg_betweenness: None when N == 0
        - largest_component_size: 0 for an empty graph

    Raises
    ------
    ComputationError
        If a NetworKit algorithm fails

    Examples
    --------
    >>> row = compute_graph_metrics(g, decade=1930)
    >>> row.node_count, row.edge_count, row.diameter
    (4, 5, 2)
    """
    if decade is None and isinstance(g.label, int):
        decade = g.label

    log_function_entry("compute_graph_metrics", decade=decade,
                       nodes=g.number_of_nodes, edges=g.number_of_edges)

    graph = g.graph
    n_nodes = graph.numberOfNodes()
    n_edges = graph.numberOfEdges()

    with LoggingTimer("compute_graph_metrics", {"decade": decade, "nodes": n_nodes}):
        try:
            density = edge_density(n_nodes, n_edges)

            component_count = None
            largest_component_size = 0
            if n_nodes > 0:
                sizes = _component_sizes(graph)
                largest_component_size = max(sizes)
                if n_nodes > 1:
                    component_count = len(sizes)

            avg_degree = None
            avg_betweenness = None
            if n_nodes > 0:
                avg_degree = 2.0 * n_edges / n_nodes
                avg_betweenness = float(np.mean(_betweenness_scores(graph)))

            row = MetricsRow(
                decade=decade,
                node_count=n_nodes,
                edge_count=n_edges,
                density=density,
                diameter=_reachable_diameter(graph),
                component_count=component_count,
                avg_degree=avg_degree,
                avg_betweenness=avg_betweenness,
                largest_component_size=largest_component_size,
            )
        except Exception as e:
            raise ComputationError(
                f"Metric computation failed: {str(e)}",
                operation="compute_graph_metrics",
                error_type="algorithm_failure",
                cause=e
            ).add_context(decade=decade)

    logger.debug("Metrics for %s: %s", decade, row)
    return row


def compute_centrality(g: CooccurrenceGraph) -> pl.DataFrame:
    """
    Per-artist degree and normalized betweenness.

    Betweenness is computed over the full node set. Shortest paths only
    exist within components, so pairs in different components add nothing.

    Returns
    -------
    pl.DataFrame
        Columns node_id (artist), degree, betweenness, sorted by node_id
    """
    graph = g.graph
    if graph.numberOfNodes() == 0:
        return pl.DataFrame(schema={"node_id": pl.Utf8, "degree": pl.Int64, "betweenness": pl.Float64})

    try:
        degrees = [graph.degree(v) for v in graph.iterNodes()]
        betweenness = _betweenness_scores(graph)
    except Exception as e:
        raise ComputationError(
            f"Centrality calculation failed: {str(e)}",
            operation="compute_centrality",
            error_type="algorithm_failure",
            cause=e
        )

    node_ids = g.mapper.get_original_batch(list(graph.iterNodes()))
    df = pl.DataFrame({
        "node_id": node_ids,
        "degree": degrees,
        "betweenness": betweenness.tolist(),
    }, schema={"node_id": pl.Utf8, "degree": pl.Int64, "betweenness": pl.Float64})

    return df.sort("node_id")


def metrics_frame(rows: List[MetricsRow]) -> pl.DataFrame:
    """Rows as a DataFrame with nulls for undefined values."""
    return pl.DataFrame([row.as_dict() for row in rows], schema=METRICS_SCHEMA)


def _component_sizes(graph: nk.Graph) -> List[int]:
    cc = nk.components.ConnectedComponents(graph)
    cc.run()
    return list(cc.getComponentSizes().values())


def _betweenness_scores(graph: nk.Graph) -> np.ndarray:
    n_nodes = graph.numberOfNodes()
    # No node can lie strictly between two others below three nodes
    if n_nodes < 3:
        return np.zeros(n_nodes)

    bc = nk.centrality.Betweenness(graph, normalized=True)
    bc.run()
    return np.array(bc.scores(), dtype=float)


def _reachable_diameter(graph: nk.Graph) -> Optional[int]:
    """Longest hop distance between any two distinct mutually reachable nodes."""
    n_nodes = graph.numberOfNodes()
    if n_nodes <= 1 or graph.numberOfEdges() == 0:
        return None

    longest = 0
    for source in graph.iterNodes():
        if graph.degree(source) == 0:
            continue
        bfs = nk.distance.BFS(graph, source, False)
        bfs.run()
        distances = np.array(bfs.getDistances(), dtype=float)
        # Unreachable nodes are reported with an "infinite" distance
        reachable = distances[distances < n_nodes]
        if reachable.size:
            longest = max(longest, int(reachable.max()))

    return longest if longest > 0 else None
