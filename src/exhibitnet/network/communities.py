"""
Community detection and per-community attribute distributions.

Communities are found with NetworKit's parallel Louvain method (PLM).
Labels are opaque integers: only co-membership is meaningful, and labels
are not comparable between runs or between decades.
"""

from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Union
import networkit as nk
import numpy as np
import polars as pl
from sklearn.metrics import normalized_mutual_info_score

from ..common.exceptions import (
    ValidationError,
    ComputationError,
    validate_parameter,
    require_positive,
)
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import CooccurrenceGraph, UNKNOWN_GENDER

logger = get_logger(__name__)

SUMMARY_ATTRIBUTES = ["gender", "nationality"]
DEFAULT_RARE_THRESHOLD = 0.03
DEFAULT_OTHER_LABEL = "Others"

DISTRIBUTION_SCHEMA = {
    "community": pl.Int64,
    "value": pl.Utf8,
    "count": pl.Int64,
    "proportion": pl.Float64,
}

Partition = Union[CooccurrenceGraph, Mapping[str, int]]


def detect_communities(
    g: CooccurrenceGraph,
    resolution: float = 1.0,
    random_seed: Optional[int] = None
) -> CooccurrenceGraph:
    """
    Partition a co-occurrence graph into communities by modularity.

    Parameters
    ----------
    g : CooccurrenceGraph
        Graph to partition
    resolution : float, default 1.0
        Resolution (gamma) of the modularity objective. Higher values give
        more, smaller communities.
    random_seed : int, optional
        Seed for NetworKit's random generator

    Returns
    -------
    CooccurrenceGraph
        Copy of ``g`` with ``communities`` (artist -> label) and ``modularity``.
        A graph without edges puts every artist in its own community with
        modularity 0.0. An empty graph gets no labels and modularity None.

    Raises
    ------
    ConfigurationError
        If resolution is not positive
    ComputationError
        If the Louvain run fails

    Examples
    --------
    >>> labelled = detect_communities(g, random_seed=42)
    >>> labelled.modularity
    0.35...
    """
    require_positive(resolution, "resolution")
    log_function_entry("detect_communities", label=g.label,
                       resolution=resolution, random_seed=random_seed)

    graph = g.graph
    n_nodes = graph.numberOfNodes()

    if n_nodes == 0:
        logger.debug("Empty graph %s: no communities", g.label)
        return g.with_communities({}, None)

    if graph.numberOfEdges() == 0:
        logger.info("Graph %s has no edges: %d singleton communities", g.label, n_nodes)
        return g.with_communities(_labels_from_vector(g, list(range(n_nodes))), 0.0)

    with LoggingTimer("detect_communities", {"label": g.label, "nodes": n_nodes}):
        try:
            if random_seed is not None:
                nk.setSeed(random_seed, useThreadId=False)

            louvain = nk.community.PLM(graph, refine=True, gamma=resolution)
            louvain.run()

            partition = louvain.getPartition()
            modularity = nk.community.Modularity().getQuality(partition, graph)
            partition_vector = [partition.subsetOf(node) for node in graph.iterNodes()]
        except Exception as e:
            raise ComputationError(
                f"Failed to run Louvain community detection: {str(e)}",
                operation="detect_communities",
                error_type="algorithm_failure",
                cause=e
            ).add_context(label=g.label)

    labels = _labels_from_vector(g, _relabel_communities(partition_vector))
    logger.info("Graph %s: %d communities, modularity=%.4f",
                g.label, len(set(labels.values())), modularity)

    return g.with_communities(labels, float(modularity))


def _labels_from_vector(g: CooccurrenceGraph, vector: List[int]) -> Dict[str, int]:
    nodes = list(g.graph.iterNodes())
    return {g.mapper.get_original(node): int(vector[i]) for i, node in enumerate(nodes)}


def _relabel_communities(partition: List[int]) -> List[int]:
    """Relabel community ids to be contiguous starting from 0."""
    unique_communities = sorted(set(partition))
    community_map = {old_id: new_id for new_id, old_id in enumerate(unique_communities)}
    return [community_map[community_id] for community_id in partition]


def partition_modularity(g: CooccurrenceGraph, labels: Mapping[str, int]) -> float:
    """
    Newman modularity of a labelling of ``g``.

    Q = sum over communities c of (L_c / m) - (d_c / 2m)^2, where L_c is the
    (weighted) number of edges inside c, d_c the total degree of c and m the
    total edge weight. Returns 0.0 for a graph without edges.

    Raises
    ------
    ValidationError
        If a node of ``g`` has no label
    """
    graph = g.graph
    nodes = g.nodes()
    missing = [artist for artist in nodes if artist not in labels]
    if missing:
        raise ValidationError(
            f"{len(missing)} node(s) have no community label",
            field="labels",
            details={"missing_sample": missing[:5]}
        )

    if graph.numberOfEdges() == 0:
        return 0.0

    communities = np.array(_relabel_communities([labels[artist] for artist in nodes]))
    n_communities = int(communities.max()) + 1

    edges = np.array([(u, v, w) for u, v, w in graph.iterEdgesWeights()], dtype=float)
    src = edges[:, 0].astype(int)
    dst = edges[:, 1].astype(int)
    weights = edges[:, 2]
    total_weight = weights.sum()

    same = communities[src] == communities[dst]
    internal = np.bincount(communities[src][same], weights=weights[same], minlength=n_communities)

    strength = np.bincount(src, weights=weights, minlength=len(nodes)) \
        + np.bincount(dst, weights=weights, minlength=len(nodes))
    community_strength = np.bincount(communities, weights=strength, minlength=n_communities)

    q = internal / total_weight - (community_strength / (2.0 * total_weight)) ** 2
    return float(q.sum())


def compare_partitions(a: Partition, b: Partition) -> float:
    """
    Normalized mutual information between two partitions.

    Only artists labelled in both partitions are compared, so partitions of
    two different decades can be compared on their shared artists.

    Raises
    ------
    ValidationError
        If a partition is missing or the partitions share no artist
    """
    labels_a = _partition_labels(a, "a")
    labels_b = _partition_labels(b, "b")

    shared = sorted(set(labels_a) & set(labels_b))
    if not shared:
        raise ValidationError(
            "Partitions share no artists",
            field="partitions",
            details={"size_a": len(labels_a), "size_b": len(labels_b)}
        )

    nmi = normalized_mutual_info_score(
        [labels_a[artist] for artist in shared],
        [labels_b[artist] for artist in shared]
    )
    logger.debug("NMI over %d shared artists: %.3f", len(shared), nmi)
    return float(nmi)


def _partition_labels(partition: Partition, name: str) -> Mapping[str, int]:
    if isinstance(partition, CooccurrenceGraph):
        if not partition.has_communities:
            raise ValidationError(
                "Graph has no community labels; run detect_communities first",
                field=name
            )
        return partition.communities
    return partition


def get_community_summary(g: CooccurrenceGraph) -> Dict[str, Any]:
    """
    Summary statistics of a community partition.

    Returns
    -------
    Dict[str, Any]
        num_communities, modularity, community_sizes (descending),
        size_distribution (min/max/mean/median/std) and total_nodes
    """
    if not g.has_communities:
        raise ValidationError("Graph has no community labels", field="communities")

    community_counts = Counter(g.communities.values())
    community_sizes = list(community_counts.values())

    size_stats = {
        "min": min(community_sizes) if community_sizes else 0,
        "max": max(community_sizes) if community_sizes else 0,
        "mean": float(np.mean(community_sizes)) if community_sizes else 0.0,
        "median": float(np.median(community_sizes)) if community_sizes else 0.0,
        "std": float(np.std(community_sizes)) if community_sizes else 0.0,
    }

    return {
        "label": g.label,
        "num_communities": len(community_sizes),
        "modularity": g.modularity,
        "community_sizes": sorted(community_sizes, reverse=True),
        "size_distribution": size_stats,
        "total_nodes": len(g.communities),
    }


def summarize_attribute(
    g: CooccurrenceGraph,
    attribute: str,
    rare_threshold: float = DEFAULT_RARE_THRESHOLD,
    other_label: str = DEFAULT_OTHER_LABEL,
    collapse_rare: Optional[bool] = None
) -> pl.DataFrame:
    """
    Distribution of an artist attribute within each community.

    Parameters
    ----------
    g : CooccurrenceGraph
        Graph labelled by ``detect_communities``
    attribute : str
        "gender" or "nationality"
    rare_threshold : float, default 0.03
        Values whose share among all artists with a known value is below
        this threshold are relabelled ``other_label``
    other_label : str, default "Others"
        Bucket for rare values
    collapse_rare : bool, optional
        Whether to bucket rare values. Defaults to True for nationality
        and False for gender.

    Returns
    -------
    pl.DataFrame
        Columns community, value, count, proportion. Artists with a missing
        value (and gender "Unknown") are left out before any share is
        computed. Proportions sum to 1 within each community. Communities
        without a single known value do not appear.

    Raises
    ------
    ConfigurationError
        If attribute is not "gender" or "nationality"
    ValidationError
        If the graph has no community labels

    Examples
    --------
    >>> summarize_attribute(labelled, "nationality")
    shape: (3, 4)
    ┌───────────┬─────────┬───────┬────────────┐
    │ community ┆ value   ┆ count ┆ proportion │
    ...
    """
    validate_parameter(attribute, SUMMARY_ATTRIBUTES, "attribute", "summarize_attribute")
    if not 0.0 <= rare_threshold < 1.0:
        raise ValidationError(
            "rare_threshold must be in [0, 1)",
            field="rare_threshold",
            value=rare_threshold
        )
    if not g.has_communities:
        raise ValidationError(
            "Graph has no community labels; run detect_communities first",
            field="communities"
        )

    if collapse_rare is None:
        collapse_rare = attribute == "nationality"

    communities: List[int] = []
    values: List[str] = []
    for artist, community in g.communities.items():
        attrs = g.attributes(artist)
        value = attrs.get(attribute) if attrs is not None else None
        if attribute == "gender" and value == UNKNOWN_GENDER:
            value = None
        if value is not None:
            communities.append(community)
            values.append(value)

    if not values:
        return pl.DataFrame(schema=DISTRIBUTION_SCHEMA)

    df = pl.DataFrame({"community": communities, "value": values},
                      schema={"community": pl.Int64, "value": pl.Utf8})

    if collapse_rare:
        df = _collapse_rare_values(df, rare_threshold, other_label)

    distribution = (
        df
        .group_by(["community", "value"])
        .agg(pl.len().cast(pl.Int64).alias("count"))
        .with_columns(
            (pl.col("count") / pl.col("count").sum().over("community")).alias("proportion")
        )
        .sort(["community", "count", "value"], descending=[False, True, False])
    )

    logger.debug("%s distribution of %s: %d rows over %d communities",
                 attribute, g.label, distribution.height, distribution["community"].n_unique())

    return distribution.select(list(DISTRIBUTION_SCHEMA))


def _collapse_rare_values(df: pl.DataFrame, rare_threshold: float, other_label: str) -> pl.DataFrame:
    """Relabel values whose global share is below the threshold."""
    total = df.height
    shares = df.group_by("value").agg((pl.len() / total).alias("share"))
    rare = shares.filter(pl.col("share") < rare_threshold)["value"].to_list()

    if rare:
        logger.debug("Folding %d rare values into '%s': %s", len(rare), other_label, rare)

    return df.with_columns(
        pl.when(pl.col("value").is_in(rare))
        .then(pl.lit(other_label))
        .otherwise(pl.col("value"))
        .alias("value")
    )
