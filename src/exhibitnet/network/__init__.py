"""
Network construction and analysis module.

This module provides the co-occurrence network capabilities:
- Artist co-occurrence graph construction from participation records
- Structural metrics (density, diameter, components, degree, betweenness)
- Louvain community detection and per-community attribute distributions
- GEXF / GraphML snapshot export and import
"""

from .graph import ArtistAttributes, CooccurrenceGraph, edge_density

from .construction import (
    build_cooccurrence_graph,
    get_graph_info
)

from .metrics import (
    MetricsRow,
    compute_graph_metrics,
    compute_centrality
)

from .communities import (
    detect_communities,
    partition_modularity,
    compare_partitions,
    get_community_summary,
    summarize_attribute
)

from .export import (
    export_graph_snapshot,
    export_decade_snapshots,
    load_graph_snapshot
)
