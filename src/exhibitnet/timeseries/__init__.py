"""
Time-series network analysis module.

This module provides decade-level analysis capabilities:
- Decade segmentation of records into per-decade co-occurrence graphs
- Per-decade metrics with failure isolation
- Cross-decade min-max normalization and linear trends
- Per-decade communities and attribute distributions
"""

from ..records.store import decade_of
from .segmentation import (
    DecadeSlice,
    segment_by_decade,
    compute_series,
    metrics_table,
    detect_communities_by_decade,
    attribute_distribution_by_decade
)

from .normalization import (
    normalize_metrics,
    calculate_metric_trends
)
