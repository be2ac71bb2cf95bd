"""
exhibitnet - Artist co-occurrence network analysis.

This package turns artist/exhibition participation records into artist
co-occurrence networks and compares their structure across decades.

Modules:
    common: Exceptions, logging, configuration, validation and ID mapping
    records: Read-only store of participation records
    network: Graph construction, metrics, communities and snapshot export
    timeseries: Decade segmentation, normalization and trends
    pipeline: End-to-end decade analysis driver
"""

__version__ = "0.1.0"
