"""
Tests for graph metrics.
"""

from datetime import date

import networkit as nk
import polars as pl
import pytest

from exhibitnet.common.id_mapper import IDMapper
from exhibitnet.network.construction import build_cooccurrence_graph
from exhibitnet.network.graph import CooccurrenceGraph
from exhibitnet.network.metrics import (
    MetricsRow,
    compute_graph_metrics,
    compute_centrality,
    metrics_frame,
)


def _graph(names, edges, label=None):
    graph = nk.Graph(len(names))
    mapper = IDMapper.from_originals(names)
    for a, b in edges:
        graph.addEdge(mapper.get_internal(a), mapper.get_internal(b))
    return CooccurrenceGraph(graph, mapper, label=label)


class TestComputeGraphMetrics:
    """Metrics on regular graphs."""

    def test_thirties_example(self, thirties_store):
        row = compute_graph_metrics(build_cooccurrence_graph(thirties_store, label=1930))

        assert row.decade == 1930
        assert row.node_count == 4
        assert row.edge_count == 5
        assert row.density == pytest.approx(5 / 6)
        assert row.diameter == 2
        assert row.component_count == 1
        assert row.avg_degree == pytest.approx(2.5)
        assert row.avg_betweenness > 0
        assert row.largest_component_size == 4
        assert row.status == "ok"
        assert row.error is None

    def test_path_graph(self):
        row = compute_graph_metrics(_graph(list("ABCDE"), [("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")]))

        assert row.diameter == 4
        assert row.density == pytest.approx(4 / 10)

    def test_disconnected_diameter_is_max_over_components(self):
        g = _graph(list("ABCDEF"), [("A", "B"), ("B", "C"), ("C", "D"), ("E", "F")])
        row = compute_graph_metrics(g, decade=1960)

        assert row.decade == 1960
        assert row.diameter == 3
        assert row.component_count == 2
        assert row.largest_component_size == 4

    def test_isolates_count_as_components(self):
        row = compute_graph_metrics(_graph(list("ABC"), [("A", "B")]))

        assert row.component_count == 2
        assert row.diameter == 1


class TestUndefinedMarkers:
    """Small graphs give None instead of errors or NaN."""

    def test_empty_graph(self):
        row = compute_graph_metrics(_graph([], []))

        assert row.node_count == 0
        assert row.edge_count == 0
        assert row.density is None
        assert row.diameter is None
        assert row.component_count is None
        assert row.avg_degree is None
        assert row.avg_betweenness is None
        assert row.largest_component_size == 0

    def test_single_node(self):
        row = compute_graph_metrics(_graph(["A"], []))

        assert row.node_count == 1
        assert row.density is None
        assert row.diameter is None
        assert row.component_count is None
        assert row.avg_degree == 0.0
        assert row.avg_betweenness == 0.0

    def test_two_isolated_nodes(self):
        row = compute_graph_metrics(_graph(["A", "B"], []))

        assert row.density == 0.0
        assert row.diameter is None
        assert row.component_count == 2

    def test_single_edge(self):
        row = compute_graph_metrics(_graph(["A", "B"], [("A", "B")]))

        assert row.density == 1.0
        assert row.diameter == 1
        assert row.avg_betweenness == 0.0


class TestComputeCentrality:
    """Per-artist degree and betweenness."""

    def test_thirties_centrality(self, thirties_store):
        df = compute_centrality(build_cooccurrence_graph(thirties_store))
        scores = {row["node_id"]: row for row in df.iter_rows(named=True)}

        assert df.columns == ["node_id", "degree", "betweenness"]
        assert df["node_id"].to_list() == ["A", "B", "C", "D"]
        assert scores["B"]["degree"] == 3
        assert scores["A"]["degree"] == 2
        assert scores["A"]["betweenness"] == 0.0
        assert scores["D"]["betweenness"] == 0.0
        assert scores["B"]["betweenness"] == pytest.approx(scores["C"]["betweenness"])
        assert scores["B"]["betweenness"] > 0

    def test_star_center_is_maximal(self):
        g = _graph(list("HABCD"), [("H", leaf) for leaf in "ABCD"])
        df = compute_centrality(g)

        hub = df.filter(pl.col("node_id") == "H")["betweenness"][0]
        assert hub > 0
        assert hub <= 1.0
        assert df.filter(pl.col("node_id") != "H")["betweenness"].max() == 0.0

    def test_components_do_not_interact(self):
        g = _graph(list("ABCXYZ"), [("A", "B"), ("B", "C"), ("X", "Y"), ("Y", "Z")])
        df = compute_centrality(g)
        scores = dict(zip(df["node_id"].to_list(), df["betweenness"].to_list()))

        assert scores["B"] == pytest.approx(scores["Y"])
        assert scores["A"] == 0.0

    def test_empty_graph(self):
        df = compute_centrality(_graph([], []))

        assert df.is_empty()
        assert df.columns == ["node_id", "degree", "betweenness"]


class TestMetricsFrame:
    """Rows to DataFrame."""

    def test_failed_row_has_null_metrics(self):
        df = metrics_frame([MetricsRow.failed(1940, "boom")])

        assert df["status"].to_list() == ["failed"]
        assert df["error"].to_list() == ["boom"]
        assert df["density"].null_count() == 1
        assert df["node_count"].null_count() == 1

    def test_empty_rows(self):
        df = metrics_frame([])
        assert df.is_empty()
        assert "avg_betweenness" in df.columns
