"""
Tests for co-occurrence graph construction.
"""

from datetime import date
from itertools import combinations

import pytest

from exhibitnet.common.exceptions import MissingDataError
from exhibitnet.network.construction import build_cooccurrence_graph, get_graph_info
from exhibitnet.network.graph import ArtistAttributes, edge_density
from exhibitnet.network.metrics import compute_graph_metrics
from exhibitnet.records.store import ParticipationRecord, RecordStore


def _pairs_from_records(store):
    """Expected edge set: every pair of artists sharing an exhibition."""
    expected = set()
    by_exhibition = {}
    for record in store.records():
        by_exhibition.setdefault(record.exhibition_id, set()).add(record.artist_id)
    for artists in by_exhibition.values():
        for a, b in combinations(sorted(artists), 2):
            expected.add((a, b))
    return expected


class TestEdgeSoundness:
    """Edges are exactly the co-participating pairs."""

    def test_thirties_example(self, thirties_store):
        g = build_cooccurrence_graph(thirties_store)

        assert g.number_of_nodes == 4
        assert g.number_of_edges == 5
        assert not g.has_edge("A", "D")
        for a, b in [("A", "B"), ("A", "C"), ("B", "C"), ("B", "D"), ("C", "D")]:
            assert g.has_edge(a, b)
            assert g.has_edge(b, a)

    def test_edges_match_exhibition_pairs(self, two_cliques_store):
        g = build_cooccurrence_graph(two_cliques_store)
        actual = {tuple(sorted(edge)) for edge in g.edges()}

        assert actual == _pairs_from_records(two_cliques_store)

    def test_no_self_loops_or_duplicates(self):
        day = date(1970, 1, 1)
        store = RecordStore.from_exhibitions({
            "E1": [("A", None, None, day), ("A", None, None, date(1970, 2, 1)), ("B", None, None, day)],
            "E2": [("A", None, None, day), ("B", None, None, day)],
        })
        g = build_cooccurrence_graph(store)

        assert g.graph.numberOfSelfLoops() == 0
        assert g.number_of_edges == 1
        assert len(g.edges()) == len(set(tuple(sorted(e)) for e in g.edges()))

    def test_edge_count_bounded_by_pairs(self, two_cliques_store):
        g = build_cooccurrence_graph(two_cliques_store)
        n = g.number_of_nodes

        assert g.number_of_edges <= n * (n - 1) // 2

    def test_accepts_iterable_of_records(self):
        records = [
            ParticipationRecord("E1", "A", None, None, date(1935, 1, 1)),
            ParticipationRecord("E1", "B", None, None, date(1935, 1, 1)),
        ]
        g = build_cooccurrence_graph(records)
        assert g.has_edge("A", "B")

    def test_missing_field_propagates(self):
        with pytest.raises(MissingDataError):
            build_cooccurrence_graph([
                {"exhibition_id": "E1", "artist_id": None, "event_date": date(1935, 1, 1)},
            ])


class TestIsolates:
    """Artists without co-participants."""

    def setup_method(self):
        self.store = RecordStore.from_exhibitions({
            "E1": [("A", None, None, date(1935, 1, 1)), ("B", None, None, date(1935, 1, 1))],
            "solo": [("S", "Swiss", "Female", date(1936, 1, 1))],
        })

    def test_isolates_excluded_by_default(self):
        g = build_cooccurrence_graph(self.store)

        assert g.nodes() == ["A", "B"]
        assert not g.has_node("S")

    def test_isolates_included_on_request(self):
        g = build_cooccurrence_graph(self.store, include_isolates=True)

        assert g.has_node("S")
        assert g.degree("S") == 0
        assert g.number_of_edges == 1

    def test_single_artist_only(self):
        store = RecordStore.from_exhibitions({"solo": [("S", None, None, date(1936, 1, 1))]})
        g = build_cooccurrence_graph(store)

        assert g.number_of_nodes == 0
        assert g.number_of_edges == 0


class TestAttributes:
    """Node attributes come from the first non-null value."""

    def test_first_seen_values(self, thirties_store):
        g = build_cooccurrence_graph(thirties_store)

        assert g.attributes("A") == ArtistAttributes(gender="Male", nationality="German")
        assert g.attributes("B").gender == "Female"

    def test_gender_falls_back_to_unknown(self, thirties_store):
        g = build_cooccurrence_graph(thirties_store)

        assert g.attributes("D").gender == "Unknown"
        assert g.attributes("D").nationality == "Swiss"

    def test_later_value_fills_earlier_null(self):
        store = RecordStore.from_exhibitions({
            "E1": [("A", None, None, date(1935, 1, 1)), ("B", None, None, date(1935, 1, 1))],
            "E2": [("A", "Italian", "Male", date(1936, 1, 1)), ("B", None, None, date(1936, 1, 1))],
        })
        g = build_cooccurrence_graph(store)

        assert g.attributes("A") == ArtistAttributes("Male", "Italian")
        assert g.attributes("B") == ArtistAttributes("Unknown", None)

    def test_without_attributes(self, thirties_store):
        g = build_cooccurrence_graph(thirties_store, include_attributes=False)

        assert not g.has_attributes
        assert g.attributes("A") is None


class TestWeights:
    """Optional weighting by shared exhibitions."""

    def test_unweighted_by_default(self, thirties_store):
        assert not build_cooccurrence_graph(thirties_store).is_weighted

    def test_weight_counts_shared_exhibitions(self, thirties_store):
        g = build_cooccurrence_graph(thirties_store, weighted=True)
        weights = {tuple(sorted((a, b))): w for a, b, w in g.weighted_edges()}

        assert weights[("B", "C")] == 2.0
        assert weights[("A", "B")] == 1.0


class TestGraphInfo:
    """Test get_graph_info."""

    def test_info(self, thirties_store):
        info = get_graph_info(build_cooccurrence_graph(thirties_store, label=1930))

        assert info["label"] == 1930
        assert info["num_nodes"] == 4
        assert info["num_edges"] == 5
        assert info["num_components"] == 1
        assert info["is_connected"]
        assert info["density"] == pytest.approx(5 / 6)

    def test_info_density_matches_metrics(self):
        store = RecordStore.from_exhibitions({
            "E1": [("A", None, None, date(1950, 1, 1)), ("B", None, None, date(1950, 1, 1))],
            "E2": [("C", None, None, date(1950, 1, 1)), ("D", None, None, date(1950, 1, 1))],
        })
        g = build_cooccurrence_graph(store, weighted=True)
        info = get_graph_info(g)

        assert info["density"] == pytest.approx(2 / 6)
        assert info["density"] == pytest.approx(compute_graph_metrics(g).density)
        assert info["num_components"] == 2
        assert not info["is_connected"]

    def test_info_empty_graph(self):
        info = get_graph_info(build_cooccurrence_graph(RecordStore.from_records([])))

        assert info["num_nodes"] == 0
        assert info["density"] is None
        assert info["num_components"] is None


class TestEdgeDensity:
    """E / (N(N-1)/2), undefined below two nodes."""

    @pytest.mark.parametrize("n_nodes,n_edges,expected", [
        (2, 1, 1.0),
        (4, 5, 5 / 6),
        (5, 0, 0.0),
    ])
    def test_density(self, n_nodes, n_edges, expected):
        assert edge_density(n_nodes, n_edges) == pytest.approx(expected)

    @pytest.mark.parametrize("n_nodes", [0, 1])
    def test_undefined(self, n_nodes):
        assert edge_density(n_nodes, 0) is None
