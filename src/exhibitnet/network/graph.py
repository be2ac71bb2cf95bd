"""
Typed container for an artist co-occurrence graph.

The structure lives in an undirected NetworKit graph indexed by integer
node ids. ``CooccurrenceGraph`` pairs it with the IDMapper that translates
those ids to artist names, the per-artist attributes, and (after community
detection) the community labels and modularity of the partition.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Any
import networkit as nk

from ..common.id_mapper import IDMapper

UNKNOWN_GENDER = "Unknown"


def edge_density(n_nodes: int, n_edges: int) -> Optional[float]:
    """E / (N(N-1)/2) of an undirected simple graph, None when N <= 1."""
    if n_nodes <= 1:
        return None
    return n_edges / (n_nodes * (n_nodes - 1) / 2.0)


@dataclass(frozen=True)
class ArtistAttributes:
    """Node attributes of an artist. Gender falls back to ``"Unknown"``."""

    gender: str = UNKNOWN_GENDER
    nationality: Optional[str] = None

    def get(self, name: str) -> Optional[str]:
        """Attribute value by name ("gender" or "nationality")."""
        return getattr(self, name)


class CooccurrenceGraph:
    """
    Artist co-occurrence network.

    Parameters
    ----------
    graph : nk.Graph
        Undirected simple graph. Node ``i`` is the artist ``mapper.get_original(i)``.
    mapper : IDMapper
        Artist id <-> node id mapping covering every node of ``graph``
    attributes : Dict[str, ArtistAttributes], optional
        Attributes per artist. Empty when built without attributes.
    label : Any, optional
        Free label, the decade for decade slices
    communities : Dict[str, int], optional
        Community label per artist, set by community detection
    modularity : float, optional
        Modularity of ``communities``

    Notes
    -----
    Instances are treated as read-only. ``with_communities`` returns a new
    container sharing the same NetworKit graph.
    """

    def __init__(
        self,
        graph: nk.Graph,
        mapper: IDMapper,
        attributes: Optional[Dict[str, ArtistAttributes]] = None,
        label: Any = None,
        communities: Optional[Dict[str, int]] = None,
        modularity: Optional[float] = None
    ) -> None:
        self.graph = graph
        self.mapper = mapper
        self._attributes = attributes or {}
        self.label = label
        self.communities = communities
        self.modularity = modularity

    @property
    def number_of_nodes(self) -> int:
        return self.graph.numberOfNodes()

    @property
    def number_of_edges(self) -> int:
        return self.graph.numberOfEdges()

    @property
    def is_weighted(self) -> bool:
        return self.graph.isWeighted()

    @property
    def has_attributes(self) -> bool:
        return bool(self._attributes)

    @property
    def has_communities(self) -> bool:
        return self.communities is not None

    def nodes(self) -> List[str]:
        """Artist ids ordered by node id."""
        return self.mapper.originals()

    def edges(self) -> List[Tuple[str, str]]:
        """Undirected edges as artist id pairs, each reported once."""
        return [
            (self.mapper.get_original(u), self.mapper.get_original(v))
            for u, v in self.graph.iterEdges()
        ]

    def weighted_edges(self) -> List[Tuple[str, str, float]]:
        """Edges with their weight (1.0 on unweighted graphs)."""
        return [
            (self.mapper.get_original(u), self.mapper.get_original(v), w)
            for u, v, w in self.graph.iterEdgesWeights()
        ]

    def has_node(self, artist: str) -> bool:
        return artist in self.mapper

    def has_edge(self, a: str, b: str) -> bool:
        if a not in self.mapper or b not in self.mapper:
            return False
        return self.graph.hasEdge(self.mapper.get_internal(a), self.mapper.get_internal(b))

    def degree(self, artist: str) -> int:
        return self.graph.degree(self.mapper.get_internal(artist))

    def neighbors(self, artist: str) -> List[str]:
        node = self.mapper.get_internal(artist)
        return [self.mapper.get_original(v) for v in self.graph.iterNeighbors(node)]

    def attributes(self, artist: str) -> Optional[ArtistAttributes]:
        """Attributes of ``artist``, or None when the graph carries none for it."""
        if artist not in self.mapper:
            raise KeyError(f"Artist '{artist}' is not a node of this graph")
        return self._attributes.get(artist)

    def attribute_map(self) -> Dict[str, ArtistAttributes]:
        return dict(self._attributes)

    def community_of(self, artist: str) -> Optional[int]:
        if self.communities is None:
            return None
        return self.communities.get(artist)

    def with_communities(
        self,
        communities: Dict[str, int],
        modularity: Optional[float]
    ) -> 'CooccurrenceGraph':
        """Copy of this graph carrying the given community partition."""
        return CooccurrenceGraph(
            self.graph,
            self.mapper,
            attributes=self._attributes,
            label=self.label,
            communities=dict(communities),
            modularity=modularity
        )

    def __repr__(self) -> str:
        return (
            f"CooccurrenceGraph(label={self.label!r}, nodes={self.number_of_nodes}, "
            f"edges={self.number_of_edges})"
        )
