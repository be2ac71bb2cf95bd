"""
Graph snapshot export and import.

A snapshot is the only durable artifact of an analysis: one co-occurrence
graph written as GEXF (for Gephi) or GraphML, with each artist's gender,
nationality, degree and community label. Snapshots read back into a
CooccurrenceGraph with the same nodes, edges, attributes and communities.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, unquote
import xml.etree.ElementTree as ET
from xml.dom import minidom

import networkit as nk
import numpy as np

from ..common.id_mapper import IDMapper
from ..common.exceptions import (
    ConfigurationError,
    DataFormatError,
    GraphConstructionError,
    validate_parameter,
)
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import ArtistAttributes, CooccurrenceGraph, UNKNOWN_GENDER

logger = get_logger(__name__)

SUPPORTED_FORMATS = ["gexf", "graphml"]

GEXF_NS = "http://www.gexf.net/1.2draft"
GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"

# Node attributes in file order: (name, GEXF type, GraphML type)
NODE_ATTRIBUTES = [
    ("artist", "string", "string"),
    ("gender", "string", "string"),
    ("nationality", "string", "string"),
    ("degree", "integer", "int"),
    ("community", "integer", "int"),
]


def export_graph_snapshot(
    g: CooccurrenceGraph,
    path: Union[str, Path],
    format: str = "gexf",
    overwrite: bool = False
) -> Path:
    """
    Write a co-occurrence graph to a GEXF or GraphML file.

    Parameters
    ----------
    g : CooccurrenceGraph
        Graph to write, with or without communities
    path : str or Path
        Output file. The format extension is added when the path has none.
        Parent directories are created.
    format : str, default "gexf"
        "gexf" or "graphml"
    overwrite : bool, default False
        Replace an existing file

    Returns
    -------
    Path
        The written file

    Raises
    ------
    ConfigurationError
        If the format is unsupported or the file exists and overwrite is False

    Examples
    --------
    >>> export_graph_snapshot(labelled, "snapshots/cooccurrence_1930", format="gexf")
    PosixPath('snapshots/cooccurrence_1930.gexf')
    """
    validate_parameter(format, SUPPORTED_FORMATS, "format", "export_graph_snapshot")
    log_function_entry("export_graph_snapshot", label=g.label, path=str(path), format=format)

    output_path = _prepare_output_path(path, format, overwrite)

    with LoggingTimer("export_graph_snapshot", {"format": format, "nodes": g.number_of_nodes}):
        node_rows = _prepare_node_rows(g)
        edge_rows = _prepare_edge_rows(g)

        if format == "gexf":
            root = _build_gexf(g, node_rows, edge_rows)
        else:
            root = _build_graphml(g, node_rows, edge_rows)

        _write_pretty_xml(root, output_path)

    logger.info("Exported %s snapshot of %s to %s (%d nodes, %d edges)",
                format.upper(), g.label, output_path, g.number_of_nodes, g.number_of_edges)

    return output_path


def export_decade_snapshots(
    slices: Mapping[int, Any],
    directory: Union[str, Path],
    format: str = "gexf",
    overwrite: bool = False
) -> Dict[int, Path]:
    """
    Write one snapshot file per decade, named ``cooccurrence_<decade>.<format>``.

    ``slices`` maps decades to DecadeSlice objects (or plain graphs).
    Decades whose graph could not be built are skipped with a warning.
    """
    validate_parameter(format, SUPPORTED_FORMATS, "format", "export_decade_snapshots")
    directory = Path(directory)

    written = {}
    for decade, item in sorted(slices.items()):
        graph = item if isinstance(item, CooccurrenceGraph) else item.graph
        if graph is None:
            logger.warning("Skipping snapshot for decade %s: no graph (%s)",
                           decade, getattr(item, "error", "unknown error"))
            continue
        written[decade] = export_graph_snapshot(
            graph, directory / f"cooccurrence_{decade}.{format}",
            format=format, overwrite=overwrite
        )

    return written


def load_graph_snapshot(path: Union[str, Path]) -> CooccurrenceGraph:
    """
    Read a snapshot written by ``export_graph_snapshot``.

    The format is taken from the file extension (.gexf or .graphml).

    Raises
    ------
    DataFormatError
        If the file is missing, has an unknown extension or is malformed
    """
    path = Path(path)
    if not path.exists():
        raise DataFormatError(f"Snapshot file not found: {path}", file_path=str(path))

    format = path.suffix.lower().lstrip(".")
    if format not in SUPPORTED_FORMATS:
        raise DataFormatError(
            f"Unsupported snapshot extension '{path.suffix}'",
            format_type="GEXF or GraphML",
            file_path=str(path)
        )

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise DataFormatError(
            f"Malformed {format.upper()} file: {str(e)}",
            format_type=format.upper(),
            file_path=str(path),
            cause=e
        )

    if format == "gexf":
        graph_meta, nodes, edges = _read_gexf(root, path)
    else:
        graph_meta, nodes, edges = _read_graphml(root, path)

    g = _assemble_graph(graph_meta, nodes, edges)
    logger.info("Loaded %s snapshot %s: %d nodes, %d edges",
                format.upper(), path, g.number_of_nodes, g.number_of_edges)
    return g


def _prepare_output_path(path: Union[str, Path], format: str, overwrite: bool) -> Path:
    """Add the extension, refuse to clobber, create the directory."""
    output_path = Path(path)
    if not output_path.suffix:
        output_path = output_path.with_suffix(f".{format}")

    if output_path.exists() and not overwrite:
        raise ConfigurationError(
            f"File {output_path} already exists. Use overwrite=True to replace it",
            parameter="overwrite",
            value=overwrite,
            function="export_graph_snapshot"
        )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def _prepare_node_rows(g: CooccurrenceGraph) -> List[Dict[str, Any]]:
    rows = []
    for node in g.graph.iterNodes():
        artist = g.mapper.get_original(node)
        attrs = g.attributes(artist)
        rows.append({
            "id": str(node),
            "artist": artist,
            "gender": attrs.gender if attrs is not None else None,
            "nationality": attrs.nationality if attrs is not None else None,
            "degree": g.graph.degree(node),
            "community": g.community_of(artist),
        })
    return rows


def _prepare_edge_rows(g: CooccurrenceGraph) -> List[Tuple[int, int, float]]:
    return [(u, v, w) for u, v, w in g.graph.iterEdgesWeights()]


def _graph_keywords(g: CooccurrenceGraph) -> str:
    """Graph-level fields as ``key=value`` pairs joined by ``;``, values percent-escaped."""
    fields = {
        "label": "" if g.label is None else str(g.label),
        "modularity": "" if g.modularity is None else repr(g.modularity),
        "weighted": str(g.is_weighted).lower(),
        "communities": str(g.has_communities).lower(),
    }
    return ";".join(f"{key}={quote(value, safe='')}" for key, value in fields.items())


def _parse_keywords(text: Optional[str]) -> Dict[str, str]:
    values = {}
    for part in (text or "").split(";"):
        if "=" in part:
            key, value = part.split("=", 1)
            values[key.strip()] = unquote(value.strip())
    return values


def _build_gexf(
    g: CooccurrenceGraph,
    node_rows: List[Dict[str, Any]],
    edge_rows: List[Tuple[int, int, float]]
) -> ET.Element:
    gexf = ET.Element("gexf", xmlns=GEXF_NS, version="1.2")

    meta = ET.SubElement(gexf, "meta", lastmodifieddate=str(np.datetime64('today')))
    ET.SubElement(meta, "creator").text = "exhibitnet"
    ET.SubElement(meta, "description").text = "Artist co-occurrence network"
    ET.SubElement(meta, "keywords").text = _graph_keywords(g)

    graph_elem = ET.SubElement(gexf, "graph", mode="static", defaultedgetype="undirected")

    attributes = ET.SubElement(graph_elem, "attributes", **{"class": "node"})
    attr_map = {}
    for attr_id, (name, gexf_type, _) in enumerate(NODE_ATTRIBUTES):
        ET.SubElement(attributes, "attribute", id=str(attr_id), title=name, type=gexf_type)
        attr_map[name] = str(attr_id)

    nodes_elem = ET.SubElement(graph_elem, "nodes")
    for row in node_rows:
        node_elem = ET.SubElement(nodes_elem, "node", id=row["id"], label=row["artist"])
        attvalues = ET.SubElement(node_elem, "attvalues")
        for name, attr_id in attr_map.items():
            value = row.get(name)
            if value is not None:
                ET.SubElement(attvalues, "attvalue", **{"for": attr_id, "value": str(value)})

    edges_elem = ET.SubElement(graph_elem, "edges")
    for i, (u, v, w) in enumerate(edge_rows):
        edge_attrs = {"id": str(i), "source": str(u), "target": str(v)}
        if g.is_weighted:
            edge_attrs["weight"] = repr(float(w))
        ET.SubElement(edges_elem, "edge", **edge_attrs)

    return gexf


def _build_graphml(
    g: CooccurrenceGraph,
    node_rows: List[Dict[str, Any]],
    edge_rows: List[Tuple[int, int, float]]
) -> ET.Element:
    graphml = ET.Element("graphml", xmlns=GRAPHML_NS)

    ET.SubElement(graphml, "key", id="g_keywords",
                  **{"for": "graph", "attr.name": "keywords", "attr.type": "string"})

    key_map = {}
    for key_id, (name, _, graphml_type) in enumerate(NODE_ATTRIBUTES):
        ET.SubElement(graphml, "key", id=f"n{key_id}",
                      **{"for": "node", "attr.name": name, "attr.type": graphml_type})
        key_map[name] = f"n{key_id}"

    if g.is_weighted:
        ET.SubElement(graphml, "key", id="weight",
                      **{"for": "edge", "attr.name": "weight", "attr.type": "double"})

    graph_elem = ET.SubElement(graphml, "graph", id="G", edgedefault="undirected")
    ET.SubElement(graph_elem, "data", key="g_keywords").text = _graph_keywords(g)

    for row in node_rows:
        node_elem = ET.SubElement(graph_elem, "node", id=row["id"])
        for name, key_id in key_map.items():
            value = row.get(name)
            if value is not None:
                ET.SubElement(node_elem, "data", key=key_id).text = str(value)

    for i, (u, v, w) in enumerate(edge_rows):
        edge_elem = ET.SubElement(graph_elem, "edge", id=f"e{i}", source=str(u), target=str(v))
        if g.is_weighted:
            ET.SubElement(edge_elem, "data", key="weight").text = repr(float(w))

    return graphml


def _write_pretty_xml(root: ET.Element, output_path: Path) -> None:
    xml_str = ET.tostring(root, encoding='unicode')
    pretty_xml = minidom.parseString(xml_str).toprettyxml(indent="  ")

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(pretty_xml)


def _local(tag: str) -> str:
    """Tag name without its XML namespace."""
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in elem if _local(child.tag) == name]


def _first_child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    found = _children(elem, name)
    return found[0] if found else None


def _read_gexf(root: ET.Element, path: Path):
    meta = _first_child(root, "meta")
    keywords = _first_child(meta, "keywords") if meta is not None else None
    graph_meta = _parse_keywords(keywords.text if keywords is not None else None)

    graph_elem = _first_child(root, "graph")
    if graph_elem is None:
        raise DataFormatError("GEXF file has no <graph> element",
                              format_type="GEXF", file_path=str(path))

    attr_titles = {}
    for attributes in _children(graph_elem, "attributes"):
        if attributes.get("class") == "node":
            for attr in _children(attributes, "attribute"):
                attr_titles[attr.get("id")] = attr.get("title")

    nodes = []
    nodes_elem = _first_child(graph_elem, "nodes")
    for node_elem in (_children(nodes_elem, "node") if nodes_elem is not None else []):
        values = {"id": node_elem.get("id"), "artist": node_elem.get("label")}
        attvalues = _first_child(node_elem, "attvalues")
        if attvalues is not None:
            for attvalue in _children(attvalues, "attvalue"):
                title = attr_titles.get(attvalue.get("for"))
                if title is not None:
                    values[title] = attvalue.get("value")
        nodes.append(values)

    edges = []
    edges_elem = _first_child(graph_elem, "edges")
    for edge_elem in (_children(edges_elem, "edge") if edges_elem is not None else []):
        edges.append((edge_elem.get("source"), edge_elem.get("target"), edge_elem.get("weight")))

    return graph_meta, nodes, edges


def _read_graphml(root: ET.Element, path: Path):
    key_names = {key.get("id"): key.get("attr.name") for key in _children(root, "key")}

    graph_elem = _first_child(root, "graph")
    if graph_elem is None:
        raise DataFormatError("GraphML file has no <graph> element",
                              format_type="GraphML", file_path=str(path))

    graph_meta: Dict[str, str] = {}
    for data in _children(graph_elem, "data"):
        if key_names.get(data.get("key")) == "keywords":
            graph_meta = _parse_keywords(data.text)

    nodes = []
    for node_elem in _children(graph_elem, "node"):
        values = {"id": node_elem.get("id")}
        for data in _children(node_elem, "data"):
            name = key_names.get(data.get("key"))
            if name is not None:
                values[name] = (data.text or "").strip()
        nodes.append(values)

    edges = []
    for edge_elem in _children(graph_elem, "edge"):
        weight = None
        for data in _children(edge_elem, "data"):
            if key_names.get(data.get("key")) == "weight":
                weight = (data.text or "").strip()
        edges.append((edge_elem.get("source"), edge_elem.get("target"), weight))

    return graph_meta, nodes, edges


def _parse_label(text: Optional[str]) -> Any:
    if text is None or text == "":
        return None
    try:
        return int(text)
    except ValueError:
        return text


def _assemble_graph(
    graph_meta: Dict[str, str],
    nodes: List[Dict[str, Any]],
    edges: List[Tuple[str, str, Optional[str]]]
) -> CooccurrenceGraph:
    weighted = graph_meta.get("weighted") == "true" or any(w is not None for _, _, w in edges)

    file_ids = {}
    id_mapper = IDMapper()
    attributes = {}
    communities = {}

    for row in nodes:
        artist = row.get("artist") or row["id"]
        file_ids[row["id"]] = len(id_mapper)
        id_mapper.add_mapping(artist, len(id_mapper))

        gender = row.get("gender")
        nationality = row.get("nationality")
        if gender is not None or nationality is not None:
            attributes[artist] = ArtistAttributes(
                gender=gender if gender is not None else UNKNOWN_GENDER,
                nationality=nationality
            )
        if row.get("community") is not None:
            communities[artist] = int(row["community"])

    graph = nk.Graph(len(id_mapper), weighted=weighted, directed=False)
    try:
        for source, target, weight in edges:
            u, v = file_ids[source], file_ids[target]
            if weighted:
                graph.addEdge(u, v, float(weight) if weight is not None else 1.0)
            else:
                graph.addEdge(u, v)
    except KeyError as e:
        raise GraphConstructionError(
            f"Snapshot edge refers to unknown node {e}",
            node_count=len(id_mapper),
            edge_count=len(edges),
            operation="load_graph_snapshot",
            cause=e
        )

    # A labelled empty graph has no community values on any node
    if graph_meta.get("communities") != "true" and not communities:
        communities = None

    modularity = graph_meta.get("modularity")
    return CooccurrenceGraph(
        graph,
        id_mapper,
        attributes=attributes,
        label=_parse_label(graph_meta.get("label")),
        communities=communities,
        modularity=float(modularity) if modularity else None
    )
