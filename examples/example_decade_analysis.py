#!/usr/bin/env python3
"""
Decade Analysis Example

This example walks through a decade-by-decade analysis of a small, made-up
exhibition history:

1. Build a record store from exhibition rosters
2. Segment the records into one co-occurrence graph per decade
3. Compute and normalize network metrics across decades
4. Detect communities and summarize nationality per community
5. Write one GEXF snapshot per decade for Gephi
"""

import sys
import tempfile
from datetime import date
from pathlib import Path

# Add the src directory to the Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from exhibitnet.common.logging_config import setup_logging
from exhibitnet.records.store import RecordStore
from exhibitnet.network.construction import get_graph_info
from exhibitnet.timeseries.segmentation import (
    segment_by_decade,
    compute_series,
    metrics_table,
    detect_communities_by_decade,
    attribute_distribution_by_decade,
)
from exhibitnet.timeseries.normalization import normalize_metrics, calculate_metric_trends
from exhibitnet.network.export import export_decade_snapshots


EXHIBITIONS = {
    "Sturm 1913": [
        ("Franz Marc", "German", "Male", date(1913, 9, 20)),
        ("Wassily Kandinsky", "Russian", "Male", date(1913, 9, 20)),
        ("Gabriele Münter", "German", "Female", date(1913, 9, 20)),
        ("Robert Delaunay", "French", "Male", date(1913, 9, 20)),
    ],
    "Dada Fair 1920": [
        ("Hannah Höch", "German", "Female", date(1920, 6, 30)),
        ("Raoul Hausmann", "Austrian", "Male", date(1920, 6, 30)),
        ("George Grosz", "German", "Male", date(1920, 6, 30)),
        ("John Heartfield", "German", "Male", date(1920, 6, 30)),
    ],
    "Surrealist Exhibition 1925": [
        ("Max Ernst", "German", "Male", date(1925, 11, 14)),
        ("Joan Miró", "Spanish", "Male", date(1925, 11, 14)),
        ("Man Ray", "American", "Male", date(1925, 11, 14)),
        ("Hans Arp", "French", "Male", date(1925, 11, 14)),
    ],
    "Abstraction-Création 1929": [
        ("Hans Arp", "French", "Male", date(1929, 3, 1)),
        ("Sophie Taeuber-Arp", "Swiss", "Female", date(1929, 3, 1)),
        ("Wassily Kandinsky", "Russian", "Male", date(1929, 3, 1)),
    ],
    "Fantastic Art 1936": [
        ("Max Ernst", "German", "Male", date(1936, 12, 7)),
        ("Meret Oppenheim", "Swiss", "Female", date(1936, 12, 7)),
        ("Man Ray", "American", "Male", date(1936, 12, 7)),
        ("Hannah Höch", "German", "Female", date(1936, 12, 7)),
    ],
}


def main():
    """Main function demonstrating the decade analysis workflow."""

    setup_logging(level="WARNING")

    print("=" * 60)
    print("Decade Analysis Example")
    print("=" * 60)

    # Step 1: Build the record store
    print("\n1. Building Record Store")
    print("-" * 40)

    store = RecordStore.from_exhibitions(EXHIBITIONS)
    print(f"Loaded {len(store)} participation records")
    print(f"Artists: {len(store.artists())}, exhibitions: {len(store.exhibitions())}")
    print(f"Decades covered: {store.decades()}")

    # Step 2: One graph per decade
    print("\n2. Segmenting by Decade")
    print("-" * 40)

    slices = segment_by_decade(store, weighted=True)
    for decade, decade_slice in slices.items():
        info = get_graph_info(decade_slice.graph)
        print(f"{decade}s: {info['num_nodes']} artists, {info['num_edges']} ties")

    # Step 3: Metrics and normalization
    print("\n3. Network Metrics")
    print("-" * 40)

    table = metrics_table(compute_series(slices))
    print(table.select("decade", "node_count", "edge_count", "density", "diameter"))

    normalized = normalize_metrics(table, metrics=["node_count", "density", "avg_degree"])
    print("\nNormalized across decades:")
    print(normalized.pivot(on="metric", index="decade", values="normalized"))

    trends = calculate_metric_trends(table, metrics=["node_count", "density"])
    print("\nTrend per decade:")
    print(trends.select("metric", "points", "slope"))

    # Step 4: Communities
    print("\n4. Communities and Nationalities")
    print("-" * 40)

    labelled = detect_communities_by_decade(slices, random_seed=42)
    for decade, decade_slice in labelled.items():
        graph = decade_slice.graph
        num_communities = len(set(graph.communities.values()))
        print(f"{decade}s: {num_communities} communities, modularity {graph.modularity:.3f}")

    nationality = attribute_distribution_by_decade(labelled, "nationality")
    print(nationality.sort(["decade", "community", "count"], descending=[False, False, True]))

    # Step 5: Snapshots
    print("\n5. Writing Snapshots")
    print("-" * 40)

    output_dir = Path(tempfile.mkdtemp(prefix="exhibitnet_"))
    written = export_decade_snapshots(labelled, output_dir, format="gexf")
    for decade, path in written.items():
        print(f"{decade}s -> {path}")

    print("\n" + "=" * 60)
    print("Analysis complete")
    print("=" * 60)


if __name__ == "__main__":
    main()
