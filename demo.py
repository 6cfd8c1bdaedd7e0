#!/usr/bin/env python3
"""
indoorscore Demo - indoor coverage and navigability

This demo scores the buildings of an OSM indoor GeoJSON export:
coverage by tagged rooms, reachability from the entrance and the
combined per-building color.

Usage:
    python demo.py
    python demo.py path/to/export.geojson
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

DEFAULT_FILE = Path(__file__).parent / "examples" / "sample_building.geojson"


def demo_load(path: Path):
    """Demo: Load features into a spatial store."""
    print("\n" + "=" * 60)
    print("INDOORSCORE - Indoor coverage and navigability")
    print("=" * 60)

    print("\n1. LOADING FEATURES")
    print(f"   File: {path}")
    print("   " + "-" * 50)

    from indoorscore.ingest import GeoJSONSpatialStore

    store = GeoJSONSpatialStore.from_file(path)
    buildings = store.get_buildings()
    print(f"   Features: {len(store.features)}")
    print(f"   Buildings: {', '.join(b.id for b in buildings)}")
    return store


def demo_coverage(store, building):
    """Demo: Coverage per level."""
    print(f"\n2. COVERAGE ({building.id})")
    print("   " + "-" * 50)

    from indoorscore.geometry import CoverageCalculator

    result = CoverageCalculator(store).compute(building, store.get_building_levels(building))
    for level, percent in result.level_percents:
        print(f"   Level {level}: {percent:.2f}%")
    print(f"   Building: {result.building_percent:.2f}%")


def demo_reachability(store, building):
    """Demo: Reachability from the entrance."""
    print(f"\n3. REACHABILITY ({building.id})")
    print("   " + "-" * 50)

    from indoorscore.navigation import ConnectivityGraphBuilder, ReachabilityAnalyzer

    connectivity = ConnectivityGraphBuilder(store).build_for_building(building)
    analyzer = ReachabilityAnalyzer(connectivity)
    print(f"   Graph: {connectivity.graph.number_of_nodes()} nodes, {len(connectivity.components)} components")
    print(f"   Reachable areas: {analyzer.reachable_percent():.0%}")
    print(f"   Reachable levels: {analyzer.reachable_levels_percent():.0%}")
    print(f"   Rooms with doors: {analyzer.rooms_with_doors_percent():.0%}")
    for issue in analyzer.navigation_issues():
        print(f"   {issue.code}: {', '.join(str(s) for s in issue.subject_ids)}")


def demo_scores(store):
    """Demo: Scores and colors for every building."""
    print("\n4. BUILDING SCORES")
    print("   " + "-" * 50)

    from indoorscore.analysis import StaticConformityAnalyzer
    from indoorscore.orchestrator import MultiBuildingAnalyzer

    state = MultiBuildingAnalyzer(store, StaticConformityAnalyzer()).analyze_buildings()
    for color in state.colors:
        score = state.building_scores[color.id]
        print(
            f"   {color.id}: coverage {score.coverage:.1f}%, reachability {score.reachability:.1f}%"
            f" -> {color.color}"
        )
    print(f"   Global: {state.global_percentages}")


def main():
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_FILE

    store = demo_load(path)
    for building in store.get_buildings():
        demo_coverage(store, building)
        demo_reachability(store, building)
    demo_scores(store)

    print("\n" + "=" * 60)
    print("Done. Try: indoorscore analyze " + str(path))
    print("=" * 60)


if __name__ == "__main__":
    main()
