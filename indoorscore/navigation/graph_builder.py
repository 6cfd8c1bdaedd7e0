"""
Connectivity graph of a building.

Nodes are NodeKey(area_id, level) plus the OUTSIDE node. Edges are
physical passages:
- entrance doors link OUTSIDE to every area they touch
- other doors link the first area they touch to each further area (star)
- fake doors link overlapping door-less areas
- stairs, elevators and ramps spanning several levels link their own
  nodes on consecutive levels

The connected components of this graph are the only input of
ReachabilityAnalyzer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

import networkx as nx

from ..core.levels import Level, connector_chain, is_single_level_tag
from ..core.models import OUTSIDE, Feature, NodeKey
from ..core.spatial import SpatialCollaborator
from .level_structure import LevelStructure, LevelStructureBuilder

logger = logging.getLogger(__name__)

Node = Union[NodeKey, str]


@dataclass
class ConnectivityGraph:
    """A building graph with its connected-component partition."""
    graph: nx.Graph
    components: list[frozenset] = field(default_factory=list)
    levels: list[Level] = field(default_factory=list)
    structures: list[LevelStructure] = field(default_factory=list)

    @property
    def outside_component(self) -> Optional[frozenset]:
        for component in self.components:
            if OUTSIDE in component:
                return component
        return None

    def component_of(self, node: Node) -> Optional[frozenset]:
        for component in self.components:
            if node in component:
                return component
        return None

    def area_nodes(self) -> list[NodeKey]:
        return [n for n in self.graph.nodes if n != OUTSIDE]


class ConnectivityGraphBuilder:
    """
    Assemble the building graph from per-level structures.

    Usage:
        builder = ConnectivityGraphBuilder(store)
        connectivity = builder.build_for_building(building, conform_ids)
    """

    def __init__(self, spatial: SpatialCollaborator):
        self.spatial = spatial
        self.level_builder = LevelStructureBuilder(spatial)

    def build_for_building(
        self,
        building: Feature,
        allowed_ids: Optional[set[str]] = None,
        levels: Optional[Sequence[Level]] = None,
    ) -> ConnectivityGraph:
        """
        Build the graph for every level of a building.

        Args:
            building: Building feature
            allowed_ids: If given, only these features take part (e.g. SIT-conform ones)
            levels: Levels to analyze (default: all building levels)
        """
        if levels is None:
            levels = self.spatial.get_building_levels(building)

        structures = []
        for level in levels:
            features = self.spatial.get_features_in_level(building, level)
            if allowed_ids is not None:
                features = [f for f in features if f.id in allowed_ids]
            structures.append(self.level_builder.build(level, features))

        connectivity = self.build(structures)
        logger.info(
            f"Graph with {connectivity.graph.number_of_nodes()} nodes, "
            f"{connectivity.graph.number_of_edges()} edges, "
            f"{len(connectivity.components)} components",
            extra={"building_id": building.id},
        )
        return connectivity

    def build(self, structures: Iterable[LevelStructure]) -> ConnectivityGraph:
        structures = list(structures)
        graph = nx.Graph()
        graph.add_node(OUTSIDE)

        for structure in structures:
            level = structure.level
            for area in structure.areas:
                graph.add_node(NodeKey(area.id, level))

            for door in structure.doors:
                if door.is_entrance:
                    for area_id in door.connected_areas:
                        graph.add_edge(OUTSIDE, NodeKey(area_id, level))
                elif door.connected_areas:
                    anchor = NodeKey(door.connected_areas[0], level)
                    for area_id in door.connected_areas[1:]:
                        graph.add_edge(anchor, NodeKey(area_id, level))

            for fake in structure.fake_doors:
                graph.add_edge(NodeKey(fake.a, level), NodeKey(fake.b, level))

        for connector in find_connectors(structures):
            add_connector_edges(graph, connector)

        components = [frozenset(c) for c in nx.connected_components(graph)]
        return ConnectivityGraph(
            graph=graph,
            components=components,
            levels=[s.level for s in structures],
            structures=structures,
        )


def spans_levels(feature: Feature) -> bool:
    """A level tag that is not a single digit, or repeat_on without level."""
    level_tag = feature.tags.get("level")
    if level_tag:
        return not is_single_level_tag(level_tag)
    return bool(feature.tags.get("repeat_on"))


def find_connectors(structures: Iterable[LevelStructure]) -> list[Feature]:
    """Stairs, elevators and ramps spanning several levels, once per feature id."""
    seen: set[str] = set()
    connectors = []
    for structure in structures:
        for area in structure.areas:
            feature = area.feature
            if feature.id in seen or not feature.is_connector or not spans_levels(feature):
                continue
            seen.add(feature.id)
            connectors.append(feature)
    return connectors


def add_connector_edges(graph: nx.Graph, connector: Feature) -> int:
    """
    Link the connector's nodes on consecutive levels.

    Returns:
        Number of edges added
    """
    level_spec = connector.tags.get("level") or connector.tags.get("repeat_on")
    chain = connector_chain(level_spec)
    if len(chain) < 2:
        logger.debug(f"No level chain for '{level_spec}'", extra={"feature_id": connector.id})
        return 0

    for lower, upper in zip(chain, chain[1:]):
        graph.add_edge(NodeKey(connector.id, lower), NodeKey(connector.id, upper))
    return len(chain) - 1
