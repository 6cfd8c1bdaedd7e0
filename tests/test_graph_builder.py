"""
Tests for the building connectivity graph.

Run with: pytest tests/test_graph_builder.py -v
"""

import networkx as nx
import pytest

from indoorscore.core.models import OUTSIDE, Feature, NodeKey
from indoorscore.navigation.graph_builder import (
    ConnectivityGraphBuilder,
    add_connector_edges,
    find_connectors,
    spans_levels,
)
from indoorscore.navigation.level_structure import AreaInfo, DoorInfo, FakeDoor, LevelStructure


def area(feature_id, tags=None):
    tags = tags or {"indoor": "room", "level": "0"}
    return AreaInfo(feature=Feature.from_tags(feature_id, tags))


def door(feature_id, areas, entrance=False):
    tags = {"door": "yes", "level": "0"}
    if entrance:
        tags["entrance"] = "yes"
    return DoorInfo(feature=Feature.from_tags(feature_id, tags), connected_areas=tuple(areas))


def stairs_on(levels, level_tag):
    feature = Feature.from_tags("stairs", {"indoor": "area", "stairs": "yes", "level": level_tag})
    return [LevelStructure(level=lvl, areas=[AreaInfo(feature=feature)]) for lvl in levels]


@pytest.fixture
def builder(store):
    return ConnectivityGraphBuilder(store)


class TestDoorEdges:
    """Tests for door and fake door edges."""

    def test_entrance_links_outside_to_every_area(self, builder):
        structure = LevelStructure(
            level=0,
            areas=[area("a"), area("b")],
            doors=[door("e", ["a", "b"], entrance=True)],
        )
        graph = builder.build([structure]).graph

        assert graph.has_edge(OUTSIDE, NodeKey("a", 0))
        assert graph.has_edge(OUTSIDE, NodeKey("b", 0))
        assert not graph.has_edge(NodeKey("a", 0), NodeKey("b", 0))

    def test_door_links_first_area_to_the_rest(self, builder):
        structure = LevelStructure(
            level=0,
            areas=[area("a"), area("b"), area("c")],
            doors=[door("d", ["a", "b", "c"])],
        )
        graph = builder.build([structure]).graph

        assert graph.has_edge(NodeKey("a", 0), NodeKey("b", 0))
        assert graph.has_edge(NodeKey("a", 0), NodeKey("c", 0))
        assert not graph.has_edge(NodeKey("b", 0), NodeKey("c", 0))
        assert graph.degree(OUTSIDE) == 0

    def test_fake_door_edge(self, builder):
        structure = LevelStructure(
            level=2,
            areas=[area("a", {"indoor": "corridor", "level": "2"}), area("b", {"indoor": "area", "level": "2"})],
            fake_doors=[FakeDoor("a", "b")],
        )
        graph = builder.build([structure]).graph
        assert graph.has_edge(NodeKey("a", 2), NodeKey("b", 2))

    def test_same_area_on_two_levels_gives_two_nodes(self, builder):
        shared = area("a", {"indoor": "area", "repeat_on": "0;1"})
        graph = builder.build([
            LevelStructure(level=0, areas=[shared]),
            LevelStructure(level=1, areas=[shared]),
        ]).graph
        assert set(graph.nodes) == {OUTSIDE, NodeKey("a", 0), NodeKey("a", 1)}

    def test_outside_exists_without_areas(self, builder):
        connectivity = builder.build([])
        assert list(connectivity.graph.nodes) == [OUTSIDE]
        assert connectivity.components == [frozenset({OUTSIDE})]


class TestConnectorEdges:
    """Tests for vertical connector edges."""

    def test_range_gives_consecutive_edges(self, builder):
        graph = builder.build(stairs_on([1, 2, 3, 4], "1-4")).graph

        assert graph.number_of_edges() == 3
        for lower, upper in ((1, 2), (2, 3), (3, 4)):
            assert graph.has_edge(NodeKey("stairs", lower), NodeKey("stairs", upper))

    def test_list_links_listed_levels_only(self, builder):
        graph = builder.build(stairs_on([1, 3, 5], "1;3;5")).graph

        assert graph.number_of_edges() == 2
        assert graph.has_edge(NodeKey("stairs", 1), NodeKey("stairs", 3))
        assert graph.has_edge(NodeKey("stairs", 3), NodeKey("stairs", 5))

    def test_negative_range_adds_no_edges(self, builder):
        graph = builder.build(stairs_on([-4, -3, -2, -1], "-4--1")).graph
        assert graph.number_of_edges() == 0

    def test_add_connector_edges_count(self):
        graph = nx.Graph()
        stairs = Feature.from_tags("s", {"indoor": "area", "stairs": "yes", "level": "0-2"})
        assert add_connector_edges(graph, stairs) == 2
        assert graph.has_edge(NodeKey("s", 0), NodeKey("s", 1))

    def test_repeat_on_connector(self):
        graph = nx.Graph()
        elevator = Feature.from_tags("e", {"highway": "elevator", "indoor": "area", "repeat_on": "0;2"})
        assert add_connector_edges(graph, elevator) == 1
        assert graph.has_edge(NodeKey("e", 0), NodeKey("e", 2))

    def test_spans_levels(self):
        assert spans_levels(Feature.from_tags("s", {"stairs": "yes", "level": "0;1"}))
        assert spans_levels(Feature.from_tags("s", {"stairs": "yes", "repeat_on": "0-3"}))
        assert not spans_levels(Feature.from_tags("s", {"stairs": "yes", "level": "1"}))

    def test_connectors_found_once(self):
        structures = stairs_on([0, 1], "0;1")
        single = Feature.from_tags("s2", {"indoor": "area", "stairs": "yes", "level": "0"})
        structures[0].areas.append(AreaInfo(feature=single))

        assert [c.id for c in find_connectors(structures)] == ["stairs"]


class TestComponents:
    """Tests for the connected-component partition."""

    def test_components_partition_nodes(self, builder, building):
        connectivity = builder.build_for_building(building)
        nodes = set(connectivity.graph.nodes)

        assert set().union(*connectivity.components) == nodes
        assert sum(len(c) for c in connectivity.components) == len(nodes)

    def test_fixture_building_components(self, builder, building):
        connectivity = builder.build_for_building(building)

        assert connectivity.outside_component == frozenset({
            OUTSIDE,
            NodeKey("way/10", 0), NodeKey("way/11", 0), NodeKey("way/13", 0),
            NodeKey("way/13", 1), NodeKey("way/20", 1),
        })
        assert connectivity.component_of(NodeKey("way/12", 0)) == frozenset({NodeKey("way/12", 0)})
        assert connectivity.levels == [0, 1]
        assert len(connectivity.area_nodes()) == 7

    def test_allowed_ids_filter_features(self, builder, building):
        allowed = {"way/10", "way/11", "way/12", "way/13", "node/2", "way/20", "way/21"}
        connectivity = builder.build_for_building(building, allowed_ids=allowed)
        assert connectivity.outside_component == frozenset({OUTSIDE})

    def test_explicit_levels(self, builder, building):
        connectivity = builder.build_for_building(building, levels=[1])

        assert connectivity.levels == [1]
        assert NodeKey("way/21", 1) in connectivity.graph
        assert NodeKey("way/10", 0) not in connectivity.graph
