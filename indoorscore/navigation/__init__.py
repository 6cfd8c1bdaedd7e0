"""
Navigation Module - indoor connectivity of a building.

Turns rooms, doors, corridors and vertical connectors into a graph and
answers reachability questions from its connected components.
"""

from .level_structure import (
    AreaInfo,
    DoorInfo,
    FakeDoor,
    LevelStructure,
    LevelStructureBuilder,
)
from .graph_builder import (
    ConnectivityGraph,
    ConnectivityGraphBuilder,
    add_connector_edges,
    find_connectors,
    spans_levels,
)
from .reachability import NavigationIssue, ReachabilityAnalyzer, RoomListEntry

__all__ = [
    'AreaInfo',
    'DoorInfo',
    'FakeDoor',
    'LevelStructure',
    'LevelStructureBuilder',
    'ConnectivityGraph',
    'ConnectivityGraphBuilder',
    'add_connector_edges',
    'find_connectors',
    'spans_levels',
    'NavigationIssue',
    'ReachabilityAnalyzer',
    'RoomListEntry',
]
