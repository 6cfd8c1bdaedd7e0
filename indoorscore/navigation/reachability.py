"""
Reachability metrics derived from the connected components of a building graph.

All ratios are fractions in [0, 1]. When a ratio has nothing to count
(no rooms, no levels, empty graph) it is 1: an empty building has no
unreachable part.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from shapely.geometry.base import BaseGeometry

from ..core.levels import Level
from ..core.models import OUTSIDE, NodeKey
from .graph_builder import ConnectivityGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomListEntry:
    """One indoor area on one level, as shown to the highlighting layer."""
    id: str
    geometry: Optional[BaseGeometry]
    properties: Mapping[str, Any]
    tags: Mapping[str, str]
    connected_doors: tuple[str, ...]
    has_door: bool
    outside_reachable: bool
    level: Level

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "tags": dict(self.tags),
            "connected_doors": list(self.connected_doors),
            "has_door": self.has_door,
            "outside_reachable": self.outside_reachable,
        }


@dataclass(frozen=True)
class NavigationIssue:
    """A navigability finding: code plus the ids (or levels) it concerns."""
    code: str
    subject_ids: tuple = field(default_factory=tuple)


class ReachabilityAnalyzer:
    """
    Answer reachability questions from a ConnectivityGraph.

    Usage:
        analyzer = ReachabilityAnalyzer(connectivity)
        analyzer.reachable_percent()        # 0.75
        analyzer.is_reachable_room("way/12", 1)
    """

    def __init__(self, connectivity: ConnectivityGraph):
        self.connectivity = connectivity
        self._outside = connectivity.outside_component or frozenset()
        self._room_list = self._build_room_list()

    def is_reachable_room(self, feature_id: str, level: Level) -> bool:
        node = NodeKey(feature_id, level)
        return any(node in c and OUTSIDE in c for c in self.connectivity.components)

    def is_reachable_level(self, level: Level) -> bool:
        return any(isinstance(n, NodeKey) and n.level == level for n in self._outside)

    def reachable_percent(self) -> float:
        """Share of area nodes in the component containing OUTSIDE."""
        reachable = 0
        unreachable = 0
        for component in self.connectivity.components:
            if OUTSIDE in component:
                reachable += len(component) - 1
            else:
                unreachable += len(component)
        if reachable + unreachable == 0:
            return 1.0
        return reachable / (reachable + unreachable)

    def reachable_percent_per_level(self, level: Level) -> float:
        reachable = 0
        unreachable = 0
        for component in self.connectivity.components:
            count = sum(1 for n in component if isinstance(n, NodeKey) and n.level == level)
            if OUTSIDE in component:
                reachable += count
            else:
                unreachable += count
        if reachable + unreachable == 0:
            return 1.0
        return reachable / (reachable + unreachable)

    def reachable_levels_percent(self) -> float:
        levels = self.connectivity.levels
        if not levels:
            return 1.0
        reachable = sum(1 for level in levels if self.is_reachable_level(level))
        return reachable / len(levels)

    def check_building_entrance(self) -> bool:
        """
        True when some component contains OUTSIDE.

        OUTSIDE is always a node, so this holds for every built graph; an
        isolated OUTSIDE still counts. See has_entrance_connection() for the
        stricter reading.
        """
        return any(OUTSIDE in c for c in self.connectivity.components)

    def has_entrance_connection(self) -> bool:
        """True when at least one area is directly reachable from OUTSIDE."""
        return len(self._outside) > 1

    def rooms_with_doors_percent(self) -> float:
        rooms = self._room_list
        if not rooms:
            return 1.0
        return sum(1 for r in rooms if r.has_door) / len(rooms)

    def room_list(self) -> list[RoomListEntry]:
        return list(self._room_list)

    def navigation_issues(self) -> list[NavigationIssue]:
        """Findings for missing entrance, door-less rooms, unreachable levels and areas."""
        issues = []
        if not self.has_entrance_connection():
            issues.append(NavigationIssue("ENTR-1"))

        doorless = tuple(r.id for r in self._room_list if not r.has_door)
        if doorless:
            issues.append(NavigationIssue("DOOR-1", doorless))

        unreachable_levels = tuple(lvl for lvl in self.connectivity.levels if not self.is_reachable_level(lvl))
        if unreachable_levels:
            issues.append(NavigationIssue("LVLREACH-1", unreachable_levels))

        unreachable = tuple(dict.fromkeys(r.id for r in self._room_list if not r.outside_reachable))
        if unreachable:
            issues.append(NavigationIssue("REACH-1", unreachable))
        return issues

    def _build_room_list(self) -> list[RoomListEntry]:
        rooms = []
        for structure in self.connectivity.structures:
            for area in structure.areas:
                rooms.append(RoomListEntry(
                    id=area.id,
                    geometry=area.feature.geometry,
                    properties=area.feature.properties,
                    tags=area.feature.tags,
                    connected_doors=area.connected_doors,
                    has_door=area.has_door,
                    outside_reachable=self.is_reachable_room(area.id, structure.level),
                    level=structure.level,
                ))
        return rooms
