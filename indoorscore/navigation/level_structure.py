"""
Level structure: which doors touch which indoor areas on one level.

For a single level this module:
- splits features into doors and indoor areas (room/area/corridor with a
  level or repeat_on tag)
- links every door to the areas whose outline or interior it lies on
- infers "fake doors" between overlapping door-less areas/corridors,
  where the mapper modelled an open passage instead of a door
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..core.levels import Level
from ..core.models import Feature, FeatureKind
from ..core.spatial import SpatialCollaborator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AreaInfo:
    """An indoor area on a level and the doors touching it."""
    feature: Feature
    connected_doors: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.feature.id

    @property
    def kind(self) -> FeatureKind:
        return self.feature.kind

    @property
    def tags(self):
        return self.feature.tags

    @property
    def has_door(self) -> bool:
        """Rooms need a door; areas and corridors are open by nature."""
        return self.kind != FeatureKind.ROOM or len(self.connected_doors) > 0


@dataclass(frozen=True)
class DoorInfo:
    """A door and the areas it connects, in area order."""
    feature: Feature
    connected_areas: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.feature.id

    @property
    def is_entrance(self) -> bool:
        return bool(self.feature.tags.get("entrance"))


@dataclass(frozen=True)
class FakeDoor:
    """Inferred passage between two overlapping areas (unordered pair)."""
    a: str
    b: str

    def key(self) -> frozenset:
        return frozenset((self.a, self.b))


@dataclass
class LevelStructure:
    """Doors, areas and inferred passages of one level."""
    level: Level
    areas: list[AreaInfo] = field(default_factory=list)
    doors: list[DoorInfo] = field(default_factory=list)
    fake_doors: list[FakeDoor] = field(default_factory=list)
    unconnected_doors: list[Feature] = field(default_factory=list)


class LevelStructureBuilder:
    """
    Build a LevelStructure from the features of one level.

    Usage:
        builder = LevelStructureBuilder(store)
        structure = builder.build(0, store.get_features_in_level(building, 0))
    """

    def __init__(self, spatial: SpatialCollaborator):
        self.spatial = spatial

    def build(self, level: Level, features: Iterable[Feature]) -> LevelStructure:
        features = list(features)
        doors = [f for f in features if f.is_door]
        areas = [f for f in features if f.is_indoor_area and f.has_level_tag]

        area_infos = [
            AreaInfo(feature=area, connected_doors=self._doors_of(area, doors))
            for area in areas
        ]
        fake_doors = self._fake_doors(areas)

        connected: list[DoorInfo] = []
        unconnected: list[Feature] = []
        for door in doors:
            area_ids = tuple(info.id for info in area_infos if door.id in info.connected_doors)
            if area_ids:
                connected.append(DoorInfo(feature=door, connected_areas=area_ids))
            else:
                unconnected.append(door)

        logger.debug(
            f"{len(area_infos)} areas, {len(connected)} connected doors, "
            f"{len(unconnected)} unconnected doors, {len(fake_doors)} fake doors",
            extra={"level": level},
        )
        return LevelStructure(
            level=level,
            areas=area_infos,
            doors=connected,
            fake_doors=fake_doors,
            unconnected_doors=unconnected,
        )

    def _doors_of(self, area: Feature, doors: Sequence[Feature]) -> tuple[str, ...]:
        return tuple(
            door.id for door in doors
            if self.spatial.is_on_contour(area, door) or self.spatial.contains_with_boundary(area, door)
        )

    def _fake_doors(self, areas: Sequence[Feature]) -> list[FakeDoor]:
        """Overlapping area/corridor pairs, each pair once, first-seen orientation."""
        open_areas = [a for a in areas if a.kind != FeatureKind.ROOM and not a.is_door]

        seen: set[frozenset] = set()
        result: list[FakeDoor] = []
        for source in open_areas:
            for other in open_areas:
                if other.id == source.id:
                    continue
                pair = frozenset((source.id, other.id))
                if pair in seen:
                    continue
                if self.spatial.is_overlapping(source, other):
                    seen.add(pair)
                    result.append(FakeDoor(a=source.id, b=other.id))
        return result
