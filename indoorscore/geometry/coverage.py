"""
Indoor coverage of a building.

For each level:
1. Footprint = the level outline (indoor=level), or the building outline
2. Footprint area with the shoelace formula, scaled to approximate m²
3. Union of all room/area/corridor polygons on the level
4. Coverage = union area / footprint area

The whole-building figure weights levels by footprint area
(Σ room area / Σ footprint area), it is not the mean of level figures.

Input: building feature, explicit level list, spatial collaborator
Output: CoverageResult with per-level percentages and polygons
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from ..core.config import Settings, settings as default_settings
from ..core.levels import Level
from ..core.models import Feature
from ..core.spatial import SpatialCollaborator
from ..utils.validation import require_building, require_levels

logger = logging.getLogger(__name__)


@dataclass
class LevelCoverage:
    """Coverage of one level."""
    level: Level
    footprint_area_m2: float
    room_area_m2: float
    percent: float  # 0-100, two decimals
    union: Optional[BaseGeometry] = None  # tagged areas
    difference: Optional[BaseGeometry] = None  # untagged part of the footprint


@dataclass
class CoverageResult:
    """Coverage of a building over a set of levels."""
    levels: list[LevelCoverage] = field(default_factory=list)
    building_percent: float = 0.0

    @property
    def level_percents(self) -> list[tuple[Level, float]]:
        return [(lc.level, lc.percent) for lc in self.levels]

    @property
    def union_polygons(self) -> list[Optional[BaseGeometry]]:
        return [lc.union for lc in self.levels]

    @property
    def difference_polygons(self) -> list[Optional[BaseGeometry]]:
        return [lc.difference for lc in self.levels]


def ring_area(coords) -> float:
    """Shoelace area of a closed ring, in squared coordinate units."""
    xy = np.asarray(coords, dtype=float)
    if len(xy) < 3:
        return 0.0
    x, y = xy[:, 0], xy[:, 1]
    return abs(float(np.sum((y[:-1] + y[1:]) * (x[:-1] - x[1:])))) / 2


def shoelace_area(geometry: Optional[BaseGeometry], scale: float = 1.0) -> float:
    """
    Planar area of a polygonal geometry, holes subtracted, times scale.

    Non-polygonal parts (points, lines) contribute nothing.
    """
    total = 0.0
    for polygon in _polygons(geometry):
        total += ring_area(polygon.exterior.coords)
        for interior in polygon.interiors:
            total -= ring_area(interior.coords)
    return max(total, 0.0) * scale


def coverage_percent(room_area: float, footprint_area: float) -> float:
    """room_area / footprint_area as a percentage in [0, 100], 0 for an empty footprint."""
    if footprint_area <= 0:
        return 0.0
    return round(min(max(100.0 * room_area / footprint_area, 0.0), 100.0), 2)


class CoverageCalculator:
    """
    Compute indoor coverage for a building.

    Usage:
        calculator = CoverageCalculator(store)
        result = calculator.compute(building, [0, 1, 2])
        result.building_percent  # 83.33
    """

    def __init__(self, spatial: SpatialCollaborator, config: Optional[Settings] = None):
        self.spatial = spatial
        self.config = config or default_settings

    def compute(self, building: Feature, levels: Sequence[Level]) -> CoverageResult:
        require_building(building)
        levels = require_levels(levels)

        level_results = [self.compute_level(building, level) for level in levels]

        total_rooms = sum(lc.room_area_m2 for lc in level_results)
        total_footprint = sum(lc.footprint_area_m2 for lc in level_results)
        result = CoverageResult(
            levels=level_results,
            building_percent=coverage_percent(total_rooms, total_footprint),
        )
        logger.debug(f"Coverage {result.building_percent}%", extra={"building_id": building.id})
        return result

    def compute_level(self, building: Feature, level: Level) -> LevelCoverage:
        footprint = self._footprint(building, level)
        footprint_area = shoelace_area(footprint, self.config.area_scale)

        rooms = [
            f for f in self.spatial.get_features_in_level(building, level)
            if f.is_indoor_area and f.is_polygonal
        ]
        union = self._union(rooms, building.id, level)

        if union is None:
            return LevelCoverage(
                level=level,
                footprint_area_m2=footprint_area,
                room_area_m2=0.0,
                percent=0.0,
                union=None,
                difference=footprint,
            )

        room_area = shoelace_area(union, self.config.area_scale)
        return LevelCoverage(
            level=level,
            footprint_area_m2=footprint_area,
            room_area_m2=room_area,
            percent=coverage_percent(room_area, footprint_area),
            union=union,
            difference=self._difference(footprint, union, building.id, level),
        )

    def _footprint(self, building: Feature, level: Level) -> Optional[BaseGeometry]:
        for outline in self.spatial.get_level_footprint(building, level) or []:
            if outline.is_polygonal:
                return outline.geometry
        return building.geometry

    def _union(self, rooms: Sequence[Feature], building_id: str, level: Level) -> Optional[BaseGeometry]:
        """Union rooms in order; a failing step keeps the previous union."""
        running: Optional[BaseGeometry] = None
        for room in rooms:
            if running is None:
                running = room.geometry
                continue
            try:
                running = running.union(room.geometry)
            except (GEOSException, ValueError) as e:
                logger.warning(
                    f"Union failed, skipping {room.id}: {e}",
                    extra={"building_id": building_id, "level": level},
                )
        return running

    def _difference(
        self, footprint: Optional[BaseGeometry], union: BaseGeometry, building_id: str, level: Level
    ) -> Optional[BaseGeometry]:
        if footprint is None:
            return None
        try:
            return footprint.difference(union)
        except (GEOSException, ValueError) as e:
            logger.warning(
                f"Difference failed, using raw footprint: {e}",
                extra={"building_id": building_id, "level": level},
            )
            return footprint


def _polygons(geometry: Optional[BaseGeometry]) -> list[Polygon]:
    if geometry is None or geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if isinstance(geometry, (MultiPolygon, GeometryCollection)):
        parts = []
        for part in geometry.geoms:
            parts.extend(_polygons(part))
        return parts
    return []
