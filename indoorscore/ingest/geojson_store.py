"""
In-memory spatial store over a GeoJSON FeatureCollection.

Implements SpatialCollaborator with shapely predicates. Coordinates are
WGS84 degrees; the small tolerances in Settings are expressed in degrees.

Usage:
    store = GeoJSONSpatialStore.from_file("building.geojson")
    for building in store.get_buildings():
        levels = store.get_building_levels(building)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import numpy as np
import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from ..core.config import Settings, settings as default_settings
from ..core.levels import Level
from ..core.models import Feature, FeatureKind, GeoJSONFeatureCollection

logger = logging.getLogger(__name__)


class GeoJSONSpatialStore:
    """
    Answer geometry questions about buildings, levels and indoor features.

    The store is read-only after construction, so one instance can be shared
    by concurrent building analyses.
    """

    def __init__(self, features: Iterable[Feature], config: Optional[Settings] = None):
        self.config = config or default_settings
        self._features: list[Feature] = list(features)
        self._by_id: dict[str, Feature] = {}
        for feature in self._features:
            if feature.id in self._by_id:
                logger.warning("Duplicate feature id, keeping first", extra={"feature_id": feature.id})
                continue
            self._by_id[feature.id] = feature

    @classmethod
    def from_geojson(cls, data: dict[str, Any], config: Optional[Settings] = None) -> "GeoJSONSpatialStore":
        """
        Build a store from a parsed GeoJSON FeatureCollection.

        Features without an id or with unreadable geometry are skipped with a warning.
        """
        collection = GeoJSONFeatureCollection.model_validate(data)
        features = []
        for record in collection.features:
            try:
                features.append(Feature.from_geojson(record))
            except (ValueError, TypeError, AttributeError, GEOSException) as e:
                logger.warning(
                    f"Skipping unreadable feature: {e}",
                    extra={"feature_id": record.feature_id},
                )
        logger.debug(f"Loaded {len(features)} of {len(collection.features)} features")
        return cls(features, config=config)

    @classmethod
    def from_file(cls, path: str | Path, config: Optional[Settings] = None) -> "GeoJSONSpatialStore":
        """Load a GeoJSON FeatureCollection file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_geojson(json.load(f), config=config)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @property
    def features(self) -> list[Feature]:
        return list(self._features)

    def find_feature(self, feature_id: str) -> Optional[Feature]:
        return self._by_id.get(feature_id)

    def get_buildings(self) -> list[Feature]:
        """All building outlines, in file order."""
        return [f for f in self._features if f.is_building]

    def get_building_levels(self, building: Feature) -> list[Level]:
        """
        Levels of a building: its own tags plus every feature it intersects.

        Returns:
            Sorted list of levels
        """
        levels = set(building.levels)
        if building.geometry is None:
            return sorted(levels)

        for feature in self._features:
            if feature is building or feature.geometry is None:
                continue
            if feature.kind == FeatureKind.BUILDING:
                continue
            if building.geometry.intersects(feature.geometry):
                levels.update(feature.levels)
        return sorted(levels)

    def get_features_in_level(self, building: Optional[Feature], level: Level) -> list[Feature]:
        """
        Features placed on a level near a building.

        Level outlines, buildings and building parts are excluded. Points come last.
        """
        search_area = None
        if building is not None and building.geometry is not None:
            search_area = building.geometry.buffer(self.config.level_search_buffer_deg)

        result = []
        for feature in self._features:
            if level not in feature.levels or feature.geometry is None:
                continue
            if feature.kind in (FeatureKind.LEVEL, FeatureKind.BUILDING) or feature.tags.get("building:part"):
                continue
            if search_area is not None and not search_area.intersects(feature.geometry):
                continue
            result.append(feature)

        result.sort(key=lambda f: f.geometry.geom_type == "Point")
        return result

    def get_level_footprint(self, building: Feature, level: Level) -> list[Feature]:
        """indoor=level outlines on this level lying (mostly) inside the building."""
        return [
            f for f in self._features
            if f.kind == FeatureKind.LEVEL
            and level in f.levels
            and self.is_overlapping_enough(building, f)
        ]

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def contains_with_boundary(self, large: Feature, small: Feature) -> bool:
        """Every vertex of small lies inside large or on its outline."""
        if large.geometry is None or small.geometry is None:
            return False
        if large.geometry.equals(small.geometry) or large.geometry.contains(small.geometry):
            return True
        if not large.geometry.intersects(small.geometry):
            return False
        return self._covered_vertex_count(large.geometry, small.geometry) == len(_vertices(small.geometry))

    def is_on_contour(self, wide: Feature, small: Feature) -> bool:
        """small touches the outline of wide without being strictly inside it."""
        if wide.geometry is None or small.geometry is None:
            return False
        return not wide.geometry.contains(small.geometry) and self.contains_with_boundary(wide, small)

    def is_overlapping(self, a: Feature, b: Feature) -> bool:
        """
        Two features share at least overlap_min_points vertices with each other.

        Rooms sharing a wall count as overlapping, which is what makes them
        adjacent for navigation purposes.
        """
        if a.geometry is None or b.geometry is None:
            return False
        if not a.geometry.intersects(b.geometry):
            return False
        return self._contains_part(a.geometry, b.geometry) or self._contains_part(b.geometry, a.geometry)

    def is_overlapping_enough(self, container: Feature, feature: Feature) -> bool:
        """feature lies within container for at least footprint_overlap_ratio of its area."""
        if container is None or feature is None:
            return False
        if container.geometry is None or feature.geometry is None:
            return False
        if not container.geometry.intersects(feature.geometry):
            return False
        if self.contains_with_boundary(container, feature) or self.contains_with_boundary(feature, container):
            return True
        if container.is_polygonal and feature.is_polygonal:
            try:
                common = container.geometry.intersection(feature.geometry)
            except GEOSException as e:
                logger.debug(f"Intersection failed: {e}", extra={"feature_id": feature.id})
                return False
            return common.area >= feature.geometry.area * self.config.footprint_overlap_ratio
        return True

    def _contains_part(self, large: BaseGeometry, small: BaseGeometry) -> bool:
        if large.equals(small) or large.contains(small):
            return True
        return self._covered_vertex_count(large, small) >= self.config.overlap_min_points

    def _covered_vertex_count(self, large: BaseGeometry, small: BaseGeometry) -> int:
        wider = large.buffer(self.config.boundary_tolerance_deg)
        points = shapely.points(_vertices(small))
        return int(np.count_nonzero(shapely.covers(wider, points)))


def _vertices(geometry: BaseGeometry) -> np.ndarray:
    """Distinct vertices of a geometry (closing ring coordinates dropped)."""
    coords = shapely.get_coordinates(geometry)
    if len(coords) == 0:
        return coords
    return np.unique(coords, axis=0)
