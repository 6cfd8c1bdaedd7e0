"""
Spatial collaborator interface.

The analysis never reaches for a global store: every builder receives an
object satisfying SpatialCollaborator. GeoJSONSpatialStore in
indoorscore.ingest is the bundled implementation.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .levels import Level
from .models import Feature


@runtime_checkable
class SpatialCollaborator(Protocol):
    """Read-only access to building, level and feature geometry."""

    def find_feature(self, feature_id: str) -> Optional[Feature]:
        ...

    def is_on_contour(self, area: Feature, door: Feature) -> bool:
        """Door lies on the outline of the area (touching, not strictly inside)."""
        ...

    def contains_with_boundary(self, area: Feature, door: Feature) -> bool:
        """Door lies inside the area, boundary included."""
        ...

    def is_overlapping(self, a: Feature, b: Feature) -> bool:
        ...

    def get_features_in_level(self, building: Feature, level: Level) -> list[Feature]:
        ...

    def get_level_footprint(self, building: Feature, level: Level) -> list[Feature]:
        """indoor=level outlines for the level, empty when none are mapped."""
        ...

    def get_buildings(self) -> list[Feature]:
        ...

    def get_building_levels(self, building: Feature) -> list[Level]:
        ...
