"""
Models for indoor building data.

Covers the GeoJSON input schema (pydantic, as produced by osmtogeojson)
and the immutable Feature record the analysis works on. A feature's role
(room, area, corridor, door, connector, building, level outline) is
decided once from its tags when the Feature is created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

from .levels import Level, feature_levels


# =============================================================================
# ENUMS
# =============================================================================


class FeatureKind(str, Enum):
    ROOM = "room"
    AREA = "area"
    CORRIDOR = "corridor"
    LEVEL = "level"
    BUILDING = "building"
    OTHER = "other"


INDOOR_AREA_KINDS = frozenset({FeatureKind.ROOM, FeatureKind.AREA, FeatureKind.CORRIDOR})

POLYGONAL_TYPES = frozenset({"Polygon", "MultiPolygon"})


# =============================================================================
# INPUT SCHEMA (GeoJSON from osmtogeojson)
# =============================================================================


class GeoJSONFeature(BaseModel):
    """One GeoJSON feature. Tags live in properties.tags or flat in properties."""

    model_config = ConfigDict(extra="allow")

    type: Literal["Feature"] = "Feature"
    id: Optional[str] = None
    geometry: Optional[dict[str, Any]] = None
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("properties", mode="before")
    @classmethod
    def _default_properties(cls, value: Any) -> dict[str, Any]:
        return value or {}

    @property
    def feature_id(self) -> Optional[str]:
        if self.id is not None:
            return self.id
        prop_id = self.properties.get("id")
        return None if prop_id is None else str(prop_id)

    @property
    def tags(self) -> dict[str, str]:
        raw = self.properties.get("tags")
        if not isinstance(raw, dict):
            raw = {k: v for k, v in self.properties.items() if k not in ("id", "type", "relations", "meta")}
        return {str(k): str(v) for k, v in raw.items() if v is not None}


class GeoJSONFeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[GeoJSONFeature] = Field(default_factory=list)


# =============================================================================
# ANALYSIS RECORDS
# =============================================================================


@dataclass(frozen=True, eq=False)
class Feature:
    """
    A tagged map feature with its role resolved.

    Compare features by id; instances use identity equality.
    """

    id: str
    geometry: Optional[BaseGeometry]
    tags: Mapping[str, str]
    properties: Mapping[str, Any] = field(default_factory=dict)
    kind: FeatureKind = FeatureKind.OTHER
    is_door: bool = False
    is_connector: bool = False
    levels: tuple[Level, ...] = ()

    @classmethod
    def from_tags(
        cls,
        feature_id: str,
        tags: Mapping[str, str],
        geometry: Optional[BaseGeometry] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> "Feature":
        """Create a feature, classifying it from its tags."""
        tags = dict(tags)
        return cls(
            id=str(feature_id),
            geometry=geometry,
            tags=tags,
            properties=dict(properties or {}),
            kind=classify_kind(tags),
            is_door=bool(tags.get("door") or tags.get("addr:door")),
            is_connector=bool(
                tags.get("stairs") or tags.get("highway") == "elevator" or tags.get("ramp")
            ),
            levels=tuple(feature_levels(tags, relations=(properties or {}).get("relations"))),
        )

    @classmethod
    def from_geojson(cls, record: GeoJSONFeature) -> "Feature":
        """
        Create a feature from a parsed GeoJSON record.

        Raises:
            ValueError: If the record has no id or its geometry cannot be built
        """
        feature_id = record.feature_id
        if feature_id is None:
            raise ValueError("GeoJSON feature has no id")
        geometry = shape(record.geometry) if record.geometry else None
        return cls.from_tags(feature_id, record.tags, geometry=geometry, properties=record.properties)

    @property
    def is_indoor_area(self) -> bool:
        """indoor=room, indoor=area or indoor=corridor."""
        return self.kind in INDOOR_AREA_KINDS

    @property
    def has_level_tag(self) -> bool:
        """True when the feature carries a level or repeat_on tag."""
        return bool(self.tags.get("level") or self.tags.get("repeat_on"))

    @property
    def is_building(self) -> bool:
        return self.kind == FeatureKind.BUILDING and self.is_polygonal

    @property
    def is_polygonal(self) -> bool:
        return self.geometry is not None and self.geometry.geom_type in POLYGONAL_TYPES

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": mapping(self.geometry) if self.geometry is not None else None,
            "properties": {"tags": dict(self.tags)},
        }


def classify_kind(tags: Mapping[str, str]) -> FeatureKind:
    """Resolve the role of a feature from its tags."""
    indoor = tags.get("indoor")
    if indoor == "room":
        return FeatureKind.ROOM
    if indoor == "area":
        return FeatureKind.AREA
    if indoor == "corridor":
        return FeatureKind.CORRIDOR
    if indoor == "level":
        return FeatureKind.LEVEL
    if tags.get("building") or tags.get("min_level") or tags.get("max_level"):
        return FeatureKind.BUILDING
    return FeatureKind.OTHER


class NodeKey(NamedTuple):
    """Graph node identity: one indoor area on one level."""

    feature_id: str
    level: Level

    def __str__(self) -> str:
        return f"{self.feature_id}_{self.level}"


# Exterior of the building
OUTSIDE = "outside"
