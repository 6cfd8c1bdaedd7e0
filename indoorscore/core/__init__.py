"""Core models and utilities."""

from .config import Settings, settings
from .levels import (
    Level,
    connector_chain,
    feature_levels,
    is_landuse,
    is_single_level_tag,
    normalize_level,
    parse_levels,
    relation_levels,
)
from .models import (
    OUTSIDE,
    Feature,
    FeatureKind,
    GeoJSONFeature,
    GeoJSONFeatureCollection,
    NodeKey,
    classify_kind,
)
from .spatial import SpatialCollaborator

__all__ = [
    "Settings",
    "settings",
    "Level",
    "connector_chain",
    "feature_levels",
    "is_landuse",
    "is_single_level_tag",
    "normalize_level",
    "parse_levels",
    "relation_levels",
    "OUTSIDE",
    "Feature",
    "FeatureKind",
    "GeoJSONFeature",
    "GeoJSONFeatureCollection",
    "NodeKey",
    "classify_kind",
    "SpatialCollaborator",
]
