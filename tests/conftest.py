"""
Pytest configuration and fixtures for indoorscore tests.

Provides reusable test fixtures for:
- A small two-level building with doors, a corridor and stairs
- A door-less single-room building
- Spatial stores and GeoJSON collections built from them

Coordinates are WGS84 degrees. The main building is a 0.001° square:

    level 0                          level 1
    +-----------+-----------+        +-----------------------+
    |  way/11   |  way/12   |        |        way/21         |
    |  (room)   |  (room,   |        |   (room, no door)     |
    |     D     |  no door) |        |                       |
    +-----------+-----------+        +-----------------------+
    |         way/10    [S]  |        |         way/20    [S]  |
    |       (corridor)       |        |       (corridor)       |
    +-----------E-----------+        +-----------------------+

E = entrance node/1, D = door node/2, S = stairs way/13 on "0;1".
"""

import pytest
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shapely.geometry import Point, box

from indoorscore.core.config import Settings
from indoorscore.core.models import Feature
from indoorscore.ingest.geojson_store import GeoJSONSpatialStore


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def config() -> Settings:
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


# =============================================================================
# FEATURE FIXTURES
# =============================================================================

@pytest.fixture
def navigable_features() -> list:
    """Two-level building: entrance, one door, stairs, two door-less rooms."""
    return [
        Feature.from_tags("way/1", {"building": "yes", "building:levels": "2"}, box(0, 0, 0.001, 0.001)),
        # Level 0
        Feature.from_tags("way/10", {"indoor": "corridor", "level": "0"}, box(0, 0, 0.001, 0.0005)),
        Feature.from_tags("way/11", {"indoor": "room", "level": "0"}, box(0, 0.0005, 0.0005, 0.001)),
        Feature.from_tags("way/12", {"indoor": "room", "level": "0"}, box(0.0005, 0.0005, 0.001, 0.001)),
        Feature.from_tags(
            "way/13", {"indoor": "area", "stairs": "yes", "level": "0;1"},
            box(0.0008, 0.0001, 0.0009, 0.0002),
        ),
        Feature.from_tags("node/1", {"door": "yes", "entrance": "main", "level": "0"}, Point(0.0005, 0)),
        Feature.from_tags("node/2", {"door": "yes", "level": "0"}, Point(0.00025, 0.0005)),
        # Level 1
        Feature.from_tags("way/20", {"indoor": "corridor", "level": "1"}, box(0, 0, 0.001, 0.0005)),
        Feature.from_tags("way/21", {"indoor": "room", "level": "1"}, box(0, 0.0005, 0.001, 0.001)),
    ]


@pytest.fixture
def closed_features() -> list:
    """Single-level building with one room and no door, far from the first one."""
    return [
        Feature.from_tags("way/2", {"building": "yes"}, box(0.01, 0, 0.011, 0.001)),
        Feature.from_tags("way/30", {"indoor": "room", "level": "0"}, box(0.01, 0, 0.011, 0.001)),
    ]


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def store(navigable_features, config) -> GeoJSONSpatialStore:
    """Store holding only the navigable building."""
    return GeoJSONSpatialStore(navigable_features, config=config)


@pytest.fixture
def campus_store(navigable_features, closed_features, config) -> GeoJSONSpatialStore:
    """Store holding both buildings."""
    return GeoJSONSpatialStore(navigable_features + closed_features, config=config)


@pytest.fixture
def building(store) -> Feature:
    return store.find_feature("way/1")


@pytest.fixture
def campus_geojson(navigable_features, closed_features) -> dict:
    """Both buildings as a GeoJSON FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [f.to_geojson() for f in navigable_features + closed_features],
    }


@pytest.fixture
def campus_file(campus_geojson, tmp_path) -> Path:
    """Both buildings written to a .geojson file."""
    import json
    path = tmp_path / "campus.geojson"
    path.write_text(json.dumps(campus_geojson), encoding="utf-8")
    return path
