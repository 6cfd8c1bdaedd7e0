"""Data ingestion: loading indoor map data into a spatial store."""

from .geojson_store import GeoJSONSpatialStore

__all__ = ["GeoJSONSpatialStore"]
