"""
Tests for indoor coverage computation.

Run with: pytest tests/test_coverage.py -v
"""

import logging

import pytest
from shapely.errors import GEOSException
from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry

from indoorscore.core.models import Feature
from indoorscore.geometry.coverage import (
    CoverageCalculator,
    coverage_percent,
    ring_area,
    shoelace_area,
)
from indoorscore.ingest.geojson_store import GeoJSONSpatialStore
from indoorscore.utils.validation import ContractViolation


@pytest.fixture
def two_level_store(config) -> GeoJSONSpatialStore:
    """
    Level 0: outline 10 m², fully covered.
    Level 1: outline 20 m², two overlapping rooms covering 15 m².
    """
    return GeoJSONSpatialStore([
        Feature.from_tags("b", {"building": "yes", "building:levels": "2"}, box(0, 0, 0.002, 0.001)),
        Feature.from_tags("l0", {"indoor": "level", "level": "0"}, box(0, 0, 0.001, 0.001)),
        Feature.from_tags("l1", {"indoor": "level", "level": "1"}, box(0, 0, 0.002, 0.001)),
        Feature.from_tags("r0", {"indoor": "room", "level": "0"}, box(0, 0, 0.001, 0.001)),
        Feature.from_tags("r1", {"indoor": "room", "level": "1"}, box(0, 0, 0.001, 0.001)),
        Feature.from_tags("r2", {"indoor": "corridor", "level": "1"}, box(0.0005, 0, 0.0015, 0.001)),
    ], config=config)


class TestShoelace:
    """Tests for the shoelace area helpers."""

    def test_unit_square(self):
        assert ring_area([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]) == pytest.approx(1.0)

    def test_orientation_does_not_matter(self):
        assert ring_area([(0, 0), (0, 1), (1, 1), (1, 0), (0, 0)]) == pytest.approx(1.0)

    def test_degenerate_ring(self):
        assert ring_area([(0, 0), (1, 1)]) == 0.0

    def test_holes_are_subtracted(self):
        ring = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
        hole = [(1, 1), (2, 1), (2, 2), (1, 2), (1, 1)]
        assert shoelace_area(Polygon(ring, [hole])) == pytest.approx(15.0)

    def test_scale(self):
        assert shoelace_area(box(0, 0, 0.001, 0.001), 10_000_000) == pytest.approx(10.0)

    def test_non_polygonal(self):
        assert shoelace_area(None) == 0.0
        assert shoelace_area(box(0, 0, 1, 1).exterior) == 0.0


class TestCoveragePercent:
    """Tests for the percentage helper."""

    def test_zero_footprint(self):
        assert coverage_percent(5.0, 0.0) == 0.0

    def test_rounding(self):
        assert coverage_percent(1.0, 3.0) == 33.33

    def test_clamped(self):
        assert coverage_percent(12.0, 10.0) == 100.0


class TestCoverageCalculator:
    """Tests for CoverageCalculator."""

    def test_area_weighted_building_percent(self, two_level_store, config):
        building = two_level_store.find_feature("b")
        result = CoverageCalculator(two_level_store, config).compute(building, [0, 1])

        assert result.level_percents == [(0, 100.0), (1, 75.0)]
        # 25 / 30 of the footprint, not the mean of 100 and 75
        assert result.building_percent == pytest.approx(83.33)

    def test_difference_polygon(self, two_level_store, config):
        building = two_level_store.find_feature("b")
        result = CoverageCalculator(two_level_store, config).compute(building, [1])

        difference = result.difference_polygons[0]
        assert difference.equals(box(0.0015, 0, 0.002, 0.001))
        assert result.union_polygons[0].area == pytest.approx(box(0, 0, 0.0015, 0.001).area)

    def test_level_without_rooms(self, two_level_store, config):
        building = two_level_store.find_feature("b")
        level = CoverageCalculator(two_level_store, config).compute_level(building, 5)

        assert level.percent == 0.0
        assert level.union is None
        # No level outline on 5: the building outline is the footprint
        assert level.difference.equals(building.geometry)

    def test_fixture_building_fully_covered(self, store, building, config):
        result = CoverageCalculator(store, config).compute(building, store.get_building_levels(building))
        assert result.building_percent == 100.0

    def test_no_levels(self, store, building, config):
        result = CoverageCalculator(store, config).compute(building, [])
        assert result.levels == []
        assert result.building_percent == 0.0

    def test_percents_in_range(self, two_level_store, config):
        building = two_level_store.find_feature("b")
        result = CoverageCalculator(two_level_store, config).compute(building, [0, 1, 2])
        for _, percent in result.level_percents:
            assert 0.0 <= percent <= 100.0

    def test_failed_union_keeps_previous_value(self, two_level_store, config, monkeypatch, caplog):
        building = two_level_store.find_feature("b")
        bad = two_level_store.find_feature("r2").geometry
        original_union = BaseGeometry.union

        def flaky_union(self, other, *args, **kwargs):
            if other.equals(bad):
                raise GEOSException("TopologyException: side location conflict")
            return original_union(self, other, *args, **kwargs)

        monkeypatch.setattr(BaseGeometry, "union", flaky_union)
        with caplog.at_level(logging.WARNING):
            level = CoverageCalculator(two_level_store, config).compute_level(building, 1)

        assert level.percent == 50.0
        assert "Union failed" in caplog.text


class TestContracts:
    """Tests for programmer-contract violations."""

    def test_levels_must_be_a_list(self, store, building, config):
        with pytest.raises(ContractViolation):
            CoverageCalculator(store, config).compute(building, 0)

    def test_levels_cannot_be_none(self, store, building, config):
        with pytest.raises(ContractViolation):
            CoverageCalculator(store, config).compute(building, None)

    def test_building_required(self, store, config):
        with pytest.raises(ContractViolation):
            CoverageCalculator(store, config).compute(None, [0])

    def test_non_building_rejected(self, store, config):
        room = store.find_feature("way/11")
        with pytest.raises(ContractViolation) as exc_info:
            CoverageCalculator(store, config).compute(room, [0])
        assert exc_info.value.field == "building"
