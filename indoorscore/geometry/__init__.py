"""
Geometry Module - indoor coverage of building footprints.

Calculates per level and per building:
- Footprint area (level outline or building outline)
- Union area of tagged rooms, areas and corridors
- Coverage percentage and the untagged remainder polygon
"""

from .coverage import (
    CoverageCalculator,
    CoverageResult,
    LevelCoverage,
    coverage_percent,
    ring_area,
    shoelace_area,
)

__all__ = [
    'CoverageCalculator',
    'CoverageResult',
    'LevelCoverage',
    'coverage_percent',
    'ring_area',
    'shoelace_area',
]
