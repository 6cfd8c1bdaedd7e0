"""
Orchestrator Module - scoring many buildings at once.

Runs the single-building analysis over a working set (optionally in a
thread pool), then derives global means and per-building colors.
"""

from .colors import building_color, building_color_hex, clamp_unit, rgb_to_hex
from .multi_building import (
    METRICS,
    AggregationState,
    BuildingColor,
    MultiBuildingAnalyzer,
    global_percentages,
)

__all__ = [
    'building_color',
    'building_color_hex',
    'clamp_unit',
    'rgb_to_hex',
    'METRICS',
    'AggregationState',
    'BuildingColor',
    'MultiBuildingAnalyzer',
    'global_percentages',
]
