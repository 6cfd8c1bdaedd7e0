"""
Analysis Module - scoring single buildings.

Combines coverage, SIT conformity, accessibility and reachability into a
BuildingScore.
"""

from .conformity import (
    AccessibilityReport,
    ConformityAnalyzer,
    ConformityReport,
    StaticConformityAnalyzer,
)
from .building_analyzer import (
    BuildingAnalysis,
    BuildingAnalyzer,
    BuildingScore,
    navigability_percent,
)

__all__ = [
    'AccessibilityReport',
    'ConformityAnalyzer',
    'ConformityReport',
    'StaticConformityAnalyzer',
    'BuildingAnalysis',
    'BuildingAnalyzer',
    'BuildingScore',
    'navigability_percent',
]
