"""
Single-building analysis.

Runs the three checks for one building and folds them into a score:
- coverage: tagged indoor area / footprint area (all levels)
- conformity: SIT conformity status from the conformity analyzer
- accessibility: mean of eight accessibility sub-scores
- reachability: doors, level reachability, area reachability and entrance

Graph and reachability state is created fresh for each call and not kept
by the analyzer, so one analyzer can serve several threads.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from ..core.config import Settings, settings as default_settings
from ..core.levels import Level
from ..core.models import Feature
from ..core.spatial import SpatialCollaborator
from ..geometry.coverage import CoverageCalculator, CoverageResult
from ..navigation.graph_builder import ConnectivityGraph, ConnectivityGraphBuilder
from ..navigation.reachability import ReachabilityAnalyzer
from ..utils.validation import require_building
from .conformity import ConformityAnalyzer, ConformityReport

logger = logging.getLogger(__name__)


@dataclass
class BuildingScore:
    """Per-building percentages (0-100) and the blended color value (0-1)."""
    building_id: str
    coverage: float = 0.0
    conformity: float = 0.0
    accessibility: float = 0.0
    reachability: float = 0.0

    @property
    def color_value(self) -> float:
        return 0.25 * (
            self.accessibility / 100
            + self.conformity / 100
            + self.coverage / 100
            + self.reachability / 100
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "building_id": self.building_id,
            "coverage": self.coverage,
            "conformity": self.conformity,
            "accessibility": self.accessibility,
            "reachability": self.reachability,
            "color_value": self.color_value,
        }


@dataclass
class BuildingAnalysis:
    """Everything computed for one building."""
    building: Feature
    levels: list[Level]
    coverage: CoverageResult
    conformity: ConformityReport
    connectivity: ConnectivityGraph
    reachability: ReachabilityAnalyzer
    score: BuildingScore
    processing_time_sec: float = 0.0


def navigability_percent(reachability: ReachabilityAnalyzer) -> float:
    """
    Composite reachability in percent.

    Mean of rooms-with-doors, reachable levels, reachable areas and a flat
    100 when the building has an outside-reachable component.
    """
    total = (
        reachability.rooms_with_doors_percent() * 100
        + reachability.reachable_levels_percent() * 100
        + reachability.reachable_percent() * 100
    )
    if reachability.check_building_entrance():
        total += 100
    return total / 4


class BuildingAnalyzer:
    """
    Analyze one building end to end.

    Usage:
        analyzer = BuildingAnalyzer(store, StaticConformityAnalyzer())
        analysis = analyzer.analyze(building)
        analysis.score.reachability  # 87.5
    """

    def __init__(
        self,
        spatial: SpatialCollaborator,
        conformity_analyzer: ConformityAnalyzer,
        config: Optional[Settings] = None,
    ):
        self.spatial = spatial
        self.conformity_analyzer = conformity_analyzer
        self.config = config or default_settings
        self.coverage_calculator = CoverageCalculator(spatial, self.config)
        self.graph_builder = ConnectivityGraphBuilder(spatial)

    def analyze(self, building: Feature) -> BuildingAnalysis:
        start = time.time()
        require_building(building)

        levels = self.spatial.get_building_levels(building)
        coverage = self.coverage_calculator.compute(building, levels)

        conformity = self.conformity_analyzer.analyze(building, self.spatial).validate()

        connectivity = self.graph_builder.build_for_building(
            building, allowed_ids=conformity.conform_ids(), levels=levels
        )
        reachability = ReachabilityAnalyzer(connectivity)

        score = BuildingScore(
            building_id=building.id,
            coverage=coverage.building_percent,
            conformity=conformity.sit_conf_status,
            accessibility=conformity.accessibility.mean_percent(),
            reachability=navigability_percent(reachability),
        )

        elapsed = time.time() - start
        logger.info(
            f"Scored: coverage={score.coverage:.1f} conformity={score.conformity:.1f} "
            f"accessibility={score.accessibility:.1f} reachability={score.reachability:.1f} "
            f"({elapsed:.2f}s)",
            extra={"building_id": building.id},
        )
        return BuildingAnalysis(
            building=building,
            levels=list(levels),
            coverage=coverage,
            conformity=conformity,
            connectivity=connectivity,
            reachability=reachability,
            score=score,
            processing_time_sec=elapsed,
        )
