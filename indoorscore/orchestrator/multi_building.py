"""
Multi-building aggregation.

Scores every building of a working set and keeps:
- per-building scores (coverage, conformity, accessibility, reachability)
- a color per building derived from the blended score
- global percentages (arithmetic mean over the set)

State lives in an AggregationState owned by the caller; nothing is cached
at module level.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import networkx as nx
from shapely.errors import GEOSException

from ..analysis.building_analyzer import BuildingAnalysis, BuildingAnalyzer, BuildingScore
from ..analysis.conformity import ConformityAnalyzer
from ..core.config import Settings, settings as default_settings
from ..core.models import Feature
from ..core.spatial import SpatialCollaborator
from ..utils.validation import require_building
from .colors import building_color, building_color_hex

logger = logging.getLogger(__name__)

METRICS = ("coverage", "conformity", "accessibility", "reachability")


@dataclass
class BuildingColor:
    """Display color of one building."""
    id: str
    color: str  # "#rrggbb"
    value: float  # 0-1

    @property
    def rgb(self) -> tuple[float, float, float]:
        return building_color(self.value)

    @classmethod
    def from_score(cls, score: BuildingScore) -> "BuildingColor":
        return cls(
            id=score.building_id,
            color=building_color_hex(score.color_value),
            value=score.color_value,
        )


@dataclass
class AggregationState:
    """Results of the last aggregation run."""
    building_scores: Dict[str, BuildingScore] = field(default_factory=dict)
    colors: List[BuildingColor] = field(default_factory=list)
    global_percentages: Dict[str, float] = field(
        default_factory=lambda: {m: 0.0 for m in METRICS}
    )
    failed: Dict[str, str] = field(default_factory=dict)
    stopped: bool = False
    total_processing_time_sec: float = 0.0

    def reset(self) -> None:
        self.building_scores.clear()
        self.colors.clear()
        self.global_percentages = {m: 0.0 for m in METRICS}
        self.failed.clear()
        self.stopped = False
        self.total_processing_time_sec = 0.0

    @property
    def color_value(self) -> float:
        return 0.25 * sum(self.global_percentages[m] / 100 for m in METRICS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buildings": [s.to_dict() for s in self.building_scores.values()],
            "colors": [{"id": c.id, "color": c.color, "value": c.value} for c in self.colors],
            "global": dict(self.global_percentages),
            "failed": dict(self.failed),
            "stopped": self.stopped,
        }


def global_percentages(scores: Sequence[BuildingScore]) -> Dict[str, float]:
    """Arithmetic mean of each metric; all 0 for an empty set."""
    if not scores:
        return {m: 0.0 for m in METRICS}
    return {m: sum(getattr(s, m) for s in scores) / len(scores) for m in METRICS}


class MultiBuildingAnalyzer:
    """
    Score a set of buildings and compute global means and colors.

    Usage:
        aggregator = MultiBuildingAnalyzer(store, StaticConformityAnalyzer())
        state = aggregator.analyze_buildings()
        state.global_percentages["coverage"]
    """

    def __init__(
        self,
        spatial: SpatialCollaborator,
        conformity_analyzer: ConformityAnalyzer,
        config: Optional[Settings] = None,
    ):
        self.spatial = spatial
        self.config = config or default_settings
        self.building_analyzer = BuildingAnalyzer(spatial, conformity_analyzer, self.config)

    def analyze_buildings(
        self,
        buildings: Optional[Sequence[Feature]] = None,
        state: Optional[AggregationState] = None,
        max_workers: Optional[int] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> AggregationState:
        """
        Analyze buildings and fill an AggregationState.

        Args:
            buildings: Buildings to analyze (default: every building in the store)
            state: State to fill; it is reset first. A new one if omitted.
            max_workers: Thread count; 1 runs sequentially (default: config)
            should_stop: Polled before each building; True ends the run early

        Returns:
            The filled AggregationState
        """
        start = time.time()
        state = state if state is not None else AggregationState()
        state.reset()

        if buildings is None:
            buildings = self.spatial.get_buildings()
        for building in buildings:
            require_building(building)

        workers = max_workers if max_workers is not None else self.config.max_workers
        workers = max(1, min(workers, len(buildings) or 1))

        logger.info(f"Analyzing {len(buildings)} buildings with {workers} workers")

        if workers == 1:
            analyses = self._run_sequential(buildings, state, should_stop)
        else:
            analyses = self._run_parallel(buildings, state, should_stop, workers)

        # Merge in building-id order so results do not depend on scheduling
        for analysis in sorted(analyses, key=lambda a: a.building.id):
            state.building_scores[analysis.building.id] = analysis.score
            state.colors.append(BuildingColor.from_score(analysis.score))

        state.global_percentages = global_percentages(list(state.building_scores.values()))
        state.total_processing_time_sec = time.time() - start

        logger.info(
            f"Completed: {len(state.building_scores)}/{len(buildings)} scored, "
            f"{len(state.failed)} failed"
            + (" (stopped early)" if state.stopped else "")
        )
        return state

    def analyze_building(self, building: Feature) -> BuildingAnalysis:
        return self.building_analyzer.analyze(building)

    def _run_sequential(
        self,
        buildings: Sequence[Feature],
        state: AggregationState,
        should_stop: Optional[Callable[[], bool]],
    ) -> List[BuildingAnalysis]:
        analyses = []
        for building in buildings:
            if should_stop is not None and should_stop():
                state.stopped = True
                break
            analysis = self._analyze_one(building, state)
            if analysis is not None:
                analyses.append(analysis)
        return analyses

    def _run_parallel(
        self,
        buildings: Sequence[Feature],
        state: AggregationState,
        should_stop: Optional[Callable[[], bool]],
        workers: int,
    ) -> List[BuildingAnalysis]:
        def task(building: Feature) -> Optional[BuildingAnalysis]:
            if should_stop is not None and should_stop():
                state.stopped = True
                return None
            return self._analyze_one(building, state)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(task, b) for b in buildings]
            # result() re-raises ContractViolation from the worker
            results = [f.result() for f in futures]
        return [a for a in results if a is not None]

    def _analyze_one(self, building: Feature, state: AggregationState) -> Optional[BuildingAnalysis]:
        try:
            return self.building_analyzer.analyze(building)
        except (GEOSException, nx.NetworkXError) as e:
            logger.error(f"Analysis failed: {e}", extra={"building_id": building.id})
            state.failed[building.id] = str(e)
            return None
