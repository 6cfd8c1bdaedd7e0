"""
Conformity input: which features are SIT-conform, and accessibility scores.

The real tag/geometry conformity checker lives outside this package. It
is consumed through the ConformityAnalyzer protocol; the graph is built
only from the features it reports as conform.

StaticConformityAnalyzer is a simple stand-in: every classifiable
feature is conform unless listed, and the status/accessibility numbers
come from a JSON file (or defaults).

JSON format (keyed by building id):
    {
      "way/100": {
        "sit_conf_status": 87.5,
        "nonconform": ["way/12"],
        "accessibility": {"door_basic": 0.5, "wc": 1.0}
      }
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from ..core.models import Feature, FeatureKind
from ..core.spatial import SpatialCollaborator
from ..utils.validation import (
    ContractViolation,
    require_feature_lists,
    require_fraction,
    require_percentage,
)

logger = logging.getLogger(__name__)

FEATURE_LISTS = ("areas", "rooms", "corridors", "doors")


@dataclass(frozen=True)
class AccessibilityReport:
    """Eight accessibility sub-scores, each a fraction in [0, 1]."""
    door_basic: float = 0.0
    stairs_basic: float = 0.0
    elevator_basic: float = 0.0
    wc: float = 0.0
    tactile: float = 0.0
    door_premium: float = 0.0
    stairs_premium: float = 0.0
    elevator_premium: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AccessibilityReport":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ContractViolation(
                f"Unknown accessibility keys: {sorted(unknown)}",
                field="accessibility",
                suggestions=[f"Use one of {sorted(known)}"],
            )
        return cls(**{k: require_fraction(v, k) for k, v in data.items()})

    def sub_percentages(self) -> list[float]:
        return [getattr(self, f.name) * 100 for f in fields(self)]

    def mean_percent(self) -> float:
        """Unweighted mean of the eight sub-scores, in percent."""
        values = self.sub_percentages()
        return sum(values) / len(values)


@dataclass
class ConformityReport:
    """Features deemed SIT-conform plus the building's conformity status."""
    areas: list[Feature] = field(default_factory=list)
    rooms: list[Feature] = field(default_factory=list)
    corridors: list[Feature] = field(default_factory=list)
    doors: list[Feature] = field(default_factory=list)
    sit_conf_status: float = 0.0  # percent
    accessibility: AccessibilityReport = field(default_factory=AccessibilityReport)

    def conform_ids(self) -> set[str]:
        return {f.id for name in FEATURE_LISTS for f in getattr(self, name)}

    def validate(self) -> "ConformityReport":
        """Raise ContractViolation if the report cannot be consumed."""
        require_feature_lists(self, FEATURE_LISTS)
        require_percentage(self.sit_conf_status, "sit_conf_status")
        if not isinstance(self.accessibility, AccessibilityReport):
            raise ContractViolation(
                "accessibility must be an AccessibilityReport",
                field="accessibility",
            )
        for f in fields(self.accessibility):
            require_fraction(getattr(self.accessibility, f.name), f.name)
        return self


class ConformityAnalyzer(Protocol):
    def analyze(self, building: Feature, spatial: SpatialCollaborator) -> ConformityReport:
        ...


class StaticConformityAnalyzer:
    """
    Treat every classifiable feature as conform, with configured scores.

    Usage:
        analyzer = StaticConformityAnalyzer.from_file("conformity.json")
        report = analyzer.analyze(building, store)
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        default_status: float = 100.0,
        default_accessibility: Optional[AccessibilityReport] = None,
    ):
        self.overrides = dict(overrides or {})
        self.default_status = require_percentage(default_status, "default_status")
        self.default_accessibility = default_accessibility or AccessibilityReport()

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "StaticConformityAnalyzer":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ContractViolation(
                f"Conformity file {path} must contain an object keyed by building id",
                field="conformity",
            )
        return cls(overrides=data, **kwargs)

    def analyze(self, building: Feature, spatial: SpatialCollaborator) -> ConformityReport:
        override = self.overrides.get(building.id, {})
        excluded = set(override.get("nonconform", []))

        report = ConformityReport(
            sit_conf_status=require_percentage(
                override.get("sit_conf_status", self.default_status), "sit_conf_status"
            ),
            accessibility=(
                AccessibilityReport.from_dict(override["accessibility"])
                if "accessibility" in override else self.default_accessibility
            ),
        )

        seen: set[str] = set()
        for level in spatial.get_building_levels(building):
            for feature in spatial.get_features_in_level(building, level):
                if feature.id in seen or feature.id in excluded:
                    continue
                seen.add(feature.id)
                target = _target_list(report, feature)
                if target is not None:
                    target.append(feature)

        logger.debug(
            f"{len(seen)} conform candidates, {len(excluded)} excluded",
            extra={"building_id": building.id},
        )
        return report


def _target_list(report: ConformityReport, feature: Feature) -> Optional[list[Feature]]:
    if feature.is_door:
        return report.doors
    if feature.kind == FeatureKind.ROOM:
        return report.rooms
    if feature.kind == FeatureKind.AREA:
        return report.areas
    if feature.kind == FeatureKind.CORRIDOR:
        return report.corridors
    return None
