"""
Contract validation for indoorscore.

Data-quality problems (odd tags, degenerate geometry) are recovered where
they occur. The helpers here guard the seams between components: a
violation means a caller passed something the engine cannot work with,
so it is raised immediately as ContractViolation.

Usage:
    from indoorscore.utils.validation import require_building, ContractViolation

    building = require_building(feature)
"""

from typing import Any, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)


class ContractViolation(ValueError):
    """Raised when a component is called with input that breaks its contract."""

    def __init__(self, message: str, field: str = "", suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.suggestions = suggestions or []


def require_feature_id(feature: Any) -> str:
    """Return the feature id, raising if the feature has none."""
    feature_id = getattr(feature, "id", None)
    if not feature_id:
        raise ContractViolation(
            "Feature has no identifier",
            field="id",
            suggestions=["Load features through GeoJSONSpatialStore or give each feature an 'id'"],
        )
    return feature_id


def require_building(building: Any) -> Any:
    """
    Check that a feature can be analyzed as a building.

    Args:
        building: Feature expected to carry a building footprint

    Returns:
        The same feature

    Raises:
        ContractViolation: If the feature is missing, has no id, or is not a building
    """
    if building is None:
        raise ContractViolation(
            "Building cannot be None",
            field="building",
            suggestions=["Pick a building from SpatialCollaborator.get_buildings()"],
        )

    require_feature_id(building)

    if not getattr(building, "is_building", False):
        raise ContractViolation(
            f"Feature {building.id} is not a building",
            field="building",
            suggestions=["Only features tagged building=*, min_level or max_level can be analyzed"],
        )
    return building


def require_levels(levels: Any) -> list:
    """Check that an explicit level list was passed (not a single level, not None)."""
    if levels is None or isinstance(levels, (str, bytes, int, float)):
        raise ContractViolation(
            f"Expected a list of levels, got {levels!r}",
            field="levels",
            suggestions=["Pass e.g. [0, 1, 2] or SpatialCollaborator.get_building_levels(building)"],
        )
    return list(levels)


def require_fraction(value: Any, field: str) -> float:
    """Check that a value is a number in [0, 1]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ContractViolation(
            f"{field} must be a number, got {value!r}",
            field=field,
        )
    if not 0.0 <= number <= 1.0:
        raise ContractViolation(
            f"{field} must be within [0, 1], got {number}",
            field=field,
            suggestions=["Accessibility sub-scores are fractions, not percentages"],
        )
    return number


def require_percentage(value: Any, field: str) -> float:
    """Check that a value is a number in [0, 100]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ContractViolation(
            f"{field} must be a number, got {value!r}",
            field=field,
        )
    if not 0.0 <= number <= 100.0:
        raise ContractViolation(
            f"{field} must be within [0, 100], got {number}",
            field=field,
        )
    return number


def require_feature_lists(report: Any, names: Iterable[str]) -> None:
    """Check that a conformity report exposes every named feature list."""
    for name in names:
        value = getattr(report, name, None)
        if value is None or isinstance(value, (str, bytes)):
            raise ContractViolation(
                f"Conformity report is missing the '{name}' feature list",
                field=name,
                suggestions=["ConformityAnalyzer.analyze() must return areas, rooms, corridors and doors"],
            )
