"""Utility modules."""

from .logging_config import ConsoleFormatter, JsonFormatter, setup_logging
from .validation import (
    ContractViolation,
    require_building,
    require_feature_id,
    require_feature_lists,
    require_fraction,
    require_levels,
    require_percentage,
)

__all__ = [
    # Logging
    "ConsoleFormatter",
    "JsonFormatter",
    "setup_logging",
    # Validation
    "ContractViolation",
    "require_building",
    "require_feature_id",
    "require_feature_lists",
    "require_fraction",
    "require_levels",
    "require_percentage",
]
