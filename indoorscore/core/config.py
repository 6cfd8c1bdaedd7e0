"""
Configuration management for indoorscore.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables (INDOORSCORE_*) or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="INDOORSCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Coverage
    area_scale: float = Field(
        default=10_000_000.0,
        description="Factor turning shoelace areas in squared degrees into approximate m²",
    )

    # Spatial predicates (coordinates are WGS84 degrees)
    boundary_tolerance_deg: float = Field(
        default=1e-7,
        description="Buffer applied to containers when testing boundary containment (~1 cm)",
    )
    level_search_buffer_deg: float = Field(
        default=0.0002,
        description="Buffer around a building when collecting its level features (~20 m)",
    )
    footprint_overlap_ratio: float = Field(
        default=0.8,
        description="Share of a level outline that must lie inside the building",
    )
    overlap_min_points: int = Field(
        default=2,
        description="Vertices one area must share with another to count as overlapping",
    )

    # Aggregation
    max_workers: int = Field(default=1, description="Worker threads for multi-building analysis")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_dir: str = Field(default="logs", description="Directory for --log-file output")


# Global settings instance
settings = Settings()
