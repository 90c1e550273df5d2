"""
Configuration management using Pydantic Settings.

Environment variables (case-insensitive):
- EDGE_THRESHOLD: Sobel gradient magnitude threshold
- MIN_REGION_AREA: Minimum edge pixels per connected region
- MAX_REGIONS: Maximum boxes emitted per page by the fallback detector
- CONFIDENCE_MULTIPLIER: Dampening applied to fallback confidence
- REGION_PADDING: Padding added around each detected region
- MIN_DIAGRAM_SIZE: Minimum box width/height in pixels
- EDITOR_SNAP_TO_GRID / EDITOR_GRID_SIZE: Grid snapping for the editor
- LOG_LEVEL: Logging level name
"""
import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.constants import (
    DEFAULT_CONFIDENCE_MULTIPLIER,
    DEFAULT_EDGE_THRESHOLD,
    DEFAULT_FALLBACK_CONFIDENCE_THRESHOLD,
    DEFAULT_GRID_SIZE,
    DEFAULT_HANDLE_SIZE,
    DEFAULT_MAX_OVERLAP_PERCENTAGE,
    DEFAULT_MAX_REGIONS,
    DEFAULT_MIN_DIAGRAM_SIZE,
    DEFAULT_MIN_REGION_AREA,
    DEFAULT_REGION_PADDING,
)
from core.models import DetectionConfig, EditorConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Fallback detection
    edge_threshold: float = Field(default=DEFAULT_EDGE_THRESHOLD, ge=0)
    min_region_area: int = Field(default=DEFAULT_MIN_REGION_AREA, ge=1)
    max_regions: int = Field(default=DEFAULT_MAX_REGIONS, ge=0)
    confidence_multiplier: float = Field(default=DEFAULT_CONFIDENCE_MULTIPLIER, ge=0)
    region_padding: int = Field(default=DEFAULT_REGION_PADDING, ge=0)
    fallback_confidence_threshold: float = Field(
        default=DEFAULT_FALLBACK_CONFIDENCE_THRESHOLD, ge=0, le=1
    )

    # Geometry
    min_diagram_size: int = Field(default=DEFAULT_MIN_DIAGRAM_SIZE, ge=1)
    max_overlap_percentage: float = Field(default=DEFAULT_MAX_OVERLAP_PERCENTAGE, ge=0, le=100)

    # Editor
    editor_handle_size: int = Field(default=DEFAULT_HANDLE_SIZE, ge=1)
    editor_snap_to_grid: bool = Field(default=False)
    editor_grid_size: int = Field(default=DEFAULT_GRID_SIZE, ge=1)

    # Logging
    log_level: str = Field(default="WARNING")

    def get_detection_config(self) -> DetectionConfig:
        """Get fallback detector thresholds as an immutable config."""
        return DetectionConfig(
            edge_threshold=self.edge_threshold,
            min_region_area=self.min_region_area,
            max_regions=self.max_regions,
            confidence_multiplier=self.confidence_multiplier,
            padding=self.region_padding,
            min_diagram_size=self.min_diagram_size,
            fallback_confidence_threshold=self.fallback_confidence_threshold,
            max_overlap_percentage=self.max_overlap_percentage,
        )

    def get_editor_config(self) -> EditorConfig:
        """Get editor settings as an immutable config."""
        return EditorConfig(
            min_size=self.min_diagram_size,
            handle_size=self.editor_handle_size,
            snap_to_grid=self.editor_snap_to_grid,
            grid_size=self.editor_grid_size,
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Apply a basic logging configuration using the configured level."""
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global settings instance
settings = Settings()
