"""
Pydantic schemas for diagram box payloads exchanged with external services.

The cloud vision service returns loosely-typed JSON; these schemas coerce it
into DiagramCoordinates before it reaches the geometry layer.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.models import DiagramCoordinates, DiagramType, ImageDimensions


logger = logging.getLogger(__name__)


class DiagramCoordinatesSchema(BaseModel):
    """One bounding box as sent by a detection service."""
    x1: float
    y1: float
    x2: float
    y2: float
    confidence: float = 1.0
    type: DiagramType = DiagramType.OTHER
    description: str = ""

    @field_validator('type', mode='before')
    @classmethod
    def coerce_type(cls, value: Any) -> DiagramType:
        return DiagramType.parse(value)

    @field_validator('description', mode='before')
    @classmethod
    def coerce_description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_coordinates(self) -> DiagramCoordinates:
        return DiagramCoordinates(
            x1=self.x1,
            y1=self.y1,
            x2=self.x2,
            y2=self.y2,
            confidence=self.confidence,
            type=self.type,
            description=self.description
        )

    @classmethod
    def from_coordinates(cls, coords: DiagramCoordinates) -> 'DiagramCoordinatesSchema':
        return cls(**coords.to_dict())


class DetectionResponse(BaseModel):
    """Response body for one page of detections."""
    image_width: int = Field(gt=0)
    image_height: int = Field(gt=0)
    diagrams: List[DiagramCoordinatesSchema] = Field(default_factory=list)
    source: str = "fallback"

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(self.image_width, self.image_height)

    def to_coordinates(self) -> List[DiagramCoordinates]:
        return [diagram.to_coordinates() for diagram in self.diagrams]


def parse_diagram_payload(items: Optional[List[Dict]]) -> List[DiagramCoordinates]:
    """
    Parse a list of raw box dicts, skipping entries that fail validation.

    Args:
        items: Raw dicts from a detection service (may be None)

    Returns:
        List of DiagramCoordinates for the entries that parsed
    """
    parsed = []

    for index, item in enumerate(items or []):
        try:
            parsed.append(DiagramCoordinatesSchema.model_validate(item).to_coordinates())
        except ValidationError as e:
            logger.warning("Skipping diagram payload entry %d: %s", index, e.errors())

    return parsed
