"""Core package - Domain models, schemas and constants."""

from .models import (
    PixelBuffer,
    ImageDimensions,
    Region,
    Point,
    DiagramType,
    DiagramCoordinates,
    CoordinateTransform,
    ViewportCoordinates,
    EditorState,
    DragHandle,
    DragState,
    ValidationIssue,
    ValidationResult,
    BatchValidationResult,
    TypeConstraints,
    DetectionConfig,
    EditorConfig,
)
from .constants import (
    DIAGRAM_TYPE_CONSTRAINTS,
    HANDLE_CURSORS,
    DEFAULT_MIN_DIAGRAM_SIZE,
)
from .schemas import (
    DiagramCoordinatesSchema,
    DetectionResponse,
    parse_diagram_payload,
)

__all__ = [
    'PixelBuffer',
    'ImageDimensions',
    'Region',
    'Point',
    'DiagramType',
    'DiagramCoordinates',
    'CoordinateTransform',
    'ViewportCoordinates',
    'EditorState',
    'DragHandle',
    'DragState',
    'ValidationIssue',
    'ValidationResult',
    'BatchValidationResult',
    'TypeConstraints',
    'DetectionConfig',
    'EditorConfig',
    'DIAGRAM_TYPE_CONSTRAINTS',
    'HANDLE_CURSORS',
    'DEFAULT_MIN_DIAGRAM_SIZE',
    'DiagramCoordinatesSchema',
    'DetectionResponse',
    'parse_diagram_payload',
]
