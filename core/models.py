"""
Core domain models for diagram detection and coordinate editing.

These are pure data structures without business logic.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from core.constants import (
    CLASSIFICATION_THRESHOLDS,
    CONFIDENCE_SCORING,
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
    REGION_FILTERS,
    TEXT_SCAN,
)


class DiagramType(str, Enum):
    """Closed set of coarse diagram categories."""
    GRAPH = "graph"
    FLOWCHART = "flowchart"
    SCIENTIFIC = "scientific"
    GEOMETRIC = "geometric"
    TABLE = "table"
    CIRCUIT = "circuit"
    MAP = "map"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union[str, 'DiagramType', None]) -> 'DiagramType':
        """Map a raw label to a DiagramType, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class DragHandle(str, Enum):
    """Grab points of a box in the interactive editor."""
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    MOVE = "move"
    NONE = "none"

    @property
    def is_resize(self) -> bool:
        return self not in (DragHandle.MOVE, DragHandle.NONE)


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded page image: flat RGBA bytes, row-major."""
    width: int
    height: int
    data: bytes

    @property
    def dimensions(self) -> 'ImageDimensions':
        return ImageDimensions(self.width, self.height)


@dataclass(frozen=True)
class ImageDimensions:
    """Image size in pixels."""
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def to_dict(self) -> dict:
        return {'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class Region:
    """Connected edge component reduced to its bounding box and pixel count."""
    x: int
    y: int
    width: int
    height: int
    area: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def bbox_area(self) -> int:
        return self.width * self.height

    @property
    def edge_density(self) -> float:
        """Fraction of the bounding box covered by edge pixels."""
        return self.area / self.bbox_area


@dataclass(frozen=True)
class Point:
    """A position in canvas or image space."""
    x: float
    y: float


@dataclass
class DiagramCoordinates:
    """Bounding box of a diagram in image pixel space."""
    x1: float
    y1: float
    x2: float
    y2: float
    confidence: float = 1.0
    type: DiagramType = DiagramType.OTHER
    description: str = ""

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width / height; 0.0 for degenerate boxes."""
        if self.height == 0:
            return 0.0
        return self.width / self.height

    def with_box(self, x1: float, y1: float, x2: float, y2: float) -> 'DiagramCoordinates':
        """Copy with new corners, keeping metadata."""
        return replace(self, x1=x1, y1=y1, x2=x2, y2=y2)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'x1': self.x1,
            'y1': self.y1,
            'x2': self.x2,
            'y2': self.y2,
            'confidence': self.confidence,
            'type': self.type.value,
            'description': self.description
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'DiagramCoordinates':
        """Build from a plain dict; unknown types become OTHER."""
        return cls(
            x1=data.get('x1', 0),
            y1=data.get('y1', 0),
            x2=data.get('x2', 0),
            y2=data.get('y2', 0),
            confidence=data.get('confidence', 1.0),
            type=DiagramType.parse(data.get('type')),
            description=data.get('description', '')
        )


@dataclass(frozen=True)
class CoordinateTransform:
    """Affine map between image and display coordinate spaces."""
    scale_x: float = 1.0
    scale_y: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True)
class ViewportCoordinates:
    """Box as origin + size (CSS-style positioning)."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class EditorState:
    """Per-frame view transform supplied by the rendering layer."""
    image_size: ImageDimensions
    zoom_level: float = 1.0
    pan_offset: Point = Point(0.0, 0.0)
    canvas_size: Optional[ImageDimensions] = None

    def __post_init__(self):
        if self.zoom_level <= 0:
            raise ValueError(f"zoom_level must be positive, got {self.zoom_level}")


@dataclass
class DragState:
    """State of one drag gesture; owned by the call site until pointer-up."""
    is_dragging: bool
    handle: DragHandle
    start_position: Point
    start_coordinates: DiagramCoordinates
    current_coordinates: DiagramCoordinates


@dataclass(frozen=True)
class ValidationIssue:
    """A single violated rule."""
    rule: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of validating one box."""
    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    sanitized_coordinates: Optional[DiagramCoordinates] = None

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.errors]

    @property
    def rules(self) -> List[str]:
        return [issue.rule for issue in self.errors]


@dataclass
class BatchValidationResult:
    """Outcome of validating a list of boxes, index-aligned with the input."""
    results: List[ValidationResult] = field(default_factory=list)
    total_valid: int = 0
    total_invalid: int = 0
    common_errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TypeConstraints:
    """Stricter validation rules, usually looked up per DiagramType."""
    min_width: Optional[float] = None
    min_height: Optional[float] = None
    max_width: Optional[float] = None
    max_height: Optional[float] = None
    aspect_ratio_range: Optional[Tuple[float, float]] = None
    allowed_types: Optional[Tuple[DiagramType, ...]] = None
    min_confidence: Optional[float] = None


@dataclass(frozen=True)
class DetectionConfig:
    """Thresholds for the fallback detector. All values are tuning defaults."""
    edge_threshold: float = DEFAULT_EDGE_THRESHOLD
    min_region_area: int = DEFAULT_MIN_REGION_AREA
    max_regions: int = DEFAULT_MAX_REGIONS
    confidence_multiplier: float = DEFAULT_CONFIDENCE_MULTIPLIER
    padding: int = DEFAULT_REGION_PADDING
    min_diagram_size: int = DEFAULT_MIN_DIAGRAM_SIZE

    # Choosing between cloud and fallback boxes
    fallback_confidence_threshold: float = DEFAULT_FALLBACK_CONFIDENCE_THRESHOLD
    max_overlap_percentage: float = DEFAULT_MAX_OVERLAP_PERCENTAGE

    # Region filters
    min_aspect_ratio: float = REGION_FILTERS['min_aspect_ratio']
    max_aspect_ratio: float = REGION_FILTERS['max_aspect_ratio']
    min_area_ratio: float = REGION_FILTERS['min_area_ratio']
    max_area_ratio: float = REGION_FILTERS['max_area_ratio']
    min_region_dimension: int = REGION_FILTERS['min_dimension']
    max_dimension_ratio: float = REGION_FILTERS['max_dimension_ratio']

    # Type heuristic
    table_min_aspect: float = CLASSIFICATION_THRESHOLDS['table_min_aspect']
    flowchart_max_aspect: float = CLASSIFICATION_THRESHOLDS['flowchart_max_aspect']
    graph_min_aspect: float = CLASSIFICATION_THRESHOLDS['graph_min_aspect']
    graph_max_aspect: float = CLASSIFICATION_THRESHOLDS['graph_max_aspect']

    # Confidence scoring
    base_confidence: float = CONFIDENCE_SCORING['base']
    aspect_bonus: float = CONFIDENCE_SCORING['aspect_bonus']
    aspect_bonus_range: Tuple[float, float] = CONFIDENCE_SCORING['aspect_range']
    area_bonus: float = CONFIDENCE_SCORING['area_bonus']
    area_bonus_range: Tuple[float, float] = CONFIDENCE_SCORING['area_range']
    density_bonus: float = CONFIDENCE_SCORING['density_bonus']
    min_edge_density: float = CONFIDENCE_SCORING['min_edge_density']

    # Text label scan
    text_row_step: int = TEXT_SCAN['row_step']
    text_bottom_margin: int = TEXT_SCAN['bottom_margin']
    text_dark_luma: float = TEXT_SCAN['dark_luma']
    text_min_run_length: int = TEXT_SCAN['min_run_length']
    text_line_height: int = TEXT_SCAN['line_height']
    text_row_offset: int = TEXT_SCAN['row_offset']
    text_label_distance: float = TEXT_SCAN['label_distance']
    text_label_bonus: float = TEXT_SCAN['label_bonus']


@dataclass(frozen=True)
class EditorConfig:
    """Settings for the interactive box editor."""
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
    handle_size: float = DEFAULT_HANDLE_SIZE
    snap_to_grid: bool = False
    grid_size: int = DEFAULT_GRID_SIZE

    def __post_init__(self):
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if self.min_size <= 0:
            raise ValueError(f"min_size must be positive, got {self.min_size}")
        if self.handle_size <= 0:
            raise ValueError(f"handle_size must be positive, got {self.handle_size}")
