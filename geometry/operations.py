"""
Coordinate Operations

Pure functions over DiagramCoordinates: sanitizing, affine transforms,
overlap (IoU) and merging, grid snapping and viewport conversions.
None of these functions modify their inputs.
"""
import math
from dataclasses import replace
from numbers import Real
from typing import List, Optional, Tuple

from core.constants import DEFAULT_MAX_OVERLAP_PERCENTAGE, DEFAULT_MIN_DIAGRAM_SIZE
from core.models import (
    CoordinateTransform,
    DiagramCoordinates,
    DiagramType,
    ImageDimensions,
    Point,
    ViewportCoordinates,
)


def is_valid_number(value) -> bool:
    """True for finite real numbers (bools excluded)."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _finite_or(value, fallback: float) -> float:
    return value if is_valid_number(value) else fallback


def _enforce_span(low: float, high: float, min_span: float, limit: Optional[float]) -> Tuple[float, float]:
    """Grow [low, high] to min_span: extend high first, then pull low back at the limit."""
    if high - low >= min_span:
        return low, high

    high = low + min_span
    if limit is not None and high > limit:
        high = limit
        low = max(0, high - min_span)
    return low, high


def sanitize(
    coords: DiagramCoordinates,
    image_dims: Optional[ImageDimensions] = None,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
) -> DiagramCoordinates:
    """
    Round, clamp and re-order a box so it is always drawable.

    Steps:
    1. floor x1/y1 (not below 0), ceil x2/y2, clamp confidence to [0, 1]
    2. clamp to image bounds if given (x1 <= width - 1, x2 <= width)
    3. if x2 <= x1 (or y2 <= y1) nudge the far edge to x1 + 1
    4. grow spans shorter than min_size, pulling the near edge back when
       the image edge blocks growth

    Non-finite inputs are replaced with in-bounds fallbacks. The result is
    a fixed point: sanitize(sanitize(c)) == sanitize(c).

    Args:
        coords: Box to sanitize
        image_dims: Optional image size to clamp against
        min_size: Minimum width/height in pixels

    Returns:
        New sanitized DiagramCoordinates
    """
    min_size = max(1, math.ceil(min_size))
    max_x = image_dims.width if image_dims and image_dims.is_valid else None
    max_y = image_dims.height if image_dims and image_dims.is_valid else None

    x1 = max(0, math.floor(_finite_or(coords.x1, 0)))
    y1 = max(0, math.floor(_finite_or(coords.y1, 0)))
    x2 = math.ceil(_finite_or(coords.x2, max_x if max_x is not None else x1 + min_size))
    y2 = math.ceil(_finite_or(coords.y2, max_y if max_y is not None else y1 + min_size))
    confidence = max(0.0, min(1.0, _finite_or(coords.confidence, 0.0)))

    if max_x is not None:
        x1 = min(x1, max_x - 1)
        x2 = min(x2, max_x)
    if max_y is not None:
        y1 = min(y1, max_y - 1)
        y2 = min(y2, max_y)

    if x2 <= x1:
        x2 = x1 + 1
    if y2 <= y1:
        y2 = y1 + 1

    x1, x2 = _enforce_span(x1, x2, min_size, max_x)
    y1, y2 = _enforce_span(y1, y2, min_size, max_y)

    return replace(
        coords,
        x1=x1, y1=y1, x2=x2, y2=y2,
        confidence=confidence,
        type=DiagramType.parse(coords.type)
    )


def transform_coordinates(coords: DiagramCoordinates, transform: CoordinateTransform) -> DiagramCoordinates:
    """Apply scale then offset to all four corners."""
    return coords.with_box(
        x1=coords.x1 * transform.scale_x + transform.offset_x,
        y1=coords.y1 * transform.scale_y + transform.offset_y,
        x2=coords.x2 * transform.scale_x + transform.offset_x,
        y2=coords.y2 * transform.scale_y + transform.offset_y
    )


def scale_coordinates(coords: DiagramCoordinates, scale_factor: float) -> DiagramCoordinates:
    """Scale all corners uniformly."""
    return transform_coordinates(coords, CoordinateTransform(scale_factor, scale_factor))


def create_scale_transform(original: ImageDimensions, target: ImageDimensions) -> CoordinateTransform:
    """Transform mapping boxes on an image of size original onto size target."""
    return CoordinateTransform(
        scale_x=target.width / original.width,
        scale_y=target.height / original.height
    )


def calculate_area(coords: DiagramCoordinates) -> float:
    return (coords.x2 - coords.x1) * (coords.y2 - coords.y1)


def calculate_center(coords: DiagramCoordinates) -> Point:
    return Point((coords.x1 + coords.x2) / 2, (coords.y1 + coords.y2) / 2)


def do_coordinates_overlap(a: DiagramCoordinates, b: DiagramCoordinates) -> bool:
    """True if the boxes share a region of positive area."""
    return not (
        a.x2 <= b.x1 or
        b.x2 <= a.x1 or
        a.y2 <= b.y1 or
        b.y2 <= a.y1
    )


def overlap_percentage(a: DiagramCoordinates, b: DiagramCoordinates) -> float:
    """
    Intersection over union of two boxes, as a percentage in [0, 100].

    Symmetric in its arguments; 0 when the boxes do not intersect.
    """
    if not do_coordinates_overlap(a, b):
        return 0.0

    overlap_width = min(a.x2, b.x2) - max(a.x1, b.x1)
    overlap_height = min(a.y2, b.y2) - max(a.y1, b.y1)
    overlap_area = overlap_width * overlap_height
    union_area = calculate_area(a) + calculate_area(b) - overlap_area

    if union_area <= 0:
        return 0.0
    return overlap_area / union_area * 100


def merge_coordinates(a: DiagramCoordinates, b: DiagramCoordinates) -> DiagramCoordinates:
    """Bounding union of two boxes; highest confidence wins, metadata from a."""
    return replace(
        a,
        x1=min(a.x1, b.x1),
        y1=min(a.y1, b.y1),
        x2=max(a.x2, b.x2),
        y2=max(a.y2, b.y2),
        confidence=max(a.confidence, b.confidence)
    )


def merge_overlapping(
    coords_list: List[DiagramCoordinates],
    threshold: float = DEFAULT_MAX_OVERLAP_PERCENTAGE
) -> List[DiagramCoordinates]:
    """
    Greedily merge boxes whose overlap percentage exceeds threshold.

    Earlier boxes absorb later ones, so metadata follows input order.
    Merging repeats until no pair exceeds the threshold.
    """
    merged = list(coords_list)
    changed = True

    while changed:
        changed = False
        result: List[DiagramCoordinates] = []
        for box in merged:
            for i, kept in enumerate(result):
                if overlap_percentage(kept, box) > threshold:
                    result[i] = merge_coordinates(kept, box)
                    changed = True
                    break
            else:
                result.append(box)
        merged = result

    return merged


def snap_value(value: float, grid_size: float) -> float:
    """Round to the nearest multiple of grid_size, halves rounding up."""
    return math.floor(value / grid_size + 0.5) * grid_size


def snap_to_grid(coords: DiagramCoordinates, grid_size: float = 5) -> DiagramCoordinates:
    """Snap all four corners to the nearest grid multiple."""
    return coords.with_box(
        x1=snap_value(coords.x1, grid_size),
        y1=snap_value(coords.y1, grid_size),
        x2=snap_value(coords.x2, grid_size),
        y2=snap_value(coords.y2, grid_size)
    )


def normalize_order(coords: DiagramCoordinates) -> DiagramCoordinates:
    """Swap corners so that x1 <= x2 and y1 <= y2."""
    return coords.with_box(
        x1=min(coords.x1, coords.x2),
        y1=min(coords.y1, coords.y2),
        x2=max(coords.x1, coords.x2),
        y2=max(coords.y1, coords.y2)
    )


def expand_coordinates(coords: DiagramCoordinates, amount: float) -> DiagramCoordinates:
    """Grow (or shrink, for negative amount) the box on every side."""
    return coords.with_box(
        x1=coords.x1 - amount,
        y1=coords.y1 - amount,
        x2=coords.x2 + amount,
        y2=coords.y2 + amount
    )


def to_viewport_coordinates(
    coords: DiagramCoordinates,
    transform: Optional[CoordinateTransform] = None
) -> ViewportCoordinates:
    """Corner form -> origin/size form, optionally through a transform."""
    transform = transform or CoordinateTransform()
    return ViewportCoordinates(
        x=coords.x1 * transform.scale_x + transform.offset_x,
        y=coords.y1 * transform.scale_y + transform.offset_y,
        width=(coords.x2 - coords.x1) * transform.scale_x,
        height=(coords.y2 - coords.y1) * transform.scale_y
    )


def from_viewport_coordinates(
    viewport: ViewportCoordinates,
    original: DiagramCoordinates,
    transform: Optional[CoordinateTransform] = None
) -> DiagramCoordinates:
    """Origin/size form -> corner form, keeping metadata from original."""
    transform = transform or CoordinateTransform()
    x1 = (viewport.x - transform.offset_x) / transform.scale_x
    y1 = (viewport.y - transform.offset_y) / transform.scale_y
    return original.with_box(
        x1=x1,
        y1=y1,
        x2=x1 + viewport.width / transform.scale_x,
        y2=y1 + viewport.height / transform.scale_y
    )


def create_default_coordinates(image_dims: ImageDimensions) -> DiagramCoordinates:
    """Centered square covering 30% of the smaller image side."""
    center_x = image_dims.width / 2
    center_y = image_dims.height / 2
    size = min(image_dims.width, image_dims.height) * 0.3

    return DiagramCoordinates(
        x1=center_x - size / 2,
        y1=center_y - size / 2,
        x2=center_x + size / 2,
        y2=center_y + size / 2,
        confidence=1.0,
        type=DiagramType.OTHER,
        description="Manual selection"
    )


def is_reasonable_size(coords: DiagramCoordinates, image_dims: ImageDimensions) -> bool:
    """True if the box covers between 1% and 80% of the image."""
    if not image_dims.is_valid:
        return False
    area_percentage = calculate_area(coords) / image_dims.area * 100
    return 1 <= area_percentage <= 80
