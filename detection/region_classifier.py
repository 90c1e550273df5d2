"""
Region Classifier Module

Filters candidate regions by size and aspect-ratio heuristics, assigns a
coarse DiagramType and a confidence score, and converts each survivor
into padded DiagramCoordinates.

The type heuristic is intentionally coarse; it only looks at proportions.
"""
from typing import List, Optional

from core.models import (
    DetectionConfig,
    DiagramCoordinates,
    DiagramType,
    ImageDimensions,
    Region,
)


DEFAULT_CONFIG = DetectionConfig()


def passes_region_filters(
    region: Region,
    image_dims: ImageDimensions,
    config: DetectionConfig = DEFAULT_CONFIG
) -> bool:
    """
    Check whether a region looks like a diagram candidate.

    All of the following must hold:
    - aspect ratio within [min_aspect_ratio, max_aspect_ratio]
    - region pixel count / image area within [min_area_ratio, max_area_ratio]
    - width and height at least min_region_dimension
    - width and height at most max_dimension_ratio of the image
    """
    if region.width < 1 or region.height < 1:
        return False

    aspect_ratio = region.aspect_ratio
    if aspect_ratio < config.min_aspect_ratio or aspect_ratio > config.max_aspect_ratio:
        return False

    relative_area = region.area / image_dims.area
    if relative_area < config.min_area_ratio or relative_area > config.max_area_ratio:
        return False

    if region.width < config.min_region_dimension or region.height < config.min_region_dimension:
        return False

    if (region.width > image_dims.width * config.max_dimension_ratio or
            region.height > image_dims.height * config.max_dimension_ratio):
        return False

    return True


def classify_diagram_type(region: Region, config: DetectionConfig = DEFAULT_CONFIG) -> DiagramType:
    """
    Assign a coarse type from the region's proportions.

    Checked in order: wide -> table, tall -> flowchart, moderately
    landscape -> graph, anything else -> other.
    """
    aspect_ratio = region.aspect_ratio

    if aspect_ratio > config.table_min_aspect:
        return DiagramType.TABLE
    if aspect_ratio < config.flowchart_max_aspect:
        return DiagramType.FLOWCHART
    if config.graph_min_aspect <= aspect_ratio <= config.graph_max_aspect:
        return DiagramType.GRAPH
    return DiagramType.OTHER


def calculate_confidence(
    region: Region,
    image_dims: ImageDimensions,
    config: DetectionConfig = DEFAULT_CONFIG
) -> float:
    """
    Score a region in [0, 1].

    Starts from base_confidence and adds bonuses for balanced proportions,
    a moderate share of the page and a dense edge map, then applies the
    fallback dampening multiplier.
    """
    confidence = config.base_confidence

    aspect_low, aspect_high = config.aspect_bonus_range
    if aspect_low <= region.aspect_ratio <= aspect_high:
        confidence += config.aspect_bonus

    area_low, area_high = config.area_bonus_range
    relative_area = region.area / image_dims.area
    if area_low <= relative_area <= area_high:
        confidence += config.area_bonus

    if region.edge_density >= config.min_edge_density:
        confidence += config.density_bonus

    return max(0.0, min(1.0, confidence * config.confidence_multiplier))


def region_to_coordinates(
    region: Region,
    image_dims: ImageDimensions,
    config: DetectionConfig = DEFAULT_CONFIG
) -> DiagramCoordinates:
    """Pad a region, clamp it to the image and attach type and confidence."""
    padding = config.padding
    diagram_type = classify_diagram_type(region, config)

    return DiagramCoordinates(
        x1=max(0, region.x - padding),
        y1=max(0, region.y - padding),
        x2=min(image_dims.width, region.x + region.width + padding),
        y2=min(image_dims.height, region.y + region.height + padding),
        confidence=calculate_confidence(region, image_dims, config),
        type=diagram_type,
        description=f"Fallback detected {diagram_type.value} ({region.width}x{region.height})"
    )


def filter_and_classify(
    regions: List[Region],
    image_dims: ImageDimensions,
    config: Optional[DetectionConfig] = None,
    max_regions: Optional[int] = None
) -> List[DiagramCoordinates]:
    """
    Filter regions and convert the survivors to diagram boxes.

    Args:
        regions: Candidate regions, typically sorted by area descending
        image_dims: Source image size
        config: Detection thresholds (defaults used if None)
        max_regions: Keep at most this many survivors (None = all)

    Returns:
        DiagramCoordinates in the same order as the surviving regions
    """
    config = config or DEFAULT_CONFIG
    if not image_dims.is_valid:
        return []

    candidates = [r for r in regions if passes_region_filters(r, image_dims, config)]
    if max_regions is not None:
        candidates = candidates[:max_regions]

    return [region_to_coordinates(r, image_dims, config) for r in candidates]
