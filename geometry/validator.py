"""
Coordinate Validation

Validates DiagramCoordinates against image bounds, minimum size and
per-DiagramType constraint tables. Validation never raises for bad data;
every violated rule is reported as a ValidationIssue so callers can show
all problems at once.
"""
import logging
from collections import Counter
from typing import List, Optional

from core.constants import (
    DEFAULT_MAX_OVERLAP_PERCENTAGE,
    DEFAULT_MIN_DIAGRAM_SIZE,
    DIAGRAM_TYPE_CONSTRAINTS,
    MAX_COMMON_ERRORS,
    RULE_ASPECT_RATIO,
    RULE_BOUNDS,
    RULE_CONFIDENCE,
    RULE_IMAGE_DIMENSIONS,
    RULE_MIN_SIZE,
    RULE_NUMERIC,
    RULE_ORDER,
    RULE_OVERLAP,
    RULE_TYPE_CONFIDENCE,
    RULE_TYPE_MAX_SIZE,
    RULE_TYPE_MIN_SIZE,
    RULE_TYPE_NOT_ALLOWED,
)
from core.models import (
    BatchValidationResult,
    DiagramCoordinates,
    DiagramType,
    ImageDimensions,
    TypeConstraints,
    ValidationIssue,
    ValidationResult,
)
from geometry.operations import is_valid_number, overlap_percentage, sanitize


logger = logging.getLogger(__name__)


def get_type_constraints(diagram_type: DiagramType) -> TypeConstraints:
    """
    Look up the constraint table entry for a diagram type.

    Unknown types use the 'other' entry.
    """
    entry = DIAGRAM_TYPE_CONSTRAINTS.get(
        DiagramType.parse(diagram_type).value,
        DIAGRAM_TYPE_CONSTRAINTS['other']
    )
    return TypeConstraints(
        min_width=entry['min_width'],
        min_height=entry['min_height'],
        aspect_ratio_range=entry['aspect_ratio_range'],
        min_confidence=entry['min_confidence']
    )


def validate_bounds(coords: DiagramCoordinates, image_dims: ImageDimensions) -> bool:
    """True if the box is ordered and lies inside [0, width] x [0, height]."""
    return (
        0 <= coords.x1 < image_dims.width and
        0 <= coords.y1 < image_dims.height and
        coords.x1 < coords.x2 <= image_dims.width and
        coords.y1 < coords.y2 <= image_dims.height
    )


def validate(
    coords: DiagramCoordinates,
    image_dims: ImageDimensions,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
) -> ValidationResult:
    """
    Validate one box and report every violated rule.

    Rules: numeric corners, x2 > x1, y2 > y1, inside image bounds,
    width and height >= min_size, confidence in [0, 1]. Geometric rules
    are skipped when a corner is not a finite number.

    Args:
        coords: Box to validate
        image_dims: Image the box belongs to
        min_size: Minimum width/height in pixels

    Returns:
        ValidationResult; sanitized_coordinates is set when valid
    """
    errors: List[ValidationIssue] = []

    if not image_dims.is_valid:
        errors.append(ValidationIssue(
            RULE_IMAGE_DIMENSIONS,
            f"Image dimensions must be positive, got {image_dims.width}x{image_dims.height}"
        ))

    corners = (coords.x1, coords.y1, coords.x2, coords.y2)
    numeric = all(is_valid_number(value) for value in corners)
    if not numeric:
        errors.append(ValidationIssue(RULE_NUMERIC, "Coordinates must be valid numbers"))
    else:
        if coords.x2 <= coords.x1:
            errors.append(ValidationIssue(RULE_ORDER, "x2 must be greater than x1"))
        if coords.y2 <= coords.y1:
            errors.append(ValidationIssue(RULE_ORDER, "y2 must be greater than y1"))

        if image_dims.is_valid and not validate_bounds(coords, image_dims):
            errors.append(ValidationIssue(RULE_BOUNDS, "Coordinates are outside image boundaries"))

        if coords.width < min_size or coords.height < min_size:
            errors.append(ValidationIssue(
                RULE_MIN_SIZE,
                f"Diagram must be at least {min_size}px in width and height"
            ))

    if not is_valid_number(coords.confidence) or not 0 <= coords.confidence <= 1:
        errors.append(ValidationIssue(RULE_CONFIDENCE, "Confidence must be between 0 and 1"))

    is_valid = not errors
    return ValidationResult(
        is_valid=is_valid,
        errors=errors,
        sanitized_coordinates=sanitize(coords, image_dims, min_size) if is_valid else None
    )


def validate_with_custom_rules(
    coords: DiagramCoordinates,
    image_dims: ImageDimensions,
    rules: Optional[TypeConstraints] = None,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
) -> ValidationResult:
    """
    Run basic validation, then the stricter rules in constraints.

    Basic failures are returned as-is without evaluating the extra rules.
    """
    basic = validate(coords, image_dims, min_size)
    if not basic.is_valid or rules is None:
        return basic

    errors: List[ValidationIssue] = []
    width, height = coords.width, coords.height

    if rules.min_width is not None and rules.min_height is not None:
        if width < rules.min_width or height < rules.min_height:
            errors.append(ValidationIssue(
                RULE_TYPE_MIN_SIZE,
                f"Diagram must be at least {rules.min_width}x{rules.min_height}px"
            ))

    if rules.max_width is not None and rules.max_height is not None:
        if width > rules.max_width or height > rules.max_height:
            errors.append(ValidationIssue(
                RULE_TYPE_MAX_SIZE,
                f"Diagram must not exceed {rules.max_width}x{rules.max_height}px"
            ))

    if rules.aspect_ratio_range is not None:
        low, high = rules.aspect_ratio_range
        if not low <= coords.aspect_ratio <= high:
            errors.append(ValidationIssue(
                RULE_ASPECT_RATIO,
                f"Aspect ratio must be between {low} and {high}"
            ))

    if rules.allowed_types is not None and coords.type not in rules.allowed_types:
        errors.append(ValidationIssue(
            RULE_TYPE_NOT_ALLOWED,
            f"Diagram type '{DiagramType.parse(coords.type).value}' is not allowed"
        ))

    if rules.min_confidence is not None and coords.confidence < rules.min_confidence:
        errors.append(ValidationIssue(
            RULE_TYPE_CONFIDENCE,
            f"Confidence {coords.confidence} is below minimum {rules.min_confidence}"
        ))

    is_valid = not errors
    return ValidationResult(
        is_valid=is_valid,
        errors=errors,
        sanitized_coordinates=basic.sanitized_coordinates if is_valid else None
    )


def validate_for_diagram_type(
    coords: DiagramCoordinates,
    image_dims: ImageDimensions,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
) -> ValidationResult:
    """Validate with the constraint table entry for the box's own type."""
    return validate_with_custom_rules(coords, image_dims, get_type_constraints(coords.type), min_size)


def batch_validate(
    coords_list: List[DiagramCoordinates],
    image_dims: ImageDimensions,
    allow_overlaps: bool = False,
    max_overlap_percentage: float = DEFAULT_MAX_OVERLAP_PERCENTAGE,
    validate_types: bool = True,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE
) -> BatchValidationResult:
    """
    Validate many boxes, then flag overlapping pairs.

    Each box is validated on its own first. Unless allow_overlaps is set,
    every pair of individually valid boxes whose overlap exceeds
    max_overlap_percentage is marked invalid on both sides. The summary
    lists up to five messages that occurred more than once, most
    frequent first.

    Args:
        coords_list: Boxes to validate
        image_dims: Image the boxes belong to
        allow_overlaps: Skip the pairwise overlap check
        max_overlap_percentage: Allowed IoU percentage between two boxes
        validate_types: Use per-type constraint tables
        min_size: Minimum width/height in pixels

    Returns:
        BatchValidationResult with results aligned to coords_list
    """
    validate_one = validate_for_diagram_type if validate_types else validate
    results = [validate_one(coords, image_dims, min_size) for coords in coords_list]
    all_messages = [issue.message for result in results for issue in result.errors]

    if not allow_overlaps:
        valid_indices = [i for i, result in enumerate(results) if result.is_valid]

        for pos, i in enumerate(valid_indices):
            for j in valid_indices[pos + 1:]:
                overlap = overlap_percentage(coords_list[i], coords_list[j])
                if overlap <= max_overlap_percentage:
                    continue

                message = f"Coordinates {i + 1} and {j + 1} overlap by {overlap:.1f}%"
                issue = ValidationIssue(RULE_OVERLAP, message)
                for index in (i, j):
                    results[index].errors.append(issue)
                    results[index].is_valid = False
                    results[index].sanitized_coordinates = None
                all_messages.append(message)

    total_valid = sum(1 for result in results if result.is_valid)
    counts = Counter(all_messages)
    common_errors = [
        message for message, count in counts.most_common()
        if count > 1
    ][:MAX_COMMON_ERRORS]

    if total_valid < len(results):
        logger.debug("Batch validation: %d/%d boxes invalid", len(results) - total_valid, len(results))

    return BatchValidationResult(
        results=results,
        total_valid=total_valid,
        total_invalid=len(results) - total_valid,
        common_errors=common_errors
    )
