"""Geometry package - Validation, sanitization and transforms for diagram boxes."""

from .operations import (
    sanitize,
    transform_coordinates,
    scale_coordinates,
    create_scale_transform,
    calculate_area,
    calculate_center,
    do_coordinates_overlap,
    overlap_percentage,
    merge_coordinates,
    merge_overlapping,
    snap_to_grid,
    normalize_order,
    expand_coordinates,
    to_viewport_coordinates,
    from_viewport_coordinates,
    create_default_coordinates,
    is_reasonable_size,
)

from .validator import (
    validate,
    validate_bounds,
    validate_with_custom_rules,
    validate_for_diagram_type,
    get_type_constraints,
    batch_validate,
)

from .sanitizer import (
    CoordinateSanitizer,
    SanitizationOptions,
    SanitizationChange,
    SanitizationResult,
)

__all__ = [
    # Operations
    'sanitize',
    'transform_coordinates',
    'scale_coordinates',
    'create_scale_transform',
    'calculate_area',
    'calculate_center',
    'do_coordinates_overlap',
    'overlap_percentage',
    'merge_coordinates',
    'merge_overlapping',
    'snap_to_grid',
    'normalize_order',
    'expand_coordinates',
    'to_viewport_coordinates',
    'from_viewport_coordinates',
    'create_default_coordinates',
    'is_reasonable_size',

    # Validation
    'validate',
    'validate_bounds',
    'validate_with_custom_rules',
    'validate_for_diagram_type',
    'get_type_constraints',
    'batch_validate',

    # Sanitizer
    'CoordinateSanitizer',
    'SanitizationOptions',
    'SanitizationChange',
    'SanitizationResult',
]
