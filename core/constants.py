"""
Constants and default values for diagram detection and coordinate editing.
"""

# Edge detection
DEFAULT_EDGE_THRESHOLD = 50.0

# Sobel kernels (rows are y offsets -1..1, columns are x offsets -1..1)
SOBEL_X = [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]
SOBEL_Y = [[-1, -2, -1], [0, 0, 0], [1, 2, 1]]

# Region extraction
DEFAULT_MIN_REGION_AREA = 400
DEFAULT_MAX_REGIONS = 5

# Region filtering thresholds
REGION_FILTERS = {
    'min_aspect_ratio': 0.2,
    'max_aspect_ratio': 5.0,
    'min_area_ratio': 0.01,
    'max_area_ratio': 0.8,
    'min_dimension': 50,
    'max_dimension_ratio': 0.9,
}

# Aspect ratio cutoffs used by the type heuristic
CLASSIFICATION_THRESHOLDS = {
    'table_min_aspect': 2.0,      # wider than this -> table
    'flowchart_max_aspect': 0.5,  # taller than this -> flowchart
    'graph_min_aspect': 1.2,
    'graph_max_aspect': 1.8,
}

# Confidence scoring for fallback detections
CONFIDENCE_SCORING = {
    'base': 0.3,
    'aspect_bonus': 0.2,
    'aspect_range': (0.5, 2.0),
    'area_bonus': 0.2,
    'area_range': (0.05, 0.4),
    'density_bonus': 0.1,
    'min_edge_density': 0.1,
}

DEFAULT_CONFIDENCE_MULTIPLIER = 0.6
DEFAULT_REGION_PADDING = 10

# Text label scan
TEXT_SCAN = {
    'row_step': 5,
    'bottom_margin': 20,
    'dark_luma': 128,
    'min_run_length': 50,
    'line_height': 15,
    'row_offset': 5,
    'label_distance': 50,
    'label_bonus': 0.1,
}

# Geometry
DEFAULT_MIN_DIAGRAM_SIZE = 10
DEFAULT_MAX_OVERLAP_PERCENTAGE = 10.0
DEFAULT_FALLBACK_CONFIDENCE_THRESHOLD = 0.7
MAX_COMMON_ERRORS = 5

# Editor
DEFAULT_HANDLE_SIZE = 8
DEFAULT_GRID_SIZE = 10
ASPECT_RATIO_TOLERANCE = 0.01

HANDLE_CURSORS = {
    'tl': 'nw-resize',
    'br': 'nw-resize',
    'tr': 'ne-resize',
    'bl': 'ne-resize',
    'move': 'move',
    'none': 'crosshair',
}
DRAGGING_CURSOR = 'grabbing'

OVERLAY_STYLE = {
    'selection_color': '#007bff',
    'handle_color': '#007bff',
    'handle_border_color': '#ffffff',
    'overlay_color': (0, 123, 255, 26),
    'grid_color': (0, 0, 0, 26),
    'info_background': (0, 0, 0, 204),
    'info_text_color': '#ffffff',
    'line_width': 2,
    'dash': (5, 5),
}

# Validation rule names
RULE_NUMERIC = 'numeric'
RULE_ORDER = 'order'
RULE_BOUNDS = 'bounds'
RULE_MIN_SIZE = 'min_size'
RULE_CONFIDENCE = 'confidence'
RULE_IMAGE_DIMENSIONS = 'image_dimensions'
RULE_TYPE_MIN_SIZE = 'type_min_size'
RULE_TYPE_MAX_SIZE = 'type_max_size'
RULE_ASPECT_RATIO = 'aspect_ratio'
RULE_TYPE_NOT_ALLOWED = 'type_not_allowed'
RULE_TYPE_CONFIDENCE = 'type_confidence'
RULE_OVERLAP = 'overlap'

# Type-specific constraints: min size, aspect range, min confidence
DIAGRAM_TYPE_CONSTRAINTS = {
    'graph': {
        'min_width': 100, 'min_height': 80,
        'aspect_ratio_range': (0.5, 3.0),
        'min_confidence': 0.6,
    },
    'table': {
        'min_width': 150, 'min_height': 60,
        'aspect_ratio_range': (1.5, 8.0),
        'min_confidence': 0.7,
    },
    'flowchart': {
        'min_width': 80, 'min_height': 100,
        'aspect_ratio_range': (0.3, 2.0),
        'min_confidence': 0.5,
    },
    'scientific': {
        'min_width': 120, 'min_height': 120,
        'aspect_ratio_range': (0.5, 2.0),
        'min_confidence': 0.6,
    },
    'geometric': {
        'min_width': 60, 'min_height': 60,
        'aspect_ratio_range': (0.5, 2.0),
        'min_confidence': 0.7,
    },
    'circuit': {
        'min_width': 100, 'min_height': 80,
        'aspect_ratio_range': (0.8, 3.0),
        'min_confidence': 0.6,
    },
    'map': {
        'min_width': 150, 'min_height': 100,
        'aspect_ratio_range': (0.7, 2.5),
        'min_confidence': 0.5,
    },
    'other': {
        'min_width': 50, 'min_height': 50,
        'aspect_ratio_range': (0.2, 5.0),
        'min_confidence': 0.4,
    },
}

# Sanitizer presets
SANITIZER_PRESETS = {
    'manual_edit': {'snap_to_grid': 5, 'min_size': (20, 20)},
    'api_response': {'min_size': (30, 30), 'max_size_ratio': 0.8},
    'storage': {'snap_to_grid': 1, 'min_size': (10, 10)},
}
