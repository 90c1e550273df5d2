"""Utilities package - Helper functions for image decoding and box visualization."""

from .image_utils import (
    open_image,
    image_to_base64,
    decode_base64_image,
    pixel_buffer_from_image,
    pixel_buffer_from_array,
    load_pixel_buffer,
    get_image_dimensions
)

from .bbox_utils import (
    pixel_to_normalized,
    normalized_to_pixel,
    draw_bounding_boxes,
    render_overlay,
)

__all__ = [
    # Image utils
    'open_image',
    'image_to_base64',
    'decode_base64_image',
    'pixel_buffer_from_image',
    'pixel_buffer_from_array',
    'load_pixel_buffer',
    'get_image_dimensions',

    # BBox utils
    'pixel_to_normalized',
    'normalized_to_pixel',
    'draw_bounding_boxes',
    'render_overlay',
]
