"""
Edge Detection Module

Converts an RGBA pixel buffer into a boolean edge mask using the Sobel
operator on the luma (mean of R, G, B) of each pixel.
"""
import logging
from typing import Optional, Tuple

import numpy as np

from core.constants import DEFAULT_EDGE_THRESHOLD
from core.models import PixelBuffer


logger = logging.getLogger(__name__)


def buffer_dimensions(buffer: PixelBuffer) -> Optional[Tuple[int, int]]:
    """
    Integral (width, height) of a buffer.

    Returns None, with a warning, when either dimension is not a whole
    number (strings, NaN and 2.5 are rejected; 3.0 becomes 3).
    Negative values are returned as-is for the caller to reject.
    """
    try:
        width, height = int(buffer.width), int(buffer.height)
        if width != buffer.width or height != buffer.height:
            raise ValueError("dimensions are not whole numbers")
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning("Pixel buffer has invalid dimensions %r x %r: %s", buffer.width, buffer.height, e)
        return None
    return width, height


def buffer_to_grayscale(buffer: PixelBuffer) -> Optional[np.ndarray]:
    """
    Decode a PixelBuffer into a (height, width) float array of luma values.

    Args:
        buffer: RGBA pixel buffer

    Returns:
        Luma array, or None if the buffer is empty or malformed
    """
    dimensions = buffer_dimensions(buffer)
    if dimensions is None:
        return None
    width, height = dimensions
    if width <= 0 or height <= 0:
        return None

    expected = width * height * 4
    try:
        raw = bytes(buffer.data)
    except (TypeError, ValueError) as e:
        logger.warning("Pixel buffer data is not a byte sequence: %s", e)
        return None

    if len(raw) < expected:
        logger.warning(
            "Pixel buffer too short: got %d bytes, expected %d for %dx%d",
            len(raw), expected, width, height
        )
        return None

    rgba = np.frombuffer(raw, dtype=np.uint8, count=expected).reshape(height, width, 4)
    return rgba[:, :, :3].astype(np.float64).mean(axis=2)


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    """
    Gradient magnitude for interior pixels of a luma array.

    Returns an array of shape (height - 2, width - 2); border pixels have
    no full 3x3 neighbourhood and are not included.
    """
    top_left, top, top_right = gray[:-2, :-2], gray[:-2, 1:-1], gray[:-2, 2:]
    left, right = gray[1:-1, :-2], gray[1:-1, 2:]
    bottom_left, bottom, bottom_right = gray[2:, :-2], gray[2:, 1:-1], gray[2:, 2:]

    gx = (top_right + 2 * right + bottom_right) - (top_left + 2 * left + bottom_left)
    gy = (bottom_left + 2 * bottom + bottom_right) - (top_left + 2 * top + top_right)

    return np.hypot(gx, gy)


def detect_edges(buffer: PixelBuffer, threshold: float = DEFAULT_EDGE_THRESHOLD) -> np.ndarray:
    """
    Compute a boolean edge mask for a pixel buffer.

    A pixel is an edge when its Sobel gradient magnitude is strictly
    greater than threshold. Border pixels are always False. Malformed or
    zero-size buffers yield an all-False mask.

    Args:
        buffer: RGBA pixel buffer
        threshold: Gradient magnitude threshold

    Returns:
        Boolean array of shape (height, width)
    """
    dimensions = buffer_dimensions(buffer)
    if dimensions is None:
        return np.zeros((0, 0), dtype=bool)
    width, height = max(dimensions[0], 0), max(dimensions[1], 0)

    edges = np.zeros((height, width), dtype=bool)

    gray = buffer_to_grayscale(buffer)
    if gray is None or height < 3 or width < 3:
        return edges

    edges[1:-1, 1:-1] = sobel_magnitude(gray) > threshold
    return edges


class EdgeDetector:
    """Sobel edge detector bound to a fixed threshold."""

    def __init__(self, threshold: float = DEFAULT_EDGE_THRESHOLD):
        self.threshold = threshold

    def detect(self, buffer: PixelBuffer) -> np.ndarray:
        """Return the boolean edge mask for buffer."""
        return detect_edges(buffer, self.threshold)
