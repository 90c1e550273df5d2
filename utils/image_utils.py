"""
Image utilities for diagram detection.

Decodes page images into the flat RGBA PixelBuffer the detectors consume.
"""
import base64
from io import BytesIO
from typing import Union

import numpy as np
from PIL import Image, ImageOps

from core.models import ImageDimensions, PixelBuffer


DATA_URL_SEPARATOR = ';base64,'


def open_image(image_path: str, max_size: int = 4096) -> Image.Image:
    """
    Load an image file with EXIF orientation applied.

    Args:
        image_path: Path to the image file
        max_size: Maximum dimension (width or height) before resizing

    Returns:
        PIL Image
    """
    img = Image.open(image_path)

    # Fix EXIF orientation
    img = ImageOps.exif_transpose(img)

    # Resize if needed
    if max(img.size) > max_size:
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    return img


def image_to_base64(img: Image.Image, format: str = 'PNG') -> str:
    """Encode a PIL image as a base64 string."""
    buf = BytesIO()
    img.save(buf, format=format)
    return base64.b64encode(buf.getvalue()).decode()


def decode_base64_image(b64_string: str) -> Image.Image:
    """
    Decode base64 string (optionally a data URL) to PIL Image.

    Args:
        b64_string: Base64-encoded image string

    Returns:
        PIL Image object

    Raises:
        ValueError: If the string is not valid base64
        OSError: If the bytes are not a readable image
    """
    if DATA_URL_SEPARATOR in b64_string:
        b64_string = b64_string.split(DATA_URL_SEPARATOR, 1)[1]
    img_data = base64.b64decode(b64_string, validate=True)
    return Image.open(BytesIO(img_data))


def pixel_buffer_from_image(img: Image.Image) -> PixelBuffer:
    """Convert a PIL image to a flat RGBA PixelBuffer."""
    rgba = img.convert('RGBA')
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def pixel_buffer_from_array(pixels: np.ndarray) -> PixelBuffer:
    """
    Build a PixelBuffer from a numpy array.

    Accepts (h, w) grayscale, (h, w, 3) RGB or (h, w, 4) RGBA uint8 data.
    """
    pixels = np.asarray(pixels, dtype=np.uint8)
    if pixels.ndim == 2:
        pixels = np.stack([pixels, pixels, pixels], axis=2)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"Expected (h, w), (h, w, 3) or (h, w, 4) array, got shape {pixels.shape}")
    if pixels.shape[2] == 3:
        alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
        pixels = np.concatenate([pixels, alpha], axis=2)

    height, width = pixels.shape[:2]
    return PixelBuffer(width=width, height=height, data=np.ascontiguousarray(pixels).tobytes())


def load_pixel_buffer(source: Union[PixelBuffer, Image.Image, bytes, str]) -> PixelBuffer:
    """
    Turn any supported image source into a PixelBuffer.

    Args:
        source: PixelBuffer, PIL image, encoded image bytes or base64 string

    Returns:
        PixelBuffer

    Raises:
        ValueError, OSError: If the source cannot be decoded
        TypeError: If the source type is not supported
    """
    if isinstance(source, PixelBuffer):
        return source
    if isinstance(source, Image.Image):
        return pixel_buffer_from_image(source)
    if isinstance(source, (bytes, bytearray)):
        return pixel_buffer_from_image(Image.open(BytesIO(source)))
    if isinstance(source, str):
        return pixel_buffer_from_image(decode_base64_image(source))
    raise TypeError(f"Unsupported image source: {type(source).__name__}")


def get_image_dimensions(image_or_path) -> ImageDimensions:
    """
    Get image dimensions.

    Args:
        image_or_path: PIL Image, PixelBuffer or path to image file

    Returns:
        ImageDimensions
    """
    if isinstance(image_or_path, PixelBuffer):
        return image_or_path.dimensions

    if isinstance(image_or_path, str):
        img = Image.open(image_or_path)
    else:
        img = image_or_path

    width, height = img.size
    return ImageDimensions(width, height)
