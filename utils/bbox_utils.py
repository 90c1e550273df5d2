"""
Bounding box utilities for diagram detection.

Handles normalized <-> pixel box conversion and visualization of
detected boxes and editor overlays.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from core.models import DiagramCoordinates, DiagramType, ImageDimensions
from editor.overlay import DrawInstruction
from utils.image_utils import image_to_base64


FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"


def pixel_to_normalized(coords: DiagramCoordinates, image_dims: ImageDimensions) -> DiagramCoordinates:
    """
    Convert pixel box to normalized (0-1) coordinates.

    Args:
        coords: Box in pixels
        image_dims: Image the box belongs to

    Returns:
        Box with corners as fractions of width/height
    """
    return coords.with_box(
        x1=coords.x1 / image_dims.width,
        y1=coords.y1 / image_dims.height,
        x2=coords.x2 / image_dims.width,
        y2=coords.y2 / image_dims.height
    )


def normalized_to_pixel(coords: DiagramCoordinates, image_dims: ImageDimensions) -> DiagramCoordinates:
    """
    Convert normalized (0-1) box to whole-pixel coordinates.

    Args:
        coords: Box with corners as fractions of width/height
        image_dims: Target image size

    Returns:
        Box in pixels
    """
    return coords.with_box(
        x1=round(coords.x1 * image_dims.width),
        y1=round(coords.y1 * image_dims.height),
        x2=round(coords.x2 * image_dims.width),
        y2=round(coords.y2 * image_dims.height)
    )


def _load_font(size: int = 16):
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default()


def type_colors(seed: int = 42) -> Dict[DiagramType, Tuple[int, int, int]]:
    """Stable color per diagram type."""
    rng = np.random.default_rng(seed)
    return {
        diagram_type: tuple(int(c) for c in rng.integers(50, 255, size=3))
        for diagram_type in DiagramType
    }


def draw_bounding_boxes(
    image: Image.Image,
    diagrams: Sequence[DiagramCoordinates],
    extract_crops: bool = True
) -> Tuple[Image.Image, List[Dict]]:
    """
    Draw diagram boxes on image and optionally crop each region.

    Args:
        image: PIL Image to draw on
        diagrams: Boxes in pixel coordinates of image
        extract_crops: Whether to crop and return each region

    Returns:
        Tuple of (annotated image, list of crop dicts with the box and a
        base64 PNG of the region)
    """
    img_draw = image.convert('RGBA')
    draw = ImageDraw.Draw(img_draw)
    overlay = Image.new('RGBA', img_draw.size, (0, 0, 0, 0))
    draw2 = ImageDraw.Draw(overlay)
    font = _load_font()
    colors = type_colors()

    crops = []

    for index, diagram in enumerate(diagrams):
        diagram_type = DiagramType.parse(diagram.type)
        color = colors[diagram_type]
        color_a = color + (60,)  # Semi-transparent for overlay

        box = [int(diagram.x1), int(diagram.y1), int(diagram.x2), int(diagram.y2)]

        if extract_crops:
            crop = image.crop(box)
            crops.append({
                'index': index,
                'coordinates': diagram.to_dict(),
                'crop_image': image_to_base64(crop)
            })

        # Draw box
        draw.rectangle(box, outline=color, width=3)
        draw2.rectangle(box, fill=color_a)

        # Draw label
        label = f"{diagram_type.value} {diagram.confidence:.2f}"
        text_bbox = draw.textbbox((0, 0), label, font=font)
        tw = text_bbox[2] - text_bbox[0]
        th = text_bbox[3] - text_bbox[1]

        ty = max(0, box[1] - th - 4)
        draw.rectangle([box[0], ty, box[0] + tw + 4, ty + th + 4], fill=color)
        draw.text((box[0] + 2, ty + 2), label, font=font, fill=(255, 255, 255))

    return Image.alpha_composite(img_draw, overlay), crops


def _dashed_segments(x1: float, y1: float, x2: float, y2: float, dash: Tuple[int, int]) -> List[Tuple[float, float, float, float]]:
    """Split a horizontal or vertical segment into dash pieces."""
    on, off = dash
    length = abs(x2 - x1) + abs(y2 - y1)
    if length == 0 or on <= 0:
        return [(x1, y1, x2, y2)]

    dx = (x2 - x1) / length
    dy = (y2 - y1) / length
    segments = []
    position = 0.0
    while position < length:
        end = min(position + on, length)
        segments.append((x1 + dx * position, y1 + dy * position, x1 + dx * end, y1 + dy * end))
        position = end + off
    return segments


def _draw_line(draw: ImageDraw.ImageDraw, points, color, width: int, dash: Optional[Tuple[int, int]]):
    pieces = _dashed_segments(*points, dash) if dash else [points]
    for piece in pieces:
        draw.line(piece, fill=color, width=width)


def render_overlay(image: Image.Image, instructions: Sequence[DrawInstruction]) -> Image.Image:
    """
    Paint editor overlay instructions onto a copy of image.

    Args:
        image: Canvas-sized PIL image
        instructions: Output of editor.overlay.build_overlay

    Returns:
        New RGBA image with the overlay composited on top
    """
    base = image.convert('RGBA')
    overlay = Image.new('RGBA', base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = None

    for item in instructions:
        if item.kind == 'line':
            _draw_line(draw, (item.x1, item.y1, item.x2, item.y2), item.outline, item.width, item.dash)

        elif item.kind == 'rect':
            box = [min(item.x1, item.x2), min(item.y1, item.y2), max(item.x1, item.x2), max(item.y1, item.y2)]
            if item.fill is not None:
                draw.rectangle(box, fill=item.fill)
            if item.outline is not None:
                if item.dash:
                    x1, y1, x2, y2 = box
                    for edge in ((x1, y1, x2, y1), (x2, y1, x2, y2), (x2, y2, x1, y2), (x1, y2, x1, y1)):
                        _draw_line(draw, edge, item.outline, item.width, item.dash)
                else:
                    draw.rectangle(box, outline=item.outline, width=item.width)

        elif item.kind == 'text':
            font = font or _load_font(12)
            draw.text((item.x1, item.y1), item.text, font=font, fill=item.fill)

    return Image.alpha_composite(base, overlay)
