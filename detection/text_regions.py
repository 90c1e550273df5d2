"""
Text Label Scan

Finds long horizontal runs of dark pixels, which usually indicate printed
text lines such as diagram labels or captions, and uses them to raise the
confidence of nearby diagram boxes.
"""
import math
from dataclasses import replace
from typing import List

import numpy as np

from core.models import DetectionConfig, DiagramCoordinates, PixelBuffer, ViewportCoordinates
from detection.edge_detector import buffer_to_grayscale


DEFAULT_CONFIG = DetectionConfig()


def find_dark_runs(row: np.ndarray) -> List[tuple]:
    """
    Return (start, length) for each run of True values in a 1D mask.
    """
    padded = np.concatenate(([0], row.astype(np.int8), [0]))
    changes = np.flatnonzero(np.diff(padded))
    starts, ends = changes[::2], changes[1::2]
    return [(int(start), int(end - start)) for start, end in zip(starts, ends)]


def detect_text_regions(buffer: PixelBuffer, config: DetectionConfig = DEFAULT_CONFIG) -> List[ViewportCoordinates]:
    """
    Scan every few rows for dark runs long enough to be text lines.

    Args:
        buffer: RGBA pixel buffer
        config: Scan parameters (row step, darkness cutoff, run length)

    Returns:
        Text-line boxes as ViewportCoordinates
    """
    gray = buffer_to_grayscale(buffer)
    if gray is None:
        return []

    height, width = gray.shape
    regions = []

    for y in range(0, height - config.text_bottom_margin, config.text_row_step):
        dark = gray[y] < config.text_dark_luma
        for start, length in find_dark_runs(dark):
            # Runs must end on a light pixel; a run reaching the right edge is unterminated
            if start + length >= width:
                continue
            if length > config.text_min_run_length:
                regions.append(ViewportCoordinates(
                    x=start,
                    y=y - config.text_row_offset,
                    width=length,
                    height=config.text_line_height
                ))

    return regions


def is_nearby(diagram: DiagramCoordinates, text: ViewportCoordinates, threshold: float) -> bool:
    """True if the centers of the diagram and text line are within threshold."""
    diagram_cx = (diagram.x1 + diagram.x2) / 2
    diagram_cy = (diagram.y1 + diagram.y2) / 2
    text_cx = text.x + text.width / 2
    text_cy = text.y + text.height / 2
    return math.hypot(diagram_cx - text_cx, diagram_cy - text_cy) <= threshold


def enhance_with_text_labels(
    diagrams: List[DiagramCoordinates],
    text_regions: List[ViewportCoordinates],
    config: DetectionConfig = DEFAULT_CONFIG
) -> List[DiagramCoordinates]:
    """
    Boost confidence of diagrams that have text lines close to their center.

    Returns new DiagramCoordinates; the inputs are not modified.
    """
    enhanced = []

    for diagram in diagrams:
        nearby = [t for t in text_regions if is_nearby(diagram, t, config.text_label_distance)]
        if nearby:
            diagram = replace(
                diagram,
                confidence=min(1.0, diagram.confidence + config.text_label_bonus),
                description=f"{diagram.description} (with {len(nearby)} text labels)"
            )
        enhanced.append(diagram)

    return enhanced
