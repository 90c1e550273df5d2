"""
Region Extraction Module

Finds 8-connected components in a boolean edge mask and reduces each one
to a bounding box plus pixel count.
"""
import logging
from typing import List, Sequence, Union

import numpy as np

from core.constants import DEFAULT_MIN_REGION_AREA
from core.models import Region


logger = logging.getLogger(__name__)

NEIGHBOR_OFFSETS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
]

EdgeMask = Union[np.ndarray, Sequence[Sequence[bool]]]


def flood_fill(
    cells: List[List[bool]],
    visited: List[List[bool]],
    start_x: int,
    start_y: int
) -> Region:
    """
    Collect the 8-connected component containing (start_x, start_y).

    Uses an explicit stack so memory stays bounded for large components.
    Cells are marked visited when pushed, so each cell enters the stack
    at most once.

    Args:
        cells: Edge mask as nested lists indexed [y][x]
        visited: Visited flags, updated in place
        start_x: Seed column (must be an unvisited edge cell)
        start_y: Seed row

    Returns:
        Region with the component's bounding box and pixel count
    """
    height = len(cells)
    width = len(cells[0])

    min_x = max_x = start_x
    min_y = max_y = start_y
    area = 0

    visited[start_y][start_x] = True
    stack = [(start_x, start_y)]

    while stack:
        x, y = stack.pop()
        area += 1

        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height:
                if cells[ny][nx] and not visited[ny][nx]:
                    visited[ny][nx] = True
                    stack.append((nx, ny))

    return Region(
        x=min_x,
        y=min_y,
        width=max_x - min_x + 1,
        height=max_y - min_y + 1,
        area=area
    )


def extract_regions(edge_mask: EdgeMask, min_area: int = DEFAULT_MIN_REGION_AREA) -> List[Region]:
    """
    Find connected edge regions, largest first.

    Args:
        edge_mask: Boolean mask of shape (height, width)
        min_area: Minimum pixel count for a region to be kept

    Returns:
        Regions with area >= min_area, sorted by area descending
    """
    try:
        mask = np.asarray(edge_mask, dtype=bool)
    except (TypeError, ValueError) as e:
        logger.warning("Edge mask could not be converted to a 2D array: %s", e)
        return []

    if mask.ndim != 2 or mask.size == 0:
        return []

    height, width = mask.shape
    cells = mask.tolist()
    visited = [[False] * width for _ in range(height)]
    regions = []

    for y in range(height):
        row = cells[y]
        visited_row = visited[y]
        for x in range(width):
            if row[x] and not visited_row[x]:
                region = flood_fill(cells, visited, x, y)
                if region.area >= min_area:
                    regions.append(region)

    regions.sort(key=lambda r: r.area, reverse=True)
    logger.debug("Extracted %d regions (min_area=%d) from %dx%d mask", len(regions), min_area, width, height)
    return regions


class RegionExtractor:
    """Connected-component extractor bound to a minimum area."""

    def __init__(self, min_area: int = DEFAULT_MIN_REGION_AREA):
        self.min_area = min_area

    def extract(self, edge_mask: EdgeMask) -> List[Region]:
        return extract_regions(edge_mask, self.min_area)
