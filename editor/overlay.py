"""
Editor overlay drawing instructions.

Describes what the editor should draw for one box (grid, fill, dashed
selection, corner handles, coordinate label) in canvas space, without
depending on any particular canvas. utils.bbox_utils.render_overlay
paints these onto a PIL image.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from core.constants import DEFAULT_HANDLE_SIZE, OVERLAY_STYLE
from core.models import CoordinateTransform, DiagramCoordinates, EditorState, Point
from geometry.operations import transform_coordinates


Color = Union[str, Tuple[int, int, int, int]]

INFO_BOX_SIZE = (200, 40)


@dataclass(frozen=True)
class DrawInstruction:
    """
    One primitive to draw.

    kind is 'rect' (box from (x1, y1) to (x2, y2)), 'line' (segment) or
    'text' (string anchored at (x1, y1)).
    """
    kind: str
    x1: float
    y1: float
    x2: float = 0.0
    y2: float = 0.0
    outline: Optional[Color] = None
    fill: Optional[Color] = None
    width: int = 1
    dash: Optional[Tuple[int, int]] = None
    text: str = ""
    layer: str = ""


def format_coordinate_info(coords: DiagramCoordinates) -> Tuple[str, str]:
    """Corner and size labels, rounded to whole pixels."""
    corners = f"({round(coords.x1)}, {round(coords.y1)}) - ({round(coords.x2)}, {round(coords.y2)})"
    size = f"{round(coords.width)} x {round(coords.height)}"
    return corners, size


def grid_lines(editor_state: EditorState, grid_size: int) -> List[DrawInstruction]:
    """Grid lines covering the canvas, aligned with the panned image."""
    canvas = editor_state.canvas_size
    if canvas is None or grid_size <= 0:
        return []

    step = grid_size * editor_state.zoom_level
    style = dict(outline=OVERLAY_STYLE['grid_color'], width=1, dash=(1, 1), layer='grid')
    lines = []

    x = editor_state.pan_offset.x % step
    while x < canvas.width:
        lines.append(DrawInstruction('line', x, 0, x, canvas.height, **style))
        x += step

    y = editor_state.pan_offset.y % step
    while y < canvas.height:
        lines.append(DrawInstruction('line', 0, y, canvas.width, y, **style))
        y += step

    return lines


def build_overlay(
    coords: DiagramCoordinates,
    editor_state: EditorState,
    handle_size: float = DEFAULT_HANDLE_SIZE,
    grid_size: Optional[int] = None,
    info_position: Optional[Point] = None
) -> List[DrawInstruction]:
    """
    Drawing instructions for the selection overlay of one box.

    Args:
        coords: Box in image space
        editor_state: Zoom/pan used to map the box to canvas space
        handle_size: Side of each corner handle square
        grid_size: Draw grid lines at this spacing (image pixels) if set
        info_position: Where to draw the coordinate label, if anywhere

    Returns:
        Instructions in back-to-front order
    """
    zoom = editor_state.zoom_level
    pan = editor_state.pan_offset
    scaled = transform_coordinates(coords, CoordinateTransform(zoom, zoom, pan.x, pan.y))

    instructions = grid_lines(editor_state, grid_size) if grid_size else []

    instructions.append(DrawInstruction(
        'rect', scaled.x1, scaled.y1, scaled.x2, scaled.y2,
        fill=OVERLAY_STYLE['overlay_color'], layer='fill'
    ))
    instructions.append(DrawInstruction(
        'rect', scaled.x1, scaled.y1, scaled.x2, scaled.y2,
        outline=OVERLAY_STYLE['selection_color'],
        width=OVERLAY_STYLE['line_width'],
        dash=OVERLAY_STYLE['dash'],
        layer='selection'
    ))

    half = handle_size / 2
    for x, y in ((scaled.x1, scaled.y1), (scaled.x2, scaled.y1), (scaled.x1, scaled.y2), (scaled.x2, scaled.y2)):
        instructions.append(DrawInstruction(
            'rect', x - half, y - half, x + half, y + half,
            outline=OVERLAY_STYLE['handle_border_color'],
            fill=OVERLAY_STYLE['handle_color'],
            layer='handle'
        ))

    if info_position is not None:
        box_width, box_height = INFO_BOX_SIZE
        corners, size = format_coordinate_info(coords)
        instructions.append(DrawInstruction(
            'rect', info_position.x, info_position.y,
            info_position.x + box_width, info_position.y + box_height,
            fill=OVERLAY_STYLE['info_background'], layer='info'
        ))
        for offset, text in ((5, corners), (20, size)):
            instructions.append(DrawInstruction(
                'text', info_position.x + 5, info_position.y + offset,
                fill=OVERLAY_STYLE['info_text_color'], text=text, layer='info'
            ))

    return instructions
