"""
Coordinate Editing Logic

Drag/resize/move state machine for correcting one diagram box at a time.

States: idle -> dragging(handle) -> idle. Pointer positions arrive in
canvas space; boxes are always kept in image space. Every method except
update_drag, end_drag and cancel_drag is a pure function of its
arguments; those three record their result on the DragState passed in.
"""
from dataclasses import replace
from typing import Optional, Tuple, Union

from core.constants import (
    ASPECT_RATIO_TOLERANCE,
    DEFAULT_GRID_SIZE,
    DEFAULT_MIN_DIAGRAM_SIZE,
    DRAGGING_CURSOR,
    HANDLE_CURSORS,
    RULE_BOUNDS,
    RULE_MIN_SIZE,
    RULE_ORDER,
)
from core.models import (
    CoordinateTransform,
    DiagramCoordinates,
    DragHandle,
    DragState,
    EditorConfig,
    EditorState,
    ImageDimensions,
    Point,
    ValidationIssue,
    ValidationResult,
)
from geometry.operations import snap_value, transform_coordinates


PointLike = Union[Point, Tuple[float, float]]

# Edges moved by each resize handle: (moves x1, moves y1)
HANDLE_EDGES = {
    DragHandle.TOP_LEFT: (True, True),
    DragHandle.TOP_RIGHT: (False, True),
    DragHandle.BOTTOM_LEFT: (True, False),
    DragHandle.BOTTOM_RIGHT: (False, False),
}


def _as_point(position: PointLike) -> Point:
    if isinstance(position, Point):
        return position
    x, y = position
    return Point(x, y)


def _enforce_min_span(low: float, high: float, min_size: float, limit: float, grow_low: bool) -> Tuple[float, float]:
    """Re-establish high - low >= min_size, keeping the anchored edge where possible."""
    if high - low >= min_size:
        return low, high

    if grow_low:
        if high - min_size >= 0:
            return high - min_size, high
        return 0, min(limit, min_size)

    if low + min_size <= limit:
        return low, low + min_size
    return max(0, limit - min_size), limit


def _translate_inside(low: float, high: float, limit: float) -> Tuple[float, float]:
    """Shift [low, high] back inside [0, limit] without changing its length."""
    span = min(high - low, limit)
    low = min(max(low, 0), limit - span)
    return low, low + span


class CoordinateEditingLogic:
    """Interactive editing rules for one image."""

    def __init__(self, image_size: ImageDimensions, config: Optional[EditorConfig] = None):
        if not image_size.is_valid:
            raise ValueError(f"Image size must be positive, got {image_size.width}x{image_size.height}")
        self.image_size = image_size
        self.config = config or EditorConfig()

    # Drag lifecycle

    def start_drag(
        self,
        position: PointLike,
        coordinates: DiagramCoordinates,
        editor_state: EditorState
    ) -> DragState:
        """
        Begin a gesture at a canvas position.

        Corner handles win over the interior. A press outside the box
        gives handle NONE and is_dragging False.
        """
        position = _as_point(position)
        handle = self.get_handle_at_position(position, coordinates, editor_state)

        return DragState(
            is_dragging=handle != DragHandle.NONE,
            handle=handle,
            start_position=position,
            start_coordinates=replace(coordinates),
            current_coordinates=replace(coordinates)
        )

    def compute_drag_coordinates(
        self,
        position: PointLike,
        drag_state: DragState,
        editor_state: EditorState
    ) -> DiagramCoordinates:
        """
        Box for the current pointer position, without touching drag_state.

        The pointer delta is divided by the zoom level, applied to the
        edges of the active handle, constrained and optionally snapped.
        """
        if not drag_state.is_dragging or drag_state.handle == DragHandle.NONE:
            return drag_state.current_coordinates

        position = _as_point(position)
        delta_x = (position.x - drag_state.start_position.x) / editor_state.zoom_level
        delta_y = (position.y - drag_state.start_position.y) / editor_state.zoom_level

        moved = self._apply_delta(drag_state.start_coordinates, drag_state.handle, delta_x, delta_y)
        constrained = self.constrain_coordinates(moved, drag_state.handle)

        if self.config.snap_to_grid:
            constrained = self.snap_coordinates_to_grid(constrained)

        return constrained

    def update_drag(
        self,
        position: PointLike,
        drag_state: DragState,
        editor_state: EditorState
    ) -> DiagramCoordinates:
        """Pointer-move: compute the new box and record it on drag_state."""
        coordinates = self.compute_drag_coordinates(position, drag_state, editor_state)
        drag_state.current_coordinates = coordinates
        return coordinates

    def end_drag(self, drag_state: DragState) -> DiagramCoordinates:
        """Pointer-up: finish the gesture and return the final box."""
        drag_state.is_dragging = False
        drag_state.handle = DragHandle.NONE
        return drag_state.current_coordinates

    def cancel_drag(self, drag_state: DragState) -> DiagramCoordinates:
        """Abort the gesture and restore the box it started from."""
        drag_state.is_dragging = False
        drag_state.handle = DragHandle.NONE
        drag_state.current_coordinates = replace(drag_state.start_coordinates)
        return drag_state.current_coordinates

    # Queries

    def get_handle_at_position(
        self,
        position: PointLike,
        coordinates: DiagramCoordinates,
        editor_state: EditorState
    ) -> DragHandle:
        """Hit-test the four corner handles, then the box interior."""
        position = _as_point(position)
        scaled = self.scale_coordinates_to_canvas(coordinates, editor_state)

        corners = (
            (DragHandle.TOP_LEFT, scaled.x1, scaled.y1),
            (DragHandle.TOP_RIGHT, scaled.x2, scaled.y1),
            (DragHandle.BOTTOM_LEFT, scaled.x1, scaled.y2),
            (DragHandle.BOTTOM_RIGHT, scaled.x2, scaled.y2),
        )
        for handle, x, y in corners:
            if self._is_position_in_handle(position, x, y):
                return handle

        if scaled.x1 <= position.x <= scaled.x2 and scaled.y1 <= position.y <= scaled.y2:
            return DragHandle.MOVE

        return DragHandle.NONE

    def get_cursor_style(
        self,
        position: PointLike,
        coordinates: DiagramCoordinates,
        editor_state: EditorState,
        is_dragging: bool = False
    ) -> str:
        if is_dragging:
            return DRAGGING_CURSOR
        handle = self.get_handle_at_position(position, coordinates, editor_state)
        return HANDLE_CURSORS[handle.value]

    def validate_coordinates(self, coordinates: DiagramCoordinates) -> ValidationResult:
        """
        Editor-level check against this image and the configured min size.

        Invalid boxes come back with a sanitized replacement so the editor
        always has something drawable.
        """
        errors = []
        min_size = self.config.min_size

        if coordinates.x1 < 0:
            errors.append(ValidationIssue(RULE_BOUNDS, "X1 coordinate cannot be negative"))
        if coordinates.y1 < 0:
            errors.append(ValidationIssue(RULE_BOUNDS, "Y1 coordinate cannot be negative"))
        if coordinates.x2 > self.image_size.width:
            errors.append(ValidationIssue(RULE_BOUNDS, "X2 coordinate exceeds image width"))
        if coordinates.y2 > self.image_size.height:
            errors.append(ValidationIssue(RULE_BOUNDS, "Y2 coordinate exceeds image height"))

        if coordinates.x2 <= coordinates.x1:
            errors.append(ValidationIssue(RULE_ORDER, "X2 must be greater than X1"))
        if coordinates.y2 <= coordinates.y1:
            errors.append(ValidationIssue(RULE_ORDER, "Y2 must be greater than Y1"))

        if coordinates.width < min_size:
            errors.append(ValidationIssue(RULE_MIN_SIZE, f"Diagram width must be at least {min_size} pixels"))
        if coordinates.height < min_size:
            errors.append(ValidationIssue(RULE_MIN_SIZE, f"Diagram height must be at least {min_size} pixels"))

        is_valid = not errors
        return ValidationResult(
            is_valid=is_valid,
            errors=errors,
            sanitized_coordinates=coordinates if is_valid else self.sanitize_coordinates(coordinates)
        )

    def sanitize_coordinates(self, coordinates: DiagramCoordinates) -> DiagramCoordinates:
        """Clamp into the image and grow to the minimum size."""
        width, height = self.image_size.width, self.image_size.height
        min_size = min(self.config.min_size, width, height)

        x1 = max(0, min(width - min_size, coordinates.x1))
        y1 = max(0, min(height - min_size, coordinates.y1))
        x2 = min(width, max(x1 + min_size, coordinates.x2))
        y2 = min(height, max(y1 + min_size, coordinates.y2))

        return coordinates.with_box(x1, y1, x2, y2)

    # View transforms

    def scale_coordinates_to_canvas(self, coordinates: DiagramCoordinates, editor_state: EditorState) -> DiagramCoordinates:
        """Image space -> canvas space (zoom, then pan)."""
        zoom = editor_state.zoom_level
        pan = editor_state.pan_offset
        return transform_coordinates(coordinates, CoordinateTransform(zoom, zoom, pan.x, pan.y))

    def scale_coordinates_to_image(self, coordinates: DiagramCoordinates, editor_state: EditorState) -> DiagramCoordinates:
        """Canvas space -> image space."""
        zoom = editor_state.zoom_level
        pan = editor_state.pan_offset
        return transform_coordinates(
            coordinates,
            CoordinateTransform(1 / zoom, 1 / zoom, -pan.x / zoom, -pan.y / zoom)
        )

    # Geometry

    def calculate_aspect_ratio(self, coordinates: DiagramCoordinates) -> float:
        return coordinates.aspect_ratio

    def maintain_aspect_ratio(
        self,
        coordinates: DiagramCoordinates,
        target_ratio: float,
        handle: DragHandle
    ) -> DiagramCoordinates:
        """
        Restore target_ratio after a resize.

        Whichever dimension needs the smaller correction is adjusted, on
        the side the handle moves, so the opposite corner stays put.
        """
        if not handle.is_resize or target_ratio <= 0:
            return coordinates

        width, height = coordinates.width, coordinates.height
        adjusted = coordinates

        if height > 0 and abs(width / height - target_ratio) > ASPECT_RATIO_TOLERANCE:
            target_width = height * target_ratio
            target_height = width / target_ratio
            moves_x1, moves_y1 = HANDLE_EDGES[handle]

            if abs(width - target_width) < abs(height - target_height):
                if moves_x1:
                    adjusted = replace(coordinates, x1=coordinates.x2 - target_width)
                else:
                    adjusted = replace(coordinates, x2=coordinates.x1 + target_width)
            else:
                if moves_y1:
                    adjusted = replace(coordinates, y1=coordinates.y2 - target_height)
                else:
                    adjusted = replace(coordinates, y2=coordinates.y1 + target_height)

        return self.constrain_coordinates(adjusted, handle)

    def constrain_coordinates(
        self,
        coordinates: DiagramCoordinates,
        handle: Optional[DragHandle] = None
    ) -> DiagramCoordinates:
        """
        Clamp a box into the image and re-enforce the minimum size.

        Move drags are translated back inside instead of being shrunk.
        For resizes the minimum size is restored by moving the edge the
        handle drags, leaving the anchored edge alone.
        """
        width, height = self.image_size.width, self.image_size.height
        min_size = min(self.config.min_size, width, height)
        x1, y1, x2, y2 = coordinates.x1, coordinates.y1, coordinates.x2, coordinates.y2

        if handle == DragHandle.MOVE:
            x1, x2 = _translate_inside(x1, x2, width)
            y1, y2 = _translate_inside(y1, y2, height)
        else:
            x1, y1 = max(0, x1), max(0, y1)
            x2, y2 = min(width, x2), min(height, y2)

        moves_x1, moves_y1 = HANDLE_EDGES.get(handle, (False, False))
        x1, x2 = _enforce_min_span(x1, x2, min_size, width, grow_low=moves_x1)
        y1, y2 = _enforce_min_span(y1, y2, min_size, height, grow_low=moves_y1)

        return coordinates.with_box(x1, y1, x2, y2)

    def snap_coordinates_to_grid(self, coordinates: DiagramCoordinates) -> DiagramCoordinates:
        """
        Round every corner to the nearest grid multiple.

        Corners that snap past the image edge step back one cell, and a
        collapsed span is reopened to one cell. Output always stays inside
        the image; on an image side shorter than one cell the far edge is
        the image edge rather than a grid line.
        """
        grid = self.config.grid_size
        x1, x2 = self._snap_span(coordinates.x1, coordinates.x2, self.image_size.width, grid)
        y1, y2 = self._snap_span(coordinates.y1, coordinates.y2, self.image_size.height, grid)
        return coordinates.with_box(x1, y1, x2, y2)

    # Private helper methods

    def _snap_span(self, low: float, high: float, limit: float, grid: int) -> Tuple[float, float]:
        low, high = snap_value(low, grid), snap_value(high, grid)
        while high > limit and high - grid >= 0:
            high -= grid
        while low > 0 and low >= high:
            low -= grid
        if high <= low:
            high = min(low + grid, limit)
        return low, high

    def _apply_delta(
        self,
        start: DiagramCoordinates,
        handle: DragHandle,
        delta_x: float,
        delta_y: float
    ) -> DiagramCoordinates:
        if handle == DragHandle.MOVE:
            return start.with_box(
                start.x1 + delta_x,
                start.y1 + delta_y,
                start.x2 + delta_x,
                start.y2 + delta_y
            )

        moves_x1, moves_y1 = HANDLE_EDGES[handle]
        x1, y1, x2, y2 = start.x1, start.y1, start.x2, start.y2
        if moves_x1:
            x1 += delta_x
        else:
            x2 += delta_x
        if moves_y1:
            y1 += delta_y
        else:
            y2 += delta_y
        return start.with_box(x1, y1, x2, y2)

    def _is_position_in_handle(self, position: Point, x: float, y: float) -> bool:
        half_size = self.config.handle_size / 2
        return (
            x - half_size <= position.x <= x + half_size and
            y - half_size <= position.y <= y + half_size
        )


def create_coordinate_editing_logic(
    image_size: ImageDimensions,
    min_size: float = DEFAULT_MIN_DIAGRAM_SIZE,
    snap_to_grid: bool = False,
    grid_size: int = DEFAULT_GRID_SIZE
) -> CoordinateEditingLogic:
    """Build an editor for one image from loose options."""
    return CoordinateEditingLogic(
        image_size,
        EditorConfig(min_size=min_size, snap_to_grid=snap_to_grid, grid_size=grid_size)
    )
