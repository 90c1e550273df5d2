"""Editor package - Interactive correction of diagram boxes."""

from .editing_logic import CoordinateEditingLogic, create_coordinate_editing_logic
from .overlay import DrawInstruction, build_overlay

__all__ = [
    'CoordinateEditingLogic',
    'create_coordinate_editing_logic',
    'DrawInstruction',
    'build_overlay',
]
