"""
Coordinate Sanitizer

Multi-step sanitization with change tracking, plus presets for the three
places boxes enter the system: manual edits, detection service responses
and storage.
"""
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from core.constants import SANITIZER_PRESETS
from core.models import DiagramCoordinates, DiagramType, ImageDimensions
from geometry.operations import snap_to_grid


@dataclass(frozen=True)
class SanitizationOptions:
    """Which sanitization steps to run."""
    strict_bounds: bool = True
    preserve_aspect_ratio: bool = False
    snap_to_grid: Optional[float] = None
    min_size: Optional[Tuple[float, float]] = None
    max_size: Optional[Tuple[float, float]] = None
    confidence_adjustment: str = 'none'  # 'boost', 'penalize' or 'none'
    type_specific_rules: bool = False


@dataclass
class SanitizationChange:
    """One modification applied during sanitization."""
    type: str  # 'bounds', 'size', 'aspect', 'grid', 'confidence', 'type'
    description: str
    before: Any
    after: Any


@dataclass
class SanitizationResult:
    """Sanitized box together with what changed and why."""
    sanitized: DiagramCoordinates
    changes: List[SanitizationChange] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _corners(coords: DiagramCoordinates) -> dict:
    return {'x1': coords.x1, 'y1': coords.y1, 'x2': coords.x2, 'y2': coords.y2}


def _ratio(coords: DiagramCoordinates) -> float:
    return coords.aspect_ratio


def _centered(coords: DiagramCoordinates, width: float, height: float, image_dims: ImageDimensions) -> DiagramCoordinates:
    """Resize around the box center, clipped to the image."""
    center_x = (coords.x1 + coords.x2) / 2
    center_y = (coords.y1 + coords.y2) / 2
    return coords.with_box(
        x1=max(0, center_x - width / 2),
        y1=max(0, center_y - height / 2),
        x2=min(image_dims.width, center_x + width / 2),
        y2=min(image_dims.height, center_y + height / 2)
    )


class CoordinateSanitizer:
    """Applies a configurable sequence of sanitization steps."""

    def sanitize(
        self,
        coords: DiagramCoordinates,
        image_dims: ImageDimensions,
        options: Optional[SanitizationOptions] = None
    ) -> SanitizationResult:
        """
        Sanitize a box step by step, recording every change.

        Order: bounds, size, aspect ratio, grid, confidence, type rules.
        """
        options = options or SanitizationOptions()
        original = coords
        sanitized = coords
        changes: List[SanitizationChange] = []
        warnings: List[str] = []

        # 1. Bounds
        if options.strict_bounds:
            bounded = self._sanitize_bounds(sanitized, image_dims)
            if bounded != sanitized:
                changes.append(SanitizationChange(
                    'bounds', 'Clamped coordinates to image boundaries',
                    _corners(original), _corners(bounded)
                ))
                sanitized = bounded

        # 2. Size
        sized, description, size_warnings = self._sanitize_size(sanitized, image_dims, options)
        if sized != sanitized:
            changes.append(SanitizationChange(
                'size', description,
                {'width': original.width, 'height': original.height},
                {'width': sized.width, 'height': sized.height}
            ))
            warnings.extend(size_warnings)
            sanitized = sized

        # 3. Aspect ratio
        if options.preserve_aspect_ratio:
            preserved = self._preserve_aspect_ratio(sanitized, original, image_dims)
            if preserved != sanitized:
                changes.append(SanitizationChange(
                    'aspect', 'Preserved original aspect ratio',
                    _ratio(original), _ratio(preserved)
                ))
                sanitized = preserved

        # 4. Grid
        if options.snap_to_grid and options.snap_to_grid > 0:
            snapped = snap_to_grid(sanitized, options.snap_to_grid)
            if snapped != sanitized:
                changes.append(SanitizationChange(
                    'grid', f"Snapped to {options.snap_to_grid}px grid",
                    _corners(original), _corners(snapped)
                ))
                sanitized = snapped

        # 5. Confidence
        if options.confidence_adjustment in ('boost', 'penalize'):
            adjusted, description = self._adjust_confidence(
                sanitized, len(changes), options.confidence_adjustment
            )
            if adjusted != sanitized:
                changes.append(SanitizationChange(
                    'confidence', description,
                    original.confidence, adjusted.confidence
                ))
                sanitized = adjusted

        # 6. Type-specific rules
        if options.type_specific_rules:
            typed, type_warnings = self._apply_type_specific_rules(sanitized, image_dims)
            if typed != sanitized:
                changes.append(SanitizationChange(
                    'type', f"Applied {DiagramType.parse(typed.type).value}-specific rules",
                    {'width': sanitized.width, 'height': sanitized.height, 'aspect_ratio': _ratio(sanitized)},
                    {'width': typed.width, 'height': typed.height, 'aspect_ratio': _ratio(typed)}
                ))
                warnings.extend(type_warnings)
                sanitized = typed

        return SanitizationResult(sanitized=sanitized, changes=changes, warnings=warnings)

    def sanitize_for_manual_edit(self, coords: DiagramCoordinates, image_dims: ImageDimensions) -> SanitizationResult:
        """User edits: snap to a 5px grid, 20px minimum, confidence boost."""
        preset = SANITIZER_PRESETS['manual_edit']
        return self.sanitize(coords, image_dims, SanitizationOptions(
            strict_bounds=True,
            snap_to_grid=preset['snap_to_grid'],
            min_size=preset['min_size'],
            confidence_adjustment='boost',
            type_specific_rules=False
        ))

    def sanitize_for_api_response(self, coords: DiagramCoordinates, image_dims: ImageDimensions) -> SanitizationResult:
        """Service responses: keep proportions, 30px minimum, at most 80% of the page."""
        preset = SANITIZER_PRESETS['api_response']
        ratio = preset['max_size_ratio']
        return self.sanitize(coords, image_dims, SanitizationOptions(
            strict_bounds=True,
            preserve_aspect_ratio=True,
            min_size=preset['min_size'],
            max_size=(image_dims.width * ratio, image_dims.height * ratio),
            confidence_adjustment='none',
            type_specific_rules=True
        ))

    def sanitize_for_storage(self, coords: DiagramCoordinates, image_dims: ImageDimensions) -> SanitizationResult:
        """Storage: integer grid, 10px minimum, type rules."""
        preset = SANITIZER_PRESETS['storage']
        return self.sanitize(coords, image_dims, SanitizationOptions(
            strict_bounds=True,
            snap_to_grid=preset['snap_to_grid'],
            min_size=preset['min_size'],
            confidence_adjustment='none',
            type_specific_rules=True
        ))

    def batch_sanitize(
        self,
        coords_list: List[DiagramCoordinates],
        image_dims: ImageDimensions,
        options: Optional[SanitizationOptions] = None
    ) -> List[SanitizationResult]:
        return [self.sanitize(coords, image_dims, options) for coords in coords_list]

    # Private helper methods

    def _sanitize_bounds(self, coords: DiagramCoordinates, image_dims: ImageDimensions) -> DiagramCoordinates:
        x1 = max(0, min(coords.x1, image_dims.width - 1))
        y1 = max(0, min(coords.y1, image_dims.height - 1))
        x2 = max(x1 + 1, min(coords.x2, image_dims.width))
        y2 = max(y1 + 1, min(coords.y2, image_dims.height))
        return coords.with_box(x1, y1, x2, y2)

    def _sanitize_size(
        self,
        coords: DiagramCoordinates,
        image_dims: ImageDimensions,
        options: SanitizationOptions
    ) -> Tuple[DiagramCoordinates, str, List[str]]:
        descriptions = []
        warnings = []

        if options.min_size:
            min_width, min_height = options.min_size
            if coords.width < min_width or coords.height < min_height:
                coords = _centered(
                    coords, max(coords.width, min_width), max(coords.height, min_height), image_dims
                )
                descriptions.append(f"Enforced minimum size {min_width}x{min_height}")

        if options.max_size:
            max_width, max_height = options.max_size
            if coords.width > max_width or coords.height > max_height:
                coords = _centered(
                    coords, min(coords.width, max_width), min(coords.height, max_height), image_dims
                )
                descriptions.append(f"Enforced maximum size {max_width}x{max_height}")
                warnings.append("Diagram was larger than maximum allowed size")

        return coords, '; '.join(descriptions), warnings

    def _preserve_aspect_ratio(
        self,
        coords: DiagramCoordinates,
        original: DiagramCoordinates,
        image_dims: ImageDimensions
    ) -> DiagramCoordinates:
        original_ratio = _ratio(original)
        if original_ratio <= 0 or abs(original_ratio - _ratio(coords)) < 0.01:
            return coords

        center_x = (coords.x1 + coords.x2) / 2
        center_y = (coords.y1 + coords.y2) / 2
        new_width = coords.height * original_ratio

        x1 = max(0, center_x - new_width / 2)
        x2 = min(image_dims.width, center_x + new_width / 2)
        y1, y2 = coords.y1, coords.y2

        # Width hit the image edge: fit the height to the width instead
        if x1 == 0 or x2 == image_dims.width:
            new_height = (x2 - x1) / original_ratio
            y1 = max(0, center_y - new_height / 2)
            y2 = min(image_dims.height, center_y + new_height / 2)

        return coords.with_box(x1, y1, x2, y2)

    def _adjust_confidence(
        self,
        coords: DiagramCoordinates,
        changes_count: int,
        adjustment: str
    ) -> Tuple[DiagramCoordinates, str]:
        if adjustment == 'boost':
            confidence = min(1.0, coords.confidence + 0.1)
            description = 'Boosted confidence for sanitized coordinates'
        else:
            penalty = min(0.3, changes_count * 0.05)
            confidence = max(0.1, coords.confidence - penalty)
            description = f"Penalized confidence due to {changes_count} corrections"

        return replace(coords, confidence=confidence), description

    def _apply_type_specific_rules(
        self,
        coords: DiagramCoordinates,
        image_dims: ImageDimensions
    ) -> Tuple[DiagramCoordinates, List[str]]:
        diagram_type = DiagramType.parse(coords.type)
        width, height, ratio = coords.width, coords.height, _ratio(coords)

        if diagram_type == DiagramType.TABLE and ratio < 1.2:
            return (
                _centered(coords, height * 1.5, height, image_dims),
                ['Adjusted table to have appropriate width-to-height ratio']
            )

        if diagram_type == DiagramType.GRAPH and (ratio < 0.5 or ratio > 2.5):
            size = min(width, height)
            return (
                _centered(coords, size * 1.2, size, image_dims),
                ['Adjusted graph proportions for better readability']
            )

        if diagram_type == DiagramType.GEOMETRIC and abs(ratio - 1.0) > 0.3:
            size = min(width, height)
            return (
                _centered(coords, size, size, image_dims),
                ['Made geometric figure more square']
            )

        return coords, []
