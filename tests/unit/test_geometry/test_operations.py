"""
Unit tests for geometry.operations module.
"""
import math

import pytest

from core.models import (
    CoordinateTransform,
    DiagramCoordinates,
    DiagramType,
    ImageDimensions,
    Point,
    ViewportCoordinates,
)
from geometry.operations import (
    calculate_area,
    calculate_center,
    create_default_coordinates,
    create_scale_transform,
    do_coordinates_overlap,
    expand_coordinates,
    from_viewport_coordinates,
    is_reasonable_size,
    is_valid_number,
    merge_coordinates,
    merge_overlapping,
    normalize_order,
    overlap_percentage,
    sanitize,
    scale_coordinates,
    snap_to_grid,
    to_viewport_coordinates,
    transform_coordinates,
)


def corners(coords):
    return (coords.x1, coords.y1, coords.x2, coords.y2)


MESSY_BOXES = [
    DiagramCoordinates(-5, -5, 150, 150),
    DiagramCoordinates(10.4, 10.6, 50.2, 60.9, confidence=1.7),
    DiagramCoordinates(50, 50, 50, 50),
    DiagramCoordinates(60, 70, 20, 10),
    DiagramCoordinates(99, 99, 100, 100),
    DiagramCoordinates(150, 150, 200, 200, confidence=-1),
    DiagramCoordinates(float('nan'), 10, float('inf'), 50),
    DiagramCoordinates(0, 0, 3, 3),
]


class TestIsValidNumber:
    """Tests for is_valid_number function."""

    @pytest.mark.parametrize("value", [0, 1, -2.5, 1e9])
    def test_finite_numbers(self, value):
        assert is_valid_number(value)

    @pytest.mark.parametrize("value", [float('nan'), float('inf'), True, "1", None])
    def test_rejected_values(self, value):
        assert not is_valid_number(value)


class TestSanitize:
    """Tests for sanitize function."""

    def test_clamps_to_image(self):
        """Test a box spilling over every edge."""
        result = sanitize(DiagramCoordinates(-5, -5, 150, 150), ImageDimensions(100, 100))

        assert corners(result) == (0, 0, 100, 100)
        assert 0 <= result.x1 < 100 and 0 <= result.y1 < 100

    def test_rounds_outward(self):
        """Test x1/y1 floor and x2/y2 ceil."""
        result = sanitize(DiagramCoordinates(10.4, 10.6, 50.2, 60.9))
        assert corners(result) == (10, 10, 51, 61)

    def test_zero_size_nudged_and_grown(self):
        """Test a collapsed box regains the minimum size."""
        assert corners(sanitize(DiagramCoordinates(50, 50, 50, 50))) == (50, 50, 60, 60)

    def test_nudge_only_with_min_size_one(self):
        """Test pure ordering repair moves the far edge by 1."""
        assert corners(sanitize(DiagramCoordinates(50, 50, 50, 50), min_size=1)) == (50, 50, 51, 51)

    def test_grows_backwards_at_image_edge(self):
        """Test the near edge moves when the far edge is blocked."""
        result = sanitize(DiagramCoordinates(99, 99, 100, 100), ImageDimensions(100, 100))
        assert corners(result) == (90, 90, 100, 100)

    def test_box_outside_image(self):
        """Test a box fully outside is pulled into the image."""
        result = sanitize(DiagramCoordinates(150, 150, 200, 200), ImageDimensions(100, 100))
        assert corners(result) == (90, 90, 100, 100)

    def test_non_finite_values(self):
        """Test NaN and infinity are replaced."""
        result = sanitize(DiagramCoordinates(float('nan'), 10, float('inf'), 50), ImageDimensions(100, 100))
        assert corners(result) == (0, 10, 100, 50)

    @pytest.mark.parametrize("raw,expected", [(1.5, 1.0), (-0.2, 0.0), (float('nan'), 0.0), (0.4, 0.4)])
    def test_confidence_clamped(self, raw, expected):
        assert sanitize(DiagramCoordinates(0, 0, 20, 20, confidence=raw)).confidence == expected

    def test_type_parsed(self):
        """Test raw type strings become DiagramType."""
        assert sanitize(DiagramCoordinates(0, 0, 20, 20, type='table')).type == DiagramType.TABLE

    def test_input_not_modified(self):
        """Test sanitize returns a new object."""
        coords = DiagramCoordinates(-5, -5, 150, 150)
        sanitize(coords, ImageDimensions(100, 100))
        assert corners(coords) == (-5, -5, 150, 150)

    @pytest.mark.parametrize("coords", MESSY_BOXES)
    @pytest.mark.parametrize("image_dims", [None, ImageDimensions(100, 100), ImageDimensions(640, 480)])
    def test_idempotent(self, coords, image_dims):
        """Test sanitize(sanitize(c)) == sanitize(c)."""
        once = sanitize(coords, image_dims)
        assert sanitize(once, image_dims) == once

    @pytest.mark.parametrize("coords", MESSY_BOXES)
    def test_result_is_drawable(self, coords):
        """Test ordering, minimum size and bounds always hold."""
        image_dims = ImageDimensions(100, 100)
        result = sanitize(coords, image_dims)

        assert result.x2 > result.x1 and result.y2 > result.y1
        assert result.width >= 10 and result.height >= 10
        assert 0 <= result.x1 and result.x2 <= 100
        assert 0 <= result.y1 and result.y2 <= 100


class TestTransforms:
    """Tests for transform, scale and viewport conversion."""

    def test_transform(self):
        """Test scale then offset."""
        result = transform_coordinates(
            DiagramCoordinates(0, 0, 10, 10),
            CoordinateTransform(scale_x=2, scale_y=3, offset_x=10, offset_y=5)
        )
        assert corners(result) == (10, 5, 30, 35)

    def test_scale(self):
        assert corners(scale_coordinates(DiagramCoordinates(1, 2, 3, 4), 0.5)) == (0.5, 1, 1.5, 2)

    def test_create_scale_transform(self):
        """Test mapping between image sizes."""
        transform = create_scale_transform(ImageDimensions(100, 50), ImageDimensions(200, 200))
        assert (transform.scale_x, transform.scale_y) == (2, 4)

    def test_viewport_round_trip(self):
        """Test corner form -> viewport -> corner form."""
        coords = DiagramCoordinates(10, 20, 50, 80, confidence=0.7, description="d")
        transform = CoordinateTransform(scale_x=2, scale_y=2, offset_x=5, offset_y=5)

        viewport = to_viewport_coordinates(coords, transform)
        assert viewport == ViewportCoordinates(x=25, y=45, width=80, height=120)

        back = from_viewport_coordinates(viewport, coords, transform)
        assert corners(back) == (10, 20, 50, 80)
        assert back.description == "d"


class TestOverlap:
    """Tests for overlap and merge."""

    a = DiagramCoordinates(0, 0, 50, 50, confidence=0.4, type=DiagramType.GRAPH, description="a")
    b = DiagramCoordinates(25, 25, 75, 75, confidence=0.9, type=DiagramType.TABLE, description="b")

    def test_partial_overlap(self):
        """Test IoU of two offset squares."""
        overlap = overlap_percentage(self.a, self.b)

        assert 0 < overlap < 100
        assert overlap == pytest.approx(625 / 4375 * 100)

    def test_symmetric(self):
        assert overlap_percentage(self.a, self.b) == overlap_percentage(self.b, self.a)

    def test_self_overlap(self):
        assert overlap_percentage(self.a, self.a) == 100

    def test_disjoint_and_touching(self):
        """Test shared edges are not overlap."""
        right = DiagramCoordinates(50, 0, 100, 50)
        far = DiagramCoordinates(80, 80, 90, 90)

        assert overlap_percentage(self.a, right) == 0
        assert overlap_percentage(self.a, far) == 0
        assert not do_coordinates_overlap(self.a, right)
        assert do_coordinates_overlap(self.a, self.b)

    def test_merge(self):
        """Test bounding union, max confidence, metadata from first."""
        merged = merge_coordinates(self.a, self.b)

        assert corners(merged) == (0, 0, 75, 75)
        assert merged.confidence == 0.9
        assert merged.type == DiagramType.GRAPH
        assert merged.description == "a"

    def test_merge_contains_both(self):
        merged = merge_coordinates(self.b, self.a)
        for box in (self.a, self.b):
            assert merged.x1 <= box.x1 and merged.y1 <= box.y1
            assert merged.x2 >= box.x2 and merged.y2 >= box.y2

    def test_merge_overlapping(self):
        """Test only pairs above the threshold are merged."""
        c = DiagramCoordinates(200, 200, 250, 250)

        merged = merge_overlapping([self.a, self.b, c], threshold=10)

        assert [corners(m) for m in merged] == [(0, 0, 75, 75), (200, 200, 250, 250)]
        assert merge_overlapping([self.a, self.b, c], threshold=50) == [self.a, self.b, c]


class TestGridAndShape:
    """Tests for snapping and small helpers."""

    def test_snap_to_grid(self):
        """Test corners round to the nearest multiple, halves up."""
        result = snap_to_grid(DiagramCoordinates(12, 17, 33, 47.5), grid_size=5)

        assert corners(result) == (10, 15, 35, 50)
        for value in corners(result):
            assert value % 5 == 0

    @pytest.mark.parametrize("grid_size", [1, 5, 10, 25])
    def test_snap_outputs_multiples(self, grid_size):
        result = snap_to_grid(DiagramCoordinates(13.3, 27.9, 141.2, 99.5), grid_size)
        for value in corners(result):
            assert math.isclose(value % grid_size, 0)

    def test_normalize_order(self):
        assert corners(normalize_order(DiagramCoordinates(50, 60, 10, 20))) == (10, 20, 50, 60)

    def test_expand(self):
        assert corners(expand_coordinates(DiagramCoordinates(10, 10, 20, 20), 5)) == (5, 5, 25, 25)

    def test_area_and_center(self):
        coords = DiagramCoordinates(10, 20, 30, 60)
        assert calculate_area(coords) == 800
        assert calculate_center(coords) == Point(20, 40)

    def test_create_default_coordinates(self):
        """Test centered square of 30% of the smaller side."""
        coords = create_default_coordinates(ImageDimensions(200, 100))

        assert corners(coords) == (85, 35, 115, 65)
        assert coords.confidence == 1.0
        assert coords.type == DiagramType.OTHER
        assert coords.description == "Manual selection"

    @pytest.mark.parametrize("size,expected", [(5, False), (10, True), (50, True), (95, False)])
    def test_is_reasonable_size(self, size, expected):
        """Test the 1%-80% area band."""
        coords = DiagramCoordinates(0, 0, size, size)
        assert is_reasonable_size(coords, ImageDimensions(100, 100)) is expected

    def test_is_reasonable_size_invalid_image(self):
        assert not is_reasonable_size(DiagramCoordinates(0, 0, 5, 5), ImageDimensions(0, 0))
