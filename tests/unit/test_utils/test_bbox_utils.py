"""
Unit tests for utils.bbox_utils module.
"""
import pytest
from PIL import Image

from core.models import DiagramCoordinates, DiagramType, ImageDimensions
from editor.overlay import DrawInstruction, build_overlay
from utils.bbox_utils import (
    draw_bounding_boxes,
    normalized_to_pixel,
    pixel_to_normalized,
    render_overlay,
    type_colors,
)
from utils.image_utils import decode_base64_image


class TestNormalization:
    """Tests for pixel <-> normalized conversion."""

    def test_pixel_to_normalized(self):
        normalized = pixel_to_normalized(DiagramCoordinates(0, 0, 500, 400), ImageDimensions(1000, 800))

        assert (normalized.x1, normalized.y1, normalized.x2, normalized.y2) == (0, 0, 0.5, 0.5)

    def test_normalized_to_pixel(self):
        pixel = normalized_to_pixel(DiagramCoordinates(0.1, 0.2, 0.5, 1.0), ImageDimensions(1000, 800))

        assert (pixel.x1, pixel.y1, pixel.x2, pixel.y2) == (100, 160, 500, 800)

    def test_roundtrip_keeps_metadata(self):
        dims = ImageDimensions(640, 480)
        original = DiagramCoordinates(64, 48, 320, 240, confidence=0.7, type=DiagramType.TABLE)

        back = normalized_to_pixel(pixel_to_normalized(original, dims), dims)

        assert back == original


class TestDrawBoundingBoxes:
    """Tests for draw_bounding_boxes function."""

    def test_draw_single_box(self, sample_base64_image):
        img = decode_base64_image(sample_base64_image)
        diagrams = [DiagramCoordinates(10, 10, 50, 50, type=DiagramType.TABLE)]

        annotated_img, crops = draw_bounding_boxes(img, diagrams, extract_crops=False)

        assert isinstance(annotated_img, Image.Image)
        assert annotated_img.size == img.size
        assert len(crops) == 0

    def test_extract_image_crops(self, sample_base64_image):
        img = decode_base64_image(sample_base64_image)
        diagrams = [
            DiagramCoordinates(10, 10, 50, 50, confidence=0.9, type=DiagramType.TABLE),
            DiagramCoordinates(60, 60, 90, 80),
        ]

        _, crops = draw_bounding_boxes(img, diagrams)

        assert [crop['index'] for crop in crops] == [0, 1]
        assert crops[0]['coordinates']['type'] == 'table'
        assert decode_base64_image(crops[0]['crop_image']).size == (40, 40)
        assert decode_base64_image(crops[1]['crop_image']).size == (30, 20)

    def test_empty(self, sample_base64_image):
        img = decode_base64_image(sample_base64_image)
        annotated_img, crops = draw_bounding_boxes(img, [])
        assert crops == []
        assert annotated_img.mode == 'RGBA'

    def test_type_colors_stable(self):
        """Test colors are deterministic and cover every type."""
        assert type_colors() == type_colors()
        assert set(type_colors()) == set(DiagramType)


class TestRenderOverlay:
    """Tests for render_overlay function."""

    @pytest.fixture
    def canvas(self):
        return Image.new('RGB', (200, 200), color='white')

    def test_handles_and_fill(self, canvas, sample_coords, editor_state):
        rendered = render_overlay(canvas, build_overlay(sample_coords, editor_state))

        assert rendered.size == (200, 200)
        assert rendered.getpixel((20, 20)) == (0, 123, 255, 255)
        assert rendered.getpixel((40, 40)) != (255, 255, 255, 255)
        assert rendered.getpixel((150, 150)) == (255, 255, 255, 255)

    def test_dashed_line(self, canvas):
        """Test dash gaps are left unpainted."""
        line = DrawInstruction('line', 0, 10, 100, 10, outline=(0, 0, 0, 255), dash=(5, 5))

        rendered = render_overlay(canvas, [line])

        assert rendered.getpixel((2, 10)) == (0, 0, 0, 255)
        assert rendered.getpixel((7, 10)) == (255, 255, 255, 255)

    def test_text(self, canvas):
        label = DrawInstruction('text', 5, 5, fill='#000000', text="40 x 40")
        rendered = render_overlay(canvas, [label])
        assert rendered.convert('L').getextrema()[0] < 255

    def test_input_untouched(self, canvas, sample_coords, editor_state):
        render_overlay(canvas, build_overlay(sample_coords, editor_state))
        assert canvas.getpixel((20, 20)) == (255, 255, 255)
