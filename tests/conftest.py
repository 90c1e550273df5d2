"""
Pytest configuration and global fixtures.
"""
import base64
import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageDraw

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import DiagramCoordinates, DiagramType, EditorState, ImageDimensions, PixelBuffer


def buffer_from_gray(pixels: np.ndarray) -> PixelBuffer:
    """Build a PixelBuffer from an (h, w) grayscale uint8 array."""
    gray = np.asarray(pixels, dtype=np.uint8)
    rgba = np.stack([gray, gray, gray, np.full_like(gray, 255)], axis=2)
    return PixelBuffer(width=gray.shape[1], height=gray.shape[0], data=rgba.tobytes())


def page_with_boxes(size=(400, 300), boxes=(), fill='white', outline='black', width=3) -> Image.Image:
    """White page with black rectangle outlines."""
    img = Image.new('RGB', size, color=fill)
    draw = ImageDraw.Draw(img)
    for box in boxes:
        draw.rectangle(box, outline=outline, width=width)
    return img


@pytest.fixture
def temp_dir(tmp_path):
    """Provide temporary directory for test files."""
    return tmp_path


@pytest.fixture
def white_buffer():
    """100x100 all-white RGBA buffer."""
    return buffer_from_gray(np.full((100, 100), 255))


@pytest.fixture
def page_image():
    """400x300 page with one 200x150 diagram outline."""
    return page_with_boxes(boxes=[(100, 75, 300, 225)])


@pytest.fixture
def page_buffer(page_image):
    """PixelBuffer of page_image."""
    rgba = page_image.convert('RGBA')
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())


@pytest.fixture
def image_dims():
    """100x100 image."""
    return ImageDimensions(100, 100)


@pytest.fixture
def sample_coords():
    """A valid box on a 100x100 image."""
    return DiagramCoordinates(
        x1=20, y1=20, x2=60, y2=60,
        confidence=0.8,
        type=DiagramType.GRAPH,
        description="Sample"
    )


@pytest.fixture
def editor_state(image_dims):
    """Unzoomed, unpanned view of a 100x100 image."""
    return EditorState(image_size=image_dims, canvas_size=ImageDimensions(200, 200))


@pytest.fixture
def sample_image_path(temp_dir):
    """Create a sample test image."""
    img_path = temp_dir / "test_image.png"
    img = Image.new('RGB', (800, 600), color='white')
    img.save(img_path)

    return str(img_path)


@pytest.fixture
def sample_base64_image():
    """Provide base64 encoded sample image."""
    img = Image.new('RGB', (100, 100), color='blue')
    buf = BytesIO()
    img.save(buf, format='PNG')
    return base64.b64encode(buf.getvalue()).decode()


@pytest.fixture
def make_buffer():
    """Factory: (h, w) grayscale array -> PixelBuffer."""
    return buffer_from_gray


@pytest.fixture
def make_page():
    """Factory: white page with black rectangle outlines."""
    return page_with_boxes
