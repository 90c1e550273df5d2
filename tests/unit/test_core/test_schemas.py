"""
Unit tests for core.schemas module.
"""
import pytest
from pydantic import ValidationError

from core.models import DiagramCoordinates, DiagramType, ImageDimensions
from core.schemas import DetectionResponse, DiagramCoordinatesSchema, parse_diagram_payload


class TestDiagramCoordinatesSchema:
    """Tests for DiagramCoordinatesSchema."""

    def test_coerces_type_and_description(self):
        """Test loose payload values are coerced."""
        schema = DiagramCoordinatesSchema.model_validate({
            'x1': '10', 'y1': 20, 'x2': 110.5, 'y2': 90,
            'type': 'Graph', 'description': None
        })

        assert schema.x1 == 10.0
        assert schema.type == DiagramType.GRAPH
        assert schema.description == ""

    def test_unknown_type_is_other(self):
        """Test unknown labels become OTHER."""
        schema = DiagramCoordinatesSchema(x1=0, y1=0, x2=1, y2=1, type='photo')
        assert schema.type == DiagramType.OTHER

    def test_missing_corner_fails(self):
        """Test required corners."""
        with pytest.raises(ValidationError):
            DiagramCoordinatesSchema.model_validate({'x1': 0, 'y1': 0, 'x2': 10})

    def test_round_trip_with_coordinates(self):
        """Test conversion to and from DiagramCoordinates."""
        coords = DiagramCoordinates(1, 2, 30, 40, confidence=0.9, type=DiagramType.CIRCUIT, description="c")

        schema = DiagramCoordinatesSchema.from_coordinates(coords)
        assert schema.to_coordinates() == coords


class TestDetectionResponse:
    """Tests for DetectionResponse."""

    def test_dimensions_and_boxes(self):
        """Test response helpers."""
        response = DetectionResponse(
            image_width=200,
            image_height=100,
            diagrams=[{'x1': 0, 'y1': 0, 'x2': 50, 'y2': 50}]
        )

        assert response.dimensions == ImageDimensions(200, 100)
        assert len(response.to_coordinates()) == 1
        assert response.source == "fallback"

    def test_rejects_zero_dimensions(self):
        """Test image dimensions must be positive."""
        with pytest.raises(ValidationError):
            DetectionResponse(image_width=0, image_height=100)


class TestParseDiagramPayload:
    """Tests for parse_diagram_payload function."""

    def test_skips_invalid_entries(self, caplog):
        """Test invalid entries are dropped with a warning."""
        items = [
            {'x1': 0, 'y1': 0, 'x2': 10, 'y2': 10, 'type': 'table'},
            {'x1': 'left', 'y1': 0, 'x2': 10, 'y2': 10},
            {'x1': 5, 'y1': 5, 'x2': 20, 'y2': 20},
        ]

        with caplog.at_level('WARNING'):
            parsed = parse_diagram_payload(items)

        assert len(parsed) == 2
        assert parsed[0].type == DiagramType.TABLE
        assert "Skipping diagram payload entry 1" in caplog.text

    def test_none_payload(self):
        """Test None yields an empty list."""
        assert parse_diagram_payload(None) == []
