"""
Fallback Diagram Detector

Local, model-free diagram detection used when the cloud vision service is
unavailable or returns only low-confidence boxes.

Pipeline: pixel buffer -> edge mask -> connected regions -> filtered and
classified boxes -> sanitized DiagramCoordinates.
"""
import logging
from typing import List, Optional, Union

from PIL import Image

from core.models import DetectionConfig, DiagramCoordinates, ImageDimensions, PixelBuffer
from detection.edge_detector import EdgeDetector, buffer_dimensions
from detection.region_classifier import filter_and_classify
from detection.region_extractor import RegionExtractor
from detection.text_regions import detect_text_regions, enhance_with_text_labels
from geometry.operations import merge_overlapping, sanitize
from utils.image_utils import load_pixel_buffer


logger = logging.getLogger(__name__)

ImageSource = Union[PixelBuffer, Image.Image, bytes, str]


class FallbackDiagramDetector:
    """
    Edge/region based diagram detector.

    Each instance is independent and holds only its immutable config, so
    several detectors can run side by side with different thresholds.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()
        self.edge_detector = EdgeDetector(self.config.edge_threshold)
        self.region_extractor = RegionExtractor(self.config.min_region_area)

    def detect_diagrams(self, buffer: PixelBuffer) -> List[DiagramCoordinates]:
        """
        Detect diagram boxes in a decoded page image.

        Args:
            buffer: RGBA pixel buffer

        Returns:
            Up to config.max_regions sanitized boxes, largest region first;
            empty for blank or malformed images
        """
        dimensions = buffer_dimensions(buffer)
        if dimensions is None:
            return []
        image_dims = ImageDimensions(*dimensions)
        if not image_dims.is_valid:
            logger.warning("Cannot detect diagrams in %dx%d image", image_dims.width, image_dims.height)
            return []

        edges = self.edge_detector.detect(buffer)
        regions = self.region_extractor.extract(edges)
        candidates = filter_and_classify(regions, image_dims, self.config, self.config.max_regions)

        diagrams = [
            sanitize(candidate, image_dims, self.config.min_diagram_size)
            for candidate in candidates
        ]
        logger.debug(
            "Fallback detection: %d regions, %d diagrams in %dx%d image",
            len(regions), len(diagrams), image_dims.width, image_dims.height
        )
        return diagrams

    def detect_diagrams_with_text_analysis(self, buffer: PixelBuffer) -> List[DiagramCoordinates]:
        """Detect diagrams, then boost those with text lines nearby."""
        diagrams = self.detect_diagrams(buffer)
        if not diagrams:
            return diagrams

        text_regions = detect_text_regions(buffer, self.config)
        logger.debug("Found %d text-line regions", len(text_regions))
        return enhance_with_text_labels(diagrams, text_regions, self.config)

    def detect_from_image(self, image: ImageSource, with_text_analysis: bool = False) -> List[DiagramCoordinates]:
        """
        Decode an image (PIL image, raw bytes or base64 string) and detect.

        Decode failures are logged and yield an empty list.
        """
        try:
            buffer = load_pixel_buffer(image)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Fallback diagram detection failed to decode image: %s", e)
            return []

        if with_text_analysis:
            return self.detect_diagrams_with_text_analysis(buffer)
        return self.detect_diagrams(buffer)

    def choose_detections(
        self,
        primary: Optional[List[DiagramCoordinates]],
        fallback: List[DiagramCoordinates]
    ) -> List[DiagramCoordinates]:
        """choose_detections using this detector's thresholds."""
        return choose_detections(primary, fallback, config=self.config)


def choose_detections(
    primary: Optional[List[DiagramCoordinates]],
    fallback: List[DiagramCoordinates],
    confidence_threshold: Optional[float] = None,
    max_overlap_percentage: Optional[float] = None,
    config: Optional[DetectionConfig] = None
) -> List[DiagramCoordinates]:
    """
    Pick between cloud-provided boxes and fallback boxes.

    The primary set wins when at least one of its boxes reaches
    confidence_threshold. The chosen set is de-duplicated by merging
    boxes that overlap by more than max_overlap_percentage.

    Args:
        primary: Boxes from the cloud vision service (None if it failed)
        fallback: Boxes from FallbackDiagramDetector
        confidence_threshold: Minimum confidence to trust the primary set
            (defaults to config.fallback_confidence_threshold)
        max_overlap_percentage: Overlap above which boxes are merged
            (defaults to config.max_overlap_percentage)
        config: Source of the defaults (DetectionConfig() if None)

    Returns:
        The selected, de-duplicated boxes
    """
    config = config or DetectionConfig()
    if confidence_threshold is None:
        confidence_threshold = config.fallback_confidence_threshold
    if max_overlap_percentage is None:
        max_overlap_percentage = config.max_overlap_percentage

    if primary and any(box.confidence >= confidence_threshold for box in primary):
        selected = primary
        source = 'primary'
    else:
        selected = fallback
        source = 'fallback'

    merged = merge_overlapping(selected, max_overlap_percentage)
    logger.info("Using %s detections: %d boxes (%d after merge)", source, len(selected), len(merged))
    return merged
