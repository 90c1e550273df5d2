"""Detection package - Model-free diagram detection from page pixels."""

from .edge_detector import EdgeDetector, detect_edges
from .region_extractor import RegionExtractor, extract_regions
from .region_classifier import (
    passes_region_filters,
    classify_diagram_type,
    calculate_confidence,
    filter_and_classify,
)
from .text_regions import detect_text_regions, enhance_with_text_labels
from .fallback_detector import FallbackDiagramDetector, choose_detections

__all__ = [
    'EdgeDetector',
    'detect_edges',
    'RegionExtractor',
    'extract_regions',
    'passes_region_filters',
    'classify_diagram_type',
    'calculate_confidence',
    'filter_and_classify',
    'detect_text_regions',
    'enhance_with_text_labels',
    'FallbackDiagramDetector',
    'choose_detections',
]
