"""Segmentation layer for segtrip.

This package defines the pipeline event model and the incremental segmenter
driven through the push/drain protocol.
"""

from .engine import (
    DEFAULT_LOOKAHEAD,
    SegmentationMode,
    Segmenter,
    SegmenterConfig,
    UnisegSegmenter,
    create_segmenter,
)
from .events import (
    AWAIT,
    BOM,
    BOUNDARY,
    END,
    REPLACEMENT,
    Event,
    EventKind,
    is_scalar_value,
)

__all__ = [
    # Events
    "AWAIT",
    "BOM",
    "BOUNDARY",
    "END",
    "REPLACEMENT",
    "Event",
    "EventKind",
    "is_scalar_value",
    # Segmenters
    "DEFAULT_LOOKAHEAD",
    "SegmentationMode",
    "Segmenter",
    "SegmenterConfig",
    "UnisegSegmenter",
    "create_segmenter",
]
