"""Streaming pipeline for segtrip.

This module provides the driver that pushes decoded scalar values through a
segmenter, the output formatters and the malformed-input reporter.
"""

from .diagnostics import MalformedInputReporter, format_malformed
from .driver import SegmentationDriver
from .formatters import (
    OutputFormatter,
    ReencodingFormatter,
    ScalarListingFormatter,
    create_formatter,
    scalar_notation,
)

__all__ = [
    "MalformedInputReporter",
    "format_malformed",
    "SegmentationDriver",
    "OutputFormatter",
    "ReencodingFormatter",
    "ScalarListingFormatter",
    "create_formatter",
    "scalar_notation",
]
