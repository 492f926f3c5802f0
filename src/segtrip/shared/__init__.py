"""Shared utilities for segtrip.

This module provides the result records, exception hierarchy and logging
helpers used across all processing layers. Configuration lives in
``segtrip.shared.config``.
"""

from .exceptions import (
    ConfigError,
    ConfigValidationError,
    EncodingError,
    PipelineInvariantError,
    SegmentationError,
    SegmenterProtocolError,
    SourceUnavailableError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    TripMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "EncodingError",
    "PipelineInvariantError",
    "SegmentationError",
    "SegmenterProtocolError",
    "SourceUnavailableError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "TripMetrics",
]
