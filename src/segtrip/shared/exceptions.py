"""Exception hierarchy for segtrip.

Only resource and configuration failures are meant to reach the process
boundary. Malformed input never raises; it is reported and replaced.
"""

from typing import List, Optional


class SegmentationError(Exception):
    """Base exception for pipeline failures."""


class SourceUnavailableError(SegmentationError):
    """Raised when the input source cannot be opened or read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class PipelineInvariantError(SegmentationError):
    """Raised when the driver observes an event outside its contract."""


class SegmenterProtocolError(SegmentationError):
    """Raised when a segmenter is fed out of order with the push/drain protocol."""


class EncodingError(SegmentationError):
    """Raised for unknown encoding names and unencodable scalar values."""


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []
