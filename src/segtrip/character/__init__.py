"""Character layer for segtrip.

This package provides encoding detection, the pull-based stream decoder and
the push-based stream encoder that sit on either side of the segmenter.
"""

from .decoder import (
    DEFAULT_BUFFER_SIZE,
    PositionTracker,
    StreamDecoder,
    StreamPosition,
    decode_delimiter,
)
from .encoder import StreamEncoder
from .encoding import (
    BOMDetector,
    DetectionMethod,
    Encoding,
    EncodingDetector,
    EncodingResult,
    resolve_output_encoding,
)

__all__ = [
    # Modules
    "decoder",
    "encoder",
    "encoding",
    # Encoding model and detection
    "BOMDetector",
    "DetectionMethod",
    "Encoding",
    "EncodingDetector",
    "EncodingResult",
    "resolve_output_encoding",
    # Decoding
    "DEFAULT_BUFFER_SIZE",
    "PositionTracker",
    "StreamDecoder",
    "StreamPosition",
    "decode_delimiter",
    # Encoding
    "StreamEncoder",
]
