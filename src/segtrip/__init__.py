"""segtrip: streaming Unicode text segmentation.

Reads a byte stream in a declared or guessed encoding, segments the decoded
scalar values into grapheme clusters, words, sentences or line break
opportunities, and writes them back with a delimiter at every boundary.

Progressive API Disclosure:
- Level 1: Simple functions - segment_bytes(), segment_file()
- Level 2: Configured runs - trip() with a TripConfig
- Level 3: Pipeline parts - StreamDecoder, create_segmenter(), SegmentationDriver
"""

__version__ = "0.1.0"
__author__ = "segtrip developers"

# Level 1 and 2: run API
from .api import TripResult, segment_bytes, segment_file, trip
from .character import Encoding, StreamDecoder

# Level 3: pipeline parts
from .pipeline import SegmentationDriver
from .segmentation import SegmentationMode, create_segmenter
from .shared.config import TripConfig

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "segment_bytes",
    "segment_file",

    # Level 2: Configured runs
    "trip",
    "TripConfig",
    "TripResult",

    # Level 3: Pipeline parts
    "Encoding",
    "SegmentationMode",
    "StreamDecoder",
    "SegmentationDriver",
    "create_segmenter",
]
