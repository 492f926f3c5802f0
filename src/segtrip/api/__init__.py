"""Public run API for segtrip."""

from .trip import (
    TripResult,
    open_source,
    run_stream,
    segment_bytes,
    segment_file,
    trip,
)

__all__ = [
    "TripResult",
    "open_source",
    "run_stream",
    "segment_bytes",
    "segment_file",
    "trip",
]
