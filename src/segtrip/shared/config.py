"""Configuration for segtrip runs.

This module provides the configuration object consumed by the pipeline: the
segmentation mode, the input source and its declared encoding, the delimiter
and the output strategy.
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from segtrip.character.decoder import DEFAULT_BUFFER_SIZE
from segtrip.character.encoding import Encoding
from segtrip.segmentation.engine import (
    DEFAULT_CONTEXT_SEGMENTS,
    DEFAULT_MAX_PENDING,
    SegmentationMode,
    SegmenterConfig,
)

from .exceptions import ConfigValidationError, EncodingError

DEFAULT_DELIMITER = b"|"
DEFAULT_PROGRAM = "segtrip"
STDIN_SOURCE = "-"


@dataclass
class TripConfig:
    """Configuration for one decode, segment and re-encode run.

    Attributes:
        mode: Kind of segments to delimit
        source: Input path, or ``"-"`` for standard input
        encoding: Declared input encoding, or None to guess it
        delimiter: UTF-8 bytes written at every boundary
        ascii: Write a ``U+XXXX`` listing instead of re-encoded text
        buffer_size: Read and write buffer size in bytes
        program: Program name prefixed to diagnostics
        correlation_id: Optional correlation ID for logging
        segmenter: Incremental segmenter tuning
    """

    mode: SegmentationMode = SegmentationMode.WORD
    source: str = STDIN_SOURCE
    encoding: Optional[Encoding] = None
    delimiter: bytes = DEFAULT_DELIMITER
    ascii: bool = False
    buffer_size: int = DEFAULT_BUFFER_SIZE
    program: str = DEFAULT_PROGRAM
    correlation_id: Optional[str] = None
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)

    def __post_init__(self) -> None:
        """Validate trip configuration."""
        if not isinstance(self.mode, SegmentationMode):
            raise ConfigValidationError(
                f"mode must be a SegmentationMode, got {self.mode!r}",
                field_name="mode",
                suggestions=[mode.value for mode in SegmentationMode],
            )
        if self.encoding is not None and not isinstance(self.encoding, Encoding):
            raise ConfigValidationError(
                f"encoding must be an Encoding or None, got {self.encoding!r}",
                field_name="encoding",
                suggestions=[encoding.value for encoding in Encoding],
            )
        if not isinstance(self.delimiter, (bytes, bytearray)):
            raise ConfigValidationError(
                "delimiter must be bytes", field_name="delimiter",
                suggestions=["Encode text delimiters as UTF-8"],
            )
        if not self.source:
            raise ConfigValidationError(
                "source cannot be empty", field_name="source",
                suggestions=[f"Use {STDIN_SOURCE!r} for standard input"],
            )
        if self.buffer_size <= 0:
            raise ConfigValidationError(
                "buffer_size must be > 0", field_name="buffer_size"
            )
        if not self.program:
            raise ConfigValidationError(
                "program cannot be empty", field_name="program"
            )

    @property
    def reads_stdin(self) -> bool:
        return self.source == STDIN_SOURCE

    def override(self, **kwargs: Any) -> "TripConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override

        Returns:
            New TripConfig instance with overrides applied
        """
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return {
            "mode": self.mode.value,
            "source": self.source,
            "encoding": self.encoding.value if self.encoding else None,
            "delimiter": self.delimiter.decode("utf-8", errors="surrogateescape"),
            "ascii": self.ascii,
            "buffer_size": self.buffer_size,
            "program": self.program,
            "correlation_id": self.correlation_id,
            "segmenter": {
                "context_segments": self.segmenter.context_segments,
                "lookahead": {
                    mode.value: value
                    for mode, value in self.segmenter.lookahead.items()
                },
                "max_pending": self.segmenter.max_pending,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TripConfig":
        """Create configuration from a dictionary.

        Modes and encodings may be given by enum name or CLI spelling, and the
        delimiter as text (encoded as UTF-8) or bytes.

        Raises:
            ConfigValidationError: For unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                suggestions=sorted(known),
            )

        kwargs: Dict[str, Any] = dict(data)
        try:
            if isinstance(kwargs.get("mode"), str):
                kwargs["mode"] = SegmentationMode.from_label(kwargs["mode"])
            if isinstance(kwargs.get("encoding"), str):
                kwargs["encoding"] = Encoding.from_label(kwargs["encoding"])
            if isinstance(kwargs.get("delimiter"), str):
                kwargs["delimiter"] = kwargs["delimiter"].encode(
                    "utf-8", errors="surrogateescape"
                )
            if isinstance(kwargs.get("segmenter"), dict):
                kwargs["segmenter"] = _segmenter_from_dict(kwargs["segmenter"])
        except (ValueError, EncodingError) as e:
            raise ConfigValidationError(str(e)) from e

        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TripConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigValidationError: If the file cannot be read or is invalid
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigValidationError(
                f"Could not load config file {path}: {e}", field_name=None
            ) from e

        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {path} must hold a JSON object")
        return cls.from_dict(data)


def _segmenter_from_dict(data: Dict[str, Any]) -> SegmenterConfig:
    lookahead = {
        SegmentationMode.from_label(label): int(value)
        for label, value in data.get("lookahead", {}).items()
    }
    return SegmenterConfig(
        context_segments=int(data.get("context_segments", DEFAULT_CONTEXT_SEGMENTS)),
        lookahead=lookahead,
        max_pending=int(data.get("max_pending", DEFAULT_MAX_PENDING)),
    )
