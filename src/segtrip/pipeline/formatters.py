"""Output formatters for segmenter output events.

Two interchangeable strategies consume the same ``SCALAR`` / ``BOUNDARY`` /
``END`` event stream:

- ``ScalarListingFormatter`` writes ``U+XXXX`` notation, space separated
  within a segment, with the raw delimiter bytes at every boundary.
- ``ReencodingFormatter`` writes the scalar values back in an encoding, with
  the decoded delimiter re-encoded at every boundary.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Sequence, Tuple

from segtrip.character.decoder import decode_delimiter
from segtrip.character.encoder import DEFAULT_BUFFER_SIZE, StreamEncoder
from segtrip.character.encoding import Encoding, resolve_output_encoding
from segtrip.segmentation.events import Event, EventKind
from segtrip.shared.config import TripConfig

from .diagnostics import MalformedInputReporter


def scalar_notation(scalar: int) -> str:
    """Return the ``U+XXXX`` notation of a scalar value (at least 4 digits)."""
    return f"U+{scalar:04X}"


class OutputFormatter(ABC):
    """Consumer of segmenter output events."""

    @abstractmethod
    def emit(self, event: Event) -> None:
        """Consume a ``SCALAR``, ``BOUNDARY`` or ``END`` event."""


class ScalarListingFormatter(OutputFormatter):
    """Render scalar values as ASCII ``U+XXXX`` notation.

    Examples:
        >>> sink = io.BytesIO()
        >>> formatter = ScalarListingFormatter(sink, b"|")
        >>> for event in (BOUNDARY, Event.of_scalar(0x48), Event.of_scalar(0x69), BOUNDARY):
        ...     formatter.emit(event)
        >>> sink.getvalue()
        b'|U+0048 U+0069|'
    """

    def __init__(self, sink: BinaryIO, delimiter: bytes) -> None:
        """Initialize the formatter.

        Args:
            sink: Binary stream receiving the listing
            delimiter: Bytes written verbatim at every boundary
        """
        self._sink = sink
        self._delimiter = bytes(delimiter)
        self._last_was_scalar = False

    def emit(self, event: Event) -> None:
        if event.kind is EventKind.SCALAR:
            if self._last_was_scalar:
                self._sink.write(b" ")
            self._last_was_scalar = True
            self._sink.write(scalar_notation(event.scalar).encode("ascii"))
        elif event.kind is EventKind.BOUNDARY:
            self._last_was_scalar = False
            self._sink.write(self._delimiter)
        elif event.kind is EventKind.END:
            self._sink.flush()
        else:
            raise ValueError(f"Cannot format {event!r}")


class ReencodingFormatter(OutputFormatter):
    """Write scalar values back as encoded bytes."""

    def __init__(
        self,
        sink: BinaryIO,
        encoding: Encoding,
        delimiter: Sequence[int],
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """Initialize the formatter.

        Args:
            sink: Binary stream receiving encoded output
            encoding: Output encoding
            delimiter: Scalar values written at every boundary
            buffer_size: Encoder buffer size in bytes
        """
        self.encoding = encoding
        self._encoder = StreamEncoder(sink, encoding, buffer_size)
        self._delimiter: Tuple[Event, ...] = tuple(
            Event.of_scalar(scalar) for scalar in delimiter
        )

    def emit(self, event: Event) -> None:
        if event.kind is EventKind.BOUNDARY:
            for scalar in self._delimiter:
                self._encoder.encode(scalar)
        else:
            self._encoder.encode(event)


def create_formatter(
    sink: BinaryIO,
    config: TripConfig,
    input_encoding: Encoding,
    reporter: Optional[MalformedInputReporter] = None,
) -> OutputFormatter:
    """Select the output strategy for a run.

    Args:
        sink: Binary stream receiving output
        config: Run configuration (delimiter and ascii flag)
        input_encoding: Detected or declared input encoding
        reporter: Receives malformed bytes found in the delimiter

    Returns:
        ScalarListingFormatter in ascii mode, ReencodingFormatter otherwise
    """
    if config.ascii:
        return ScalarListingFormatter(sink, config.delimiter)

    on_malformed = reporter.report_delimiter if reporter is not None else None
    delimiter = decode_delimiter(bytes(config.delimiter), on_malformed)
    return ReencodingFormatter(
        sink,
        resolve_output_encoding(input_encoding),
        delimiter,
        config.buffer_size,
    )
