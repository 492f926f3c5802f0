"""Pull-based stream decoder with position tracking and malformed-byte recovery.

The decoder reads bytes from a binary source in fixed-size chunks and hands out
one decode event per ``decode()`` call: a scalar value, a run of malformed
bytes, or the end of the stream. It never holds more than one chunk of input.
"""

import codecs
import io
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, Generator, Iterator, Optional, Tuple

from segtrip.segmentation.events import END, REPLACEMENT_SCALAR, Event, EventKind
from segtrip.shared.logging import get_logger

from .encoding import (
    GUESS_SAMPLE_SIZE,
    Encoding,
    EncodingDetector,
    EncodingResult,
)

DEFAULT_BUFFER_SIZE = 8192

LINE_FEED = 0x0A
CARRIAGE_RETURN = 0x0D
# Characters that end a line besides LF
LINE_TERMINATORS = frozenset({CARRIAGE_RETURN, 0x0C, 0x85, 0x2028, 0x2029})

DecodeEvents = Generator[Event, None, None]


@dataclass(frozen=True)
class StreamPosition:
    """Position of the last decoded character.

    Attributes:
        line: Line number, starting at 1
        column: Column of the last character; 0 right after a newline
        count: Characters decoded so far, malformed ones included
    """
    line: int = 1
    column: int = 0
    count: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "count": self.count}

    def __str__(self) -> str:
        return f"{self.line}.{self.column}:({self.count})"


class PositionTracker:
    """Line, column and character counters updated per decoded scalar value."""

    def __init__(self) -> None:
        self.line = 1
        self.column = 0
        self.count = 0
        self._after_cr = False

    def advance(self, scalar: int) -> None:
        self.count += 1
        if scalar == LINE_FEED:
            # CRLF is one newline
            if not self._after_cr:
                self.line += 1
            self.column = 0
        elif scalar in LINE_TERMINATORS:
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        self._after_cr = scalar == CARRIAGE_RETURN

    @property
    def position(self) -> StreamPosition:
        return StreamPosition(self.line, self.column, self.count)


class StreamDecoder:
    """Decode a byte stream into scalar values one event at a time.

    The encoding is guessed (or confirmed, when declared) from the first bytes
    of the stream the first time it is needed. A leading byte order mark is
    removed from the decoded values and reported through ``removed_bom``.

    Bytes the codec rejects come out as a single ``MALFORMED`` event holding
    exactly the rejected bytes; decoding resumes right after them.

    Examples:
        >>> decoder = StreamDecoder(io.BytesIO(b"a\\xffb"))
        >>> [decoder.decode() for _ in range(4)]
        [Event(SCALAR U+0061), Event(MALFORMED FF), Event(SCALAR U+0062), Event(END)]
    """

    def __init__(
        self,
        source: BinaryIO,
        encoding: Optional[Encoding] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        strip_bom: bool = True,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the decoder.

        Args:
            source: Binary stream to read from
            encoding: Declared encoding, or None to guess it
            buffer_size: Number of bytes read from the source at a time
            strip_bom: Whether a leading byte order mark is removed
            correlation_id: Optional correlation ID for logging
        """
        if buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")

        self._source = source
        self._declared = encoding
        self._buffer_size = buffer_size
        self._strip_bom = strip_bom
        self._detector = EncodingDetector()
        self._tracker = PositionTracker()
        self._detection: Optional[EncodingResult] = None
        self._head = b""
        self._eof = False
        self._finished = False
        self._events = self._generate()
        self.logger = get_logger(__name__, correlation_id, "stream_decoder")

    @property
    def detection(self) -> EncodingResult:
        """Detection result; reads the first bytes of the source if needed."""
        if self._detection is None:
            self._prime()
        return self._detection

    @property
    def encoding(self) -> Encoding:
        """Encoding of the stream, guessed or declared."""
        return self.detection.encoding

    @property
    def removed_bom(self) -> bool:
        """Whether a leading byte order mark was removed from the stream."""
        return self._strip_bom and self.detection.bom_length > 0

    @property
    def position(self) -> StreamPosition:
        """Position of the last decoded (or malformed) character."""
        return self._tracker.position

    def decode(self) -> Event:
        """Pull the next decode event.

        Returns:
            A ``SCALAR``, ``MALFORMED`` or ``END`` event. Once the end has been
            reached every further call returns ``END``.
        """
        if self._finished:
            return END
        event = next(self._events)
        if event.kind is EventKind.END:
            self._finished = True
        return event

    def __iter__(self) -> Iterator[Event]:
        """Iterate over decode events up to and excluding ``END``."""
        while True:
            event = self.decode()
            if event.kind is EventKind.END:
                return
            yield event

    def _read(self) -> bytes:
        return self._source.read(self._buffer_size)

    def _prime(self) -> None:
        """Read enough leading bytes to settle the encoding."""
        head = b""
        while len(head) < GUESS_SAMPLE_SIZE:
            chunk = self._read()
            if not chunk:
                self._eof = True
                break
            head += chunk

        detection = self._detector.detect(head, self._declared)
        self._detection = detection
        self._head = head[detection.bom_length:] if self._strip_bom else head

        self.logger.debug(
            "Encoding resolved",
            extra={
                "encoding": detection.encoding.value,
                "codec": detection.codec,
                "method": detection.method.value,
                "bom_length": detection.bom_length,
                "issues": detection.issues,
            }
        )

    def _new_codec_decoder(self) -> codecs.IncrementalDecoder:
        return codecs.getincrementaldecoder(self.detection.codec)(errors="strict")

    def _generate(self) -> DecodeEvents:
        if self._detection is None:
            self._prime()

        decoder = self._new_codec_decoder()
        data, final = self._head, self._eof
        self._head = b""

        while True:
            decoder = yield from self._decode_chunk(decoder, data, final)
            if final:
                break
            data = self._read()
            final = not data

        yield END

    def _decode_chunk(
        self, decoder: codecs.IncrementalDecoder, data: bytes, final: bool
    ) -> Generator[Event, None, codecs.IncrementalDecoder]:
        """Decode one chunk, splitting out malformed byte runs.

        Returns:
            The incremental decoder to use for the next chunk
        """
        while True:
            try:
                text = decoder.decode(data, final)
            except UnicodeDecodeError as exc:
                # exc.object holds the decoder's pending bytes plus this chunk
                pending = bytes(exc.object)
                end = max(exc.end, exc.start + 1)
                yield from self._scalars(pending[:exc.start].decode(self.detection.codec))
                self._tracker.advance(REPLACEMENT_SCALAR)
                yield Event.of_malformed(pending[exc.start:end])
                decoder = self._new_codec_decoder()
                data = pending[end:]
                continue

            yield from self._scalars(text)
            return decoder

    def _scalars(self, text: str) -> DecodeEvents:
        for char in text:
            scalar = ord(char)
            self._tracker.advance(scalar)
            yield Event.of_scalar(scalar)


def decode_delimiter(
    raw: bytes,
    on_malformed: Optional[Callable[[bytes], None]] = None,
) -> Tuple[int, ...]:
    """Decode a UTF-8 delimiter into scalar values.

    Malformed bytes become U+FFFD. A leading byte order mark is kept as a
    scalar value.

    Args:
        raw: UTF-8 encoded delimiter
        on_malformed: Called with each run of malformed bytes

    Returns:
        Tuple of scalar values
    """
    decoder = StreamDecoder(io.BytesIO(raw), Encoding.UTF_8, strip_bom=False)
    scalars = []
    for event in decoder:
        if event.kind is EventKind.MALFORMED:
            if on_malformed is not None:
                on_malformed(event.raw)
            scalars.append(REPLACEMENT_SCALAR)
        else:
            scalars.append(event.scalar)
    return tuple(scalars)
