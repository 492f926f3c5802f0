"""Push-based stream encoder.

The encoder receives scalar values one at a time and writes their encoded
bytes to a binary sink, buffering output until the buffer fills or the stream
ends.
"""

import codecs
from typing import BinaryIO

from segtrip.segmentation.events import Event, EventKind
from segtrip.shared.exceptions import EncodingError

from .encoding import Encoding

DEFAULT_BUFFER_SIZE = 8192


class StreamEncoder:
    """Encode scalar values into a binary sink.

    Examples:
        >>> sink = io.BytesIO()
        >>> encoder = StreamEncoder(sink, Encoding.UTF_16BE)
        >>> encoder.encode(Event.of_scalar(0x41))
        >>> encoder.encode(END)
        >>> sink.getvalue()
        b'\\x00A'
    """

    def __init__(
        self,
        sink: BinaryIO,
        encoding: Encoding,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """Initialize the encoder.

        Args:
            sink: Binary stream receiving encoded bytes
            encoding: Target encoding
            buffer_size: Bytes buffered before writing to the sink
        """
        if buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")

        self.encoding = encoding
        self._sink = sink
        self._buffer_size = buffer_size
        self._buffer = bytearray()
        self._encoder = codecs.getincrementalencoder(encoding.codec)(errors="strict")
        self._ended = False
        self.bytes_written = 0

    def encode(self, event: Event) -> None:
        """Encode a ``SCALAR`` event or finish the stream on ``END``.

        Raises:
            EncodingError: If the value cannot be represented in the target
                encoding, or the stream already ended
            ValueError: For any other event kind
        """
        if self._ended:
            raise EncodingError("Encoder already received END")

        if event.kind is EventKind.SCALAR:
            try:
                self._buffer += self._encoder.encode(chr(event.scalar))
            except UnicodeEncodeError as exc:
                raise EncodingError(
                    f"U+{event.scalar:04X} cannot be encoded in {self.encoding.value}"
                ) from exc
            if len(self._buffer) >= self._buffer_size:
                self._flush()
        elif event.kind is EventKind.END:
            self._buffer += self._encoder.encode("", True)
            self._ended = True
            self._flush()
            self._sink.flush()
        else:
            raise ValueError(f"Cannot encode {event!r}")

    def _flush(self) -> None:
        if self._buffer:
            self._sink.write(bytes(self._buffer))
            self.bytes_written += len(self._buffer)
            self._buffer.clear()
