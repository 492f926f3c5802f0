"""Run orchestration for segtrip.

This module wires one run together: open the source, settle the input
encoding, pick the output strategy, then stream everything through a fresh
segmenter. Module-level helpers cover the common in-memory and file cases.
"""

import io
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from segtrip.character import Encoding, EncodingResult, StreamDecoder
from segtrip.pipeline import MalformedInputReporter, SegmentationDriver, create_formatter
from segtrip.pipeline.formatters import ReencodingFormatter
from segtrip.segmentation import SegmentationMode, create_segmenter
from segtrip.shared import (
    DiagnosticEntry,
    SourceUnavailableError,
    TripMetrics,
    get_logger,
)
from segtrip.shared.config import DEFAULT_DELIMITER, TripConfig

BYTES_SOURCE = "<bytes>"


@dataclass
class TripResult:
    """Outcome of one run.

    Attributes:
        detection: How the input encoding was settled
        output_encoding: Encoding of the output, None for the scalar listing
        metrics: Counters collected by the driver
        diagnostics: Most recent malformed-input reports, in stream order
            (the total is ``metrics.malformed``)
    """
    detection: EncodingResult
    output_encoding: Optional[Encoding]
    metrics: TripMetrics
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def encoding(self) -> Encoding:
        return self.detection.encoding

    @property
    def malformed_count(self) -> int:
        return self.metrics.malformed


class _GuardedSource:
    """Binary reader that reports read failures as SourceUnavailableError."""

    def __init__(self, stream: BinaryIO, name: str) -> None:
        self._stream = stream
        self._name = name

    def read(self, size: int = -1) -> bytes:
        try:
            return self._stream.read(size)
        except OSError as e:
            raise SourceUnavailableError(self._name, e.strerror or str(e)) from e


def open_source(source: str) -> BinaryIO:
    """Open an input source for binary reading.

    Args:
        source: File path, or ``"-"`` for standard input

    Raises:
        SourceUnavailableError: If the file cannot be opened
    """
    if source == "-":
        return sys.stdin.buffer
    try:
        return open(source, "rb")
    except OSError as e:
        raise SourceUnavailableError(source, e.strerror or str(e)) from e


def trip(config: TripConfig, output: Optional[BinaryIO] = None) -> TripResult:
    """Segment the configured source and write the result to ``output``.

    Args:
        config: Run configuration
        output: Binary sink (defaults to standard output)

    Returns:
        TripResult with detection outcome, counters and diagnostics

    Raises:
        SourceUnavailableError: If the source cannot be opened or read
    """
    sink = output if output is not None else sys.stdout.buffer
    stream = open_source(config.source)
    try:
        return run_stream(config, stream, sink)
    finally:
        if not config.reads_stdin:
            stream.close()


def run_stream(config: TripConfig, stream: BinaryIO, sink: BinaryIO) -> TripResult:
    """Run the pipeline over an already open binary stream.

    The stream is not closed.
    """
    logger = get_logger(__name__, config.correlation_id, "trip")
    logger.info(
        "Starting segmentation run",
        extra={
            "source": config.source,
            "mode": config.mode.value,
            "declared_encoding": config.encoding.value if config.encoding else None,
            "ascii_output": config.ascii,
        }
    )

    reporter = MalformedInputReporter(config.source, config.correlation_id)
    decoder = StreamDecoder(
        _GuardedSource(stream, config.source),
        config.encoding,
        config.buffer_size,
        correlation_id=config.correlation_id,
    )

    # Pulling the first event settles a guessed encoding
    first_event = decoder.decode()
    formatter = create_formatter(sink, config, decoder.encoding, reporter)
    driver = SegmentationDriver(
        create_segmenter(config.mode, config.segmenter),
        formatter,
        reporter,
        config.correlation_id,
    )
    metrics = driver.run(decoder, first_event)
    sink.flush()

    output_encoding = (
        formatter.encoding if isinstance(formatter, ReencodingFormatter) else None
    )
    return TripResult(
        detection=decoder.detection,
        output_encoding=output_encoding,
        metrics=metrics,
        diagnostics=list(reporter.diagnostics),
    )


def segment_bytes(
    data: bytes,
    mode: SegmentationMode = SegmentationMode.WORD,
    encoding: Optional[Encoding] = None,
    delimiter: bytes = DEFAULT_DELIMITER,
    ascii: bool = False,
) -> bytes:
    """Segment in-memory bytes and return the output bytes.

    Examples:
        >>> segment_bytes(b"Hi there")
        b'|Hi| |there|'
        >>> segment_bytes(b"Hi", ascii=True)
        b'|U+0048 U+0069|'
    """
    config = TripConfig(
        mode=mode,
        source=BYTES_SOURCE,
        encoding=encoding,
        delimiter=delimiter,
        ascii=ascii,
    )
    sink = io.BytesIO()
    run_stream(config, io.BytesIO(data), sink)
    return sink.getvalue()


def segment_file(
    path: Union[str, Path],
    mode: SegmentationMode = SegmentationMode.WORD,
    encoding: Optional[Encoding] = None,
    delimiter: bytes = DEFAULT_DELIMITER,
    ascii: bool = False,
) -> bytes:
    """Segment a file and return the output bytes.

    Raises:
        SourceUnavailableError: If the file cannot be opened or read
    """
    config = TripConfig(
        mode=mode,
        source=str(path),
        encoding=encoding,
        delimiter=delimiter,
        ascii=ascii,
    )
    sink = io.BytesIO()
    trip(config, sink)
    return sink.getvalue()
