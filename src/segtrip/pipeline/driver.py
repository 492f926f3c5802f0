"""Streaming driver between the decoder, the segmenter and a formatter.

The driver pulls one decode event at a time, feeds the matching input to the
segmenter and drains the segmenter to quiescence before pulling again. It
holds no copy of the input: one pending decode event and one pending output
event at most.
"""

import time
from typing import Optional, Protocol

from segtrip.character.decoder import StreamPosition
from segtrip.segmentation.engine import Segmenter
from segtrip.segmentation.events import AWAIT, BOM, END, REPLACEMENT, Event, EventKind
from segtrip.shared.exceptions import PipelineInvariantError
from segtrip.shared.logging import get_logger
from segtrip.shared.result import TripMetrics

from .diagnostics import MalformedInputReporter
from .formatters import OutputFormatter

MS_PER_SECOND = 1000


class DecodeSource(Protocol):
    """Pull side of the codec adapter as seen by the driver."""

    @property
    def removed_bom(self) -> bool: ...

    @property
    def position(self) -> StreamPosition: ...

    def decode(self) -> Event: ...


class SegmentationDriver:
    """Drive decode events through a segmenter into a formatter.

    The decoder must only produce ``SCALAR``, ``MALFORMED`` and ``END``
    events; anything else is a broken contract and raises
    ``PipelineInvariantError``.
    """

    def __init__(
        self,
        segmenter: Segmenter,
        formatter: OutputFormatter,
        reporter: MalformedInputReporter,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the driver.

        Args:
            segmenter: Fresh segmenter, used for exactly one run
            formatter: Receives ``SCALAR``, ``BOUNDARY`` and ``END`` events
            reporter: Logs malformed byte sequences
            correlation_id: Optional correlation ID for logging
        """
        self.segmenter = segmenter
        self.formatter = formatter
        self.reporter = reporter
        self.metrics = TripMetrics()
        self._ran = False
        self.logger = get_logger(__name__, correlation_id, "segmentation_driver")

    def run(self, decoder: DecodeSource, first_event: Optional[Event] = None) -> TripMetrics:
        """Stream the whole input through the segmenter.

        Args:
            decoder: Source of decode events
            first_event: Event already pulled from ``decoder`` (pulling it is
                what settles a guessed encoding), or None to pull it here

        Returns:
            Counters for the run

        Raises:
            PipelineInvariantError: If the driver is reused or the decoder
                produces an event outside its contract
        """
        if self._ran:
            raise PipelineInvariantError("A driver runs exactly once")
        self._ran = True

        start_time = time.perf_counter()
        event = first_event if first_event is not None else decoder.decode()

        if decoder.removed_bom:
            self.metrics.bom_injected = True
            self._feed(BOM)

        while True:
            if event.kind is EventKind.SCALAR:
                self._feed(event)
            elif event.kind is EventKind.MALFORMED:
                self.metrics.malformed += 1
                self.reporter.report(decoder.position, event.raw)
                self._feed(REPLACEMENT)
            elif event.kind is EventKind.END:
                self._feed(END)
                self.formatter.emit(END)
                break
            else:
                raise PipelineInvariantError(f"Unexpected decode event {event!r}")
            event = decoder.decode()

        self.metrics.processing_time_ms = (
            time.perf_counter() - start_time
        ) * MS_PER_SECOND
        self.logger.debug("Segmentation run finished", extra=self.metrics.as_dict())
        return self.metrics

    def _feed(self, event: Event) -> None:
        """Feed one input and drain the segmenter until it goes quiet."""
        if event.kind is EventKind.SCALAR:
            self.metrics.scalars_in += 1

        output = self.segmenter.add(event)
        while output.kind in (EventKind.SCALAR, EventKind.BOUNDARY):
            if output.kind is EventKind.SCALAR:
                self.metrics.scalars_out += 1
            else:
                self.metrics.boundaries += 1
            self.formatter.emit(output)
            output = self.segmenter.add(AWAIT)

        if output.kind not in (EventKind.AWAIT, EventKind.END):
            raise PipelineInvariantError(f"Unexpected segmenter output {output!r}")
