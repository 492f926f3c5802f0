"""Incremental segmentation engine.

A segmenter is fed one input event at a time and answers each call with one
output event. After feeding a scalar value (or ``END``) the caller keeps
feeding ``AWAIT`` until the segmenter answers ``AWAIT`` (or ``END``); only
then may the next scalar value be fed.

The boundary rules themselves come from ``uniseg`` (UAX #29 for grapheme
clusters, words and sentences, UAX #14 for line breaks). ``UnisegSegmenter``
turns its whole-string boundary functions into the incremental protocol by
holding back the segment under construction until enough input follows it.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional

from uniseg.graphemecluster import grapheme_cluster_boundaries
from uniseg.linebreak import line_break_boundaries
from uniseg.sentencebreak import sentence_boundaries
from uniseg.wordbreak import word_boundaries

from segtrip.shared.exceptions import SegmenterProtocolError

from .events import AWAIT, BOUNDARY, END, Event, EventKind

BoundaryFunction = Callable[[str], Iterable[int]]


class SegmentationMode(Enum):
    """Kinds of segments a segmenter delimits."""

    GRAPHEME_CLUSTER = "grapheme-cluster"
    WORD = "word"
    SENTENCE = "sentence"
    LINE_BREAK = "line"

    @classmethod
    def from_label(cls, label: str) -> "SegmentationMode":
        """Look up a mode by enum name or CLI spelling."""
        key = label.strip().lower().replace("_", "-")
        for mode in cls:
            if key in (mode.value, mode.name.lower().replace("_", "-")):
                return mode
        raise ValueError(f"Unknown segmentation mode: {label!r}")


# Non-whitespace scalar values that must follow a boundary before it is final
DEFAULT_LOOKAHEAD: Dict[SegmentationMode, int] = {
    SegmentationMode.GRAPHEME_CLUSTER: 2,
    SegmentationMode.WORD: 3,
    SegmentationMode.SENTENCE: 8,
    SegmentationMode.LINE_BREAK: 4,
}

DEFAULT_CONTEXT_SEGMENTS = 4

# Pending scalar values held before held-back boundaries are forced out
DEFAULT_MAX_PENDING = 256


@dataclass
class SegmenterConfig:
    """Configuration for the incremental segmenter.

    Attributes:
        context_segments: Emitted segments kept as lookbehind context
        lookahead: Per-mode override of the settled lookahead
        max_pending: Cap on held-back scalar values; past it the engine
            commits without waiting for lookahead
    """
    context_segments: int = DEFAULT_CONTEXT_SEGMENTS
    lookahead: Dict[SegmentationMode, int] = field(default_factory=dict)
    max_pending: int = DEFAULT_MAX_PENDING

    def __post_init__(self) -> None:
        """Validate segmenter configuration."""
        if self.context_segments < 1:
            raise ValueError("context_segments must be >= 1")
        for mode, value in self.lookahead.items():
            if not isinstance(mode, SegmentationMode):
                raise ValueError(f"lookahead keys must be SegmentationMode, got {mode!r}")
            if value < 1:
                raise ValueError(f"lookahead for {mode.value} must be >= 1")
        longest = max(self.lookahead_for(mode) for mode in SegmentationMode)
        if self.max_pending <= longest:
            raise ValueError(
                f"max_pending must be greater than the longest lookahead ({longest})"
            )

    def lookahead_for(self, mode: SegmentationMode) -> int:
        return self.lookahead.get(mode, DEFAULT_LOOKAHEAD[mode])


class Segmenter(ABC):
    """Incremental boundary classifier driven by the push/drain protocol."""

    mode: SegmentationMode

    @abstractmethod
    def add(self, event: Event) -> Event:
        """Feed one input event and return one output event.

        Args:
            event: ``SCALAR``, ``AWAIT`` or ``END``

        Returns:
            ``SCALAR``, ``BOUNDARY``, ``AWAIT`` or ``END``

        Raises:
            SegmenterProtocolError: If the event is fed out of protocol
        """


_BOUNDARY_FUNCTIONS: Dict[SegmentationMode, BoundaryFunction] = {
    SegmentationMode.GRAPHEME_CLUSTER: grapheme_cluster_boundaries,
    SegmentationMode.WORD: word_boundaries,
    SegmentationMode.SENTENCE: sentence_boundaries,
    SegmentationMode.LINE_BREAK: line_break_boundaries,
}


class UnisegSegmenter(Segmenter):
    """Segmenter backed by the ``uniseg`` boundary functions.

    Grapheme cluster, word and sentence modes report a boundary at the start
    and at the end of non-empty text. Line break mode reports none at the
    start and a mandatory one at the end. Empty text yields only ``END``.

    Boundaries are recomputed over a window made of a few already emitted
    segments (lookbehind context, always starting on a boundary) followed by
    the pending scalar values. A boundary inside the pending values is
    committed once the configured number of non-whitespace values follows it;
    everything left is committed on ``END``.

    A run of more than ``max_pending`` values with no settled boundary (a long
    URL, a whitespace run) is forced out, keeping only the last ``lookahead``
    values: boundaries before that point are committed unsettled, and a run
    with none is written through with no boundary. Memory and the recomputed
    window stay bounded by the cap.
    """

    def __init__(
        self, mode: SegmentationMode, config: Optional[SegmenterConfig] = None
    ) -> None:
        config = config or SegmenterConfig()
        self.mode = mode
        self._boundaries = _BOUNDARY_FUNCTIONS[mode]
        self._lookahead = config.lookahead_for(mode)
        self._max_pending = config.max_pending
        self._context: Deque[str] = deque(maxlen=config.context_segments)
        self._pending: List[str] = []
        self._output: Deque[Event] = deque()
        self._started = False
        self._ended = False

    def add(self, event: Event) -> Event:
        if event.kind is EventKind.AWAIT:
            return self._next_output()

        if self._ended:
            raise SegmenterProtocolError(f"{event!r} fed after END")
        if self._output:
            raise SegmenterProtocolError(
                f"{event!r} fed before pending output was drained with AWAIT"
            )

        if event.kind is EventKind.SCALAR:
            if not self._started and self.mode is not SegmentationMode.LINE_BREAK:
                self._output.append(BOUNDARY)
            self._started = True
            self._pending.append(chr(event.scalar))
            self._commit(final=False)
        elif event.kind is EventKind.END:
            self._ended = True
            if self._started:
                self._commit(final=True)
                self._emit_segment(len(self._pending))
        else:
            raise SegmenterProtocolError(f"Cannot segment {event!r}")

        return self._next_output()

    @property
    def pending(self) -> int:
        """Number of scalar values held back waiting for lookahead."""
        return len(self._pending)

    def _next_output(self) -> Event:
        if self._output:
            return self._output.popleft()
        return END if self._ended else AWAIT

    def _commit(self, final: bool) -> None:
        """Emit every pending segment whose closing boundary is settled."""
        context = "".join(self._context)
        window = context + "".join(self._pending)
        offset = len(context)
        forced = not final and len(self._pending) > self._max_pending
        held_from = len(window) - self._lookahead

        cuts = []
        for position in self._boundaries(window):
            if not offset < position < len(window):
                continue
            if forced:
                if position > held_from:
                    break
            elif not final and not self._is_settled(window, position):
                break
            cuts.append(position - offset)

        emitted = 0
        for cut in cuts:
            self._emit_segment(cut - emitted)
            emitted = cut

        if forced and len(self._pending) > self._lookahead:
            self._emit_run(len(self._pending) - self._lookahead)

    def _is_settled(self, window: str, position: int) -> bool:
        following = 0
        for char in window[position:]:
            if not char.isspace():
                following += 1
                if following >= self._lookahead:
                    return True
        return False

    def _emit_segment(self, length: int) -> None:
        """Queue the first ``length`` pending values followed by a boundary."""
        segment = self._pending[:length]
        del self._pending[:length]
        self._output.extend(Event.of_scalar(ord(char)) for char in segment)
        self._output.append(BOUNDARY)
        self._context.append("".join(segment))

    def _emit_run(self, length: int) -> None:
        """Queue the first ``length`` pending values with no boundary after them.

        The values left pending continue a segment whose start is no longer
        held, so the lookbehind context restarts empty.
        """
        run = self._pending[:length]
        del self._pending[:length]
        self._output.extend(Event.of_scalar(ord(char)) for char in run)
        self._context.clear()


def create_segmenter(
    mode: SegmentationMode, config: Optional[SegmenterConfig] = None
) -> Segmenter:
    """Create a fresh segmenter for one run.

    Args:
        mode: Kind of segments to delimit
        config: Optional segmenter configuration

    Returns:
        Segmenter instance, fed from its first input through to ``END``
    """
    return UnisegSegmenter(mode, config)
