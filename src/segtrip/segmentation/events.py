"""Events exchanged between the decoder, the segmenter and the formatters.

One ``Event`` type covers the three event families of the pipeline:

- decode events: ``SCALAR``, ``MALFORMED``, ``END``
- segmenter input events: ``SCALAR``, ``AWAIT``, ``END``
- segmenter output events: ``SCALAR``, ``BOUNDARY``, ``AWAIT``, ``END``
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

MAX_SCALAR = 0x10FFFF
SURROGATE_RANGE_START = 0xD800
SURROGATE_RANGE_END = 0xDFFF

BOM_SCALAR = 0xFEFF
REPLACEMENT_SCALAR = 0xFFFD


class EventKind(Enum):
    """Kinds of events flowing through the pipeline."""

    SCALAR = auto()     # One Unicode scalar value
    MALFORMED = auto()  # Undecodable bytes
    BOUNDARY = auto()   # Segment boundary
    AWAIT = auto()      # Nothing more without new input
    END = auto()        # End of stream


def is_scalar_value(value: int) -> bool:
    """Check that ``value`` is a Unicode scalar value (no surrogates)."""
    return (
        0 <= value <= MAX_SCALAR
        and not SURROGATE_RANGE_START <= value <= SURROGATE_RANGE_END
    )


@dataclass(frozen=True)
class Event:
    """Single pipeline event.

    Attributes:
        kind: Event kind
        scalar: Scalar value, set only for ``SCALAR`` events
        raw: Undecodable bytes, set only for ``MALFORMED`` events
    """
    kind: EventKind
    scalar: Optional[int] = None
    raw: bytes = b""

    def __post_init__(self) -> None:
        """Validate payload against the event kind."""
        if self.kind is EventKind.SCALAR:
            if self.scalar is None or not is_scalar_value(self.scalar):
                raise ValueError(f"Invalid scalar value: {self.scalar!r}")
        elif self.scalar is not None:
            raise ValueError(f"{self.kind.name} events carry no scalar value")

        if self.kind is EventKind.MALFORMED:
            if not self.raw:
                raise ValueError("MALFORMED events need the offending bytes")
        elif self.raw:
            raise ValueError(f"{self.kind.name} events carry no bytes")

    @classmethod
    def of_scalar(cls, value: int) -> "Event":
        """Create a ``SCALAR`` event."""
        return cls(EventKind.SCALAR, scalar=value)

    @classmethod
    def of_malformed(cls, raw: bytes) -> "Event":
        """Create a ``MALFORMED`` event."""
        return cls(EventKind.MALFORMED, raw=bytes(raw))

    def __repr__(self) -> str:
        if self.kind is EventKind.SCALAR:
            return f"Event(SCALAR U+{self.scalar:04X})"
        if self.kind is EventKind.MALFORMED:
            return f"Event(MALFORMED {self.raw.hex(' ').upper()})"
        return f"Event({self.kind.name})"


AWAIT = Event(EventKind.AWAIT)
BOUNDARY = Event(EventKind.BOUNDARY)
END = Event(EventKind.END)
BOM = Event.of_scalar(BOM_SCALAR)
REPLACEMENT = Event.of_scalar(REPLACEMENT_SCALAR)
