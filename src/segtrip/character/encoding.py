"""Encoding model and detection for the segmentation pipeline.

This module names the encodings the pipeline accepts, guesses an encoding from
the first bytes of a stream when none is declared, works out how many leading
bytes form a byte order mark, and maps an input encoding to the encoding the
re-encoding output uses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from segtrip.shared.exceptions import EncodingError

# Number of leading bytes needed to guess an encoding
GUESS_SAMPLE_SIZE = 3

# Confidence scores per detection method
CONFIDENCE_BOM = 1.0
CONFIDENCE_DECLARED = 1.0
CONFIDENCE_HEURISTIC = 0.8
CONFIDENCE_FALLBACK = 0.5

UTF8_BOM = b"\xef\xbb\xbf"
UTF16BE_BOM = b"\xfe\xff"
UTF16LE_BOM = b"\xff\xfe"


class Encoding(Enum):
    """Encodings accepted on input, by canonical name."""

    UTF_8 = "UTF-8"
    UTF_16 = "UTF-16"
    UTF_16LE = "UTF-16LE"
    UTF_16BE = "UTF-16BE"
    US_ASCII = "US-ASCII"
    ISO_8859_1 = "ISO-8859-1"

    @property
    def codec(self) -> str:
        """Python codec used to encode output in this encoding.

        ``UTF-16`` writes big-endian and never adds a byte order mark of its
        own; a mark only appears when the input carried one.
        """
        return _ENCODE_CODECS[self]

    @property
    def is_unicode(self) -> bool:
        """Whether this is one of the UTF encodings."""
        return self in (
            Encoding.UTF_8, Encoding.UTF_16, Encoding.UTF_16LE, Encoding.UTF_16BE
        )

    @classmethod
    def from_label(cls, label: str) -> "Encoding":
        """Look up an encoding by name or common alias.

        Args:
            label: Encoding name, e.g. ``"UTF-8"``, ``"utf16le"`` or ``"latin1"``

        Returns:
            Matching Encoding member

        Raises:
            EncodingError: If the label names no supported encoding
        """
        key = label.strip().lower().replace("_", "-")
        try:
            return _ALIASES[key]
        except KeyError:
            supported = ", ".join(member.value for member in cls)
            raise EncodingError(
                f"Unsupported encoding: {label!r} (expected one of {supported})"
            ) from None


_ENCODE_CODECS: Dict[Encoding, str] = {
    Encoding.UTF_8: "utf-8",
    Encoding.UTF_16: "utf-16-be",
    Encoding.UTF_16LE: "utf-16-le",
    Encoding.UTF_16BE: "utf-16-be",
    Encoding.US_ASCII: "ascii",
    Encoding.ISO_8859_1: "latin-1",
}

_ALIASES: Dict[str, Encoding] = {
    "utf-8": Encoding.UTF_8,
    "utf8": Encoding.UTF_8,
    "utf-16": Encoding.UTF_16,
    "utf16": Encoding.UTF_16,
    "utf-16le": Encoding.UTF_16LE,
    "utf16le": Encoding.UTF_16LE,
    "utf-16-le": Encoding.UTF_16LE,
    "utf-16be": Encoding.UTF_16BE,
    "utf16be": Encoding.UTF_16BE,
    "utf-16-be": Encoding.UTF_16BE,
    "ascii": Encoding.US_ASCII,
    "us-ascii": Encoding.US_ASCII,
    "latin1": Encoding.ISO_8859_1,
    "latin-1": Encoding.ISO_8859_1,
    "iso-8859-1": Encoding.ISO_8859_1,
}


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    DECLARED = "declared"
    HEURISTIC = "heuristic"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection with confidence scoring and metadata.

    Attributes:
        encoding: Detected or declared encoding
        codec: Python codec that decodes the stream (byte order resolved)
        confidence: Confidence score from 0.0 to 1.0
        method: Detection method used
        issues: List of issues found during detection
        bom_length: Number of leading bytes that form a byte order mark
    """
    encoding: Encoding
    codec: str
    confidence: float
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)
    bom_length: int = 0

    def __post_init__(self) -> None:
        """Validate confidence score range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}"
            )
        if self.bom_length < 0:
            raise ValueError(f"bom_length must be >= 0, got {self.bom_length}")


class BOMDetector:
    """Byte Order Mark (BOM) detection for the supported UTF encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, Tuple[Encoding, str]]] = {
        UTF8_BOM: (Encoding.UTF_8, "utf-8"),
        UTF16BE_BOM: (Encoding.UTF_16BE, "utf-16-be"),
        UTF16LE_BOM: (Encoding.UTF_16LE, "utf-16-le"),
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Leading bytes of the stream

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        if not data:
            return None

        for bom_bytes, (encoding, codec) in self.BOM_PATTERNS.items():
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    codec=codec,
                    confidence=CONFIDENCE_BOM,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )

        return None


class EncodingDetector:
    """Encoding detection over the first bytes of a stream.

    Without a declared encoding the guess follows the usual byte order mark
    and XML-style heuristic:

    1. A UTF-8, UTF-16BE or UTF-16LE byte order mark
    2. A zero byte in one of the first two positions (UTF-16 without a mark)
    3. Fallback to UTF-8

    A declared encoding is always kept; detection then only resolves the byte
    order of ``UTF-16`` (to ``UTF-16LE`` after a little-endian mark, to
    ``UTF-16BE`` otherwise) and the length of a matching byte order mark.
    """

    def __init__(self) -> None:
        """Initialize detection components."""
        self.bom_detector = BOMDetector()

    def detect(
        self, head: bytes, declared: Optional[Encoding] = None
    ) -> EncodingResult:
        """Detect or confirm the encoding of a stream.

        Args:
            head: Leading bytes of the stream (at least three unless shorter)
            declared: Encoding declared by the caller, if any

        Returns:
            EncodingResult with encoding, decoding codec and BOM length
        """
        if declared is not None:
            return self._confirm_declared(head, declared)

        bom_result = self.bom_detector.detect(head)
        if bom_result is not None:
            return bom_result

        if len(head) >= 2:
            if head[0] == 0 and head[1] != 0:
                return EncodingResult(
                    encoding=Encoding.UTF_16BE,
                    codec="utf-16-be",
                    confidence=CONFIDENCE_HEURISTIC,
                    method=DetectionMethod.HEURISTIC,
                )
            if head[0] != 0 and head[1] == 0:
                return EncodingResult(
                    encoding=Encoding.UTF_16LE,
                    codec="utf-16-le",
                    confidence=CONFIDENCE_HEURISTIC,
                    method=DetectionMethod.HEURISTIC,
                )

        issues = [] if not head else ["No byte order mark found, assuming UTF-8"]
        return EncodingResult(
            encoding=Encoding.UTF_8,
            codec="utf-8",
            confidence=CONFIDENCE_FALLBACK if head else CONFIDENCE_DECLARED,
            method=DetectionMethod.FALLBACK,
            issues=issues,
        )

    def _confirm_declared(self, head: bytes, declared: Encoding) -> EncodingResult:
        """Resolve byte order and BOM length for a declared encoding."""
        encoding = declared
        bom_length = 0

        if declared is Encoding.UTF_16:
            if head.startswith(UTF16LE_BOM):
                encoding, bom_length = Encoding.UTF_16LE, len(UTF16LE_BOM)
            else:
                encoding = Encoding.UTF_16BE
                if head.startswith(UTF16BE_BOM):
                    bom_length = len(UTF16BE_BOM)
        elif declared is Encoding.UTF_16LE and head.startswith(UTF16LE_BOM):
            bom_length = len(UTF16LE_BOM)
        elif declared is Encoding.UTF_16BE and head.startswith(UTF16BE_BOM):
            bom_length = len(UTF16BE_BOM)
        elif declared is Encoding.UTF_8 and head.startswith(UTF8_BOM):
            bom_length = len(UTF8_BOM)

        return EncodingResult(
            encoding=encoding,
            codec=encoding.codec,
            confidence=CONFIDENCE_DECLARED,
            method=DetectionMethod.DECLARED,
            bom_length=bom_length,
        )


def resolve_output_encoding(encoding: Encoding) -> Encoding:
    """Map an input encoding to the encoding used for re-encoded output.

    ASCII and Latin-1 input is written back as UTF-8. Every UTF encoding is
    written back as itself.
    """
    if encoding in (Encoding.US_ASCII, Encoding.ISO_8859_1):
        return Encoding.UTF_8
    return encoding
