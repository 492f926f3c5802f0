"""Malformed-input reporting.

Undecodable bytes never stop a run. Each occurrence is logged as one line
naming the source, the stream position and the offending bytes, and recorded
as a diagnostic entry. Only the most recent entries are retained.
"""

from collections import deque
from typing import Deque, Optional

from segtrip.character.decoder import StreamPosition
from segtrip.shared.logging import get_logger
from segtrip.shared.result import DiagnosticEntry, DiagnosticSeverity

# Diagnostic entries retained per run; every report is still logged
MAX_RETAINED_DIAGNOSTICS = 100


def format_malformed(raw: bytes) -> str:
    """Render bytes as ``malformed bytes (XX XX ...)``."""
    return f"malformed bytes ({raw.hex(' ').upper()})"


class MalformedInputReporter:
    """Log and record malformed byte sequences.

    Examples:
        >>> reporter = MalformedInputReporter("-")
        >>> reporter.format_report(StreamPosition(1, 2, 2), b"\\xff")
        '-:1.2:(2): malformed bytes (FF)'
    """

    def __init__(
        self,
        source: str,
        correlation_id: Optional[str] = None,
        max_retained: int = MAX_RETAINED_DIAGNOSTICS,
    ) -> None:
        """Initialize the reporter.

        Args:
            source: Input identifier, a path or ``"-"`` for standard input
            correlation_id: Optional correlation ID for logging
            max_retained: Number of most recent entries kept in ``diagnostics``
        """
        if max_retained < 0:
            raise ValueError(f"max_retained must be >= 0, got {max_retained}")
        self.source = source
        self.correlation_id = correlation_id
        self.diagnostics: Deque[DiagnosticEntry] = deque(maxlen=max_retained)
        self.reported = 0
        self.logger = get_logger(__name__, correlation_id, "malformed_input")

    def _record(self, entry: DiagnosticEntry) -> None:
        self.diagnostics.append(entry)
        self.reported += 1

    def format_report(self, position: StreamPosition, raw: bytes) -> str:
        return f"{self.source}:{position}: {format_malformed(raw)}"

    def report(self, position: StreamPosition, raw: bytes) -> DiagnosticEntry:
        """Log one malformed byte sequence found at ``position``.

        Returns:
            The recorded diagnostic entry
        """
        message = self.format_report(position, raw)
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message=message,
            component="malformed_input",
            position=position.as_dict(),
            details={"raw_bytes": raw.hex(" ").upper()},
            correlation_id=self.correlation_id,
        )
        self._record(entry)
        self.logger.warning(
            message,
            extra={
                "source": self.source,
                "position": position.as_dict(),
                "raw_bytes": entry.details["raw_bytes"],
            }
        )
        return entry

    def report_delimiter(self, raw: bytes) -> DiagnosticEntry:
        """Log malformed bytes found in the configured delimiter."""
        message = f"delimiter: {format_malformed(raw)}"
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message=message,
            component="delimiter",
            details={"raw_bytes": raw.hex(" ").upper()},
            correlation_id=self.correlation_id,
        )
        self._record(entry)
        self.logger.warning(message, extra={"raw_bytes": entry.details["raw_bytes"]})
        return entry
