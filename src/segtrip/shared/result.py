"""Result objects and diagnostic types for segtrip runs.

This module defines the diagnostic entries recorded during a run and the
counters the streaming driver keeps while it forwards events.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """How serious a recorded diagnostic is."""

    WARNING = "warning"  # recovered, e.g. malformed bytes replaced by U+FFFD
    ERROR = "error"      # the run stopped


@dataclass
class DiagnosticEntry:
    """One recorded diagnostic.

    Attributes:
        severity: Diagnostic severity
        message: Rendered report line, without the program prefix
        component: Pipeline component that raised it
        position: Stream position as ``line``/``column``/``count``
        details: Extra structured data, e.g. the offending bytes
        timestamp: Wall-clock time of the report
        correlation_id: Run identifier
    """

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message or not self.component:
            raise ValueError("Diagnostic entries need a message and a component")

    def __str__(self) -> str:
        return self.message


@dataclass
class TripMetrics:
    """Counters collected by the streaming driver for one run."""

    scalars_in: int = 0
    scalars_out: int = 0
    boundaries: int = 0
    malformed: int = 0
    bom_injected: bool = False
    processing_time_ms: float = 0.0

    @property
    def scalars_per_second(self) -> float:
        """Calculate scalar values processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.scalars_in * 1000.0) / self.processing_time_ms

    def as_dict(self) -> Dict[str, Any]:
        """Flatten the counters for structured logging."""
        return {
            "scalars_in": self.scalars_in,
            "scalars_out": self.scalars_out,
            "boundaries": self.boundaries,
            "malformed": self.malformed,
            "bom_injected": self.bom_injected,
            "processing_time_ms": self.processing_time_ms,
        }
