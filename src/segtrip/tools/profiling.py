"""Performance profiling tools for segtrip.

Runs the pipeline over in-memory input with output discarded, and records
wall time, scalar throughput and resident memory per run. Reports group runs
by segmentation mode so modes can be compared on the same input, and
``memory_growth`` checks that resident memory stays flat as input grows.
"""

import io
import json
import statistics
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import psutil

from segtrip.api.trip import run_stream
from segtrip.character import Encoding
from segtrip.segmentation import SegmentationMode
from segtrip.shared.config import TripConfig
from segtrip.shared.logging import get_logger
from segtrip.shared.result import TripMetrics

BYTES_PER_MB = 1024 * 1024


class CountingSink(io.RawIOBase):
    """Write-only sink that keeps a byte count and drops the data."""

    def __init__(self) -> None:
        super().__init__()
        self.bytes_written = 0

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        self.bytes_written += len(data)
        return len(data)


@dataclass
class ProfilingSession:
    """One profiled run.

    Attributes:
        session_id: Caller-chosen label, also used as the run's source name
        mode: Segmentation mode of the run
        input_size: Input bytes
        duration_s: Wall time of the run
        rss_before: Resident memory before the run, 0 when not tracked
        rss_after: Resident memory after the run, 0 when not tracked
        output_size: Output bytes
        metrics: Driver counters for the run
    """
    session_id: str
    mode: SegmentationMode
    input_size: int
    duration_s: float
    rss_before: int = 0
    rss_after: int = 0
    output_size: int = 0
    metrics: TripMetrics = field(default_factory=TripMetrics)

    @property
    def duration_ms(self) -> float:
        return self.duration_s * 1000

    @property
    def throughput_mb_per_s(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return self.input_size / BYTES_PER_MB / self.duration_s

    @property
    def memory_delta(self) -> int:
        return self.rss_after - self.rss_before

    def as_dict(self) -> Dict[str, object]:
        return {
            "session_id": self.session_id,
            "mode": self.mode.value,
            "input_size": self.input_size,
            "output_size": self.output_size,
            "duration_ms": self.duration_ms,
            "throughput_mb_s": self.throughput_mb_per_s,
            "memory_delta": self.memory_delta,
            "metrics": self.metrics.as_dict(),
        }


@dataclass
class PerformanceReport:
    """Runs grouped by segmentation mode."""

    sessions: List[ProfilingSession]
    generated_at: float = field(default_factory=time.time)

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    def by_mode(self) -> Dict[SegmentationMode, List[ProfilingSession]]:
        grouped: Dict[SegmentationMode, List[ProfilingSession]] = {}
        for session in self.sessions:
            grouped.setdefault(session.mode, []).append(session)
        return grouped

    def median_duration_ms(self, mode: Optional[SegmentationMode] = None) -> float:
        """Median run time, over one mode or over every run."""
        sessions = self.by_mode().get(mode, []) if mode else self.sessions
        if not sessions:
            return 0.0
        return statistics.median(s.duration_ms for s in sessions)

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Per-mode run count, median time and mean throughput."""
        return {
            mode.value: {
                "runs": len(sessions),
                "median_duration_ms": self.median_duration_ms(mode),
                "mean_throughput_mb_s": statistics.fmean(
                    s.throughput_mb_per_s for s in sessions
                ),
            }
            for mode, sessions in self.by_mode().items()
        }


class PerformanceProfiler:
    """Profiler for segmentation runs.

    Examples:
        >>> profiler = PerformanceProfiler()
        >>> session = profiler.profile_trip("words", b"Hi there " * 1000)
        >>> session.metrics.scalars_in
        9000
        >>> profiler.report().summary()["word"]["runs"]
        1
    """

    def __init__(self, enable_memory_tracking: bool = True):
        """Initialize the profiler.

        Args:
            enable_memory_tracking: Sample resident memory around each run
        """
        self.sessions: List[ProfilingSession] = []
        self._process = psutil.Process() if enable_memory_tracking else None
        self.logger = get_logger(__name__, None, "performance_profiler")

    def _rss(self) -> int:
        return self._process.memory_info().rss if self._process else 0

    def profile_trip(
        self,
        session_id: str,
        data: bytes,
        mode: SegmentationMode = SegmentationMode.WORD,
        encoding: Optional[Encoding] = None,
        ascii: bool = False,
    ) -> ProfilingSession:
        """Run the pipeline once over ``data`` and record the run."""
        config = TripConfig(mode=mode, source=session_id, encoding=encoding, ascii=ascii)
        sink = CountingSink()

        rss_before = self._rss()
        started = time.perf_counter()
        result = run_stream(config, io.BytesIO(data), sink)
        duration_s = time.perf_counter() - started

        session = ProfilingSession(
            session_id=session_id,
            mode=mode,
            input_size=len(data),
            duration_s=duration_s,
            rss_before=rss_before,
            rss_after=self._rss(),
            output_size=sink.bytes_written,
            metrics=result.metrics,
        )
        self.sessions.append(session)
        self.logger.info(
            f"Profiled {session_id}: {session.duration_ms:.1f}ms",
            extra=session.as_dict(),
        )
        return session

    def report(self) -> PerformanceReport:
        return PerformanceReport(sessions=list(self.sessions))

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        """Write ``report`` as JSON: per-mode summary plus every run."""
        output_path.write_text(json.dumps(
            {
                "generated_at": report.generated_at,
                "summary": report.summary(),
                "sessions": [session.as_dict() for session in report.sessions],
            },
            indent=2,
        ))
        self.logger.info(
            f"Saved performance report to {output_path}",
            extra={"session_count": report.session_count},
        )

    def clear(self) -> None:
        self.sessions.clear()


def benchmark_modes(data: bytes, iterations: int = 3) -> PerformanceReport:
    """Profile every segmentation mode ``iterations`` times over ``data``."""
    profiler = PerformanceProfiler()
    for mode in SegmentationMode:
        for i in range(iterations):
            profiler.profile_trip(f"{mode.value}-{i}", data, mode=mode)
    return profiler.report()


def memory_growth(
    sample: bytes,
    repeats: Sequence[int] = (1, 10, 100),
    mode: SegmentationMode = SegmentationMode.WORD,
) -> Dict[int, int]:
    """Measure resident memory growth for increasingly long inputs.

    Args:
        sample: Text repeated to build each input
        repeats: Repetition counts to try
        mode: Segmentation mode

    Returns:
        Mapping of input size in bytes to resident memory delta in bytes
    """
    profiler = PerformanceProfiler()
    growth = {}
    for count in repeats:
        session = profiler.profile_trip(f"x{count}", sample * count, mode=mode)
        growth[session.input_size] = session.memory_delta
    return growth
