"""Developer tools for segtrip.

This module provides run profiling for throughput and memory checks.
"""

from .profiling import (
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    benchmark_modes,
    memory_growth,
)

__all__ = [
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
    "benchmark_modes",
    "memory_growth",
]
