"""Tests for run result types."""

import pytest

from segtrip.shared.result import DiagnosticEntry, DiagnosticSeverity, TripMetrics


class TestDiagnosticEntry:
    """Test DiagnosticEntry validation."""

    def test_valid_entry(self):
        """Test a complete entry."""
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message="-:1.1:(1): malformed bytes (FF)",
            component="malformed_input",
        )

        assert entry.details == {}
        assert entry.timestamp > 0
        assert str(entry) == "-:1.1:(1): malformed bytes (FF)"

    @pytest.mark.parametrize("message,component", [("", "x"), ("x", "")])
    def test_requires_message_and_component(self, message, component):
        """Test that empty messages or components are rejected."""
        with pytest.raises(ValueError, match="message and a component"):
            DiagnosticEntry(DiagnosticSeverity.WARNING, message, component)


class TestTripMetrics:
    """Test TripMetrics."""

    def test_defaults(self):
        metrics = TripMetrics()

        assert metrics.scalars_in == 0
        assert metrics.bom_injected is False
        assert metrics.scalars_per_second == 0.0

    def test_scalars_per_second(self):
        """Test the throughput rate."""
        metrics = TripMetrics(scalars_in=500, processing_time_ms=250.0)

        assert metrics.scalars_per_second == 2000.0

    def test_as_dict(self):
        """Test the flattened counters."""
        metrics = TripMetrics(scalars_in=3, scalars_out=3, boundaries=2, malformed=1)

        assert metrics.as_dict() == {
            "scalars_in": 3,
            "scalars_out": 3,
            "boundaries": 2,
            "malformed": 1,
            "bom_injected": False,
            "processing_time_ms": 0.0,
        }
