"""Tests for pipeline events."""

import dataclasses

import pytest

from segtrip.segmentation.events import (
    AWAIT,
    BOM,
    BOUNDARY,
    END,
    REPLACEMENT,
    Event,
    EventKind,
    is_scalar_value,
)


class TestIsScalarValue:
    """Test the scalar value predicate."""

    @pytest.mark.parametrize("value", [0, 0x41, 0xD7FF, 0xE000, 0x10FFFF])
    def test_valid(self, value):
        """Test values inside the scalar value range."""
        assert is_scalar_value(value)

    @pytest.mark.parametrize("value", [-1, 0xD800, 0xDFFF, 0x110000])
    def test_invalid(self, value):
        """Test surrogates and out-of-range values."""
        assert not is_scalar_value(value)


class TestEvent:
    """Test Event validation and rendering."""

    def test_scalar(self):
        """Test creating a scalar event."""
        event = Event.of_scalar(0x61)

        assert event.kind is EventKind.SCALAR
        assert event.scalar == 0x61
        assert repr(event) == "Event(SCALAR U+0061)"

    def test_scalar_rejects_surrogate(self):
        """Test that surrogate code points are not scalar values."""
        with pytest.raises(ValueError, match="Invalid scalar value"):
            Event.of_scalar(0xD800)

    def test_scalar_requires_value(self):
        """Test that a SCALAR event needs a value."""
        with pytest.raises(ValueError):
            Event(EventKind.SCALAR)

    def test_malformed(self):
        """Test creating a malformed event."""
        event = Event.of_malformed(bytearray(b"\xff\x00"))

        assert event.raw == b"\xff\x00"
        assert repr(event) == "Event(MALFORMED FF 00)"

    def test_malformed_requires_bytes(self):
        """Test that a MALFORMED event needs its bytes."""
        with pytest.raises(ValueError, match="offending bytes"):
            Event.of_malformed(b"")

    def test_payload_mismatch(self):
        """Test that control events carry no payload."""
        with pytest.raises(ValueError, match="no scalar value"):
            Event(EventKind.BOUNDARY, scalar=0x61)
        with pytest.raises(ValueError, match="no bytes"):
            Event(EventKind.END, raw=b"x")

    def test_frozen(self):
        """Test that events are immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            END.kind = EventKind.AWAIT

    def test_equality(self):
        """Test value equality."""
        assert Event.of_scalar(0xFEFF) == BOM
        assert Event(EventKind.END) == END

    def test_singletons(self):
        """Test the shared events."""
        assert AWAIT.kind is EventKind.AWAIT
        assert BOUNDARY.kind is EventKind.BOUNDARY
        assert REPLACEMENT.scalar == 0xFFFD
        assert repr(END) == "Event(END)"
