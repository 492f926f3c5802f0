"""Tests for the pull-based stream decoder."""

import io

import pytest

from segtrip.character.decoder import (
    PositionTracker,
    StreamDecoder,
    StreamPosition,
    decode_delimiter,
)
from segtrip.character.encoding import DetectionMethod, Encoding
from segtrip.segmentation.events import END, Event, EventKind


def decode_all(data: bytes, encoding=None, buffer_size=8192):
    decoder = StreamDecoder(io.BytesIO(data), encoding, buffer_size)
    return list(decoder), decoder


def scalars(data: bytes, encoding=None, buffer_size=8192) -> str:
    events, _ = decode_all(data, encoding, buffer_size)
    return "".join(chr(event.scalar) for event in events)


class TestStreamPosition:
    """Test position rendering."""

    def test_default(self):
        """Test the position before any input."""
        assert str(StreamPosition()) == "1.0:(0)"

    def test_as_dict(self):
        """Test the structured form."""
        assert StreamPosition(2, 3, 7).as_dict() == {"line": 2, "column": 3, "count": 7}


class TestPositionTracker:
    """Test line and column bookkeeping."""

    def advance_text(self, text: str) -> StreamPosition:
        tracker = PositionTracker()
        for char in text:
            tracker.advance(ord(char))
        return tracker.position

    def test_columns(self):
        """Test that columns count from one."""
        assert self.advance_text("ab") == StreamPosition(1, 2, 2)

    def test_line_feed(self):
        """Test that LF starts a new line at column zero."""
        assert self.advance_text("a\n") == StreamPosition(2, 0, 2)
        assert self.advance_text("a\nb") == StreamPosition(2, 1, 3)

    def test_crlf_is_one_newline(self):
        """Test that CR LF counts as a single newline."""
        assert self.advance_text("a\r\nb") == StreamPosition(2, 1, 4)

    def test_lone_cr(self):
        """Test that a lone CR ends a line."""
        assert self.advance_text("a\rb") == StreamPosition(2, 1, 3)

    @pytest.mark.parametrize("terminator", ["\x0c", "\x85", "\u2028", "\u2029"])
    def test_other_terminators(self, terminator):
        """Test FF, NEL, LS and PS."""
        assert self.advance_text("a" + terminator).line == 2


class TestStreamDecoder:
    """Test StreamDecoder event production."""

    def test_plain_utf8(self):
        """Test a simple UTF-8 stream."""
        events, decoder = decode_all("hé".encode("utf-8"))

        assert events == [Event.of_scalar(0x68), Event.of_scalar(0xE9)]
        assert decoder.encoding is Encoding.UTF_8
        assert decoder.removed_bom is False

    def test_end_repeats(self):
        """Test that END is returned forever once reached."""
        decoder = StreamDecoder(io.BytesIO(b"a"))

        assert decoder.decode() == Event.of_scalar(0x61)
        assert decoder.decode() is END
        assert decoder.decode() is END

    def test_empty_stream(self):
        """Test that an empty stream yields only END."""
        decoder = StreamDecoder(io.BytesIO(b""))

        assert decoder.decode() is END
        assert decoder.encoding is Encoding.UTF_8

    def test_malformed_byte(self):
        """Test that an invalid byte becomes one MALFORMED event."""
        events, _ = decode_all(b"a\xffb")

        assert events == [
            Event.of_scalar(0x61),
            Event.of_malformed(b"\xff"),
            Event.of_scalar(0x62),
        ]

    def test_malformed_position_counts_the_bytes(self):
        """Test that the position includes the malformed character."""
        decoder = StreamDecoder(io.BytesIO(b"a\xffb"))

        decoder.decode()
        event = decoder.decode()

        assert event.kind is EventKind.MALFORMED
        assert str(decoder.position) == "1.2:(2)"

    def test_invalid_continuation(self):
        """Test that decoding resumes right after the rejected lead byte."""
        events, _ = decode_all(b"\xe2(\xa1")

        assert events == [
            Event.of_malformed(b"\xe2"),
            Event.of_scalar(0x28),
            Event.of_malformed(b"\xa1"),
        ]

    def test_truncated_sequence_at_end(self):
        """Test an incomplete sequence at the end of the stream."""
        events, _ = decode_all(b"a\xe2\x82")

        assert events == [Event.of_scalar(0x61), Event.of_malformed(b"\xe2\x82")]

    def test_sequence_split_across_reads(self):
        """Test that multi-byte sequences survive chunk boundaries."""
        text = "abécd€"

        assert scalars(text.encode("utf-8"), buffer_size=1) == text

    def test_utf8_bom_removed(self):
        """Test that a UTF-8 BOM is removed and reported."""
        events, decoder = decode_all(b"\xef\xbb\xbfhi")

        assert [event.scalar for event in events] == [0x68, 0x69]
        assert decoder.removed_bom is True
        assert decoder.detection.method is DetectionMethod.BOM

    def test_utf16le_bom(self):
        """Test a UTF-16LE stream with a BOM."""
        events, decoder = decode_all(b"\xff\xfeh\x00i\x00")

        assert [event.scalar for event in events] == [0x68, 0x69]
        assert decoder.encoding is Encoding.UTF_16LE
        assert decoder.removed_bom is True

    def test_utf16be_guessed(self):
        """Test a UTF-16BE stream without a BOM."""
        events, decoder = decode_all("hi".encode("utf-16-be"))

        assert [event.scalar for event in events] == [0x68, 0x69]
        assert decoder.encoding is Encoding.UTF_16BE
        assert decoder.removed_bom is False

    def test_utf16_supplementary(self):
        """Test that surrogate pairs decode to one scalar value."""
        text = "a\U0001F600"

        assert scalars(text.encode("utf-16-le"), Encoding.UTF_16LE, buffer_size=1) == text

    def test_utf16_odd_trailing_byte(self):
        """Test that a dangling byte at the end is malformed."""
        events, _ = decode_all(b"\x00h\x00", Encoding.UTF_16BE)

        assert events == [Event.of_scalar(0x68), Event.of_malformed(b"\x00")]

    def test_utf16_lone_surrogate(self):
        """Test that an unpaired high surrogate is malformed."""
        events, _ = decode_all(b"\xd8\x00\x00a", Encoding.UTF_16BE)

        assert events == [Event.of_malformed(b"\xd8\x00"), Event.of_scalar(0x61)]

    def test_declared_ascii(self):
        """Test that bytes above 0x7F are malformed in US-ASCII."""
        events, _ = decode_all(b"a\x80b", Encoding.US_ASCII)

        assert events == [
            Event.of_scalar(0x61),
            Event.of_malformed(b"\x80"),
            Event.of_scalar(0x62),
        ]

    def test_declared_latin1(self):
        """Test that every byte decodes in ISO-8859-1."""
        assert scalars(b"caf\xe9", Encoding.ISO_8859_1) == "café"

    def test_declared_utf8_skips_guessing(self):
        """Test that a zero byte does not switch a declared stream to UTF-16."""
        assert scalars(b"a\x00", Encoding.UTF_8) == "a\x00"

    def test_strip_bom_disabled(self):
        """Test that the BOM can be kept as a scalar value."""
        decoder = StreamDecoder(io.BytesIO(b"\xef\xbb\xbfa"), strip_bom=False)

        assert [event.scalar for event in decoder] == [0xFEFF, 0x61]
        assert decoder.removed_bom is False

    def test_detection_is_lazy(self):
        """Test that detection can be read before any event is pulled."""
        decoder = StreamDecoder(io.BytesIO(b"\xfe\xff\x00a"))

        assert decoder.encoding is Encoding.UTF_16BE
        assert decoder.decode() == Event.of_scalar(0x61)

    def test_invalid_buffer_size(self):
        """Test that the buffer size must be positive."""
        with pytest.raises(ValueError, match="buffer_size"):
            StreamDecoder(io.BytesIO(b""), buffer_size=0)


class TestDecodeDelimiter:
    """Test delimiter decoding."""

    def test_ascii(self):
        """Test the default delimiter."""
        assert decode_delimiter(b"|") == (0x7C,)

    def test_multibyte(self):
        """Test a multi-byte UTF-8 delimiter."""
        assert decode_delimiter("•".encode("utf-8")) == (0x2022,)

    def test_bom_is_kept(self):
        """Test that a leading BOM is part of the delimiter."""
        assert decode_delimiter(b"\xef\xbb\xbf") == (0xFEFF,)

    def test_empty(self):
        """Test the empty delimiter."""
        assert decode_delimiter(b"") == ()

    def test_malformed(self):
        """Test that malformed bytes become U+FFFD and are reported."""
        seen = []

        result = decode_delimiter(b"a\xff", seen.append)

        assert result == (0x61, 0xFFFD)
        assert seen == [b"\xff"]
