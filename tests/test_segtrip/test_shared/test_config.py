"""Tests for run configuration."""

import json

import pytest

from segtrip.character.encoding import Encoding
from segtrip.segmentation.engine import SegmentationMode, SegmenterConfig
from segtrip.shared.config import TripConfig
from segtrip.shared.exceptions import ConfigValidationError


class TestTripConfig:
    """Test TripConfig defaults and validation."""

    def test_defaults(self):
        """Test default configuration values."""
        config = TripConfig()

        assert config.mode is SegmentationMode.WORD
        assert config.source == "-"
        assert config.encoding is None
        assert config.delimiter == b"|"
        assert config.ascii is False
        assert config.buffer_size == 8192
        assert config.program == "segtrip"
        assert config.reads_stdin
        assert isinstance(config.segmenter, SegmenterConfig)

    def test_invalid_mode(self):
        """Test that modes must be SegmentationMode members."""
        with pytest.raises(ConfigValidationError) as exc_info:
            TripConfig(mode="word")

        assert exc_info.value.field_name == "mode"
        assert "word" in exc_info.value.suggestions

    def test_invalid_encoding(self):
        """Test that encodings must be Encoding members."""
        with pytest.raises(ConfigValidationError) as exc_info:
            TripConfig(encoding="UTF-8")

        assert exc_info.value.field_name == "encoding"

    def test_text_delimiter_rejected(self):
        """Test that the delimiter must be bytes."""
        with pytest.raises(ConfigValidationError, match="delimiter must be bytes"):
            TripConfig(delimiter="|")

    def test_empty_source(self):
        """Test that the source cannot be empty."""
        with pytest.raises(ConfigValidationError, match="source cannot be empty"):
            TripConfig(source="")

    def test_invalid_buffer_size(self):
        """Test that the buffer size must be positive."""
        with pytest.raises(ConfigValidationError) as exc_info:
            TripConfig(buffer_size=0)

        assert exc_info.value.field_name == "buffer_size"

    def test_empty_program(self):
        """Test that the diagnostic prefix cannot be empty."""
        with pytest.raises(ConfigValidationError, match="program cannot be empty"):
            TripConfig(program="")

    def test_empty_delimiter_allowed(self):
        """Test that an empty delimiter is valid."""
        assert TripConfig(delimiter=b"").delimiter == b""

    def test_override(self):
        """Test that override returns a validated copy."""
        config = TripConfig()

        updated = config.override(source="in.txt", ascii=True)

        assert updated.source == "in.txt"
        assert updated.ascii is True
        assert not updated.reads_stdin
        assert config.source == "-"

    def test_override_validates(self):
        """Test that invalid overrides raise."""
        with pytest.raises(ConfigValidationError):
            TripConfig().override(buffer_size=-1)


class TestTripConfigSerialization:
    """Test dictionary and file loading."""

    def test_from_dict_labels(self):
        """Test that modes and encodings may be given as text."""
        config = TripConfig.from_dict({
            "mode": "sentence",
            "encoding": "latin1",
            "delimiter": "\u2022",
            "ascii": True,
        })

        assert config.mode is SegmentationMode.SENTENCE
        assert config.encoding is Encoding.ISO_8859_1
        assert config.delimiter == "\u2022".encode("utf-8")
        assert config.ascii is True

    def test_from_dict_segmenter(self):
        """Test nested segmenter settings."""
        config = TripConfig.from_dict({
            "segmenter": {"context_segments": 2, "lookahead": {"line": 6}},
        })

        assert config.segmenter.context_segments == 2
        assert config.segmenter.lookahead_for(SegmentationMode.LINE_BREAK) == 6

    def test_from_dict_max_pending_too_small(self):
        """Test that a cap below the lookahead is a validation error."""
        with pytest.raises(ConfigValidationError, match="max_pending"):
            TripConfig.from_dict({"segmenter": {"max_pending": 4}})

    def test_from_dict_unknown_keys(self):
        """Test that unknown keys are rejected with suggestions."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration keys: colour"):
            TripConfig.from_dict({"colour": "red"})

    def test_from_dict_bad_label(self):
        """Test that bad labels become validation errors."""
        with pytest.raises(ConfigValidationError, match="Unsupported encoding"):
            TripConfig.from_dict({"encoding": "EBCDIC"})
        with pytest.raises(ConfigValidationError, match="Unknown segmentation mode"):
            TripConfig.from_dict({"mode": "paragraph"})

    def test_to_dict_is_json(self):
        """Test that to_dict output can be loaded back."""
        config = TripConfig(
            mode=SegmentationMode.LINE_BREAK,
            encoding=Encoding.UTF_16,
            delimiter=b"/",
            segmenter=SegmenterConfig(
                lookahead={SegmentationMode.LINE_BREAK: 5}, max_pending=64
            ),
        )

        data = json.loads(json.dumps(config.to_dict()))

        assert data["mode"] == "line"
        assert data["encoding"] == "UTF-16"
        assert TripConfig.from_dict(data) == config

    def test_from_file(self, tmp_path):
        """Test loading a JSON configuration file."""
        path = tmp_path / "segtrip.json"
        path.write_text(json.dumps({"mode": "grapheme-cluster", "delimiter": "/"}))

        config = TripConfig.from_file(path)

        assert config.mode is SegmentationMode.GRAPHEME_CLUSTER
        assert config.delimiter == b"/"

    def test_from_file_missing(self, tmp_path):
        """Test that unreadable files raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Could not load config file"):
            TripConfig.from_file(tmp_path / "missing.json")

    def test_from_file_invalid_json(self, tmp_path):
        """Test that malformed JSON raises ConfigValidationError."""
        path = tmp_path / "bad.json"
        path.write_text("{mode: word")

        with pytest.raises(ConfigValidationError, match="Could not load config file"):
            TripConfig.from_file(path)

    def test_from_file_not_an_object(self, tmp_path):
        """Test that the file must hold a JSON object."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigValidationError, match="must hold a JSON object"):
            TripConfig.from_file(path)
