"""Tests for transcriber.validation module."""

import pytest

from transcriber.validation import (
    MAX_DURATION_SECONDS,
    MAX_FILE_SIZE_BYTES,
    format_duration,
    format_file_size,
    validate_audio_file,
    validate_duration,
    validate_format,
    validate_size,
)


class TestValidateFormat:
    @pytest.mark.parametrize(
        "mime_type", ["audio/mpeg", "audio/wav", "audio/x-m4a", "audio/mp4", "video/webm", "audio/ogg", "video/mp4"]
    )
    def test_supported_mime_types(self, mime_type):
        assert validate_format("file", mime_type) is True

    @pytest.mark.parametrize("file_name", ["a.mp3", "b.WAV", "c.m4a", "d.webm", "e.ogg", "f.mp4"])
    def test_extension_fallback(self, file_name):
        assert validate_format(file_name, "application/octet-stream") is True

    @pytest.mark.parametrize("file_name", ["a.pdf", "noext", "archive.mp3.zip"])
    def test_unsupported(self, file_name):
        assert validate_format(file_name, "") is False


class TestLimits:
    def test_size_limit_is_inclusive(self):
        assert validate_size(MAX_FILE_SIZE_BYTES) is True
        assert validate_size(MAX_FILE_SIZE_BYTES + 1) is False

    def test_duration_limit_is_inclusive(self):
        assert validate_duration(MAX_DURATION_SECONDS) is True
        assert validate_duration(MAX_DURATION_SECONDS + 1) is False


class TestValidateAudioFile:
    def test_valid_without_duration(self):
        result = validate_audio_file("a.mp3", "audio/mpeg", 1024)
        assert result.valid is True
        assert result.size == 1024
        assert result.duration is None

    def test_valid_with_duration(self):
        result = validate_audio_file("a.mp3", "audio/mpeg", 1024, duration=125.9)
        assert result.valid is True
        assert result.duration == 125

    def test_too_large(self):
        result = validate_audio_file("a.mp3", "audio/mpeg", 20 * 1024 * 1024)
        assert result.valid is False
        assert "20.00 MB" in result.error
        assert "16 MB" in result.error

    def test_too_long(self):
        result = validate_audio_file("a.mp3", "audio/mpeg", 1024, duration=3900)
        assert result.valid is False
        assert "65 min" in result.error

    def test_bad_format_checked_first(self):
        result = validate_audio_file("a.txt", "text/plain", 20 * 1024 * 1024)
        assert result.error.startswith("Unsupported format")


class TestFormatting:
    def test_format_duration(self):
        assert format_duration(0) == "0:00"
        assert format_duration(65) == "1:05"
        assert format_duration(3600) == "60:00"

    def test_format_file_size(self):
        assert format_file_size(1024 * 1024) == "1.00 MB"
        assert format_file_size(1536 * 1024) == "1.50 MB"
