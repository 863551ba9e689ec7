"""Upload validation for audio and video files.

Checks the format (by MIME type, then extension), the size (16 MB provider
limit), and optionally the duration (60 minutes).
"""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_FORMATS: tuple[str, ...] = (
    "audio/mpeg",
    "audio/wav",
    "audio/x-m4a",
    "audio/mp4",
    "video/webm",
    "audio/ogg",
    "video/mp4",
)

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("mp3", "wav", "m4a", "webm", "ogg", "mp4")

MAX_FILE_SIZE_MB = 16
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

MAX_DURATION_MINUTES = 60
MAX_DURATION_SECONDS = MAX_DURATION_MINUTES * 60


@dataclass
class AudioValidationResult:
    """Outcome of validate_audio_file()."""

    valid: bool
    error: str | None = None
    duration: int | None = None
    size: int | None = None


def validate_format(file_name: str, mime_type: str = "") -> bool:
    """Accept a known MIME type, falling back to the file extension."""
    if mime_type in SUPPORTED_FORMATS:
        return True
    if "." not in file_name:
        return False
    extension = file_name.rsplit(".", 1)[-1].lower()
    return extension in SUPPORTED_EXTENSIONS


def validate_size(size: int) -> bool:
    return size <= MAX_FILE_SIZE_BYTES


def validate_duration(duration_seconds: float) -> bool:
    return duration_seconds <= MAX_DURATION_SECONDS


def validate_audio_file(
    file_name: str,
    mime_type: str,
    size: int,
    duration: float | None = None,
) -> AudioValidationResult:
    """Validate an uploaded file's format, size, and duration.

    Args:
        file_name: Original file name.
        mime_type: MIME type reported by the client.
        size: File size in bytes.
        duration: Duration in seconds, if known. Unknown durations pass.

    Returns:
        AudioValidationResult with an error message when invalid.
    """
    if not validate_format(file_name, mime_type):
        return AudioValidationResult(
            valid=False,
            error="Unsupported format. Accepted formats: "
            + ", ".join(SUPPORTED_EXTENSIONS),
        )

    if not validate_size(size):
        return AudioValidationResult(
            valid=False,
            error=f"File too large ({format_file_size(size)}). "
            f"Maximum size: {MAX_FILE_SIZE_MB} MB",
            size=size,
        )

    if duration is None:
        return AudioValidationResult(valid=True, size=size)

    whole_seconds = int(duration)
    if not validate_duration(whole_seconds):
        return AudioValidationResult(
            valid=False,
            error=f"Duration too long ({whole_seconds // 60} min). "
            f"Maximum duration: {MAX_DURATION_MINUTES} min",
            duration=whole_seconds,
            size=size,
        )

    return AudioValidationResult(valid=True, duration=whole_seconds, size=size)


def format_duration(seconds: int) -> str:
    """Format seconds as M:SS."""
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}:{remaining:02d}"


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as megabytes with two decimals."""
    return f"{size_bytes / (1024 * 1024):.2f} MB"
