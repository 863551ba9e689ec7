"""Transcript export to TXT, SRT, and WebVTT.

When no timed segments are available, the transcript's non-empty lines are
spread evenly over the media duration (60 seconds if unknown).
"""

from __future__ import annotations

from collections.abc import Sequence

from transcriber.asr.interface import TranscriptSegment
from transcriber.models import Transcription
from transcriber.utils.errors import ExportError

DEFAULT_DURATION_SECONDS = 60
SEPARATOR_WIDTH = 60

EXPORT_MIME_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "srt": "application/x-subrip",
    "vtt": "text/vtt",
}


def _format_timestamp(seconds: float, millis_separator: str) -> str:
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{millis_separator}{millis:03d}"


def format_timestamp_srt(seconds: float) -> str:
    """Format seconds as HH:MM:SS,mmm."""
    return _format_timestamp(seconds, ",")


def format_timestamp_vtt(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    return _format_timestamp(seconds, ".")


def _format_duration(seconds: int | None) -> str:
    if not seconds:
        return "00:00"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def _require_text(transcription: Transcription) -> str:
    if not transcription.transcript_text:
        raise ExportError(
            "Transcription text is not available", job_id=transcription.id
        )
    return transcription.transcript_text


def _cues(
    transcription: Transcription, segments: Sequence[TranscriptSegment] | None
) -> list[tuple[float, float, str]]:
    text = _require_text(transcription)
    if segments:
        return [(s.start, s.end, s.text.strip()) for s in segments]

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    if not lines:
        return []
    duration = transcription.duration or DEFAULT_DURATION_SECONDS
    step = duration / len(lines)
    return [
        (index * step, (index + 1) * step, line) for index, line in enumerate(lines)
    ]


def generate_txt(transcription: Transcription) -> str:
    """Render a plain-text export with a short header.

    Raises:
        ExportError: If the transcript text is missing or empty.
    """
    text = _require_text(transcription)
    header = [f"Transcription of: {transcription.file_name}"]
    header.append(f"Duration: {_format_duration(transcription.duration)}")
    if transcription.created_at is not None:
        header.append(f"Date: {transcription.created_at.strftime('%d %B %Y %H:%M')}")
    return "\n".join(header) + "\n\n" + "=" * SEPARATOR_WIDTH + "\n\n" + text + "\n"


def generate_srt(
    transcription: Transcription,
    segments: Sequence[TranscriptSegment] | None = None,
) -> str:
    """Render SubRip subtitles.

    Raises:
        ExportError: If the transcript text is missing or empty.
    """
    blocks = [
        f"{index}\n{format_timestamp_srt(start)} --> {format_timestamp_srt(end)}\n{text}\n"
        for index, (start, end, text) in enumerate(_cues(transcription, segments), 1)
    ]
    return "".join(block + "\n" for block in blocks)


def generate_vtt(
    transcription: Transcription,
    segments: Sequence[TranscriptSegment] | None = None,
) -> str:
    """Render WebVTT subtitles.

    Raises:
        ExportError: If the transcript text is missing or empty.
    """
    blocks = [
        f"{format_timestamp_vtt(start)} --> {format_timestamp_vtt(end)}\n{text}\n"
        for start, end, text in _cues(transcription, segments)
    ]
    return "WEBVTT\n\n" + "".join(block + "\n" for block in blocks)


def get_file_name_without_extension(file_name: str) -> str:
    """Strip the last extension; dotfiles keep their name."""
    index = file_name.rfind(".")
    return file_name[:index] if index > 0 else file_name


def export_file_name(transcription: Transcription, fmt: str) -> str:
    """Build the download name for an export, e.g. "interview.srt".

    Raises:
        ExportError: If the format is not supported.
    """
    if fmt not in EXPORT_MIME_TYPES:
        raise ExportError(f"Unsupported export format: '{fmt}'", job_id=transcription.id)
    return f"{get_file_name_without_extension(transcription.file_name)}.{fmt}"
