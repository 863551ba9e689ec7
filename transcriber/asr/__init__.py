"""Speech-to-text provider modules."""

from transcriber.asr.registry import get_transcription_engine

__all__ = ["get_transcription_engine"]
