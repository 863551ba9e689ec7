"""Tests for the transcription engine registry."""

import pytest

from transcriber.asr import get_transcription_engine
from transcriber.asr.groq import GroqWhisperEngine
from transcriber.asr.registry import TRANSCRIPTION_ENGINES
from transcriber.utils.errors import TranscriptionError


class TestTranscriptionEngineRegistry:
    def test_groq_registered(self) -> None:
        assert TRANSCRIPTION_ENGINES["groq"] is GroqWhisperEngine

    def test_get_engine_passes_kwargs(self) -> None:
        engine = get_transcription_engine("groq", api_key="k", model="whisper-large-v3")
        assert isinstance(engine, GroqWhisperEngine)
        assert engine._model == "whisper-large-v3"

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(TranscriptionError, match="Unknown transcription provider") as exc_info:
            get_transcription_engine("nope")
        assert "groq" in str(exc_info.value)
        assert exc_info.value.provider == "nope"
