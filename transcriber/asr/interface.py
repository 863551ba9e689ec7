"""Abstract transcription engine interface.

Defines the TranscriptionEngine ABC and the request/result data models.
An engine may report failure either by raising or by returning a
TranscriptionFailure; callers treat both the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class TranscriptionRequest:
    """Input to a transcription call."""

    audio_url: str
    language: str
    prompt: str = ""


@dataclass
class TranscriptSegment:
    """A timed span of transcript text."""

    start: float
    end: float
    text: str


@dataclass
class TranscriptionResult:
    """Successful transcription output."""

    text: str
    duration: float | None = None
    language: str | None = None
    segments: list[TranscriptSegment] = field(default_factory=list)


@dataclass
class TranscriptionFailure:
    """Error-shaped value returned by an engine instead of raising."""

    error: str


class TranscriptionEngine(ABC):
    """Abstract base class for speech-to-text providers.

    Subclasses must implement the transcribe() method.
    """

    @abstractmethod
    async def transcribe(
        self, request: TranscriptionRequest
    ) -> TranscriptionResult | TranscriptionFailure:
        """Transcribe the media at request.audio_url.

        Args:
            request: Audio location, language hint, and context prompt.

        Returns:
            TranscriptionResult on success, TranscriptionFailure on a
            provider-reported error.
        """
