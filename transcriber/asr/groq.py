"""Groq Whisper transcription client.

Implements GroqWhisperEngine against Groq's OpenAI-compatible audio
transcription endpoint. The media is downloaded from its storage URL and
uploaded as a multipart form; the verbose JSON response is converted into
the internal TranscriptionResult model.
"""

import logging
import mimetypes
import os
from urllib.parse import urlparse

import httpx

from transcriber.asr.interface import (
    TranscriptionEngine,
    TranscriptionFailure,
    TranscriptionRequest,
    TranscriptionResult,
    TranscriptSegment,
)
from transcriber.utils.errors import TranscriptionError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "whisper-large-v3-turbo"
MAX_AUDIO_SIZE_BYTES = 16 * 1024 * 1024


class GroqWhisperEngine(TranscriptionEngine):
    """Groq-hosted Whisper engine.

    Args:
        api_key: Groq API key. Falls back to the GROQ_API_KEY env var.
        model: Whisper model name (default whisper-large-v3-turbo).
        timeout: HTTP timeout in seconds for each request (default 300).
        base_url: API base URL (default production endpoint).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 300.0,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        api_key = api_key or os.environ.get("GROQ_API_KEY", "")
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    async def transcribe(
        self, request: TranscriptionRequest
    ) -> TranscriptionResult | TranscriptionFailure:
        """Download the media and transcribe it with Whisper.

        Returns:
            TranscriptionResult, or TranscriptionFailure when the download
            or the provider rejects the request.

        Raises:
            TranscriptionError: On transport errors (connection, timeout).
        """
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            audio = await self._download_audio(client, request.audio_url)
            if isinstance(audio, TranscriptionFailure):
                return audio
            return await self._submit(client, request, audio)

    async def _download_audio(
        self, client: httpx.AsyncClient, audio_url: str
    ) -> bytes | TranscriptionFailure:
        try:
            response = await client.get(audio_url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise TranscriptionError(
                f"Failed to download audio: {type(exc).__name__}: {exc}",
                provider="groq",
            ) from exc

        if response.status_code != 200:
            return TranscriptionFailure(
                error=f"Failed to download audio file: HTTP {response.status_code} "
                f"{response.reason_phrase}"
            )

        audio = response.content
        if len(audio) > MAX_AUDIO_SIZE_BYTES:
            size_mb = len(audio) / (1024 * 1024)
            return TranscriptionFailure(
                error=f"Audio file exceeds maximum size of 16MB ({size_mb:.2f}MB)"
            )
        return audio

    async def _submit(
        self,
        client: httpx.AsyncClient,
        request: TranscriptionRequest,
        audio: bytes,
    ) -> TranscriptionResult | TranscriptionFailure:
        file_name = os.path.basename(urlparse(request.audio_url).path) or "audio"
        mime_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"

        data = {
            "model": self._model,
            "response_format": "verbose_json",
        }
        if request.language:
            data["language"] = request.language
        if request.prompt:
            data["prompt"] = request.prompt

        url = f"{self._base_url}/audio/transcriptions"
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            response = await client.post(
                url,
                headers=headers,
                files={"file": (file_name, audio, mime_type)},
                data=data,
            )
        except httpx.HTTPError as exc:
            raise TranscriptionError(
                f"Transcription request failed: {type(exc).__name__}: {exc}",
                provider="groq",
            ) from exc

        if response.status_code != 200:
            detail = self._error_detail(response)
            return TranscriptionFailure(
                error=f"Transcription service request failed: HTTP "
                f"{response.status_code} {response.reason_phrase}"
                + (f" - {detail}" if detail else "")
            )

        body = response.json()
        logger.info(
            "Groq transcription completed (%d chars)", len(body.get("text") or "")
        )
        return self._convert_response(body)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text.strip()
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("message", ""))
        return str(error or "")

    @staticmethod
    def _convert_response(body: dict) -> TranscriptionResult:
        """Convert a verbose_json response into a TranscriptionResult."""
        segments = [
            TranscriptSegment(
                start=float(segment.get("start", 0.0)),
                end=float(segment.get("end", 0.0)),
                text=segment.get("text", ""),
            )
            for segment in body.get("segments") or []
        ]
        return TranscriptionResult(
            text=body.get("text") or "",
            duration=body.get("duration"),
            language=body.get("language"),
            segments=segments,
        )
