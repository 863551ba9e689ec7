"""Transcription record API client.

The web layer owns the transcriptions table; this service reads and updates
records through the web layer's internal HTTP API.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from transcriber.models import Transcription
from transcriber.utils.errors import StorageError

logger = logging.getLogger(__name__)


class RecordClient:
    """Client for transcription records via the internal records API.

    Reads configuration from environment variables:
        RECORDS_API_URL, RECORDS_API_SECRET
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_secret: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = (api_url or os.environ.get("RECORDS_API_URL", "")).rstrip("/")
        self.api_secret = api_secret or os.environ.get("RECORDS_API_SECRET", "")

        if not self.api_url:
            raise StorageError("RECORDS_API_URL is required", operation="init")
        if not self.api_secret:
            raise StorageError("RECORDS_API_SECRET is required", operation="init")

        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _headers(self) -> dict[str, str]:
        """Build authentication headers for internal endpoints."""
        return {
            "X-Internal-Secret": self.api_secret,
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        """Close the shared HTTP client and release the connection pool."""
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        job_id: int | None = None,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> httpx.Response | None:
        url = f"{self.api_url}{path}"
        try:
            response = await self._client.request(
                method, url, headers=self._headers(), **kwargs
            )
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(
                f"Record {operation} failed: HTTP {exc.response.status_code}",
                job_id=job_id,
                operation=operation,
            ) from exc
        except httpx.RequestError as exc:
            raise StorageError(
                f"Record {operation} failed: {type(exc).__name__}: {exc}",
                job_id=job_id,
                operation=operation,
            ) from exc
        return response

    async def get_transcription(self, transcription_id: int) -> Transcription | None:
        """Fetch one transcription record.

        Returns:
            The record, or None if the API answers 404.

        Raises:
            StorageError: If the API call fails or the payload is invalid.
        """
        response = await self._send(
            "GET",
            f"/internal/transcriptions/{transcription_id}",
            operation="get_transcription",
            job_id=transcription_id,
            allow_not_found=True,
        )
        if response is None:
            return None
        try:
            return Transcription.from_record(response.json())
        except ValueError as exc:
            raise StorageError(
                f"Invalid record payload: {exc}",
                job_id=transcription_id,
                operation="get_transcription",
            ) from exc

    async def update_transcription_status(
        self,
        transcription_id: int,
        status: str,
        transcript_text: str | None = None,
        error_message: str | None = None,
        duration: int | None = None,
    ) -> None:
        """Update the status of a record, plus result or error fields.

        Only the fields that are not None are sent.

        Args:
            transcription_id: The record identifier.
            status: New status ("processing", "completed", "error").
            transcript_text: Transcript text (on completion).
            error_message: Human-readable error description (on failure).
            duration: Media duration in whole seconds (on completion).

        Raises:
            StorageError: If the API call fails.
        """
        payload: dict[str, Any] = {"status": status}
        if transcript_text is not None:
            payload["transcriptText"] = transcript_text
        if error_message is not None:
            payload["errorMessage"] = error_message
        if duration is not None:
            payload["duration"] = duration

        await self._send(
            "POST",
            f"/internal/transcriptions/{transcription_id}/status",
            operation="update_transcription_status",
            job_id=transcription_id,
            json=payload,
        )

    async def create_transcription(
        self,
        user_id: str,
        file_name: str,
        file_url: str,
        file_key: str | None = None,
    ) -> Transcription:
        """Create a pending transcription record.

        Raises:
            StorageError: If the API call fails or returns an invalid record.
        """
        payload = {
            "userId": user_id,
            "fileName": file_name,
            "fileUrl": file_url,
            "fileKey": file_key,
            "status": "pending",
        }
        response = await self._send(
            "POST",
            "/internal/transcriptions",
            operation="create_transcription",
            json=payload,
        )
        try:
            return Transcription.from_record(response.json())
        except ValueError as exc:
            raise StorageError(
                f"Invalid record payload: {exc}",
                operation="create_transcription",
            ) from exc

    async def list_transcriptions(self, user_id: str) -> list[Transcription]:
        """List a user's records, newest first as ordered by the API.

        Malformed entries are skipped with a warning.
        """
        response = await self._send(
            "GET",
            "/internal/transcriptions",
            operation="list_transcriptions",
            params={"userId": user_id},
        )
        records: list[Transcription] = []
        for body in response.json():
            try:
                records.append(Transcription.from_record(body))
            except (ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed transcription record: %s", exc)
        return records

    async def delete_transcription(self, transcription_id: int) -> None:
        """Delete a record.

        Raises:
            StorageError: If the API call fails.
        """
        await self._send(
            "DELETE",
            f"/internal/transcriptions/{transcription_id}",
            operation="delete_transcription",
            job_id=transcription_id,
        )
