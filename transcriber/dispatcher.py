"""Transcription dispatcher.

Drives one transcription record through its lifecycle:
load -> mark processing -> transcribe (with backoff) -> mark completed | error.

trigger() spawns the run as a background task so the request that created
the record never waits on it. Failures end either in a log line or in an
"error" status on the record; nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import math
import os
import time
from dataclasses import dataclass

from transcriber.asr.interface import (
    TranscriptionEngine,
    TranscriptionFailure,
    TranscriptionRequest,
    TranscriptionResult,
)
from transcriber.models import COMPLETED, ERROR, PROCESSING
from transcriber.observability.metrics import JobMetrics, StageTimer, log_job_metrics
from transcriber.storage.record_client import RecordClient
from transcriber.utils.errors import TranscriptionError
from transcriber.utils.retry import is_retryable_error, retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "fr"
DEFAULT_PROMPT = "Transcription audio/vidéo en français"
TRANSIENT_HINT = " (transient error, please try again later)"
UNKNOWN_ERROR_MESSAGE = "Unknown transcription error"


@dataclass
class DispatchReport:
    """Summary of a finished dispatch run.

    `status` is the status the record store holds; `persisted` is False when
    the terminal status could not be written.
    """

    job_id: int
    status: str
    attempts: int
    transcript_text: str | None = None
    duration: int | None = None
    error_message: str | None = None
    persisted: bool = True


def describe_error(error: BaseException | None) -> str:
    """Build the stored error message, flagging transient failures."""
    message = str(error) if error is not None else ""
    if not message:
        message = UNKNOWN_ERROR_MESSAGE
    if error is not None and is_retryable_error(error):
        message += TRANSIENT_HINT
    return message


class TranscriptionDispatcher:
    """Runs transcription jobs against a record store and an engine.

    Args:
        record_client: Record store used to load and update jobs.
        engine: Speech-to-text engine.
        language: Language hint. Falls back to TRANSCRIPTION_LANGUAGE, then "fr".
        prompt: Context prompt passed to the engine.
        max_attempts: Attempts for the transcription call (default 3).
        initial_delay: Seconds to wait after the first failure (default 1.0).
        backoff_multiplier: Growth factor between delays (default 2).
    """

    def __init__(
        self,
        record_client: RecordClient,
        engine: TranscriptionEngine,
        language: str | None = None,
        prompt: str = DEFAULT_PROMPT,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        backoff_multiplier: float = 2.0,
    ) -> None:
        self._records = record_client
        self._engine = engine
        self.language = language or os.environ.get(
            "TRANSCRIPTION_LANGUAGE", DEFAULT_LANGUAGE
        )
        self.prompt = prompt
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.backoff_multiplier = backoff_multiplier
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        """Number of spawned dispatches that have not finished."""
        return len(self._tasks)

    def trigger(self, job_id: int) -> asyncio.Task:
        """Start a dispatch in the background and return its task.

        The caller does not need to await the task. Must be called from
        within a running event loop.
        """
        task = asyncio.create_task(self.run(job_id), name=f"transcription-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_task_done, job_id))
        return task

    def _on_task_done(self, job_id: int, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(
                "Transcription %s was cancelled", job_id, extra={"job_id": job_id}
            )
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Unhandled error in transcription %s",
                job_id,
                exc_info=exc,
                extra={"job_id": job_id},
            )

    async def drain(self, timeout: float) -> bool:
        """Wait up to `timeout` seconds for in-flight dispatches.

        Dispatches still running afterwards are cancelled and stay in
        "processing" on the record store.

        Returns:
            True if every dispatch finished in time.
        """
        if not self._tasks:
            return True
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(
                "Cancelling %d transcription(s) still in flight", len(pending)
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            return False
        return True

    async def run(self, job_id: int) -> DispatchReport | None:
        """Process one job to a terminal status.

        Returns:
            DispatchReport, or None if the job could not be loaded or is
            already terminal.
        """
        wall_start = time.monotonic()
        logger.info("Starting transcription %s", job_id, extra={"job_id": job_id})

        try:
            job = await self._records.get_transcription(job_id)
        except Exception:
            logger.error(
                "Failed to load transcription %s",
                job_id,
                exc_info=True,
                extra={"job_id": job_id},
            )
            return None

        if job is None:
            logger.error(
                "Transcription %s not found", job_id, extra={"job_id": job_id}
            )
            return None

        if job.is_terminal:
            logger.warning(
                "Transcription %s is already %s, skipping",
                job_id,
                job.status,
                extra={"job_id": job_id, "status": job.status},
            )
            return None

        stored_status = job.status
        if await self._write_status(job_id, PROCESSING):
            stored_status = PROCESSING

        request = TranscriptionRequest(
            audio_url=job.file_url,
            language=self.language,
            prompt=self.prompt,
        )
        timer = StageTimer("transcribe")
        with timer:
            outcome = await retry_with_backoff(
                functools.partial(self._transcribe_once, request),
                max_attempts=self.max_attempts,
                initial_delay=self.initial_delay,
                backoff_multiplier=self.backoff_multiplier,
                on_retry=functools.partial(self._log_retry, job_id),
            )

        if outcome.success:
            result: TranscriptionResult = outcome.result
            text = result.text or ""
            duration = (
                math.floor(result.duration) if result.duration is not None else None
            )
            report = DispatchReport(
                job_id=job_id,
                status=COMPLETED,
                attempts=outcome.attempts,
                transcript_text=text,
                duration=duration,
            )
            fields: dict[str, object] = {"transcript_text": text, "duration": duration}
        else:
            error_message = describe_error(outcome.error)
            report = DispatchReport(
                job_id=job_id,
                status=ERROR,
                attempts=outcome.attempts,
                error_message=error_message,
            )
            fields = {"error_message": error_message}

        if not await self._write_status(job_id, report.status, **fields):
            logger.error(
                "Transcription %s finished as '%s' but the record stays '%s'",
                job_id,
                report.status,
                stored_status,
                extra={"job_id": job_id, "status": stored_status},
            )
            report.status = stored_status
            report.persisted = False
        elif outcome.success:
            logger.info(
                "Transcription %s completed (%d chars)",
                job_id,
                len(report.transcript_text or ""),
                extra={"job_id": job_id, "status": COMPLETED},
            )
        else:
            logger.error(
                "Transcription %s failed after %d attempts: %s",
                job_id,
                outcome.attempts,
                report.error_message,
                extra={"job_id": job_id, "status": ERROR, "error": report.error_message},
            )

        log_job_metrics(
            JobMetrics(
                job_id=job_id,
                status=report.status,
                attempts=report.attempts,
                processing_wall_time_seconds=time.monotonic() - wall_start,
                transcription_duration_seconds=timer.duration_seconds,
                audio_duration_seconds=report.duration,
                transcript_length=len(report.transcript_text or ""),
                retryable_error=(
                    outcome.error is not None and is_retryable_error(outcome.error)
                ),
                error_message=report.error_message,
            )
        )
        return report

    async def _transcribe_once(self, request: TranscriptionRequest) -> TranscriptionResult:
        """Call the engine once, raising on an error-shaped result."""
        result = await self._engine.transcribe(request)
        if isinstance(result, TranscriptionFailure):
            raise TranscriptionError(result.error or UNKNOWN_ERROR_MESSAGE)
        if not isinstance(result, TranscriptionResult):
            raise TranscriptionError(
                f"Unexpected transcription result: {type(result).__name__}"
            )
        if result.duration is not None and not math.isfinite(result.duration):
            raise TranscriptionError(
                f"Invalid duration in transcription result: {result.duration}"
            )
        return result

    def _log_retry(self, job_id: int, attempt: int, error: Exception) -> None:
        logger.warning(
            "Transcription %s attempt %d failed: %s",
            job_id,
            attempt,
            error,
            extra={"job_id": job_id, "attempt": attempt, "error": str(error)},
        )

    async def _write_status(self, job_id: int, status: str, **fields: object) -> bool:
        """Persist a status change. Failures are logged, never raised."""
        try:
            await self._records.update_transcription_status(job_id, status, **fields)
        except Exception:
            logger.error(
                "Failed to set transcription %s to '%s'",
                job_id,
                status,
                exc_info=True,
                extra={"job_id": job_id, "status": status},
            )
            return False
        logger.info(
            "Transcription %s status: %s",
            job_id,
            status,
            extra={"job_id": job_id, "status": status},
        )
        return True
