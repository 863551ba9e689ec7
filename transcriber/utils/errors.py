"""Custom exception hierarchy for the transcription service.

All exceptions inherit from TranscriberError so callers can catch at the
dispatch and upload boundaries while keeping the specific failure context.
"""


class TranscriberError(Exception):
    """Base exception for all transcription service errors."""

    def __init__(self, message: str, job_id: int | None = None) -> None:
        self.job_id = job_id
        super().__init__(message)

    def __str__(self) -> str:
        if self.job_id is not None:
            return f"[job={self.job_id}] {super().__str__()}"
        return super().__str__()


class TranscriptionError(TranscriberError):
    """Raised when the speech-to-text provider call fails."""

    def __init__(
        self,
        message: str,
        job_id: int | None = None,
        provider: str | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(message, job_id)


class StorageError(TranscriberError):
    """Raised when record API or object storage operations fail."""

    def __init__(
        self,
        message: str,
        job_id: int | None = None,
        operation: str | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(message, job_id)


class UploadValidationError(TranscriberError):
    """Raised when an uploaded media file fails validation."""


class ExportError(TranscriberError):
    """Raised when a transcript cannot be exported."""


class TranscriptionNotFoundError(TranscriberError):
    """Raised when a requested transcription record does not exist."""


class AccessDeniedError(TranscriberError):
    """Raised when a user asks for a transcription they do not own."""
