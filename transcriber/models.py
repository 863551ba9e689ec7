"""Transcription record model and status lifecycle.

A record moves forward only: pending -> processing -> completed | error.
The record API speaks camelCase JSON, matching the web layer's table columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

TranscriptionStatus = Literal["pending", "processing", "completed", "error"]

PENDING: TranscriptionStatus = "pending"
PROCESSING: TranscriptionStatus = "processing"
COMPLETED: TranscriptionStatus = "completed"
ERROR: TranscriptionStatus = "error"

STATUSES: tuple[str, ...] = (PENDING, PROCESSING, COMPLETED, ERROR)
TERMINAL_STATUSES: frozenset[str] = frozenset({COMPLETED, ERROR})

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({PROCESSING, ERROR}),
    PROCESSING: frozenset({COMPLETED, ERROR}),
    COMPLETED: frozenset(),
    ERROR: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    """Return True if a record may move from `current` to `new` status."""
    return new in _ALLOWED_TRANSITIONS.get(current, frozenset())


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"Invalid ISO 8601 timestamp: '{value}'") from exc


@dataclass
class Transcription:
    """A transcription record as stored by the web layer."""

    id: int
    file_name: str
    file_url: str
    status: str = PENDING
    user_id: str = ""
    file_key: str | None = None
    duration: int | None = None
    transcript_text: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, body: dict[str, Any]) -> Transcription:
        """Deserialize and validate a record API payload.

        Args:
            body: Raw JSON object for one transcription.

        Returns:
            Validated Transcription.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        record_id = body.get("id")
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise ValueError("Missing or invalid 'id' in record")

        status = body.get("status", PENDING)
        if status not in STATUSES:
            raise ValueError(
                f"Invalid 'status': '{status}'. Must be one of {', '.join(STATUSES)}"
            )

        return cls(
            id=record_id,
            file_name=body.get("fileName", ""),
            file_url=body.get("fileUrl", ""),
            status=status,
            user_id=body.get("userId", ""),
            file_key=body.get("fileKey"),
            duration=body.get("duration"),
            transcript_text=body.get("transcriptText"),
            error_message=body.get("errorMessage"),
            created_at=_parse_datetime(body.get("createdAt")),
            updated_at=_parse_datetime(body.get("updatedAt")),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_summary(self) -> dict[str, Any]:
        """Return the fields used by list views."""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "status": self.status,
            "created_at": self.created_at,
            "duration": self.duration,
        }
