"""Stable sorting of transcription lists by a single column."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from transcriber.models import Transcription

SortField = Literal["created_at", "file_name", "duration", "status"]
SortOrder = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("created_at", "file_name", "duration", "status")

_EPOCH = datetime.fromtimestamp(0, UTC)


@dataclass(frozen=True)
class SortState:
    field: SortField = "created_at"
    order: SortOrder = "desc"


def _sort_key(item: Transcription, field: str) -> Any:
    value = getattr(item, field)
    if field == "created_at":
        if value is None:
            return _EPOCH
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if field == "duration":
        return value or 0
    if isinstance(value, str):
        return value.lower()
    return value


def sort_transcriptions(
    items: Sequence[Transcription], sort_state: SortState
) -> list[Transcription]:
    """Return a sorted copy; equal keys keep their original order.

    Strings compare case-insensitively, a missing duration counts as 0.

    Raises:
        ValueError: If the sort field is unknown.
    """
    if sort_state.field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: '{sort_state.field}'")
    return sorted(
        items,
        key=lambda item: _sort_key(item, sort_state.field),
        reverse=sort_state.order == "desc",
    )
