"""Search, status, and date filters for transcription lists.

All filters return a new list and leave the input untouched.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Literal

from transcriber.models import Transcription

StatusFilter = Literal["all", "completed", "processing", "pending", "error"]
DateFilter = Literal["all", "today", "week", "month", "custom"]


def _as_aware(value: datetime) -> datetime:
    # Naive timestamps from the record API are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _one_month_before(value: datetime) -> datetime:
    year, month = (value.year, value.month - 1) if value.month > 1 else (value.year - 1, 12)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def filter_by_search(
    transcriptions: Sequence[Transcription], query: str
) -> list[Transcription]:
    """Keep items whose file name contains the query, case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return list(transcriptions)
    return [t for t in transcriptions if needle in t.file_name.lower()]


def filter_by_status(
    transcriptions: Sequence[Transcription], status: StatusFilter | str
) -> list[Transcription]:
    """Keep items with the given status; "all" keeps everything."""
    if status == "all":
        return list(transcriptions)
    return [t for t in transcriptions if t.status == status]


def filter_by_date(
    transcriptions: Sequence[Transcription],
    date_filter: DateFilter | str,
    custom_from: datetime | None = None,
    custom_to: datetime | None = None,
    now: datetime | None = None,
) -> list[Transcription]:
    """Keep items created within a date window.

    Windows: "today" (since midnight), "week" (last 7 days), "month" (since
    the same day last month), or "custom" (from custom_from, up to custom_to
    inclusive when given). "custom" without custom_from and unknown filters
    keep everything. Items without a creation date are dropped by any
    active window.
    """
    now = _as_aware(now or datetime.now(UTC))

    if date_filter == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif date_filter == "week":
        start = now - timedelta(days=7)
    elif date_filter == "month":
        start = _one_month_before(now)
    elif date_filter == "custom" and custom_from is not None:
        start = _as_aware(custom_from)
    else:
        return list(transcriptions)

    end = _as_aware(custom_to) if date_filter == "custom" and custom_to else None

    filtered: list[Transcription] = []
    for t in transcriptions:
        if t.created_at is None:
            continue
        created_at = _as_aware(t.created_at)
        if created_at < start:
            continue
        if end is not None and created_at > end:
            continue
        filtered.append(t)
    return filtered


def apply_filters(
    transcriptions: Sequence[Transcription],
    search_query: str = "",
    status_filter: StatusFilter | str = "all",
    date_filter: DateFilter | str = "all",
    custom_date_from: datetime | None = None,
    custom_date_to: datetime | None = None,
    now: datetime | None = None,
) -> list[Transcription]:
    """Apply search, then status, then date filters."""
    filtered = filter_by_search(transcriptions, search_query)
    filtered = filter_by_status(filtered, status_filter)
    return filter_by_date(
        filtered, date_filter, custom_date_from, custom_date_to, now=now
    )
