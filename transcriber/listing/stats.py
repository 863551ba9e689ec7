"""Usage statistics over a user's transcriptions."""

from __future__ import annotations

import csv
import io
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from transcriber.models import COMPLETED, STATUSES, Transcription

STATS_WINDOW_DAYS = 7


@dataclass
class DayCount:
    date: str
    count: int


@dataclass
class StatusCount:
    status: str
    count: int


@dataclass
class TranscriptionStats:
    """Dashboard KPIs. Durations are in seconds, success_rate in percent."""

    total: int = 0
    total_duration: int = 0
    avg_duration: float = 0.0
    success_rate: float = 0.0
    transcriptions_by_day: list[DayCount] = field(default_factory=list)
    transcriptions_by_status: list[StatusCount] = field(default_factory=list)


def _created_on(item: Transcription) -> date | None:
    if item.created_at is None:
        return None
    created_at = item.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at.astimezone(UTC).date()


def compute_stats(
    transcriptions: Sequence[Transcription], now: datetime | None = None
) -> TranscriptionStats:
    """Compute totals, success rate, and per-day and per-status counts.

    The average duration is taken over all items, including those without
    a duration. Per-day counts cover the last seven UTC days, oldest first,
    today last. Per-status counts only list statuses that occur.
    """
    now = now or datetime.now(UTC)
    today = (now if now.tzinfo else now.replace(tzinfo=UTC)).astimezone(UTC).date()

    total = len(transcriptions)
    total_duration = sum(t.duration or 0 for t in transcriptions)
    completed = sum(1 for t in transcriptions if t.status == COMPLETED)

    per_day = Counter(_created_on(t) for t in transcriptions)
    days = [
        today - timedelta(days=offset)
        for offset in range(STATS_WINDOW_DAYS - 1, -1, -1)
    ]

    per_status = Counter(t.status for t in transcriptions)

    return TranscriptionStats(
        total=total,
        total_duration=total_duration,
        avg_duration=total_duration / total if total else 0.0,
        success_rate=completed / total * 100 if total else 0.0,
        transcriptions_by_day=[
            DayCount(date=day.isoformat(), count=per_day.get(day, 0)) for day in days
        ],
        transcriptions_by_status=[
            StatusCount(status=status, count=per_status[status])
            for status in STATUSES
            if per_status.get(status)
        ],
    )


def stats_to_csv(stats: TranscriptionStats) -> str:
    """Render stats as a two-column CSV report."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Total transcriptions", stats.total])
    writer.writerow(["Total duration (hours)", f"{stats.total_duration / 3600:.2f}"])
    writer.writerow(["Average duration (minutes)", f"{stats.avg_duration / 60:.2f}"])
    writer.writerow(["Success rate (%)", f"{stats.success_rate:.1f}"])
    writer.writerow([])
    writer.writerow(["Transcriptions per day"])
    for day in stats.transcriptions_by_day:
        writer.writerow([day.date, day.count])
    writer.writerow([])
    writer.writerow(["Breakdown by status"])
    for status in stats.transcriptions_by_status:
        writer.writerow([status.status, status.count])
    return buffer.getvalue()
