"""Job metrics collection and reporting.

JobMetrics holds the observability data for one dispatch run, StageTimer
measures the wall-clock duration of a block, and log_job_metrics() emits
the metrics as a single JSON line on stdout.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime


@dataclass
class JobMetrics:
    """Metrics collected for a single transcription dispatch."""

    job_id: int
    status: str
    attempts: int
    processing_wall_time_seconds: float
    transcription_duration_seconds: float
    audio_duration_seconds: int | None = None
    transcript_length: int = 0
    retryable_error: bool = False
    error_message: str | None = None


class StageTimer:
    """Context manager that records the wall-clock duration of a stage.

    Usage:
        timer = StageTimer("transcribe")
        with timer:
            await do_work()
        print(timer.duration_seconds)
    """

    def __init__(self, stage_name: str) -> None:
        self.stage_name = stage_name
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.duration_seconds: float = 0.0
        self._mono_start: float = 0.0

    def __enter__(self) -> StageTimer:
        self.start_time = datetime.now(UTC)
        self._mono_start = time.monotonic()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.end_time = datetime.now(UTC)
        self.duration_seconds = time.monotonic() - self._mono_start


def log_job_metrics(metrics: JobMetrics) -> None:
    """Emit job metrics as one structured JSON line to stdout.

    Args:
        metrics: Populated JobMetrics dataclass.
    """
    entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "severity": "INFO",
        "metric_type": "transcription_job",
        **asdict(metrics),
    }
    print(json.dumps(entry, ensure_ascii=False))
