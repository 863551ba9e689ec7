"""Tests for transcriber.models module."""

from datetime import UTC, datetime

import pytest

from transcriber.models import STATUSES, Transcription, can_transition


def _body(**overrides) -> dict:
    body = {
        "id": 42,
        "userId": "user_abc",
        "fileName": "interview.mp3",
        "fileUrl": "https://cdn.example.com/a.mp3",
        "fileKey": "transcriptions/user_abc/1-ab.mp3",
        "status": "completed",
        "duration": 12,
        "transcriptText": "bonjour",
        "errorMessage": None,
        "createdAt": "2026-03-01T10:00:00+00:00",
        "updatedAt": "2026-03-01T10:00:12Z",
    }
    body.update(overrides)
    return body


class TestFromRecord:
    def test_parses_camel_case_fields(self):
        record = Transcription.from_record(_body())

        assert record.id == 42
        assert record.user_id == "user_abc"
        assert record.file_name == "interview.mp3"
        assert record.file_key == "transcriptions/user_abc/1-ab.mp3"
        assert record.transcript_text == "bonjour"
        assert record.created_at == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
        assert record.updated_at.second == 12

    def test_status_defaults_to_pending(self):
        body = _body()
        del body["status"]
        assert Transcription.from_record(body).status == "pending"

    def test_missing_timestamps_are_none(self):
        record = Transcription.from_record(_body(createdAt=None, updatedAt=""))
        assert record.created_at is None
        assert record.updated_at is None

    @pytest.mark.parametrize("bad_id", [None, "42", True, 4.2])
    def test_rejects_invalid_id(self, bad_id):
        with pytest.raises(ValueError, match="'id'"):
            Transcription.from_record(_body(id=bad_id))

    def test_rejects_unknown_status(self):
        with pytest.raises(ValueError, match="Invalid 'status'"):
            Transcription.from_record(_body(status="done"))

    def test_rejects_bad_timestamp(self):
        with pytest.raises(ValueError, match="ISO 8601"):
            Transcription.from_record(_body(createdAt="yesterday"))


class TestStatusLifecycle:
    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "processing"),
            ("pending", "error"),
            ("processing", "completed"),
            ("processing", "error"),
        ],
    )
    def test_forward_transitions(self, current, new):
        assert can_transition(current, new) is True

    @pytest.mark.parametrize(
        "current,new",
        [
            ("completed", "processing"),
            ("error", "processing"),
            ("completed", "error"),
            ("processing", "pending"),
            ("pending", "completed"),
            ("unknown", "processing"),
        ],
    )
    def test_backward_or_skipping_transitions(self, current, new):
        assert can_transition(current, new) is False

    @pytest.mark.parametrize("status", STATUSES)
    def test_is_terminal(self, status):
        record = Transcription(id=1, file_name="a", file_url="u", status=status)
        assert record.is_terminal is (status in ("completed", "error"))

    def test_to_summary(self):
        record = Transcription.from_record(_body())
        summary = record.to_summary()
        assert summary == {
            "id": 42,
            "file_name": "interview.mp3",
            "status": "completed",
            "created_at": record.created_at,
            "duration": 12,
        }
