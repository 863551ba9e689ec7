"""Tests for transcriber.storage.record_client module."""

import json

import httpx
import pytest

from transcriber.storage.record_client import RecordClient
from transcriber.utils.errors import StorageError

API = "https://web.example.com"

RECORD = {
    "id": 42,
    "userId": "user_abc",
    "fileName": "interview.mp3",
    "fileUrl": "https://cdn.example.com/transcriptions/user_abc/1-ab.mp3",
    "fileKey": "transcriptions/user_abc/1-ab.mp3",
    "status": "pending",
    "duration": None,
    "transcriptText": None,
    "errorMessage": None,
    "createdAt": "2026-03-01T10:00:00Z",
    "updatedAt": "2026-03-01T10:00:00Z",
}


class TestRecordClientInit:
    """Tests for RecordClient initialization."""

    def test_init_with_explicit_params(self):
        client = RecordClient(api_url="https://web.example.com", api_secret="s3cret")
        assert client.api_url == "https://web.example.com"
        assert client.api_secret == "s3cret"

    def test_init_strips_trailing_slash(self):
        client = RecordClient(api_url="https://web.example.com/", api_secret="s")
        assert client.api_url == "https://web.example.com"

    def test_init_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RECORDS_API_URL", "https://env.example.com")
        monkeypatch.setenv("RECORDS_API_SECRET", "env-secret")
        client = RecordClient()
        assert client.api_url == "https://env.example.com"
        assert client.api_secret == "env-secret"

    def test_init_missing_url_raises_storage_error(self, monkeypatch):
        monkeypatch.delenv("RECORDS_API_URL", raising=False)
        with pytest.raises(StorageError, match="RECORDS_API_URL"):
            RecordClient(api_url="", api_secret="secret")

    def test_init_missing_secret_raises_storage_error(self, monkeypatch):
        monkeypatch.delenv("RECORDS_API_SECRET", raising=False)
        with pytest.raises(StorageError, match="RECORDS_API_SECRET"):
            RecordClient(api_url=API, api_secret="")


@pytest.fixture
def client():
    return RecordClient(api_url=API, api_secret="test-secret")


class TestGetTranscription:
    """Tests for RecordClient.get_transcription()."""

    async def test_returns_parsed_record(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42", method="GET", json=RECORD
        )

        record = await client.get_transcription(42)

        assert record.id == 42
        assert record.file_url == RECORD["fileUrl"]
        assert record.status == "pending"
        assert record.created_at.year == 2026
        request = httpx_mock.get_request()
        assert request.headers["X-Internal-Secret"] == "test-secret"

    async def test_not_found_returns_none(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/7", method="GET", status_code=404
        )

        assert await client.get_transcription(7) is None

    async def test_server_error_raises(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/7", method="GET", status_code=500
        )

        with pytest.raises(StorageError, match="HTTP 500") as exc_info:
            await client.get_transcription(7)
        assert exc_info.value.operation == "get_transcription"
        assert exc_info.value.job_id == 7

    async def test_invalid_payload_raises(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/7",
            method="GET",
            json={"id": 7, "status": "done"},
        )

        with pytest.raises(StorageError, match="Invalid record payload"):
            await client.get_transcription(7)

    async def test_connection_error_raises(self, client, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("refused"))

        with pytest.raises(StorageError, match="ConnectError"):
            await client.get_transcription(1)


class TestUpdateTranscriptionStatus:
    """Tests for RecordClient.update_transcription_status()."""

    async def test_sends_only_status(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42/status", method="POST"
        )

        await client.update_transcription_status(42, "processing")

        body = json.loads(httpx_mock.get_request().content)
        assert body == {"status": "processing"}

    async def test_sends_completion_fields(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42/status", method="POST"
        )

        await client.update_transcription_status(
            42, "completed", transcript_text="bonjour", duration=12
        )

        body = json.loads(httpx_mock.get_request().content)
        assert body == {"status": "completed", "transcriptText": "bonjour", "duration": 12}

    async def test_sends_empty_transcript_text(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42/status", method="POST"
        )

        await client.update_transcription_status(42, "completed", transcript_text="")

        body = json.loads(httpx_mock.get_request().content)
        assert body["transcriptText"] == ""

    async def test_sends_error_message(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/43/status", method="POST"
        )

        await client.update_transcription_status(
            43, "error", error_message="503 Service Unavailable"
        )

        body = json.loads(httpx_mock.get_request().content)
        assert body == {"status": "error", "errorMessage": "503 Service Unavailable"}

    async def test_raises_on_http_error(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42/status",
            method="POST",
            status_code=502,
        )

        with pytest.raises(StorageError, match="HTTP 502"):
            await client.update_transcription_status(42, "processing")


class TestCreateListDelete:
    """Tests for create, list, and delete operations."""

    async def test_create_posts_pending_record(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions",
            method="POST",
            status_code=201,
            json=RECORD,
        )

        record = await client.create_transcription(
            user_id="user_abc",
            file_name="interview.mp3",
            file_url=RECORD["fileUrl"],
            file_key=RECORD["fileKey"],
        )

        body = json.loads(httpx_mock.get_request().content)
        assert body["status"] == "pending"
        assert body["userId"] == "user_abc"
        assert body["fileKey"] == RECORD["fileKey"]
        assert record.id == 42

    async def test_list_skips_malformed_entries(self, client, httpx_mock):
        second = dict(RECORD, id=43, fileName="b.mp3")
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions?userId=user_abc",
            method="GET",
            json=[RECORD, {"fileName": "no-id.mp3"}, second],
        )

        records = await client.list_transcriptions("user_abc")

        assert [r.id for r in records] == [42, 43]

    async def test_delete(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42", method="DELETE", status_code=204
        )

        await client.delete_transcription(42)

        assert httpx_mock.get_request().method == "DELETE"

    async def test_delete_raises_on_missing(self, client, httpx_mock):
        httpx_mock.add_response(
            url=f"{API}/internal/transcriptions/42", method="DELETE", status_code=404
        )

        with pytest.raises(StorageError, match="HTTP 404"):
            await client.delete_transcription(42)


class TestTransport:
    """Tests for an injected transport and client lifecycle."""

    async def test_custom_transport_is_used(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=RECORD)

        client = RecordClient(
            api_url=API, api_secret="s", transport=httpx.MockTransport(handler)
        )
        try:
            record = await client.get_transcription(42)
        finally:
            await client.close()

        assert record.id == 42
        assert seen[0].url.path == "/internal/transcriptions/42"
