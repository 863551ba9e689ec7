"""Upload handling: store the media, create the record, start transcription."""

from __future__ import annotations

import logging

from transcriber.dispatcher import TranscriptionDispatcher
from transcriber.models import Transcription
from transcriber.storage.object_storage import ObjectStorageClient, build_file_key
from transcriber.storage.record_client import RecordClient
from transcriber.utils.errors import (
    AccessDeniedError,
    StorageError,
    TranscriptionNotFoundError,
    UploadValidationError,
)
from transcriber.validation import validate_audio_file

logger = logging.getLogger(__name__)


async def submit_upload(
    user_id: str,
    file_name: str,
    data: bytes,
    mime_type: str,
    record_client: RecordClient,
    object_storage: ObjectStorageClient,
    dispatcher: TranscriptionDispatcher,
    duration: float | None = None,
) -> Transcription:
    """Accept an uploaded file and queue its transcription.

    The file is validated, stored, and recorded as "pending"; the dispatcher
    is triggered without waiting for it. The returned record is still
    pending, clients poll its status afterwards.

    Raises:
        UploadValidationError: If the file is rejected. Nothing is stored.
        StorageError: If storing the file or creating the record fails.
    """
    validation = validate_audio_file(file_name, mime_type, len(data), duration)
    if not validation.valid:
        raise UploadValidationError(validation.error or "Invalid file")

    file_key = build_file_key(user_id, file_name)
    file_url = object_storage.put_object(file_key, data, content_type=mime_type)

    record = await record_client.create_transcription(
        user_id=user_id,
        file_name=file_name,
        file_url=file_url,
        file_key=file_key,
    )
    logger.info(
        "Created transcription %s for %s",
        record.id,
        file_name,
        extra={"job_id": record.id, "status": record.status},
    )

    dispatcher.trigger(record.id)
    return record


async def get_upload(
    transcription_id: int,
    user_id: str,
    record_client: RecordClient,
) -> Transcription:
    """Load a transcription on behalf of its owner.

    Raises:
        TranscriptionNotFoundError: If the record does not exist.
        AccessDeniedError: If the record belongs to another user.
    """
    record = await record_client.get_transcription(transcription_id)
    if record is None:
        raise TranscriptionNotFoundError(
            "Transcription not found", job_id=transcription_id
        )
    if record.user_id != user_id:
        raise AccessDeniedError("Access denied", job_id=transcription_id)
    return record


async def delete_upload(
    transcription_id: int,
    user_id: str,
    record_client: RecordClient,
    object_storage: ObjectStorageClient,
) -> None:
    """Delete a user's transcription record and its stored media.

    A failure to delete the stored object is logged; the record is still
    removed.

    Raises:
        TranscriptionNotFoundError: If the record does not exist.
        AccessDeniedError: If the record belongs to another user. Nothing
            is deleted.
    """
    record = await get_upload(transcription_id, user_id, record_client)

    if record.file_key:
        try:
            object_storage.delete_object(record.file_key)
        except StorageError:
            logger.warning(
                "Failed to delete stored media for transcription %s",
                transcription_id,
                exc_info=True,
                extra={"job_id": transcription_id},
            )

    await record_client.delete_transcription(transcription_id)
    logger.info(
        "Deleted transcription %s", transcription_id, extra={"job_id": transcription_id}
    )
