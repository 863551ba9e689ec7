"""S3-compatible object storage client for uploaded media.

Provides put_object() and delete_object() using boto3, plus the key layout
used for uploaded files.
"""

from __future__ import annotations

import logging
import os
import secrets
from datetime import UTC, datetime

import boto3
from botocore.exceptions import ClientError

from transcriber.utils.errors import StorageError

logger = logging.getLogger(__name__)


def get_file_extension(file_name: str) -> str:
    """Return the text after the last dot, or "bin" if there is none."""
    parts = file_name.split(".")
    return parts[-1] if len(parts) > 1 else "bin"


def build_file_key(
    user_id: str,
    file_name: str,
    now: datetime | None = None,
    token: str | None = None,
) -> str:
    """Build a unique object key for an uploaded file.

    Format: transcriptions/{user_id}/{epoch_ms}-{16 hex chars}.{ext}
    """
    now = now or datetime.now(UTC)
    token = token or secrets.token_hex(8)
    timestamp_ms = int(now.timestamp() * 1000)
    extension = get_file_extension(file_name)
    return f"transcriptions/{user_id}/{timestamp_ms}-{token}.{extension}"


class ObjectStorageClient:
    """S3-compatible client for uploaded media.

    Reads configuration from environment variables:
        S3_ENDPOINT, S3_BUCKET, S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY,
        S3_PUBLIC_URL
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        bucket: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        public_url: str | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url or os.environ.get("S3_ENDPOINT", "")
        self.bucket = bucket or os.environ.get("S3_BUCKET", "")
        self.access_key_id = access_key_id or os.environ.get("S3_ACCESS_KEY_ID", "")
        self.secret_access_key = secret_access_key or os.environ.get(
            "S3_SECRET_ACCESS_KEY", ""
        )

        if not self.endpoint_url:
            raise StorageError("S3_ENDPOINT is required", operation="init")
        if not self.bucket:
            raise StorageError("S3_BUCKET is required", operation="init")

        self.public_url = (
            public_url
            or os.environ.get("S3_PUBLIC_URL", "")
            or f"{self.endpoint_url.rstrip('/')}/{self.bucket}"
        ).rstrip("/")

        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            region_name="auto",
        )

    def url_for(self, key: str) -> str:
        """Return the public URL of an object key."""
        return f"{self.public_url}/{key}"

    def put_object(self, key: str, data: bytes, content_type: str = "") -> str:
        """Store an object and return its public URL.

        Args:
            key: The object key.
            data: Raw bytes to store.
            content_type: Optional MIME content type.

        Raises:
            StorageError: If the object cannot be stored.
        """
        try:
            kwargs: dict = {"Bucket": self.bucket, "Key": key, "Body": data}
            if content_type:
                kwargs["ContentType"] = content_type
            self._client.put_object(**kwargs)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
            raise StorageError(
                f"Failed to put object '{key}': {error_code}",
                operation="put_object",
            ) from exc
        return self.url_for(key)

    def delete_object(self, key: str) -> None:
        """Delete an object by key.

        Raises:
            StorageError: If the object cannot be deleted.
        """
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
            raise StorageError(
                f"Failed to delete object '{key}': {error_code}",
                operation="delete_object",
            ) from exc
