# Filename: cloudnest/blobstore.py
"""S3-compatible blob store client.

Blobs are addressed by opaque string keys. The client only knows how to
put, fetch and delete them; which key belongs to which file record is the
metadata store's business.
"""

import logging
from typing import Any, BinaryIO, Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import settings
from .exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class BlobNotFoundError(Exception):
    """Raised by ``get_blob`` when no object exists under the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Blob not found: {key}")


def make_blob_key(owner_id: int, original_filename: str) -> str:
    uid = uuid4().hex
    sanitized = "".join(c for c in original_filename if c.isalnum() or c in " ._-").strip()
    return f"uploads/{owner_id}/{uid}-{sanitized}"


def _is_missing(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _MISSING_CODES


class BlobStore:
    """Thin wrapper over a boto3 S3 client bound to one bucket.

    Every botocore failure other than "no such key" is re-raised as
    StoreUnavailableError so callers deal with a single error type.
    """

    def __init__(self, client: Any, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls) -> "BlobStore":
        client = boto3.client(
            "s3",
            region_name=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        return cls(client, settings.s3_bucket)

    def put_blob(self, key: str, fileobj: BinaryIO, content_type: Optional[str] = None) -> None:
        """Upload a file-like object under ``key``.

        Uses the managed transfer so large payloads go up as multipart.
        """
        extra_args = {"ContentType": content_type} if content_type else None
        try:
            logger.info("Uploading blob: %s", key)
            self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Failed to upload blob: %s", key)
            raise StoreUnavailableError(f"Blob upload failed: {key}") from exc
        logger.info("Uploaded blob: %s", key)

    def get_blob(self, key: str):
        """Return the streaming body of the blob stored under ``key``.

        Raises:
            BlobNotFoundError: If nothing is stored under the key.
            StoreUnavailableError: On any other store failure.
        """
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                raise BlobNotFoundError(key) from exc
            logger.exception("Failed to fetch blob: %s", key)
            raise StoreUnavailableError(f"Blob fetch failed: {key}") from exc
        except BotoCoreError as exc:
            logger.exception("Failed to fetch blob: %s", key)
            raise StoreUnavailableError(f"Blob fetch failed: {key}") from exc
        return response["Body"]

    def delete_blob(self, key: str) -> bool:
        """Delete the blob stored under ``key``.

        A blob that is already gone counts as deleted.

        Returns:
            True if a blob was removed, False if none existed.
        """
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                logger.warning("Blob not found in storage (already deleted?): %s", key)
                return False
            logger.exception("Failed to look up blob: %s", key)
            raise StoreUnavailableError(f"Blob delete failed: {key}") from exc
        except BotoCoreError as exc:
            logger.exception("Failed to look up blob: %s", key)
            raise StoreUnavailableError(f"Blob delete failed: {key}") from exc

        try:
            logger.info("Deleting blob: %s", key)
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                return False
            logger.exception("Failed to delete blob: %s", key)
            raise StoreUnavailableError(f"Blob delete failed: {key}") from exc
        except BotoCoreError as exc:
            logger.exception("Failed to delete blob: %s", key)
            raise StoreUnavailableError(f"Blob delete failed: {key}") from exc
        logger.info("Deleted blob: %s", key)
        return True

    def rollback_upload(self, key: str) -> None:
        """Remove a blob whose metadata record could not be written.

        Best-effort: a failure here is logged, not raised, so the caller
        can surface the original metadata error.
        """
        try:
            logger.warning("Rolling back upload, deleting blob: %s", key)
            self.delete_blob(key)
        except StoreUnavailableError:
            logger.exception("Failed to roll back upload, orphaned blob: %s", key)
