"""
Object Storage for Applicant Documents

Uploads CVs to an S3-compatible bucket with the MinIO client and returns
the object's public URL. The URL is stored with the application and read
by reviewers long after the upload, so a public base URL is required and
expiring presigned links are never returned.
"""

import asyncio
import io
import logging

from minio import Minio
from minio.error import S3Error

from lmghi_api.core.config import settings

logger = logging.getLogger(__name__)


class StorageNotConfiguredError(RuntimeError):
    """Raised when the storage endpoint, credentials or public base URL are missing."""


class StorageUploadError(RuntimeError):
    """Raised when the object store rejects an upload."""


def get_storage_client() -> Minio:
    """
    Build a MinIO client from settings.

    Raises:
        StorageNotConfiguredError: If endpoint or credentials are missing
    """
    if not (
        settings.storage_endpoint and settings.storage_access_key and settings.storage_secret_key
    ):
        raise StorageNotConfiguredError("Object storage is not configured.")

    return Minio(
        endpoint=settings.storage_endpoint,
        access_key=settings.storage_access_key,
        secret_key=settings.storage_secret_key,
        secure=settings.storage_secure,
        region=settings.storage_region,
    )


def resolve_object_url(object_name: str) -> str:
    """
    Permanent public URL for an object.

    Raises:
        StorageNotConfiguredError: If STORAGE_PUBLIC_BASE_URL is not set
    """
    if not settings.storage_public_base_url:
        raise StorageNotConfiguredError("STORAGE_PUBLIC_BASE_URL is not configured.")
    return f"{settings.storage_public_base_url.rstrip('/')}/{object_name}"


def _put_object(client: Minio, object_name: str, data: bytes, content_type: str) -> None:
    client.put_object(
        settings.storage_bucket,
        object_name,
        io.BytesIO(data),
        length=len(data),
        content_type=content_type,
    )


async def upload_document(
    object_name: str,
    data: bytes,
    content_type: str,
    client: Minio | None = None,
) -> str:
    """
    Upload a document and return a retrievable URL.

    Args:
        object_name: Key inside the configured bucket
        data: File contents
        content_type: MIME type stored with the object
        client: Optional preconfigured client

    Returns:
        Public URL of the stored object

    Raises:
        StorageNotConfiguredError: If storage settings are missing
        StorageUploadError: If the object store rejects the upload
    """
    # Resolved first so nothing is stored that could not be linked
    url = resolve_object_url(object_name)
    client = client or get_storage_client()

    try:
        # MinIO client is synchronous - run it in a thread
        await asyncio.to_thread(_put_object, client, object_name, data, content_type)
    except S3Error as e:
        logger.error(f"Failed to upload {object_name} to {settings.storage_bucket}: {e}")
        raise StorageUploadError(f"Upload failed: {e.message or e.code}") from e

    logger.info(f"Uploaded {object_name} ({len(data)} bytes) to {settings.storage_bucket}")
    return url
