# jobboard/services/storage.py
import asyncio
import concurrent.futures
import logging
from pathlib import Path, PurePosixPath
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from jobboard.core.config import settings
from jobboard.utils.documents import epoch_millis

logger = logging.getLogger(__name__)

# Local upload directory for dev fallback
LOCAL_UPLOAD_DIR = Path("uploads")

# boto3 is blocking; uploads run here so the event loop keeps serving live queries
_thread_pool = concurrent.futures.ThreadPoolExecutor(max_workers=3)


def safe_filename(filename: str) -> str:
    """Last path component of a client-supplied filename."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    return name if name not in ("", ".", "..") else "attachment"


def attachment_key(conversation_id: str, filename: str) -> str:
    return f"messages/{conversation_id}/{epoch_millis()}_{safe_filename(filename)}"


def avatar_key(user_id: str) -> str:
    return f"avatars/{user_id}_{epoch_millis()}"


def _get_s3_client():
    """
    Return a boto3 S3 client configured for Cloudflare R2 or MinIO.
    If no S3_ENDPOINT or credentials are configured, returns None.
    """
    endpoint = settings.S3_ENDPOINT
    access_key = settings.S3_ACCESS_KEY
    secret_key = settings.S3_SECRET_KEY

    # If we have MinIO specific env set and S3 provider is minio, prefer that
    if settings.S3_PROVIDER and settings.S3_PROVIDER.lower() == "minio" and settings.MINIO_ENDPOINT:
        endpoint = settings.MINIO_ENDPOINT
        access_key = settings.MINIO_ACCESS_KEY
        secret_key = settings.MINIO_SECRET_KEY

    if not endpoint or not access_key or not secret_key:
        return None

    # Use signature s3v4 for compatibility (Cloudflare R2 & MinIO)
    return boto3.client(
        "s3",
        endpoint_url=str(endpoint),
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=Config(signature_version="s3v4"),
        region_name=(settings.S3_REGION or None),
    )


def ensure_bucket(client, bucket: str) -> bool:
    """
    Ensure the bucket exists. For MinIO this may be necessary in dev.
    Returns True if bucket exists or was created successfully.
    """
    if client is None:
        return False
    try:
        client.head_bucket(Bucket=bucket)
        return True
    except ClientError:
        # works for MinIO; R2 buckets are created in the Cloudflare UI
        try:
            client.create_bucket(Bucket=bucket)
            return True
        except ClientError:
            return False


def upload_bytes(key: str, data: bytes, content_type: str = "application/octet-stream",
                 bucket: Optional[str] = None) -> str:
    """
    Blocking upload. Returns a fetchable URL for the stored object.
    S3 errors propagate; the local filesystem is used only when no S3
    client is configured.
    """
    bucket = bucket or settings.S3_BUCKET
    s3 = _get_s3_client()
    if s3:
        ensure_bucket(s3, bucket)
        s3.put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        return public_url(key, bucket=bucket, client=s3)

    root = LOCAL_UPLOAD_DIR.resolve()
    path = (root / key).resolve()
    if not path.is_relative_to(root):
        raise ValueError(f"storage key escapes the upload directory: {key!r}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return f"file://{path}"


def public_url(key: str, bucket: Optional[str] = None, client=None) -> str:
    """
    Fetchable URL for an uploaded object: <S3_PUBLIC_BASE_URL>/<key> when a
    public bucket domain is configured, otherwise a long-lived presigned GET.
    """
    if settings.S3_PUBLIC_BASE_URL:
        return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    bucket = bucket or settings.S3_BUCKET
    s3 = client or _get_s3_client()
    return s3.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket, "Key": key},
        ExpiresIn=settings.PRESIGNED_URL_EXPIRES,
    )


async def store_bytes(key: str, data: bytes, content_type: str = "application/octet-stream",
                      bucket: Optional[str] = None) -> str:
    """Async wrapper around upload_bytes (runs in the storage thread pool)."""
    loop = asyncio.get_running_loop()
    url = await loop.run_in_executor(_thread_pool, upload_bytes, key, data, content_type, bucket)
    logger.info("Stored %s bytes at %s", len(data), key)
    return url
