"""
Object storage service for resume PDFs and preview images.
Stores files under users/{user_id}/[folder/]{file_id}.{ext} (public/ when anonymous).
Uploads and reads are retried; "not found" is terminal and never retried.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from resume_analyzer.app.core.config import (
    STORAGE_LIST_LIMIT,
    STORAGE_PUBLIC_PREFIX,
    STORAGE_USERS_PREFIX,
    settings,
)
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.utils.retry import retry_call

logger = get_logger("services.storage")

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

_client = None
_init_error: Exception | None = None


class StorageConfigError(RuntimeError):
    """Storage client or bucket is not configured."""


class StorageNotFoundError(FileNotFoundError):
    """Object does not exist in the bucket."""


@dataclass
class FileMetadata:
    id: str
    name: str
    path: str
    size: int
    content_type: str
    url: str
    created: datetime | None = None
    updated: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "content_type": self.content_type,
            "url": self.url,
            "created": self.created.isoformat() if self.created else None,
            "updated": self.updated.isoformat() if self.updated else None,
        }


def _create_client():
    if not settings.aws_access_key_id or not settings.aws_secret_access_key:
        raise StorageConfigError(
            "Storage credentials not configured (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)"
        )
    kwargs = {
        "aws_access_key_id": settings.aws_access_key_id,
        "aws_secret_access_key": settings.aws_secret_access_key,
        "region_name": settings.aws_region,
    }
    if settings.storage_endpoint_url:
        kwargs["endpoint_url"] = settings.storage_endpoint_url
    return boto3.client("s3", **kwargs)


def _get_client():
    """Lazily create the S3 client. A failed initialization is remembered and re-raised."""
    global _client, _init_error
    if _init_error is not None:
        raise _init_error
    if _client is None:
        try:
            _client = _create_client()
            logger.info(
                "Storage client initialized bucket=%s region=%s endpoint=%s",
                settings.storage_bucket_name,
                settings.aws_region,
                settings.storage_endpoint_url or "aws",
            )
        except Exception as e:
            logger.error("Storage client initialization failed: %s", e)
            _init_error = e
            raise
    return _client


def reset_client() -> None:
    """Drop the cached client and init error (config reload, tests)."""
    global _client, _init_error
    _client = None
    _init_error = None


def _bucket() -> str:
    if not settings.storage_bucket_name:
        raise StorageConfigError("Storage bucket not initialized. Check STORAGE_BUCKET_NAME environment variable.")
    return settings.storage_bucket_name


def _is_not_found(e: ClientError) -> bool:
    code = str(e.response.get("Error", {}).get("Code", ""))
    return code in _NOT_FOUND_CODES


def object_url(key: str) -> str:
    """Canonical https URL of an object (what we persist as storage_url)."""
    bucket = settings.storage_bucket_name
    if settings.storage_endpoint_url:
        return f"{settings.storage_endpoint_url.rstrip('/')}/{bucket}/{key}"
    return f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", file_name)


def file_extension(file_name: str) -> str:
    """Text after the last dot (whole name when there is none); 'bin' when empty."""
    return file_name.split(".")[-1] or "bin"


def build_object_key(file_id: str, file_name: str, user_id: str | int | None = None, folder: str | None = None) -> str:
    user_folder = f"{STORAGE_USERS_PREFIX}/{user_id}" if user_id else STORAGE_PUBLIC_PREFIX
    folder_path = f"{folder}/" if folder else ""
    return f"{user_folder}/{folder_path}{file_id}.{file_extension(file_name)}"


def _head(key: str) -> dict | None:
    """head_object, returning None when the object is missing."""
    try:
        return _get_client().head_object(Bucket=_bucket(), Key=key)
    except ClientError as e:
        if _is_not_found(e):
            return None
        raise


def _metadata_from_head(key: str, head: dict) -> FileMetadata:
    meta = head.get("Metadata") or {}
    modified = head.get("LastModified")
    return FileMetadata(
        id=meta.get("fileid") or key,
        name=meta.get("originalname") or PurePosixPath(key).name or "unknown",
        path=key,
        size=int(head.get("ContentLength") or 0),
        content_type=head.get("ContentType") or "application/octet-stream",
        url=object_url(key),
        created=modified,
        updated=modified,
    )


def upload_file(
    file_buffer: bytes,
    file_name: str,
    content_type: str,
    user_id: str | int | None = None,
    folder: str | None = None,
    max_retries: int | None = None,
) -> FileMetadata:
    """
    Upload a buffer under a fresh object key, retrying transient failures.

    Args:
        file_buffer: File content as bytes
        file_name: Original filename (extension is kept in the key)
        content_type: MIME type stored with the object
        user_id: Owner for folder organization (public/ when None)
        folder: Optional sub-folder below the user folder
        max_retries: Attempts before giving up (default from config)

    Returns:
        FileMetadata for the stored object
    """
    if not file_buffer:
        raise ValueError("File data is empty or invalid")
    if not file_name:
        raise ValueError("File name is required")

    client = _get_client()
    bucket = _bucket()
    attempts = max_retries if max_retries is not None else settings.storage_max_retries

    file_id = str(uuid.uuid4())
    key = build_object_key(file_id, file_name, user_id, folder)
    sanitized_name = sanitize_file_name(file_name)

    logger.info(
        "Storage upload started bucket=%s key=%s user_id=%s file_name=%s size_bytes=%d",
        bucket,
        key,
        user_id,
        file_name,
        len(file_buffer),
    )

    def _put() -> dict:
        client.put_object(
            Bucket=bucket,
            Key=key,
            Body=file_buffer,
            ContentType=content_type,
            Metadata={
                "originalname": sanitized_name,
                "fileid": file_id,
                "userid": str(user_id) if user_id else "anonymous",
            },
        )
        return client.head_object(Bucket=bucket, Key=key)

    head = retry_call(
        _put,
        max_attempts=attempts,
        base_delay=settings.storage_upload_backoff,
        backoff="exponential",
        description="Upload file",
    )

    modified = head.get("LastModified")
    logger.info("Storage upload success bucket=%s key=%s", bucket, key)
    return FileMetadata(
        id=file_id,
        name=sanitized_name,
        path=key,
        size=int(head.get("ContentLength") or len(file_buffer)),
        content_type=head.get("ContentType") or content_type,
        url=object_url(key),
        created=modified,
        updated=modified,
    )


def read_file(file_path: str, max_retries: int | None = None) -> bytes:
    """Download an object. Missing objects raise StorageNotFoundError without retrying."""
    client = _get_client()
    bucket = _bucket()
    if not file_path:
        raise ValueError("File path is required")
    attempts = max_retries if max_retries is not None else settings.storage_max_retries

    def _get() -> bytes:
        try:
            resp = client.get_object(Bucket=bucket, Key=file_path)
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFoundError(f"File not found: {file_path}") from e
            raise
        return resp["Body"].read()

    return retry_call(
        _get,
        max_attempts=attempts,
        base_delay=settings.storage_read_backoff,
        backoff="linear",
        non_retryable=(StorageNotFoundError,),
        description="Read file",
    )


def get_file_metadata(file_path: str) -> FileMetadata | None:
    """Metadata for an object; None when missing or on error."""
    _get_client()
    _bucket()
    try:
        head = _head(file_path)
        if head is None:
            return None
        return _metadata_from_head(file_path, head)
    except (ClientError, BotoCoreError) as e:
        logger.error("Error getting file metadata key=%s error=%s", file_path, e)
        return None


def delete_file(file_path: str) -> None:
    """Delete an object if present. Failures are logged, never raised."""
    client = _get_client()
    bucket = _bucket()
    try:
        if _head(file_path) is not None:
            client.delete_object(Bucket=bucket, Key=file_path)
            logger.info("Storage delete success bucket=%s key=%s", bucket, file_path)
    except (ClientError, BotoCoreError) as e:
        logger.warning("Storage delete failed key=%s error=%s", file_path, e)


def list_files(
    user_id: str | int | None = None,
    folder: str | None = None,
    limit: int | None = None,
) -> list[FileMetadata]:
    """List objects in a user's (or the public) folder."""
    client = _get_client()
    bucket = _bucket()
    user_folder = f"{STORAGE_USERS_PREFIX}/{user_id}" if user_id else STORAGE_PUBLIC_PREFIX
    prefix = f"{user_folder}/{folder}/" if folder else f"{user_folder}/"

    resp = client.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=limit or STORAGE_LIST_LIMIT)
    files = []
    for obj in resp.get("Contents", []) or []:
        key = obj["Key"]
        modified = obj.get("LastModified")
        files.append(
            FileMetadata(
                id=key,
                name=PurePosixPath(key).name,
                path=key,
                size=int(obj.get("Size") or 0),
                content_type="application/octet-stream",
                url=object_url(key),
                created=modified,
                updated=modified,
            )
        )
    return files


def get_signed_url(file_path: str, expires_in: int | None = None) -> str:
    """Presigned GET URL for temporary access."""
    client = _get_client()
    bucket = _bucket()
    if _head(file_path) is None:
        raise StorageNotFoundError("File not found")
    exp = expires_in if expires_in is not None else settings.storage_signed_url_expiration
    return client.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket, "Key": file_path},
        ExpiresIn=exp,
    )


def copy_file(source_path: str, destination_path: str) -> None:
    client = _get_client()
    bucket = _bucket()
    if _head(source_path) is None:
        raise StorageNotFoundError("Source file not found")
    client.copy_object(
        Bucket=bucket,
        Key=destination_path,
        CopySource={"Bucket": bucket, "Key": source_path},
    )
    logger.info("Storage copy bucket=%s src=%s dst=%s", bucket, source_path, destination_path)


def move_file(source_path: str, destination_path: str) -> None:
    copy_file(source_path, destination_path)
    delete_file(source_path)


def file_exists(file_path: str) -> bool:
    _get_client()
    _bucket()
    return _head(file_path) is not None


def get_file_size(file_path: str) -> int:
    _get_client()
    _bucket()
    head = _head(file_path)
    if head is None:
        raise StorageNotFoundError(f"File not found: {file_path}")
    return int(head.get("ContentLength") or 0)


def make_file_public(file_path: str) -> str:
    """Grant public-read and return the public URL."""
    client = _get_client()
    client.put_object_acl(Bucket=_bucket(), Key=file_path, ACL="public-read")
    return object_url(file_path)


def make_file_private(file_path: str) -> None:
    client = _get_client()
    client.put_object_acl(Bucket=_bucket(), Key=file_path, ACL="private")
