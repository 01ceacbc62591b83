import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from app.core.config import settings


@dataclass
class StorageObject:
    """Represents a file object in the content store."""

    key: str
    last_modified: datetime
    size: int


class ContentStore(Protocol):
    def find(self, key: str) -> list[StorageObject]:
        """Return the objects stored under key (empty when absent)."""
        ...

    def delete(self, key: str) -> None:
        """Delete an object by its key."""
        ...


def _resolve_within(base_dir: Path, path: str) -> Path:
    """Resolve path and validate it stays within base directory."""
    if not path:
        raise ValueError("Empty path")
    base_resolved = base_dir.resolve()
    full_path = (base_dir / path).resolve()
    if (
        not str(full_path).startswith(str(base_resolved) + os.sep)
        and full_path != base_resolved
    ):
        raise ValueError(f"Path traversal attempt detected: {path}")
    return full_path


class LocalContentStore:
    """Content store kept in a local directory for development."""

    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)

    def find(self, key: str) -> list[StorageObject]:
        full_path = _resolve_within(self._base_dir, key)
        if not full_path.is_file():
            return []
        stat = full_path.stat()
        return [
            StorageObject(
                key=key,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
                size=stat.st_size,
            )
        ]

    def delete(self, key: str) -> None:
        full_path = _resolve_within(self._base_dir, key)
        if full_path.exists():
            full_path.unlink()


class R2ContentStore:
    """Cloudflare R2 storage (S3-compatible) for production."""

    def __init__(self) -> None:
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.r2_endpoint_url,
            aws_access_key_id=settings.R2_ACCESS_KEY_ID,
            aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
            config=BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
            ),
            region_name="auto",
        )
        self._bucket = settings.R2_BUCKET_NAME

    def find(self, key: str) -> list[StorageObject]:
        if not key:
            raise ValueError("Empty object key")
        try:
            head = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return []
            raise
        return [
            StorageObject(
                key=key,
                last_modified=head["LastModified"],
                size=head["ContentLength"],
            )
        ]

    def delete(self, key: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=key)


class LocalFileSystem:
    """Filesystem backend rooted at the upload directory.

    Relative paths are resolved under the root; absolute paths are accepted
    only when they point inside it.
    """

    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)

    def resolve(self, path: str) -> Path:
        return _resolve_within(self._base_dir, path)

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def unlink(self, path: str) -> None:
        self.resolve(path).unlink()


def get_content_store() -> ContentStore:
    if settings.STORAGE_BACKEND == "r2":
        return R2ContentStore()
    return LocalContentStore(settings.CONTENT_STORE_DIR)


def get_filesystem() -> LocalFileSystem:
    return LocalFileSystem(settings.UPLOAD_DIR)
