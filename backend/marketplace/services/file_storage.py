"""Blob storage abstraction. Local filesystem for dev, hosted storage buckets for production."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles

from marketplace.config import settings
from marketplace.services.baas_client import BaaSAPIError, BaaSClient

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when an object cannot be written to its bucket."""

    def __init__(self, message: str, bucket: str = "", key: str = ""):
        self.message = message
        self.bucket = bucket
        self.key = key
        super().__init__(message)


class BlobStore(ABC):
    """Write-once object storage addressed by bucket and key."""

    @abstractmethod
    async def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """Store ``data`` under ``bucket/key``. Existing keys are never overwritten."""

    @abstractmethod
    async def exists(self, bucket: str, key: str) -> bool:
        ...

    @abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        ...


class LocalBlobStore(BlobStore):
    """Stores objects as files under ``<base_path>/<bucket>/<key>``."""

    def __init__(self, base_path: str | Path | None = None, public_base_url: str | None = None):
        self.base_path = Path(base_path or settings.FILE_STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def path_for(self, bucket: str, key: str) -> Path:
        """Resolve the on-disk path, refusing buckets or keys that escape the storage root."""
        root = self.base_path.resolve()
        bucket_dir = (root / bucket).resolve()
        if bucket_dir.parent != root:
            raise BlobStoreError(f"Invalid bucket: {bucket}", bucket, key)
        path = (bucket_dir / key).resolve()
        if bucket_dir not in path.parents:
            raise BlobStoreError(f"Invalid object key: {key}", bucket, key)
        return path

    async def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        path = self.path_for(bucket, key)
        if path.exists():
            raise BlobStoreError("The resource already exists", bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiofiles.open(path, "xb") as f:
                await f.write(data)
        except FileExistsError as e:
            raise BlobStoreError("The resource already exists", bucket, key) from e
        except OSError as e:
            raise BlobStoreError(f"Failed to write object: {e.strerror or e}", bucket, key) from e
        logger.info("Stored %s/%s (%d bytes, %s)", bucket, key, len(data), content_type)

    async def exists(self, bucket: str, key: str) -> bool:
        return self.path_for(bucket, key).exists()

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/storage/v1/object/public/{bucket}/{key}"


class RemoteBlobStore(BlobStore):
    """Stores objects in the hosted backend's storage buckets."""

    def __init__(self, client: BaaSClient):
        self.client = client

    async def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        try:
            await self.client.upload_object(bucket, key, data, content_type)
        except BaaSAPIError as e:
            raise BlobStoreError(e.message, bucket, key) from e
        logger.info("Uploaded %s/%s (%d bytes) to hosted storage", bucket, key, len(data))

    async def exists(self, bucket: str, key: str) -> bool:
        return await self.client.object_exists(bucket, key)

    def public_url(self, bucket: str, key: str) -> str:
        return self.client.public_object_url(bucket, key)
