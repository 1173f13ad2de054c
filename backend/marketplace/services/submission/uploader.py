"""Send validated attachments to blob storage and resolve their public URLs."""
import logging
import time
from typing import Callable, Optional

from marketplace.services.file_storage import BlobStore, BlobStoreError
from marketplace.services.submission.errors import UploadError
from marketplace.services.submission.validator import Attachment

logger = logging.getLogger(__name__)


def build_object_key(owner_id: str, filename: str, millis: int, tag: Optional[str] = None) -> str:
    """``{owner}-{millis}[-{tag}].{ext}``; ext is whatever follows the last dot."""
    ext = filename.rsplit(".", 1)[-1]
    stem = f"{owner_id}-{millis}-{tag}" if tag else f"{owner_id}-{millis}"
    return f"{stem}.{ext}"


class AssetUploader:
    """Writes one attachment per call. Not transactional with the record write."""

    def __init__(self, blob_store: BlobStore, clock: Callable[[], float] = time.time):
        self.blob_store = blob_store
        self._clock = clock

    async def upload(
        self, attachment: Attachment, bucket: str, owner_id: str, tag: Optional[str] = None,
    ) -> str:
        key = build_object_key(owner_id, attachment.name, int(self._clock() * 1000), tag)
        try:
            await self.blob_store.upload(
                bucket, key, attachment.data, attachment.mime_type or "application/octet-stream",
            )
        except BlobStoreError as e:
            logger.warning(f"Upload of {attachment.name} to {bucket}/{key} failed: {e.message}")
            raise UploadError(e.message, bucket) from e
        return self.blob_store.public_url(bucket, key)
