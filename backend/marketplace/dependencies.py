"""FastAPI dependencies wiring the ports to the configured backend.

``DATA_BACKEND=local`` uses SQLAlchemy tables, files on disk and the static
dev token table. ``DATA_BACKEND=remote`` routes all three through the hosted
backend, acting with the caller's access token so its row-level security
rules apply.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import settings
from marketplace.database import get_db
from marketplace.services.baas_client import BaaSClient
from marketplace.services.file_storage import BlobStore, LocalBlobStore, RemoteBlobStore
from marketplace.services.identity import (
    IdentityProvider,
    RemoteIdentityProvider,
    SessionContext,
    StaticTokenIdentityProvider,
    bearer_token,
)
from marketplace.services.notifications import CollectingNotifier, Notifier
from marketplace.services.record_store import RecordStore, RemoteRecordStore, SqlRecordStore
from marketplace.services.submission.uploader import AssetUploader


def uses_remote_backend() -> bool:
    return settings.DATA_BACKEND == "remote"


@lru_cache
def local_blob_store() -> LocalBlobStore:
    return LocalBlobStore()


async def get_baas_client(authorization: Optional[str] = Header(None)):
    """Yield a pooled client for the request, or None in local mode."""
    if not uses_remote_backend():
        yield None
        return
    async with BaaSClient(
        settings.BAAS_URL,
        settings.BAAS_ANON_KEY,
        access_token=bearer_token(authorization),
        timeout=settings.BAAS_TIMEOUT,
    ) as client:
        yield client


def get_record_store(
    db: AsyncSession = Depends(get_db),
    client: Optional[BaaSClient] = Depends(get_baas_client),
) -> RecordStore:
    if client is not None:
        return RemoteRecordStore(client)
    return SqlRecordStore(db)


def get_blob_store(client: Optional[BaaSClient] = Depends(get_baas_client)) -> BlobStore:
    if client is not None:
        return RemoteBlobStore(client)
    return local_blob_store()


def get_identity_provider(client: Optional[BaaSClient] = Depends(get_baas_client)) -> IdentityProvider:
    if client is not None:
        return RemoteIdentityProvider(client)
    return StaticTokenIdentityProvider.from_setting(settings.LOCAL_AUTH_TOKENS)


async def get_session(
    authorization: Optional[str] = Header(None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> SessionContext:
    return await provider.session_for(bearer_token(authorization))


def get_uploader(blob_store: BlobStore = Depends(get_blob_store)) -> AssetUploader:
    return AssetUploader(blob_store)


def get_notifier() -> Notifier:
    return CollectingNotifier()
