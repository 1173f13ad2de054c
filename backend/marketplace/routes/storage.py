"""Public object downloads for the local blob store.

Mirrors the hosted backend's public object URL shape so stored URLs do not
change between backends.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from marketplace.dependencies import local_blob_store, uses_remote_backend
from marketplace.services.file_storage import BlobStoreError, LocalBlobStore

router = APIRouter(prefix="/storage/v1/object/public", tags=["storage"])


@router.get("/{bucket}/{key:path}")
async def download_object(bucket: str, key: str, store: LocalBlobStore = Depends(local_blob_store)):
    """Serve a stored object by bucket and key."""
    if uses_remote_backend():
        raise HTTPException(status_code=404, detail="Objects are served by the hosted backend")
    try:
        path = store.path_for(bucket, key)
    except BlobStoreError:
        raise HTTPException(status_code=404, detail="Object not found")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Object not found")
    return FileResponse(path=path, filename=path.name)
