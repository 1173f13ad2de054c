"""Dataset response schemas."""
from typing import Optional
from datetime import datetime
from marketplace.schemas.base import RecordModel


class DatasetResponse(RecordModel):
    title: str
    description: str
    data_type: Optional[str] = None
    file_format: Optional[str] = None
    size_mb: Optional[float] = None
    keywords: Optional[list[str]] = None
    license: Optional[str] = None
    version: Optional[str] = None
    access_level: str = "Public"
    doi: Optional[str] = None
    citation: Optional[str] = None
    contributor_name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    dataset_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
