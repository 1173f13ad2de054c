"""Book response schemas."""
from typing import Optional
from datetime import datetime
from marketplace.schemas.base import RecordModel


class BookResponse(RecordModel):
    title: str
    author: str
    publisher: str
    isbn: Optional[str] = None
    description: Optional[str] = None
    publication_year: Optional[int] = None
    edition: Optional[str] = None
    language: Optional[str] = None
    page_count: Optional[int] = None
    category: Optional[str] = None
    price: Optional[float] = None
    subject_area: Optional[str] = None
    availability_status: Optional[str] = None
    cover_image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
