"""Journal response schemas."""
from typing import Optional
from datetime import datetime
from pydantic import field_validator
from marketplace.schemas.base import RecordModel


class JournalResponse(RecordModel):
    title: str
    authors: list[str] = []
    journal_name: str
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    abstract: Optional[str] = None
    publication_date: Optional[str] = None
    keywords_list: Optional[list[str]] = None
    citations_count: int = 0
    impact_factor: Optional[float] = None
    category: Optional[str] = None
    open_access: bool = False
    peer_reviewed: bool = True
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("authors", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v if v is not None else []
