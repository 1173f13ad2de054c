"""Publisher catalogue schemas."""
from typing import Optional
from marketplace.schemas.base import CamelModel
from marketplace.schemas.book import BookResponse


class PublisherResponse(CamelModel):
    slug: str
    name: str


class PublisherStatsResponse(PublisherResponse):
    total_books: int
    recent_books: int


class PublisherBooksResponse(CamelModel):
    publisher: PublisherResponse
    search: str = ""
    category: str = "all"
    total: int
    books: list[BookResponse]
    message: Optional[str] = None
