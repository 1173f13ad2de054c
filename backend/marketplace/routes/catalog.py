"""Catalogue API routes - publishers, their books, and book detail."""
from fastapi import APIRouter, Depends, HTTPException, Query

from marketplace.dependencies import get_record_store, get_session
from marketplace.schemas.book import BookResponse
from marketplace.schemas.catalog import PublisherBooksResponse, PublisherStatsResponse
from marketplace.services.catalog import (
    ALL_CATEGORIES,
    CatalogView,
    UnknownPublisherError,
    publisher_stats,
)
from marketplace.services.identity import SessionContext
from marketplace.services.record_store import RecordStore, RecordStoreError

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/publishers", response_model=list[PublisherStatsResponse])
async def list_publishers(store: RecordStore = Depends(get_record_store)):
    """List publishers with their total and recent book counts."""
    try:
        stats = await publisher_stats(store)
    except RecordStoreError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return [
        {"slug": s.slug, "name": s.name, "total_books": s.total_books, "recent_books": s.recent_books}
        for s in stats
    ]


@router.get("/publishers/{slug}/books", response_model=PublisherBooksResponse)
async def list_publisher_books(
    slug: str,
    q: str = Query("", description="Matches title, author or description"),
    category: str = Query(ALL_CATEGORIES),
    session: SessionContext = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
):
    """List a publisher's books, newest first, filtered by search term and category."""
    async with CatalogView(session, store) as view:
        try:
            await view.load(slug)
        except UnknownPublisherError:
            raise HTTPException(status_code=404, detail="Publisher not found")
        except RecordStoreError as e:
            raise HTTPException(status_code=502, detail=f"Failed to load books: {e.message}")
        result = view.filter(q, category)

    return {
        "publisher": {"slug": view.publisher.slug, "name": view.publisher.name},
        "search": q,
        "category": category,
        "total": len(view.records),
        "books": [BookResponse.model_validate(r) for r in result.records],
        "message": result.message,
    }


@router.get("/books/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, store: RecordStore = Depends(get_record_store)):
    """Get a single book by ID."""
    try:
        rows = await store.select("books", {"id": book_id})
    except RecordStoreError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load book details: {e.message}")
    if not rows:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookResponse.model_validate(rows[0])
