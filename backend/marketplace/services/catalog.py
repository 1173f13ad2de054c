"""Publisher catalogue: list a publisher's books and filter them in memory."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from marketplace.services.identity import Identity, SessionContext, Subscription
from marketplace.services.publishers import PUBLISHERS, Publisher, get_publisher
from marketplace.services.record_store import RecordStore

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
EMPTY_MESSAGE = "No books available for this publisher yet."
NO_MATCH_MESSAGE = "No books match your search."
RECENT_WINDOW = timedelta(days=30)


class UnknownPublisherError(LookupError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Unknown publisher: {slug}")


@dataclass
class FilterResult:
    records: list[dict]
    message: Optional[str] = None


def matches(record: dict, search: str, category: str) -> bool:
    term = search.strip().lower()
    if term:
        haystacks = (record.get("title"), record.get("author"), record.get("description"))
        if not any(term in (h or "").lower() for h in haystacks):
            return False
    return category == ALL_CATEGORIES or record.get("category") == category


class CatalogView:
    """List/filter view over one publisher's books.

    Open the view (or use ``async with``) to follow session changes; the
    loaded base set is dropped whenever the identity changes since row
    visibility may depend on who is asking.
    """

    def __init__(self, session: SessionContext, record_store: RecordStore):
        self.session = session
        self.record_store = record_store
        self.publisher: Optional[Publisher] = None
        self.records: tuple[dict, ...] = ()
        self.loaded = False
        self._subscription: Optional[Subscription] = None

    def open(self) -> None:
        if self._subscription is None:
            self._subscription = self.session.subscribe(self._on_identity_change)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "CatalogView":
        self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()

    def _on_identity_change(self, identity: Optional[Identity]) -> None:
        logger.debug("Session changed, dropping %d loaded record(s)", len(self.records))
        self.records = ()
        self.loaded = False

    async def load(self, publisher_slug: str) -> tuple[dict, ...]:
        publisher = get_publisher(publisher_slug)
        if publisher is None:
            raise UnknownPublisherError(publisher_slug)
        rows = await self.record_store.select(
            "books", {"publisher": publisher.name}, order=("created_at", True),
        )
        self.publisher = publisher
        self.records = tuple(rows)
        self.loaded = True
        return self.records

    def filter(self, search: str = "", category: str = ALL_CATEGORIES) -> FilterResult:
        if not self.records:
            return FilterResult([], EMPTY_MESSAGE)
        found = [r for r in self.records if matches(r, search or "", category or ALL_CATEGORIES)]
        return FilterResult(found, None if found else NO_MATCH_MESSAGE)


@dataclass
class PublisherStats:
    slug: str
    name: str
    total_books: int
    recent_books: int


def _as_utc(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


async def publisher_stats(record_store: RecordStore, now: Optional[datetime] = None) -> list[PublisherStats]:
    """Total and recent (last 30 days) book counts for every publisher."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - RECENT_WINDOW
    stats = []
    for publisher in PUBLISHERS:
        books = await record_store.select("books", {"publisher": publisher.name})
        recent = 0
        for book in books:
            created = _as_utc(book.get("created_at"))
            if created is not None and created > cutoff:
                recent += 1
        stats.append(PublisherStats(publisher.slug, publisher.name, len(books), recent))
    return stats
