"""Async SQLAlchemy engine and session factory.

Used by the local record store adapter:
    from marketplace.database import get_db

    @router.get("/items")
    async def list_items(db: AsyncSession = Depends(get_db)):
        store = SqlRecordStore(db)
        return await store.select("books", {"publisher": name})
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from marketplace.config import settings

_engine_kwargs = {"echo": False, "pool_pre_ping": True}
if not settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs.update(pool_size=10, max_overflow=20)

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
