"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from marketplace.config import settings
from marketplace.database import engine, get_db
from marketplace.dependencies import uses_remote_backend
from marketplace.models import Base
from marketplace.services.baas_client import BaaSAPIError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup when running against the local database."""
    if not uses_remote_backend():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Marketplace API started (backend=%s)", settings.DATA_BACKEND)

    yield

    await engine.dispose()


app = FastAPI(
    title="Academic Marketplace API",
    version="1.0.0",
    description="Backend API for book, journal and dataset publishing.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BaaSAPIError)
async def baas_error_handler(request: Request, exc: BaaSAPIError):
    logger.error(f"Hosted backend call failed: {exc}")
    return JSONResponse(status_code=502, content={"detail": exc.message})


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    if uses_remote_backend():
        return {"status": "ok", "backend": "remote"}
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


# Register routers
from marketplace.routes.catalog import router as catalog_router
from marketplace.routes.submissions import router as submissions_router
from marketplace.routes.storage import router as storage_router
app.include_router(catalog_router)
app.include_router(submissions_router)
app.include_router(storage_router)
