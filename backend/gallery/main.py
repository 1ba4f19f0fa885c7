"""
Gallery Exhibition API - Main Application Entry Point

Books artworks into gallery wall locations over date ranges:
- No two scheduled/active exhibitions share a day at one location
- Conflict check and insert run in one serialized transaction
- Optimistic version check on updates (updated_at as the token)
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from gallery.core.config import get_settings
from gallery.core.exceptions import (
    GalleryError,
    TransientStorageError,
    UnexpectedStorageError,
)
from gallery.core.logging import setup_logging, get_logger
from gallery.core.metrics import metrics_endpoint
from gallery.api.router import api_router
from gallery.api.middleware import RequestLoggingMiddleware
from gallery.db.init_db import init_db
from gallery.db.session import get_engine, get_sessionmaker

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: schema and seed data first, then serve."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    engine = get_engine()
    await init_db(engine, get_sessionmaker(), seed=settings.SEED_INITIAL_DATA)
    logger.info("database_ready", dialect=engine.dialect.name)

    yield

    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Gallery exhibition scheduling with conflict-free location bookings",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.exception_handler(GalleryError)
async def gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    headers = None
    if isinstance(exc, TransientStorageError):
        headers = {"Retry-After": "1"}
    if isinstance(exc, UnexpectedStorageError):
        logger.error("unexpected_storage_error", error=exc.message, **exc.context)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
        headers=headers,
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    database = "ok"
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("health_check_database_unreachable", error=str(e))
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
