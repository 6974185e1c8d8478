"""
FastAPI application for trustpost.

Wires settings, logging, the PostgreSQL connection pool and the v1
routers. The pool is opened in the lifespan and shared through
``app.state.pool``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import psycopg
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

tags_metadata = [
    {
        "name": "v1",
        "description": "Email verification, accounts and posts",
    },
]


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)


def open_pool(settings: Settings) -> ConnectionPool:
    """Open the shared pool and bring the schema up to date."""
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    run_migrations(pool)
    return pool


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting trustpost (email backend: %s, allowed domains: %s)",
        settings.email_backend,
        settings.allowed_email_domains or "any",
    )
    app.state.pool = open_pool(settings)

    yield

    app.state.pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="trustpost",
    description="Social posting API with email-verified registration",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.exception_handler(psycopg.OperationalError)
async def database_unavailable(request: Request, exc: psycopg.OperationalError) -> JSONResponse:
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable"},
    )


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """Return 200 when the database answers, 503 otherwise."""
    with request.app.state.pool.connection() as conn:
        conn.execute("SELECT 1")
    return {"status": "healthy"}
