"""
Shared fixtures for integration tests.

Requires PostgreSQL at ``DATABASE_URL`` (see src/config/settings.py).
Tests that use the ``pool`` fixture are skipped when it is unreachable.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings

TABLES = "post_likes, posts, email_verifications, users"


def open_test_pool(max_size: int = 10) -> ConnectionPool:
    """Open a pool with migrations applied, or skip if the database is down."""
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=max_size,
        open=True,
    )
    run_migrations(pool)
    return pool


def truncate_all(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        conn.execute(f"TRUNCATE {TABLES} RESTART IDENTITY CASCADE")
        conn.commit()


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty all tables before each test."""
    truncate_all(pool)
    yield
