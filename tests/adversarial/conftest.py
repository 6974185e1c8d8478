"""
Shared fixtures for adversarial tests.

Requires PostgreSQL at ``DATABASE_URL``; tests are skipped when it is
unreachable.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresUserRepository,
    PostgresVerificationRepository,
    run_migrations,
)
from src.adapters.security.hasher import BcryptPasswordHasher
from src.config.settings import get_settings
from src.domain.registration import RegistrationService


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=20,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty all tables before each test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE post_likes, posts, email_verifications, users RESTART IDENTITY CASCADE")
        conn.commit()
    yield


@pytest.fixture
def verifications(pool: ConnectionPool) -> PostgresVerificationRepository:
    return PostgresVerificationRepository(pool)


@pytest.fixture
def registration_service(
    pool: ConnectionPool, verifications: PostgresVerificationRepository
) -> RegistrationService:
    return RegistrationService(
        verifications=verifications,
        users=PostgresUserRepository(pool),
        password_hasher=BcryptPasswordHasher(),
    )
