"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryPostRepository, InMemoryUserRepository, InMemoryVerificationRepository
from .postgres import PostgresUserRepository, PostgresVerificationRepository, run_migrations
from .postgres_posts import PostgresPostRepository

__all__ = [
    "InMemoryPostRepository",
    "InMemoryUserRepository",
    "InMemoryVerificationRepository",
    "PostgresPostRepository",
    "PostgresUserRepository",
    "PostgresVerificationRepository",
    "run_migrations",
]
