"""
PostgreSQL repository adapters - Implement the verification and user ports.

This module provides the PostgreSQL implementations of the domain's
repository ports using psycopg3 with raw SQL.

Atomicity Design:
-----------------
Every lifecycle step of a verification record is a single SQL statement
keyed by the ``email`` primary key, so no explicit locks are needed:

1. **upsert**: ``INSERT ... ON CONFLICT (email) DO UPDATE``. Concurrent
   issues for one email leave exactly one row; the last writer's code wins.

2. **mark_verified**: ``UPDATE ... WHERE email = %s AND token = %s``. A
   code replaced by a concurrent re-issue no longer matches.

3. **consume_if_verified**: ``DELETE ... WHERE verified AND expiry >= %s
   RETURNING``. Row-level locking makes concurrent deletes serialize;
   only the first returns the row.
"""

import logging
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.ports import User, VerificationRecord

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"

_RECORD_COLUMNS = "email, token, verified, expiry"
_USER_COLUMNS = "id, email, nickname, password_hash, created_at"


def _to_record(row: tuple | None) -> VerificationRecord | None:
    if row is None:
        return None
    return VerificationRecord(email=row[0], token=row[1], verified=row[2], expiry=row[3])


def _to_user(row: tuple | None) -> User | None:
    if row is None:
        return None
    return User(id=row[0], email=row[1], nickname=row[2], password_hash=row[3], created_at=row[4])


class PostgresVerificationRepository:
    """
    Implements VerificationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> VerificationRecord | None:
        sql = f"SELECT {_RECORD_COLUMNS} FROM email_verifications WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            return _to_record(cursor.fetchone())

    def find_by_email_and_token(self, email: str, token: str) -> VerificationRecord | None:
        sql = f"""
            SELECT {_RECORD_COLUMNS}
            FROM email_verifications
            WHERE email = %s AND token = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, token))
            return _to_record(cursor.fetchone())

    def upsert(self, email: str, token: str, expiry: datetime) -> VerificationRecord:
        """
        Create or overwrite the verification record for an email.

        The UNIQUE (primary key) constraint on email makes the
        INSERT ... ON CONFLICT atomic: a second issue overwrites the
        first instead of adding a row.
        """
        sql = f"""
            INSERT INTO email_verifications (email, token, verified, expiry, updated_at)
            VALUES (%s, %s, FALSE, %s, NOW())
            ON CONFLICT (email) DO UPDATE
            SET token = EXCLUDED.token,
                verified = FALSE,
                expiry = EXCLUDED.expiry,
                updated_at = NOW()
            RETURNING {_RECORD_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, token, expiry))
            record = _to_record(cursor.fetchone())
            conn.commit()
        return record

    def mark_verified(self, email: str, token: str, expiry: datetime) -> bool:
        sql = """
            UPDATE email_verifications
            SET verified = TRUE, expiry = %s, updated_at = NOW()
            WHERE email = %s AND token = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (expiry, email, token))
            conn.commit()
            return cursor.rowcount == 1

    def consume_if_verified(self, email: str, now: datetime) -> VerificationRecord | None:
        """
        Atomically delete a verified, unexpired record and return it.

        Returns:
            The deleted record, or None if no verified unexpired record
            exists (missing, unverified, expired, or already consumed)
        """
        sql = f"""
            DELETE FROM email_verifications
            WHERE email = %s AND verified AND expiry >= %s
            RETURNING {_RECORD_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, now))
            record = _to_record(cursor.fetchone())
            conn.commit()
        return record

    def delete(self, email: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM email_verifications WHERE email = %s", (email,))
            conn.commit()
            return cursor.rowcount == 1

    def delete_if_token(self, email: str, token: str) -> bool:
        sql = "DELETE FROM email_verifications WHERE email = %s AND token = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, token))
            conn.commit()
            return cursor.rowcount == 1


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_email(self, email: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            return _to_user(cursor.fetchone())

    def find_by_id(self, user_id: int) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (user_id,))
            return _to_user(cursor.fetchone())

    def create(self, email: str, nickname: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            EmailAlreadyRegistered: If the email UNIQUE constraint fires
        """
        sql = f"""
            INSERT INTO users (email, nickname, password_hash, created_at)
            VALUES (%s, %s, %s, NOW())
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email, nickname, password_hash))
                user = _to_user(cursor.fetchone())
                conn.commit()
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered() from None
        return user

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        sql = "UPDATE users SET password_hash = %s WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (password_hash, email))
            conn.commit()
            return cursor.rowcount == 1


def run_migrations(pool: ConnectionPool) -> None:
    """
    Apply every ``migrations/*.sql`` file in filename order.

    The files use ``IF NOT EXISTS`` so this runs on every startup.

    Raises:
        RuntimeError: If a migration fails; the failing file is named
    """
    for sql_file in sorted(MIGRATIONS_DIR.glob("*.sql")):
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
        logger.info("Migration applied: %s", sql_file.name)
