"""
PostgreSQL repository adapters - Implement the storage ports via psycopg3.

This module provides the PostgreSQL implementations of the domain's
pending-registration and identity ports using a psycopg3 connection
pool with raw, parameterized SQL.

Atomicity:
----------
- ``pending_registrations.email`` is the primary key; put() is a single
  ``INSERT ... ON CONFLICT (email) DO UPDATE`` so the latest
  registration for an email always wins.
- ``identities.email`` carries a unique index. create() is a plain
  INSERT; when two verifications race, the database lets exactly one
  through and the other gets ``UniqueViolation``, translated to
  DuplicateEmail.

Timeouts:
---------
Connection checkout is bounded by ``timeout`` and every statement by the
``statement_timeout`` configured on the pool's connections. Driver and
pool failures leave this module as StoreUnavailable.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool, PoolTimeout

from otpgate.domain.exceptions import DuplicateEmail, IdentityNotFound, StoreUnavailable
from otpgate.domain.models import Identity, PendingRegistration, Role

logger = logging.getLogger(__name__)

_IDENTITY_COLUMNS = (
    "id, display_name, email, password_hash, is_verified, role, avatar, created_at, updated_at"
)


def create_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    timeout_seconds: float,
    open: bool = True,
) -> ConnectionPool:
    """
    Create a connection pool whose connections time out connects and statements.

    Args:
        database_url: libpq connection string
        min_size: Minimum connections kept open
        max_size: Maximum connections
        timeout_seconds: Bound for connect, checkout and each statement
    """
    statement_ms = int(timeout_seconds * 1000)
    return ConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout_seconds,
        kwargs={
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={statement_ms}",
        },
        open=open,
    )


class _PoolClient:
    """Shared connection handling for the postgres adapters."""

    def __init__(self, pool: ConnectionPool, timeout_seconds: float = 5.0) -> None:
        """
        Args:
            pool: psycopg3 ConnectionPool for database connections
            timeout_seconds: Maximum wait for a pooled connection
        """
        self._pool = pool
        self._timeout = timeout_seconds

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection(timeout=self._timeout) as conn:
                yield conn
        except PoolTimeout as exc:
            logger.error("Timed out waiting for a database connection")
            raise StoreUnavailable("Database connection timed out") from exc
        except psycopg.Error as exc:
            logger.error("Database operation failed: %s", exc)
            raise StoreUnavailable("Database operation failed") from exc

    def ping(self) -> None:
        """Run ``SELECT 1``; raises StoreUnavailable if the database is unreachable."""
        with self._connection() as conn:
            conn.execute("SELECT 1")


class PostgresPendingRegistrationStore(_PoolClient):
    """
    Implements PendingRegistrationStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def put(self, registration: PendingRegistration) -> None:
        sql = """
            INSERT INTO pending_registrations
                (email, display_name, password_hash, otp_code, otp_expires_at, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
            ON CONFLICT (email) DO UPDATE
            SET display_name = EXCLUDED.display_name,
                password_hash = EXCLUDED.password_hash,
                otp_code = EXCLUDED.otp_code,
                otp_expires_at = EXCLUDED.otp_expires_at,
                created_at = NOW()
        """
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    registration.email,
                    registration.display_name,
                    registration.password_hash,
                    registration.otp_code,
                    registration.otp_expires_at,
                ),
            )
            conn.commit()

    def get(self, email: str) -> PendingRegistration | None:
        sql = """
            SELECT email, display_name, password_hash, otp_code, otp_expires_at
            FROM pending_registrations
            WHERE email = %s
        """
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return PendingRegistration(
            email=row[0],
            display_name=row[1],
            password_hash=row[2],
            otp_code=row[3],
            otp_expires_at=row[4],
        )

    def delete(self, email: str) -> None:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM pending_registrations WHERE email = %s", (email,))
            conn.commit()

    def purge_expired(self, now: datetime) -> int:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                "DELETE FROM pending_registrations WHERE otp_expires_at <= %s", (now,)
            )
            conn.commit()
            return cursor.rowcount


class PostgresIdentityRepository(_PoolClient):
    """
    Implements IdentityRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def find_by_email(self, email: str) -> Identity | None:
        return self._fetch_one(
            f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE email = %s", email
        )

    def find_by_id(self, identity_id: str) -> Identity | None:
        return self._fetch_one(
            f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE id = %s", identity_id
        )

    def create(self, identity: Identity) -> Identity:
        sql = f"""
            INSERT INTO identities ({_IDENTITY_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        with self._connection() as conn, conn.cursor() as cursor:
            try:
                cursor.execute(sql, self._identity_params(identity))
            except errors.UniqueViolation:
                conn.rollback()
                raise DuplicateEmail(identity.email) from None
            conn.commit()
        return identity

    def save(self, identity: Identity) -> Identity:
        sql = """
            UPDATE identities
            SET display_name = %s,
                email = %s,
                password_hash = %s,
                is_verified = %s,
                role = %s,
                avatar = %s,
                updated_at = %s
            WHERE id = %s
        """
        params = (
            identity.display_name,
            identity.email,
            identity.password_hash,
            identity.is_verified,
            identity.role.value,
            identity.avatar,
            identity.updated_at,
            identity.id,
        )
        with self._connection() as conn, conn.cursor() as cursor:
            try:
                cursor.execute(sql, params)
            except errors.UniqueViolation:
                conn.rollback()
                raise DuplicateEmail(identity.email) from None
            updated = cursor.rowcount
            conn.commit()

        if updated == 0:
            raise IdentityNotFound(identity.id)
        return identity

    def delete(self, identity_id: str) -> bool:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM identities WHERE id = %s", (identity_id,))
            conn.commit()
            return cursor.rowcount == 1

    def list_all(self) -> list[Identity]:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(f"SELECT {_IDENTITY_COLUMNS} FROM identities ORDER BY created_at")
            rows = cursor.fetchall()
            conn.commit()
        return [self._row_to_identity(row) for row in rows]

    def _fetch_one(self, sql: str, value: str) -> Identity | None:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (value,))
            row = cursor.fetchone()
            conn.commit()
        return self._row_to_identity(row) if row is not None else None

    @staticmethod
    def _identity_params(identity: Identity) -> tuple:
        return (
            identity.id,
            identity.display_name,
            identity.email,
            identity.password_hash,
            identity.is_verified,
            identity.role.value,
            identity.avatar,
            identity.created_at,
            identity.updated_at,
        )

    @staticmethod
    def _row_to_identity(row: tuple) -> Identity:
        avatar = row[6]
        return Identity(
            id=row[0],
            display_name=row[1],
            email=row[2],
            password_hash=row[3],
            is_verified=row[4],
            role=Role(row[5]),
            avatar=bytes(avatar) if avatar is not None else None,
            created_at=row[7],
            updated_at=row[8],
        )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: otpgate/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
