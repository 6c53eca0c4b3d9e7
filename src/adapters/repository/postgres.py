"""
PostgreSQL repository adapters - Implement UserDirectory and AuditLog protocols.

This module provides the PostgreSQL implementation of the domain's
durable ports using psycopg3 with raw SQL.

Email uniqueness is enforced by a UNIQUE constraint on users.email, so
two sessions verifying the same address concurrently cannot both create
an account: the loser gets EmailAlreadyRegistered.
"""

import logging
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.models import AuditLogEntry, NewUser, User

logger = logging.getLogger(__name__)

# src/adapters/repository/postgres.py -> <repo>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"

_USER_COLUMNS = """
    id, email, fullname, country, state, phone, password_hash,
    email_verified, reset_token_hash, reset_token_expiry, created_at
"""


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        email=row[1],
        fullname=row[2],
        country=row[3],
        state=row[4],
        phone=row[5],
        password_hash=row[6],
        email_verified=row[7],
        reset_token_hash=row[8],
        reset_token_expiry=row[9],
        created_at=row[10],
    )


class PostgresUserDirectory:
    """
    Implements UserDirectory protocol via psycopg3.

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

    def find_by_email(self, email: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def create(self, new_user: NewUser) -> User:
        """
        Insert a verified account.

        Raises:
            EmailAlreadyRegistered: If the UNIQUE constraint on email fires
        """
        sql = f"""
            INSERT INTO users (email, fullname, country, state, phone, password_hash, email_verified)
            VALUES (%s, %s, %s, %s, %s, %s, TRUE)
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        new_user.email,
                        new_user.fullname,
                        new_user.country,
                        new_user.state,
                        new_user.phone,
                        new_user.password_hash,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered(new_user.email) from None
        return _row_to_user(row)

    def set_reset_token(self, user_id: int, token_hash: str, expiry: datetime) -> None:
        sql = """
            UPDATE users
            SET reset_token_hash = %s, reset_token_expiry = %s, updated_at = NOW()
            WHERE id = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (token_hash, expiry, user_id))
            conn.commit()

    def update_password(self, user_id: int, password_hash: str) -> None:
        """Replace the password hash; clearing the token makes it single use."""
        sql = """
            UPDATE users
            SET password_hash = %s,
                reset_token_hash = NULL,
                reset_token_expiry = NULL,
                updated_at = NOW()
            WHERE id = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (password_hash, user_id))
            conn.commit()


class PostgresAuditLog:
    """Implements AuditLog protocol. Insert-only; rows are never updated."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def append(self, entry: AuditLogEntry) -> None:
        sql = "INSERT INTO audit_log (email, activity_name, added_on) VALUES (%s, %s, %s)"

        with self._pool.connection() as conn:
            conn.execute(sql, (entry.email, entry.activity_name, entry.added_on))
            conn.commit()

    def entries_for(self, email: str) -> list[AuditLogEntry]:
        """Entries for one email in insertion order."""
        sql = "SELECT email, activity_name, added_on FROM audit_log WHERE email = %s ORDER BY id"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            rows = cursor.fetchall()
        return [AuditLogEntry(email=r[0], activity_name=r[1], added_on=r[2]) for r in rows]


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> int:
    """
    Apply every ``*.sql`` file in ``migrations_dir`` in filename order.

    Files must be idempotent (``IF NOT EXISTS``); they run on every startup.

    Returns:
        Number of files applied

    Raises:
        RuntimeError: If a file fails; later files are not attempted
    """
    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.warning("No migrations found in %s", migrations_dir)
        return 0

    for sql_file in sql_files:
        logger.info("Applying migration %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
    return len(sql_files)
