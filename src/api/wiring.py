"""
Adapter wiring - builds the collaborators selected by Settings.

Adapters are created once per application and stored in ``app.state``;
the request-scoped dependency factories read them from there.
"""

import logging
from datetime import timedelta

from fastapi import FastAPI
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    InMemoryAuditLog,
    InMemoryUserDirectory,
    PostgresAuditLog,
    PostgresUserDirectory,
    run_migrations,
)
from src.adapters.sessions import InMemoryPendingRegistrationStore, RedisPendingRegistrationStore
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.relay import SmtpEmailSender
from src.adapters.tokens.jwt_issuer import JwtCredentialIssuer
from src.config.settings import Settings
from src.domain.security import PasswordHasher

logger = logging.getLogger(__name__)


def wire_adapters(app: FastAPI, settings: Settings) -> None:
    """
    Create every adapter for ``settings`` and attach it to ``app.state``.

    Postgres mode opens the connection pool and runs migrations.
    """
    state = app.state
    state.settings = settings
    state.pool = None

    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        state.pool = pool
        state.user_directory = PostgresUserDirectory(pool)
        state.audit_log = PostgresAuditLog(pool)
    else:
        logger.warning("Using in-memory user directory; accounts are lost on restart")
        state.user_directory = InMemoryUserDirectory()
        state.audit_log = InMemoryAuditLog()

    if settings.session_backend == "redis":
        state.session_store = RedisPendingRegistrationStore.from_url(
            settings.redis_url, ttl_seconds=settings.session_ttl_seconds
        )
    else:
        state.session_store = InMemoryPendingRegistrationStore(ttl_seconds=settings.session_ttl_seconds)

    if settings.email_backend == "smtp":
        state.email_sender = SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            starttls=settings.smtp_starttls,
        )
    else:
        state.email_sender = ConsoleEmailSender()

    state.credential_issuer = JwtCredentialIssuer(
        secret=settings.token_secret,
        algorithm=settings.token_algorithm,
        ttl=timedelta(minutes=settings.token_ttl_minutes),
    )
    state.password_hasher = PasswordHasher(rounds=settings.bcrypt_cost)


def shutdown_adapters(app: FastAPI) -> None:
    """Release pooled connections opened by wire_adapters."""
    pool = getattr(app.state, "pool", None)
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")

    session_store = getattr(app.state, "session_store", None)
    if isinstance(session_store, RedisPendingRegistrationStore):
        session_store.close()
