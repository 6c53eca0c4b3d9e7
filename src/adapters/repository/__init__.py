"""Repository adapters - User directory and audit log implementations."""

from .memory import InMemoryAuditLog, InMemoryUserDirectory
from .postgres import PostgresAuditLog, PostgresUserDirectory, run_migrations

__all__ = [
    "InMemoryAuditLog",
    "InMemoryUserDirectory",
    "PostgresAuditLog",
    "PostgresUserDirectory",
    "run_migrations",
]
