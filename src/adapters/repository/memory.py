"""
In-memory repository adapters - UserDirectory and AuditLog for development and tests.

Same contracts as the PostgreSQL adapters, including email uniqueness.
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.models import AuditLogEntry, NewUser, User


class InMemoryUserDirectory:
    """Implements UserDirectory protocol with a locked dict keyed by email."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._users: dict[str, User] = {}

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            user = self._users.get(email)
            return replace(user) if user is not None else None

    def create(self, new_user: NewUser) -> User:
        with self._lock:
            if new_user.email in self._users:
                raise EmailAlreadyRegistered(new_user.email)
            user = User(
                id=next(self._ids),
                email=new_user.email,
                fullname=new_user.fullname,
                country=new_user.country,
                state=new_user.state,
                phone=new_user.phone,
                password_hash=new_user.password_hash,
            )
            self._users[user.email] = user
            return replace(user)

    def set_reset_token(self, user_id: int, token_hash: str, expiry: datetime) -> None:
        with self._lock:
            user = self._by_id(user_id)
            user.reset_token_hash = token_hash
            user.reset_token_expiry = expiry

    def update_password(self, user_id: int, password_hash: str) -> None:
        with self._lock:
            user = self._by_id(user_id)
            user.password_hash = password_hash
            user.reset_token_hash = None
            user.reset_token_expiry = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def _by_id(self, user_id: int) -> User:
        for user in self._users.values():
            if user.id == user_id:
                return user
        raise KeyError(user_id)


class InMemoryAuditLog:
    """Implements AuditLog protocol as an append-only list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[AuditLogEntry] = []

    def append(self, entry: AuditLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries_for(self, email: str) -> list[AuditLogEntry]:
        with self._lock:
            return [e for e in self._entries if e.email == email]

    @property
    def entries(self) -> list[AuditLogEntry]:
        with self._lock:
            return list(self._entries)
