"""
Unit tests for the in-memory user directory and audit log.

Tests verify the same contracts the PostgreSQL adapters honour:
- Email uniqueness
- Returned users are copies
- Password update clears reset token fields
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from src.adapters.repository.memory import InMemoryAuditLog, InMemoryUserDirectory
from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.models import AuditLogEntry, NewUser


def new_user(email: str = "ada@x.com") -> NewUser:
    return NewUser(
        email=email,
        fullname="Ada Obi",
        country="NG",
        state="Lagos",
        phone="08011112222",
        password_hash="$2b$04$password",
    )


class TestInMemoryUserDirectory:
    """Tests for InMemoryUserDirectory."""

    def test_create_assigns_id_and_verified(self) -> None:
        directory = InMemoryUserDirectory()
        user = directory.create(new_user())

        assert user.id == 1
        assert user.email_verified is True
        assert user.reset_token_hash is None

    def test_ids_increase(self) -> None:
        directory = InMemoryUserDirectory()
        first = directory.create(new_user("a@x.com"))
        second = directory.create(new_user("b@x.com"))
        assert second.id > first.id

    def test_duplicate_email_rejected(self) -> None:
        directory = InMemoryUserDirectory()
        directory.create(new_user())
        with pytest.raises(EmailAlreadyRegistered):
            directory.create(new_user())
        assert len(directory) == 1

    def test_find_missing(self) -> None:
        assert InMemoryUserDirectory().find_by_email("nobody@x.com") is None

    def test_returned_user_is_a_copy(self) -> None:
        directory = InMemoryUserDirectory()
        user = directory.create(new_user())
        user.password_hash = "tampered"
        assert directory.find_by_email("ada@x.com").password_hash == "$2b$04$password"

    def test_update_password_clears_reset_token(self) -> None:
        directory = InMemoryUserDirectory()
        user = directory.create(new_user())
        directory.set_reset_token(user.id, "d" * 64, datetime(2030, 1, 1, tzinfo=timezone.utc))

        directory.update_password(user.id, "$2b$04$new")

        stored = directory.find_by_email("ada@x.com")
        assert stored.password_hash == "$2b$04$new"
        assert stored.reset_token_hash is None
        assert stored.reset_token_expiry is None

    def test_concurrent_creates_yield_one_user(self) -> None:
        directory = InMemoryUserDirectory()

        def attempt() -> bool:
            try:
                directory.create(new_user())
                return True
            except EmailAlreadyRegistered:
                return False

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: attempt(), range(8)))

        assert results.count(True) == 1
        assert len(directory) == 1


class TestInMemoryAuditLog:
    """Tests for InMemoryAuditLog."""

    def test_entries_filtered_by_email(self) -> None:
        log = InMemoryAuditLog()
        now = datetime(2026, 1, 15, tzinfo=timezone.utc)
        log.append(AuditLogEntry("ada@x.com", "Signup started", now))
        log.append(AuditLogEntry("bola@x.com", "Signup started", now))
        log.append(AuditLogEntry("ada@x.com", "OTP resent", now))

        assert [e.activity_name for e in log.entries_for("ada@x.com")] == [
            "Signup started",
            "OTP resent",
        ]
        assert len(log.entries) == 3
