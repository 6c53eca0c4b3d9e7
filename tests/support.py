"""Test doubles shared across the suite."""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from src.domain.security import PasswordHasher

TEST_TOKEN_SECRET = "test-secret-key-with-enough-length-for-hs256"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailSender:
    """EmailSender that keeps every message instead of delivering it."""

    def __init__(self) -> None:
        self.codes: list[tuple[str, str]] = []
        self.reset_links: list[tuple[str, str]] = []
        self.confirmations: list[str] = []
        self.fail = False

    def send_verification_code(self, email: str, code: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.codes.append((email, code))

    def send_password_reset_link(self, email: str, reset_url: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.reset_links.append((email, reset_url))

    def send_password_reset_confirmation(self, email: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.confirmations.append(email)

    @property
    def last_code(self) -> str:
        return self.codes[-1][1]




class ObservedHasher(PasswordHasher):
    """
    Low-cost PasswordHasher that counts comparisons.

    ``before_next_compare`` runs once, just before the next comparison,
    to interleave another request with a verification in flight.
    """

    def __init__(self) -> None:
        super().__init__(rounds=4)
        self.comparisons = 0
        self.before_next_compare: Callable[[], object] | None = None
        self._lock = threading.Lock()

    def verify(self, secret: str, hashed: str) -> bool:
        with self._lock:
            self.comparisons += 1
            hook, self.before_next_compare = self.before_next_compare, None
        if hook is not None:
            hook()
        return super().verify(secret, hashed)
