"""
In-memory session store adapter - Implements PendingRegistrationStore protocol.

Single-process only: suitable for development and tests. Multi-process
deployments need the Redis adapter so the OTP round trip can land on any
worker.
"""

import threading
import time
from collections.abc import Callable
from typing import Any

from src.domain.models import PendingRegistration


class InMemoryPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol with a locked dict.

    Entries expire ``ttl_seconds`` after their last write, mirroring a
    rolling session TTL. Values are stored serialized so callers never
    share mutable state with the store.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    def load(self, session_id: str) -> PendingRegistration | None:
        with self._lock:
            return self._live(session_id)

    def save(self, session_id: str, registration: PendingRegistration) -> None:
        with self._lock:
            self._put(session_id, registration)

    def record_attempt(self, session_id: str) -> PendingRegistration | None:
        with self._lock:
            registration = self._live(session_id)
            if registration is None:
                return None
            counted = registration.with_failed_attempt()
            self._put(session_id, counted)
            return counted

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def discard_if_current(self, session_id: str, otp_hash: str) -> bool:
        with self._lock:
            registration = self._live(session_id)
            if registration is None or registration.otp_hash != otp_hash:
                return False
            del self._entries[session_id]
            return True

    # Callers hold self._lock.

    def _live(self, session_id: str) -> PendingRegistration | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        expires_at, data = entry
        if self._clock() >= expires_at:
            del self._entries[session_id]
            return None
        return PendingRegistration.from_dict(data)

    def _put(self, session_id: str, registration: PendingRegistration) -> None:
        self._entries[session_id] = (self._clock() + self._ttl, registration.to_dict())

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for expires_at, _ in self._entries.values() if expires_at > now)
