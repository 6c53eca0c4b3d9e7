"""
Redis session store adapter - Implements PendingRegistrationStore protocol.

Each session's pending registration is one JSON value under
``<prefix><session_id>`` written with ``SET ... EX``, so the entry dies
with the session TTL. Plain reads and writes are single key commands; the
read-modify-write operations run as WATCH/MULTI transactions on that key.
"""

import json
import logging

import redis

from src.domain.exceptions import SessionStoreUnavailable
from src.domain.models import PendingRegistration

logger = logging.getLogger(__name__)


class RedisPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol via redis-py.

    The Redis client is thread safe and connections are attached when a
    command executes; this class only holds configuration.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = 3600, prefix: str = "session:") -> None:
        self._r = client
        self._ttl = ttl_seconds
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 3600) -> "RedisPendingRegistrationStore":
        logger.debug("New Redis connection at %s", url)
        return cls(redis.Redis.from_url(url), ttl_seconds=ttl_seconds)

    def load(self, session_id: str) -> PendingRegistration | None:
        try:
            raw = self._r.get(self._key(session_id))
        except redis.exceptions.RedisError as e:
            raise SessionStoreUnavailable(f"Failed to load session: {e}") from e
        registration = self._decode(raw)
        if raw is not None and registration is None:
            logger.warning("Discarding unreadable session entry %s", session_id)
            self.discard(session_id)
        return registration

    def save(self, session_id: str, registration: PendingRegistration) -> None:
        try:
            self._r.set(self._key(session_id), self._encode(registration), ex=self._ttl)
        except redis.exceptions.RedisError as e:
            raise SessionStoreUnavailable(f"Failed to save session: {e}") from e

    def record_attempt(self, session_id: str) -> PendingRegistration | None:
        """
        Increment failed_attempts under WATCH/MULTI.

        redis-py retries the whole callable when the key changes between
        the read and EXEC, so no submission is ever lost.
        """
        key = self._key(session_id)

        def increment(pipe: redis.client.Pipeline) -> PendingRegistration | None:
            registration = self._decode(pipe.get(key))
            if registration is None:
                return None
            counted = registration.with_failed_attempt()
            pipe.multi()
            pipe.set(key, self._encode(counted), ex=self._ttl)
            return counted

        try:
            return self._r.transaction(increment, key, value_from_callable=True)
        except redis.exceptions.RedisError as e:
            raise SessionStoreUnavailable(f"Failed to record OTP attempt: {e}") from e

    def discard(self, session_id: str) -> None:
        try:
            self._r.delete(self._key(session_id))
        except redis.exceptions.RedisError as e:
            raise SessionStoreUnavailable(f"Failed to delete session: {e}") from e

    def discard_if_current(self, session_id: str, otp_hash: str) -> bool:
        key = self._key(session_id)

        def delete_unrotated(pipe: redis.client.Pipeline) -> bool:
            registration = self._decode(pipe.get(key))
            if registration is None or registration.otp_hash != otp_hash:
                return False
            pipe.multi()
            pipe.delete(key)
            return True

        try:
            return self._r.transaction(delete_unrotated, key, value_from_callable=True)
        except redis.exceptions.RedisError as e:
            raise SessionStoreUnavailable(f"Failed to delete session: {e}") from e

    def ping(self) -> bool:
        return bool(self._r.ping())

    def close(self) -> None:
        self._r.close()

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    @staticmethod
    def _encode(registration: PendingRegistration) -> str:
        return json.dumps(registration.to_dict())

    @staticmethod
    def _decode(raw: bytes | str | None) -> PendingRegistration | None:
        if raw is None:
            return None
        try:
            return PendingRegistration.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError):
            return None
