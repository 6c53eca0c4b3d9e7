"""Session store adapters - Pending registration storage."""

from .memory import InMemoryPendingRegistrationStore
from .redis_store import RedisPendingRegistrationStore

__all__ = ["InMemoryPendingRegistrationStore", "RedisPendingRegistrationStore"]
