"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- A recording email sender that captures OTPs and reset links
- Fast (low-cost) bcrypt hashing
- In-memory adapters and a fully wired test application
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryAuditLog, InMemoryUserDirectory
from src.adapters.sessions.memory import InMemoryPendingRegistrationStore
from src.adapters.tokens.jwt_issuer import JwtCredentialIssuer
from src.api.main import create_app
from src.config.settings import Settings
from src.domain.security import PasswordHasher
from tests.support import TEST_TOKEN_SECRET, FrozenClock, RecordingEmailSender


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    """bcrypt at its minimum cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def session_store() -> InMemoryPendingRegistrationStore:
    return InMemoryPendingRegistrationStore(ttl_seconds=3600)


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def audit_log() -> InMemoryAuditLog:
    return InMemoryAuditLog()


@pytest.fixture
def issuer() -> JwtCredentialIssuer:
    return JwtCredentialIssuer(secret=TEST_TOKEN_SECRET)


@pytest.fixture
def settings() -> Settings:
    """Settings for a self-contained app: in-memory stores, console mail."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        session_backend="memory",
        email_backend="console",
        token_secret=TEST_TOKEN_SECRET,
        cookie_secure=False,
        bcrypt_cost=4,
        frontend_url="https://app.ladx.test",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI, email_sender: RecordingEmailSender) -> Generator[TestClient, None, None]:
    """Test client with lifespan run and the recording mailer swapped in."""
    with TestClient(app) as test_client:
        app.state.email_sender = email_sender
        yield test_client
