"""
Shared fixtures for adversarial tests.

Provides a registration service over thread-safe in-memory stores, so
brute force and race scenarios run without external services.
"""

from collections.abc import Callable

import pytest

from src.adapters.repository.memory import InMemoryAuditLog, InMemoryUserDirectory
from src.adapters.sessions.memory import InMemoryPendingRegistrationStore
from src.adapters.tokens.jwt_issuer import JwtCredentialIssuer
from src.domain.registration import RegistrationService
from src.domain.security import PasswordHasher
from tests.support import RecordingEmailSender

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def registration_service(
    session_store: InMemoryPendingRegistrationStore,
    directory: InMemoryUserDirectory,
    audit_log: InMemoryAuditLog,
    email_sender: RecordingEmailSender,
    issuer: JwtCredentialIssuer,
    hasher: PasswordHasher,
) -> RegistrationService:
    return RegistrationService(
        sessions=session_store,
        directory=directory,
        audit_log=audit_log,
        email_sender=email_sender,
        credentials=issuer,
        hasher=hasher,
    )


@pytest.fixture
def start_signup(
    registration_service: RegistrationService, email_sender: RecordingEmailSender
) -> Callable[..., str]:
    """Sign up in ``session_id`` and return the emailed OTP."""

    def _start(session_id: str, email: str = "victim@example.com") -> str:
        registration_service.sign_up(
            session_id,
            fullname="Victim User",
            email=email,
            country="NG",
            state="Lagos",
            phone="08011112222",
            password="Str0ngPass!",
        )
        return email_sender.last_code

    return _start
