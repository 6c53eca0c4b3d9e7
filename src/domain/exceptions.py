"""
Domain exceptions - Semantic error types for registration and authentication.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Taxonomy:
- ValidationFailed: malformed input, field-level detail is safe to reveal
- ConflictError: email already registered, safe to reveal
- AuthError: credential/OTP/session failures, deliberately low-detail
- DependencyError: directory, session store, or mailer failure
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Base class for all domain errors."""

    pass


class ValidationFailed(AuthServiceError):
    """Input failed validation; carries one message per offending field."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__("Validation failed")
        self.errors = errors


class ConflictError(AuthServiceError):
    """Request conflicts with durable state."""

    pass


class EmailAlreadyRegistered(ConflictError):
    """A verified account already exists for this email."""

    pass


class AuthError(AuthServiceError):
    """Authentication failure. Messages stay generic on purpose."""

    message = "Authentication failed"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (indistinguishable)."""

    message = "Invalid email or password"


class InvalidOtp(AuthError):
    """Submitted OTP does not match the current one."""

    message = "Invalid OTP"


class OtpExpired(AuthError):
    """OTP window closed; the pending registration was discarded."""

    message = "OTP expired, please sign up again"


class OtpAttemptsExceeded(AuthError):
    """Too many wrong OTP submissions; the pending registration was discarded."""

    message = "Too many invalid attempts, please sign up again"


class NoPendingRegistration(AuthError):
    """The session holds no registration awaiting verification."""

    message = "Registration session expired or missing"


class NotAuthenticated(AuthError):
    """Session credential missing, malformed, forged, or expired."""

    message = "Not authenticated"


class InvalidResetToken(AuthError):
    """Password reset token unknown, mismatched, expired, or already used."""

    message = "Invalid or expired token"


class DependencyError(AuthServiceError):
    """An external collaborator failed. Details are logged, never returned."""

    pass


class EmailDispatchFailed(DependencyError):
    """The mailer could not deliver a message."""

    pass


class SessionStoreUnavailable(DependencyError):
    """The session backing store could not be reached."""

    pass


@contextmanager
def dependency_guard(collaborator: str) -> Iterator[None]:
    """
    Convert unexpected collaborator failures into DependencyError.

    Domain errors raised inside the block pass through unchanged.

    Args:
        collaborator: Name used in the log line and error message
    """
    try:
        yield
    except AuthServiceError:
        raise
    except Exception as e:
        logger.exception("%s failure", collaborator)
        raise DependencyError(f"{collaborator} unavailable") from e
