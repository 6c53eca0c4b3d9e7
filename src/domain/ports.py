"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from typing import Protocol

from .models import AuditLogEntry, NewUser, PendingRegistration, SessionClaims, User


class PendingRegistrationStore(Protocol):
    """
    Port interface for the session-scoped pending registration.

    Keyed by an opaque session identifier, never by email. Entries share
    the session's TTL, so no cleanup sweep exists. Implementations must
    make each single-key operation atomic, including the read-modify-write
    ones (record_attempt, discard_if_current).
    """

    def load(self, session_id: str) -> PendingRegistration | None:
        """Return the session's pending registration, or None."""
        ...

    def save(self, session_id: str, registration: PendingRegistration) -> None:
        """Replace the session's pending registration (no merge)."""
        ...

    def record_attempt(self, session_id: str) -> PendingRegistration | None:
        """
        Count one OTP submission against the stored registration.

        The increment is applied to whatever is stored at that moment, so
        concurrent submissions each see a distinct count.

        Returns:
            The registration as stored after the increment, or None if the
            session holds none
        """
        ...

    def discard(self, session_id: str) -> None:
        """Drop the session's pending registration. Missing is not an error."""
        ...

    def discard_if_current(self, session_id: str, otp_hash: str) -> bool:
        """
        Drop the pending registration only while ``otp_hash`` is its OTP.

        A registration whose code was rotated since the caller read it
        is left alone.

        Returns:
            True if an entry was dropped
        """
        ...


class UserDirectory(Protocol):
    """Port interface for durable, verified accounts."""

    def find_by_email(self, email: str) -> User | None:
        """
        Look up a user by normalized email.

        Args:
            email: Normalized email address

        Returns:
            The user, or None if no account exists
        """
        ...

    def create(self, new_user: NewUser) -> User:
        """
        Persist a new verified account.

        Raises:
            EmailAlreadyRegistered: If the email is already taken
        """
        ...

    def set_reset_token(self, user_id: int, token_hash: str, expiry: datetime) -> None:
        """Store a password reset token digest and its expiry."""
        ...

    def update_password(self, user_id: int, password_hash: str) -> None:
        """Replace the password hash and clear any reset token."""
        ...


class AuditLog(Protocol):
    """Port interface for the append-only activity log."""

    def append(self, entry: AuditLogEntry) -> None:
        ...


class EmailSender(Protocol):
    """Port interface for email delivery. Failures raise."""

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send a signup OTP to an email address.

        Args:
            email: Recipient email address
            code: Plaintext OTP (the only place it ever leaves the server)
        """
        ...

    def send_password_reset_link(self, email: str, reset_url: str) -> None:
        ...

    def send_password_reset_confirmation(self, email: str) -> None:
        ...


class CredentialIssuer(Protocol):
    """Port interface for signed session credentials."""

    def issue(self, user: User) -> str:
        """Mint a signed, time-limited token carrying the user's identity."""
        ...

    def verify(self, token: str) -> SessionClaims:
        """
        Check signature and expiry.

        Raises:
            NotAuthenticated: If the token is malformed, forged, or expired
        """
        ...
