"""
Authentication domain service - login, logout and token verification.

Login never distinguishes an unknown email from a wrong password: both
paths run one bcrypt comparison and raise the same InvalidCredentials.
"""

import logging
from dataclasses import dataclass, field

from .audit import record_activity
from .exceptions import InvalidCredentials, NotAuthenticated, dependency_guard
from .models import AuthenticatedSession, Clock, SessionClaims, utc_now
from .ports import AuditLog, CredentialIssuer, PendingRegistrationStore, UserDirectory
from .security import PasswordHasher
from .validation import normalize_email

logger = logging.getLogger(__name__)


@dataclass
class AuthenticationService:
    """Domain service for credential login and session teardown."""

    directory: UserDirectory
    audit_log: AuditLog
    credentials: CredentialIssuer
    sessions: PendingRegistrationStore
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    clock: Clock = utc_now

    def login(self, email: str, password: str) -> AuthenticatedSession:
        """
        Check credentials and issue a session credential.

        Raises:
            InvalidCredentials: Unknown email or wrong password
        """
        normalized_email = normalize_email(email)
        with dependency_guard("user directory"):
            user = self.directory.find_by_email(normalized_email)

        if user is None:
            self.hasher.burn(password)
            valid = False
        else:
            valid = self.hasher.verify(password, user.password_hash)

        if not valid:
            record_activity(self.audit_log, normalized_email, "Failed login attempt", self.clock)
            raise InvalidCredentials()

        record_activity(
            self.audit_log, user.email, f"Logged in with credential: {user.email}", self.clock
        )
        return AuthenticatedSession(user=user, token=self.credentials.issue(user))

    def authenticate(self, token: str | None) -> SessionClaims:
        """
        Verify a session credential by signature and expiry only.

        Raises:
            NotAuthenticated: Token missing or invalid
        """
        if not token:
            raise NotAuthenticated()
        return self.credentials.verify(token)

    def logout(self, token: str | None, session_id: str | None = None) -> SessionClaims:
        """
        End a session.

        The token is verified first so the audit entry can be attributed;
        a missing or invalid token is reported rather than treated as success.
        Any server-side session state is destroyed.

        Returns:
            Claims of the credential that was logged out

        Raises:
            NotAuthenticated: Token missing or invalid
        """
        claims = self.authenticate(token)
        record_activity(self.audit_log, claims.email, "User logged out", self.clock)
        if session_id:
            with dependency_guard("session store"):
                self.sessions.discard(session_id)
        return claims
