"""
Password reset domain service.

Same hash-compare-expire pattern as the signup OTP, applied to a random
token stored on the durable user record. The token is single use: a
successful reset clears it.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from urllib.parse import urlencode

from .audit import record_activity
from .exceptions import InvalidResetToken, dependency_guard
from .models import Clock, utc_now
from .ports import AuditLog, EmailSender, UserDirectory
from .security import PasswordHasher, digest_reset_token, generate_reset_token, reset_token_matches
from .validation import normalize_email

logger = logging.getLogger(__name__)


@dataclass
class PasswordResetService:
    """Domain service for forgot/reset password."""

    directory: UserDirectory
    audit_log: AuditLog
    email_sender: EmailSender
    frontend_url: str
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    token_window: timedelta = timedelta(minutes=15)
    clock: Clock = utc_now

    def forgot_password(self, email: str) -> None:
        """
        Issue a reset token and email a link containing it.

        Returns normally whether or not the account exists, so callers can
        answer with the same generic message either way. Mail failures are
        logged, not raised, for the same reason.
        """
        normalized_email = normalize_email(email)
        with dependency_guard("user directory"):
            user = self.directory.find_by_email(normalized_email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = generate_reset_token()
        with dependency_guard("user directory"):
            self.directory.set_reset_token(
                user.id, digest_reset_token(token), self.clock() + self.token_window
            )
        record_activity(self.audit_log, user.email, "Password reset requested", self.clock)

        try:
            self.email_sender.send_password_reset_link(user.email, self.reset_url(token, user.email))
        except Exception as e:
            logger.warning("Password reset email to %s could not be sent: %s", user.email, e)

    def reset_password(self, token: str, email: str, new_password: str) -> None:
        """
        Replace the password if the presented token is current.

        Raises:
            InvalidResetToken: Unknown email, wrong token, or expired token
        """
        normalized_email = normalize_email(email)
        with dependency_guard("user directory"):
            user = self.directory.find_by_email(normalized_email)

        if (
            user is None
            or not reset_token_matches(token, user.reset_token_hash)
            or user.reset_token_expiry is None
            or self.clock() >= user.reset_token_expiry
        ):
            record_activity(self.audit_log, normalized_email, "Password reset failed", self.clock)
            raise InvalidResetToken()

        with dependency_guard("user directory"):
            self.directory.update_password(user.id, self.hasher.hash(new_password))
        record_activity(self.audit_log, user.email, "Password reset completed", self.clock)

        try:
            self.email_sender.send_password_reset_confirmation(user.email)
        except Exception as e:
            logger.warning("Reset confirmation to %s could not be sent: %s", user.email, e)

    def reset_url(self, token: str, email: str) -> str:
        query = urlencode({"token": token, "email": email})
        return f"{self.frontend_url.rstrip('/')}/reset-password?{query}"
