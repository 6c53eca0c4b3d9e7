"""
Registration domain service - signup/OTP state machine.

This module contains the core business logic for user registration:
capturing a pending registration in the client's session, issuing and
rotating a one-time passcode, and materializing a durable account once
the passcode is confirmed.

State Machine (per client session)
==================================

States:
- NO_PENDING: Session holds no registration
- PENDING_OTP: Registration captured, waiting for the emailed OTP
- VERIFIED: OTP confirmed, user created, pending registration consumed
- EXPIRED: OTP window closed when checked, pending registration discarded
- LOCKED: Attempt limit reached, pending registration discarded

Transitions:
    NO_PENDING  -> PENDING_OTP  (sign_up)
    PENDING_OTP -> PENDING_OTP  (sign_up again, resend_otp, wrong code)
    PENDING_OTP -> VERIFIED     (verify_otp with the current code)
    PENDING_OTP -> EXPIRED      (verify_otp after otp_expiry)
    PENDING_OTP -> LOCKED       (verify_otp wrong too many times)

Expiry is evaluated lazily on verify. Nothing else reads a pending
registration, so no background timer is needed; the session store's TTL
reclaims abandoned ones.

The plaintext OTP exists only in memory between generation and dispatch.
Only its bcrypt hash is written to the session.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from .audit import record_activity
from .exceptions import (
    EmailAlreadyRegistered,
    EmailDispatchFailed,
    InvalidOtp,
    NoPendingRegistration,
    OtpAttemptsExceeded,
    OtpExpired,
    dependency_guard,
)
from .models import (
    AuthenticatedSession,
    Clock,
    NewUser,
    PendingRegistration,
    RegistrationState,
    utc_now,
)
from .ports import (
    AuditLog,
    CredentialIssuer,
    EmailSender,
    PendingRegistrationStore,
    UserDirectory,
)
from .security import PasswordHasher, generate_otp
from .validation import normalize_email

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: email normalization, password
    and OTP hashing, pending-state persistence in the session, OTP
    dispatch, and account creation on verification.
    """

    sessions: PendingRegistrationStore
    directory: UserDirectory
    audit_log: AuditLog
    email_sender: EmailSender
    credentials: CredentialIssuer
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    otp_length: int = 6
    otp_window: timedelta = timedelta(minutes=10)
    max_attempts: int = 5
    clock: Clock = utc_now

    def sign_up(
        self,
        session_id: str,
        *,
        fullname: str,
        email: str,
        country: str,
        state: str,
        phone: str,
        password: str,
    ) -> PendingRegistration:
        """
        Capture a registration in the session and email an OTP.

        Any previous pending registration for this session is replaced.

        Args:
            session_id: Opaque client session identifier
            fullname, email, country, state, phone: Profile fields
            password: Plaintext password (hashed here, never retained)

        Returns:
            The stored pending registration

        Raises:
            EmailAlreadyRegistered: If a verified account uses this email
            EmailDispatchFailed: If the OTP could not be sent; the pending
                registration is kept so the client can resend
        """
        normalized_email = normalize_email(email)

        with dependency_guard("user directory"):
            existing = self.directory.find_by_email(normalized_email)
        if existing is not None:
            raise EmailAlreadyRegistered(normalized_email)

        otp = generate_otp(self.otp_length)
        registration = PendingRegistration(
            fullname=fullname.strip(),
            email=normalized_email,
            country=country.strip(),
            state=state.strip(),
            phone=phone.strip(),
            password_hash=self.hasher.hash(password),
            otp_hash=self.hasher.hash(otp),
            otp_expiry=self.clock() + self.otp_window,
        )

        with dependency_guard("session store"):
            self.sessions.save(session_id, registration)
        record_activity(self.audit_log, normalized_email, "Signup started", self.clock)

        self._dispatch(normalized_email, otp)
        return registration

    def verify_otp(self, session_id: str, otp: str) -> AuthenticatedSession:
        """
        Confirm the OTP and materialize the account.

        This is the only place a User is created. User creation and OTP
        consumption form one step: the pending registration is removed only
        after the directory accepted the new account, so a persistence
        failure leaves it intact for another verify attempt.

        Every submission is counted by the store before the code is
        compared, and a wrong code never writes the registration back, so
        a concurrent resend is never undone.

        Raises:
            NoPendingRegistration: Session holds no registration
            OtpExpired: Window closed (pending registration discarded)
            OtpAttemptsExceeded: Attempt limit reached (pending discarded)
            InvalidOtp: Code mismatch (pending registration kept)
            EmailAlreadyRegistered: Another session verified the same email first
            DependencyError: Directory or session store failed
        """
        with dependency_guard("session store"):
            registration = self.sessions.record_attempt(session_id)
        if registration is None:
            raise NoPendingRegistration()
        email = registration.email

        if self.clock() >= registration.otp_expiry:
            self._discard_current(session_id, registration)
            record_activity(self.audit_log, email, "OTP verification failed: expired", self.clock)
            raise OtpExpired(email)
        if self.max_attempts and registration.failed_attempts > self.max_attempts:
            self._discard_current(session_id, registration)
            record_activity(self.audit_log, email, "OTP verification failed: locked", self.clock)
            raise OtpAttemptsExceeded(email)

        if not self.hasher.verify(otp, registration.otp_hash):
            self._reject_code(session_id, registration)

        try:
            with dependency_guard("user directory"):
                user = self.directory.create(NewUser.from_pending(registration))
        except EmailAlreadyRegistered:
            self._discard(session_id)
            raise

        record_activity(self.audit_log, email, "User Verified OTP", self.clock)
        record_activity(
            self.audit_log, email, f"New user created with email: {email}", self.clock
        )
        self._discard(session_id)

        logger.info("Account created for %s (id=%s)", email, user.id)
        return AuthenticatedSession(user=user, token=self.credentials.issue(user))

    def resend_otp(self, session_id: str) -> PendingRegistration:
        """
        Rotate the OTP of the session's pending registration and re-send it.

        The previous OTP hash is overwritten, so only the newest code is
        ever valid. Profile fields are untouched.

        Raises:
            NoPendingRegistration: Session holds no registration
            EmailDispatchFailed: If the new OTP could not be sent
        """
        registration = self._load(session_id)

        otp = generate_otp(self.otp_length)
        rotated = registration.rotate_otp(
            otp_hash=self.hasher.hash(otp),
            otp_expiry=self.clock() + self.otp_window,
        )
        with dependency_guard("session store"):
            self.sessions.save(session_id, rotated)
        record_activity(self.audit_log, rotated.email, "OTP resent", self.clock)

        self._dispatch(rotated.email, otp)
        return rotated

    def status(self, session_id: str) -> RegistrationState:
        """Current state of the session's registration, without side effects."""
        with dependency_guard("session store"):
            registration = self.sessions.load(session_id)
        if registration is None:
            return RegistrationState.NO_PENDING
        return registration.status(self.clock(), self.max_attempts)

    def _load(self, session_id: str) -> PendingRegistration:
        with dependency_guard("session store"):
            registration = self.sessions.load(session_id)
        if registration is None:
            raise NoPendingRegistration()
        return registration

    def _discard(self, session_id: str) -> None:
        with dependency_guard("session store"):
            self.sessions.discard(session_id)

    def _discard_current(self, session_id: str, registration: PendingRegistration) -> None:
        # A concurrent resend may have rotated the code; its registration stays.
        with dependency_guard("session store"):
            self.sessions.discard_if_current(session_id, registration.otp_hash)

    def _reject_code(self, session_id: str, registration: PendingRegistration) -> None:
        """Lock out at the limit, and raise. The attempt is already counted."""
        email = registration.email
        record_activity(self.audit_log, email, "OTP verification failed: invalid code", self.clock)

        if self.max_attempts and registration.failed_attempts >= self.max_attempts:
            self._discard_current(session_id, registration)
            logger.warning("OTP attempt limit reached for %s", email)
            raise OtpAttemptsExceeded(email)

        raise InvalidOtp(email)

    def _dispatch(self, email: str, otp: str) -> None:
        try:
            self.email_sender.send_verification_code(email, otp)
        except Exception as e:
            logger.warning("OTP email to %s could not be sent: %s", email, e)
            raise EmailDispatchFailed(email) from e
