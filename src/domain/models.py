"""
Domain models - Plain data carried between the services and their ports.

PendingRegistration lives only inside a client session; User and
AuditLogEntry are owned by the durable collaborators. None of these types
ever holds a plaintext password, OTP, or reset token.
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class RegistrationState(str, Enum):
    """
    Registration/OTP state machine states, scoped to one client session.

    Transitions:
    - NO_PENDING -> PENDING_OTP (sign up)
    - PENDING_OTP -> PENDING_OTP (resend, wrong code below the attempt limit)
    - PENDING_OTP -> VERIFIED (correct code, user materialized)
    - PENDING_OTP -> EXPIRED (code checked after its window closed)
    - PENDING_OTP -> LOCKED (attempt limit reached)

    VERIFIED, EXPIRED and LOCKED all discard the pending registration, so
    the session returns to NO_PENDING afterwards.
    """

    NO_PENDING = "NO_PENDING"
    PENDING_OTP = "PENDING_OTP"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    LOCKED = "LOCKED"


@dataclass(frozen=True)
class PendingRegistration:
    """In-flight signup awaiting OTP confirmation."""

    fullname: str
    email: str
    country: str
    state: str
    phone: str
    password_hash: str
    otp_hash: str
    otp_expiry: datetime
    failed_attempts: int = 0

    def status(self, now: datetime, max_attempts: int = 0) -> RegistrationState:
        """
        Evaluate the lazy state of this registration at ``now``.

        Expiry is checked first: an expired code is never compared. A
        ``max_attempts`` of 0 disables the attempt limit.
        """
        if now >= self.otp_expiry:
            return RegistrationState.EXPIRED
        if max_attempts and self.failed_attempts >= max_attempts:
            return RegistrationState.LOCKED
        return RegistrationState.PENDING_OTP

    def rotate_otp(self, otp_hash: str, otp_expiry: datetime) -> "PendingRegistration":
        """Return a copy with a fresh OTP; profile fields are untouched."""
        return replace(self, otp_hash=otp_hash, otp_expiry=otp_expiry, failed_attempts=0)

    def with_failed_attempt(self) -> "PendingRegistration":
        return replace(self, failed_attempts=self.failed_attempts + 1)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for a session store (JSON-safe)."""
        data = asdict(self)
        data["otp_expiry"] = self.otp_expiry.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingRegistration":
        values = dict(data)
        values["otp_expiry"] = datetime.fromisoformat(values["otp_expiry"])
        return cls(**values)


@dataclass
class User:
    """Durable, verified account held by the user directory."""

    id: int
    email: str
    fullname: str
    country: str
    state: str
    phone: str
    password_hash: str
    email_verified: bool = True
    reset_token_hash: str | None = None
    reset_token_expiry: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class NewUser:
    """Fields captured at signup, handed to the directory on verification."""

    email: str
    fullname: str
    country: str
    state: str
    phone: str
    password_hash: str

    @classmethod
    def from_pending(cls, pending: PendingRegistration) -> "NewUser":
        return cls(
            email=pending.email,
            fullname=pending.fullname,
            country=pending.country,
            state=pending.state,
            phone=pending.phone,
            password_hash=pending.password_hash,
        )


@dataclass(frozen=True)
class AuditLogEntry:
    """Append-only record of a security-relevant action."""

    email: str
    activity_name: str
    added_on: datetime


@dataclass(frozen=True)
class SessionClaims:
    """Identity asserted by a verified session credential."""

    user_id: int
    email: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthenticatedSession:
    """A user paired with the session credential just issued for them."""

    user: User
    token: str
