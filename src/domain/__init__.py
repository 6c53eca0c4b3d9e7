"""
Domain layer - Pure business logic with zero framework imports.

This package contains the signup/OTP state machine, login/logout and
password reset flows. It defines its own port interfaces for
infrastructure abstraction, ensuring hexagonal architecture decoupling.
"""

from .authentication import AuthenticationService
from .exceptions import (
    AuthError,
    AuthServiceError,
    ConflictError,
    DependencyError,
    EmailAlreadyRegistered,
    EmailDispatchFailed,
    InvalidCredentials,
    InvalidOtp,
    InvalidResetToken,
    NoPendingRegistration,
    NotAuthenticated,
    OtpAttemptsExceeded,
    OtpExpired,
    SessionStoreUnavailable,
    ValidationFailed,
)
from .models import (
    AuditLogEntry,
    AuthenticatedSession,
    NewUser,
    PendingRegistration,
    RegistrationState,
    SessionClaims,
    User,
)
from .password_reset import PasswordResetService
from .ports import AuditLog, CredentialIssuer, EmailSender, PendingRegistrationStore, UserDirectory
from .registration import RegistrationService

__all__ = [
    "AuditLog",
    "AuditLogEntry",
    "AuthError",
    "AuthServiceError",
    "AuthenticatedSession",
    "AuthenticationService",
    "ConflictError",
    "CredentialIssuer",
    "DependencyError",
    "EmailAlreadyRegistered",
    "EmailDispatchFailed",
    "EmailSender",
    "InvalidCredentials",
    "InvalidOtp",
    "InvalidResetToken",
    "NewUser",
    "NoPendingRegistration",
    "NotAuthenticated",
    "OtpAttemptsExceeded",
    "OtpExpired",
    "PasswordResetService",
    "PendingRegistration",
    "PendingRegistrationStore",
    "RegistrationService",
    "RegistrationState",
    "SessionClaims",
    "SessionStoreUnavailable",
    "User",
    "UserDirectory",
    "ValidationFailed",
]
