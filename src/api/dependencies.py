"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

from fastapi import Request

from src.config.settings import Settings
from src.domain.authentication import AuthenticationService
from src.domain.password_reset import PasswordResetService
from src.domain.registration import RegistrationService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_session_id(request: Request) -> str:
    """
    Opaque session identifier for this client.

    Set by the session cookie middleware; marking it used makes the
    middleware send the cookie back.
    """
    request.state.session_used = True
    return request.state.session_id


def get_session_token(request: Request) -> str | None:
    """
    Session credential from the auth cookie, or a Bearer Authorization header.
    """
    settings = get_app_settings(request)
    token = request.cookies.get(settings.token_cookie_name)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the session store, user directory, audit log, mailer
    and credential issuer for the domain service.
    """
    state = request.app.state
    settings: Settings = state.settings
    return RegistrationService(
        sessions=state.session_store,
        directory=state.user_directory,
        audit_log=state.audit_log,
        email_sender=state.email_sender,
        credentials=state.credential_issuer,
        hasher=state.password_hasher,
        otp_length=settings.otp_length,
        otp_window=timedelta(minutes=settings.otp_window_minutes),
        max_attempts=settings.otp_max_attempts,
    )


def get_authentication_service(request: Request) -> AuthenticationService:
    state = request.app.state
    return AuthenticationService(
        directory=state.user_directory,
        audit_log=state.audit_log,
        credentials=state.credential_issuer,
        sessions=state.session_store,
        hasher=state.password_hasher,
    )


def get_password_reset_service(request: Request) -> PasswordResetService:
    state = request.app.state
    settings: Settings = state.settings
    return PasswordResetService(
        directory=state.user_directory,
        audit_log=state.audit_log,
        email_sender=state.email_sender,
        frontend_url=settings.frontend_url,
        hasher=state.password_hasher,
        token_window=timedelta(minutes=settings.reset_token_window_minutes),
    )
