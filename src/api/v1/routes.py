"""
API v1 routes.

Defines REST endpoints for signup/OTP verification, login/logout and
password reset. Domain errors are translated by the handlers in
src.api.errors.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from src.api.dependencies import (
    get_app_settings,
    get_authentication_service,
    get_password_reset_service,
    get_registration_service,
    get_session_id,
    get_session_token,
)
from src.api.models import (
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MeResponse,
    ResetPasswordRequest,
    SessionResponse,
    SignUpRequest,
    SignUpResponse,
    StatusResponse,
    UserSummary,
    VerifyOtpRequest,
)
from src.api.session import end_session
from src.config.settings import Settings
from src.domain.authentication import AuthenticationService
from src.domain.exceptions import ValidationFailed
from src.domain.models import AuthenticatedSession
from src.domain.password_reset import PasswordResetService
from src.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])

_BAD_REQUEST = {"model": ErrorResponse, "description": "Validation or state error"}
_UNAUTHORIZED = {"model": ErrorResponse, "description": "Not authenticated"}


def _set_token_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.token_cookie_name,
        token,
        max_age=settings.token_ttl_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def _session_response(message: str, session: AuthenticatedSession) -> SessionResponse:
    user = session.user
    return SessionResponse(
        message=message,
        user=UserSummary(id=user.id, email=user.email, fullname=user.fullname),
    )


@router.post(
    "/signup",
    response_model=SignUpResponse,
    responses={
        400: _BAD_REQUEST,
        503: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Start a registration",
    description="Validate the signup form, hold it in the session and email a numeric OTP.",
)
async def signup(
    request_data: SignUpRequest,
    session_id: str = Depends(get_session_id),
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> SignUpResponse:
    """
    Start a registration.

    The OTP is only ever sent by email, never returned here.
    """
    registration = service.sign_up(
        session_id,
        fullname=request_data.fullname,
        email=request_data.email,
        country=request_data.country,
        state=request_data.state,
        phone=request_data.phone,
        password=request_data.password,
    )
    return SignUpResponse(
        message="OTP sent successfully",
        email=registration.email,
        expires_in_seconds=settings.otp_window_minutes * 60,
    )


@router.post(
    "/verify-otp",
    response_model=SessionResponse,
    responses={400: _BAD_REQUEST},
    summary="Verify the signup OTP",
    description="Confirm the emailed OTP. Creates the account and sets the session cookie.",
)
async def verify_otp(
    request_data: VerifyOtpRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    if len(request_data.otp) != settings.otp_length:
        raise ValidationFailed(
            [{"field": "otp", "message": f"OTP must be {settings.otp_length} digits"}]
        )
    session = service.verify_otp(session_id, request_data.otp)
    _set_token_cookie(response, session.token, settings)
    return _session_response("Email verified successfully", session)


@router.post(
    "/resend-otp",
    response_model=StatusResponse,
    responses={400: _BAD_REQUEST},
    summary="Resend the signup OTP",
    description="Issue a new OTP for the pending registration. The previous code stops working.",
)
async def resend_otp(
    session_id: str = Depends(get_session_id),
    service: RegistrationService = Depends(get_registration_service),
) -> StatusResponse:
    service.resend_otp(session_id)
    return StatusResponse(message="OTP resent successfully")


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid email or password"}},
    summary="Log in with email and password",
)
async def login(
    request_data: LoginRequest,
    response: Response,
    service: AuthenticationService = Depends(get_authentication_service),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """
    Log in with email and password.

    Unknown email and wrong password produce the same 401 response.
    """
    session = service.login(request_data.email, request_data.password)
    _set_token_cookie(response, session.token, settings)
    return _session_response("Login successful", session)


@router.post(
    "/logout",
    response_model=StatusResponse,
    responses={401: _UNAUTHORIZED},
    summary="Log out",
)
async def logout(
    request: Request,
    response: Response,
    token: str | None = Depends(get_session_token),
    session_id: str = Depends(get_session_id),
    service: AuthenticationService = Depends(get_authentication_service),
    settings: Settings = Depends(get_app_settings),
) -> StatusResponse:
    service.logout(token, session_id)
    response.delete_cookie(
        settings.token_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    end_session(request)
    return StatusResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: _UNAUTHORIZED},
    summary="Identity of the current session",
)
async def me(
    token: str | None = Depends(get_session_token),
    service: AuthenticationService = Depends(get_authentication_service),
) -> MeResponse:
    claims = service.authenticate(token)
    return MeResponse(id=claims.user_id, email=claims.email, expires_at=claims.expires_at)


@router.post(
    "/forgot-password",
    response_model=StatusResponse,
    responses={400: _BAD_REQUEST},
    summary="Request a password reset link",
    description="Always answers with the same message whether or not the email is registered.",
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> StatusResponse:
    service.forgot_password(request_data.email)
    return StatusResponse(message="If that email is registered, a reset link has been sent")


@router.put(
    "/reset-password",
    response_model=StatusResponse,
    status_code=status.HTTP_200_OK,
    responses={400: _BAD_REQUEST},
    summary="Reset password with an emailed token",
)
async def reset_password(
    request_data: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> StatusResponse:
    service.reset_password(request_data.token, request_data.email, request_data.password)
    return StatusResponse(message="Password has been reset successfully")
