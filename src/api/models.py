"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Each entry point validates its whole body once; every field error is
collected and returned together.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, EmailStr, Field, ValidationInfo, field_validator

from src.domain.validation import password_policy_errors

OTP_PATTERN = r"^\d{4,10}$"  # exact length is checked against settings.otp_length


def _check_password(value: str) -> str:
    errors = password_policy_errors(value)
    if errors:
        raise ValueError("; ".join(errors))
    return value


class SignUpRequest(BaseModel):
    """Request model for user signup."""

    fullname: str = Field(..., min_length=3, max_length=30, description="Full name")
    email: EmailStr
    country: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=r"^\d{7,15}$", description="Digits only")
    password: str = Field(..., description="Min 8 chars with upper, lower, digit and symbol")
    confirm_password: str

    @field_validator("fullname", "country", "state", "phone", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password(value)

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # Skipped when password itself failed; that error is already reported.
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class VerifyOtpRequest(BaseModel):
    """Request model for OTP verification."""

    otp: str = Field(
        ...,
        pattern=OTP_PATTERN,
        validation_alias=AliasChoices("otp", "email_verification_code"),
        description="Numeric code from the verification email",
    )


class LoginRequest(BaseModel):
    """Request model for credential login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request model for completing a password reset."""

    token: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., validation_alias=AliasChoices("password", "newPassword"))
    confirm_password: str | None = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password(value)

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is not None and "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class StatusResponse(BaseModel):
    """Envelope shared by every successful response."""

    status: str = "00"
    success: bool = True
    message: str


class SignUpResponse(StatusResponse):
    email: str
    expires_in_seconds: int


class UserSummary(BaseModel):
    id: int
    email: str
    fullname: str


class SessionResponse(StatusResponse):
    """Returned when a session credential cookie was just set."""

    user: UserSummary


class MeResponse(BaseModel):
    id: int
    email: str
    expires_at: datetime


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: str = "E00"
    success: bool = False
    message: str
    errors: list[FieldError] | None = None
