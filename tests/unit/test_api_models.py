"""
Unit tests for API request/response models.

Tests Pydantic model validation for signup, OTP, login and password
reset endpoints.
"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    ErrorResponse,
    LoginRequest,
    ResetPasswordRequest,
    SignUpRequest,
    StatusResponse,
    VerifyOtpRequest,
)

VALID_SIGNUP = {
    "fullname": "Ada Obi",
    "email": "ada@x.com",
    "country": "NG",
    "state": "Lagos",
    "phone": "08011112222",
    "password": "Str0ngPass!",
    "confirm_password": "Str0ngPass!",
}


def error_fields(exc: ValidationError) -> set[str]:
    return {str(e["loc"][0]) for e in exc.errors()}


class TestSignUpRequest:
    """Tests for SignUpRequest model."""

    def test_valid_request(self) -> None:
        request = SignUpRequest(**VALID_SIGNUP)
        assert request.email == "ada@x.com"
        assert request.phone == "08011112222"

    def test_text_fields_are_stripped(self) -> None:
        request = SignUpRequest(**{**VALID_SIGNUP, "fullname": "  Ada Obi  ", "phone": " 08011112222 "})
        assert request.fullname == "Ada Obi"
        assert request.phone == "08011112222"

    def test_email_domain_normalized(self) -> None:
        """EmailStr lowercases the domain only; services lowercase the rest."""
        request = SignUpRequest(**{**VALID_SIGNUP, "email": "Ada@X.COM"})
        assert request.email == "Ada@x.com"

    @pytest.mark.parametrize("fullname", ["Al", "x" * 31, "   "])
    def test_fullname_length(self, fullname: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "fullname": fullname})
        assert error_fields(exc_info.value) == {"fullname"}

    @pytest.mark.parametrize("fullname", ["Ada", "x" * 30])
    def test_fullname_bounds_accepted(self, fullname: str) -> None:
        assert SignUpRequest(**{**VALID_SIGNUP, "fullname": fullname}).fullname == fullname

    @pytest.mark.parametrize("phone", ["123456", "1" * 16, "+2348011112222", "0801-111-2222"])
    def test_phone_digits_only(self, phone: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "phone": phone})
        assert error_fields(exc_info.value) == {"phone"}

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "email": "not-an-email"})
        assert error_fields(exc_info.value) == {"email"}

    def test_weak_password_lists_every_rule(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "password": "short", "confirm_password": "short"})
        [error] = exc_info.value.errors()
        assert error["loc"] == ("password",)
        assert "at least 8 characters" in error["msg"]
        assert "uppercase" in error["msg"]

    def test_confirm_password_mismatch(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "confirm_password": "Str0ngPass?"})
        assert error_fields(exc_info.value) == {"confirm_password"}

    def test_mismatch_not_reported_when_password_invalid(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(**{**VALID_SIGNUP, "password": "weak", "confirm_password": "other"})
        assert error_fields(exc_info.value) == {"password"}


class TestVerifyOtpRequest:
    """Tests for VerifyOtpRequest model."""

    def test_leading_zero_preserved(self) -> None:
        assert VerifyOtpRequest(otp="012345").otp == "012345"

    def test_alias(self) -> None:
        assert VerifyOtpRequest(email_verification_code="482913").otp == "482913"

    @pytest.mark.parametrize("otp", ["123", "12345678901", "abcdef", " 12345"])
    def test_malformed(self, otp: str) -> None:
        with pytest.raises(ValidationError):
            VerifyOtpRequest(otp=otp)


class TestLoginRequest:
    """Tests for LoginRequest model."""

    def test_password_policy_not_applied(self) -> None:
        """Login accepts any non-empty password; only the hash decides."""
        assert LoginRequest(email="ada@x.com", password="x").password == "x"

    def test_empty_password(self) -> None:
        with pytest.raises(ValidationError):
            LoginRequest(email="ada@x.com", password="")


class TestResetPasswordRequest:
    """Tests for ResetPasswordRequest model."""

    def test_new_password_alias(self) -> None:
        request = ResetPasswordRequest(token="abc", email="ada@x.com", newPassword="N3wPassword!")
        assert request.password == "N3wPassword!"

    def test_confirmation_optional_but_checked(self) -> None:
        ResetPasswordRequest(token="abc", email="ada@x.com", password="N3wPassword!")
        with pytest.raises(ValidationError):
            ResetPasswordRequest(
                token="abc",
                email="ada@x.com",
                password="N3wPassword!",
                confirm_password="N3wPassword?",
            )

    def test_policy_applies(self) -> None:
        with pytest.raises(ValidationError):
            ResetPasswordRequest(token="abc", email="ada@x.com", password="weakpass")


class TestEnvelopes:
    """Tests for response envelopes."""

    def test_status_response_defaults(self) -> None:
        assert StatusResponse(message="ok").model_dump() == {
            "status": "00",
            "success": True,
            "message": "ok",
        }

    def test_error_response_defaults(self) -> None:
        assert ErrorResponse(message="bad").model_dump(exclude_none=True) == {
            "status": "E00",
            "success": False,
            "message": "bad",
        }
