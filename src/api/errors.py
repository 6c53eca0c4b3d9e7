"""
Exception handlers - map the domain error taxonomy to HTTP responses.

- ValidationFailed / request validation -> 400 with per-field errors
- EmailAlreadyRegistered -> 400
- InvalidCredentials, NotAuthenticated -> 401
- other AuthError -> 400, generic message
- EmailDispatchFailed -> 503
- DependencyError -> 500, details only in the server log
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, FieldError
from src.domain.exceptions import (
    AuthError,
    DependencyError,
    EmailAlreadyRegistered,
    EmailDispatchFailed,
    InvalidCredentials,
    NotAuthenticated,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

_UNAUTHORIZED = (InvalidCredentials, NotAuthenticated)


def error_response(status_code: int, message: str, errors: list[FieldError] | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.append({"field": ".".join(loc) or "body", "message": message})
    return errors


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        [FieldError(**e) for e in exc.errors],
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await validation_failed_handler(request, ValidationFailed(_field_errors(exc)))


async def conflict_handler(request: Request, exc: EmailAlreadyRegistered) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Email already registered")


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, _UNAUTHORIZED):
        return error_response(status.HTTP_401_UNAUTHORIZED, exc.message)
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def dependency_error_handler(request: Request, exc: DependencyError) -> JSONResponse:
    if isinstance(exc, EmailDispatchFailed):
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Verification email could not be sent, please request a new code",
        )
    logger.error("Dependency failure on %s %s: %r", request.method, request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(EmailAlreadyRegistered, conflict_handler)
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(DependencyError, dependency_error_handler)
