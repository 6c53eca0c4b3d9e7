"""
Session cookie middleware.

Every request gets an opaque session identifier, read from the session
cookie or freshly minted. The identifier only addresses server-side
storage; it carries no data and is separate from the auth token cookie.
The cookie is written on the way out (error responses included, so a
client whose OTP email failed can still resend) but only when a route
actually used the session.
"""

import secrets
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

_MAX_SESSION_ID_LENGTH = 128


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


async def session_cookie_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    settings = request.app.state.settings
    cookie_name = settings.session_cookie_name

    session_id = request.cookies.get(cookie_name)
    issued = False
    if not session_id or len(session_id) > _MAX_SESSION_ID_LENGTH:
        session_id = new_session_id()
        issued = True

    request.state.session_id = session_id
    request.state.session_used = False
    request.state.session_ended = False

    response = await call_next(request)

    if request.state.session_ended:
        response.delete_cookie(
            cookie_name, httponly=True, secure=settings.cookie_secure, samesite="strict"
        )
    elif issued and request.state.session_used:
        response.set_cookie(
            cookie_name,
            session_id,
            max_age=settings.session_ttl_seconds,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="strict",
        )
    return response


def end_session(request: Request) -> None:
    """Ask the middleware to drop the session cookie on this response."""
    request.state.session_ended = True
