"""
JWT credential issuer adapter - Implements CredentialIssuer protocol.

Session credentials are HS256-signed JWTs carrying the user's id and
email. They are verified by signature and expiry only; nothing is stored
server-side.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from src.domain.exceptions import NotAuthenticated
from src.domain.models import Clock, SessionClaims, User, utc_now

logger = logging.getLogger(__name__)


class JwtCredentialIssuer:
    """Mints and verifies signed session tokens via PyJWT."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=60),
        clock: Clock = utc_now,
    ) -> None:
        """
        Args:
            secret: Signing key
            algorithm: JWS algorithm understood by PyJWT
            ttl: Token lifetime
            clock: Source of the issue time (tests pin it)
        """
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, user: User) -> str:
        issued_at = self._clock()
        payload = {
            # PyJWT expects "sub" to be a string
            "sub": str(user.id),
            "id": user.id,
            "email": user.email,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaims:
        try:
            payload = jwt.decode(
                token.strip(),
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise NotAuthenticated() from None
        except jwt.PyJWTError as e:
            logger.info("Rejected session token: %s", e)
            raise NotAuthenticated() from None

        try:
            return SessionClaims(
                user_id=int(payload["id"]),
                email=payload["email"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError):
            raise NotAuthenticated() from None
