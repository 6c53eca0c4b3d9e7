"""
Security primitives - hashing and random secret generation.

bcrypt is used for passwords and OTPs (salted, constant-time checkpw).
Password reset tokens carry 256 bits of entropy, so a plain SHA-256 digest
is enough and lets the token be re-derived and compared directly.
"""

import hashlib
import hmac
import secrets

import bcrypt

# bcrypt only reads the first 72 bytes; newer releases reject longer input.
_BCRYPT_MAX_BYTES = 72


def _secret_bytes(secret: str) -> bytes:
    return secret.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """One-way salted hash and verify for passwords and OTPs."""

    def __init__(self, rounds: int = 10) -> None:
        """
        Args:
            rounds: bcrypt cost factor (4 is the library minimum)
        """
        self.rounds = rounds
        # Compared against when an account does not exist so that
        # login takes the same time either way.
        self._dummy_hash = self.hash(secrets.token_hex(16))

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(_secret_bytes(secret), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, secret: str, hashed: str) -> bool:
        """Constant-time check of ``secret`` against a bcrypt hash."""
        try:
            return bcrypt.checkpw(_secret_bytes(secret), hashed.encode())
        except ValueError:
            # Malformed stored hash
            return False

    def burn(self, secret: str) -> None:
        """Spend one verification's worth of time against a dummy hash."""
        bcrypt.checkpw(_secret_bytes(secret), self._dummy_hash.encode())


def generate_otp(length: int = 6) -> str:
    """
    Generate a cryptographically secure numeric OTP.

    Returns a string to preserve leading zeros.
    """
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_reset_token() -> str:
    """Random 32-byte password reset token, hex encoded."""
    return secrets.token_hex(32)


def digest_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def reset_token_matches(token: str, stored_digest: str | None) -> bool:
    """Re-derive the digest of a presented token and compare in constant time."""
    if not stored_digest:
        return False
    return hmac.compare_digest(digest_reset_token(token), stored_digest)
