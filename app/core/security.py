"""Password hashing and JWT issuance/verification for access and refresh tokens."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.exceptions import UnauthorizedError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds).
BCRYPT_ROUNDS = 10

# Input limits shared by request schemas and the CLI scripts.
NAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class IssuedRefreshToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    """
    Signs and verifies the two token classes under separate secrets.

    Access tokens are self-contained (sub, email, role) and verified without a
    store lookup. Refresh tokens carry only the subject plus a random jti; they
    are only honoured while their row exists in the refresh_tokens table.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
    ) -> None:
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenIssuer":
        return cls(
            access_secret=settings.JWT_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            access_ttl=settings.access_token_ttl,
            refresh_ttl=settings.refresh_token_ttl,
            algorithm=settings.JWT_ALGORITHM,
        )

    def sign_access(self, sub: str | int, email: str, role: str) -> str:
        """Create an access token with sub, email, role, iat and exp."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(sub),
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.access_ttl,
        }
        return jwt.encode(payload, self._access_secret, algorithm=self.algorithm)

    def sign_refresh(self, sub: str | int) -> IssuedRefreshToken:
        """Create a refresh token; expires_at matches the exp claim."""
        now = datetime.now(UTC)
        expires_at = now + self.refresh_ttl
        payload: dict[str, Any] = {
            "sub": str(sub),
            "type": REFRESH_TOKEN_TYPE,
            # Tokens are stored keyed by value, so two minted in the same second must differ.
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._refresh_secret, algorithm=self.algorithm)
        return IssuedRefreshToken(token=token, expires_at=expires_at)

    def verify_access(self, token: str) -> dict[str, Any]:
        return self._verify(token, self._access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> dict[str, Any]:
        return self._verify(token, self._refresh_secret, REFRESH_TOKEN_TYPE)

    def _verify(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        """
        Decode and validate a JWT; return its payload.
        Raises UnauthorizedError on bad signature, expiry, wrong type or missing sub.
        """
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise UnauthorizedError("Invalid or expired token") from e
        if payload.get("type") != expected_type:
            raise UnauthorizedError("Invalid or expired token")
        try:
            int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise UnauthorizedError("Invalid token payload") from e
        return payload
