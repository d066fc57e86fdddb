"""Double-submit cookie CSRF protection."""

import secrets

from app.core.exceptions import ForbiddenError

CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_COOKIE_NAME = "csrf_token"
# 16 random bytes, hex-encoded.
CSRF_TOKEN_BYTES = 16


def generate_csrf_token() -> str:
    return secrets.token_hex(CSRF_TOKEN_BYTES)


def validate_csrf_pair(header_token: str | None, cookie_token: str | None) -> None:
    """Both tokens must be present and equal."""
    if (
        not header_token
        or not cookie_token
        or not secrets.compare_digest(header_token.encode("utf-8"), cookie_token.encode("utf-8"))
    ):
        raise ForbiddenError("Invalid CSRF token")
