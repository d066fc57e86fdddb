"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.common import CamelModel


class RegisterRequest(BaseModel):
    """Self-registration payload; the role is always the default role."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login/register")


class UpdateProfileRequest(CamelModel):
    """Partial profile update. newPassword requires currentPassword."""

    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: EmailStr | None = None
    current_password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN)
    new_password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )

    @model_validator(mode="after")
    def require_current_password(self) -> "UpdateProfileRequest":
        if self.new_password and not self.current_password:
            raise ValueError("Current password is required when setting a new password")
        return self


class RoleOut(CamelModel):
    id: int
    name: str


class UserOut(CamelModel):
    """Sanitized user: never includes the password hash."""

    id: int
    name: str
    email: str
    is_active: bool
    role: RoleOut
    created_at: datetime
    updated_at: datetime


class TokenPair(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token (single use)")


class AuthResult(TokenPair):
    """Returned by register and login."""

    user: UserOut


class ProfileData(BaseModel):
    user: UserOut


class CsrfData(CamelModel):
    csrf_token: str


class CurrentUser(BaseModel):
    """Authenticated principal built from access-token claims."""

    id: int
    email: str
    role: str
