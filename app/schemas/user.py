"""Request schemas for admin user management."""

from pydantic import EmailStr, Field

from app.core.permissions import UserRole
from app.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.common import CamelModel


class CreateUserRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: UserRole


class UpdateUserRequest(CamelModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )
    role: UserRole | None = None
    is_active: bool | None = None
