"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.refresh_token import RefreshToken
from app.models.role import Role
from app.models.student import Student
from app.models.user import User

__all__ = ["Base", "RefreshToken", "Role", "Student", "User"]
