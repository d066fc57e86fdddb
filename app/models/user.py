"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class User(Base):
    """
    User account for JWT authentication and permission-based access control.

    password holds the bcrypt hash and is never serialized outbound.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    role = relationship("Role", back_populates="users", lazy="joined")
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
