"""ORM model for roles. Ids are fixed by convention (see app.core.permissions.ROLE_IDS)."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)

    users = relationship("User", back_populates="role")
