"""ORM model for student records."""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, func, true

from app.models.base import Base


class Student(Base):
    """One row per student; nisn is the national student number."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nisn = Column(String(30), nullable=False, unique=True)
    name = Column(String(120), nullable=False)
    dob = Column(Date, nullable=False)
    guardian_contact = Column(String(120), nullable=True)
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
