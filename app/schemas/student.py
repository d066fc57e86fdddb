"""Schemas for student records."""

from datetime import date, datetime

from pydantic import Field

from app.schemas.common import CamelModel


class CreateStudentRequest(CamelModel):
    nisn: str = Field(..., min_length=3, max_length=30, description="National student number")
    name: str = Field(..., min_length=1, max_length=120)
    dob: date = Field(..., description="Date of birth (ISO 8601)")
    guardian_contact: str | None = Field(default=None, max_length=120)
    is_active: bool = True


class UpdateStudentRequest(CamelModel):
    """Partial update; omitted fields are left unchanged."""

    nisn: str | None = Field(default=None, min_length=3, max_length=30)
    name: str | None = Field(default=None, min_length=1, max_length=120)
    dob: date | None = None
    guardian_contact: str | None = Field(default=None, max_length=120)
    is_active: bool | None = None


class StudentOut(CamelModel):
    id: int
    nisn: str
    name: str
    dob: date
    guardian_contact: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
