"""Student records: CRUD, paginated listing and CSV export."""

import csv
import io
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, reclassify_errors
from app.models import Student
from app.schemas.pagination import MAX_PER_PAGE, Page, PaginationRequest
from app.schemas.student import CreateStudentRequest, StudentOut, UpdateStudentRequest
from app.services.filtering import paginate

logger = logging.getLogger(__name__)

STUDENT_LIST_COLUMNS = {
    "id": Student.id,
    "nisn": Student.nisn,
    "name": Student.name,
    "dob": Student.dob,
    "guardianContact": Student.guardian_contact,
    "isActive": Student.is_active,
    "createdAt": Student.created_at,
    "updatedAt": Student.updated_at,
}

# CSV header order; each header is a wire name of StudentOut.
CSV_COLUMNS = ("id", "nisn", "name", "dob", "guardianContact", "createdAt", "updatedAt")

# Only guardian_contact may be cleared with an explicit null.
NULLABLE_FIELDS = frozenset({"guardian_contact"})


class StudentsService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _get(self, student_id: int) -> Student:
        student = self.session.get(Student, student_id)
        if student is None:
            raise NotFoundError(f"Student with ID {student_id} not found")
        return student

    def create(self, body: CreateStudentRequest) -> StudentOut:
        with reclassify_errors("Failed to create student", self.session):
            student = Student(**body.model_dump())
            self.session.add(student)
            try:
                self.session.commit()
            except IntegrityError as e:
                raise ConflictError("NISN already exists") from e
            logger.info("Student created", extra={"student_id": student.id})
            return StudentOut.model_validate(student)

    def find_all(self) -> list[StudentOut]:
        with reclassify_errors("Failed to fetch students", self.session):
            students = self.session.query(Student).order_by(Student.id).all()
            return [StudentOut.model_validate(s) for s in students]

    def list_paginated(self, request: PaginationRequest) -> Page[StudentOut]:
        with reclassify_errors("Failed to fetch list students", self.session):
            rows, meta = paginate(
                self.session.query(Student), request, STUDENT_LIST_COLUMNS, Student.updated_at
            )
            return Page[StudentOut](rows=[StudentOut.model_validate(s) for s in rows], meta=meta)

    def find_one(self, student_id: int) -> StudentOut:
        return StudentOut.model_validate(self._get(student_id))

    def update(self, student_id: int, body: UpdateStudentRequest) -> StudentOut:
        student = self._get(student_id)
        with reclassify_errors("Failed to update student", self.session):
            for field, value in body.model_dump(exclude_unset=True).items():
                if value is None and field not in NULLABLE_FIELDS:
                    continue
                setattr(student, field, value)
            try:
                self.session.commit()
            except IntegrityError as e:
                raise ConflictError("NISN already exists") from e
            logger.info("Student updated", extra={"student_id": student_id})
            return StudentOut.model_validate(student)

    def remove(self, student_id: int) -> StudentOut:
        student = self._get(student_id)
        removed = StudentOut.model_validate(student)
        with reclassify_errors("Failed to remove student", self.session):
            self.session.delete(student)
            self.session.commit()
        logger.info("Student removed", extra={"student_id": student_id})
        return removed

    def export_csv(self, request: PaginationRequest | None = None) -> str:
        """Render every student matching the request's filters as CSV."""
        base = request or PaginationRequest()
        page = self.list_paginated(base.model_copy(update={"page": 1, "per_page": MAX_PER_PAGE}))
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for row in page.rows:
            data = row.model_dump(by_alias=True, mode="json")
            writer.writerow(["" if data[col] is None else data[col] for col in CSV_COLUMNS])
        return buffer.getvalue()
