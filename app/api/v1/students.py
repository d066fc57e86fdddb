"""Student record endpoints, including CSV export."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.v1.auth import require_permissions, verify_csrf
from app.core.database import get_db
from app.core.permissions import Permission
from app.schemas.auth import CurrentUser
from app.schemas.common import ApiResponse
from app.schemas.pagination import Page, PaginationRequest
from app.schemas.student import CreateStudentRequest, StudentOut, UpdateStudentRequest
from app.services.students import StudentsService

router = APIRouter()


def get_students_service(db: Annotated[Session, Depends(get_db)]) -> StudentsService:
    return StudentsService(db)


@router.post("", response_model=ApiResponse[StudentOut])
def create_student(
    body: CreateStudentRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_CREATE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[StudentOut]:
    return ApiResponse(message="Student created", data=service.create(body))


@router.get("", response_model=ApiResponse[list[StudentOut]])
def list_students(
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_READ))],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[list[StudentOut]]:
    return ApiResponse(message="Students retrieved", data=service.find_all())


@router.post("/list", response_model=ApiResponse[Page[StudentOut]])
def list_students_paginated(
    body: PaginationRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_READ))],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[Page[StudentOut]]:
    return ApiResponse(message="Students retrieved", data=service.list_paginated(body))


@router.get("/export")
def export_students(
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_READ))],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> Response:
    """Download all students as CSV."""
    return Response(
        content=service.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="students.csv"'},
    )


@router.get("/{student_id}", response_model=ApiResponse[StudentOut])
def get_student(
    student_id: int,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_READ))],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[StudentOut]:
    return ApiResponse(message="Student retrieved", data=service.find_one(student_id))


@router.put("/{student_id}", response_model=ApiResponse[StudentOut])
def update_student(
    student_id: int,
    body: UpdateStudentRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_UPDATE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[StudentOut]:
    return ApiResponse(message="Student updated", data=service.update(student_id, body))


@router.delete("/{student_id}", response_model=ApiResponse[StudentOut])
def delete_student(
    student_id: int,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.STUDENT_DELETE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[StudentsService, Depends(get_students_service)],
) -> ApiResponse[StudentOut]:
    return ApiResponse(message="Student deleted", data=service.remove(student_id))
