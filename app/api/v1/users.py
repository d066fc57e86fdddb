"""User management endpoints (admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_permissions, verify_csrf
from app.core.database import get_db
from app.core.permissions import Permission
from app.schemas.auth import CurrentUser, UserOut
from app.schemas.common import ApiResponse
from app.schemas.pagination import Page, PaginationRequest
from app.schemas.user import CreateUserRequest, UpdateUserRequest
from app.services.users import UsersService

router = APIRouter()


def get_users_service(db: Annotated[Session, Depends(get_db)]) -> UsersService:
    return UsersService(db)


@router.post("", response_model=ApiResponse[UserOut])
def create_user(
    body: CreateUserRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_CREATE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[UserOut]:
    return ApiResponse(message="User created", data=service.create(body))


@router.get("", response_model=ApiResponse[list[UserOut]])
def list_users(
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_READ))],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[list[UserOut]]:
    return ApiResponse(message="Users retrieved", data=service.find_all())


@router.post("/list", response_model=ApiResponse[Page[UserOut]])
def list_users_paginated(
    body: PaginationRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_READ))],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[Page[UserOut]]:
    """Paginated, filterable, sortable user list for table views."""
    return ApiResponse(message="Users retrieved", data=service.list_paginated(body))


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
def get_user(
    user_id: int,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_READ))],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[UserOut]:
    return ApiResponse(message="User retrieved", data=service.find_one(user_id))


@router.put("/{user_id}", response_model=ApiResponse[UserOut])
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_UPDATE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[UserOut]:
    return ApiResponse(message="User updated", data=service.update(user_id, body))


@router.delete("/{user_id}", response_model=ApiResponse[UserOut])
def delete_user(
    user_id: int,
    _user: Annotated[CurrentUser, Depends(require_permissions(Permission.USER_DELETE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> ApiResponse[UserOut]:
    return ApiResponse(message="User deleted", data=service.remove(user_id))
