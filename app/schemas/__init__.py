"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResult,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenPair,
    UpdateProfileRequest,
    UserOut,
)
from app.schemas.common import ApiResponse
from app.schemas.health import HealthResponse
from app.schemas.pagination import Page, PaginationMeta, PaginationRequest
from app.schemas.student import CreateStudentRequest, StudentOut, UpdateStudentRequest
from app.schemas.user import CreateUserRequest, UpdateUserRequest

__all__ = [
    "ApiResponse",
    "AuthResult",
    "CreateStudentRequest",
    "CreateUserRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "Page",
    "PaginationMeta",
    "PaginationRequest",
    "RegisterRequest",
    "StudentOut",
    "TokenPair",
    "UpdateProfileRequest",
    "UpdateStudentRequest",
    "UpdateUserRequest",
    "UserOut",
]
