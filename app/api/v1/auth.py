"""Auth endpoints and the request dependencies that guard every protected route."""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.csrf import (
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    generate_csrf_token,
    validate_csrf_pair,
)
from app.core.database import get_db
from app.core.exceptions import UnauthorizedError
from app.core.permissions import ROLE_PERMISSIONS, Permission, PermissionGuard
from app.core.security import TokenIssuer
from app.schemas.auth import (
    AuthResult,
    CsrfData,
    CurrentUser,
    LoginRequest,
    ProfileData,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UpdateProfileRequest,
)
from app.schemas.common import ApiResponse
from app.services.auth import AuthService
from app.services.credential_store import CredentialStore

ACCESS_TOKEN_COOKIE_NAME = "access_token"

router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(get_settings())


@lru_cache
def get_permission_guard() -> PermissionGuard:
    """Guard over the static role table, built once per process."""
    return PermissionGuard(ROLE_PERMISSIONS)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    return AuthService(CredentialStore(db), issuer)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentUser:
    """
    Dependency: require a valid access token and return the principal from its claims.

    Looks for the token in the Authorization: Bearer header first, then the
    access_token cookie. No database lookup: access tokens are self-contained.
    """
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_TOKEN_COOKIE_NAME)
    if not token:
        raise UnauthorizedError("Not authenticated")
    payload = issuer.verify_access(token)
    email = payload.get("email")
    role = payload.get("role")
    if not email or not role:
        raise UnauthorizedError("Invalid token payload")
    return CurrentUser(id=int(payload["sub"]), email=email, role=role)


def require_permissions(*required: Permission) -> Callable[..., CurrentUser]:
    """
    Per-route permission declaration.

    Usage: ``user: Annotated[CurrentUser, Depends(require_permissions(Permission.PROFILE_READ))]``.
    Raises 403 unless the caller's role holds every listed permission.
    """

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        guard: Annotated[PermissionGuard, Depends(get_permission_guard)],
    ) -> CurrentUser:
        guard.check(current_user.role, required)
        return current_user

    return dependency


def verify_csrf(request: Request) -> None:
    """Dependency for state-changing routes: X-CSRF-Token header must equal the csrf_token cookie."""
    validate_csrf_pair(
        request.headers.get(CSRF_HEADER_NAME),
        request.cookies.get(CSRF_COOKIE_NAME),
    )


def _set_access_cookie(response: Response, access_token: str, issuer: TokenIssuer) -> None:
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE_NAME,
        value=access_token,
        max_age=int(issuer.access_ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=get_settings().cookie_secure,
        path="/",
    )


@router.post("/register", response_model=ApiResponse[AuthResult])
def register(
    body: RegisterRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[AuthResult]:
    """Create an account with the default role and return it with a fresh token pair."""
    result = service.register(body.name, body.email, body.password)
    _set_access_cookie(response, result.access_token, service.issuer)
    return ApiResponse(message="Registration successful", data=result)


@router.post("/login", response_model=ApiResponse[AuthResult])
def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[AuthResult]:
    """
    Authenticate with email and password; returns the user and a token pair.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    result = service.login(body.email, body.password)
    _set_access_cookie(response, result.access_token, service.issuer)
    return ApiResponse(message="Login successful", data=result)


@router.post("/refresh", response_model=ApiResponse[TokenPair])
def refresh(
    body: RefreshRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[TokenPair]:
    """Exchange a refresh token for a new pair. The presented token is consumed."""
    tokens = service.refresh_token(body.refresh_token)
    _set_access_cookie(response, tokens.access_token, service.issuer)
    return ApiResponse(message="Token refreshed", data=tokens)


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[None]:
    service.logout(current_user.id)
    response.delete_cookie(ACCESS_TOKEN_COOKIE_NAME, path="/")
    return ApiResponse(message="Logout successful")


@router.get("/profile", response_model=ApiResponse[ProfileData])
def get_profile(
    current_user: Annotated[CurrentUser, Depends(require_permissions(Permission.PROFILE_READ))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[ProfileData]:
    user = service.get_profile(current_user.id)
    return ApiResponse(message="Profile retrieved", data=ProfileData(user=user))


@router.put("/profile", response_model=ApiResponse[ProfileData])
def update_profile(
    body: UpdateProfileRequest,
    current_user: Annotated[CurrentUser, Depends(require_permissions(Permission.PROFILE_UPDATE))],
    _csrf: Annotated[None, Depends(verify_csrf)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[ProfileData]:
    user = service.update_profile(
        current_user.id,
        name=body.name,
        email=body.email,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return ApiResponse(message="Profile updated", data=ProfileData(user=user))


@router.get("/csrf", response_model=ApiResponse[CsrfData])
def get_csrf_token(response: Response) -> ApiResponse[CsrfData]:
    """
    Issue a CSRF token and set it as a JS-readable cookie.
    Clients echo it back in the X-CSRF-Token header on state-changing requests.
    """
    token = generate_csrf_token()
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,
        samesite="lax",
        secure=get_settings().cookie_secure,
        path="/",
    )
    return ApiResponse(message="CSRF token issued", data=CsrfData(csrf_token=token))
