"""Admin user management: create, list, read, update, delete."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, contains_eager, joinedload

from app.core.exceptions import ConflictError, NotFoundError, reclassify_errors
from app.core.permissions import role_id_for
from app.core.security import hash_password
from app.models import Role, User
from app.schemas.auth import UserOut
from app.schemas.pagination import Page, PaginationRequest
from app.schemas.user import CreateUserRequest, UpdateUserRequest
from app.services.filtering import paginate

logger = logging.getLogger(__name__)

# Wire column ids accepted by the list endpoint's filters and sort.
USER_LIST_COLUMNS = {
    "id": User.id,
    "name": User.name,
    "email": User.email,
    "isActive": User.is_active,
    "createdAt": User.created_at,
    "updatedAt": User.updated_at,
    "role.id": Role.id,
    "role.name": Role.name,
}


class UsersService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _get(self, user_id: int) -> User:
        user = (
            self.session.query(User)
            .options(joinedload(User.role))
            .filter(User.id == user_id)
            .first()
        )
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    def _ensure_email_free(self, email: str, user_id: int | None = None) -> None:
        owner = self.session.query(User).filter(User.email == email).first()
        if owner is not None and owner.id != user_id:
            raise ConflictError("Email already exists")

    def create(self, body: CreateUserRequest) -> UserOut:
        with reclassify_errors("Failed to create user", self.session):
            self._ensure_email_free(body.email)
            user = User(
                name=body.name,
                email=body.email,
                password=hash_password(body.password),
                role_id=role_id_for(body.role),
            )
            self.session.add(user)
            try:
                self.session.commit()
            except IntegrityError as e:
                raise ConflictError("Email already exists") from e
            logger.info("User created", extra={"user_id": user.id, "role": body.role.value})
            return UserOut.model_validate(self._get(user.id))

    def find_all(self) -> list[UserOut]:
        with reclassify_errors("Failed to fetch users", self.session):
            users = (
                self.session.query(User)
                .options(joinedload(User.role))
                .order_by(User.id)
                .all()
            )
            return [UserOut.model_validate(u) for u in users]

    def list_paginated(self, request: PaginationRequest) -> Page[UserOut]:
        with reclassify_errors("Failed to fetch list users", self.session):
            query = self.session.query(User).join(User.role).options(contains_eager(User.role))
            rows, meta = paginate(query, request, USER_LIST_COLUMNS, User.updated_at)
            return Page[UserOut](rows=[UserOut.model_validate(u) for u in rows], meta=meta)

    def find_one(self, user_id: int) -> UserOut:
        with reclassify_errors("Failed to fetch user", self.session):
            return UserOut.model_validate(self._get(user_id))

    def update(self, user_id: int, body: UpdateUserRequest) -> UserOut:
        with reclassify_errors("Failed to update user", self.session):
            user = self._get(user_id)
            if body.email is not None and body.email != user.email:
                self._ensure_email_free(body.email, user_id)

            if body.name is not None:
                user.name = body.name
            if body.email is not None:
                user.email = body.email
            if body.password is not None:
                user.password = hash_password(body.password)
            if body.role is not None:
                user.role_id = role_id_for(body.role)
            if body.is_active is not None:
                user.is_active = body.is_active

            try:
                self.session.commit()
            except IntegrityError as e:
                raise ConflictError("Email already exists") from e
            logger.info("User updated", extra={"user_id": user_id})
            return UserOut.model_validate(self._get(user_id))

    def remove(self, user_id: int) -> UserOut:
        """Delete a user (refresh tokens cascade) and return the removed record."""
        with reclassify_errors("Failed to remove user", self.session):
            user = self._get(user_id)
            removed = UserOut.model_validate(user)
            self.session.delete(user)
            self.session.commit()
            logger.info("User removed", extra={"user_id": user_id})
            return removed
