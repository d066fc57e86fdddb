"""Auth service: registration, login, refresh-token rotation and profile management."""

import logging

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    UnauthorizedError,
    reclassify_errors,
)
from app.core.permissions import DEFAULT_ROLE, role_id_for
from app.core.security import TokenIssuer, hash_password, verify_password
from app.models import User
from app.schemas.auth import AuthResult, TokenPair, UserOut
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class AuthService:
    """
    Orchestrates the credential store and token issuer.

    Every refresh token issued replaces any earlier ones for the same user, so a
    user holds at most one valid refresh token at a time. Refresh tokens are
    single use: /auth/refresh consumes the presented token and returns a new pair.
    """

    def __init__(self, store: CredentialStore, issuer: TokenIssuer) -> None:
        self.store = store
        self.issuer = issuer

    def register(self, name: str, email: str, password: str) -> AuthResult:
        with reclassify_errors("Registration failed", self.store.session):
            logger.debug("Registration attempt")
            if self.store.get_user_by_email(email) is not None:
                raise ConflictError("Email already exists")

            try:
                created = self.store.add_user(
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                    role_id=role_id_for(DEFAULT_ROLE),
                )
            except IntegrityError as e:
                # Lost a race with a concurrent registration for the same email.
                raise ConflictError("Email already exists") from e

            user = self.store.get_user_by_id(created.id)
            if user is None:
                raise BadRequestError("Failed to create user")

            tokens = self._issue_tokens(user)
            self.store.commit()
            self.store.refresh(user)
            logger.info("User registered", extra={"user_id": user.id})
            return AuthResult(user=UserOut.model_validate(user), **tokens.model_dump())

    def login(self, email: str, password: str) -> AuthResult:
        with reclassify_errors("Login failed", self.store.session):
            logger.debug("Login attempt")
            user = self.store.get_user_by_email(email)
            if user is None:
                logger.warning("Login failed: user not found")
                raise UnauthorizedError("Invalid credentials")
            if not verify_password(password, user.password):
                logger.warning("Login failed: invalid password", extra={"user_id": user.id})
                raise UnauthorizedError("Invalid credentials")
            # Checked after the password so a disabled account never confirms a wrong guess.
            if not user.is_active:
                logger.warning("Login failed: account deactivated", extra={"user_id": user.id})
                raise UnauthorizedError("Account is deactivated")

            tokens = self._issue_tokens(user)
            self.store.commit()
            self.store.refresh(user)
            logger.info("User logged in", extra={"user_id": user.id})
            return AuthResult(user=UserOut.model_validate(user), **tokens.model_dump())

    def refresh_token(self, token: str) -> TokenPair:
        with reclassify_errors("Failed to refresh token", self.store.session):
            payload = self.issuer.verify_refresh(token)
            user_id = int(payload["sub"])

            # The stored row is what makes a token valid; a missing row means revoked or used.
            stored = self.store.get_refresh_token(token)
            if stored is None or stored.user_id != user_id:
                raise UnauthorizedError("Invalid refresh token")

            user = self.store.get_user_by_id(user_id)
            if user is None:
                raise UnauthorizedError("User not found")

            # A concurrent refresh may have consumed the row since the lookup; the delete decides.
            if self.store.delete_refresh_token(token) == 0:
                raise UnauthorizedError("Invalid refresh token")
            tokens = self._issue_tokens(user)
            self.store.commit()
            logger.info("Refresh token rotated", extra={"user_id": user_id})
            return tokens

    def logout(self, user_id: int) -> None:
        """Revoke every refresh token held by the user."""
        with reclassify_errors("Logout failed", self.store.session):
            deleted = self.store.delete_refresh_tokens_for_user(user_id)
            self.store.commit()
            logger.info("User logged out", extra={"user_id": user_id, "revoked": deleted})

    def get_profile(self, user_id: int) -> UserOut:
        with reclassify_errors("Failed to fetch profile", self.store.session):
            logger.debug("Fetching profile", extra={"user_id": user_id})
            user = self.store.get_user_by_id(user_id)
            if user is None:
                raise UnauthorizedError("User not found")
            return UserOut.model_validate(user)

    def update_profile(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        current_password: str | None = None,
        new_password: str | None = None,
    ) -> UserOut:
        with reclassify_errors("Failed to update profile", self.store.session):
            user = self.store.get_user_by_id(user_id)
            if user is None:
                raise UnauthorizedError("User not found")

            if email and email != user.email:
                owner = self.store.get_user_by_email(email)
                if owner is not None and owner.id != user.id:
                    raise ConflictError("Email already exists")

            if new_password and not current_password:
                raise BadRequestError("Current password is required when setting a new password")
            if current_password and not verify_password(current_password, user.password):
                raise BadRequestError("Current password is incorrect")

            if name:
                user.name = name
            if email:
                user.email = email
            if new_password:
                user.password = hash_password(new_password)

            try:
                self.store.commit()
            except IntegrityError as e:
                raise ConflictError("Email already exists") from e
            logger.debug("Profile updated", extra={"user_id": user_id})

        # Re-read so the response reflects what was persisted.
        return self.get_profile(user_id)

    def _issue_tokens(self, user: User) -> TokenPair:
        """Sign a new access/refresh pair and store the refresh token, replacing older ones."""
        self.store.delete_refresh_tokens_for_user(user.id)
        # The two signatures are independent; signing is synchronous and cheap.
        access_token = self.issuer.sign_access(sub=user.id, email=user.email, role=user.role.name)
        refresh = self.issuer.sign_refresh(sub=user.id)
        self.store.add_refresh_token(refresh.token, user.id, refresh.expires_at)
        return TokenPair(access_token=access_token, refresh_token=refresh.token)
