"""Persistence for users and refresh tokens used by the auth service."""

from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from app.models import RefreshToken, User


class CredentialStore:
    """
    Thin data-access layer over a SQLAlchemy session.

    Methods only add/flush/delete; the calling service owns commit and rollback.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive match on the stored email; role loaded."""
        return (
            self.session.query(User)
            .options(joinedload(User.role))
            .filter(User.email == email)
            .first()
        )

    def get_user_by_id(self, user_id: int) -> User | None:
        return (
            self.session.query(User)
            .options(joinedload(User.role))
            .filter(User.id == user_id)
            .first()
        )

    def add_user(self, name: str, email: str, password_hash: str, role_id: int) -> User:
        """Insert a user and flush so the id is assigned. IntegrityError on duplicate email."""
        user = User(name=name, email=email, password=password_hash, role_id=role_id)
        self.session.add(user)
        self.session.flush()
        return user

    def get_refresh_token(self, token: str) -> RefreshToken | None:
        return self.session.get(RefreshToken, token)

    def add_refresh_token(self, token: str, user_id: int, expires_at: datetime) -> RefreshToken:
        row = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        self.session.add(row)
        self.session.flush()
        return row

    def delete_refresh_token(self, token: str) -> int:
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete()
        )

    def delete_refresh_tokens_for_user(self, user_id: int) -> int:
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete()
        )

    def commit(self) -> None:
        self.session.commit()

    def refresh(self, obj: object) -> None:
        self.session.refresh(obj)
