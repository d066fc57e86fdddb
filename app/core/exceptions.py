"""Domain exceptions mapped to HTTP status codes by the handlers in app.main."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import status
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for classified errors; message is safe to return to clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(AppError):
    """Validation failure, wrong current password, or generic operation failure."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """Bad credentials, deactivated account, invalid/expired/revoked token, missing user."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    """Permission denied or CSRF mismatch."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Unique value (email, NISN) already taken."""

    status_code = status.HTTP_409_CONFLICT


@contextmanager
def reclassify_errors(failure_message: str, session: Session | None = None) -> Iterator[None]:
    """
    Two-tier error policy for service operations.

    AppError subclasses pass through unchanged (logged as warnings). Anything
    else is logged with its traceback and replaced by BadRequestError(failure_message)
    so internal details never reach the client. The session is rolled back on
    any failure.
    """
    try:
        yield
    except AppError as e:
        if session is not None:
            session.rollback()
        logger.warning("%s: %s", failure_message, e.message)
        raise
    except Exception as e:
        if session is not None:
            session.rollback()
        logger.exception("%s: %s", failure_message, e)
        raise BadRequestError(failure_message) from e
