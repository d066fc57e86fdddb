"""Configuration, database, errors, security and authorization primitives."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.exceptions import AppError

__all__ = ["AppError", "get_settings", "settings", "get_db"]
