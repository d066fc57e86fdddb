"""Test package. Sets the environment before any app module reads settings."""

import os

os.environ.setdefault("JWT_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdef")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""
os.environ.setdefault("APP_ENV", "dev")
