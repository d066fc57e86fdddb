"""Unit tests for app.core.config: duration parsing and settings validation."""

import os
import unittest
from datetime import timedelta
from unittest.mock import patch

from pydantic import ValidationError

from app.core.config import Settings, parse_duration


def _settings(**overrides: object) -> Settings:
    """Build Settings from explicit values only (no .env file)."""
    values: dict[str, object] = {
        "JWT_SECRET": "access-secret",
        "JWT_REFRESH_SECRET": "refresh-secret",
        "DATABASE_URL": "sqlite://",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestParseDuration(unittest.TestCase):
    def test_bare_integer_is_seconds(self) -> None:
        self.assertEqual(parse_duration("900"), timedelta(seconds=900))

    def test_units(self) -> None:
        self.assertEqual(parse_duration("30s"), timedelta(seconds=30))
        self.assertEqual(parse_duration("15m"), timedelta(minutes=15))
        self.assertEqual(parse_duration("1h"), timedelta(hours=1))
        self.assertEqual(parse_duration("7d"), timedelta(days=7))

    def test_whitespace_and_case(self) -> None:
        self.assertEqual(parse_duration(" 2H "), timedelta(hours=2))

    def test_rejects_garbage(self) -> None:
        for value in ("", "abc", "1w", "-5m", "1.5h"):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_duration(value)

    def test_rejects_zero(self) -> None:
        with self.assertRaises(ValueError):
            parse_duration("0")


class TestSettingsValidation(unittest.TestCase):
    def test_defaults(self) -> None:
        s = _settings()
        self.assertEqual(s.access_token_ttl, timedelta(hours=1))
        self.assertEqual(s.refresh_token_ttl, timedelta(days=7))
        self.assertEqual(s.JWT_ALGORITHM, "HS256")

    def test_secrets_must_differ(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            _settings(JWT_SECRET="same", JWT_REFRESH_SECRET="same")
        self.assertIn("must be different", str(ctx.exception))

    def test_blank_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET="   ")

    def test_missing_secrets_rejected(self) -> None:
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite://"}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_refresh_must_outlive_access(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_EXPIRES_IN="7d", JWT_REFRESH_EXPIRES_IN="1h")

    def test_invalid_duration_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_EXPIRES_IN="soon")

    def test_database_url_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://localhost/db")
        self.assertEqual(
            _settings(DATABASE_URL="postgresql+psycopg2://u:p@db/school").DATABASE_URL,
            "postgresql+psycopg2://u:p@db/school",
        )

    def test_log_level_normalized(self) -> None:
        self.assertEqual(_settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")
        with self.assertRaises(ValidationError):
            _settings(LOG_LEVEL="loud")

    def test_app_env_aliases(self) -> None:
        self.assertEqual(_settings(APP_ENV="production").APP_ENV, "prod")
        self.assertEqual(_settings(APP_ENV="development").APP_ENV, "dev")
        self.assertEqual(_settings(APP_ENV="test").APP_ENV, "dev")
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="staging")

    def test_node_env_is_read(self) -> None:
        env = {
            "NODE_ENV": "production",
            "JWT_SECRET": "a",
            "JWT_REFRESH_SECRET": "b",
            "DATABASE_URL": "sqlite://",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)
        self.assertEqual(s.APP_ENV, "prod")
        self.assertTrue(s.cookie_secure)

    def test_cookie_secure_off_in_dev(self) -> None:
        self.assertFalse(_settings(APP_ENV="dev").cookie_secure)


if __name__ == "__main__":
    unittest.main()
