"""Integration tests for app.services.auth against an in-memory SQLite database."""

import tempfile
import unittest
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

from app.core.exceptions import BadRequestError, ConflictError, UnauthorizedError
from app.core.security import TokenIssuer, verify_password
from app.models import RefreshToken, User
from app.services.auth import AuthService
from app.services.credential_store import CredentialStore
from tests.support import make_session_factory


def _issuer() -> TokenIssuer:
    return TokenIssuer(
        access_secret="service-access-secret-0123456789abcdef",
        refresh_secret="service-refresh-secret-0123456789abcdef",
        access_ttl=timedelta(hours=1),
        refresh_ttl=timedelta(days=7),
    )


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.session = self.factory()
        self.issuer = _issuer()
        self.service = AuthService(CredentialStore(self.session), self.issuer)

    def tearDown(self) -> None:
        self.session.close()

    def _register(self, email: str = "guru@example.com", password: str = "rahasia1"):
        return self.service.register("Guru", email, password)

    def _token_rows(self, user_id: int) -> list[RefreshToken]:
        return self.session.query(RefreshToken).filter(RefreshToken.user_id == user_id).all()


class TestRegister(AuthServiceTestCase):
    def test_creates_teacher_and_returns_tokens(self) -> None:
        result = self._register()
        self.assertEqual(result.user.email, "guru@example.com")
        self.assertEqual(result.user.role.name, "teacher")
        self.assertEqual(result.user.role.id, 2)
        self.assertTrue(result.user.is_active)
        claims = self.issuer.verify_access(result.access_token)
        self.assertEqual(claims["sub"], str(result.user.id))
        self.assertEqual(claims["role"], "teacher")
        self.assertEqual(self.issuer.verify_refresh(result.refresh_token)["sub"], str(result.user.id))

    def test_password_is_hashed(self) -> None:
        result = self._register()
        stored = self.session.get(User, result.user.id)
        self.assertNotEqual(stored.password, "rahasia1")
        self.assertTrue(verify_password("rahasia1", stored.password))

    def test_refresh_token_is_stored(self) -> None:
        result = self._register()
        rows = self._token_rows(result.user.id)
        self.assertEqual([r.token for r in rows], [result.refresh_token])

    def test_duplicate_email(self) -> None:
        self._register()
        with self.assertRaises(ConflictError) as ctx:
            self._register()
        self.assertEqual(ctx.exception.message, "Email already exists")
        self.assertEqual(self.session.query(User).count(), 1)

    def test_concurrent_duplicate_surfaces_as_conflict(self) -> None:
        self._register()
        # The pre-check misses the row another request just inserted; the unique index catches it.
        with patch.object(self.service.store, "get_user_by_email", return_value=None):
            with self.assertRaises(ConflictError):
                self._register()
        self.assertEqual(self.session.query(User).count(), 1)

    def test_unexpected_failure_is_reclassified(self) -> None:
        with patch.object(
            self.service.store, "get_user_by_email", side_effect=RuntimeError("db down")
        ):
            with self.assertRaises(BadRequestError) as ctx:
                self._register()
        self.assertEqual(ctx.exception.message, "Registration failed")


class TestLogin(AuthServiceTestCase):
    def test_success(self) -> None:
        registered = self._register()
        result = self.service.login("guru@example.com", "rahasia1")
        self.assertEqual(result.user.id, registered.user.id)
        self.assertEqual(self.issuer.verify_access(result.access_token)["email"], "guru@example.com")

    def test_unknown_email_and_wrong_password_look_the_same(self) -> None:
        self._register()
        for email, password in (("nobody@example.com", "rahasia1"), ("guru@example.com", "wrong!!")):
            with self.subTest(email=email), self.assertRaises(UnauthorizedError) as ctx:
                self.service.login(email, password)
            self.assertEqual(ctx.exception.message, "Invalid credentials")

    def test_email_match_is_case_sensitive(self) -> None:
        self._register()
        with self.assertRaises(UnauthorizedError):
            self.service.login("GURU@example.com", "rahasia1")

    def test_deactivated_account(self) -> None:
        registered = self._register()
        user = self.session.get(User, registered.user.id)
        user.is_active = False
        self.session.commit()
        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.login("guru@example.com", "rahasia1")
        self.assertEqual(ctx.exception.message, "Account is deactivated")

    def test_deactivated_account_with_wrong_password(self) -> None:
        registered = self._register()
        self.session.get(User, registered.user.id).is_active = False
        self.session.commit()
        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.login("guru@example.com", "wrong!!")
        self.assertEqual(ctx.exception.message, "Invalid credentials")

    def test_login_replaces_earlier_refresh_tokens(self) -> None:
        registered = self._register()
        result = self.service.login("guru@example.com", "rahasia1")
        rows = self._token_rows(registered.user.id)
        self.assertEqual([r.token for r in rows], [result.refresh_token])
        with self.assertRaises(UnauthorizedError):
            self.service.refresh_token(registered.refresh_token)


class TestRefreshToken(AuthServiceTestCase):
    def test_rotation_is_single_use(self) -> None:
        registered = self._register()
        pair = self.service.refresh_token(registered.refresh_token)
        self.assertNotEqual(pair.refresh_token, registered.refresh_token)
        self.assertEqual(self.issuer.verify_access(pair.access_token)["sub"], str(registered.user.id))

        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.refresh_token(registered.refresh_token)
        self.assertEqual(ctx.exception.message, "Invalid refresh token")

        # The replacement still works.
        self.service.refresh_token(pair.refresh_token)

    def test_access_token_rejected(self) -> None:
        registered = self._register()
        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.refresh_token(registered.access_token)
        self.assertEqual(ctx.exception.message, "Invalid or expired token")

    def test_garbage_token_rejected(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.service.refresh_token("not-a-jwt")

    def test_valid_signature_but_not_stored(self) -> None:
        registered = self._register()
        forged = self.issuer.sign_refresh(sub=registered.user.id)
        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.refresh_token(forged.token)
        self.assertEqual(ctx.exception.message, "Invalid refresh token")

    def test_deleted_user(self) -> None:
        registered = self._register()
        self.session.delete(self.session.get(User, registered.user.id))
        self.session.commit()
        with self.assertRaises(UnauthorizedError):
            self.service.refresh_token(registered.refresh_token)


class TestLogout(AuthServiceTestCase):
    def test_revokes_refresh_tokens(self) -> None:
        registered = self._register()
        self.service.logout(registered.user.id)
        self.assertEqual(self._token_rows(registered.user.id), [])
        with self.assertRaises(UnauthorizedError):
            self.service.refresh_token(registered.refresh_token)

    def test_logout_without_tokens_is_a_no_op(self) -> None:
        registered = self._register()
        self.service.logout(registered.user.id)
        self.service.logout(registered.user.id)


class TestProfile(AuthServiceTestCase):
    def test_get_profile(self) -> None:
        registered = self._register()
        profile = self.service.get_profile(registered.user.id)
        self.assertEqual(profile.email, "guru@example.com")
        self.assertNotIn("password", profile.model_dump())

    def test_missing_user(self) -> None:
        with self.assertRaises(UnauthorizedError) as ctx:
            self.service.get_profile(999)
        self.assertEqual(ctx.exception.message, "User not found")

    def test_update_name_and_email(self) -> None:
        registered = self._register()
        updated = self.service.update_profile(
            registered.user.id, name="Guru Baru", email="baru@example.com"
        )
        self.assertEqual(updated.name, "Guru Baru")
        self.assertEqual(updated.email, "baru@example.com")
        self.service.login("baru@example.com", "rahasia1")

    def test_email_taken_by_someone_else(self) -> None:
        registered = self._register()
        self._register(email="other@example.com")
        with self.assertRaises(ConflictError):
            self.service.update_profile(registered.user.id, email="other@example.com")

    def test_same_email_is_not_a_conflict(self) -> None:
        registered = self._register()
        updated = self.service.update_profile(registered.user.id, email="guru@example.com")
        self.assertEqual(updated.email, "guru@example.com")

    def test_password_change_requires_current_password(self) -> None:
        registered = self._register()
        with self.assertRaises(BadRequestError):
            self.service.update_profile(registered.user.id, new_password="newpass1")

    def test_wrong_current_password(self) -> None:
        registered = self._register()
        with self.assertRaises(BadRequestError) as ctx:
            self.service.update_profile(
                registered.user.id, current_password="wrong!!", new_password="newpass1"
            )
        self.assertEqual(ctx.exception.message, "Current password is incorrect")
        self.service.login("guru@example.com", "rahasia1")

    def test_password_change(self) -> None:
        registered = self._register()
        self.service.update_profile(
            registered.user.id, current_password="rahasia1", new_password="newpass1"
        )
        self.service.login("guru@example.com", "newpass1")
        with self.assertRaises(UnauthorizedError):
            self.service.login("guru@example.com", "rahasia1")


class TestConcurrentRefresh(unittest.TestCase):
    """Two services on separate connections redeem the same refresh token."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.factory = make_session_factory(url=f"sqlite:///{Path(self._tmp.name) / 'auth.db'}")
        self.first_session = self.factory()
        self.second_session = self.factory()
        issuer = _issuer()
        self.first = AuthService(CredentialStore(self.first_session), issuer)
        self.second = AuthService(CredentialStore(self.second_session), issuer)

    def tearDown(self) -> None:
        self.first_session.close()
        self.second_session.close()
        self.factory.kw["bind"].dispose()
        self._tmp.cleanup()

    def test_token_redeemed_only_once(self) -> None:
        registered = self.first.register("Guru", "guru@example.com", "rahasia1")
        token = registered.refresh_token
        winner = {}
        original_lookup = self.second.store.get_refresh_token

        def lookup_then_lose_race(value: str):
            row = original_lookup(value)
            # The other request completes its whole rotation between our lookup and delete.
            winner["pair"] = self.first.refresh_token(value)
            return row

        with patch.object(
            self.second.store, "get_refresh_token", side_effect=lookup_then_lose_race
        ):
            with self.assertRaises(UnauthorizedError) as ctx:
                self.second.refresh_token(token)
        self.assertEqual(ctx.exception.message, "Invalid refresh token")

        with self.factory() as db:
            rows = db.query(RefreshToken).filter(RefreshToken.user_id == registered.user.id).all()
        self.assertEqual([r.token for r in rows], [winner["pair"].refresh_token])
        self.first.refresh_token(winner["pair"].refresh_token)


class TestLoggingOmitsEmail(AuthServiceTestCase):
    def _records(self, action) -> list:
        with self.assertLogs("app.services.auth", level="DEBUG") as captured:
            action()
        return captured.records

    def _assert_no_email(self, records: list) -> None:
        for record in records:
            self.assertNotIn("@example.com", record.getMessage())
            for value in vars(record).values():
                self.assertNotIn("@example.com", str(value))

    def test_register_and_login(self) -> None:
        self._assert_no_email(self._records(self._register))
        self._assert_no_email(
            self._records(lambda: self.service.login("guru@example.com", "rahasia1"))
        )

    def test_failed_logins(self) -> None:
        self._register()

        def attempt(email: str, password: str) -> None:
            with self.assertRaises(UnauthorizedError):
                self.service.login(email, password)

        self._assert_no_email(self._records(lambda: attempt("guru@example.com", "wrong!!")))
        self._assert_no_email(self._records(lambda: attempt("nobody@example.com", "rahasia1")))


if __name__ == "__main__":
    unittest.main()
