"""Unit tests for app.services.auth_core against an in-memory SQLite store."""

import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import (
    AccountDeactivatedError,
    DuplicateCredentialError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from app.core.security import PasswordHasher, TokenIssuer
from app.models import Base, UserRole
from app.services.auth_core import AuthCore, as_utc
from app.services.credential_store import SqlAlchemyCredentialStore

SECRET = "unit-test-secret-that-is-long-enough-0123456789"


class _Clock:
    """Mutable time source for refresh-token expiry tests."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class AuthCoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.session = sessionmaker(bind=self.engine)()
        self.store = SqlAlchemyCredentialStore(self.session)
        self.issuer = TokenIssuer(secret=SECRET)
        self.hasher = PasswordHasher(rounds=4)
        self.clock = _Clock(datetime.now(UTC))
        self.auth = AuthCore(self.store, self.issuer, self.hasher, now=self.clock)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()


class TestRegister(AuthCoreTestCase):
    """register creates CITIZEN users and rejects duplicate emails."""

    def test_creates_citizen(self) -> None:
        user = self.auth.register("a@x.com", "longpassword")
        self.assertEqual(user.email, "a@x.com")
        self.assertEqual(user.role, UserRole.CITIZEN.value)
        self.assertTrue(user.is_active)
        self.assertIsNotNone(user.created_at)
        self.assertNotEqual(user.password_hash, "longpassword")

    def test_duplicate_email_rejected(self) -> None:
        self.auth.register("a@x.com", "longpassword")
        with self.assertRaises(DuplicateCredentialError):
            self.auth.register("a@x.com", "otherpassword")
        self.assertEqual(self.store.count_users(), 1)

    def test_email_is_case_sensitive_as_stored(self) -> None:
        self.auth.register("a@x.com", "longpassword")
        other = self.auth.register("A@x.com", "longpassword")
        self.assertEqual(other.email, "A@x.com")
        self.assertEqual(self.store.count_users(), 2)

    def test_store_unique_constraint_maps_to_duplicate(self) -> None:
        self.store.create_user("a@x.com", "hash", UserRole.CITIZEN)
        with self.assertRaises(DuplicateCredentialError):
            self.store.create_user("a@x.com", "hash", UserRole.CITIZEN)
        # Session is usable after the rollback.
        self.assertIsNotNone(self.store.find_user_by_email("a@x.com"))


class TestValidateCredentials(AuthCoreTestCase):
    """validate_credentials returns None for unknown email or wrong password, raises for inactive."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.auth.register("a@x.com", "longpassword")

    def test_correct_password(self) -> None:
        user = self.auth.validate_credentials("a@x.com", "longpassword")
        self.assertIsNotNone(user)
        self.assertEqual(user.id, self.user.id)

    def test_wrong_password_returns_none(self) -> None:
        self.assertIsNone(self.auth.validate_credentials("a@x.com", "wrongpassword"))

    def test_unknown_email_returns_none(self) -> None:
        self.assertIsNone(self.auth.validate_credentials("nobody@x.com", "longpassword"))

    def test_deactivated_account_raises(self) -> None:
        self.store.update_user_active(self.user.id, False)
        with self.assertRaises(AccountDeactivatedError):
            self.auth.validate_credentials("a@x.com", "longpassword")

    def test_login_wrong_password_raises_invalid_credentials(self) -> None:
        with self.assertRaises(InvalidCredentialsError):
            self.auth.login("a@x.com", "wrongpassword")

    def test_login_unknown_email_raises_invalid_credentials(self) -> None:
        with self.assertRaises(InvalidCredentialsError):
            self.auth.login("nobody@x.com", "longpassword")


class TestRefreshTokens(AuthCoreTestCase):
    """Refresh tokens are valid while stored and unexpired; deletion revokes them."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.auth.register("a@x.com", "longpassword")

    def test_create_then_validate(self) -> None:
        issued = self.auth.create_refresh_token(self.user.id)
        record = self.auth.validate_refresh_token(issued.token)
        self.assertIsNotNone(record)
        self.assertEqual(record.user_id, self.user.id)
        self.assertEqual(issued.expires_at, self.clock() + timedelta(days=14))

    def test_custom_ttl(self) -> None:
        issued = self.auth.create_refresh_token(self.user.id, ttl_days=1)
        self.assertEqual(issued.expires_at, self.clock() + timedelta(days=1))

    def test_revoked_token_invalid(self) -> None:
        issued = self.auth.create_refresh_token(self.user.id)
        self.auth.revoke_refresh_token(issued.token)
        self.assertIsNone(self.auth.validate_refresh_token(issued.token))

    def test_revoke_is_idempotent(self) -> None:
        self.auth.revoke_refresh_token("does-not-exist")
        issued = self.auth.create_refresh_token(self.user.id)
        self.auth.revoke_refresh_token(issued.token)
        self.auth.revoke_refresh_token(issued.token)
        self.assertIsNone(self.auth.validate_refresh_token(issued.token))

    def test_expired_token_invalid_without_revocation(self) -> None:
        issued = self.auth.create_refresh_token(self.user.id)
        self.clock.advance(days=13, hours=23)
        self.assertIsNotNone(self.auth.validate_refresh_token(issued.token))
        self.clock.advance(hours=1)
        self.assertIsNone(self.auth.validate_refresh_token(issued.token))
        # Expired rows are reported as absent but not deleted.
        self.assertIsNotNone(self.store.find_refresh_token(issued.token))

    def test_unknown_and_empty_tokens_invalid(self) -> None:
        self.assertIsNone(self.auth.validate_refresh_token("0" * 128))
        self.assertIsNone(self.auth.validate_refresh_token(""))
        self.assertIsNone(self.auth.validate_refresh_token(None))

    def test_revoke_all_for_user(self) -> None:
        other = self.auth.register("b@x.com", "longpassword")
        mine = [self.auth.create_refresh_token(self.user.id) for _ in range(3)]
        theirs = self.auth.create_refresh_token(other.id)
        self.assertEqual(self.auth.revoke_all_for_user(self.user.id), 3)
        for issued in mine:
            self.assertIsNone(self.auth.validate_refresh_token(issued.token))
        self.assertIsNotNone(self.auth.validate_refresh_token(theirs.token))
        self.assertEqual(self.auth.revoke_all_for_user(self.user.id), 0)


class TestRefreshAndLogout(AuthCoreTestCase):
    """refresh issues new access tokens without rotating; logout revokes."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.auth.register("a@x.com", "longpassword")

    def test_end_to_end_session(self) -> None:
        result = self.auth.login("a@x.com", "longpassword")
        self.assertEqual(result.user.id, self.user.id)
        self.assertAlmostEqual(
            (as_utc(result.refresh_expires_at) - self.clock()).total_seconds(),
            timedelta(days=14).total_seconds(),
            delta=1,
        )

        new_access = self.auth.refresh(result.refresh_token)
        self.assertNotEqual(new_access, result.access_token)
        claims = self.issuer.verify_access_token(new_access)
        self.assertEqual(claims.subject, self.user.id)
        self.assertEqual(claims.role, UserRole.CITIZEN)

        # Not rotated: the same refresh token keeps working.
        self.auth.refresh(result.refresh_token)

        self.auth.logout(result.refresh_token)
        with self.assertRaises(InvalidRefreshTokenError):
            self.auth.refresh(result.refresh_token)

    def test_refresh_carries_current_role(self) -> None:
        result = self.auth.login("a@x.com", "longpassword")
        self.store.update_user_role(self.user.id, UserRole.NGO)
        claims = self.issuer.verify_access_token(self.auth.refresh(result.refresh_token))
        self.assertEqual(claims.role, UserRole.NGO)

    def test_refresh_rejected_after_deactivation(self) -> None:
        result = self.auth.login("a@x.com", "longpassword")
        self.store.update_user_active(self.user.id, False)
        with self.assertRaises(InvalidRefreshTokenError):
            self.auth.refresh(result.refresh_token)
        # The row itself is untouched.
        self.assertIsNotNone(self.store.find_refresh_token(result.refresh_token))

    def test_refresh_rejected_for_missing_owner(self) -> None:
        self.store.create_refresh_token("f" * 128, "no-such-user", self.clock() + timedelta(days=1))
        with self.assertRaises(InvalidRefreshTokenError):
            self.auth.refresh("f" * 128)

    def test_refresh_rejected_for_expired_or_missing_token(self) -> None:
        result = self.auth.login("a@x.com", "longpassword")
        self.clock.advance(days=15)
        with self.assertRaises(InvalidRefreshTokenError):
            self.auth.refresh(result.refresh_token)
        with self.assertRaises(InvalidRefreshTokenError):
            self.auth.refresh(None)

    def test_logout_without_token_is_noop(self) -> None:
        self.auth.logout(None)
        self.auth.logout("")
        self.auth.logout("unknown")

    def test_login_deactivated_raises(self) -> None:
        self.store.update_user_active(self.user.id, False)
        with self.assertRaises(AccountDeactivatedError):
            self.auth.login("a@x.com", "longpassword")


if __name__ == "__main__":
    unittest.main()
