"""Registration, credential validation and the access/refresh token lifecycle."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from app.core.errors import (
    AccountDeactivatedError,
    DuplicateCredentialError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from app.core.security import PasswordHasher, TokenIssuer, utcnow
from app.models import RefreshToken, User, UserRole
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TOKEN_DAYS = 14


@dataclass(frozen=True)
class IssuedRefreshToken:
    """Refresh token value and absolute expiry, handed to the transport for cookie storage."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes (SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AuthCore:
    """
    Orchestrates register, login, refresh and logout.

    Access tokens are stateless JWTs; refresh tokens are opaque store-backed
    secrets that are re-validated on every refresh and never rotated. The
    store, issuer and hasher are injected so one instance can be composed per
    request with that request's database session.
    """

    def __init__(
        self,
        store: CredentialStore,
        issuer: TokenIssuer,
        hasher: PasswordHasher,
        refresh_ttl_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.issuer = issuer
        self.hasher = hasher
        self.refresh_ttl_days = refresh_ttl_days
        self._now = now

    def register(self, email: str, password: str) -> User:
        """Create a CITIZEN account. Raises DuplicateCredentialError if the email is taken."""
        if self.store.find_user_by_email(email) is not None:
            raise DuplicateCredentialError()
        password_hash = self.hasher.hash(password)
        # A concurrent registration that passed the lookup fails on the unique index instead.
        user = self.store.create_user(email, password_hash, UserRole.CITIZEN)
        logger.info("Registered user id=%s", user.id)
        return user

    def validate_credentials(self, email: str, password: str) -> User | None:
        """
        Return the user if email and password match, else None.

        Unknown email and wrong password both return None. A deactivated
        account raises AccountDeactivatedError instead.
        """
        user = self.store.find_user_by_email(email)
        if user is None:
            self.hasher.verify_dummy(password)
            return None
        if not user.is_active:
            raise AccountDeactivatedError()
        if not self.hasher.verify(password, user.password_hash):
            return None
        return user

    def issue_access_token(self, user: User) -> str:
        return self.issuer.issue_access_token(user.id, user.role)

    def create_refresh_token(
        self, user_id: str, ttl_days: int | None = None
    ) -> IssuedRefreshToken:
        days = self.refresh_ttl_days if ttl_days is None else ttl_days
        token = self.issuer.generate_refresh_token()
        expires_at = self._now() + timedelta(days=days)
        self.store.create_refresh_token(token, user_id, expires_at)
        return IssuedRefreshToken(token=token, expires_at=expires_at)

    def validate_refresh_token(self, token: str | None) -> RefreshToken | None:
        """Return the stored record if present and unexpired; expired is reported as absent."""
        if not token:
            return None
        record = self.store.find_refresh_token(token)
        if record is None:
            return None
        if as_utc(record.expires_at) <= self._now():
            return None
        return record

    def revoke_refresh_token(self, token: str) -> None:
        self.store.delete_refresh_token(token)

    def revoke_all_for_user(self, user_id: str) -> int:
        deleted = self.store.delete_refresh_tokens_for_user(user_id)
        logger.info("Revoked %s refresh token(s) for user id=%s", deleted, user_id)
        return deleted

    def login(self, email: str, password: str) -> LoginResult:
        user = self.validate_credentials(email, password)
        if user is None:
            logger.info("Login failed: invalid credentials")
            raise InvalidCredentialsError()
        access_token = self.issue_access_token(user)
        issued = self.create_refresh_token(user.id)
        logger.info("Login succeeded for user id=%s", user.id)
        return LoginResult(
            user=user,
            access_token=access_token,
            refresh_token=issued.token,
            refresh_expires_at=issued.expires_at,
        )

    def refresh(self, presented_token: str | None) -> str:
        """Exchange a valid refresh token for a new access token. The refresh token is not rotated."""
        record = self.validate_refresh_token(presented_token)
        if record is None:
            raise InvalidRefreshTokenError()
        user = self.store.find_user_by_id(record.user_id)
        if user is None:
            logger.warning("Refresh token owner missing: user id=%s", record.user_id)
            raise InvalidRefreshTokenError()
        if not user.is_active:
            logger.info("Refresh rejected for deactivated user id=%s", user.id)
            raise InvalidRefreshTokenError()
        return self.issue_access_token(user)

    def logout(self, presented_token: str | None) -> None:
        """Revoke the presented refresh token if any. Never fails."""
        if presented_token:
            self.revoke_refresh_token(presented_token)
