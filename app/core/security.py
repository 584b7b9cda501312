"""Password hashing, JWT access tokens and opaque refresh-token generation."""

import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.models.user import UserRole

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for email and password validation at the API boundary.
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# 64 random bytes, hex-encoded: 512 bits of entropy, 128 characters.
REFRESH_TOKEN_BYTES = 64

_REQUIRED_CLAIMS = ["sub", "role", "exp", "iat", "jti"]


def utcnow() -> datetime:
    return datetime.now(UTC)


class PasswordHasher:
    """One-way salted bcrypt hash with constant-time verification."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
        pw_bytes = plain_password.encode("utf-8")[:72]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        pw_bytes = plain_password.encode("utf-8")[:72]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plain_password: str) -> None:
        """
        Spend one bcrypt verification against a throwaway hash.

        Called when the email is unknown so the response time matches the
        wrong-password case and does not reveal which emails are registered.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_hex(16))
        self.verify(plain_password, self._dummy_hash)


@dataclass(frozen=True)
class AccessTokenClaims:
    """Verified contents of an access token. Never persisted."""

    subject: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime
    token_id: str


class InvalidTokenError(Exception):
    """Access token failed signature, expiry or claim validation."""


class TokenIssuer:
    """Mints and verifies signed access tokens; generates opaque refresh tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self._now = now

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenIssuer":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    def issue_access_token(self, subject: str, role: UserRole | str) -> str:
        """Create a JWT access token with sub, role, iat, exp and a unique jti."""
        now = self._now()
        payload: dict[str, Any] = {
            "sub": str(subject),
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + self.access_ttl,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """
        Decode and validate a JWT; return its claims.
        Raises InvalidTokenError on a bad signature, expiry, or missing/unknown claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise InvalidTokenError("Invalid subject claim")
        try:
            role = UserRole(payload.get("role"))
        except ValueError as e:
            raise InvalidTokenError("Unknown role claim") from e
        return AccessTokenClaims(
            subject=sub,
            role=role,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            token_id=str(payload["jti"]),
        )

    @staticmethod
    def generate_refresh_token() -> str:
        """Return a new opaque refresh token from the OS CSPRNG."""
        return secrets.token_hex(REFRESH_TOKEN_BYTES)
