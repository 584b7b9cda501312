"""Persistence boundary for users and refresh tokens.

AuthCore and AdminService depend only on the CredentialStore protocol.
SqlAlchemyCredentialStore is the adapter for SQLAlchemy-supported engines
(PostgreSQL in production, SQLite locally and in tests). Every write commits
immediately; uniqueness is left to the database constraints.
"""

import logging
from datetime import datetime
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateCredentialError
from app.models import RefreshToken, User, UserRole

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def find_user_by_email(self, email: str) -> User | None: ...

    def find_user_by_id(self, user_id: str) -> User | None: ...

    def create_user(self, email: str, password_hash: str, role: UserRole) -> User: ...

    def update_user_role(self, user_id: str, role: UserRole) -> User | None: ...

    def update_user_active(self, user_id: str, is_active: bool) -> User | None: ...

    def list_users(self) -> list[User]: ...

    def count_users(self) -> int: ...

    def create_refresh_token(
        self, token: str, user_id: str, expires_at: datetime
    ) -> RefreshToken: ...

    def find_refresh_token(self, token: str) -> RefreshToken | None: ...

    def delete_refresh_token(self, token: str) -> None: ...

    def delete_refresh_tokens_for_user(self, user_id: str) -> int: ...

    def delete_expired_refresh_tokens(self, now: datetime) -> int: ...


class SqlAlchemyCredentialStore:
    """CredentialStore backed by a SQLAlchemy ORM session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Users

    def find_user_by_email(self, email: str) -> User | None:
        if not email:
            return None
        return self.session.query(User).filter(User.email == email).first()

    def find_user_by_id(self, user_id: str) -> User | None:
        if not user_id:
            return None
        return self.session.get(User, user_id)

    def create_user(self, email: str, password_hash: str, role: UserRole) -> User:
        """Insert a user; a unique-email violation becomes DuplicateCredentialError."""
        user = User(email=email, password_hash=password_hash, role=UserRole(role).value)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("User insert rejected by unique constraint: %s", type(e.orig).__name__)
            raise DuplicateCredentialError() from e
        self.session.refresh(user)
        return user

    def update_user_role(self, user_id: str, role: UserRole) -> User | None:
        user = self.find_user_by_id(user_id)
        if user is None:
            return None
        user.role = UserRole(role).value
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_user_active(self, user_id: str, is_active: bool) -> User | None:
        user = self.find_user_by_id(user_id)
        if user is None:
            return None
        user.is_active = bool(is_active)
        self.session.commit()
        self.session.refresh(user)
        return user

    def list_users(self) -> list[User]:
        """All users, newest first."""
        return (
            self.session.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def count_users(self) -> int:
        return self.session.query(User).count()

    # Refresh tokens

    def create_refresh_token(
        self, token: str, user_id: str, expires_at: datetime
    ) -> RefreshToken:
        record = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def find_refresh_token(self, token: str) -> RefreshToken | None:
        if not token:
            return None
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .first()
        )

    def delete_refresh_token(self, token: str) -> None:
        """Delete one token; deleting a missing token is a no-op."""
        if not token:
            return
        (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session=False)
        )
        self.session.commit()

    def delete_refresh_tokens_for_user(self, user_id: str) -> int:
        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def delete_expired_refresh_tokens(self, now: datetime) -> int:
        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.expires_at <= now)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted
