"""ORM model for application users (auth and RBAC)."""

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, func, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class UserRole(str, enum.Enum):
    """Coarse permission tier carried in access-token claims."""

    CITIZEN = "CITIZEN"
    NGO = "NGO"
    ADMIN = "ADMIN"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: one of UserRole; always CITIZEN at registration.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('CITIZEN', 'NGO', 'ADMIN')", name="ck_users_role"),
    )

    id = Column(String(36), primary_key=True, default=_new_user_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=UserRole.CITIZEN.value)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
