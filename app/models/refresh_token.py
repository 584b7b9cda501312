"""ORM model for store-backed refresh tokens."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RefreshToken(Base):
    """
    Session-continuation record. The token value is both the lookup key and
    the bearer secret; a row is valid while it exists and expires_at is in
    the future. Deleting the row revokes the session.
    """

    __tablename__ = "refresh_tokens"

    token = Column(String(128), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="refresh_tokens")
