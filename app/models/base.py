"""SQLAlchemy declarative Base shared by the users and refresh_tokens tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
