"""Request/response schemas for auth and admin endpoints."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.models.user import UserRole

# local@domain.tld; deliverability is not checked.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CredentialsRequest(BaseModel):
    """Email + password. Any other field (e.g. role) is dropped, never applied."""

    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class RegisterRequest(CredentialsRequest):
    """Registration body; role is always CITIZEN server-side."""


class LoginRequest(CredentialsRequest):
    """Credentials for login."""


class TokenResponse(BaseModel):
    """JWT access token returned after login or refresh."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class UserView(BaseModel):
    """User as exposed to callers (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (admin only), newest first."""

    users: list[UserView]


class LogoutResponse(BaseModel):
    ok: bool = True


class UserIdRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=36)


class AssignRoleRequest(UserIdRequest):
    role: UserRole


class SetActiveRequest(UserIdRequest):
    is_active: bool


class RevokeSessionsResponse(BaseModel):
    revoked: int = Field(..., ge=0, description="Number of refresh tokens deleted")


class ErrorDetail(BaseModel):
    """Stable machine-readable error body: {"detail": {"code", "message"}}."""

    code: str
    message: str
