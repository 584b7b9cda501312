"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AssignRoleRequest,
    ErrorDetail,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    RevokeSessionsResponse,
    SetActiveRequest,
    TokenResponse,
    UserIdRequest,
    UsersListResponse,
    UserView,
)

__all__ = [
    "AssignRoleRequest",
    "ErrorDetail",
    "LoginRequest",
    "LogoutResponse",
    "RegisterRequest",
    "RevokeSessionsResponse",
    "SetActiveRequest",
    "TokenResponse",
    "UserIdRequest",
    "UsersListResponse",
    "UserView",
]
