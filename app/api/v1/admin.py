"""Admin endpoints (ADMIN role required): role assignment, activation, sessions, listing."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_admin_service, require_admin
from app.models import UserRole
from app.schemas.auth import (
    AssignRoleRequest,
    RevokeSessionsResponse,
    SetActiveRequest,
    UserIdRequest,
    UsersListResponse,
    UserView,
)
from app.services.admin import AdminService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/assign-role", response_model=UserView)
def assign_role(
    body: AssignRoleRequest,
    admin: Annotated[AdminService, Depends(get_admin_service)],
) -> UserView:
    """Set the target user's role. 404 if the user does not exist."""
    return UserView.model_validate(admin.assign_role(body.user_id, body.role))


@router.post("/assign-ngo", response_model=UserView)
def assign_ngo(
    body: UserIdRequest,
    admin: Annotated[AdminService, Depends(get_admin_service)],
) -> UserView:
    """Promote the target user to NGO."""
    return UserView.model_validate(admin.assign_role(body.user_id, UserRole.NGO))


@router.post("/activate", response_model=UserView)
def activate(
    body: SetActiveRequest,
    admin: Annotated[AdminService, Depends(get_admin_service)],
) -> UserView:
    """
    Activate or deactivate a user. Deactivation blocks login and refresh
    immediately; access tokens already issued remain valid until they expire.
    """
    return UserView.model_validate(admin.set_active(body.user_id, body.is_active))


@router.post("/revoke-sessions", response_model=RevokeSessionsResponse)
def revoke_sessions(
    body: UserIdRequest,
    admin: Annotated[AdminService, Depends(get_admin_service)],
) -> RevokeSessionsResponse:
    """Delete every refresh token of the target user."""
    return RevokeSessionsResponse(revoked=admin.revoke_sessions(body.user_id))


@router.get("/users", response_model=UsersListResponse)
def list_users(
    admin: Annotated[AdminService, Depends(get_admin_service)],
) -> UsersListResponse:
    """List all users, newest first (no password hashes)."""
    return UsersListResponse(
        users=[UserView.model_validate(u) for u in admin.list_users()]
    )
