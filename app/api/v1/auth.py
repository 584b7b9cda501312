"""Register, login, refresh and logout endpoints.

The access token is returned in the body and sent back by clients as
`Authorization: Bearer <access_token>`. The refresh token only travels in an
httpOnly cookie set at login.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.deps import get_auth_core
from app.core.config import Settings, get_settings
from app.core.security import utcnow
from app.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    TokenResponse,
    UserView,
)
from app.services.auth_core import AuthCore

router = APIRouter()


def _set_refresh_cookie(
    response: Response, settings: Settings, token: str, expires_at: datetime
) -> None:
    max_age = max(int((expires_at - utcnow()).total_seconds()), 0)
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        max_age=max_age,
        expires=expires_at,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )


@router.post("/register", response_model=UserView, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    auth: Annotated[AuthCore, Depends(get_auth_core)],
) -> UserView:
    """Create a CITIZEN account. A role in the request body is ignored."""
    user = auth.register(body.email, body.password)
    return UserView.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth: Annotated[AuthCore, Depends(get_auth_core)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token and sets
    the refresh token cookie.
    """
    result = auth.login(body.email, body.password)
    _set_refresh_cookie(response, settings, result.refresh_token, result.refresh_expires_at)
    return TokenResponse(access_token=result.access_token)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    auth: Annotated[AuthCore, Depends(get_auth_core)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Exchange the refresh cookie for a new access token. The cookie is left unchanged."""
    refresh_token = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    return TokenResponse(access_token=auth.refresh(refresh_token))


@router.post("/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    response: Response,
    auth: Annotated[AuthCore, Depends(get_auth_core)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LogoutResponse:
    """Revoke the refresh cookie's token (if any) and clear the cookie. Always succeeds."""
    auth.logout(request.cookies.get(settings.REFRESH_COOKIE_NAME))
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )
    return LogoutResponse()
