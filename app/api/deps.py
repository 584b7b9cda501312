"""FastAPI dependencies: compose services per request and guard routes by role.

Composition is explicit: each request gets a CredentialStore bound to its own
DB session, and AuthCore/AdminService receive their collaborators as
constructor arguments.
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import AccessTokenClaims, PasswordHasher, TokenIssuer
from app.models import UserRole
from app.services.admin import AdminService
from app.services.auth_core import AuthCore
from app.services.authorization import AuthorizationGate
from app.services.credential_store import CredentialStore, SqlAlchemyCredentialStore

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def _hasher_for_rounds(rounds: int) -> PasswordHasher:
    # Cached so the timing-equalization dummy hash is computed once per process.
    return PasswordHasher(rounds=rounds)


def get_password_hasher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PasswordHasher:
    return _hasher_for_rounds(settings.BCRYPT_ROUNDS)


def get_token_issuer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


def get_credential_store(
    db: Annotated[Session, Depends(get_db)],
) -> CredentialStore:
    return SqlAlchemyCredentialStore(db)


def get_auth_core(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthCore:
    return AuthCore(
        store=store,
        issuer=issuer,
        hasher=hasher,
        refresh_ttl_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
    )


def get_admin_service(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    auth_core: Annotated[AuthCore, Depends(get_auth_core)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AdminService:
    return AdminService(
        store=store,
        auth_core=auth_core,
        revoke_sessions_on_deactivate=settings.REVOKE_SESSIONS_ON_DEACTIVATE,
    )


def get_authorization_gate(
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthorizationGate:
    return AuthorizationGate(issuer)


def require_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
) -> AccessTokenClaims:
    """Dependency: require a valid Bearer access token. Raises 401 if missing or invalid."""
    token = credentials.credentials if credentials is not None else None
    return gate.authenticate(token)


def require_role(*roles: UserRole) -> Callable[..., AccessTokenClaims]:
    """
    Build a dependency that requires a valid token whose role is in `roles`.

    Usage:
        router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])
    """
    allowed = frozenset(UserRole(r) for r in roles)

    def _require_role(
        claims: Annotated[AccessTokenClaims, Depends(require_auth)],
        gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
    ) -> AccessTokenClaims:
        return gate.authorize(claims, allowed)

    return _require_role


require_admin = require_role(UserRole.ADMIN)
