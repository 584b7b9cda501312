"""Per-request access decision: valid access token, then role membership."""

import logging
from collections.abc import Iterable

from app.core.errors import ForbiddenError, UnauthenticatedError
from app.core.security import AccessTokenClaims, InvalidTokenError, TokenIssuer
from app.models import UserRole

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Decides one request: Unauthenticated -> TokenVerified | Rejected -> Authorized | Forbidden.

    The role used for the decision is the one in the verified token. Nothing
    from the request body or query string is consulted.
    """

    def __init__(self, issuer: TokenIssuer) -> None:
        self.issuer = issuer

    def authenticate(self, token: str | None) -> AccessTokenClaims:
        """Verify the bearer token. Raises UnauthenticatedError if missing, forged or expired."""
        if token is None or not token.strip():
            raise UnauthenticatedError()
        try:
            return self.issuer.verify_access_token(token.strip())
        except InvalidTokenError as e:
            logger.debug("Access token rejected: %s", e)
            raise UnauthenticatedError("Invalid or expired token") from e

    def authorize(
        self,
        claims: AccessTokenClaims,
        allowed_roles: Iterable[UserRole] | None = None,
    ) -> AccessTokenClaims:
        """No role set means any authenticated caller; otherwise the claim role must be a member."""
        if allowed_roles is None:
            return claims
        allowed = frozenset(UserRole(r) for r in allowed_roles)
        if claims.role not in allowed:
            logger.info(
                "Forbidden: user id=%s role=%s not in %s",
                claims.subject,
                claims.role.value,
                sorted(r.value for r in allowed),
            )
            raise ForbiddenError()
        return claims

    def check(
        self,
        token: str | None,
        allowed_roles: Iterable[UserRole] | None = None,
    ) -> AccessTokenClaims:
        return self.authorize(self.authenticate(token), allowed_roles)
