"""Administrative user management: role assignment, activation and session revocation."""

import logging

from app.core.errors import NotFoundError
from app.models import User, UserRole
from app.services.auth_core import AuthCore
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class AdminService:
    """
    ADMIN-only operations. Callers are expected to have passed the
    AuthorizationGate with the ADMIN role before reaching these methods.

    revoke_sessions_on_deactivate controls whether set_active(False) also
    deletes the user's refresh tokens. Access tokens already issued stay
    valid until they expire either way.
    """

    def __init__(
        self,
        store: CredentialStore,
        auth_core: AuthCore,
        revoke_sessions_on_deactivate: bool = False,
    ) -> None:
        self.store = store
        self.auth_core = auth_core
        self.revoke_sessions_on_deactivate = revoke_sessions_on_deactivate

    def _require_user(self, user_id: str) -> User:
        user = self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    def assign_role(self, user_id: str, role: UserRole) -> User:
        self._require_user(user_id)
        user = self.store.update_user_role(user_id, UserRole(role))
        if user is None:
            raise NotFoundError()
        logger.info("Assigned role %s to user id=%s", UserRole(role).value, user_id)
        return user

    def set_active(self, user_id: str, is_active: bool) -> User:
        self._require_user(user_id)
        user = self.store.update_user_active(user_id, is_active)
        if user is None:
            raise NotFoundError()
        logger.info("Set is_active=%s for user id=%s", is_active, user_id)
        if not is_active and self.revoke_sessions_on_deactivate:
            self.auth_core.revoke_all_for_user(user_id)
        return user

    def list_users(self) -> list[User]:
        return self.store.list_users()

    def revoke_sessions(self, user_id: str) -> int:
        self._require_user(user_id)
        return self.auth_core.revoke_all_for_user(user_id)
