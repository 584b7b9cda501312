"""Maintenance: delete refresh-token rows whose expiry has passed."""

import logging
from datetime import datetime

from app.core.security import utcnow
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def purge_expired_refresh_tokens(
    store: CredentialStore, now: datetime | None = None
) -> int:
    """
    Delete expired refresh tokens and return how many were removed.

    Expired rows are already rejected by validation, so this only reclaims
    space. Idempotent: safe to run repeatedly.
    """
    cutoff = now or utcnow()
    deleted_count = store.delete_expired_refresh_tokens(cutoff)
    if deleted_count > 0:
        logger.info(
            "Token cleanup run: cutoff=%s, refresh_tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
