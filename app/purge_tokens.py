"""
CLI entrypoint for the expired refresh-token cleanup job. Run from cron, e.g.:

  python -m app.purge_tokens

Or hourly: 0 * * * * cd /path/to/civic-auth && .venv/bin/python -m app.purge_tokens
"""

import logging
import sys

from app.core.database import SessionLocal
from app.services.credential_store import SqlAlchemyCredentialStore
from app.services.token_cleanup import purge_expired_refresh_tokens

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh tokens whose expires_at has passed."""
    db = SessionLocal()
    try:
        deleted = purge_expired_refresh_tokens(SqlAlchemyCredentialStore(db))
        logger.info("Token cleanup completed: refresh_tokens_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Token cleanup job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
