"""
Create a user out of band (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin@example.org your-secure-password ADMIN
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import DuplicateCredentialError
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, PasswordHasher
from app.models.user import UserRole
from app.schemas.auth import EMAIL_PATTERN
from app.services.credential_store import SqlAlchemyCredentialStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Create a user with an explicit role (registration always creates CITIZEN)."
    )
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.ADMIN.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    email = args.email.strip()
    if not EMAIL_PATTERN.match(email) or len(email) > 255:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    db = SessionLocal()
    try:
        store = SqlAlchemyCredentialStore(db)
        if store.find_user_by_email(email) is not None:
            print(f"User '{email}' already exists, skipping.", file=sys.stderr)
            return 1
        try:
            user = store.create_user(email, hasher.hash(args.password), UserRole(args.role))
        except DuplicateCredentialError:
            print(f"User '{email}' already exists, skipping.", file=sys.stderr)
            return 1
        logger.info("Created user id=%s email=%s role=%s", user.id, user.email, user.role)
        if user.role == UserRole.ADMIN.value:
            logger.warning("Change this admin password immediately if it was shared or scripted.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
