"""
Ensure the bootstrap admin account exists. Run from project root:
  python -m cloudcore.scripts.seed_admin

The account uses the bootstrap credential (see cloudcore.core.security), so it can
log in with the well-known demo password. Change or deactivate it after first login.
"""

import logging
import sys

from sqlalchemy.orm import Session

from cloudcore.core.config import get_settings
from cloudcore.core.database import build_engine_from_settings, build_session_factory
from cloudcore.core.security import BOOTSTRAP_PASSWORD_HASH
from cloudcore.models import Base, User
from cloudcore.services.credential_store import CredentialStore, DuplicateEmailError

logger = logging.getLogger(__name__)


def seed_bootstrap_admin(db: Session, email: str) -> User:
    """Return the bootstrap admin, creating it (role admin, bootstrap hash) if absent."""
    store = CredentialStore(db)
    existing = store.find_active_user_by_email(email)
    if existing is not None:
        logger.info("Bootstrap admin already present: %s", email)
        return existing
    try:
        user = store.insert_user(
            email=email,
            password_hash=BOOTSTRAP_PASSWORD_HASH,
            role="admin",
            first_name="Admin",
            last_name="User",
        )
    except DuplicateEmailError:
        logger.error("Email %s belongs to an inactive account; reactivate it instead", email)
        raise
    logger.info("Bootstrap admin created: %s", email)
    return user


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    settings = get_settings()
    engine = build_engine_from_settings(settings)
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()
    try:
        seed_bootstrap_admin(db, settings.BOOTSTRAP_ADMIN_EMAIL)
        return 0
    except Exception as e:
        logger.exception("Seeding bootstrap admin failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
