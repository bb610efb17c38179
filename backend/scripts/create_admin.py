"""Create (or verify) the initial admin account from ADMIN_* settings.

The API runs the same bootstrap on startup; this script is for
environments where it should happen before the first deploy:

    ADMIN_EMAIL=... ADMIN_NICK=... ADMIN_PASSWORD=... python -m scripts.create_admin
"""

import logging
import sys

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    from app.config import Settings
    from app.database import create_db_engine, create_session_factory
    from app.services.admin_init_service import ensure_admin_user
    from app.services.auth.passwords import PasswordHasher

    logger = logging.getLogger(__name__)

    settings = Settings()
    engine = create_db_engine(settings.database_url)
    db = create_session_factory(engine)()
    try:
        admin = ensure_admin_user(db, settings, PasswordHasher(rounds=settings.bcrypt_rounds))
        if admin is None:
            sys.exit(1)
        logger.info(f"Admin account ready: {admin.email} (id: {admin.id})")
    finally:
        db.close()
        engine.dispose()
