from __future__ import annotations

import logging

from fieldreports.core.config import settings
from fieldreports.core.logging import setup_logging
from fieldreports.db.session import Database
from fieldreports.services.auth_service import ensure_admin

logger = logging.getLogger("seed_admin")


def main():
    setup_logging(settings.log_level)

    database = Database(settings.database_url)
    database.create_all()
    db = database.session()
    try:
        user, created = ensure_admin(
            db,
            username=settings.admin_username,
            password=settings.admin_password,
            name=settings.admin_name,
        )
        if created:
            logger.info("Created admin: %s", user.username)
        else:
            logger.info("Admin already exists: %s", user.username)
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    main()
