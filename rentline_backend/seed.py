"""Bootstrap a fresh RentLine database.

Creates the tables (optionally) and the first admin profile from the
INIT_ADMIN_* settings.

    CONFIG=resources/config/local.yaml rentline-seed --create-tables
"""

import argparse
import asyncio
import sys

from .config import settings
from .core.exceptions import RentLineException
from .core.logging import get_logger, setup_logging, shutdown_logging
from .database import AsyncSessionLocal, engine, init_db
from .modules.auth.services import create_initial_admin

logger = get_logger(__name__)


async def seed(create_tables: bool = False) -> int:
    if create_tables:
        await init_db()
        logger.info("Database tables created")

    if not (settings.init_admin_email and settings.init_admin_password):
        logger.warning("INIT_ADMIN_EMAIL/INIT_ADMIN_PASSWORD not set, skipping admin")
        return 0

    async with AsyncSessionLocal() as db:
        try:
            profile = await create_initial_admin(
                db,
                admin_email=settings.init_admin_email,
                admin_password=settings.init_admin_password,
                admin_full_name=settings.init_admin_full_name or "Administrator",
            )
        except RentLineException as e:
            logger.error(f"Admin seed skipped: {e.message}")
            return 1

    logger.info(f"Admin profile created: {profile.email}")
    return 0


async def _run(create_tables: bool) -> int:
    try:
        return await seed(create_tables)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the RentLine database")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create all tables before seeding (development only)",
    )
    args = parser.parse_args()

    setup_logging()
    try:
        code = asyncio.run(_run(args.create_tables))
    finally:
        shutdown_logging()
    sys.exit(code)


if __name__ == "__main__":
    main()
