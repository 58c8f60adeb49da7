"""
Seed script to write the admin credential into admin_settings.

Run once with env set:
  ADMIN_USERNAME=admin
  ADMIN_PASSWORD=YourSecurePassword

Creates the tables if they are missing, then stores the username and a
bcrypt hash of the password in the singleton admin_settings row.
"""
import asyncio
import logging

from classpoints.auth.security import hash_password
from classpoints.core import models  # noqa: F401  (register tables on Base.metadata)
from classpoints.core.config import settings
from classpoints.db.session import AsyncSessionLocal, Base, engine
from classpoints.store.record_store import RecordStore

logger = logging.getLogger(__name__)


async def seed_admin(store: RecordStore) -> None:
    existing = await store.get_admin_settings()
    await store.save_admin_settings(settings.admin_username, hash_password(settings.admin_password))
    await store.commit()
    if existing is None:
        logger.info("Created admin credential for %s", settings.admin_username)
    else:
        logger.info("Updated admin credential for %s", settings.admin_username)


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(RecordStore(db))
        except Exception:
            await db.rollback()
            logger.exception("Admin seed failed")
            raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(main())
