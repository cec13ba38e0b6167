"""
Database initialization script

Creates indexes and seeds the bootstrap admin account:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables before settings are read
load_dotenv()

import logging

from app.core.config import settings, validate_settings
from app.core.security import PasswordHasher
from app.db.indexes import create_indexes
from app.db.mongo import close_mongo_connection, connect_to_mongo, get_database, get_users_collection
from app.db.repositories import UserRepository
from app.services.admin_service import ensure_admin_user

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main():
    logger.info("=" * 60)
    logger.info("  MRCS Database Setup")
    logger.info("=" * 60 + "\n")

    validate_settings()
    await connect_to_mongo()

    try:
        logger.info(f"🔌 Connected to MongoDB: {settings.MONGODB_DB_NAME}\n")

        await create_indexes()

        admin = await ensure_admin_user(
            UserRepository(get_users_collection()),
            PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        )
        if admin is not None:
            logger.info(f"👤 Admin account ready: {admin.email}")

        # ==================== VERIFICATION ====================
        logger.info("\n🔍 Verifying indexes...")
        db = get_database()
        for collection_name in ["users", "sessions"]:
            indexes = await db[collection_name].index_information()
            logger.info(f"\n  {collection_name}:")
            for idx_name in indexes.keys():
                if idx_name != "_id_":
                    logger.info(f"    ✅ {idx_name}")

        logger.info("\n📊 Current documents:")
        logger.info(f"  Users: {await db.users.count_documents({})}")
        logger.info(f"  Sessions: {await db.sessions.count_documents({})}")

        logger.info("\n✅ Database initialization complete!")

    finally:
        await close_mongo_connection()

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
